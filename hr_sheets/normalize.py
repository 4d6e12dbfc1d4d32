"""
normalize.py — cell value coercion for hr-sheets

Every silent default in the ingestion pipeline lives here: blank or
unparsable numbers become 0, unparsable dates become None, and booleans are
keyword-matched. Mappers never coerce values themselves.

Spreadsheet serial dates use the 1899-12-30 epoch, so serial 25569 is
1970-01-01 and serial 45000 is 2023-03-15.
"""

from __future__ import annotations

import calendar
import math
import re
import warnings
from datetime import date, datetime, timedelta
from typing import Any, NamedTuple

import pandas as pd
from dateutil.relativedelta import relativedelta

EXCEL_EPOCH = datetime(1899, 12, 30)
MAX_EXCEL_SERIAL = 2958465  # 9999-12-31

MONTH_ORDER = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")
MONTH_NAMES = {name.upper(): MONTH_ORDER[i - 1] for i, name in enumerate(calendar.month_name) if name}
MONTH_NAMES.update({abbr: abbr for abbr in MONTH_ORDER})
MONTH_NAMES["SEPT"] = "SEP"

TRUTHY_KEYWORDS = ("yes", "true", "y", "1", "paid", "company", "sponsored", "bond")

NUMERIC_NOISE_RE = re.compile(r"[^0-9.\-]")
NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
MDY_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})$")
FOUR_DIGIT_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")

DATE_FORMAT_PATTERNS = [
    ("%Y-%m-%d", re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")),
    ("%Y/%m/%d", re.compile(r"^\d{4}/\d{1,2}/\d{1,2}$")),
    ("%Y-%m-%dT%H:%M:%S", re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")),
    ("%Y-%m-%d %H:%M:%S", re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")),
    ("%B %d, %Y", re.compile(r"^[A-Za-z]+\s+\d{1,2},\s*\d{4}$")),
    ("%b %d, %Y", re.compile(r"^[A-Za-z]{3}\s+\d{1,2},\s*\d{4}$")),
    ("%B %d %Y", re.compile(r"^[A-Za-z]+\s+\d{1,2}\s+\d{4}$")),
    ("%b %d %Y", re.compile(r"^[A-Za-z]{3}\s+\d{1,2}\s+\d{4}$")),
    ("%d %B %Y", re.compile(r"^\d{1,2}\s+[A-Za-z]+\s+\d{4}$")),
    ("%d %b %Y", re.compile(r"^\d{1,2}\s+[A-Za-z]{3}\s+\d{4}$")),
    ("%d-%b-%Y", re.compile(r"^\d{1,2}-[A-Za-z]{3}-\d{4}$")),
]


class MonthKey(NamedTuple):
    key: str
    mon: str


# ══════════════════════════════════════════════════════════════════════════════
# SCALARS
# ══════════════════════════════════════════════════════════════════════════════

def normalize_scalar(value: Any) -> Any:
    """Collapse pandas/NumPy missing markers and timestamps to plain Python values."""
    if value is None:
        return None
    if isinstance(value, (str, bool)):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            value = value.tz_convert(None)
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, (datetime, date)):
        # NumPy scalars
        return value.item()
    return value


def clean_text(value: Any) -> str:
    normalized = normalize_scalar(value)
    if normalized is None:
        return ""
    if isinstance(normalized, bool):
        return "true" if normalized else "false"
    if isinstance(normalized, float):
        if math.isinf(normalized):
            return ""
        if normalized.is_integer():
            return str(int(normalized))
        return str(normalized)
    if isinstance(normalized, datetime):
        if normalized.time() == datetime.min.time():
            return normalized.date().isoformat()
        return normalized.isoformat(sep=" ")
    if isinstance(normalized, date):
        return normalized.isoformat()
    return str(normalized).replace("\x00", "").strip()


def is_blank(value: Any) -> bool:
    return clean_text(value) == ""


def normalize_header(value: Any) -> str:
    return NON_ALNUM_RE.sub("", clean_text(value).lower())


def to_number(value: Any) -> float:
    """
    Coerce a cell to a float.

    Real numbers pass through. Anything else is stringified and stripped of
    every character except digits, '.' and '-'. Empty or unparsable input
    returns 0.0.
    """
    normalized = normalize_scalar(value)
    if normalized is None or isinstance(normalized, bool):
        return 0.0
    if isinstance(normalized, (int, float)):
        number = float(normalized)
        return number if math.isfinite(number) else 0.0
    text = NUMERIC_NOISE_RE.sub("", clean_text(normalized))
    if not text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_int(value: Any) -> int:
    return int(to_number(value))


def to_boolean(value: Any) -> bool:
    normalized = normalize_scalar(value)
    if isinstance(normalized, bool):
        return normalized
    text = clean_text(normalized).lower()
    if not text:
        return False
    return any(keyword in text for keyword in TRUTHY_KEYWORDS)


# ══════════════════════════════════════════════════════════════════════════════
# DATES
# ══════════════════════════════════════════════════════════════════════════════

def serial_to_date(serial: float) -> date | None:
    if not math.isfinite(serial) or serial < 1 or serial > MAX_EXCEL_SERIAL:
        return None
    return (EXCEL_EPOCH + timedelta(days=float(serial))).date()


def _parse_direct(text: str) -> date | None:
    for fmt, pattern in DATE_FORMAT_PATTERNS:
        if not pattern.fullmatch(text):
            continue
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    if not FOUR_DIGIT_YEAR_RE.search(text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed) or not isinstance(parsed, pd.Timestamp):
        return None
    if parsed.year <= 1900:
        return None
    return parsed.date()


def _parse_month_day_year(text: str) -> date | None:
    match = MDY_RE.fullmatch(text)
    if not match:
        return None
    month, day, year = match.groups()
    if len(year) == 2:
        year = f"20{year}"
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def to_date(value: Any) -> date | None:
    """
    Coerce a cell to a calendar date.

    Native dates and timestamps keep their date part, numbers are read as
    spreadsheet serials, and strings try the fixed format table, a guarded
    pandas parse, then the M/D/Y family (2-digit years read as 20YY).
    """
    normalized = normalize_scalar(value)
    if normalized is None or isinstance(normalized, bool):
        return None
    if isinstance(normalized, datetime):
        return normalized.date()
    if isinstance(normalized, date):
        return normalized
    if isinstance(normalized, (int, float)):
        return serial_to_date(float(normalized))

    text = clean_text(normalized)
    if not text:
        return None
    return _parse_direct(text) or _parse_month_day_year(text)


def add_months(start: date, months: int) -> date:
    return start + relativedelta(months=months)


def full_years_between(start: date | None, end: date) -> int:
    if start is None:
        return 0
    return max(0, relativedelta(end, start).years)


def month_label(value: date) -> str:
    return f"{value.year}-{value.month:02d}"


# ══════════════════════════════════════════════════════════════════════════════
# MONTH KEYS
# ══════════════════════════════════════════════════════════════════════════════

def _month_from_name(text: str) -> str | None:
    return MONTH_NAMES.get(text.rstrip(".").upper())


def _month_from_number(number: int) -> str | None:
    if 1 <= number <= 12:
        return MONTH_ORDER[number - 1]
    return None


def parse_month_key(value: Any) -> MonthKey | None:
    """
    Parse OT month/period cells into a grouping key and 3-letter month.

    Accepts "01-JAN", "1 JAN", "JAN", "January", "2025-01", "2025/01",
    "01/2025", "JAN 15", bare month numbers 1-12 and full dates.
    """
    normalized = normalize_scalar(value)
    if normalized is None or isinstance(normalized, bool):
        return None
    if isinstance(normalized, (datetime, date)):
        mon = MONTH_ORDER[normalized.month - 1]
        return MonthKey(f"{normalized.month:02d}-{mon}", mon)
    if isinstance(normalized, (int, float)):
        if float(normalized).is_integer():
            mon = _month_from_number(int(normalized))
            if mon:
                return MonthKey(f"--{mon}", mon)
        parsed = to_date(normalized)
        return parse_month_key(parsed) if parsed else None

    text = clean_text(normalized).upper()
    if not text:
        return None

    match = re.fullmatch(r"(\d{1,2})[-\s]?([A-Z]{3,9})\.?", text)
    if match:
        mon = _month_from_name(match.group(2))
        if mon:
            return MonthKey(f"{match.group(1).zfill(2)}-{mon}", mon)

    match = re.fullmatch(r"([A-Z]{3,9})\.?", text)
    if match:
        mon = _month_from_name(match.group(1))
        if mon:
            return MonthKey(f"--{mon}", mon)

    match = re.fullmatch(r"(\d{4})[-/](\d{1,2})", text)
    if match:
        mon = _month_from_number(int(match.group(2)))
        if mon:
            return MonthKey(f"{match.group(2).zfill(2)}-{mon}", mon)

    match = re.fullmatch(r"(\d{1,2})/(\d{4})", text)
    if match:
        mon = _month_from_number(int(match.group(1)))
        if mon:
            return MonthKey(f"{match.group(1).zfill(2)}-{mon}", mon)

    match = re.fullmatch(r"([A-Z]{3,9})\.?[\s\-]+\d{1,2}", text)
    if match:
        mon = _month_from_name(match.group(1))
        if mon:
            return MonthKey(f"--{mon}", mon)

    if text.isdigit():
        mon = _month_from_number(int(text))
        return MonthKey(f"--{mon}", mon) if mon else None

    parsed = to_date(text)
    return parse_month_key(parsed) if parsed else None


def month_sort_index(mon: str) -> int:
    try:
        return MONTH_ORDER.index(mon)
    except ValueError:
        return len(MONTH_ORDER)
