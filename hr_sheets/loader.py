"""
loader.py — read an uploaded file into named sheets of raw rows

Supports: .csv .xlsx .xlsm .xls .ods

Public API:
    workbook = load_workbook("path/to/file.xlsx")
    workbook = load_workbook(raw_bytes, filename="upload.csv")

Every sheet of a workbook is visited and returned, in workbook order, as a
list of row arrays with pandas/NumPy scalars already collapsed to plain
Python values. Header detection and record building happen downstream.

CSV files are split on commas with naive quote stripping; quoted fields that
contain commas are not supported.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import chardet
import pandas as pd

from hr_sheets.errors import IngestError
from hr_sheets.normalize import normalize_scalar

MAX_FILE_BYTES = 50 * 1024 * 1024

# ── Format groups ──────────────────────────────────────────────────────────────
TEXT_FORMATS = {".csv"}
EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
    ".ods": "odf",
}
ALL_FORMATS = TEXT_FORMATS | set(EXCEL_ENGINES)

# Optional engines and the distribution that provides each
OPTIONAL_ENGINES = {
    ".xls": ("xlrd", "xlrd"),
    ".ods": ("odf", "odfpy"),
}


@dataclass(frozen=True)
class RawSheet:
    name: str
    rows: list[list[Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass(frozen=True)
class LoadedWorkbook:
    source_name: str
    detected_format: str
    sheets: tuple[RawSheet, ...]
    detected_encoding: str | None = None
    legacy_lines: int = 0
    warnings: tuple[str, ...] = ()

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]

    def sheet(self, name: str) -> RawSheet | None:
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        return None


# ══════════════════════════════════════════════════════════════════════════════
# ENCODING DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def detect_encoding(raw: bytes) -> tuple[str | None, float]:
    """chardet's guess for the whole file and its confidence."""
    result = chardet.detect(raw)
    return result.get("encoding"), round(result.get("confidence") or 0.0, 2)


def _decode_legacy_line(raw_line: bytes, encoding: str | None) -> str:
    if encoding:
        try:
            return raw_line.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            pass
    return raw_line.decode("latin-1")


def decode_lines(raw: bytes, encoding: str | None) -> tuple[str, int]:
    """
    Decode line by line so one stray byte does not spoil the file.

    Each line is tried as UTF-8, then as ``encoding``, then as latin-1, which
    accepts any byte. Returns the text and the number of lines that were not
    UTF-8. NUL bytes are dropped.
    """
    lines: list[str] = []
    legacy_lines = 0
    for raw_line in raw.split(b"\n"):
        try:
            line = raw_line.decode("utf-8")
        except UnicodeDecodeError:
            legacy_lines += 1
            line = _decode_legacy_line(raw_line, encoding)
        lines.append(line.replace("\x00", ""))
    return "\n".join(lines), legacy_lines


# ══════════════════════════════════════════════════════════════════════════════
# CSV
# ══════════════════════════════════════════════════════════════════════════════

def _split_csv_line(line: str) -> list[str]:
    return [cell.strip().replace('"', "") for cell in line.split(",")]


def parse_csv_text(text: str) -> list[list[str]]:
    """Comma-split every non-empty line; the BOM on the first cell is dropped."""
    lines = [line.rstrip("\r") for line in text.split("\n")]
    rows = [_split_csv_line(line) for line in lines if line]
    if rows and rows[0]:
        rows[0][0] = rows[0][0].lstrip("\ufeff").strip()
    return rows


def _load_csv(raw: bytes, name: str) -> LoadedWorkbook:
    encoding, confidence = detect_encoding(raw)
    text, legacy_lines = decode_lines(raw, encoding)
    warnings: list[str] = []
    if legacy_lines:
        warnings.append(
            f"File is not UTF-8 (detected {encoding or 'unknown'}, confidence {confidence}); "
            f"{legacy_lines} line(s) were decoded as {encoding or 'latin-1'}."
        )
    sheet_name = Path(name).stem or "Sheet1"
    return LoadedWorkbook(
        source_name=name,
        detected_format="csv",
        sheets=(RawSheet(sheet_name, parse_csv_text(text)),),
        detected_encoding=encoding,
        legacy_lines=legacy_lines,
        warnings=tuple(warnings),
    )


# ══════════════════════════════════════════════════════════════════════════════
# WORKBOOKS
# ══════════════════════════════════════════════════════════════════════════════

def _require_engine(suffix: str) -> None:
    if suffix not in OPTIONAL_ENGINES:
        return
    module, distribution = OPTIONAL_ENGINES[suffix]
    try:
        __import__(module)
    except ImportError:
        raise ImportError(f"{suffix} files require {distribution} — run: pip install {distribution}")


def _frame_rows(df: pd.DataFrame) -> list[list[Any]]:
    return [[normalize_scalar(value) for value in row] for row in df.itertuples(index=False, name=None)]


def _load_excel(raw: bytes, name: str, suffix: str) -> LoadedWorkbook:
    _require_engine(suffix)
    warnings: list[str] = []
    sheets: list[RawSheet] = []

    try:
        xf = pd.ExcelFile(io.BytesIO(raw), engine=EXCEL_ENGINES[suffix])
    except Exception as exc:
        raise IngestError(f"Could not open workbook: {exc}") from exc

    with xf:
        for sheet_name in xf.sheet_names:
            try:
                df = xf.parse(sheet_name, header=None, dtype=object)
            except Exception as exc:
                warnings.append(f"Could not load sheet '{sheet_name}': {exc}")
                continue
            sheets.append(RawSheet(str(sheet_name), _frame_rows(df)))

    if not sheets:
        raise IngestError("No sheets could be loaded.")

    return LoadedWorkbook(
        source_name=name,
        detected_format=suffix.lstrip("."),
        sheets=tuple(sheets),
        warnings=tuple(warnings),
    )


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def load_workbook(source: str | Path | bytes, filename: str | None = None) -> LoadedWorkbook:
    """
    Load a spreadsheet from a path, or from raw bytes plus the upload's
    filename (the extension picks the parser).

    Raises:
        FileNotFoundError — path does not exist
        IngestError       — empty, too large, unsupported or unreadable file
        ImportError       — optional engine (xlrd, odfpy) not installed
    """
    if isinstance(source, (bytes, bytearray)):
        raw = bytes(source)
        name = filename or "upload"
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        raw = path.read_bytes()
        name = filename or path.name

    suffix = Path(name).suffix.lower()
    if suffix not in ALL_FORMATS:
        raise IngestError(
            f"Unsupported format '{suffix or name}'. Supported: {', '.join(sorted(ALL_FORMATS))}"
        )
    if not raw:
        raise IngestError("The file is empty.")
    if len(raw) > MAX_FILE_BYTES:
        raise IngestError(
            f"File is too large ({len(raw) / (1024 * 1024):.1f} MB). "
            f"Maximum supported size is {MAX_FILE_BYTES // (1024 * 1024)} MB."
        )

    if suffix in TEXT_FORMATS:
        return _load_csv(raw, name)
    return _load_excel(raw, name, suffix)
