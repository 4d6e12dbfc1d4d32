"""
ingest.py — one entry point per HR upload

Each function loads the file, locates header rows, classifies sheets, maps
records and returns an immutable result. Nothing is kept between calls; the
caller owns the returned records.

Only whole-file problems raise (IngestError, or FileNotFoundError /
ImportError from the loader). Skipped sheets and guessed header rows are
reported in the result's ``warnings``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from hr_sheets.classify import (
    EngagementSheetKind,
    LaptopSheetKind,
    SheetKind,
    classify_engagement_sheet,
    classify_leave_sheet,
    detect_engagement_csv,
    pick_laptop_sheets,
)
from hr_sheets.errors import IngestError
from hr_sheets.header_row import build_records, locate_header_row, unique_headers
from hr_sheets.headers import HeaderResolver
from hr_sheets.loader import LoadedWorkbook, RawSheet, load_workbook
from hr_sheets.mappers import certification, engagement, laptop, leave, overtime
from hr_sheets.models import (
    CertificationRecord,
    DailyActivity,
    EngagementEmployee,
    LaptopWorkbook,
    LeaveSummary,
    LeaveTransaction,
    OTRecord,
)

DEFAULT_MIN_HEADER_SCORE = 2

ENGAGEMENT_TOKEN_GROUPS = (
    tuple(engagement.DAILY_FIELDS.values())
    + tuple(engagement.WEEKLY_FIELDS.values())
    + tuple(engagement.QUAD_FIELDS.values())
)
CERTIFICATION_TOKEN_GROUPS = tuple(certification.CERTIFICATION_FIELDS.values())
LEAVE_TOKEN_GROUPS = tuple(leave.TRANSACTION_FIELDS.values()) + tuple(leave.SUMMARY_FIELDS.values())
LAPTOP_TOKEN_GROUPS = (
    tuple(laptop.INVENTORY_FIELDS.values())
    + tuple(laptop.ISSUE_FIELDS.values())
    + tuple(laptop.INCOMING_FIELDS.values())
    + tuple(laptop.CYOD_FIELDS.values())
    + tuple(laptop.PERIPHERAL_FIELDS.values())
)

NO_ROWS_MESSAGE = "No rows found in the file."


# ══════════════════════════════════════════════════════════════════════════════
# RESULTS
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IngestResult:
    source_name: str
    detected_format: str
    sheets: dict[str, str]
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class EngagementResult(IngestResult):
    employees: tuple[EngagementEmployee, ...] = ()
    activities: tuple[DailyActivity, ...] = ()


@dataclass(frozen=True)
class CertificationResult(IngestResult):
    records: tuple[CertificationRecord, ...] = ()


@dataclass(frozen=True)
class LeaveResult(IngestResult):
    transactions: tuple[LeaveTransaction, ...] = ()
    summaries: tuple[LeaveSummary, ...] = ()


@dataclass(frozen=True)
class OvertimeResult(IngestResult):
    records: tuple[OTRecord, ...] = ()


@dataclass(frozen=True)
class LaptopResult(IngestResult):
    workbook: LaptopWorkbook = field(default_factory=LaptopWorkbook)


# ══════════════════════════════════════════════════════════════════════════════
# SHARED HELPERS
# ══════════════════════════════════════════════════════════════════════════════

@dataclass
class _SheetRecords:
    name: str
    headers: list[str]
    records: list[dict[str, Any]]


def _load(source: Any, filename: str | None) -> LoadedWorkbook:
    return load_workbook(source, filename=filename)


def _read_sheet(
    sheet: RawSheet,
    token_groups: Any,
    warnings: list[str],
    min_score: int = DEFAULT_MIN_HEADER_SCORE,
) -> _SheetRecords | None:
    """Locate the header row and build records; None for sheets with no rows at all."""
    if sheet.is_empty:
        warnings.append(f"Sheet '{sheet.name}' is empty; skipped.")
        return None
    location = locate_header_row(sheet.rows, token_groups, min_score=min_score)
    if location.fallback and location.index > 0:
        warnings.append(
            f"Sheet '{sheet.name}': no header row matched the expected columns; "
            f"using row {location.index + 1}."
        )
    headers = unique_headers(sheet.rows[location.index])
    return _SheetRecords(sheet.name, headers, build_records(sheet.rows, location.index))


def _read_all(workbook: LoadedWorkbook, token_groups: Any, warnings: list[str], min_score: int) -> list[_SheetRecords]:
    read = [_read_sheet(sheet, token_groups, warnings, min_score) for sheet in workbook.sheets]
    return [sheet for sheet in read if sheet is not None]


def _require_rows(sheets: list[_SheetRecords]) -> None:
    if not any(sheet.records for sheet in sheets):
        raise IngestError(NO_ROWS_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════════
# ENGAGEMENT
# ══════════════════════════════════════════════════════════════════════════════

def ingest_engagement(source: Any, filename: str | None = None) -> EngagementResult:
    """
    Workbooks: the Daily VE tracker, VE Weekly Summary and Quad Engagement
    Scores sheets are found by their columns (names as a fallback) and merged
    per employee. CSV files hold either a daily activity log or quad scores.
    """
    workbook = _load(source, filename)
    warnings = list(workbook.warnings)
    sheets = _read_all(workbook, ENGAGEMENT_TOKEN_GROUPS, warnings, DEFAULT_MIN_HEADER_SCORE)
    _require_rows(sheets)

    if workbook.detected_format == "csv":
        return _ingest_engagement_csv(workbook, sheets[0], warnings)

    by_kind: dict[EngagementSheetKind, _SheetRecords] = {}
    roles: dict[str, str] = {}
    for sheet in sheets:
        kind = classify_engagement_sheet(sheet.name, sheet.headers)
        if kind is EngagementSheetKind.UNKNOWN:
            warnings.append(f"Sheet '{sheet.name}' has no engagement columns; skipped.")
            continue
        if HeaderResolver(sheet.headers).resolve(engagement.NAME_CANDIDATES) is None:
            # summary tabs such as "Department Summary" share the weekly point columns
            warnings.append(f"Sheet '{sheet.name}' has no employee name column; skipped.")
            continue
        if kind in by_kind:
            warnings.append(
                f"Sheet '{sheet.name}' looks like another {kind.value} sheet; "
                f"using '{by_kind[kind].name}'."
            )
            continue
        by_kind[kind] = sheet
        roles[sheet.name] = kind.value

    def records_for(kind: EngagementSheetKind) -> list[dict[str, Any]]:
        sheet = by_kind.get(kind)
        return sheet.records if sheet else []

    daily = records_for(EngagementSheetKind.DAILY)
    employees = engagement.merge_workbook_sheets(
        daily,
        records_for(EngagementSheetKind.WEEKLY),
        records_for(EngagementSheetKind.QUAD),
    )
    if not employees:
        raise IngestError(
            "No valid employee data found. Please check that the workbook has the "
            "Daily VE tracker, VE Weekly Summary or Quad Engagement Scores sheets."
        )
    return EngagementResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets=roles,
        warnings=tuple(warnings),
        employees=employees,
        activities=engagement.map_daily_activities(daily),
    )


def _ingest_engagement_csv(workbook: LoadedWorkbook, sheet: _SheetRecords, warnings: list[str]) -> EngagementResult:
    kind = detect_engagement_csv(sheet.headers)
    if kind is EngagementSheetKind.DAILY:
        employees = engagement.employees_from_daily_log(sheet.records)
        activities = engagement.map_daily_activities(sheet.records)
    elif kind is EngagementSheetKind.QUAD:
        employees = engagement.employees_from_quad_scores(sheet.records)
        activities = ()
    else:
        raise IngestError("Unrecognized CSV format. Please ensure your CSV has the expected columns.")

    if not employees:
        raise IngestError("No valid employee data found. Please check the employee name column.")
    return EngagementResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets={sheet.name: kind.value},
        warnings=tuple(warnings),
        employees=employees,
        activities=activities,
    )


# ══════════════════════════════════════════════════════════════════════════════
# CERTIFICATIONS
# ══════════════════════════════════════════════════════════════════════════════

def ingest_certifications(source: Any, today: date, filename: str | None = None) -> CertificationResult:
    """
    Every sheet is mapped with its own header layout. The sheet name supplies
    the provider when a row has none, and the employment status
    ("Resigned", "Trial", otherwise Active). CSV rows carry no sheet name.
    """
    workbook = _load(source, filename)
    warnings = list(workbook.warnings)
    sheets = _read_all(workbook, CERTIFICATION_TOKEN_GROUPS, warnings, DEFAULT_MIN_HEADER_SCORE)
    _require_rows(sheets)

    is_csv = workbook.detected_format == "csv"
    records: list[CertificationRecord] = []
    roles: dict[str, str] = {}
    for sheet in sheets:
        mapped = certification.map_certifications(sheet.records, "" if is_csv else sheet.name, today)
        if mapped:
            roles[sheet.name] = "certifications"
            records.extend(mapped)
        elif sheet.records:
            warnings.append(f"Sheet '{sheet.name}' has no employee or certification column; skipped.")

    if not records:
        raise IngestError("No certification records found. Check that the file has employee and certification columns.")
    return CertificationResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets=roles,
        warnings=tuple(warnings),
        records=tuple(records),
    )


# ══════════════════════════════════════════════════════════════════════════════
# LEAVE
# ══════════════════════════════════════════════════════════════════════════════

def ingest_leave(source: Any, filename: str | None = None) -> LeaveResult:
    """
    One workbook may hold both leave transactions and balance summaries.
    Sheets the classifier cannot place are read as transactions.
    """
    workbook = _load(source, filename)
    warnings = list(workbook.warnings)
    sheets = _read_all(workbook, LEAVE_TOKEN_GROUPS, warnings, DEFAULT_MIN_HEADER_SCORE)
    _require_rows(sheets)

    transactions: list[LeaveTransaction] = []
    summaries: list[LeaveSummary] = []
    roles: dict[str, str] = {}
    for sheet in sheets:
        kind = classify_leave_sheet(sheet.name, sheet.records)
        if kind is SheetKind.UNKNOWN:
            warnings.append(f"Sheet '{sheet.name}' could not be classified; read as transactions.")
            kind = SheetKind.TRANSACTIONS
        roles[sheet.name] = kind.value
        if kind is SheetKind.SUMMARY:
            summaries.extend(leave.map_leave_summaries(sheet.records))
        else:
            transactions.extend(leave.map_leave_transactions(sheet.records))

    if not transactions and not summaries:
        raise IngestError("No leave transactions found. Check headers.")
    return LeaveResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets=roles,
        warnings=tuple(warnings),
        transactions=tuple(transactions),
        summaries=tuple(summaries),
    )


def ingest_leave_transactions(source: Any, filename: str | None = None) -> LeaveResult:
    """Read every sheet as leave transactions."""
    return _ingest_leave_as(source, filename, SheetKind.TRANSACTIONS)


def ingest_leave_summary(source: Any, filename: str | None = None) -> LeaveResult:
    """Read every sheet as leave balance summaries."""
    return _ingest_leave_as(source, filename, SheetKind.SUMMARY)


def _ingest_leave_as(source: Any, filename: str | None, kind: SheetKind) -> LeaveResult:
    workbook = _load(source, filename)
    warnings = list(workbook.warnings)
    sheets = _read_all(workbook, LEAVE_TOKEN_GROUPS, warnings, DEFAULT_MIN_HEADER_SCORE)

    transactions: list[LeaveTransaction] = []
    summaries: list[LeaveSummary] = []
    for sheet in sheets:
        if kind is SheetKind.SUMMARY:
            summaries.extend(leave.map_leave_summaries(sheet.records))
        else:
            transactions.extend(leave.map_leave_transactions(sheet.records))

    if kind is SheetKind.SUMMARY and not summaries:
        raise IngestError("No summary rows found. Check headers.")
    if kind is SheetKind.TRANSACTIONS and not transactions:
        raise IngestError("No leave transactions found. Check headers.")
    return LeaveResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets={sheet.name: kind.value for sheet in sheets},
        warnings=tuple(warnings),
        transactions=tuple(transactions),
        summaries=tuple(summaries),
    )


# ══════════════════════════════════════════════════════════════════════════════
# OVERTIME
# ══════════════════════════════════════════════════════════════════════════════

def ingest_overtime(source: Any, filename: str | None = None) -> OvertimeResult:
    """Payroll OT exports: header rows sit below report banners, so each sheet is scanned."""
    workbook = _load(source, filename)
    warnings = list(workbook.warnings)
    sheets = _read_all(workbook, overtime.OT_TOKEN_GROUPS, warnings, overtime.OT_MIN_HEADER_SCORE)

    records: list[OTRecord] = []
    roles: dict[str, str] = {}
    for sheet in sheets:
        mapped = overtime.map_ot_records(sheet.records)
        if mapped:
            roles[sheet.name] = "overtime"
            records.extend(mapped)

    if not records:
        raise IngestError("No valid OT rows found. Please check the column headers.")
    return OvertimeResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets=roles,
        warnings=tuple(warnings),
        records=tuple(records),
    )


# ══════════════════════════════════════════════════════════════════════════════
# LAPTOPS
# ══════════════════════════════════════════════════════════════════════════════

def ingest_laptops(source: Any, today: date, filename: str | None = None) -> LaptopResult:
    """
    The inventory sheet is required. Issues, incoming units and CYOD devices
    fall back to values derived from inventory rows when the workbook has no
    sheet for them; peripherals are only read from their own sheet.
    """
    workbook = _load(source, filename)
    warnings = list(workbook.warnings)
    sheets = {sheet.name: sheet for sheet in _read_all(workbook, LAPTOP_TOKEN_GROUPS, warnings, DEFAULT_MIN_HEADER_SCORE)}
    assigned = pick_laptop_sheets({name: sheet.headers for name, sheet in sheets.items() if sheet.records})

    def records_for(kind: LaptopSheetKind) -> list[dict[str, Any]]:
        name = assigned.get(kind)
        return sheets[name].records if name else []

    inventory = laptop.map_inventory(records_for(LaptopSheetKind.INVENTORY), today)
    if not inventory:
        raise IngestError("No laptop inventory rows found. Check headers.")

    def from_sheet_or_derived(kind: LaptopSheetKind, parse: Callable, derive: Callable) -> tuple:
        records = records_for(kind)
        return parse(records) if records else derive()

    issues = from_sheet_or_derived(LaptopSheetKind.ISSUES, laptop.map_issues, lambda: laptop.derive_issues(inventory))
    incoming = from_sheet_or_derived(
        LaptopSheetKind.INCOMING, laptop.map_incoming, lambda: laptop.derive_incoming(inventory, today)
    )
    cyod = from_sheet_or_derived(LaptopSheetKind.CYOD, laptop.map_cyod, lambda: laptop.derive_cyod(inventory))
    peripherals = laptop.map_peripherals(records_for(LaptopSheetKind.PERIPHERALS))

    for name in sheets:
        if name not in assigned.values() and sheets[name].records:
            warnings.append(f"Sheet '{name}' was not recognised as a laptop sheet; skipped.")

    return LaptopResult(
        source_name=workbook.source_name,
        detected_format=workbook.detected_format,
        sheets={name: kind.value for kind, name in assigned.items()},
        warnings=tuple(warnings),
        workbook=LaptopWorkbook(
            inventory=laptop.cross_mark(inventory, issues, incoming),
            issues=issues,
            incoming=incoming,
            cyod=cyod,
            peripherals=peripherals,
        ),
    )


# ══════════════════════════════════════════════════════════════════════════════
# DISPATCH
# ══════════════════════════════════════════════════════════════════════════════

DOMAINS = ("engagement", "certifications", "leave", "overtime", "laptops")


def ingest(domain: str, source: Any, today: date, filename: str | None = None) -> IngestResult:
    """Route an upload to the ingest function for ``domain`` (one of DOMAINS)."""
    if domain == "engagement":
        return ingest_engagement(source, filename=filename)
    if domain == "certifications":
        return ingest_certifications(source, today, filename=filename)
    if domain == "leave":
        return ingest_leave(source, filename=filename)
    if domain == "overtime":
        return ingest_overtime(source, filename=filename)
    if domain == "laptops":
        return ingest_laptops(source, today, filename=filename)
    raise ValueError(f"Unknown domain '{domain}'. Expected one of: {', '.join(DOMAINS)}")
