"""
classify.py — decide what kind of records a sheet holds

Content clues always outrank sheet names: exports get renamed far more often
than their column layouts change.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence

from hr_sheets.normalize import clean_text, normalize_header

LOOSE_SCAN_ROWS = 5


class SheetKind(Enum):
    TRANSACTIONS = "transactions"
    SUMMARY = "summary"
    UNKNOWN = "unknown"


class EngagementSheetKind(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    QUAD = "quad"
    UNKNOWN = "unknown"


class LaptopSheetKind(Enum):
    INVENTORY = "inventory"
    ISSUES = "issues"
    INCOMING = "incoming"
    CYOD = "cyod"
    PERIPHERALS = "peripherals"


# Leave workbooks ─────────────────────────────────────────────────────────────
TRANSACTION_HEADER_CLUES = frozenset(
    {
        "leavetypename",
        "withpaynoofdays",
        "woutpaynoofdays",
        "withpaydays",
        "withoutpaydays",
        "datefiled",
        "datefrom",
        "dateto",
        "leavestatus",
        "rejectreason",
        "dateapprovedsupervisor",
    }
)
SUMMARY_HEADER_CLUES = frozenset(
    {
        "lastname",
        "firstname",
        "middlename",
        "hiredate",
        "regularizationdate",
        "leavesusedduringdaterange",
        "leavesused",
        "totalavailablebalanceytd",
        "availablebalance",
        "isactive",
    }
)
TRANSACTION_TEXT_CLUES = ("withpay", "woutpay", "datefiled", "datefrom", "leavestatus", "reject", "approved", "pending")
SUMMARY_TEXT_CLUES = ("balance", "lastname", "firstname", "hiredate", "leavesused", "regularization", "summary")

# Engagement workbooks ────────────────────────────────────────────────────────
ENGAGEMENT_HEADER_CLUES = {
    EngagementSheetKind.DAILY: frozenset(
        {"postscreated", "commentsmade", "reactionsgiven", "postsofothersshared", "dailypoints"}
    ),
    EngagementSheetKind.WEEKLY: frozenset({"sumofdailypoints", "totalpoints", "weeklypoints", "rank"}),
    EngagementSheetKind.QUAD: frozenset(
        {
            "eventparticipationscoreoutof100",
            "vivaengagescoreoutof100",
            "pulsesurveyscoreoutof100",
            "eventscore",
            "vescore",
            "surveyscore",
            "weightedscore",
            "engagementlevel",
        }
    ),
}
ENGAGEMENT_NAME_CLUES = (
    (EngagementSheetKind.DAILY, ("daily",)),
    (EngagementSheetKind.WEEKLY, ("weekly",)),
    (EngagementSheetKind.QUAD, ("quad", "score")),
)

# Laptop workbooks ────────────────────────────────────────────────────────────
LAPTOP_SHEET_NAMES = {
    LaptopSheetKind.INVENTORY: ("bneXt Laptop Inventory", "Laptop Inventory", "Laptops", "Assets", "Computers", "Sheet1"),
    LaptopSheetKind.ISSUES: ("Laptops With Issues", "Issues", "Repairs", "Maintenance"),
    LaptopSheetKind.INCOMING: ("Incoming", "New Arrivals", "Pipeline", "Incoming Equipment"),
    LaptopSheetKind.CYOD: ("CYOD", "Choose Your Own Device", "BYOD", "Employee Choice"),
    LaptopSheetKind.PERIPHERALS: ("Mouse & Headset", "Mouse and Headset", "Peripherals", "Accessories"),
}
# Each inner tuple scores one point when any keyword appears in any header.
LAPTOP_KEYWORD_GROUPS = {
    LaptopSheetKind.INVENTORY: tuple(
        (keyword,)
        for keyword in (
            "asset code",
            "invoice date",
            "custodian",
            "brand",
            "model",
            "vertical",
            "serial num",
            "tag",
            "maintenance history",
        )
    ),
    LaptopSheetKind.ISSUES: (("issue", "problem", "category"), ("status",), ("reported", "date"), ("asset", "model")),
    LaptopSheetKind.INCOMING: (("expected", "eta", "arrival"), ("purpose", "reason", "type"), ("employee",), ("brand", "model")),
    LaptopSheetKind.CYOD: (("cyod", "employee owned", "ownership"), ("device type", "type"), ("status",), ("cost", "price")),
    LaptopSheetKind.PERIPHERALS: (("item", "type"), ("quantity", "qty"), ("available", "in stock"), ("mouse",), ("headset",)),
}
LAPTOP_DETECTION_ORDER = (
    LaptopSheetKind.INVENTORY,
    LaptopSheetKind.ISSUES,
    LaptopSheetKind.INCOMING,
    LaptopSheetKind.CYOD,
    LaptopSheetKind.PERIPHERALS,
)


def _single_winner(transactions: int, summary: int) -> SheetKind | None:
    if transactions and not summary:
        return SheetKind.TRANSACTIONS
    if summary and not transactions:
        return SheetKind.SUMMARY
    return None


def classify_leave_sheet(sheet_name: str, records: Sequence[Mapping[str, Any]]) -> SheetKind:
    """
    Classify a leave workbook sheet as transactions or summary.

    Order: exact header clues on the first data row, then loose substring
    clues over the first few rows (keys and values), then the sheet name.
    """
    if records:
        keys = {normalize_header(key) for key in records[0]}
        verdict = _single_winner(
            len(keys & TRANSACTION_HEADER_CLUES),
            len(keys & SUMMARY_HEADER_CLUES),
        )
        if verdict:
            return verdict

        transaction_hits = 0
        summary_hits = 0
        for record in records[:LOOSE_SCAN_ROWS]:
            blob = " ".join(
                normalize_header(key) + " " + normalize_header(value) for key, value in record.items()
            )
            transaction_hits += sum(1 for clue in TRANSACTION_TEXT_CLUES if clue in blob)
            summary_hits += sum(1 for clue in SUMMARY_TEXT_CLUES if clue in blob)
        if transaction_hits != summary_hits:
            return SheetKind.TRANSACTIONS if transaction_hits > summary_hits else SheetKind.SUMMARY

    name = clean_text(sheet_name).lower()
    verdict = _single_winner("trans" in name, "summ" in name)
    return verdict or SheetKind.UNKNOWN


def classify_engagement_sheet(sheet_name: str, headers: Sequence[Any]) -> EngagementSheetKind:
    keys = {normalize_header(header) for header in headers}
    scores = {kind: len(keys & clues) for kind, clues in ENGAGEMENT_HEADER_CLUES.items()}
    best = max(scores.values(), default=0)
    winners = [kind for kind, score in scores.items() if score == best]
    if best > 0 and len(winners) == 1:
        return winners[0]

    name = clean_text(sheet_name).lower()
    for kind, keywords in ENGAGEMENT_NAME_CLUES:
        if any(keyword in name for keyword in keywords):
            return kind
    return EngagementSheetKind.UNKNOWN


def detect_engagement_csv(headers: Sequence[Any]) -> EngagementSheetKind:
    """CSV uploads carry either daily logs or quad scores; anything else is unknown."""
    keys = {normalize_header(header) for header in headers}
    if keys & {"postscreated", "commentsmade", "dailypoints"}:
        return EngagementSheetKind.DAILY
    if keys & {"eventparticipationscoreoutof100", "vivaengagescoreoutof100", "eventscore", "vescore"}:
        return EngagementSheetKind.QUAD
    return EngagementSheetKind.UNKNOWN


def score_headers(headers: Sequence[Any], keyword_groups: Sequence[Sequence[str]]) -> int:
    lowered = [clean_text(header).lower() for header in headers]
    return sum(
        1 for group in keyword_groups if any(keyword in header for header in lowered for keyword in group)
    )


def find_named_sheet(sheet_names: Sequence[str], wanted: Sequence[str]) -> str | None:
    for name in wanted:
        if name in sheet_names:
            return name
    lowered = {name.lower(): name for name in sheet_names}
    for name in wanted:
        if name.lower() in lowered:
            return lowered[name.lower()]
    return None


def pick_laptop_sheets(sheet_headers: Mapping[str, Sequence[Any]]) -> dict[LaptopSheetKind, str]:
    """
    Assign workbook sheets to laptop roles.

    ``sheet_headers`` maps sheet name to its detected headers; sheets with no
    headers are ignored. Each role tries its known sheet names first, then
    the best keyword score among sheets not already assigned.
    """
    candidates = {name: headers for name, headers in sheet_headers.items() if headers}
    assigned: dict[LaptopSheetKind, str] = {}
    taken: set[str] = set()
    for kind in LAPTOP_DETECTION_ORDER:
        available = [name for name in candidates if name not in taken]
        chosen = find_named_sheet(available, LAPTOP_SHEET_NAMES[kind])
        if chosen is None:
            best_score = 0
            for name in available:
                score = score_headers(candidates[name], LAPTOP_KEYWORD_GROUPS[kind])
                if score > best_score:
                    best_score = score
                    chosen = name
        if chosen is not None:
            assigned[kind] = chosen
            taken.add(chosen)
    return assigned
