"""
laptop.py — laptop inventory dashboards

Counts and distributions over a cross-marked LaptopWorkbook. Distributions
are plain dicts of label -> count in first-seen order unless noted.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from hr_sheets.mappers.laptop import laptop_bucket
from hr_sheets.models import (
    IncomingLaptop,
    LaptopInventoryRow,
    LaptopIssue,
    LaptopStatus,
    LaptopWorkbook,
    Peripheral,
)
from hr_sheets.normalize import full_years_between, month_label

SPARE_LOW_THRESHOLD = 5
PERIPHERAL_LOW_THRESHOLD = 5
OLD_LAPTOP_YEARS = 7
FIVE_YEARS = 5
TBD = "TBD"
AGE_BUCKETS = ("0-1y", "2-3y", "4-5y", "6-7y", ">7y")

NEW_HIRE_RE = re.compile(r"hire|new\s*hire|onboard", re.IGNORECASE)


@dataclass(frozen=True)
class LaptopOverview:
    total: int
    active: int
    spare: int
    issues: int
    incoming: int
    mouse_available: float
    headset_available: float
    cyod: int
    over_seven_years: int
    new_hire_waiting: int
    spare_low: bool
    five_years_or_older: int


@dataclass(frozen=True)
class PeripheralsSummary:
    total: float
    available: float
    mouse: float
    headset: float
    shortages: tuple[str, ...]


def _count(labels: Iterable[str]) -> dict[str, int]:
    return dict(Counter(labels))


def _available(peripherals: Sequence[Peripheral], keyword: str) -> float:
    return sum(p.available for p in peripherals if keyword in p.item.lower())


def laptop_overview(workbook: LaptopWorkbook, today: date) -> LaptopOverview:
    inventory = workbook.inventory
    spare = sum(1 for row in inventory if row.status is LaptopStatus.SPARE)
    active = sum(
        1
        for row in inventory
        if row.status is LaptopStatus.ACTIVE
        or (row.custodian and row.status not in (LaptopStatus.SPARE, LaptopStatus.ISSUES))
    )
    incoming = sum(1 for row in inventory if row.status is LaptopStatus.INCOMING) or len(workbook.incoming)
    cyod = sum(1 for device in workbook.cyod if device.status.lower() != "returned") or sum(
        1 for row in inventory if row.is_cyod
    )
    return LaptopOverview(
        total=len(inventory),
        active=active,
        spare=spare,
        issues=sum(1 for row in inventory if row.status is LaptopStatus.ISSUES),
        incoming=incoming,
        mouse_available=_available(workbook.peripherals, "mouse"),
        headset_available=_available(workbook.peripherals, "headset"),
        cyod=cyod,
        over_seven_years=sum(1 for row in inventory if row.age_years >= OLD_LAPTOP_YEARS),
        new_hire_waiting=sum(1 for unit in workbook.incoming if NEW_HIRE_RE.search(unit.purpose)),
        spare_low=spare < SPARE_LOW_THRESHOLD,
        five_years_or_older=sum(
            1 for row in inventory if full_years_between(row.purchase_date, today) >= FIVE_YEARS
        ),
    )


def age_bucket(age_years: int) -> str:
    if age_years <= 1:
        return AGE_BUCKETS[0]
    if age_years <= 3:
        return AGE_BUCKETS[1]
    if age_years <= 5:
        return AGE_BUCKETS[2]
    if age_years <= 7:
        return AGE_BUCKETS[3]
    return AGE_BUCKETS[4]


def age_distribution(inventory: Sequence[LaptopInventoryRow]) -> dict[str, int]:
    """Counts per age bucket, youngest bucket first, empty buckets omitted."""
    counts = Counter(age_bucket(row.age_years) for row in inventory)
    return {bucket: counts[bucket] for bucket in AGE_BUCKETS if counts[bucket]}


def brand_distribution(inventory: Sequence[LaptopInventoryRow]) -> dict[str, int]:
    return _count(row.brand or "Unknown" for row in inventory)


def model_distribution(inventory: Sequence[LaptopInventoryRow]) -> dict[str, int]:
    return _count(row.model or "Unknown" for row in inventory)


def department_distribution(inventory: Sequence[LaptopInventoryRow]) -> dict[str, int]:
    return _count(row.department or "Unknown" for row in inventory)


def bucket_distribution(inventory: Sequence[LaptopInventoryRow]) -> dict[str, int]:
    return _count(laptop_bucket(row).value for row in inventory)


def problem_type_distribution(issues: Sequence[LaptopIssue]) -> dict[str, int]:
    return _count(issue.issue_type or "Unknown" for issue in issues)


def repair_status_distribution(issues: Sequence[LaptopIssue]) -> dict[str, int]:
    return _count(issue.status or "Unknown" for issue in issues)


def problem_model_distribution(issues: Sequence[LaptopIssue]) -> dict[str, int]:
    return _count(issue.model or issue.asset_tag or "Unknown" for issue in issues)


def incoming_by_month(incoming: Sequence[IncomingLaptop]) -> dict[str, int]:
    """Expected arrivals per YYYY-MM in calendar order, undated units under TBD last."""
    counts = Counter(month_label(unit.expected_date) if unit.expected_date else TBD for unit in incoming)
    months = sorted(key for key in counts if key != TBD)
    ordered = {month: counts[month] for month in months}
    if counts[TBD]:
        ordered[TBD] = counts[TBD]
    return ordered


def incoming_for_purpose(incoming: Sequence[IncomingLaptop], keyword: str) -> tuple[IncomingLaptop, ...]:
    return tuple(unit for unit in incoming if keyword.lower() in unit.purpose.lower())


def device_family(brand: str) -> str:
    lowered = brand.lower()
    if "apple" in lowered or "mac" in lowered:
        return "MacBook"
    if "lenovo" in lowered or "think" in lowered:
        return "ThinkPad"
    if "hp" in lowered:
        return "HP"
    return "Other"


def cyod_type_breakdown(workbook: LaptopWorkbook) -> dict[str, int]:
    if workbook.cyod:
        return _count(device.device_type or device_family(device.brand) for device in workbook.cyod)
    return _count(device_family(row.brand) for row in workbook.inventory if row.is_cyod)


def cyod_usage(workbook: LaptopWorkbook) -> dict[str, int]:
    if workbook.cyod:
        returned = sum(1 for device in workbook.cyod if "return" in device.status.lower())
        return {"Deployed": len(workbook.cyod) - returned, "Returned": returned}
    return {"Deployed": sum(1 for row in workbook.inventory if row.is_cyod), "Returned": 0}


def peripherals_summary(peripherals: Sequence[Peripheral]) -> PeripheralsSummary:
    mouse = _available(peripherals, "mouse")
    headset = _available(peripherals, "headset")
    shortages = []
    if mouse < PERIPHERAL_LOW_THRESHOLD:
        shortages.append("Mouse low")
    if headset < PERIPHERAL_LOW_THRESHOLD:
        shortages.append("Headset low")
    return PeripheralsSummary(
        total=sum(p.quantity for p in peripherals),
        available=sum(p.available for p in peripherals),
        mouse=mouse,
        headset=headset,
        shortages=tuple(shortages),
    )


def laptop_departments(inventory: Sequence[LaptopInventoryRow]) -> tuple[str, ...]:
    return tuple(sorted({row.department or "Unknown" for row in inventory}))


def filter_laptops(
    inventory: Sequence[LaptopInventoryRow],
    search: str = "",
    department: str | None = None,
    problems_only: bool = False,
) -> tuple[LaptopInventoryRow, ...]:
    """Search matches asset tag, custodian, model or brand, case-insensitively."""
    query = search.lower()

    def matches(row: LaptopInventoryRow) -> bool:
        if department and department != "all" and (row.department or "Unknown") != department:
            return False
        if query and not any(
            query in text.lower() for text in (row.asset_tag, row.custodian, row.model, row.brand)
        ):
            return False
        return not problems_only or row.status is LaptopStatus.ISSUES

    return tuple(row for row in inventory if matches(row))


def employees_with_multiple_laptops(
    inventory: Sequence[LaptopInventoryRow],
) -> dict[str, tuple[LaptopInventoryRow, ...]]:
    by_custodian: dict[str, list[LaptopInventoryRow]] = {}
    for row in inventory:
        if row.custodian:
            by_custodian.setdefault(row.custodian, []).append(row)
    return {name: tuple(rows) for name, rows in by_custodian.items() if len(rows) > 1}
