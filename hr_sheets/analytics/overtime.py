"""
overtime.py — OT pivots

Totals, hours by month and type, and amounts by employee. Employees are keyed
by id, falling back to name; months display in calendar order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from hr_sheets.models import OTRecord
from hr_sheets.normalize import month_sort_index


@dataclass(frozen=True)
class TypeTotals:
    hours: float = 0.0
    amount: float = 0.0


@dataclass(frozen=True)
class OTTotals:
    total_hours: float
    total_amount: float
    employees: int
    by_type: dict[str, TypeTotals]


@dataclass(frozen=True)
class MonthTypeHours:
    month: str
    values: dict[str, float]
    total: float


@dataclass(frozen=True)
class EmployeePivotRow:
    employee_id: str
    name: str
    team: str
    values: dict[str, float]
    total: float
    total_hours: float = 0.0


@dataclass(frozen=True)
class OTPivots:
    totals: OTTotals
    hours_by_month_by_type: tuple[MonthTypeHours, ...]
    amount_by_type_by_employee: tuple[EmployeePivotRow, ...]
    amount_by_month_by_employee: tuple[EmployeePivotRow, ...]


@dataclass
class _EmployeeAccumulator:
    employee_id: str
    name: str
    team: str
    hours_by_type: dict[str, float] = field(default_factory=dict)
    amount_by_type: dict[str, float] = field(default_factory=dict)
    amount_by_month: dict[str, float] = field(default_factory=dict)
    total_hours: float = 0.0
    total_amount: float = 0.0


def _bump(bucket: dict[str, float], key: str, value: float) -> None:
    bucket[key] = bucket.get(key, 0.0) + value


def aggregate_ot(records: Sequence[OTRecord]) -> OTPivots:
    hours_by_type: dict[str, float] = {}
    amount_by_type: dict[str, float] = {}
    month_type_hours: dict[str, dict[str, float]] = {}
    employees: dict[str, _EmployeeAccumulator] = {}

    for record in records:
        ot_type = record.ot_type.value
        _bump(hours_by_type, ot_type, record.hours)
        _bump(amount_by_type, ot_type, record.amount)

        if record.month_abbr:
            _bump(month_type_hours.setdefault(record.month_abbr, {}), ot_type, record.hours)

        key = record.employee_key
        employee = employees.get(key)
        if employee is None:
            employee = employees[key] = _EmployeeAccumulator(key, record.name, record.team)
        _bump(employee.hours_by_type, ot_type, record.hours)
        _bump(employee.amount_by_type, ot_type, record.amount)
        if record.month_abbr:
            _bump(employee.amount_by_month, record.month_abbr, record.amount)
        employee.total_hours += record.hours
        employee.total_amount += record.amount

    months = sorted(month_type_hours, key=month_sort_index)
    hours_by_month = tuple(
        MonthTypeHours(month, dict(month_type_hours[month]), sum(month_type_hours[month].values()))
        for month in months
    )

    by_amount = sorted(employees.values(), key=lambda e: e.total_amount, reverse=True)
    amount_by_type_rows = tuple(
        EmployeePivotRow(e.employee_id, e.name, e.team, dict(e.amount_by_type), e.total_amount, e.total_hours)
        for e in by_amount
    )
    amount_by_month_rows = tuple(
        EmployeePivotRow(
            e.employee_id,
            e.name,
            e.team,
            {month: e.amount_by_month[month] for month in sorted(e.amount_by_month, key=month_sort_index)},
            e.total_amount,
            e.total_hours,
        )
        for e in by_amount
    )

    totals = OTTotals(
        total_hours=sum(record.hours for record in records),
        total_amount=sum(record.amount for record in records),
        employees=len(employees),
        by_type={name: TypeTotals(hours_by_type[name], amount_by_type[name]) for name in hours_by_type},
    )
    return OTPivots(totals, hours_by_month, amount_by_type_rows, amount_by_month_rows)


def top_ot_type(pivots: OTPivots) -> str | None:
    """OT type with the most hours; the first one seen wins a tie."""
    best: str | None = None
    best_hours = float("-inf")
    for name, totals in pivots.totals.by_type.items():
        if totals.hours > best_hours:
            best, best_hours = name, totals.hours
    return best


def top_employees(pivots: OTPivots, n: int = 10) -> tuple[EmployeePivotRow, ...]:
    return pivots.amount_by_type_by_employee[:n]


def employee_hours(records: Sequence[OTRecord]) -> dict[str, float]:
    hours: dict[str, float] = {}
    for record in records:
        _bump(hours, record.employee_key, record.hours)
    return hours


def filter_ot(
    records: Sequence[OTRecord],
    *,
    month: str | None = None,
    team: str | None = None,
    ot_type: str | None = None,
) -> tuple[OTRecord, ...]:
    """Filter by 3-letter month, team and canonical OT type; None means no filter."""
    return tuple(
        record
        for record in records
        if (month is None or record.month_abbr == month.upper())
        and (team is None or record.team == team)
        and (ot_type is None or record.ot_type.value == ot_type)
    )
