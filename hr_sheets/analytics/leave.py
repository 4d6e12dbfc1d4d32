"""
leave.py — leave request analytics and balance views

Request status buckets are substring matches on the free-text status column:
"approved", "pending"/"await" and "reject".
"""

from __future__ import annotations

import calendar
import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence

from hr_sheets.models import LeaveSummary, LeaveTransaction
from hr_sheets.normalize import month_label

TOP_EMPLOYEES = 20
TOP_BALANCES = 8
LOW_BALANCE_THRESHOLD = 5
UPCOMING_LEAVE_DAYS = 30
UNKNOWN_MONTH = "unknown"
UNKNOWN_DEPARTMENT = "Unknown"

APPROVED_RE = re.compile(r"approved", re.IGNORECASE)
PENDING_RE = re.compile(r"pending|await", re.IGNORECASE)
REJECTED_RE = re.compile(r"reject", re.IGNORECASE)


@dataclass(frozen=True)
class LeaveTotals:
    requests: int
    approved: int
    pending: int
    rejected: int
    with_pay_days: float
    without_pay_days: float


@dataclass(frozen=True)
class LeaveTypeRow:
    type: str
    requests: int
    with_pay_days: float
    without_pay_days: float


@dataclass(frozen=True)
class EmployeeDays:
    key: str
    name: str
    total_days: float
    with_pay: float
    without_pay: float


@dataclass(frozen=True)
class LeaveAnalytics:
    totals: LeaveTotals
    by_type: tuple[LeaveTypeRow, ...]
    top_employees_by_days: tuple[EmployeeDays, ...]


@dataclass(frozen=True)
class MonthlyLeave:
    month: str
    label: str
    requests: int
    days: float


@dataclass(frozen=True)
class ReasonCount:
    reason: str
    count: int


@dataclass(frozen=True)
class LabelValue:
    label: str
    value: float


@dataclass(frozen=True)
class BalanceAnalytics:
    unique_employees: int
    average_available: float
    low_count: int
    top_employees: tuple[LabelValue, ...]
    department_averages: tuple[LabelValue, ...]


def leave_analytics(transactions: Sequence[LeaveTransaction], top_n: int = TOP_EMPLOYEES) -> LeaveAnalytics:
    totals = LeaveTotals(
        requests=len(transactions),
        approved=sum(1 for t in transactions if APPROVED_RE.search(t.status)),
        pending=sum(1 for t in transactions if PENDING_RE.search(t.status)),
        rejected=sum(1 for t in transactions if REJECTED_RE.search(t.status)),
        with_pay_days=sum(t.with_pay_days for t in transactions),
        without_pay_days=sum(t.without_pay_days for t in transactions),
    )

    by_type: dict[str, list[float]] = {}
    by_employee: dict[str, list] = {}
    for t in transactions:
        row = by_type.setdefault(t.leave_type, [0, 0.0, 0.0])
        row[0] += 1
        row[1] += t.with_pay_days
        row[2] += t.without_pay_days

        key = t.employee_key
        employee = by_employee.setdefault(key, [t.name or key, 0.0, 0.0])
        employee[1] += t.with_pay_days
        employee[2] += t.without_pay_days

    type_rows = tuple(
        LeaveTypeRow(leave_type, int(requests), with_pay, without_pay)
        for leave_type, (requests, with_pay, without_pay) in by_type.items()
    )
    employees = sorted(
        (
            EmployeeDays(key, name, with_pay + without_pay, with_pay, without_pay)
            for key, (name, with_pay, without_pay) in by_employee.items()
        ),
        key=lambda row: row.total_days,
        reverse=True,
    )
    return LeaveAnalytics(totals, type_rows, tuple(employees[:top_n]))


def monthly_trend(transactions: Sequence[LeaveTransaction]) -> tuple[MonthlyLeave, ...]:
    """Requests and days per YYYY-MM of the effective date; undated requests sort last."""
    buckets: dict[str, list[float]] = {}
    for t in transactions:
        effective = t.effective_date
        key = month_label(effective) if effective else UNKNOWN_MONTH
        bucket = buckets.setdefault(key, [0, 0.0])
        bucket[0] += 1
        bucket[1] += t.total_days

    rows = []
    for key in sorted(buckets):
        label = key if key == UNKNOWN_MONTH else calendar.month_abbr[int(key[5:7])]
        requests, days = buckets[key]
        rows.append(MonthlyLeave(key, label, int(requests), days))
    return tuple(rows)


def reject_reasons(transactions: Sequence[LeaveTransaction]) -> tuple[ReasonCount, ...]:
    """Reject reason, or the filed reason when none was recorded, counted most-common first."""
    counts = Counter(
        reason for reason in ((t.reject_reason or t.reason).strip() for t in transactions) if reason
    )
    return tuple(ReasonCount(reason, count) for reason, count in counts.most_common())


def upcoming_leaves(
    transactions: Sequence[LeaveTransaction],
    today: date,
    days: int = UPCOMING_LEAVE_DAYS,
) -> tuple[LeaveTransaction, ...]:
    cutoff = today + timedelta(days=days)
    upcoming = [t for t in transactions if t.effective_date and today <= t.effective_date <= cutoff]
    return tuple(sorted(upcoming, key=lambda t: t.effective_date))


def _department(summary: LeaveSummary) -> str:
    return summary.department or UNKNOWN_DEPARTMENT


def departments(summaries: Sequence[LeaveSummary]) -> tuple[str, ...]:
    return tuple(sorted({_department(s) for s in summaries}))


def filter_by_department(summaries: Sequence[LeaveSummary], department: str | None) -> tuple[LeaveSummary, ...]:
    if not department or department.lower() == "all":
        return tuple(summaries)
    return tuple(s for s in summaries if _department(s) == department)


def balance_analytics(summaries: Sequence[LeaveSummary], department: str | None = None) -> BalanceAnalytics:
    items = filter_by_department(summaries, department)
    balances = [s.total_available_balance_ytd for s in items]

    top = sorted(
        (LabelValue(s.label, s.total_available_balance_ytd) for s in items),
        key=lambda row: row.value,
        reverse=True,
    )

    per_department: dict[str, list[float]] = {}
    for s in items:
        per_department.setdefault(_department(s), []).append(s.total_available_balance_ytd)
    averages = sorted(
        (LabelValue(name, sum(values) / len(values)) for name, values in per_department.items()),
        key=lambda row: row.value,
        reverse=True,
    )

    return BalanceAnalytics(
        unique_employees=len({s.employee_key for s in items}),
        average_available=sum(balances) / len(balances) if balances else 0.0,
        low_count=sum(1 for value in balances if value <= LOW_BALANCE_THRESHOLD),
        top_employees=tuple(top[:TOP_BALANCES]),
        department_averages=tuple(averages[:TOP_BALANCES]),
    )


def balance_ranking(
    summaries: Sequence[LeaveSummary],
    search: str = "",
    order: str = "desc",
) -> tuple[LabelValue, ...]:
    """
    Every employee's available balance, filtered by a case-insensitive search
    over the "Last, First" label and department. ``order`` is "desc", "asc"
    or "name".
    """
    query = search.strip().lower()
    rows = [
        (LabelValue(s.label, s.total_available_balance_ytd), _department(s))
        for s in summaries
    ]
    if query:
        rows = [(row, dept) for row, dept in rows if query in row.label.lower() or query in dept.lower()]
    ranked = [row for row, _ in rows]
    if order == "asc":
        ranked.sort(key=lambda row: row.value)
    elif order == "name":
        ranked.sort(key=lambda row: row.label)
    else:
        ranked.sort(key=lambda row: row.value, reverse=True)
    return tuple(ranked)
