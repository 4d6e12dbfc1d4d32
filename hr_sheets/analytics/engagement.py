"""
engagement.py — weekly performance and engagement overview

Ties are broken by first occurrence throughout: the first department or day
to reach the highest total wins.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterable, Sequence

from hr_sheets.models import DailyActivity, EngagementEmployee, EngagementLevel

NOT_AVAILABLE = "N/A"
UNKNOWN_DEPARTMENT = "Unknown"


@dataclass(frozen=True)
class WeeklyAnalysis:
    week: int
    year: int
    week_start: date
    week_end: date
    posts: int
    comments: int
    reactions: int
    shares: int
    total_points: int
    participant_count: int
    average_points_per_employee: float
    top_department: str
    most_active_day: date | None


@dataclass(frozen=True)
class EngagementOverview:
    total_participants: int
    average_daily_points: float
    top_department: str
    highest_scorer: str
    distribution: dict[str, int]


@dataclass(frozen=True)
class DepartmentPoints:
    name: str
    total_points: int


def _first_max(totals: dict) -> object | None:
    best_key = None
    best_value = None
    for key, value in totals.items():
        if best_value is None or value > best_value:
            best_key, best_value = key, value
    return best_key


def _sum_by(pairs: Iterable[tuple[object, int]]) -> dict:
    totals: dict = {}
    for key, value in pairs:
        totals[key] = totals.get(key, 0) + value
    return totals


def weekly_analysis(activities: Sequence[DailyActivity]) -> tuple[WeeklyAnalysis, ...]:
    """One row per (year, week), newest week first."""
    weeks: dict[tuple[int, int], list[DailyActivity]] = {}
    for activity in activities:
        weeks.setdefault((activity.year, activity.week), []).append(activity)

    rows = []
    for (year, week), items in weeks.items():
        week_start = items[0].date - timedelta(days=items[0].date.weekday())
        total_points = sum(a.daily_points for a in items)
        participants = len({a.employee_name for a in items})
        rows.append(
            WeeklyAnalysis(
                week=week,
                year=year,
                week_start=week_start,
                week_end=week_start + timedelta(days=6),
                posts=sum(a.posts_created for a in items),
                comments=sum(a.comments_made for a in items),
                reactions=sum(a.reactions_given for a in items),
                shares=sum(a.posts_shared for a in items),
                total_points=total_points,
                participant_count=participants,
                average_points_per_employee=total_points / participants if participants else 0.0,
                top_department=_first_max(_sum_by((a.department, a.daily_points) for a in items)) or "",
                most_active_day=_first_max(_sum_by((a.date, a.daily_points) for a in items)),
            )
        )
    rows.sort(key=lambda row: (row.year, row.week), reverse=True)
    return tuple(rows)


def department_points(employees: Sequence[EngagementEmployee]) -> tuple[DepartmentPoints, ...]:
    totals = _sum_by((e.department, e.weekly_points) for e in employees)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return tuple(DepartmentPoints(name, points) for name, points in ranked)


def level_distribution(employees: Sequence[EngagementEmployee]) -> dict[str, int]:
    """Whole-number percentage of employees per engagement level."""
    total = len(employees)
    distribution = {}
    for level in EngagementLevel:
        count = sum(1 for e in employees if e.engagement_level is level)
        distribution[level.value] = round(count / total * 100) if total else 0
    return distribution


def engagement_overview(employees: Sequence[EngagementEmployee]) -> EngagementOverview:
    if not employees:
        return EngagementOverview(0, 0.0, NOT_AVAILABLE, NOT_AVAILABLE, level_distribution(()))
    ranked_departments = department_points(employees)
    highest = max(employees, key=lambda e: e.weekly_points)
    return EngagementOverview(
        total_participants=len(employees),
        average_daily_points=round(sum(e.daily_points for e in employees) / len(employees), 1),
        top_department=ranked_departments[0].name if ranked_departments else NOT_AVAILABLE,
        highest_scorer=highest.name or NOT_AVAILABLE,
        distribution=level_distribution(employees),
    )


def rank_employees(employees: Sequence[EngagementEmployee]) -> tuple[EngagementEmployee, ...]:
    """Sort by weekly points, highest first, and renumber ranks from 1."""
    ordered = sorted(employees, key=lambda e: e.weekly_points, reverse=True)
    return tuple(replace(e, rank=index + 1) for index, e in enumerate(ordered))


def available_departments(employees: Sequence[EngagementEmployee]) -> tuple[str, ...]:
    return tuple(sorted({e.department for e in employees if e.department and e.department != UNKNOWN_DEPARTMENT}))


def filter_employees(
    employees: Sequence[EngagementEmployee],
    search: str = "",
    department: str | None = None,
) -> tuple[EngagementEmployee, ...]:
    """Case-insensitive search over name and department, plus an exact department filter."""
    query = search.lower()
    return tuple(
        e
        for e in employees
        if (query in e.name.lower() or query in e.department.lower())
        and (not department or department == "all" or e.department == department)
    )
