"""
engagement.py — Viva Engage trackers and quad engagement scores

Employees are keyed by name across the daily, weekly and quad sheets. The
daily sheet contributes the best single day and the accumulated weekly total,
the weekly summary overrides that total and supplies ranks, and the quad
sheet carries the sub-scores and the weighted score.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Mapping, Sequence

from hr_sheets.headers import record_headers, resolve_fields
from hr_sheets.models import DailyActivity, EngagementEmployee, EngagementLevel
from hr_sheets.normalize import clean_text, to_date, to_int, to_number

DEFAULT_DEPARTMENT = "Unknown"

NAME_CANDIDATES = ("employeename", "name")
DEPARTMENT_CANDIDATES = ("bugbu", "department", "dept", "gbu", "businessunit")

DAILY_FIELDS = {
    "date": ("date",),
    "employee_name": NAME_CANDIDATES,
    "department": DEPARTMENT_CANDIDATES,
    "posts": ("postscreated",),
    "comments": ("commentsmade",),
    "reactions": ("reactionsgiven",),
    "shares": ("postsofothersshared", "shares"),
    "daily_points": ("dailypoints",),
}
WEEKLY_FIELDS = {
    "employee_name": NAME_CANDIDATES,
    "weekly_points": ("sumofdailypoints", "totalpoints", "weeklypoints"),
    "rank": ("rank",),
}
QUAD_FIELDS = {
    "employee_name": NAME_CANDIDATES,
    "department": DEPARTMENT_CANDIDATES,
    "event_score": ("eventparticipationscoreoutof100", "eventparticipationscore", "eventscore"),
    "ve_score": ("vivaengagescoreoutof100", "vivaengagescore", "vescore"),
    "survey_score": ("pulsesurveyscoreoutof100", "pulsesurveyscore", "surveyscore"),
    "weighted_score": ("weightedscore",),
    "engagement_level": ("engagementlevel",),
}

EVENT_WEIGHT = 0.5
VE_WEIGHT = 0.3
SURVEY_WEIGHT = 0.2

Records = Sequence[Mapping[str, Any]]


def daily_points(posts: int, comments: int, reactions: int, shares: int) -> int:
    return posts * 5 + comments * 4 + reactions * 2 + shares * 2


def weighted_score(event_score: float, ve_score: float, survey_score: float) -> float:
    return round(event_score * EVENT_WEIGHT + ve_score * VE_WEIGHT + survey_score * SURVEY_WEIGHT, 2)


def week_number(day: date) -> tuple[int, int]:
    """Week of year counted from the Monday that starts the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    day_of_year = (monday - date(monday.year, 1, 1)).days + 1
    return math.ceil(day_of_year / 7), monday.year


def _row_daily_points(values: Mapping[str, Any]) -> int:
    explicit = to_int(values.get("daily_points"))
    if explicit:
        return explicit
    return daily_points(
        to_int(values.get("posts")),
        to_int(values.get("comments")),
        to_int(values.get("reactions")),
        to_int(values.get("shares")),
    )


@dataclass
class _Draft:
    name: str
    department: str = DEFAULT_DEPARTMENT
    daily_points: int = 0
    weekly_points: int = 0
    rank: int = 0
    event_score: int = 0
    ve_score: int = 0
    survey_score: int = 0
    weighted_score: float = 0.0
    source_level: EngagementLevel | None = None
    has_scores: bool = False

    def finish(self, index: int) -> EngagementEmployee:
        score = self.weighted_score
        if not score and self.has_scores:
            score = weighted_score(self.event_score, self.ve_score, self.survey_score)
        level = self.source_level or EngagementLevel.from_score(score)
        return EngagementEmployee(
            id=f"emp-{index}",
            name=self.name,
            department=self.department or DEFAULT_DEPARTMENT,
            daily_points=self.daily_points,
            weekly_points=self.weekly_points,
            rank=self.rank or index + 1,
            event_score=self.event_score,
            ve_score=self.ve_score,
            survey_score=self.survey_score,
            weighted_score=score,
            engagement_level=level,
            level_from_source=self.source_level is not None,
        )


def _apply_daily(drafts: dict[str, _Draft], records: Records) -> None:
    field_map = resolve_fields(record_headers(records), DAILY_FIELDS)
    for record in records:
        values = field_map.extract(record)
        name = clean_text(values["employee_name"])
        if not name:
            continue
        draft = drafts.get(name)
        if draft is None:
            draft = drafts[name] = _Draft(name, clean_text(values["department"]) or DEFAULT_DEPARTMENT)
        points = _row_daily_points(values)
        draft.daily_points = max(draft.daily_points, points)
        draft.weekly_points += points


def _apply_weekly(drafts: dict[str, _Draft], records: Records) -> None:
    field_map = resolve_fields(record_headers(records), WEEKLY_FIELDS)
    for record in records:
        values = field_map.extract(record)
        draft = drafts.get(clean_text(values["employee_name"]))
        if draft is None:
            continue
        draft.weekly_points = to_int(values["weekly_points"]) or draft.weekly_points
        draft.rank = to_int(values["rank"])


def _apply_quad(drafts: dict[str, _Draft], records: Records) -> None:
    field_map = resolve_fields(record_headers(records), QUAD_FIELDS)
    for record in records:
        values = field_map.extract(record)
        name = clean_text(values["employee_name"])
        if not name:
            continue
        draft = drafts.get(name)
        if draft is None:
            draft = drafts[name] = _Draft(name, clean_text(values["department"]) or DEFAULT_DEPARTMENT)
        draft.event_score = to_int(values["event_score"])
        draft.ve_score = to_int(values["ve_score"])
        draft.survey_score = to_int(values["survey_score"])
        draft.weighted_score = to_number(values["weighted_score"])
        draft.source_level = EngagementLevel.parse(values["engagement_level"])
        draft.has_scores = True


def merge_workbook_sheets(
    daily: Records = (),
    weekly: Records = (),
    quad: Records = (),
) -> tuple[EngagementEmployee, ...]:
    """Merge the three tracker sheets into one employee list, in first-seen order."""
    drafts: dict[str, _Draft] = {}
    _apply_daily(drafts, daily)
    _apply_weekly(drafts, weekly)
    _apply_quad(drafts, quad)
    return tuple(draft.finish(index) for index, draft in enumerate(drafts.values()))


def map_daily_activities(records: Records) -> tuple[DailyActivity, ...]:
    """Rows without a parsable date or an employee name are skipped."""
    field_map = resolve_fields(record_headers(records), DAILY_FIELDS)
    activities: list[DailyActivity] = []
    for record in records:
        values = field_map.extract(record)
        name = clean_text(values["employee_name"])
        day = to_date(values["date"])
        if not name or day is None:
            continue
        week, year = week_number(day)
        posts = to_int(values["posts"])
        comments = to_int(values["comments"])
        reactions = to_int(values["reactions"])
        shares = to_int(values["shares"])
        activities.append(
            DailyActivity(
                date=day,
                week=week,
                year=year,
                employee_name=name,
                department=clean_text(values["department"]) or DEFAULT_DEPARTMENT,
                posts_created=posts,
                comments_made=comments,
                reactions_given=reactions,
                posts_shared=shares,
                daily_points=_row_daily_points(values),
            )
        )
    return tuple(activities)


def employees_from_daily_log(records: Records) -> tuple[EngagementEmployee, ...]:
    """
    CSV daily logs carry no quad scores. The Viva Engage score is estimated
    as twice the best daily points (capped at 100) and the weighted score is
    derived from it, so levels stay consistent with the score.
    """
    drafts: dict[str, _Draft] = {}
    _apply_daily(drafts, records)
    for draft in drafts.values():
        draft.ve_score = min(100, draft.daily_points * 2)
        draft.has_scores = True
    return tuple(draft.finish(index) for index, draft in enumerate(drafts.values()))


def employees_from_quad_scores(records: Records) -> tuple[EngagementEmployee, ...]:
    """CSV quad scores: daily points are estimated as half the Viva Engage score."""
    drafts: dict[str, _Draft] = {}
    _apply_quad(drafts, records)
    for draft in drafts.values():
        draft.daily_points = draft.ve_score // 2
        draft.weekly_points = draft.daily_points * 7
    return tuple(draft.finish(index) for index, draft in enumerate(drafts.values()))
