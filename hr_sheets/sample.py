"""
sample.py — downloadable sample engagement workbook

Builds the Q1 2024 engagement tracker users can download, fill in and upload
again. The workbook carries the four sheets the engagement ingest looks for:

    Daily VE tracker        one row per employee per weekday
    VE Weekly Summary       summed daily points and rank
    Quad Engagement Scores  event / Viva Engage / pulse survey sub-scores
    Department Summary      per-department roll-up (informational only)

Activity counts come from a seeded random.Random, so the same seed always
produces the same rows.
"""

from __future__ import annotations

import io
import random
from datetime import date, timedelta

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from hr_sheets.mappers.engagement import daily_points, weighted_score, week_number
from hr_sheets.models import EngagementLevel

SAMPLE_FILENAME = "Sample_Engagement_Tracker_Q1_2024.xlsx"
XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

QUARTER_START = date(2024, 1, 1)
QUARTER_END = date(2024, 3, 31)

DEPARTMENTS = (
    "Marketing",
    "Sales",
    "Engineering",
    "Design",
    "HR",
    "Finance",
    "Operations",
    "Customer Success",
    "Product",
    "Legal",
)

EMPLOYEES = (
    ("Alice Johnson", "Marketing"),
    ("Bob Smith", "Sales"),
    ("Carol Davis", "Engineering"),
    ("David Wilson", "Design"),
    ("Emma Brown", "HR"),
    ("Frank Miller", "Finance"),
    ("Grace Lee", "Operations"),
    ("Henry Clark", "Customer Success"),
    ("Isabel Rodriguez", "Product"),
    ("Jack Thompson", "Legal"),
    ("Kelly Anderson", "Marketing"),
    ("Lucas White", "Sales"),
    ("Maria Garcia", "Engineering"),
    ("Nathan Taylor", "Design"),
    ("Olivia Martinez", "HR"),
    ("Peter Jackson", "Finance"),
    ("Quinn Adams", "Operations"),
    ("Rachel Green", "Customer Success"),
    ("Samuel King", "Product"),
    ("Tara Walker", "Legal"),
)

DAILY_HEADERS = [
    "Date",
    "BU/GBU",
    "Employee Name",
    "Posts Created",
    "Comments Made",
    "Reactions Given",
    "Posts of Others Shared",
    "Daily Points",
    "Week Number",
]
WEEKLY_HEADERS = ["Employee Name", "Sum of Daily Points", "Rank"]
QUAD_HEADERS = [
    "Employee Name",
    "Event Participation Score (out of 100)",
    "Viva Engage Score (out of 100)",
    "Pulse Survey Score (out of 100)",
    "Weighted Score",
    "Engagement Level",
]
DEPARTMENT_HEADERS = [
    "Department",
    "Employee Count",
    "Total Points",
    "Average Points per Employee",
    "Average Engagement Score",
]

# ── Styling ────────────────────────────────────────────────────────────────────
HEADER_COLOR = "1F4E78"
DAILY_WIDTHS = [12, 15, 20, 12, 14, 14, 20, 12, 12]
WEEKLY_WIDTHS = [25, 18, 8]
QUAD_WIDTHS = [25, 25, 20, 22, 14, 18]
DEPARTMENT_WIDTHS = [15, 12, 12, 22, 22]


def _header_font() -> Font:
    return Font(bold=True, color="FFFFFF")


def _header_fill(hex_color: str) -> PatternFill:
    return PatternFill("solid", fgColor=hex_color)


def _style_sheet(ws, col_widths: list[int], header_color: str = HEADER_COLOR) -> None:
    """Apply bold header, color, frozen row, and column widths."""
    fill = _header_fill(header_color)
    font = _header_font()
    for cell in ws[1]:
        cell.font = font
        cell.fill = fill
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=False)
    ws.freeze_panes = "A2"
    for i, width in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width


def _write_sheet(wb, title: str, headers: list[str], rows: list[list], col_widths: list[int]) -> None:
    ws = wb.create_sheet(title)
    ws.append(headers)
    for row in rows:
        ws.append(row)
    _style_sheet(ws, col_widths)


# ══════════════════════════════════════════════════════════════════════════════
# DATA
# ══════════════════════════════════════════════════════════════════════════════

def quarter_weekdays(start: date = QUARTER_START, end: date = QUARTER_END) -> list[date]:
    days = []
    current = start
    while current <= end:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


def _daily_rows(rng: random.Random, days: list[date]) -> list[list]:
    rows = []
    for name, department in EMPLOYEES:
        for day in days:
            engagement = rng.random() * 0.7 + 0.3
            posts = int(rng.random() * 3 * engagement)
            comments = int(rng.random() * 8 * engagement)
            reactions = int(rng.random() * 15 * engagement)
            shares = int(rng.random() * 2 * engagement)
            week, _ = week_number(day)
            rows.append(
                [
                    day,
                    department,
                    name,
                    posts,
                    comments,
                    reactions,
                    shares,
                    daily_points(posts, comments, reactions, shares),
                    week,
                ]
            )
    return rows


def _weekly_rows(daily: list[list]) -> list[list]:
    totals: dict[str, int] = {name: 0 for name, _ in EMPLOYEES}
    for row in daily:
        totals[row[2]] += row[7]
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [[name, points, rank] for rank, (name, points) in enumerate(ranked, start=1)]


def _quad_rows(rng: random.Random, weekly: list[list]) -> list[list]:
    points = {row[0]: row[1] for row in weekly}
    rows = []
    for name, _ in EMPLOYEES:
        ve_score = min(100, points[name] // 10)
        event_score = int(rng.random() * 40 + 60)
        survey_score = int(rng.random() * 30 + 70)
        score = weighted_score(event_score, ve_score, survey_score)
        rows.append(
            [name, event_score, ve_score, survey_score, score, EngagementLevel.from_score(score).value]
        )
    return rows


def _department_rows(weekly: list[list], quad: list[list]) -> list[list]:
    points = {row[0]: row[1] for row in weekly}
    scores = {row[0]: row[4] for row in quad}
    rows = []
    for department in DEPARTMENTS:
        members = [name for name, dept in EMPLOYEES if dept == department]
        total = sum(points[name] for name in members)
        average_points = total / len(members) if members else 0
        average_score = sum(scores[name] for name in members) / len(members) if members else 0
        rows.append([department, len(members), total, round(average_points, 2), round(average_score, 2)])
    rows.sort(key=lambda row: row[2], reverse=True)
    return rows


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def build_sample_workbook(seed: int = 42) -> bytes:
    """Return the sample tracker as .xlsx bytes."""
    rng = random.Random(seed)
    daily = _daily_rows(rng, quarter_weekdays())
    weekly = _weekly_rows(daily)
    quad = _quad_rows(rng, weekly)

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    _write_sheet(wb, "Daily VE tracker", DAILY_HEADERS, daily, DAILY_WIDTHS)
    _write_sheet(wb, "VE Weekly Summary", WEEKLY_HEADERS, weekly, WEEKLY_WIDTHS)
    _write_sheet(wb, "Quad Engagement Scores", QUAD_HEADERS, quad, QUAD_WIDTHS)
    _write_sheet(wb, "Department Summary", DEPARTMENT_HEADERS, _department_rows(weekly, quad), DEPARTMENT_WIDTHS)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def sample_download_headers() -> dict[str, str]:
    return {
        "Content-Disposition": f"attachment; filename={SAMPLE_FILENAME}",
        "Content-Type": XLSX_MIME_TYPE,
    }
