#!/usr/bin/env python3
from __future__ import annotations

from datetime import date
from typing import Any

import pandas as pd
import streamlit as st

from hr_sheets.analytics.certification import certification_overview
from hr_sheets.analytics.engagement import engagement_overview, rank_employees, weekly_analysis
from hr_sheets.analytics.laptop import (
    age_distribution,
    brand_distribution,
    bucket_distribution,
    incoming_by_month,
    laptop_overview,
)
from hr_sheets.analytics.leave import balance_analytics, leave_analytics, monthly_trend, reject_reasons
from hr_sheets.analytics.overtime import aggregate_ot, top_ot_type
from hr_sheets.contracts import to_jsonable
from hr_sheets.ingest import (
    DOMAINS,
    CertificationResult,
    EngagementResult,
    IngestResult,
    LaptopResult,
    LeaveResult,
    OvertimeResult,
    ingest,
)
from hr_sheets.loader import ALL_FORMATS
from hr_sheets.sample import SAMPLE_FILENAME, XLSX_MIME_TYPE, build_sample_workbook

DOMAIN_LABELS = {
    "engagement": "Employee engagement (Viva Engage / quad scores)",
    "certifications": "Certifications & training",
    "leave": "Leave reports",
    "overtime": "OT / premium claims",
    "laptops": "Laptop inventory",
}


@st.cache_data(show_spinner=False)
def sample_workbook_bytes() -> bytes:
    return build_sample_workbook()


def frame(records: Any) -> pd.DataFrame:
    """Records or aggregate rows as a DataFrame with JSON-safe cells."""
    rows = to_jsonable(records)
    if isinstance(rows, dict):
        return pd.DataFrame([{"label": key, "value": value} for key, value in rows.items()])
    return pd.DataFrame(rows)


def render_metrics(pairs: list[tuple[str, Any]]) -> None:
    columns = st.columns(len(pairs))
    for column, (label, value) in zip(columns, pairs):
        column.metric(label, value)


def render_engagement(result: EngagementResult) -> None:
    overview = engagement_overview(result.employees)
    render_metrics(
        [
            ("Participants", overview.total_participants),
            ("Avg daily points", overview.average_daily_points),
            ("Top department", overview.top_department),
            ("Highest scorer", overview.highest_scorer),
        ]
    )
    st.subheader("Engagement levels (%)")
    st.bar_chart(frame(overview.distribution).set_index("label"))
    st.subheader("Employees")
    st.dataframe(frame(rank_employees(result.employees)), use_container_width=True)
    if result.activities:
        st.subheader("Weekly analysis")
        st.dataframe(frame(weekly_analysis(result.activities)), use_container_width=True)


def render_certifications(result: CertificationResult, today: date) -> None:
    overview = certification_overview(result.records, today)
    render_metrics(
        [
            ("Certifications", overview.total),
            ("Employees", overview.employees),
            ("Bonds active", overview.bond_active),
            ("Expiring soon", len(overview.expiring_soon)),
        ]
    )
    st.subheader("By status")
    st.dataframe(frame(overview.by_status), use_container_width=True)
    st.subheader("By provider")
    st.dataframe(frame(overview.by_provider), use_container_width=True)
    st.subheader("Records")
    st.dataframe(frame(result.records), use_container_width=True)


def render_leave(result: LeaveResult) -> None:
    if result.transactions:
        analytics = leave_analytics(result.transactions)
        render_metrics(
            [
                ("Requests", analytics.totals.requests),
                ("Approved", analytics.totals.approved),
                ("Pending", analytics.totals.pending),
                ("Rejected", analytics.totals.rejected),
            ]
        )
        st.subheader("Monthly trend")
        st.dataframe(frame(monthly_trend(result.transactions)), use_container_width=True)
        st.subheader("By leave type")
        st.dataframe(frame(analytics.by_type), use_container_width=True)
        st.subheader("Reject reasons")
        st.dataframe(frame(reject_reasons(result.transactions)), use_container_width=True)
    if result.summaries:
        balances = balance_analytics(result.summaries)
        st.subheader("Balances")
        render_metrics(
            [
                ("Employees", balances.unique_employees),
                ("Avg available", round(balances.average_available, 2)),
                ("Low balances", balances.low_count),
            ]
        )
        st.dataframe(frame(balances.department_averages), use_container_width=True)


def render_overtime(result: OvertimeResult) -> None:
    pivots = aggregate_ot(result.records)
    render_metrics(
        [
            ("Total hours", round(pivots.totals.total_hours, 2)),
            ("Total amount", f"{pivots.totals.total_amount:,.2f}"),
            ("Employees", pivots.totals.employees),
            ("Top OT type", top_ot_type(pivots) or "N/A"),
        ]
    )
    st.subheader("Hours by month and type")
    st.dataframe(frame(pivots.hours_by_month_by_type), use_container_width=True)
    st.subheader("Amount by employee")
    st.dataframe(frame(pivots.amount_by_type_by_employee), use_container_width=True)


def render_laptops(result: LaptopResult, today: date) -> None:
    overview = laptop_overview(result.workbook, today)
    render_metrics(
        [
            ("Laptops", overview.total),
            ("Active", overview.active),
            ("Spare", overview.spare),
            ("Issues", overview.issues),
            ("Incoming", overview.incoming),
        ]
    )
    if overview.spare_low:
        st.warning("Spare stock is low.")
    left, right = st.columns(2)
    left.subheader("Age")
    left.dataframe(frame(age_distribution(result.workbook.inventory)), use_container_width=True)
    right.subheader("Brands")
    right.dataframe(frame(brand_distribution(result.workbook.inventory)), use_container_width=True)
    left.subheader("Buckets")
    left.dataframe(frame(bucket_distribution(result.workbook.inventory)), use_container_width=True)
    right.subheader("Incoming by month")
    right.dataframe(frame(incoming_by_month(result.workbook.incoming)), use_container_width=True)
    st.subheader("Inventory")
    st.dataframe(frame(result.workbook.inventory), use_container_width=True)


def render_result(domain: str, result: IngestResult, today: date) -> None:
    st.caption(
        f"{result.source_name} · {result.detected_format} · "
        + ", ".join(f"{name} ({role})" for name, role in result.sheets.items())
    )
    for warning in result.warnings:
        st.warning(warning)
    if isinstance(result, EngagementResult):
        render_engagement(result)
    elif isinstance(result, CertificationResult):
        render_certifications(result, today)
    elif isinstance(result, LeaveResult):
        render_leave(result)
    elif isinstance(result, OvertimeResult):
        render_overtime(result)
    elif isinstance(result, LaptopResult):
        render_laptops(result, today)


def main() -> None:
    st.set_page_config(page_title="hr-sheets", layout="wide")
    st.title("hr-sheets")

    with st.sidebar:
        domain = st.selectbox("Export type", options=list(DOMAINS), format_func=DOMAIN_LABELS.get)
        today = st.date_input("Reference date", value=date.today())
        st.download_button(
            "Download sample engagement workbook",
            data=sample_workbook_bytes(),
            file_name=SAMPLE_FILENAME,
            mime=XLSX_MIME_TYPE,
        )

    upload = st.file_uploader("Upload a spreadsheet", type=sorted(ext.lstrip(".") for ext in ALL_FORMATS))
    if upload is None:
        st.info("Upload a file to begin.")
        return

    try:
        result = ingest(domain, upload.getvalue(), today, filename=upload.name)
    except Exception as exc:
        st.error(str(exc))
        return

    render_result(domain, result, today)


if __name__ == "__main__":
    main()
