"""
leave.py — leave transactions and leave balance summaries

Both mappers drop rows with no identity at all; every other field degrades to
an empty string, 0 or None.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from hr_sheets.headers import record_headers, resolve_fields
from hr_sheets.models import LeaveSummary, LeaveTransaction
from hr_sheets.normalize import clean_text, to_date, to_number

EMPLOYEE_ID_CANDIDATES = ("employeeid", "empid", "employeeno", "id")

TRANSACTION_FIELDS = {
    "employee_id": EMPLOYEE_ID_CANDIDATES,
    "name": ("employeename", "name"),
    "leave_type": ("leavetypename", "leavetype"),
    "date_filed": ("datefiled",),
    "date_from": ("datefrom",),
    "date_to": ("dateto",),
    "with_pay_days": ("withpaynoofdays", "withpaydays"),
    "without_pay_days": ("woutpaynoofdays", "withoutpaydays", "woutpaydays"),
    "reason": ("reason",),
    "status": ("leavestatus", "status"),
    "reject_reason": ("rejectreason",),
    "date_approved_supervisor": ("dateapprovedsupervisor",),
    "date_rejected_supervisor": ("daterejectedsupervisor",),
}

SUMMARY_FIELDS = {
    "employee_id": EMPLOYEE_ID_CANDIDATES,
    "last_name": ("lastname",),
    "first_name": ("firstname",),
    "middle_name": ("middlename",),
    "department": ("department", "dept"),
    "hire_date": ("hiredate",),
    "regularization_date": ("regularizationdate",),
    "leave_type": ("leavetype", "leavetypename"),
    "used_during_range": ("leavesusedduringdaterange", "leavesused"),
    "total_available_balance_ytd": ("totalavailablebalanceytd", "availablebalance"),
    "is_active": ("isactive",),
}

Records = Sequence[Mapping[str, Any]]


def map_leave_transactions(records: Records) -> tuple[LeaveTransaction, ...]:
    # a bare "reason" candidate would otherwise land on RejectReason
    field_map = resolve_fields(record_headers(records), TRANSACTION_FIELDS).drop_if_shared("reason", "reject_reason")
    transactions: list[LeaveTransaction] = []

    for record in records:
        values = field_map.extract(record)
        employee_id = clean_text(values["employee_id"])
        name = clean_text(values["name"])
        if not employee_id and not name:
            continue
        transactions.append(
            LeaveTransaction(
                employee_id=employee_id,
                name=name,
                leave_type=clean_text(values["leave_type"]),
                date_filed=to_date(values["date_filed"]),
                date_from=to_date(values["date_from"]),
                date_to=to_date(values["date_to"]),
                with_pay_days=to_number(values["with_pay_days"]),
                without_pay_days=to_number(values["without_pay_days"]),
                reason=clean_text(values["reason"]),
                status=clean_text(values["status"]),
                reject_reason=clean_text(values["reject_reason"]),
                date_approved_supervisor=to_date(values["date_approved_supervisor"]),
                date_rejected_supervisor=to_date(values["date_rejected_supervisor"]),
            )
        )
    return tuple(transactions)


def map_leave_summaries(records: Records) -> tuple[LeaveSummary, ...]:
    """Rows need an employee id or at least one name part."""
    field_map = resolve_fields(record_headers(records), SUMMARY_FIELDS)
    summaries: list[LeaveSummary] = []

    for record in records:
        values = field_map.extract(record)
        employee_id = clean_text(values["employee_id"])
        last_name = clean_text(values["last_name"])
        first_name = clean_text(values["first_name"])
        if not employee_id and not last_name and not first_name:
            continue
        summaries.append(
            LeaveSummary(
                employee_id=employee_id,
                last_name=last_name,
                first_name=first_name,
                middle_name=clean_text(values["middle_name"]),
                department=clean_text(values["department"]),
                hire_date=to_date(values["hire_date"]),
                regularization_date=to_date(values["regularization_date"]),
                leave_type=clean_text(values["leave_type"]),
                used_during_range=to_number(values["used_during_range"]),
                total_available_balance_ytd=to_number(values["total_available_balance_ytd"]),
                is_active=clean_text(values["is_active"]),
            )
        )
    return tuple(summaries)
