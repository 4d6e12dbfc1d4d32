"""
overtime.py — OT/premium claim rows

Payroll exports put a report banner above the column titles, so the ingest
layer locates the header row with OT_TOKEN_GROUPS before these rows arrive.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from hr_sheets.headers import record_headers, resolve_fields
from hr_sheets.models import OTRecord, OTType
from hr_sheets.normalize import clean_text, parse_month_key, to_number

# One synonym set per logical column, matched exactly against normalized cells.
OT_TOKEN_GROUPS = (
    ("employeeid", "empid", "id", "employeeno", "employee#"),
    ("name", "employeename"),
    ("team", "department", "dept", "bu/gbu", "businessunit", "gbu"),
    ("otpremiumtype", "ottype", "type"),
    ("otpremiumrate", "rate", "premiumrate"),
    ("hourlyrate", "ratehour"),
    ("numberofhours", "hours", "noofhours", "noofhour"),
    ("amount", "phpamount", "totalamount"),
    ("period",),
    ("month",),
    ("typedescription", "description"),
)
OT_MIN_HEADER_SCORE = 3

OT_FIELDS = {
    "employee_id": ("employeeid", "empid", "employeeno", "id"),
    "name": ("name", "employeename"),
    "team": ("team", "department", "bugbu", "dept", "businessunit", "gbu"),
    "ot_type": ("otpremiumtype", "ottype", "type"),
    "ot_type_description": ("ottypedescription", "typedescription"),
    "rate_label": ("otpremiumrate", "premiumrate", "rate"),
    "hourly_rate": ("hourlyrate", "ratehour"),
    "hours": ("numberofhours", "hours", "noofhours", "noofhour"),
    "amount": ("amount", "phpamount", "totalamount"),
    "period": ("period",),
    "month": ("month",),
    "type": ("type",),
    "type_description": ("typedescription", "description"),
}

OT_TOKEN_SPLIT_RE = re.compile(r"[-_\s]+")

Records = Sequence[Mapping[str, Any]]


def canonical_ot_type(raw: Any) -> OTType:
    """
    Canonicalize an OT/premium type code such as "REG-OT", "ND_100" or
    "LH 200%". Tokens are inspected from the end so a trailing category
    wins over a leading qualifier.
    """
    text = clean_text(raw).upper()
    if not text:
        return OTType.UNKNOWN
    tokens = [token for token in OT_TOKEN_SPLIT_RE.split(text) if token]
    for token in reversed(tokens):
        if "OT" in token:
            return OTType.OT
        if "ND" in token:
            return OTType.ND
        if token == "RD":
            return OTType.RD
        if token in ("LH", "SH", "LH/SH"):
            return OTType.LH_SH
    if "OT" in text:
        return OTType.OT
    return OTType.UNKNOWN


def map_ot_records(records: Records) -> tuple[OTRecord, ...]:
    """Drop rows with no identity, and rows where hours and amount are both zero."""
    # bare "rate", "type" and "description" candidates would otherwise land on the OT columns
    field_map = (
        resolve_fields(record_headers(records), OT_FIELDS)
        .drop_if_shared("rate_label", "hourly_rate")
        .drop_if_shared("type", "ot_type")
        .drop_if_shared("type_description", "ot_type_description")
    )
    mapped: list[OTRecord] = []

    for record in records:
        values = field_map.extract(record)
        employee_id = clean_text(values["employee_id"])
        name = clean_text(values["name"])
        if not employee_id and not name:
            continue
        hours = to_number(values["hours"])
        amount = to_number(values["amount"])
        if hours == 0 and amount == 0:
            continue

        ot_type_raw = clean_text(values["ot_type"])
        period = clean_text(values["period"])
        month = clean_text(values["month"])
        month_key = parse_month_key(values["month"]) or parse_month_key(values["period"])
        hourly_rate = to_number(values["hourly_rate"])

        mapped.append(
            OTRecord(
                employee_id=employee_id,
                name=name,
                team=clean_text(values["team"]),
                ot_type=canonical_ot_type(ot_type_raw),
                ot_type_raw=ot_type_raw,
                hours=hours,
                amount=amount,
                ot_type_description=clean_text(values["ot_type_description"]),
                rate_label=clean_text(values["rate_label"]),
                hourly_rate=hourly_rate or None,
                period=period,
                month=month,
                month_abbr=month_key.mon if month_key else "",
                type=clean_text(values["type"]),
                type_description=clean_text(values["type_description"]),
            )
        )
    return tuple(mapped)
