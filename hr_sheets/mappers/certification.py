"""
certification.py — certification trackers, one sheet per provider

Certification workbooks usually keep one sheet per provider or per
employment group ("Resigned", "Trial"), each with its own column layout, so
headers are resolved per sheet rather than once per workbook.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping, Sequence

from hr_sheets.headers import record_headers, resolve_fields
from hr_sheets.models import CertificationRecord, CertificationStatus, EmploymentStatus
from hr_sheets.normalize import add_months, clean_text, to_boolean, to_date, to_int

DEFAULT_DEPARTMENT = "Unknown"

CERTIFICATION_FIELDS = {
    "employee_no": ("employeeno", "employeenumber", "empno", "employeeid", "staffno", "staffid"),
    "employee": ("employeename", "employee", "name", "staffname"),
    "department": ("department", "dept", "gbu", "bugbu", "businessunit", "team"),
    "certification": ("certification", "certificate", "credential", "course", "title"),
    "provider": ("provider", "vendor", "issuer", "authority", "platform", "providername"),
    "type": ("type", "category", "track", "level", "specialization"),
    "issue_date": ("issuedate", "dateissued", "obtained", "dateofissue", "startdate", "datetaken"),
    "expiry_date": ("expirydate", "expirationdate", "validuntil", "expiry", "enddate"),
    "status": ("status", "state", "active", "result", "progress"),
    "company_paid": ("companypaid", "sponsored", "companysponsored", "bond", "company", "paid"),
    "bond_months": ("bondmonths", "bonddurationmonths", "bondperiod", "months", "durationmonths"),
    "bond_start": ("bondstart", "bondstartdate", "bondfrom", "contractstart"),
    "bond_end": ("bondend", "bondenddate", "bonduntil", "contractend", "bondexpiration"),
    "remarks": ("remarks", "notes", "comment"),
    "certification_id": ("certificationidnumber", "certid", "certificationid", "certidnumber", "idnumber"),
}

BOND_MONTHS_RE = re.compile(r"(\d+)\s*(?:months|month|mos|mo)")
SPONSOR_REMARK_RE = re.compile(r"company|sponsor|bond", re.IGNORECASE)
ID_LIKE_RE = re.compile(r"^[0-9\-\s]{2,20}$")
LETTER_RE = re.compile(r"[a-zA-Z]")

Records = Sequence[Mapping[str, Any]]


def parse_bond_months(text: Any) -> int:
    """Read "24 months" / "6 mos" style durations out of free text."""
    match = BOND_MONTHS_RE.search(clean_text(text).lower())
    return int(match.group(1)) if match else 0


def looks_like_id(value: str) -> bool:
    return bool(ID_LIKE_RE.match(value))


def looks_like_words(value: str) -> bool:
    return bool(LETTER_RE.search(value)) and len(value.strip()) > 1


def derive_status(status_text: str, expiry_date: date | None, today: date) -> CertificationStatus:
    text = status_text.lower()
    if "inactive" in text or "expired" in text:
        return CertificationStatus.EXPIRED
    if "in progress" in text or "progress" in text or "training" in text:
        return CertificationStatus.IN_PROGRESS
    if "active" in text:
        return CertificationStatus.ACTIVE
    if expiry_date is None:
        return CertificationStatus.UNKNOWN
    return CertificationStatus.ACTIVE if expiry_date >= today else CertificationStatus.EXPIRED


def employment_status_from_sheet(sheet_name: str) -> EmploymentStatus:
    name = sheet_name.lower()
    if "resigned" in name:
        return EmploymentStatus.RESIGNED
    if "trial" in name:
        return EmploymentStatus.TRIAL
    return EmploymentStatus.ACTIVE


def is_bond_active(record: CertificationRecord, today: date) -> bool:
    """
    A bond binds only company-paid certifications. The first clause whose
    inputs are present decides: the explicit bond window, then issue date
    plus bond months, then the bond end alone.
    """
    if not record.company_paid:
        return False
    if record.bond_start and record.bond_end:
        return record.bond_start <= today <= record.bond_end
    if record.issue_date and record.bond_months:
        return today <= add_months(record.issue_date, record.bond_months)
    if record.bond_end:
        return today <= record.bond_end
    return False


def _provider_and_id(raw_provider: str, certification_id: str, sheet_name: str) -> tuple[str, str]:
    provider = raw_provider or sheet_name
    if not certification_id and raw_provider and looks_like_id(raw_provider):
        return sheet_name or raw_provider, raw_provider
    if certification_id and provider and looks_like_id(provider) and looks_like_words(certification_id):
        return certification_id, provider
    return provider, certification_id


def map_certifications(records: Records, sheet_name: str, today: date) -> tuple[CertificationRecord, ...]:
    """Map one sheet's rows. Rows with neither an employee nor a certification are dropped."""
    field_map = resolve_fields(record_headers(records), CERTIFICATION_FIELDS)
    sheet_label = clean_text(sheet_name)
    employment_status = employment_status_from_sheet(sheet_label)
    mapped: list[CertificationRecord] = []

    for record in records:
        values = field_map.extract(record)
        employee = clean_text(values["employee"])
        certification = clean_text(values["certification"])
        if not employee and not certification:
            continue

        issue_date = to_date(values["issue_date"])
        expiry_date = to_date(values["expiry_date"])
        remarks = clean_text(values["remarks"])
        status_text = clean_text(values["status"])
        explicit_bond_end = to_date(values["bond_end"])

        company_paid = (
            to_boolean(values["company_paid"])
            or explicit_bond_end is not None
            or bool(SPONSOR_REMARK_RE.search(remarks))
        )
        bond_months = to_int(values["bond_months"]) or parse_bond_months(remarks)
        bond_start = to_date(values["bond_start"]) or issue_date
        bond_end = explicit_bond_end
        if bond_end is None and bond_start and bond_months:
            bond_end = add_months(bond_start, bond_months)

        provider, certification_id = _provider_and_id(
            clean_text(values["provider"]),
            clean_text(values["certification_id"]),
            sheet_label,
        )

        mapped.append(
            CertificationRecord(
                employee_no=clean_text(values["employee_no"]),
                employee=employee,
                department=clean_text(values["department"]) or DEFAULT_DEPARTMENT,
                certification=certification,
                certification_id=certification_id,
                provider=provider,
                type=clean_text(values["type"]),
                issue_date=issue_date,
                expiry_date=expiry_date,
                status=derive_status(status_text, expiry_date, today),
                status_text=status_text,
                company_paid=company_paid,
                bond_months=bond_months,
                bond_start=bond_start,
                bond_end=bond_end,
                remarks=remarks,
                employment_status=employment_status,
                sheet_name=sheet_label,
            )
        )
    return tuple(mapped)
