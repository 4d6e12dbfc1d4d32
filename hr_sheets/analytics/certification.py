"""
certification.py — certification roll-ups

Every view takes ``today`` explicitly; the records themselves only carry the
status that was derived when they were mapped.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from hr_sheets.mappers.certification import is_bond_active
from hr_sheets.models import CertificationRecord, CertificationStatus

EXPIRING_WITHIN_DAYS = 30


@dataclass(frozen=True)
class CertificationOverview:
    total: int
    employees: int
    by_status: dict[str, int]
    by_provider: dict[str, int]
    by_department: dict[str, int]
    by_employment_status: dict[str, int]
    company_paid: int
    bond_active: int
    expiring_soon: tuple[CertificationRecord, ...]


def days_until(target: date | None, today: date) -> int | None:
    """Signed day count; negative once the date has passed."""
    if target is None:
        return None
    return (target - today).days


def describe_days(target: date | None, today: date, event: str = "expiry") -> str:
    days = days_until(target, today)
    if days is None:
        return ""
    if days < 0:
        return f"{abs(days)} days since {event}"
    return f"{days} days remaining"


def _expires_within(record: CertificationRecord, today: date, days: int) -> bool:
    if record.status is CertificationStatus.EXPIRED:
        return False
    remaining = days_until(record.expiry_date, today)
    return remaining is not None and 0 <= remaining <= days


def certification_overview(
    records: Sequence[CertificationRecord],
    today: date,
    expiring_within: int = EXPIRING_WITHIN_DAYS,
) -> CertificationOverview:
    expiring = sorted(
        (record for record in records if _expires_within(record, today, expiring_within)),
        key=lambda record: record.expiry_date,
    )
    return CertificationOverview(
        total=len(records),
        employees=len({record.employee_key for record in records}),
        by_status=dict(Counter(record.status.value for record in records).most_common()),
        by_provider=dict(Counter(record.provider or "Unknown" for record in records).most_common()),
        by_department=dict(Counter(record.department for record in records).most_common()),
        by_employment_status=dict(Counter(record.employment_status.value for record in records).most_common()),
        company_paid=sum(1 for record in records if record.company_paid),
        bond_active=sum(1 for record in records if is_bond_active(record, today)),
        expiring_soon=tuple(expiring),
    )


def related_certifications(
    records: Sequence[CertificationRecord],
    record: CertificationRecord,
) -> tuple[CertificationRecord, ...]:
    """All certifications held by the same employee, the given record included."""
    key = record.employee_key
    return tuple(other for other in records if other.employee_key == key)


def filter_certifications(
    records: Sequence[CertificationRecord],
    search: str = "",
    status: CertificationStatus | None = None,
    provider: str | None = None,
) -> tuple[CertificationRecord, ...]:
    query = search.strip().lower()
    return tuple(
        record
        for record in records
        if (
            not query
            or query in record.employee.lower()
            or query in record.certification.lower()
            or query in record.employee_no.lower()
        )
        and (status is None or record.status is status)
        and (provider is None or record.provider == provider)
    )
