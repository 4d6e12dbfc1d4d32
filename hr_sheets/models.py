"""Immutable domain records produced by the mappers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from hr_sheets.normalize import normalize_header

CYOD_TAG_RE = re.compile(r"cyod|change ownership to employee|sold")


# ══════════════════════════════════════════════════════════════════════════════
# ENGAGEMENT
# ══════════════════════════════════════════════════════════════════════════════

class EngagementLevel(Enum):
    HIGHLY_ENGAGED = "Highly Engaged"
    ENGAGED = "Engaged"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    AT_RISK = "At-Risk"

    @classmethod
    def from_score(cls, weighted_score: float) -> "EngagementLevel":
        if weighted_score >= 85:
            return cls.HIGHLY_ENGAGED
        if weighted_score >= 70:
            return cls.ENGAGED
        if weighted_score >= 50:
            return cls.NEEDS_IMPROVEMENT
        return cls.AT_RISK

    @classmethod
    def parse(cls, label: Any) -> "EngagementLevel | None":
        key = normalize_header(label)
        if not key:
            return None
        for level in cls:
            if normalize_header(level.value) == key:
                return level
        return None


@dataclass(frozen=True)
class DailyActivity:
    date: date
    week: int
    year: int
    employee_name: str
    department: str
    posts_created: int
    comments_made: int
    reactions_given: int
    posts_shared: int
    daily_points: int


@dataclass(frozen=True)
class EngagementEmployee:
    id: str
    name: str
    department: str
    daily_points: int
    weekly_points: int
    rank: int
    event_score: int
    ve_score: int
    survey_score: int
    weighted_score: float
    engagement_level: EngagementLevel
    level_from_source: bool = False


# ══════════════════════════════════════════════════════════════════════════════
# CERTIFICATIONS
# ══════════════════════════════════════════════════════════════════════════════

class CertificationStatus(Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    IN_PROGRESS = "In Progress"
    UNKNOWN = "Unknown"


class EmploymentStatus(Enum):
    ACTIVE = "Active"
    RESIGNED = "Resigned"
    TRIAL = "Trial"


@dataclass(frozen=True)
class CertificationRecord:
    employee_no: str
    employee: str
    department: str
    certification: str
    certification_id: str
    provider: str
    type: str
    issue_date: date | None
    expiry_date: date | None
    status: CertificationStatus
    status_text: str
    company_paid: bool
    bond_months: int
    bond_start: date | None
    bond_end: date | None
    remarks: str
    employment_status: EmploymentStatus
    sheet_name: str = ""

    @property
    def employee_key(self) -> str:
        return self.employee_no or self.employee


# ══════════════════════════════════════════════════════════════════════════════
# LEAVE
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LeaveTransaction:
    employee_id: str
    name: str
    leave_type: str
    date_filed: date | None = None
    date_from: date | None = None
    date_to: date | None = None
    with_pay_days: float = 0.0
    without_pay_days: float = 0.0
    reason: str = ""
    status: str = ""
    reject_reason: str = ""
    date_approved_supervisor: date | None = None
    date_rejected_supervisor: date | None = None

    @property
    def employee_key(self) -> str:
        return self.employee_id or self.name

    @property
    def total_days(self) -> float:
        return self.with_pay_days + self.without_pay_days

    @property
    def effective_date(self) -> date | None:
        return self.date_from or self.date_filed or self.date_to


@dataclass(frozen=True)
class LeaveSummary:
    employee_id: str
    last_name: str
    first_name: str
    middle_name: str = ""
    department: str = ""
    hire_date: date | None = None
    regularization_date: date | None = None
    leave_type: str = ""
    used_during_range: float = 0.0
    total_available_balance_ytd: float = 0.0
    is_active: str = ""

    @property
    def name(self) -> str:
        return " ".join(part for part in (self.first_name, self.middle_name, self.last_name) if part)

    @property
    def label(self) -> str:
        return f"{self.last_name}, {self.first_name}"

    @property
    def employee_key(self) -> str:
        return self.employee_id or self.name


# ══════════════════════════════════════════════════════════════════════════════
# OVERTIME
# ══════════════════════════════════════════════════════════════════════════════

class OTType(Enum):
    OT = "OT"
    ND = "ND"
    RD = "RD"
    LH_SH = "LH/SH"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class OTRecord:
    employee_id: str
    name: str
    team: str
    ot_type: OTType
    ot_type_raw: str
    hours: float
    amount: float
    ot_type_description: str = ""
    rate_label: str = ""
    hourly_rate: float | None = None
    period: str = ""
    month: str = ""
    month_abbr: str = ""
    type: str = ""
    type_description: str = ""

    @property
    def employee_key(self) -> str:
        return self.employee_id or self.name


# ══════════════════════════════════════════════════════════════════════════════
# LAPTOPS
# ══════════════════════════════════════════════════════════════════════════════

class LaptopStatus(Enum):
    ACTIVE = "Active"
    SPARE = "Spare"
    ISSUES = "Issues"
    INCOMING = "Incoming"


class LaptopBucket(Enum):
    OWNED = "owned"
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    REPLACEMENT = "replacement"
    NEW = "new"


@dataclass(frozen=True)
class LaptopInventoryRow:
    """
    One inventory row. Source columns vary widely between workbooks, so the
    full row is kept in ``fields`` next to the handful of resolved columns.
    """

    asset_tag: str
    brand: str
    model: str
    department: str
    status: LaptopStatus
    age_years: int
    serial: str = ""
    custodian: str = ""
    tag: str = ""
    maintenance_history: str = ""
    purchase_date: date | None = None
    deployment_date: date | None = None
    fields: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_cyod(self) -> bool:
        return bool(CYOD_TAG_RE.search(self.tag.lower()))

    @property
    def replacement_scheduled(self) -> bool:
        return "replace" in self.tag.lower()


@dataclass(frozen=True)
class LaptopIssue:
    issue_type: str
    status: str
    asset_tag: str = ""
    model: str = ""
    serial: str = ""
    reported_date: date | None = None

    @property
    def resolved(self) -> bool:
        blob = f"{self.status} {self.issue_type}".lower()
        return bool(re.search(r"repaired|fixed|redeployed", blob))


@dataclass(frozen=True)
class IncomingLaptop:
    purpose: str
    asset_tag: str = ""
    brand: str = ""
    model: str = ""
    expected_date: date | None = None
    employee: str = ""


@dataclass(frozen=True)
class CyodDevice:
    employee: str
    brand: str = ""
    device_type: str = ""
    model: str = ""
    status: str = ""
    cost: float | None = None


@dataclass(frozen=True)
class Peripheral:
    item: str
    quantity: float
    available: float


@dataclass(frozen=True)
class LaptopWorkbook:
    """Everything read from one laptop workbook, after cross-marking."""

    inventory: tuple[LaptopInventoryRow, ...] = ()
    issues: tuple[LaptopIssue, ...] = ()
    incoming: tuple[IncomingLaptop, ...] = ()
    cyod: tuple[CyodDevice, ...] = ()
    peripherals: tuple[Peripheral, ...] = ()
