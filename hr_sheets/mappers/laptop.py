"""
laptop.py — laptop inventory workbooks

The inventory sheet drives everything. Issues, incoming units and CYOD
devices come from their own sheets when the workbook has them, and are
otherwise derived from the inventory TAG and MAINTENANCE HISTORY columns.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Sequence

from dateutil.relativedelta import relativedelta

from hr_sheets.headers import record_headers, resolve_fields
from hr_sheets.models import (
    CyodDevice,
    IncomingLaptop,
    LaptopBucket,
    LaptopInventoryRow,
    LaptopIssue,
    LaptopStatus,
    Peripheral,
)
from hr_sheets.normalize import (
    clean_text,
    full_years_between,
    normalize_header,
    normalize_scalar,
    to_date,
    to_number,
)

UNKNOWN = "Unknown"
REPLACEMENT_AGE_YEARS = 7

INVENTORY_FIELDS = {
    "asset_tag": ("assetcode", "assettag"),
    "serial": ("serialnum", "serialnumber", "serial"),
    "brand": ("brand", "make"),
    "model": ("model",),
    "department": ("vertical", "department", "dept"),
    "custodian": ("custodian", "assignedto", "employee"),
    "tag": ("tag",),
    "maintenance_history": ("maintenancehistory",),
    "purchase_date": ("invoicedate", "purchasedate"),
    "deployment_date": ("assetdeploymnt", "assetdeployment", "deploymentdate"),
    "employee_date": ("empdate",),
    "age": ("laptopage",),
}
ISSUE_FIELDS = {
    "asset_tag": ("assetcode", "assettag", "asset", "code", "id"),
    "model": ("model",),
    "serial": ("serialnum", "serialnumber", "serial", "sn"),
    "issue_type": ("issuebnext", "issuetype", "problem", "category", "maintenancehistory", "issue"),
    "status": ("tag", "type", "status", "state"),
    "reported_date": ("datereportedissuebnext", "reporteddate", "date", "opened"),
}
INCOMING_FIELDS = {
    "asset_tag": ("assetcode", "asset", "id"),
    "brand": ("brand", "make"),
    "model": ("model",),
    "comments": ("comments", "notes"),
    "purpose": ("purpose", "reason"),
    "start_date": ("newhirestartdate",),
    "invoice_date": ("invoicedate",),
    "expected_date": ("expecteddate", "eta", "arrival"),
    "employee": ("employee", "name"),
}
CYOD_FIELDS = {
    "employee": ("employee", "name"),
    "brand": ("brand", "make"),
    "device_type": ("devicetype", "type"),
    "model": ("model",),
    "status": ("status", "state"),
    "cost": ("cost", "price"),
}
PERIPHERAL_FIELDS = {
    "item": ("item", "type"),
    "quantity": ("quantity", "qty"),
    "available": ("available", "instock"),
}

PLACEHOLDER_CUSTODIAN_RE = re.compile(r"^(no custodian|0$|#ref!?$|dead unit|defective|marketing$)", re.IGNORECASE)
PLACEHOLDER_CUSTODIAN_CODES = frozenset({"CH", "RC"})
AGE_NUMBER_RE = re.compile(r"(\d+\.?\d*)")
NUMERIC_TEXT_RE = re.compile(r"^\d+(?:\.\d+)?$")

# TAG text -> status, first match wins; None means "depends on custodian"
TAG_STATUS_RULES = (
    (re.compile(r"spare\s*unit|spare|common area"), LaptopStatus.SPARE),
    (re.compile(r"deployed?\s*unit"), LaptopStatus.ACTIVE),
    (re.compile(r"cyod|change ownership to employee|sold"), None),
    (re.compile(r"eol|beyond\s*repair|under repair|for repair"), LaptopStatus.ISSUES),
    (re.compile(r"test eqpt|borrowed"), LaptopStatus.SPARE),
)

MAINTENANCE_SIGNAL_RE = re.compile(
    r"eol|beyond repair|dead unit|under repair|defective|for repair|nexus|broken|battery|keyboard|screen|lcd|overheating"
)
ISSUE_TYPE_RULES = (
    (re.compile(r"battery|charging"), "Battery Issue"),
    (re.compile(r"keyboard|key"), "Keyboard Issue"),
    (re.compile(r"screen|lcd|display"), "Display Issue"),
    (re.compile(r"overheating|shutdown|fan"), "Thermal Issue"),
    (re.compile(r"hard.?drive|hdd|ssd"), "Storage Issue"),
    (re.compile(r"beyond repair|eol"), "End of Life"),
)
BEYOND_REPAIR_RE = re.compile(r"beyond repair|eol|dead")

Records = Sequence[Mapping[str, Any]]


# ══════════════════════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════════════════════

def clean_custodian(value: Any) -> str:
    """Placeholder custodian entries ("No custodian", "#REF!", "CH", ...) count as unassigned."""
    text = clean_text(value)
    if not text or text in PLACEHOLDER_CUSTODIAN_CODES or PLACEHOLDER_CUSTODIAN_RE.match(text):
        return ""
    return text


def status_from_tag(tag: str, custodian: str) -> LaptopStatus:
    text = tag.lower()
    assigned = LaptopStatus.ACTIVE if custodian else LaptopStatus.SPARE
    for pattern, status in TAG_STATUS_RULES:
        if pattern.search(text):
            return status or assigned
    return assigned


def _age_years(raw_age: Any, purchase_date: date | None, today: date) -> int:
    match = AGE_NUMBER_RE.search(clean_text(raw_age))
    if match:
        return int(float(match.group(1)))
    return full_years_between(purchase_date, today)


def _is_inventory_row(asset_tag: str) -> bool:
    return bool(asset_tag) and normalize_header(asset_tag) != "assetcode" and "#REF!" not in asset_tag.upper()


def map_inventory(records: Records, today: date) -> tuple[LaptopInventoryRow, ...]:
    """Rows without an asset tag, repeated header rows and #REF! rows are skipped."""
    # "tag" would otherwise fall back onto Asset Tag
    field_map = resolve_fields(record_headers(records), INVENTORY_FIELDS).drop_if_shared("tag", "asset_tag")
    rows: list[LaptopInventoryRow] = []

    for record in records:
        values = field_map.extract(record)
        asset_tag = clean_text(values["asset_tag"])
        if not _is_inventory_row(asset_tag):
            continue

        custodian = clean_custodian(values["custodian"])
        tag = clean_text(values["tag"])
        department = clean_text(values["department"])
        purchase_date = to_date(values["purchase_date"])

        rows.append(
            LaptopInventoryRow(
                asset_tag=asset_tag,
                brand=clean_text(values["brand"]) or UNKNOWN,
                model=clean_text(values["model"]) or UNKNOWN,
                department=UNKNOWN if department in ("", "0") else department,
                status=status_from_tag(tag, custodian),
                age_years=_age_years(values["age"], purchase_date, today),
                serial=clean_text(values["serial"]),
                custodian=custodian,
                tag=tag,
                maintenance_history=clean_text(values["maintenance_history"]),
                purchase_date=purchase_date,
                deployment_date=to_date(values["deployment_date"]) or to_date(values["employee_date"]),
                fields={str(key): normalize_scalar(value) for key, value in record.items()},
            )
        )
    return tuple(rows)


# ══════════════════════════════════════════════════════════════════════════════
# ISSUES
# ══════════════════════════════════════════════════════════════════════════════

def classify_issue_type(maintenance_history: str) -> str:
    text = maintenance_history.lower()
    for pattern, label in ISSUE_TYPE_RULES:
        if pattern.search(text):
            return label
    return "Hardware Issue"


def map_issues(records: Records) -> tuple[LaptopIssue, ...]:
    field_map = resolve_fields(record_headers(records), ISSUE_FIELDS)
    issues: list[LaptopIssue] = []
    for record in records:
        values = field_map.extract(record)
        issues.append(
            LaptopIssue(
                issue_type=clean_text(values["issue_type"]) or UNKNOWN,
                status=clean_text(values["status"]) or "In Repair",
                asset_tag=clean_text(values["asset_tag"]),
                model=clean_text(values["model"]),
                serial=clean_text(values["serial"]),
                reported_date=to_date(values["reported_date"]),
            )
        )
    return tuple(issues)


def derive_issues(inventory: Sequence[LaptopInventoryRow]) -> tuple[LaptopIssue, ...]:
    """Issues implied by inventory TAG and maintenance history text."""
    issues: list[LaptopIssue] = []
    for row in inventory:
        blob = f"{row.tag} {row.maintenance_history}".lower()
        if not MAINTENANCE_SIGNAL_RE.search(blob):
            continue
        history = row.maintenance_history.lower()
        issues.append(
            LaptopIssue(
                issue_type=classify_issue_type(history),
                status="Beyond Repair" if BEYOND_REPAIR_RE.search(history) else "Under Repair",
                asset_tag=row.asset_tag,
                model=row.model,
                serial=row.serial,
            )
        )
    return tuple(issues)


# ══════════════════════════════════════════════════════════════════════════════
# INCOMING
# ══════════════════════════════════════════════════════════════════════════════

def incoming_purpose(comments: str, start_date: date | None) -> str:
    if re.search(r"new\s*hire", comments, re.IGNORECASE) or start_date:
        return "New Hire"
    if re.search(r"replace", comments, re.IGNORECASE):
        return "Replacement"
    return "Spare"


def map_incoming(records: Records) -> tuple[IncomingLaptop, ...]:
    field_map = resolve_fields(record_headers(records), INCOMING_FIELDS)
    incoming: list[IncomingLaptop] = []
    for record in records:
        values = field_map.extract(record)
        start_date = to_date(values["start_date"])
        brand = clean_text(values["brand"])
        purpose = clean_text(values["purpose"]) or incoming_purpose(clean_text(values["comments"]), start_date)
        incoming.append(
            IncomingLaptop(
                purpose=purpose,
                asset_tag=clean_text(values["asset_tag"]),
                brand=brand,
                model=clean_text(values["model"]) or brand,
                expected_date=start_date or to_date(values["invoice_date"]) or to_date(values["expected_date"]),
                employee=clean_text(values["employee"]),
            )
        )
    return tuple(incoming)


def derive_incoming(inventory: Sequence[LaptopInventoryRow], today: date) -> tuple[IncomingLaptop, ...]:
    """Unassigned purchases from the last month, and units with a future deployment date."""
    recent_threshold = today - relativedelta(months=1)
    incoming: list[IncomingLaptop] = []
    for row in inventory:
        recent_unassigned = (
            row.purchase_date is not None and row.purchase_date > recent_threshold and not row.custodian
        )
        future_deployment = row.deployment_date is not None and row.deployment_date > today
        if not (recent_unassigned or future_deployment):
            continue
        incoming.append(
            IncomingLaptop(
                purpose="Spare",
                asset_tag=row.asset_tag,
                brand=row.brand,
                model=row.model,
                expected_date=row.deployment_date or row.purchase_date,
            )
        )
    return tuple(incoming)


# ══════════════════════════════════════════════════════════════════════════════
# CYOD & PERIPHERALS
# ══════════════════════════════════════════════════════════════════════════════

def map_cyod(records: Records) -> tuple[CyodDevice, ...]:
    field_map = resolve_fields(record_headers(records), CYOD_FIELDS)
    devices: list[CyodDevice] = []
    for record in records:
        values = field_map.extract(record)
        cost = to_number(values["cost"])
        devices.append(
            CyodDevice(
                employee=clean_text(values["employee"]),
                brand=clean_text(values["brand"]),
                device_type=clean_text(values["device_type"]),
                model=clean_text(values["model"]),
                status=clean_text(values["status"]),
                cost=cost or None,
            )
        )
    return tuple(devices)


def derive_cyod(inventory: Sequence[LaptopInventoryRow]) -> tuple[CyodDevice, ...]:
    return tuple(
        CyodDevice(
            employee=row.custodian,
            brand=row.brand,
            device_type=row.model,
            model=row.model,
            status="Sold" if "sold" in row.tag.lower() else "Deployed",
        )
        for row in inventory
        if row.is_cyod
    )


def _numeric_cell(value: Any) -> float | None:
    value = normalize_scalar(value)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = clean_text(value)
    return float(text) if NUMERIC_TEXT_RE.match(text) else None


def _loose_peripherals(record: Mapping[str, Any]) -> list[Peripheral]:
    entries = list(record.items())
    if len(entries) == 2:
        (_, first), (_, second) = entries
        for label, number in ((first, second), (second, first)):
            count = _numeric_cell(number)
            if _numeric_cell(label) is None and clean_text(label) and count is not None:
                return [Peripheral(clean_text(label), count, count)]
    found: list[Peripheral] = []
    for header, value in entries:
        count = _numeric_cell(value)
        if count is not None and clean_text(header):
            found.append(Peripheral(clean_text(header), count, count))
    return found


def map_peripherals(records: Records) -> tuple[Peripheral, ...]:
    """
    Structured Item/Quantity/Available rows when the sheet has an item
    column; otherwise every numeric cell is read as a count labelled by its
    header, and two-column rows as label/count pairs.
    """
    field_map = resolve_fields(record_headers(records), PERIPHERAL_FIELDS)
    peripherals: list[Peripheral] = []
    if field_map.header("item") is not None:
        for record in records:
            values = field_map.extract(record)
            item = clean_text(values["item"])
            if item:
                peripherals.append(
                    Peripheral(item, to_number(values["quantity"]), to_number(values["available"]))
                )
        return tuple(peripherals)

    for record in records:
        peripherals.extend(_loose_peripherals(record))
    return tuple(peripherals)


# ══════════════════════════════════════════════════════════════════════════════
# CROSS-MARKING & BUCKETS
# ══════════════════════════════════════════════════════════════════════════════

def cross_mark(
    inventory: Sequence[LaptopInventoryRow],
    issues: Sequence[LaptopIssue],
    incoming: Sequence[IncomingLaptop],
) -> tuple[LaptopInventoryRow, ...]:
    """
    Mark units with an unresolved issue (matched by asset tag, then serial)
    as Issues, and units listed as incoming as Incoming.
    """
    by_asset = {issue.asset_tag: issue for issue in issues if issue.asset_tag}
    by_serial = {issue.serial: issue for issue in issues if issue.serial}
    incoming_tags = {unit.asset_tag for unit in incoming if unit.asset_tag}

    marked: list[LaptopInventoryRow] = []
    for row in inventory:
        status = row.status
        issue = by_asset.get(row.asset_tag) or (by_serial.get(row.serial) if row.serial else None)
        if issue is not None and not issue.resolved:
            status = LaptopStatus.ISSUES
        if row.asset_tag in incoming_tags:
            status = LaptopStatus.INCOMING
        marked.append(row if status is row.status else replace(row, status=status))
    return tuple(marked)


def laptop_bucket(row: LaptopInventoryRow) -> LaptopBucket:
    if row.status is LaptopStatus.INCOMING:
        return LaptopBucket.NEW
    if row.status is LaptopStatus.ISSUES:
        return LaptopBucket.MAINTENANCE
    if row.replacement_scheduled or row.age_years >= REPLACEMENT_AGE_YEARS:
        return LaptopBucket.REPLACEMENT
    if row.status is LaptopStatus.SPARE:
        return LaptopBucket.AVAILABLE
    return LaptopBucket.OWNED
