"""Shared versioned contracts for hr-sheets JSON outputs."""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from hr_sheets import __version__ as TOOL_VERSION

CONTRACT_VERSIONS = {
    "hr_sheets.engagement": "1.0.0",
    "hr_sheets.certifications": "1.0.0",
    "hr_sheets.leave": "1.0.0",
    "hr_sheets.overtime": "1.0.0",
    "hr_sheets.laptops": "1.0.0",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_run_summary(
    *,
    tool: str,
    command: str,
    input_path: Path | str,
    status: str = "ok",
    output_path: Path | None = None,
    metrics: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "tool": tool,
        "command": command,
        "status": status,
        "generated_at": utc_now_iso(),
        "input_file": str(input_path),
        "output_file": str(output_path) if output_path else None,
        "warnings_count": len(warnings or []),
        "warnings": list(warnings or []),
        "metrics": metrics or {},
    }


def to_jsonable(value: Any) -> Any:
    """
    Render records and aggregates as JSON-safe structures.

    Dataclasses become dicts (properties are not included), enums their
    value, dates ISO strings, tuples lists. Dict keys are stringified.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_jsonable(key)): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in value]
    return value


def build_ingest_payload(domain: str, result: Any, *, input_path: Path | str, today: date) -> dict[str, Any]:
    """Wrap an ingest result with its contract, tool version and run summary."""
    contract = build_contract(f"hr_sheets.{domain}")
    body = to_jsonable(result)
    return {
        "contract": contract,
        "schema_version": contract["version"],
        "tool_version": TOOL_VERSION,
        "today": today.isoformat(),
        "result": body,
        "run_summary": build_run_summary(
            tool="hr-sheets",
            command=f"ingest {domain}",
            input_path=input_path,
            metrics=ingest_metrics(result),
            warnings=list(result.warnings),
        ),
    }


def ingest_metrics(result: Any) -> dict[str, int]:
    """Record counts per collection carried by an ingest result."""
    metrics = {"sheets_used": len(result.sheets)}
    for f in dataclasses.fields(result):
        value = getattr(result, f.name)
        if f.name in ("sheets", "warnings"):
            continue
        if isinstance(value, tuple):
            metrics[f.name] = len(value)
        elif dataclasses.is_dataclass(value):
            for inner in dataclasses.fields(value):
                inner_value = getattr(value, inner.name)
                if isinstance(inner_value, tuple):
                    metrics[inner.name] = len(inner_value)
    return metrics
