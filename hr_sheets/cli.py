from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any

from hr_sheets import __version__ as TOOL_VERSION
from hr_sheets.analytics.certification import certification_overview
from hr_sheets.analytics.engagement import engagement_overview, weekly_analysis
from hr_sheets.analytics.laptop import laptop_overview
from hr_sheets.analytics.leave import balance_analytics, leave_analytics
from hr_sheets.analytics.overtime import aggregate_ot, top_ot_type
from hr_sheets.contracts import build_ingest_payload
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
from hr_sheets.sample import SAMPLE_FILENAME, build_sample_workbook

TODAY_ENV = "HR_SHEETS_TODAY"

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class HrSheetsArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def write_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")


def remove_generated_at(value: Any) -> Any:
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if key == "generated_at":
                result[key] = "1970-01-01T00:00:00Z"
            else:
                result[key] = remove_generated_at(item)
        return result
    if isinstance(value, list):
        return [remove_generated_at(item) for item in value]
    return value


def resolve_today(raw: str | None) -> date:
    """--today, then HR_SHEETS_TODAY, then the system clock."""
    value = raw or os.environ.get(TODAY_ENV)
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise CliError(f"Invalid date '{value}'. Expected YYYY-MM-DD.", EXIT_COMMAND_ERROR)


def classify_backend_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, (ImportError, UnicodeDecodeError)):
        return EXIT_PARSE_FAILED
    if isinstance(exc, FileNotFoundError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, ValueError):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


# ══════════════════════════════════════════════════════════════════════════════
# HUMAN SUMMARIES
# ══════════════════════════════════════════════════════════════════════════════

def _counts_line(label: str, counts: dict[str, int]) -> str:
    if not counts:
        return f"{label}: none"
    return f"{label}: " + ", ".join(f"{key} {value}" for key, value in counts.items())


def render_engagement(result: EngagementResult) -> list[str]:
    overview = engagement_overview(result.employees)
    weeks = weekly_analysis(result.activities)
    return [
        f"Participants: {overview.total_participants}",
        f"Average daily points: {overview.average_daily_points}",
        f"Top department: {overview.top_department}",
        f"Highest scorer: {overview.highest_scorer}",
        _counts_line("Engagement levels (%)", overview.distribution),
        f"Weeks tracked: {len(weeks)}",
    ]


def render_certifications(result: CertificationResult, today: date) -> list[str]:
    overview = certification_overview(result.records, today)
    return [
        f"Certifications: {overview.total}",
        f"Employees: {overview.employees}",
        _counts_line("Status", overview.by_status),
        f"Company paid: {overview.company_paid}",
        f"Bonds active: {overview.bond_active}",
        f"Expiring soon: {len(overview.expiring_soon)}",
    ]


def render_leave(result: LeaveResult) -> list[str]:
    lines = [
        f"Leave transactions: {len(result.transactions)}",
        f"Balance summaries: {len(result.summaries)}",
    ]
    if result.transactions:
        totals = leave_analytics(result.transactions).totals
        lines.append(f"Approved / pending / rejected: {totals.approved} / {totals.pending} / {totals.rejected}")
        lines.append(f"Days with pay: {totals.with_pay_days:g}, without pay: {totals.without_pay_days:g}")
    if result.summaries:
        balances = balance_analytics(result.summaries)
        lines.append(f"Average available balance: {balances.average_available:.2f}")
        lines.append(f"Low balances: {balances.low_count}")
    return lines


def render_overtime(result: OvertimeResult) -> list[str]:
    pivots = aggregate_ot(result.records)
    return [
        f"OT rows: {len(result.records)}",
        f"Employees: {pivots.totals.employees}",
        f"Total hours: {pivots.totals.total_hours:g}",
        f"Total amount: {pivots.totals.total_amount:,.2f}",
        f"Top OT type: {top_ot_type(pivots) or 'N/A'}",
    ]


def render_laptops(result: LaptopResult, today: date) -> list[str]:
    overview = laptop_overview(result.workbook, today)
    lines = [
        f"Laptops: {overview.total}",
        f"Active / spare / issues / incoming: "
        f"{overview.active} / {overview.spare} / {overview.issues} / {overview.incoming}",
        f"Older than 7 years: {overview.over_seven_years}",
        f"CYOD: {overview.cyod}",
    ]
    if overview.spare_low:
        lines.append("Spare stock is low.")
    return lines


def render_ingest_text(domain: str, result: IngestResult, today: date) -> str:
    lines = [
        f"hr-sheets ingest {domain}",
        f"File: {result.source_name}",
        f"Format: {result.detected_format}",
    ]
    if result.sheets:
        lines.append("Sheets: " + ", ".join(f"{name} ({role})" for name, role in result.sheets.items()))
    if isinstance(result, EngagementResult):
        lines.extend(render_engagement(result))
    elif isinstance(result, CertificationResult):
        lines.extend(render_certifications(result, today))
    elif isinstance(result, LeaveResult):
        lines.extend(render_leave(result))
    elif isinstance(result, OvertimeResult):
        lines.extend(render_overtime(result))
    elif isinstance(result, LaptopResult):
        lines.extend(render_laptops(result, today))
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"- {warning}" for warning in result.warnings)
    return "\n".join(lines) + "\n"


# ══════════════════════════════════════════════════════════════════════════════
# COMMANDS
# ══════════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = HrSheetsArgumentParser(prog="hr-sheets", description="Ingest and summarize HR spreadsheet exports.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest_cmd = subparsers.add_parser("ingest", help="Ingest an HR export and summarize it.")
    ingest_cmd.add_argument("domain", choices=DOMAINS, help="Kind of export")
    ingest_cmd.add_argument("input", help="Input file path")
    ingest_cmd.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    ingest_cmd.add_argument("--output", help="Write the JSON payload to this path")
    ingest_cmd.add_argument("--today", help="Reference date (YYYY-MM-DD) for status and bond checks")
    ingest_cmd.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")

    sample = subparsers.add_parser("sample", help="Write the sample engagement workbook.")
    sample.add_argument("--output", default=SAMPLE_FILENAME, help="Output path")
    sample.add_argument("--seed", type=int, default=42, help="Random seed for the activity data")
    sample.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")

    subparsers.add_parser("version", help="Print version")
    return parser


def run_ingest(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        eprint(f"File not found: {input_path}")
        return EXIT_COMMAND_ERROR

    try:
        today = resolve_today(args.today)
        result = ingest(args.domain, input_path, today)

        payload = None
        if args.json or args.output:
            payload = remove_generated_at(build_ingest_payload(args.domain, result, input_path=str(input_path), today=today))
        if args.output:
            write_text(Path(args.output), json_dumps(payload))
            emit_human(f"Result written: {args.output}", quiet=args.quiet)
        if args.json:
            print(json_dumps(payload))
        else:
            emit_human(render_ingest_text(args.domain, result, today).rstrip(), quiet=args.quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_backend_exception(exc)


def run_sample(args: argparse.Namespace) -> int:
    output_path = Path(args.output)
    if output_path.exists():
        eprint(f"Refusing to overwrite existing output: {output_path}")
        return EXIT_COMMAND_ERROR
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(build_sample_workbook(seed=args.seed))
    emit_human(f"Sample workbook written: {output_path}", quiet=args.quiet)
    return EXIT_SUCCESS


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.command == "ingest":
            return run_ingest(args)
        if args.command == "sample":
            return run_sample(args)
        if args.command == "version":
            return run_version()
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())
