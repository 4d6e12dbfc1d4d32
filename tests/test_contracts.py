from __future__ import annotations

import json
import unittest
from datetime import date, datetime

from hr_sheets import __version__
from hr_sheets.contracts import (
    CONTRACT_VERSIONS,
    build_contract,
    build_ingest_payload,
    build_run_summary,
    ingest_metrics,
    to_jsonable,
    utc_now_iso,
)
from hr_sheets.ingest import DOMAINS, LaptopResult, ingest_overtime
from hr_sheets.models import LaptopIssue, LaptopWorkbook, OTType

TODAY = date(2025, 6, 1)


class ContractTests(unittest.TestCase):
    def test_every_domain_has_a_contract(self):
        for domain in DOMAINS:
            with self.subTest(domain=domain):
                contract = build_contract(f"hr_sheets.{domain}")
                self.assertEqual(contract["version"], CONTRACT_VERSIONS[f"hr_sheets.{domain}"])

    def test_unknown_contract(self):
        with self.assertRaises(KeyError):
            build_contract("hr_sheets.payroll")

    def test_run_summary(self):
        summary = build_run_summary(tool="hr-sheets", command="ingest leave", input_path="leave.xlsx", warnings=["w"])
        self.assertEqual(summary["status"], "ok")
        self.assertIsNone(summary["output_file"])
        self.assertEqual(summary["warnings_count"], 1)
        self.assertEqual(summary["metrics"], {})
        self.assertTrue(summary["generated_at"].endswith("Z"))
        self.assertTrue(utc_now_iso().endswith("Z"))


class JsonRenderingTests(unittest.TestCase):
    def test_values(self):
        self.assertEqual(to_jsonable(OTType.LH_SH), "LH/SH")
        self.assertEqual(to_jsonable(date(2025, 1, 2)), "2025-01-02")
        self.assertEqual(to_jsonable(datetime(2025, 1, 2, 3, 4)), "2025-01-02T03:04:00")
        self.assertEqual(to_jsonable((1, (2, 3))), [1, [2, 3]])
        self.assertEqual(to_jsonable({1: date(2025, 1, 2)}), {"1": "2025-01-02"})

    def test_dataclasses_become_dicts_without_properties(self):
        rendered = to_jsonable(LaptopIssue("Battery Issue", "Repaired", asset_tag="A-1"))
        self.assertEqual(rendered["issue_type"], "Battery Issue")
        self.assertIsNone(rendered["reported_date"])
        self.assertNotIn("resolved", rendered)


class PayloadTests(unittest.TestCase):
    def test_overtime_payload(self):
        result = ingest_overtime(b"Employee ID,Name,OT Premium Type,Hours,Amount\nE1,Ana,REG-OT,2,500\n", filename="ot.csv")
        payload = build_ingest_payload("overtime", result, input_path="ot.csv", today=TODAY)

        self.assertEqual(payload["contract"], {"name": "hr_sheets.overtime", "version": "1.0.0"})
        self.assertEqual(payload["schema_version"], "1.0.0")
        self.assertEqual(payload["tool_version"], __version__)
        self.assertEqual(payload["today"], "2025-06-01")
        (record,) = payload["result"]["records"]
        self.assertEqual(record["ot_type"], "OT")
        self.assertEqual(record["amount"], 500.0)
        self.assertEqual(payload["run_summary"]["command"], "ingest overtime")
        self.assertEqual(payload["run_summary"]["metrics"], {"sheets_used": 1, "records": 1})
        json.dumps(payload)

    def test_laptop_metrics_count_nested_collections(self):
        result = LaptopResult(
            source_name="laptops.xlsx",
            detected_format="xlsx",
            sheets={"Inventory": "inventory"},
            warnings=(),
            workbook=LaptopWorkbook(issues=(LaptopIssue("Battery Issue", "Open"),)),
        )
        self.assertEqual(
            ingest_metrics(result),
            {"sheets_used": 1, "inventory": 0, "issues": 1, "incoming": 0, "cyod": 0, "peripherals": 0},
        )


if __name__ == "__main__":
    unittest.main()
