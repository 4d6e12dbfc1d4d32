from __future__ import annotations

import unittest

from hr_sheets.analytics.overtime import aggregate_ot, employee_hours, filter_ot, top_employees, top_ot_type
from hr_sheets.mappers.overtime import canonical_ot_type, map_ot_records
from hr_sheets.models import OTType


def ot_row(employee_id, name, team, ot_type, hours, amount, month="", hourly_rate=None):
    return {
        "Employee ID": employee_id,
        "Name": name,
        "Team": team,
        "OT Premium Type": ot_type,
        "OT Premium Rate": "125%",
        "Hourly Rate": hourly_rate,
        "Number of Hours": hours,
        "Amount": amount,
        "Month": month,
    }


ROWS = [
    ot_row("E1", "Ana", "Eng", "REG-OT", 2, 500, "JAN", hourly_rate="250"),
    ot_row("E1", "Ana", "Eng", "ND_100", 3, 300, "2025-02"),
    ot_row("E2", "Ben", "Ops", "RD", 4, "PHP 900", "01-JAN"),
    ot_row("", "Cai", "Ops", "REG-OT", 0, 0, "JAN"),
    ot_row("", "", "Ops", "REG-OT", 5, 100, "JAN"),
    ot_row("", "Dee", "Ops", "LH 200%", 1, 0),
]


class CanonicalTypeTests(unittest.TestCase):
    def test_codes(self):
        cases = {
            "REG-OT": OTType.OT,
            "ND_100": OTType.ND,
            "nd 110%": OTType.ND,
            "RD": OTType.RD,
            "RD-OT": OTType.OT,
            "OT-RD": OTType.RD,
            "LH 200%": OTType.LH_SH,
            "SH": OTType.LH_SH,
            "LH/SH": OTType.LH_SH,
            "Holiday": OTType.UNKNOWN,
            "": OTType.UNKNOWN,
            None: OTType.UNKNOWN,
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertIs(canonical_ot_type(raw), expected)


class MapperTests(unittest.TestCase):
    def setUp(self):
        self.records = map_ot_records(ROWS)

    def test_drops_rows_without_identity_or_values(self):
        self.assertEqual([r.employee_key for r in self.records], ["E1", "E1", "E2", "Dee"])

    def test_fields(self):
        first = self.records[0]
        self.assertIs(first.ot_type, OTType.OT)
        self.assertEqual(first.ot_type_raw, "REG-OT")
        self.assertEqual(first.rate_label, "125%")
        self.assertEqual(first.hourly_rate, 250.0)
        self.assertEqual(first.month_abbr, "JAN")
        self.assertIsNone(self.records[1].hourly_rate)
        self.assertEqual(self.records[1].month_abbr, "FEB")
        self.assertEqual(self.records[2].amount, 900.0)
        self.assertEqual(self.records[3].month_abbr, "")

    def test_hourly_rate_header_is_not_taken_as_rate_label(self):
        (only,) = map_ot_records([{"Employee ID": "E1", "Hourly Rate": 200, "Hours": 1, "Amount": 200}])
        self.assertEqual(only.rate_label, "")
        self.assertEqual(only.hourly_rate, 200.0)

    def test_premium_type_column_is_not_taken_as_type(self):
        (only,) = map_ot_records(
            [{"Employee ID": "E1", "OT/Premium Type": "RD-OT", "OT Type Description": "Rest day", "Hours": 1, "Amount": 1}]
        )
        self.assertEqual(only.ot_type_raw, "RD-OT")
        self.assertEqual(only.ot_type_description, "Rest day")
        self.assertEqual((only.type, only.type_description), ("", ""))

    def test_separate_type_column(self):
        (only,) = map_ot_records(
            [{"Employee ID": "E1", "OT Premium Type": "ND", "Type": "Regular", "Hours": 1, "Amount": 1}]
        )
        self.assertEqual((only.ot_type_raw, only.type), ("ND", "Regular"))

    def test_month_falls_back_to_period(self):
        (only,) = map_ot_records([{"Employee ID": "E1", "Hours": 1, "Amount": 1, "Period": "2025/03"}])
        self.assertEqual(only.period, "2025/03")
        self.assertEqual(only.month_abbr, "MAR")


class AggregationTests(unittest.TestCase):
    def setUp(self):
        self.records = map_ot_records(ROWS)
        self.pivots = aggregate_ot(self.records)

    def test_totals(self):
        totals = self.pivots.totals
        self.assertEqual(totals.total_hours, 10.0)
        self.assertEqual(totals.total_amount, 1700.0)
        self.assertEqual(totals.employees, 3)
        self.assertEqual(totals.by_type["RD"].amount, 900.0)
        self.assertEqual(totals.by_type["LH/SH"].hours, 1.0)

    def test_hours_by_month_in_calendar_order(self):
        rows = self.pivots.hours_by_month_by_type
        self.assertEqual([row.month for row in rows], ["JAN", "FEB"])
        self.assertEqual(rows[0].values, {"OT": 2.0, "RD": 4.0})
        self.assertEqual(rows[0].total, 6.0)

    def test_employee_pivots(self):
        by_type = self.pivots.amount_by_type_by_employee
        self.assertEqual([row.employee_id for row in by_type], ["E2", "E1", "Dee"])
        self.assertEqual(by_type[1].values, {"OT": 500.0, "ND": 300.0})
        self.assertEqual(by_type[1].total_hours, 5.0)
        self.assertEqual(self.pivots.amount_by_month_by_employee[1].values, {"JAN": 500.0, "FEB": 300.0})
        self.assertEqual(len(top_employees(self.pivots, 2)), 2)

    def test_top_type_and_hours(self):
        self.assertEqual(top_ot_type(self.pivots), "RD")
        self.assertIsNone(top_ot_type(aggregate_ot(())))
        self.assertEqual(employee_hours(self.records), {"E1": 5.0, "E2": 4.0, "Dee": 1.0})

    def test_filters(self):
        self.assertEqual(len(filter_ot(self.records, month="jan")), 2)
        self.assertEqual([r.name for r in filter_ot(self.records, team="Ops")], ["Ben", "Dee"])
        self.assertEqual(len(filter_ot(self.records, ot_type="OT")), 1)
        self.assertEqual(len(filter_ot(self.records)), 4)


if __name__ == "__main__":
    unittest.main()
