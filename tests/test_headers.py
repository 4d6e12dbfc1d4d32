from __future__ import annotations

import unittest

from hr_sheets.header_row import build_records, locate_header_row, sheet_records, unique_headers
from hr_sheets.headers import FieldMap, HeaderResolver, record_headers, resolve_fields
from hr_sheets.mappers.overtime import OT_MIN_HEADER_SCORE, OT_TOKEN_GROUPS


class HeaderResolverTests(unittest.TestCase):
    def test_exact_match_wins_over_substring(self):
        resolver = HeaderResolver(["Employee Name", "Name"])
        self.assertEqual(resolver.resolve(["name"]), "Name")

    def test_candidate_order_decides_between_exact_matches(self):
        resolver = HeaderResolver(["Dept", "Department"])
        self.assertEqual(resolver.resolve(["department", "dept"]), "Department")

    def test_substring_fallback_in_header_order(self):
        resolver = HeaderResolver(["Emp #", "Certification Name (Full)", "Provider"])
        self.assertEqual(resolver.resolve(["certification"]), "Certification Name (Full)")

    def test_unresolved_is_none(self):
        self.assertIsNone(HeaderResolver(["A", "B"]).resolve(["hours"]))

    def test_duplicate_normalized_headers_keep_first(self):
        resolver = HeaderResolver(["Employee ID", "employee_id"])
        self.assertEqual(resolver.resolve(["employeeid"]), "Employee ID")

    def test_resolve_fields_builds_field_map(self):
        field_map = resolve_fields(["Name", "Hours"], {"name": ("name",), "hours": ("hours",), "amount": ("amount",)})
        self.assertEqual(field_map.resolved(), {"name": "Name", "hours": "Hours"})
        self.assertEqual(field_map.missing(), ["amount"])
        self.assertEqual(
            field_map.extract({"Name": "Ana", "Hours": 3}),
            {"name": "Ana", "hours": 3, "amount": None},
        )

    def test_drop_if_shared_unassigns_collisions(self):
        field_map = FieldMap({"reason": "RejectReason", "reject_reason": "RejectReason"})
        dropped = field_map.drop_if_shared("reason", "reject_reason")
        self.assertIsNone(dropped.header("reason"))
        self.assertEqual(dropped.header("reject_reason"), "RejectReason")

    def test_drop_if_shared_keeps_distinct_headers(self):
        field_map = FieldMap({"reason": "Reason", "reject_reason": "RejectReason"})
        self.assertIs(field_map.drop_if_shared("reason", "reject_reason"), field_map)

    def test_record_headers_first_seen_order(self):
        self.assertEqual(record_headers([{"a": 1, "b": 2}, {"b": 3, "c": 4}]), ["a", "b", "c"])


class HeaderRowTests(unittest.TestCase):
    def test_finds_header_below_banner_rows(self):
        rows = [
            ["OT Premium Report", None, None, None],
            ["Period: January 2025", None, None, None],
            [None, None, None, None],
            ["Employee ID", "Name", "OT Premium Type", "Number of Hours", "Amount"],
            ["E1", "Ana", "REG-OT", 2, 500],
        ]
        location = locate_header_row(rows, OT_TOKEN_GROUPS, min_score=OT_MIN_HEADER_SCORE)
        self.assertEqual(location.index, 3)
        self.assertFalse(location.fallback)
        self.assertGreaterEqual(location.score, 3)

    def test_falls_back_to_first_non_blank_row(self):
        rows = [[None, None], ["foo", "bar"], ["1", "2"]]
        location = locate_header_row(rows, OT_TOKEN_GROUPS, min_score=OT_MIN_HEADER_SCORE)
        self.assertEqual(location.index, 1)
        self.assertTrue(location.fallback)

    def test_earliest_row_wins_a_tie(self):
        rows = [["Name", "Hours"], ["Name", "Hours"]]
        self.assertEqual(locate_header_row(rows, OT_TOKEN_GROUPS, min_score=2).index, 0)

    def test_unique_headers(self):
        self.assertEqual(unique_headers(["Name", None, "Name", "Name"]), ["Name", "col2", "Name_2", "Name_3"])

    def test_build_records_pads_and_skips_blank_rows(self):
        rows = [["A", "B", "C"], [1, 2], [None, None, None], [4, 5, 6, 7]]
        self.assertEqual(
            build_records(rows, 0),
            [{"A": 1, "B": 2, "C": None}, {"A": 4, "B": 5, "C": 6}],
        )

    def test_sheet_records_returns_location(self):
        rows = [["Report"], ["Employee ID", "Name", "Hours", "Amount"], ["E1", "Ana", 1, 2]]
        records, location = sheet_records(rows, OT_TOKEN_GROUPS, min_score=3)
        self.assertEqual(location.index, 1)
        self.assertEqual(records, [{"Employee ID": "E1", "Name": "Ana", "Hours": 1, "Amount": 2}])


if __name__ == "__main__":
    unittest.main()
