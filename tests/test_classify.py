from __future__ import annotations

import unittest

from hr_sheets.classify import (
    EngagementSheetKind,
    LaptopSheetKind,
    SheetKind,
    classify_engagement_sheet,
    classify_leave_sheet,
    detect_engagement_csv,
    pick_laptop_sheets,
)


class LeaveSheetTests(unittest.TestCase):
    def test_transaction_headers(self):
        records = [{"EmployeeId": "1", "LeaveTypeName": "VL", "DateFrom": "2025-01-02", "LeaveStatus": "Approved"}]
        self.assertIs(classify_leave_sheet("Sheet1", records), SheetKind.TRANSACTIONS)

    def test_summary_headers(self):
        records = [{"EmployeeId": "1", "LastName": "Cruz", "FirstName": "Ana", "TotalAvailableBalanceYTD": 5}]
        self.assertIs(classify_leave_sheet("Sheet2", records), SheetKind.SUMMARY)

    def test_content_beats_sheet_name(self):
        records = [{"LastName": "Cruz", "FirstName": "Ana", "HireDate": "2020-01-01"}]
        self.assertIs(classify_leave_sheet("Transactions", records), SheetKind.SUMMARY)

    def test_content_beats_competing_free_text(self):
        records = [
            {"LeaveTypeName": "Vacation", "WithPayNoOfdays": 2, "Remarks": "see summary tab"},
            {"LeaveTypeName": "Sick", "WithPayNoOfdays": 1, "Remarks": "summary pending"},
        ]
        self.assertIs(classify_leave_sheet("Leave Transactions Q1", records), SheetKind.TRANSACTIONS)

    def test_loose_value_clues(self):
        records = [{"Col A": "Approved", "Col B": "Pending"}]
        self.assertIs(classify_leave_sheet("Data", records), SheetKind.TRANSACTIONS)

    def test_sheet_name_fallback(self):
        records = [{"X": "1"}]
        self.assertIs(classify_leave_sheet("Leave Summary", records), SheetKind.SUMMARY)
        self.assertIs(classify_leave_sheet("Leave Trans", records), SheetKind.TRANSACTIONS)

    def test_unknown(self):
        self.assertIs(classify_leave_sheet("Data", [{"X": "1"}]), SheetKind.UNKNOWN)
        self.assertIs(classify_leave_sheet("Data", []), SheetKind.UNKNOWN)


class EngagementSheetTests(unittest.TestCase):
    def test_columns_identify_each_sheet(self):
        self.assertIs(
            classify_engagement_sheet("Anything", ["Date", "Employee Name", "Posts Created", "Daily Points"]),
            EngagementSheetKind.DAILY,
        )
        self.assertIs(
            classify_engagement_sheet("Anything", ["Employee Name", "Sum of Daily Points", "Rank"]),
            EngagementSheetKind.WEEKLY,
        )
        self.assertIs(
            classify_engagement_sheet("Anything", ["Employee Name", "Weighted Score", "Engagement Level"]),
            EngagementSheetKind.QUAD,
        )

    def test_name_fallback(self):
        self.assertIs(classify_engagement_sheet("VE Weekly Summary", ["Employee"]), EngagementSheetKind.WEEKLY)
        self.assertIs(classify_engagement_sheet("Quad Engagement Scores", []), EngagementSheetKind.QUAD)
        self.assertIs(classify_engagement_sheet("Notes", ["Comment"]), EngagementSheetKind.UNKNOWN)

    def test_csv_detection(self):
        self.assertIs(detect_engagement_csv(["Employee Name", "Posts Created"]), EngagementSheetKind.DAILY)
        self.assertIs(detect_engagement_csv(["Employee Name", "VE Score"]), EngagementSheetKind.QUAD)
        self.assertIs(detect_engagement_csv(["Name", "Age"]), EngagementSheetKind.UNKNOWN)


class LaptopSheetTests(unittest.TestCase):
    def test_known_names_first(self):
        assigned = pick_laptop_sheets(
            {
                "Laptops With Issues": ["Asset", "Issue"],
                "bneXt Laptop Inventory": ["ASSET CODE", "CUSTODIAN"],
                "Mouse & Headset": ["Item", "Qty"],
            }
        )
        self.assertEqual(assigned[LaptopSheetKind.INVENTORY], "bneXt Laptop Inventory")
        self.assertEqual(assigned[LaptopSheetKind.ISSUES], "Laptops With Issues")
        self.assertEqual(assigned[LaptopSheetKind.PERIPHERALS], "Mouse & Headset")

    def test_keyword_scores_for_renamed_sheets(self):
        assigned = pick_laptop_sheets(
            {
                "Tab A": ["ASSET CODE", "BRAND", "MODEL", "CUSTODIAN", "VERTICAL", "TAG"],
                "Tab B": ["Employee", "ETA", "Purpose", "Brand"],
            }
        )
        self.assertEqual(assigned[LaptopSheetKind.INVENTORY], "Tab A")
        self.assertEqual(assigned[LaptopSheetKind.INCOMING], "Tab B")

    def test_a_sheet_fills_only_one_role(self):
        assigned = pick_laptop_sheets({"Sheet1": ["ASSET CODE", "BRAND", "MODEL", "STATUS", "ISSUE"]})
        self.assertEqual(list(assigned.values()), ["Sheet1"])

    def test_sheets_without_headers_are_ignored(self):
        self.assertEqual(pick_laptop_sheets({"Empty": []}), {})


if __name__ == "__main__":
    unittest.main()
