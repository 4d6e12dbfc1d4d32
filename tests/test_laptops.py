from __future__ import annotations

import unittest
from datetime import date

from hr_sheets.analytics.laptop import (
    age_distribution,
    brand_distribution,
    bucket_distribution,
    cyod_type_breakdown,
    cyod_usage,
    department_distribution,
    device_family,
    employees_with_multiple_laptops,
    filter_laptops,
    incoming_by_month,
    incoming_for_purpose,
    laptop_departments,
    laptop_overview,
    peripherals_summary,
    problem_model_distribution,
    problem_type_distribution,
    repair_status_distribution,
)
from hr_sheets.mappers.laptop import (
    clean_custodian,
    cross_mark,
    derive_cyod,
    derive_incoming,
    derive_issues,
    laptop_bucket,
    map_cyod,
    map_incoming,
    map_inventory,
    map_issues,
    map_peripherals,
    status_from_tag,
)
from hr_sheets.models import CyodDevice, IncomingLaptop, LaptopBucket, LaptopIssue, LaptopStatus, LaptopWorkbook

TODAY = date(2025, 6, 1)


def inventory_row(asset, serial, brand, model, vertical, custodian, tag, history, invoice, age):
    return {
        "ASSET CODE": asset,
        "SERIAL NUM": serial,
        "BRAND": brand,
        "MODEL": model,
        "VERTICAL": vertical,
        "CUSTODIAN": custodian,
        "TAG": tag,
        "MAINTENANCE HISTORY": history,
        "INVOICE DATE": invoice,
        "LAPTOP AGE": age,
    }


INVENTORY_ROWS = [
    inventory_row("A-001", "SN1", "Dell", "Latitude 5420", "Sales", "Ana", "Deployed Unit", "", "2022-01-15", "3 yrs"),
    inventory_row("A-002", "SN2", "Lenovo", "T14", "Ops", "No custodian", "Spare Unit", "", "2025-05-20", None),
    inventory_row("A-003", "SN3", "HP", "EliteBook", "0", "Ben", "", "Battery swelling", "2016-03-01", None),
    inventory_row("A-004", "SN4", "Apple", "MacBook Air", "Sales", "Cai", "CYOD", "", "2021-06-01", 4),
    inventory_row("A-005", "SN5", "Dell", "Latitude 5420", "Ops", "#REF!", "EOL", "EOL - beyond repair", "2017-01-01", "8.5"),
    inventory_row("ASSET CODE", "SERIAL NUM", "BRAND", "MODEL", "VERTICAL", "CUSTODIAN", "TAG", "", "", ""),
    inventory_row("#REF!", "", "", "", "", "", "", "", "", ""),
    inventory_row("", "SN9", "Dell", "", "", "", "", "", "", ""),
    inventory_row("A-006", "SN6", "Lenovo", "T14", "Sales", "Dee", "For Replacement", "", "2023-01-01", 2),
]


class InventoryMapperTests(unittest.TestCase):
    def setUp(self):
        self.inventory = map_inventory(INVENTORY_ROWS, TODAY)

    def test_skips_rows_without_a_real_asset_tag(self):
        self.assertEqual(
            [row.asset_tag for row in self.inventory],
            ["A-001", "A-002", "A-003", "A-004", "A-005", "A-006"],
        )

    def test_status_and_custodian(self):
        statuses = [row.status for row in self.inventory]
        self.assertEqual(
            statuses,
            [
                LaptopStatus.ACTIVE,
                LaptopStatus.SPARE,
                LaptopStatus.ACTIVE,
                LaptopStatus.ACTIVE,
                LaptopStatus.ISSUES,
                LaptopStatus.ACTIVE,
            ],
        )
        self.assertEqual(self.inventory[1].custodian, "")
        self.assertEqual(self.inventory[4].custodian, "")

    def test_age_and_department(self):
        self.assertEqual([row.age_years for row in self.inventory], [3, 0, 9, 4, 8, 2])
        self.assertEqual(self.inventory[2].department, "Unknown")
        self.assertEqual(self.inventory[0].purchase_date, date(2022, 1, 15))

    def test_raw_fields_are_kept(self):
        self.assertEqual(self.inventory[0].fields["SERIAL NUM"], "SN1")

    def test_tag_flags(self):
        self.assertTrue(self.inventory[3].is_cyod)
        self.assertTrue(self.inventory[5].replacement_scheduled)

    def test_clean_custodian(self):
        for placeholder in ("No custodian", "#REF!", "CH", "RC", "0", "Dead unit", "Marketing", ""):
            with self.subTest(placeholder=placeholder):
                self.assertEqual(clean_custodian(placeholder), "")
        self.assertEqual(clean_custodian("Marketing Team"), "Marketing Team")
        self.assertEqual(clean_custodian(" Ana "), "Ana")

    def test_status_from_tag(self):
        self.assertIs(status_from_tag("Common Area", "Ana"), LaptopStatus.SPARE)
        self.assertIs(status_from_tag("Sold", ""), LaptopStatus.SPARE)
        self.assertIs(status_from_tag("Under Repair", "Ana"), LaptopStatus.ISSUES)
        self.assertIs(status_from_tag("Borrowed", "Ana"), LaptopStatus.SPARE)
        self.assertIs(status_from_tag("", "Ana"), LaptopStatus.ACTIVE)


class DerivedSheetTests(unittest.TestCase):
    def setUp(self):
        self.inventory = map_inventory(INVENTORY_ROWS, TODAY)

    def test_issues_from_maintenance_history(self):
        issues = derive_issues(self.inventory)
        self.assertEqual(
            [(i.asset_tag, i.issue_type, i.status) for i in issues],
            [("A-003", "Battery Issue", "Under Repair"), ("A-005", "End of Life", "Beyond Repair")],
        )

    def test_incoming_from_recent_unassigned_purchases(self):
        (unit,) = derive_incoming(self.inventory, TODAY)
        self.assertEqual(unit.asset_tag, "A-002")
        self.assertEqual(unit.purpose, "Spare")
        self.assertEqual(unit.expected_date, date(2025, 5, 20))

    def test_cyod_from_tags(self):
        (device,) = derive_cyod(self.inventory)
        self.assertEqual((device.employee, device.brand, device.status), ("Cai", "Apple", "Deployed"))


class DedicatedSheetTests(unittest.TestCase):
    def test_issue_sheet(self):
        issues = map_issues(
            [
                {"Asset": "A-001", "Model": "X1", "Issue": "Screen flicker", "Status": "", "Date Reported": "2025-05-02"},
                {"Asset": "A-002", "Model": "X1", "Issue": "", "Status": "Repaired", "Date Reported": None},
            ]
        )
        self.assertEqual(issues[0].status, "In Repair")
        self.assertEqual(issues[0].reported_date, date(2025, 5, 2))
        self.assertFalse(issues[0].resolved)
        self.assertEqual(issues[1].issue_type, "Unknown")
        self.assertTrue(issues[1].resolved)

    def test_incoming_sheet(self):
        incoming = map_incoming(
            [
                {"Asset Code": "A-010", "Brand": "Dell", "Model": "", "Comments": "for new hire",
                 "New Hire Start Date": None, "Invoice Date": "2025-06-10"},
                {"Asset Code": "A-011", "Brand": "Lenovo", "Model": "T14", "Comments": "replace old unit",
                 "New Hire Start Date": None, "Invoice Date": None},
                {"Asset Code": "A-012", "Brand": "HP", "Model": "", "Comments": "",
                 "New Hire Start Date": "2025-07-01", "Invoice Date": ""},
            ]
        )
        self.assertEqual([unit.purpose for unit in incoming], ["New Hire", "Replacement", "New Hire"])
        self.assertEqual(incoming[0].model, "Dell")
        self.assertEqual(incoming[0].expected_date, date(2025, 6, 10))
        self.assertIsNone(incoming[1].expected_date)
        self.assertEqual(incoming[2].expected_date, date(2025, 7, 1))

    def test_cyod_sheet(self):
        devices = map_cyod(
            [
                {"Employee": "Ana", "Brand": "Apple", "Device Type": "MacBook", "Model": "Air", "Status": "Deployed", "Cost": "45,000"},
                {"Employee": "Ben", "Brand": "Dell", "Device Type": "", "Model": "", "Status": "Returned", "Cost": ""},
            ]
        )
        self.assertEqual(devices[0].cost, 45000.0)
        self.assertIsNone(devices[1].cost)
        self.assertEqual(devices[1].status, "Returned")


class PeripheralTests(unittest.TestCase):
    def test_structured_rows(self):
        peripherals = map_peripherals(
            [
                {"Item": "Mouse", "Quantity": 20, "Available": 3},
                {"Item": "Headset", "Quantity": 10, "Available": 8},
                {"Item": "", "Quantity": 1, "Available": 1},
            ]
        )
        self.assertEqual([(p.item, p.quantity, p.available) for p in peripherals], [("Mouse", 20.0, 3.0), ("Headset", 10.0, 8.0)])

    def test_label_value_pairs(self):
        peripherals = map_peripherals([{"Peripheral": "Mouse", "Count": 12}, {"Peripheral": "Headset", "Count": "4"}])
        self.assertEqual([(p.item, p.available) for p in peripherals], [("Mouse", 12.0), ("Headset", 4.0)])

    def test_numeric_cells_labelled_by_header(self):
        peripherals = map_peripherals([{"Mouse": 7, "Headset": 2, "Notes": "ok"}])
        self.assertEqual([(p.item, p.quantity) for p in peripherals], [("Mouse", 7.0), ("Headset", 2.0)])


class CrossMarkTests(unittest.TestCase):
    def setUp(self):
        self.inventory = map_inventory(INVENTORY_ROWS, TODAY)

    def test_issues_and_incoming_override_status(self):
        marked = cross_mark(
            self.inventory,
            derive_issues(self.inventory),
            (IncomingLaptop("New Hire", asset_tag="A-002"),),
        )
        self.assertIs(marked[1].status, LaptopStatus.INCOMING)
        self.assertIs(marked[2].status, LaptopStatus.ISSUES)
        self.assertIs(marked[0], self.inventory[0])

    def test_resolved_issues_are_ignored(self):
        marked = cross_mark(self.inventory, (LaptopIssue("Battery Issue", "Repaired", asset_tag="A-003"),), ())
        self.assertIs(marked[2].status, LaptopStatus.ACTIVE)

    def test_serial_match(self):
        marked = cross_mark(self.inventory, (LaptopIssue("Screen", "Open", serial="SN1"),), ())
        self.assertIs(marked[0].status, LaptopStatus.ISSUES)

    def test_buckets(self):
        marked = cross_mark(
            self.inventory,
            derive_issues(self.inventory),
            (IncomingLaptop("New Hire", asset_tag="A-002"),),
        )
        self.assertEqual(
            [laptop_bucket(row) for row in marked],
            [
                LaptopBucket.OWNED,
                LaptopBucket.NEW,
                LaptopBucket.MAINTENANCE,
                LaptopBucket.OWNED,
                LaptopBucket.MAINTENANCE,
                LaptopBucket.REPLACEMENT,
            ],
        )
        self.assertIs(laptop_bucket(self.inventory[1]), LaptopBucket.AVAILABLE)


class LaptopAnalyticsTests(unittest.TestCase):
    def setUp(self):
        inventory = map_inventory(INVENTORY_ROWS, TODAY)
        self.issues = derive_issues(inventory)
        incoming = (
            IncomingLaptop("New Hire", asset_tag="A-002"),
            IncomingLaptop("Replacement", expected_date=date(2025, 7, 3)),
        )
        marked = cross_mark(inventory, self.issues, incoming)
        self.peripherals = map_peripherals(
            [
                {"Item": "Mouse", "Quantity": 20, "Available": 3},
                {"Item": "Headset", "Quantity": 10, "Available": 8},
            ]
        )
        self.workbook = LaptopWorkbook(
            inventory=marked,
            issues=self.issues,
            incoming=incoming,
            cyod=derive_cyod(marked),
            peripherals=self.peripherals,
        )

    def test_overview(self):
        overview = laptop_overview(self.workbook, TODAY)
        self.assertEqual(overview.total, 6)
        self.assertEqual(overview.active, 3)
        self.assertEqual(overview.spare, 0)
        self.assertEqual(overview.issues, 2)
        self.assertEqual(overview.incoming, 1)
        self.assertEqual((overview.mouse_available, overview.headset_available), (3.0, 8.0))
        self.assertEqual(overview.cyod, 1)
        self.assertEqual(overview.over_seven_years, 2)
        self.assertEqual(overview.new_hire_waiting, 1)
        self.assertTrue(overview.spare_low)
        self.assertEqual(overview.five_years_or_older, 2)

    def test_inventory_distributions(self):
        inventory = self.workbook.inventory
        self.assertEqual(age_distribution(inventory), {"0-1y": 1, "2-3y": 2, "4-5y": 1, ">7y": 2})
        self.assertEqual(brand_distribution(inventory), {"Dell": 2, "Lenovo": 2, "HP": 1, "Apple": 1})
        self.assertEqual(department_distribution(inventory), {"Sales": 3, "Ops": 2, "Unknown": 1})
        self.assertEqual(
            bucket_distribution(inventory),
            {"owned": 2, "new": 1, "maintenance": 2, "replacement": 1},
        )
        self.assertEqual(laptop_departments(inventory), ("Ops", "Sales", "Unknown"))

    def test_issue_distributions(self):
        self.assertEqual(problem_type_distribution(self.issues), {"Battery Issue": 1, "End of Life": 1})
        self.assertEqual(repair_status_distribution(self.issues), {"Under Repair": 1, "Beyond Repair": 1})
        self.assertEqual(problem_model_distribution(self.issues), {"EliteBook": 1, "Latitude 5420": 1})

    def test_incoming_by_month_puts_tbd_last(self):
        incoming = (
            IncomingLaptop("Spare", expected_date=date(2025, 7, 3)),
            IncomingLaptop("New Hire"),
            IncomingLaptop("Spare", expected_date=date(2025, 6, 15)),
        )
        self.assertEqual(list(incoming_by_month(incoming).items()), [("2025-06", 1), ("2025-07", 1), ("TBD", 1)])
        self.assertEqual(len(incoming_for_purpose(incoming, "spare")), 2)

    def test_cyod_views(self):
        self.assertEqual(cyod_type_breakdown(self.workbook), {"MacBook Air": 1})
        self.assertEqual(cyod_type_breakdown(LaptopWorkbook(inventory=self.workbook.inventory)), {"MacBook": 1})
        sheet = LaptopWorkbook(cyod=(CyodDevice("A", status="Returned"), CyodDevice("B", status="Deployed")))
        self.assertEqual(cyod_usage(sheet), {"Deployed": 1, "Returned": 1})
        self.assertEqual(device_family("HP Inc"), "HP")
        self.assertEqual(device_family("Lenovo"), "ThinkPad")
        self.assertEqual(device_family("Dell"), "Other")

    def test_peripherals_summary(self):
        summary = peripherals_summary(self.peripherals)
        self.assertEqual((summary.total, summary.available), (30.0, 11.0))
        self.assertEqual(summary.shortages, ("Mouse low",))

    def test_filters(self):
        inventory = self.workbook.inventory
        self.assertEqual(len(filter_laptops(inventory, "dell")), 2)
        self.assertEqual(len(filter_laptops(inventory, department="Sales")), 3)
        self.assertEqual(len(filter_laptops(inventory, problems_only=True)), 2)
        self.assertEqual([row.asset_tag for row in filter_laptops(inventory, "ana")], ["A-001"])

    def test_multiple_laptops(self):
        inventory = map_inventory(
            [
                inventory_row("B-1", "", "Dell", "X", "Sales", "Ana", "", "", "", 1),
                inventory_row("B-2", "", "Dell", "Y", "Sales", "Ana", "", "", "", 1),
                inventory_row("B-3", "", "Dell", "Z", "Sales", "Ben", "", "", "", 1),
            ],
            TODAY,
        )
        multiple = employees_with_multiple_laptops(inventory)
        self.assertEqual(list(multiple), ["Ana"])
        self.assertEqual(len(multiple["Ana"]), 2)


if __name__ == "__main__":
    unittest.main()
