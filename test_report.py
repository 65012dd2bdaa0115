import io
import unittest
from openpyxl import load_workbook
from core.models import CalculationInput, InstallationMethod
from core.report import RUN_HEADERS, report_filename, workbook_bytes
from sizing.cable_logic import calculate


class TestExcelReport(unittest.TestCase):
    def setUp(self):
        feeder = CalculationInput(voltage=400, power=10, power_factor=0.8, distance=100,
                                  phases=3, voltage_drop_limit=5.0)
        lighting = CalculationInput(voltage=230, power=1.2, power_factor=0.95, distance=20, phases=1,
                                    voltage_drop_limit=3.0, installation_method=InstallationMethod.CONDUIT,
                                    ambient_temp=35)
        huge = CalculationInput(voltage=230, power=1000, power_factor=1.0, distance=10,
                                phases=3, voltage_drop_limit=5.0)
        self.runs = [(name, data, calculate(data)) for name, data in
                     [("Feeder", feeder), ("Lighting", lighting), ("Furnace", huge)]]
        self.wb = load_workbook(io.BytesIO(workbook_bytes(self.runs)))

    def test_sheets(self):
        self.assertEqual(self.wb.sheetnames, ["Cable Runs", "Recommendations", "Ref Cable Table", "Ref Derating"])

    def test_run_rows(self):
        ws = self.wb["Cable Runs"]
        rows = list(ws.iter_rows(values_only=True))
        self.assertEqual(list(rows[0]), RUN_HEADERS)
        self.assertEqual(len(rows), 4)

        feeder = dict(zip(RUN_HEADERS, rows[1]))
        self.assertEqual(feeder["Run"], "Feeder")
        self.assertEqual(feeder["Cable (mm²)"], 2.5)
        self.assertEqual(feeder["I (A)"], 18.04)
        self.assertEqual(feeder["Status"], "Warning")
        self.assertEqual(feeder["Method"], "air")

        furnace = dict(zip(RUN_HEADERS, rows[3]))
        self.assertEqual(furnace["Cable (mm²)"], 240)
        self.assertTrue(furnace["Notes"].startswith("OVERSIZE"))

    def test_recommendations_sheet(self):
        ws = self.wb["Recommendations"]
        expected = sum(len(res.analysis.recommendations) for _, _, res in self.runs)
        self.assertEqual(ws.max_row, expected + 1)
        self.assertEqual(ws.cell(row=2, column=1).value, "Feeder")

    def test_reference_tables(self):
        ws = self.wb["Ref Cable Table"]
        rows = list(ws.iter_rows(min_row=2, values_only=True))
        # 16 priced sizes plus the reference-only 300 and 400 mm2
        self.assertEqual(len(rows), 18)
        self.assertEqual(rows[-1][0], 400)
        self.assertEqual(rows[-1][3], "-")

    def test_filename(self):
        name = report_filename()
        self.assertTrue(name.startswith("Cable_Report_"))
        self.assertTrue(name.endswith(".xlsx"))


if __name__ == '__main__':
    unittest.main()
