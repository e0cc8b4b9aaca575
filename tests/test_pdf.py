import re
import unittest
from datetime import date, datetime

from models import PartEntry, Record, parts_from_columns
from services.pdf import format_price, generate_record_pdf, parts_total, report_file_name

GENERATED_AT = datetime(2024, 3, 5, 14, 30, 0)


def _record(parts=None, notes=None, plate="B123ABC"):
    return Record(
        id="abc123",
        vin_number="1HGCM82633A004352",
        client_name="Ion Popescu",
        parts=parts if parts is not None else [
            PartEntry("Brake Pad", "SN1", 120.5),
            PartEntry("Oil Filter", "SN2", 35.25),
        ],
        license_plate=plate,
        notes=notes,
        created_at=datetime(2024, 3, 1, 9, 0, 0),
    )


def _page_count(data):
    return len(re.findall(rb"/Type /Page\b", data))


class TestReportHelpers(unittest.TestCase):
    def test_total_line(self):
        record = _record()
        self.assertEqual(parts_total(record.parts), 155.75)
        self.assertEqual(format_price(parts_total(record.parts)), "155.75 RON")

    def test_missing_prices_count_as_zero(self):
        parts = [PartEntry("Brake Pad", "SN1", None), PartEntry("Oil Filter", "SN2", 10.0)]
        self.assertEqual(parts_total(parts), 10.0)
        self.assertEqual(format_price(None), "N/A")

    def test_format_price(self):
        self.assertEqual(format_price(0), "0.00 RON")
        self.assertEqual(format_price(1234.5), "1234.50 RON")

    def test_report_file_name(self):
        name = report_file_name(_record(), today=date(2024, 3, 5))
        self.assertEqual(name, "Focus_Part_1HGCM82633A004352_2024-03-05.pdf")

    def test_unequal_columns_are_truncated(self):
        parts = parts_from_columns('["A", "B", "C"]', '["S1", "S2"]', '[1, 2, 3]')
        self.assertEqual(parts, [PartEntry("A", "S1", 1.0), PartEntry("B", "S2", 2.0)])


class TestGenerateRecordPdf(unittest.TestCase):
    def test_returns_pdf_bytes(self):
        data = generate_record_pdf(_record(), generated_at=GENERATED_AT)
        self.assertIsInstance(data, bytes)
        self.assertTrue(data.startswith(b"%PDF"))
        self.assertEqual(_page_count(data), 1)

    def test_same_input_same_document(self):
        first = generate_record_pdf(_record(), generated_at=GENERATED_AT)
        second = generate_record_pdf(_record(), generated_at=GENERATED_AT)
        self.assertEqual(first, second)

    def test_long_parts_list_spans_pages(self):
        parts = [PartEntry(f"Part {n}", f"SN-{n}", float(n)) for n in range(1, 81)]
        data = generate_record_pdf(_record(parts=parts), generated_at=GENERATED_AT)
        self.assertGreater(_page_count(data), 1)

    def test_optional_fields_and_diacritics(self):
        record = _record(
            parts=[PartEntry("Plăcuțe frână", "ȘN-1", None)],
            notes="Schimbat plăcuțele și discurile.\nRevenire în 6 luni.",
            plate=None,
        )
        data = generate_record_pdf(record, generated_at=GENERATED_AT)
        self.assertTrue(data.startswith(b"%PDF"))

    def test_record_without_parts(self):
        data = generate_record_pdf(_record(parts=[]), generated_at=GENERATED_AT)
        self.assertTrue(data.startswith(b"%PDF"))


if __name__ == '__main__':
    unittest.main()
