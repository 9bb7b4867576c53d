# Data Quality Analyzer - Integration Tests: Data Ingestion
# CSV/JSON decoding, format detection and upload limits

import sys
import os
import unittest

# Add parent to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tests.sample_data import SampleDataFactory


class TestCSVParser(unittest.TestCase):
    """Tests for CSVParser."""

    def test_cells_stay_raw_text(self):
        from quality_analyzer.services.data_ingestion import CSVParser

        records = CSVParser().parse("code,qty,note\n007,5,\n010,,ok\n")

        self.assertEqual(records, [
            {"code": "007", "qty": "5", "note": ""},
            {"code": "010", "qty": "", "note": "ok"},
        ])

    def test_blank_lines_skipped(self):
        from quality_analyzer.services.data_ingestion import CSVParser

        records = CSVParser().parse("a,b\n1,2\n\n3,4\n\n")
        self.assertEqual(len(records), 2)

    def test_quoted_fields(self):
        from quality_analyzer.services.data_ingestion import CSVParser

        records = CSVParser().parse('name,city\n"Smith, J","New York"\n')
        self.assertEqual(records, [{"name": "Smith, J", "city": "New York"}])

    def test_short_rows_are_missing(self):
        from quality_analyzer.ml.type_inference import is_missing
        from quality_analyzer.services.data_ingestion import CSVParser

        records = CSVParser().parse("a,b\n1\n2,3\n")

        self.assertEqual(records[0]["a"], "1")
        self.assertTrue(is_missing(records[0]["b"]))
        self.assertEqual(records[1], {"a": "2", "b": "3"})

    def test_header_only_and_empty_input(self):
        from quality_analyzer.services.data_ingestion import CSVParser

        self.assertEqual(CSVParser().parse("a,b\n"), [])
        self.assertEqual(CSVParser().parse(""), [])

    def test_malformed_csv(self):
        from quality_analyzer.core.exceptions import DecodeException
        from quality_analyzer.services.data_ingestion import CSVParser

        with self.assertRaises(DecodeException) as ctx:
            CSVParser().parse("a,b\n1,2\n3,4,5\n", "bad.csv")
        self.assertTrue(ctx.exception.message.startswith("CSV parsing error"))

    def test_every_row_wider_than_header(self):
        from quality_analyzer.core.exceptions import DecodeException
        from quality_analyzer.services.data_ingestion import CSVParser

        with self.assertRaises(DecodeException):
            CSVParser().parse("a,b\n1,2,3\n4,5,6\n", "wide.csv")

    def test_repeated_header_names(self):
        from quality_analyzer.services.data_ingestion import CSVParser

        records = CSVParser().parse("a,a,b\n1,2,3\n")
        self.assertEqual(records, [{"a": "1", "a.1": "2", "b": "3"}])


class TestJSONParser(unittest.TestCase):
    """Tests for JSONParser."""

    def test_array_of_objects(self):
        from quality_analyzer.services.data_ingestion import JSONParser

        records = JSONParser().parse('[{"a": 1}, {"a": null}]')
        self.assertEqual(records, [{"a": 1}, {"a": None}])

    def test_single_object_is_wrapped(self):
        from quality_analyzer.services.data_ingestion import JSONParser

        self.assertEqual(JSONParser().parse('{"a": 1}'), [{"a": 1}])

    def test_invalid_json(self):
        from quality_analyzer.core.exceptions import DecodeException
        from quality_analyzer.services.data_ingestion import JSONParser

        for text in ['{"a": 1', "[1, 2]", "42", '"text"']:
            with self.assertRaises(DecodeException):
                JSONParser().parse(text, "bad.json")


class TestDataIngestionService(unittest.TestCase):
    """Tests for DataIngestionService."""

    @classmethod
    def setUpClass(cls):
        cls.factory = SampleDataFactory()

    def test_detect_format(self):
        from quality_analyzer.services.data_ingestion import DataFormat, DataIngestionService

        service = DataIngestionService()
        self.assertEqual(service.detect_format("people.CSV"), DataFormat.CSV)
        self.assertEqual(service.detect_format("dump.json"), DataFormat.JSON)

    def test_unsupported_formats(self):
        from quality_analyzer.core.exceptions import UnsupportedFormatException
        from quality_analyzer.services.data_ingestion import DataIngestionService

        service = DataIngestionService()
        with self.assertRaises(UnsupportedFormatException):
            service.detect_format("notes.txt")
        with self.assertRaises(UnsupportedFormatException):
            service.detect_format("README")
        with self.assertRaises(UnsupportedFormatException) as ctx:
            service.decode("<a/>", "xml")
        self.assertEqual(ctx.exception.http_status_code, 415)

    def test_format_hint_overrides_extension(self):
        from quality_analyzer.services.data_ingestion import DataIngestionService

        records = DataIngestionService().decode('[{"a": 1}]', "JSON", "export.txt")
        self.assertEqual(records, [{"a": 1}])

    def test_disallowed_format(self):
        from quality_analyzer.core.config import Settings
        from quality_analyzer.core.exceptions import UnsupportedFormatException
        from quality_analyzer.services.data_ingestion import DataIngestionService

        service = DataIngestionService(settings=Settings(allowed_formats=["csv"]))
        with self.assertRaises(UnsupportedFormatException):
            service.analyze_content('[{"a": 1}]', "data.json")

    def test_csv_and_json_agree(self):
        from quality_analyzer.services.data_ingestion import DataIngestionService

        service = DataIngestionService()
        from_csv = service.analyze_content(self.factory.customers_csv(), "customers.csv")
        from_json = service.analyze_content(self.factory.customers_json(), "customers.json")

        self.assertEqual(from_csv.scores, from_json.scores)
        self.assertEqual(
            [c.type for c in from_csv.columns],
            [c.type for c in from_json.columns]
        )
        self.assertEqual(from_csv.file_name, "customers.csv")

    def test_header_only_csv_is_empty_dataset(self):
        from quality_analyzer.core.exceptions import EmptyDatasetException
        from quality_analyzer.services.data_ingestion import DataIngestionService

        with self.assertRaises(EmptyDatasetException):
            DataIngestionService().analyze_content("id,name\n", "empty.csv")

    def test_upload_size_limit(self):
        from quality_analyzer.core.config import Settings
        from quality_analyzer.core.exceptions import FileTooLargeException
        from quality_analyzer.services.data_ingestion import DataIngestionService

        service = DataIngestionService(settings=Settings(max_upload_size_mb=1))
        raw = b"a\n" + b"1\n" * (512 * 1024)

        with self.assertRaises(FileTooLargeException) as ctx:
            service.analyze_upload(raw, "big.csv")
        self.assertEqual(ctx.exception.http_status_code, 413)

    def test_byte_decoding(self):
        from quality_analyzer.services.data_ingestion import DataIngestionService

        service = DataIngestionService()
        self.assertEqual(service.decode_bytes("\ufeffname\ncafé\n".encode("utf-8")), "name\ncafé\n")
        self.assertEqual(service.decode_bytes(b"name\ncaf\xe9\n"), "name\ncafé\n")

        result = service.analyze_upload(b"name\ncaf\xe9\n", "menu.csv")
        self.assertEqual(result.columns[0].sample_values, ["café"])


if __name__ == '__main__':
    unittest.main()
