"""Test suite for reading CSV and JSON access-log exports."""

import sys
import os
from datetime import datetime, timezone

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from repeater.errors import (
    BadTimestampError,
    IoFailureError,
    RecordDecodeError,
    UnsupportedInputError,
)
from repeater.persistence.reader import read_records


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestCsvInput:
    """CSV exports."""

    def test_reads_and_sorts_rows(self, tmp_path):
        path = write(tmp_path, "log.csv", (
            "@timestamp,path,params,target_processing_time\n"
            "2024-01-01T00:00:02.000Z,/c,,0.3\n"
            "2024-01-01T00:00:00.000Z,/a,?x=1,0.1\n"
            "2024-01-01T00:00:01.000Z,/b,,0.2\n"
        ))

        records = read_records(path)

        assert [record.path for record in records] == ["/a", "/b", "/c"]
        assert records[0].parameters == "?x=1"
        assert records[0].required_time == 0.1
        assert records[0].timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_ties_keep_file_order(self, tmp_path):
        path = write(tmp_path, "log.csv", (
            "@timestamp,path,params,target_processing_time\n"
            "2024-01-01T00:00:01.000Z,/second,,0.1\n"
            "2024-01-01T00:00:01.000Z,/third,,0.1\n"
            "2024-01-01T00:00:00.000Z,/first,,0.1\n"
        ))

        assert [record.path for record in read_records(path)] == ["/first", "/second", "/third"]

    def test_optional_fields_default_to_empty(self, tmp_path):
        path = write(tmp_path, "log.csv", (
            "domain_name,@timestamp,path,params,target_processing_time,status\n"
            ",2024-01-01T00:00:00.000Z,/a,,0.1,200\n"
            "b.example,2024-01-01T00:00:01.000Z,/b,?q=1,0.2,500\n"
        ))

        records = read_records(path)

        assert records[0].domain_name is None
        assert records[0].parameters == ""
        assert records[1].domain_name == "b.example"
        assert records[1].path_and_parameters == "/b?q=1"

    def test_missing_column_is_rejected(self, tmp_path):
        path = write(tmp_path, "log.csv", "@timestamp,params\n2024-01-01T00:00:00.000Z,\n")

        with pytest.raises(RecordDecodeError, match="path"):
            read_records(path)

    def test_missing_params_column_is_rejected(self, tmp_path):
        path = write(tmp_path, "log.csv", (
            "@timestamp,path,target_processing_time\n"
            "2024-01-01T00:00:00.000Z,/a,0.1\n"
        ))

        with pytest.raises(RecordDecodeError, match="params"):
            read_records(path)

    def test_bad_row_names_the_row(self, tmp_path):
        path = write(tmp_path, "log.csv", (
            "@timestamp,path,params,target_processing_time\n"
            "2024-01-01T00:00:00.000Z,/a,,0.1\n"
            "not-a-time,/b,,0.1\n"
        ))

        with pytest.raises(BadTimestampError, match="row 2"):
            read_records(path)

    def test_non_numeric_processing_time_is_rejected(self, tmp_path):
        path = write(tmp_path, "log.csv", (
            "@timestamp,path,params,target_processing_time\n"
            "2024-01-01T00:00:00.000Z,/a,,fast\n"
        ))

        with pytest.raises(RecordDecodeError, match="target_processing_time"):
            read_records(path)

    def test_header_only_file_is_empty(self, tmp_path):
        path = write(tmp_path, "log.csv", "@timestamp,path,params,target_processing_time\n")
        assert read_records(path) == []

    def test_blank_file_is_empty(self, tmp_path):
        path = write(tmp_path, "log.csv", "")
        assert read_records(path) == []


class TestJsonInput:
    """JSON exports: concatenated ``_source`` objects."""

    def test_reads_newline_delimited_objects(self, tmp_path):
        path = write(tmp_path, "log.json", (
            '{"_source": {"@timestamp": "2024-01-01T00:00:01.000Z", "path": "/b", '
            '"params": "", "target_processing_time": 0.2, "domain_name": "b.example"}}\n'
            '{"_source": {"@timestamp": "2024-01-01T00:00:00.000Z", "path": "/a", '
            '"params": "?x=1", "target_processing_time": "0.1"}}\n'
        ))

        records = read_records(path)

        assert [record.path for record in records] == ["/a", "/b"]
        assert records[0].required_time == 0.1
        assert records[0].domain_name is None
        assert records[1].domain_name == "b.example"

    def test_reads_whitespace_separated_objects(self, tmp_path):
        path = write(tmp_path, "log.json", (
            '  {"_source": {"@timestamp": "2024-01-01T00:00:00.000Z", "path": "/a", "target_processing_time": 1}}'
            '{"_source": {"@timestamp": "2024-01-01T00:00:00.250Z", "path": "/b", "target_processing_time": 1}}\t\n'
        ))

        records = read_records(path)

        assert [record.path for record in records] == ["/a", "/b"]
        assert records[0].parameters == ""

    def test_malformed_object_aborts(self, tmp_path):
        path = write(tmp_path, "log.json", (
            '{"_source": {"@timestamp": "2024-01-01T00:00:00.000Z", "path": "/a", "target_processing_time": 1}}\n'
            '{"_source": {"@timestamp": \n'
        ))

        with pytest.raises(RecordDecodeError, match="object 2"):
            read_records(path)

    def test_object_without_source_is_rejected(self, tmp_path):
        path = write(tmp_path, "log.json", '{"@timestamp": "2024-01-01T00:00:00.000Z", "path": "/a"}')

        with pytest.raises(RecordDecodeError, match="_source"):
            read_records(path)

    def test_missing_path_is_rejected(self, tmp_path):
        path = write(tmp_path, "log.json", (
            '{"_source": {"@timestamp": "2024-01-01T00:00:00.000Z", "target_processing_time": 1}}'
        ))

        with pytest.raises(RecordDecodeError, match="path"):
            read_records(path)

    def test_empty_file_is_empty(self, tmp_path):
        path = write(tmp_path, "log.json", "\n\n")
        assert read_records(path) == []


class TestInputSelection:
    """Format selection and filesystem errors."""

    def test_unknown_extension(self, tmp_path):
        path = write(tmp_path, "log.txt", "")
        with pytest.raises(UnsupportedInputError, match="txt"):
            read_records(path)

    def test_missing_extension(self, tmp_path):
        path = write(tmp_path, "log", "")
        with pytest.raises(UnsupportedInputError):
            read_records(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(IoFailureError):
            read_records(str(tmp_path / "absent.json"))
        with pytest.raises(IoFailureError):
            read_records(str(tmp_path / "absent.csv"))
