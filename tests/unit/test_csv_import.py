"""Tests for CSV parsing and row validation."""

import pytest

from feedback_triage.core import ValidationException
from feedback_triage.feedback.application import CsvImportService


class RecordingRepository:
    """Stands in for the feedback repository; only create_many is used."""

    def __init__(self):
        self.records = []

    async def create_many(self, records):
        self.records.extend(records)
        return len(records)


HEADER = "customer_name,service_type,review_text,review_rating,issue_location\n"


@pytest.fixture
def repository():
    return RecordingRepository()


@pytest.fixture
def service(repository):
    return CsvImportService(repository, max_bytes=10_000)


class TestCsvParsing:

    def test_valid_rows(self, service):
        content = (
            HEADER
            + "Ahmad Rahman,ATM,Card stuck,2,Kuala Lumpur\n"
            + "Siti Aminah,OnlineBanking,Great app,5,\n"
        ).encode()

        records, errors = service.parse(content)

        assert errors == []
        assert len(records) == 2
        assert records[0]["sentiment"] == "negative"
        assert records[0]["negative_flag"] is True
        assert records[1]["sentiment"] == "positive"
        assert "issue_location" not in records[1]

    def test_invalid_rows_are_reported_by_line(self, service):
        content = (
            HEADER
            + "Ahmad Rahman,ATM,Card stuck,2,Kuala Lumpur\n"
            + "Raj Kumar,Telephone,Rude agent,1,Penang\n"
            + "Lim Wei Ming,CoreBanking,Okay,9,Penang\n"
        ).encode()

        records, errors = service.parse(content)

        assert len(records) == 1
        assert len(errors) == 2
        assert errors[0].startswith("row 3: service_type")
        assert errors[1].startswith("row 4: review_rating")

    def test_blank_rows_are_skipped(self, service):
        content = (HEADER + ",,,,\n" + "Ahmad Rahman,ATM,Card stuck,2,\n").encode()

        records, errors = service.parse(content)

        assert len(records) == 1
        assert errors == []

    def test_utf8_bom_is_accepted(self, service):
        content = ("\ufeff" + HEADER + "Ahmad Rahman,ATM,Card stuck,2,\n").encode("utf-8")

        records, _ = service.parse(content)

        assert records[0]["customer_name"] == "Ahmad Rahman"

    def test_missing_required_column(self, service):
        content = b"customer_name,service_type,review_text\nAhmad,ATM,Card stuck\n"

        with pytest.raises(ValidationException) as exc_info:
            service.parse(content)

        assert exc_info.value.details["missing_columns"] == ["review_rating"]

    @pytest.mark.parametrize("content", [b"", b"   \n"])
    def test_empty_file(self, service, content):
        with pytest.raises(ValidationException, match="empty"):
            service.parse(content)

    def test_file_too_large(self, repository):
        service = CsvImportService(repository, max_bytes=1024)
        content = (HEADER + "Ahmad Rahman,ATM," + "x" * 2000 + ",2,\n").encode()

        with pytest.raises(ValidationException, match="exceeds"):
            service.parse(content)

    def test_non_utf8_file(self, service):
        content = (HEADER + "José,ATM,Card stuck,2,\n").encode("latin-1")

        with pytest.raises(ValidationException, match="UTF-8"):
            service.parse(content)


class TestCsvImport:

    async def test_import_summary(self, service, repository):
        content = (
            HEADER
            + "Ahmad Rahman,ATM,Card stuck,2,\n"
            + "Raj Kumar,ATM,Slow,0,\n"
        ).encode()

        response = await service.import_csv(content)

        assert response.imported == 1
        assert response.failed == 1
        assert response.message == "Imported 1 feedback records, 1 rows failed validation"
        assert len(repository.records) == 1
