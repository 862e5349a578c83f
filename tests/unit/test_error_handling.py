"""Unit tests for error categorization and batch error summaries."""

import pytest

from hl7_transcoder.models.records import ErrorRecord, Record, TranscodedRecord
from hl7_transcoder.transcoder.error_summary import ErrorSummaryCollector, generate_error_report
from hl7_transcoder.utils.exceptions import (
    ConfigurationError,
    ErrorCategory,
    FormatError,
    MappingError,
    TranscoderError,
    categorize_error,
    create_error_info,
)


def _error_record(exc: Exception, position: str) -> ErrorRecord:
    return ErrorRecord(error=exc, error_info=create_error_info(exc, position=position))


class TestExceptionHierarchy:
    """Test custom exception classes."""

    @pytest.mark.parametrize("exc_class", [FormatError, MappingError, ConfigurationError])
    def test_inherits_from_base(self, exc_class):
        """Test every custom exception is a TranscoderError."""
        assert issubclass(exc_class, TranscoderError)


class TestCategorizeError:
    """Test error categorization."""

    @pytest.mark.parametrize(
        "exc,category",
        [
            (FormatError("x"), ErrorCategory.FORMAT),
            (MappingError("x"), ErrorCategory.MAPPING),
            (ConfigurationError("x"), ErrorCategory.CONFIGURATION),
            (RuntimeError("x"), ErrorCategory.UNEXPECTED),
            (TranscoderError("x"), ErrorCategory.UNEXPECTED),
        ],
    )
    def test_categories(self, exc, category):
        """Test each exception maps to its category."""
        assert categorize_error(exc) == category


class TestCreateErrorInfo:
    """Test structured error information."""

    def test_error_info_fields(self):
        """Test fields are populated from the exception."""
        # Arrange
        exc = MappingError("Cannot render empty gender")

        # Act
        info = create_error_info(exc, position="12")

        # Assert
        assert info.category == ErrorCategory.MAPPING
        assert info.error_type == "MappingError"
        assert info.message == "Cannot render empty gender"
        assert "male, female, unknown" in info.remediation
        assert info.position == "12"
        assert info.technical_details is None

    def test_technical_details_from_cause(self):
        """Test a chained cause is recorded."""
        try:
            try:
                raise ValueError("inner")
            except ValueError as e:
                raise FormatError("outer") from e
        except FormatError as exc:
            info = create_error_info(exc)

        assert info.technical_details == "Caused by: ValueError: inner"

    def test_to_dict(self):
        """Test serialization uses the category value."""
        data = create_error_info(ConfigurationError("nope")).to_dict()

        assert data["category"] == "CONFIGURATION"
        assert data["error_type"] == "ConfigurationError"
        assert "fhir->hl7" in data["remediation"]


class TestErrorSummaryCollector:
    """Test batch error aggregation."""

    def test_summary_counts(self):
        """Test counts, rate and positions are aggregated."""
        # Arrange
        collector = ErrorSummaryCollector()
        results = [
            TranscodedRecord.wrap(Record(payload=b"a"), b"ok"),
            _error_record(FormatError("bad"), "1"),
            _error_record(FormatError("bad"), "2"),
            _error_record(MappingError("gender"), "3"),
        ]

        # Act
        collector.add_results(results)
        summary = collector.get_summary()

        # Assert
        assert summary.total_records == 4
        assert summary.total_errors == 3
        assert summary.error_rate == 75.0
        assert summary.errors_by_category == {ErrorCategory.FORMAT: 2, ErrorCategory.MAPPING: 1}
        assert summary.most_common_errors[0] == ("FormatError", 2)
        assert summary.affected_positions["FormatError"] == ["1", "2"]

    def test_empty_summary(self):
        """Test an empty collector reports no errors."""
        summary = ErrorSummaryCollector().get_summary()

        assert summary.total_records == 0
        assert summary.error_rate == 0.0

    def test_report_without_errors(self):
        """Test the report states there were no errors."""
        collector = ErrorSummaryCollector()
        collector.add_results([TranscodedRecord.wrap(Record(payload=b"a"), b"ok")])

        report = generate_error_report(collector.get_summary())

        assert "Records processed: 1" in report
        assert "No errors." in report

    def test_report_with_errors(self):
        """Test the report lists categories, types, positions and fixes."""
        # Arrange
        collector = ErrorSummaryCollector()
        collector.add_results([_error_record(FormatError("bad"), str(i)) for i in range(7)])

        # Act
        report = generate_error_report(collector.get_summary(), remediation={"FormatError": "Fix the input"})

        # Assert
        assert "Records failed:    7 (100.0%)" in report
        assert "FORMAT: 7" in report
        assert "FormatError: 7" in report
        assert "positions: 0, 1, 2, 3, 4 (+2 more)" in report
        assert "fix: Fix the input" in report
