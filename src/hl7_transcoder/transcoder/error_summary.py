"""Error summary collection and reporting for batch transcoding.

This module aggregates the error records of one or more batches and renders
a human-readable report with remediation guidance.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from hl7_transcoder.models.records import ErrorRecord, ProcessedRecord
from hl7_transcoder.utils.exceptions import ErrorCategory, ErrorInfo

logger = logging.getLogger(__name__)


@dataclass
class ErrorSummary:
    """Aggregated error statistics for batch transcoding.

    Attributes:
        total_records: Number of records processed
        total_errors: Total number of error records
        errors_by_category: Count of errors by category
        errors_by_type: Count of errors by exception type
        affected_positions: Record positions affected by each error type
        most_common_errors: List of (error_type, count) tuples sorted by frequency
        error_rate: Percentage of records that failed
    """

    total_records: int = 0
    total_errors: int = 0
    errors_by_category: Dict[ErrorCategory, int] = field(default_factory=dict)
    errors_by_type: Dict[str, int] = field(default_factory=dict)
    affected_positions: Dict[str, List[str]] = field(default_factory=dict)
    most_common_errors: List[tuple] = field(default_factory=list)
    error_rate: float = 0.0


class ErrorSummaryCollector:
    """Collects and aggregates per-record errors.

    Example:
        >>> collector = ErrorSummaryCollector()
        >>> collector.add_results(processor.process(records))
        >>> print(generate_error_report(collector.get_summary()))
    """

    def __init__(self) -> None:
        self.errors: List[ErrorInfo] = []
        self.record_count: int = 0

    def add_error(self, error_info: ErrorInfo) -> None:
        """Add one error to the collection."""
        self.errors.append(error_info)

    def add_results(self, results: Iterable[ProcessedRecord]) -> None:
        """Count a batch of results and collect its error records."""
        for result in results:
            self.record_count += 1
            if isinstance(result, ErrorRecord):
                self.add_error(result.error_info)

    def get_summary(self) -> ErrorSummary:
        """Generate error summary with aggregated statistics.

        Returns:
            ErrorSummary with counts, error rate, and affected positions
        """
        logger.debug(f"Generating error summary for {len(self.errors)} errors")

        errors_by_category: Dict[ErrorCategory, int] = defaultdict(int)
        errors_by_type: Dict[str, int] = defaultdict(int)
        affected_positions: Dict[str, List[str]] = defaultdict(list)

        for error in self.errors:
            errors_by_category[error.category] += 1
            errors_by_type[error.error_type] += 1
            if error.position:
                affected_positions[error.error_type].append(error.position)

        most_common_errors = sorted(
            errors_by_type.items(),
            key=lambda x: x[1],
            reverse=True
        )

        error_rate = 0.0
        if self.record_count > 0:
            error_rate = (len(self.errors) / self.record_count) * 100

        return ErrorSummary(
            total_records=self.record_count,
            total_errors=len(self.errors),
            errors_by_category=dict(errors_by_category),
            errors_by_type=dict(errors_by_type),
            affected_positions=dict(affected_positions),
            most_common_errors=most_common_errors,
            error_rate=error_rate,
        )


def generate_error_report(summary: ErrorSummary, remediation: Optional[Dict[str, str]] = None) -> str:
    """Render an ErrorSummary as a plain-text report.

    Args:
        summary: Aggregated summary
        remediation: Optional remediation text keyed by error type

    Returns:
        Multi-line report
    """
    lines = [
        "=" * 60,
        "TRANSCODING ERROR SUMMARY",
        "=" * 60,
        f"Records processed: {summary.total_records}",
        f"Records failed:    {summary.total_errors} ({summary.error_rate:.1f}%)",
    ]

    if summary.total_errors == 0:
        lines.append("")
        lines.append("No errors.")
        return "\n".join(lines)

    lines.append("")
    lines.append("By category:")
    for category, count in sorted(summary.errors_by_category.items(), key=lambda x: x[0].value):
        lines.append(f"  {category.value}: {count}")

    lines.append("")
    lines.append("By error type:")
    for error_type, count in summary.most_common_errors:
        lines.append(f"  {error_type}: {count}")
        positions = summary.affected_positions.get(error_type, [])
        if positions:
            shown = ", ".join(positions[:5])
            more = f" (+{len(positions) - 5} more)" if len(positions) > 5 else ""
            lines.append(f"    positions: {shown}{more}")
        if remediation and error_type in remediation:
            lines.append(f"    fix: {remediation[error_type]}")

    return "\n".join(lines)
