"""Batch record processor.

HL7Processor is the pipeline stage: it is configured once with an input and
output format, then transcodes ordered batches of records. Every input record
yields exactly one result at the same index, either a TranscodedRecord or an
ErrorRecord; a failing record never stops its siblings.
"""

import logging
import time
from typing import List, Mapping, Optional, Sequence

from hl7_transcoder import __version__
from hl7_transcoder.config.manager import parse_processor_config
from hl7_transcoder.config.schema import ConversionConfig
from hl7_transcoder.logging_audit.audit import ResultObserver
from hl7_transcoder.models.records import ErrorRecord, ProcessedRecord, Record, TranscodedRecord
from hl7_transcoder.models.specification import Parameter, Specification
from hl7_transcoder.transcoder.router import Conversion, Format, resolve_conversion
from hl7_transcoder.utils.exceptions import ConfigurationError, TranscoderError, create_error_info

logger = logging.getLogger(__name__)

PROCESSOR_NAME = "conduit-processor-hl7"


class HL7Processor:
    """Transcodes batches of patient records between FHIR, HL7 v2 and HL7 v3.

    Attributes:
        on_result: Optional callback invoked with (index, record, result)
            after each record is processed

    Example:
        >>> processor = HL7Processor()
        >>> processor.configure({"inputType": "fhir", "outputType": "hl7"})
        >>> results = processor.process([Record(payload=b'{"id": "456"}')])
        >>> results[0].is_success
        True
    """

    def __init__(self, on_result: Optional[ResultObserver] = None) -> None:
        self.on_result = on_result
        self._config: Optional[ConversionConfig] = None
        self._conversion: Optional[Conversion] = None

    @property
    def config(self) -> Optional[ConversionConfig]:
        return self._config

    @property
    def conversion(self) -> Optional[Conversion]:
        return self._conversion

    def configure(self, cfg: Mapping[str, str]) -> None:
        """Validate configuration and resolve the conversion.

        An unsupported pair is rejected here, before any record is processed.

        Args:
            cfg: Mapping with inputType and outputType

        Raises:
            ConfigurationError: If the configuration is invalid or the pair is
                not supported
        """
        config = parse_processor_config(cfg)
        conversion = resolve_conversion(config.input_type, config.output_type)

        self._config = config
        self._conversion = conversion
        logger.info(f"Processor configured for {conversion.pair} conversion")

    def specification(self) -> Specification:
        """Return processor metadata and its configuration parameters."""
        formats = ",".join(f.value for f in Format)
        return Specification(
            name=PROCESSOR_NAME,
            summary="Converts patient records between FHIR, HL7 v2 and HL7 v3.",
            description=(
                "Transcodes FHIR Patient JSON to HL7 v2 ADT^A01 text (wrapped as "
                '{"hl7": "..."}) or HL7 v3 Patient XML, and HL7 v2 or HL7 v3 '
                "back to FHIR Patient JSON. HL7 v2 input may be raw text starting "
                "with MSH| or the JSON-wrapped form."
            ),
            version=f"v{__version__}",
            author="hl7-transcoder contributors",
            parameters={
                "inputType": Parameter(
                    default="",
                    description="Format of incoming records.",
                    validations=["required", f"inclusion={formats}"],
                ),
                "outputType": Parameter(
                    default="",
                    description="Format of outgoing records.",
                    validations=["required", f"inclusion={formats}"],
                ),
            },
        )

    def process(self, records: Sequence[Record]) -> List[ProcessedRecord]:
        """Transcode a batch of records.

        Args:
            records: Ordered batch of records

        Returns:
            One result per input record, in input order
        """
        start_time = time.time()
        results: List[ProcessedRecord] = []

        for index, record in enumerate(records):
            result = self.process_record(record)
            results.append(result)
            if self.on_result is not None:
                self.on_result(index, record, result)

        error_count = sum(1 for r in results if isinstance(r, ErrorRecord))
        logger.debug(
            f"Processed batch of {len(results)} records "
            f"({error_count} errors) in {time.time() - start_time:.3f}s"
        )
        return results

    def process_record(self, record: Record) -> ProcessedRecord:
        """Transcode one record, capturing any failure as an ErrorRecord."""
        position = record.position.decode("utf-8", errors="replace") or None

        try:
            if self._conversion is None:
                raise ConfigurationError(
                    "Processor is not configured. Call configure() with inputType and outputType first."
                )
            payload = self._conversion.convert(record.payload)
        except TranscoderError as e:
            return ErrorRecord(error=e, error_info=create_error_info(e, position=position))
        except Exception as e:
            logger.exception(f"Unexpected error transcoding record at position {position}")
            return ErrorRecord(error=e, error_info=create_error_info(e, position=position))

        return TranscodedRecord.wrap(record, payload)
