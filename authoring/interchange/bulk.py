"""
Bulk import and export across the interchange formats.

parse() isolates failures per record. A container that cannot be read at
all yields a report whose only content is the fatal ContainerParseError;
otherwise every record is built, then validated, and each failure at
either stage becomes one FormatError carrying the record's 1-based index.
"""
import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from authoring.core.config import get_settings
from authoring.core.errors import ContainerParseError, FormatError, UnknownFormatError
from authoring.interchange.csv_codec import CsvCodec
from authoring.interchange.json_codec import JsonCodec
from authoring.interchange.qti_codec import QtiCodec
from authoring.interchange.records import Codec, DecodedRecord, Format, Record, RecordKind
from authoring.jobs.bulk_validation import Clock, PartialResult, run_batch
from authoring.models.assessments import Assessment
from authoring.services.lifecycle import validate_assessment
from authoring.services.validator import ValidationResult, validate

logger = logging.getLogger(__name__)

CODECS: Mapping[Format, Codec] = MappingProxyType({
    Format.JSON: JsonCodec(),
    Format.CSV: CsvCodec(),
    Format.QTI: QtiCodec(),
})


def get_codec(format: Union[Format, str]) -> Codec:
    """Look up a codec by format tag; anything outside json|csv|qti raises UnknownFormatError."""
    try:
        return CODECS[Format(format)]
    except ValueError:
        raise UnknownFormatError(
            f"Unknown format {format!r}; expected one of {', '.join(f.value for f in Format)}"
        ) from None


@dataclass(frozen=True)
class ImportReport:
    records: List[Record] = field(default_factory=list)
    errors: List[FormatError] = field(default_factory=list)
    fatal: Optional[ContainerParseError] = None
    partial: Optional[PartialResult] = None

    @property
    def imported(self) -> int:
        return len(self.records)

    @property
    def ok(self) -> bool:
        return self.fatal is None and not self.errors and self.partial is None

    def error_messages(self) -> List[str]:
        if self.fatal is not None:
            return [self.fatal.message]
        return [str(e) for e in self.errors]

    def summary(self) -> Dict[str, Any]:
        """The shape handed back to the upload endpoint's caller."""
        out: Dict[str, Any] = {"imported": self.imported, "errors": self.error_messages()}
        if self.partial is not None:
            out["partial"] = self.partial.to_dict()
        return out

    def raise_for_error(self) -> List[Record]:
        """Return the records, raising the container failure if there was one."""
        if self.fatal is not None:
            raise self.fatal
        return self.records


@dataclass(frozen=True)
class ExportResult:
    content: bytes = b""
    errors: List[FormatError] = field(default_factory=list)
    fatal: Optional[ContainerParseError] = None
    content_type: str = ""
    filename: str = ""

    def raise_for_error(self) -> bytes:
        if self.fatal is not None:
            raise self.fatal
        return self.content


def _check_record(record: Record) -> ValidationResult:
    if isinstance(record, Assessment):
        return validate_assessment(record)
    return validate(record)


def parse(
    format: Union[Format, str],
    data: bytes,
    kind: Union[RecordKind, str] = RecordKind.QUESTIONS,
    deadline_seconds: Optional[float] = None,
    max_workers: Optional[int] = None,
    clock: Clock = time.monotonic,
) -> ImportReport:
    """
    Import a batch of questions or assessments.

    deadline_seconds defaults to IMPORT_TIMEOUT_SECONDS (no deadline when
    unset). Records that were never validated before the deadline are
    counted in report.partial and appear in neither records nor errors.
    """
    codec = get_codec(format)
    kind = RecordKind(kind)
    settings = get_settings()
    if deadline_seconds is None:
        deadline_seconds = settings.IMPORT_TIMEOUT_SECONDS

    try:
        decoded = codec.decode(data, kind)
        if len(decoded) > settings.IMPORT_MAX_RECORDS:
            raise ContainerParseError(
                codec.format.value,
                f"Payload holds {len(decoded)} records; the limit is {settings.IMPORT_MAX_RECORDS}",
            )
    except ContainerParseError as e:
        logger.warning(f"Import of {kind.value} from {codec.format.value} failed: {e.message}")
        return ImportReport(fatal=e)

    errors = [d.error for d in decoded if d.error is not None]
    built: List[DecodedRecord] = [d for d in decoded if d.record is not None]

    outcome = run_batch(
        built,
        lambda d: _check_record(d.record),
        max_workers=max_workers,
        deadline_seconds=deadline_seconds,
        clock=clock,
    )

    records: List[Record] = []
    for slot, result in zip(built, outcome.results):
        if result.ok:
            records.append(slot.record)
        else:
            errors.append(FormatError(
                slot.index,
                f"failed validation: {'; '.join(result.messages())}",
                tuple(result.errors),
            ))
    errors.sort(key=lambda e: e.record_index)

    report = ImportReport(records=records, errors=errors, partial=outcome.partial)
    logger.info(
        f"Imported {kind.value} from {codec.format.value}: "
        f"{report.imported} imported, {len(errors)} errors, partial={report.partial is not None}"
    )
    return report


def export(
    records: Sequence[Record],
    format: Union[Format, str],
    kind: Union[RecordKind, str] = RecordKind.QUESTIONS,
) -> ExportResult:
    """Serialize records in input order; records the format cannot carry are reported, not written."""
    codec = get_codec(format)
    kind = RecordKind(kind)
    filename = f"{kind.value}_export.{codec.extension}"

    try:
        content, errors = codec.encode(records, kind)
    except ContainerParseError as e:
        logger.warning(f"Export of {kind.value} to {codec.format.value} failed: {e.message}")
        return ExportResult(fatal=e, content_type=codec.content_type, filename=filename)

    logger.info(
        f"Exported {kind.value} to {codec.format.value}: "
        f"{len(records) - len(errors)} written, {len(errors)} skipped"
    )
    return ExportResult(content=content, errors=errors, content_type=codec.content_type, filename=filename)
