"""
Shared vocabulary for the interchange codecs.

A codec turns a payload into an ordered list of DecodedRecord (a built
entity or the FormatError explaining why the record could not be built)
and turns entities back into bytes. Container-level failures are raised
as ContainerParseError; everything else is reported per record.
"""
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type, Union
import enum

from pydantic import ValidationError as PydanticValidationError

from authoring.core.errors import FormatError, ValidationError
from authoring.models.assessments import Assessment
from authoring.models.base import DomainModel
from authoring.models.questions import Question

Record = Union[Question, Assessment]


class Format(str, enum.Enum):
    JSON = "json"
    CSV = "csv"
    QTI = "qti"


class RecordKind(str, enum.Enum):
    QUESTIONS = "questions"
    ASSESSMENTS = "assessments"

    @property
    def model(self) -> Type[DomainModel]:
        return Question if self is RecordKind.QUESTIONS else Assessment

    @property
    def label(self) -> str:
        return "question" if self is RecordKind.QUESTIONS else "assessment"


@dataclass(frozen=True)
class DecodedRecord:
    """One record slot of a payload; exactly one of record and error is set."""
    index: int
    record: Optional[Record] = None
    error: Optional[FormatError] = None


def pydantic_issues(exc: PydanticValidationError) -> Tuple[ValidationError, ...]:
    """Flatten a pydantic error into the engine's field/type/reason records."""
    return tuple(
        ValidationError(
            ".".join(str(part) for part in err["loc"]) or "record",
            "INVALID_STRUCTURE",
            err["msg"],
        )
        for err in exc.errors()
    )


def build_record(kind: RecordKind, index: int, data: Mapping[str, Any]) -> DecodedRecord:
    """Construct one entity, turning a structural failure into a FormatError."""
    try:
        record = kind.model.model_validate(data)
    except PydanticValidationError as exc:
        return DecodedRecord(
            index=index,
            error=FormatError(index, f"not a valid {kind.label}", pydantic_issues(exc)),
        )
    return DecodedRecord(index=index, record=record)


def failed(index: int, reason: str) -> DecodedRecord:
    return DecodedRecord(index=index, error=FormatError(index, reason))


def split_by_kind(records: Sequence[Any], kind: RecordKind) -> Tuple[List[Tuple[int, Record]], List[FormatError]]:
    """Pair each exportable record with its 1-based index; anything else becomes an error."""
    accepted: List[Tuple[int, Record]] = []
    errors: List[FormatError] = []
    for index, record in enumerate(records, start=1):
        if isinstance(record, kind.model):
            accepted.append((index, record))
        else:
            errors.append(FormatError(index, f"record is not a {kind.label}"))
    return accepted, errors


class Codec:
    """Base class for one interchange format."""

    format: Format
    content_type: str
    extension: str

    def decode(self, data: bytes, kind: RecordKind) -> List[DecodedRecord]:
        raise NotImplementedError

    def encode(self, records: Sequence[Record], kind: RecordKind) -> Tuple[bytes, List[FormatError]]:
        raise NotImplementedError
