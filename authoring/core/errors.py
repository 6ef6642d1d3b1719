"""
Error taxonomy for the authoring engine.

Two families live here. Value records (ValidationError, ValidationWarning,
FormatError) are collected into lists and never raised. AuthoringError
subclasses are exceptions, but the engine hands them back inside result
objects; callers decide whether to raise them.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


# ========== Collected records ==========

@dataclass(frozen=True)
class ValidationError:
    """A single structural defect in a question, rubric or assessment."""
    field: str
    type: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "type": self.type, "reason": self.reason}


@dataclass(frozen=True)
class ValidationWarning:
    """Advisory finding; never changes whether a record is valid."""
    field: str
    type: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "type": self.type, "reason": self.reason}


@dataclass(frozen=True)
class FormatError:
    """A single bad record during parse or export; the batch continues."""
    record_index: int
    reason: str
    issues: Tuple[ValidationError, ...] = ()

    kind = "format_error"

    def __str__(self) -> str:
        return f"record {self.record_index}: {self.reason}"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "recordIndex": self.record_index,
            "type": self.kind,
            "reason": self.reason,
        }
        if self.issues:
            out["issues"] = [issue.to_dict() for issue in self.issues]
        return out


@dataclass(frozen=True)
class UnsupportedTypeError(FormatError):
    """A record whose question type the chosen format cannot carry."""
    question_type: str = ""

    kind = "unsupported_type"


# ========== Exceptions carried as values ==========

class AuthoringError(Exception):
    """Base class for engine errors."""

    error_type = "authoring_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Render as the error envelope used by the API layer."""
        body: Dict[str, Any] = {"message": self.message, "type": self.error_type}
        body.update(self.details())
        return {"error": body}


class ContainerParseError(AuthoringError):
    """The payload as a whole is not well-formed for its declared format."""

    error_type = "container_parse_error"

    def __init__(self, format: str, message: str):
        super().__init__(message)
        self.format = format

    def details(self) -> Dict[str, Any]:
        return {"format": self.format}


class UnsupportedFormatError(ContainerParseError):
    """The format cannot carry the requested record kind at all."""

    error_type = "unsupported_format"

    def __init__(self, format: str, kind: str):
        super().__init__(format, f"{format} does not support {kind}")
        self.kind = kind

    def details(self) -> Dict[str, Any]:
        return {"format": self.format, "kind": self.kind}


class UnknownFormatError(AuthoringError, ValueError):
    """Raised for a format tag outside the supported set."""

    error_type = "unknown_format"


class StateTransitionError(AuthoringError):
    """Base class for rejected lifecycle transitions."""

    error_type = "state_transition_error"


class EmptyAssessmentError(StateTransitionError):
    error_type = "empty_assessment"

    def __init__(self, assessment_id: str):
        super().__init__(f"Assessment {assessment_id} has no questions")
        self.assessment_id = assessment_id


class InvalidQuestionsError(StateTransitionError):
    """One or more referenced questions fail validation."""

    error_type = "invalid_questions"

    def __init__(self, failures: Mapping[str, Sequence[ValidationError]]):
        self.failures: Dict[str, List[ValidationError]] = {
            qid: list(errors) for qid, errors in failures.items()
        }
        super().__init__(f"{len(self.failures)} question(s) failed validation")

    def details(self) -> Dict[str, Any]:
        return {
            "questions": {
                qid: [str(e) for e in errors] for qid, errors in self.failures.items()
            }
        }


class InvalidSettingsError(StateTransitionError):
    error_type = "invalid_settings"

    def __init__(self, problems: Sequence[ValidationError]):
        self.problems = list(problems)
        super().__init__("; ".join(str(p) for p in self.problems) or "Invalid settings")

    def details(self) -> Dict[str, Any]:
        return {"problems": [p.to_dict() for p in self.problems]}


class IllegalTransitionError(StateTransitionError):
    error_type = "illegal_transition"

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Cannot move assessment from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status

    def details(self) -> Dict[str, Any]:
        return {"from": self.from_status, "to": self.to_status}


class AlreadyTerminalError(StateTransitionError):
    error_type = "already_terminal"

    def __init__(self, assessment_id: str, status: str):
        super().__init__(f"Assessment {assessment_id} is already {status}")
        self.assessment_id = assessment_id
        self.status = status


class UnreachableStateError(AuthoringError):
    """A code path was reached that earlier checks should have ruled out."""

    error_type = "internal_error"


# ========== Caller contract violations (raised) ==========

class InvalidPageSizeError(ValueError):
    def __init__(self, limit: int, maximum: Optional[int] = None):
        if maximum is None:
            message = f"limit must be greater than 0, got {limit}"
        else:
            message = f"limit must not exceed {maximum}, got {limit}"
        super().__init__(message)
        self.limit = limit
        self.maximum = maximum


class InvalidPageNumberError(ValueError):
    def __init__(self, page: int):
        super().__init__(f"page is 1-indexed, got {page}")
        self.page = page
