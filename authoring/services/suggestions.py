"""
Intake for AI-suggested questions.

Suggestions are untrusted input. They are built into a Question and run
through the validator unconditionally; this is the only acceptance path.
"""
import logging
from dataclasses import dataclass
from string import ascii_uppercase
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from authoring.core.errors import ValidationError, ValidationWarning
from authoring.interchange.records import pydantic_issues
from authoring.models.questions import Question, QuestionType
from authoring.services.validator import validate

logger = logging.getLogger(__name__)

# Type labels used by the generator prompts
_GENERATOR_TYPES = {
    "MCQ": QuestionType.MULTIPLE_CHOICE.value,
    "TrueFalse": QuestionType.TRUE_FALSE.value,
    "Essay": QuestionType.ESSAY.value,
    "FillBlank": QuestionType.FILL_IN_BLANK.value,
}


@dataclass(frozen=True)
class SuggestionOutcome:
    question: Optional[Question] = None
    errors: Tuple[ValidationError, ...] = ()
    warnings: Tuple[ValidationWarning, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.question is not None

    def messages(self) -> List[str]:
        return [str(e) for e in self.errors]


def _normalize(payload: Mapping[str, Any], default_points: int) -> Dict[str, Any]:
    """Map the generator's loose shape (stem, lettered options) onto the question shape."""
    data = dict(payload)
    tag = data.get("type")
    if isinstance(tag, str):
        data["type"] = _GENERATOR_TYPES.get(tag, tag)

    if "content" not in data:
        # stem wins; text is the fallback when the stem is missing or blank
        stem = data.pop("stem", None)
        text = data.pop("text", None)
        if isinstance(stem, str) and stem.strip():
            content = {"text": stem}
        else:
            content = {"text": text if text is not None else (stem if stem is not None else "")}
        if data.get("instructions"):
            content["instructions"] = data.pop("instructions")
        data["content"] = content

    options = data.get("options")
    if isinstance(options, list):
        labelled = []
        for i, opt in enumerate(options):
            if isinstance(opt, Mapping) and not opt.get("id") and i < len(ascii_uppercase):
                opt = {**opt, "id": ascii_uppercase[i]}
            labelled.append(opt)
        data["options"] = labelled

    data.setdefault("points", default_points)
    return data


def accept_suggested_question(payload: Mapping[str, Any], default_points: int = 1) -> SuggestionOutcome:
    """Build and validate a suggested question; only a fully valid one is accepted."""
    try:
        question = Question.model_validate(_normalize(payload, default_points))
    except PydanticValidationError as e:
        logger.info(f"Suggested question rejected: {e.error_count()} structural error(s)")
        return SuggestionOutcome(errors=pydantic_issues(e))

    result = validate(question)
    if not result.ok:
        logger.info(f"Suggested question rejected: {', '.join(result.error_types())}")
        return SuggestionOutcome(errors=result.errors, warnings=result.warnings)
    return SuggestionOutcome(question=question, warnings=result.warnings)
