"""
Question validator.

Applies the registry contract for a question's type and collects every
violation in one pass. Nothing here raises for a bad question; the
outcome is always a ValidationResult.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Any

from authoring.core.config import get_settings
from authoring.core.errors import ValidationError, ValidationWarning, UnreachableStateError
from authoring.models.questions import Question, QuestionBank, QuestionType
from authoring.services.registry import AnswerShape, OptionsPolicy, QuestionTypeContract, get_contract


@dataclass(frozen=True)
class ValidationResult:
    errors: Tuple[ValidationError, ...] = ()
    warnings: Tuple[ValidationWarning, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_types(self) -> List[str]:
        return [e.type for e in self.errors]

    def messages(self) -> List[str]:
        return [str(e) for e in self.errors]


@dataclass(frozen=True)
class RuleContext:
    min_word_limit: int


class Findings:
    """Accumulates errors and warnings for one record."""

    def __init__(self):
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationWarning] = []

    def error(self, field: str, type: str, reason: str) -> None:
        self.errors.append(ValidationError(field, type, reason))

    def warn(self, field: str, type: str, reason: str) -> None:
        self.warnings.append(ValidationWarning(field, type, reason))

    def result(self) -> ValidationResult:
        return ValidationResult(tuple(self.errors), tuple(self.warnings))


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


# ========== Shared contract checks ==========

def _check_common(question: Question, contract: QuestionTypeContract, found: Findings) -> None:
    for name in contract.required_content:
        if _is_blank(getattr(question.content, name, None)):
            found.error(f"content.{name}", "REQUIRED_FIELD", f"Question {name} is required")

    if not _is_positive_int(question.points):
        found.error("points", "INVALID_POINTS", "Points must be a whole number greater than 0")

    options = question.options
    if contract.options == OptionsPolicy.REQUIRED:
        if options is None:
            found.error("options", "OPTIONS_REQUIRED", f"{contract.label} questions require options")
        elif len(options) < contract.min_options:
            found.error(
                "options", "INSUFFICIENT_OPTIONS",
                f"{contract.label} questions must have at least {contract.min_options} options",
            )
    elif options:
        found.warn("options", "OPTIONS_IGNORED", f"Options are ignored for {contract.label} questions")

    answer = question.correct_answer
    if contract.answer_shape == AnswerShape.BOOLEAN and not isinstance(answer, bool):
        found.error("correctAnswer", "INVALID_ANSWER_SHAPE", "Correct answer must be true or false")
    elif contract.answer_shape == AnswerShape.STRING_LIST:
        if not isinstance(answer, list) or not answer or not all(isinstance(a, str) for a in answer):
            found.error(
                "correctAnswer", "INVALID_ANSWER_SHAPE",
                "Correct answer must be a non-empty list of accepted strings",
            )

    for key in contract.required_metadata:
        if _is_blank(question.get_metadata(key)):
            found.error(f"metadata.{key}", "MISSING_METADATA", f"metadata.{key} is required")


# ========== Per-type rules ==========

def _multiple_choice(question: Question, found: Findings, ctx: RuleContext) -> None:
    options = question.options or []
    if not any(opt.is_correct for opt in options):
        found.error("options", "NO_CORRECT_ANSWER", "At least one option must be marked as correct")

    seen = set()
    for index, opt in enumerate(options):
        if opt.id in seen:
            found.error(f"options[{index}].id", "DUPLICATE_OPTION_ID", f"Duplicate option id {opt.id!r}")
        seen.add(opt.id)
        if _is_blank(opt.text):
            found.warn(f"options[{index}].text", "EMPTY_OPTION_TEXT", "Option text is empty")


def _true_false(question: Question, found: Findings, ctx: RuleContext) -> None:
    pass


def _essay(question: Question, found: Findings, ctx: RuleContext) -> None:
    if not question.has_metadata("wordLimit"):
        return
    limit = question.get_metadata("wordLimit")
    if not _is_positive_number(limit):
        found.error("metadata.wordLimit", "INVALID_WORD_LIMIT", "Word limit must be greater than 0")
    elif limit < ctx.min_word_limit:
        found.warn(
            "metadata.wordLimit", "LOW_WORD_LIMIT",
            "Very low word limit may not allow for meaningful responses",
        )


def _fill_in_blank(question: Question, found: Findings, ctx: RuleContext) -> None:
    answer = question.correct_answer
    if isinstance(answer, list) and any(isinstance(a, str) and not a.strip() for a in answer):
        found.warn("correctAnswer", "BLANK_ACCEPTED_ANSWER", "Blank strings are accepted as answers")


def _code_submission(question: Question, found: Findings, ctx: RuleContext) -> None:
    if not question.get_metadata("testCases"):
        found.warn("metadata.testCases", "NO_TEST_CASES", "Consider adding test cases for automated grading")


def _file_upload(question: Question, found: Findings, ctx: RuleContext) -> None:
    if question.has_metadata("allowedFileTypes"):
        file_types = question.get_metadata("allowedFileTypes")
        if not isinstance(file_types, list) or not file_types:
            found.error(
                "metadata.allowedFileTypes", "NO_ALLOWED_FILE_TYPES",
                "At least one allowed file type must be specified",
            )
        else:
            duplicates = sorted({t for t in file_types if file_types.count(t) > 1}, key=str)
            if duplicates:
                found.warn(
                    "metadata.allowedFileTypes", "DUPLICATE_FILE_TYPES",
                    f"Duplicate file types: {', '.join(map(str, duplicates))}",
                )

    if question.has_metadata("maxFiles"):
        max_files = question.get_metadata("maxFiles")
        if not isinstance(max_files, int) or isinstance(max_files, bool) or max_files < 1:
            found.error("metadata.maxFiles", "INVALID_MAX_FILES", "maxFiles must be at least 1")


def _matching(question: Question, found: Findings, ctx: RuleContext) -> None:
    options = question.options or []
    if not options:
        return
    if len(options) % 2:
        found.error("options", "ODD_OPTION_COUNT", "Matching options must come in pairs")

    by_id = {opt.id: opt for opt in options}
    for index, opt in enumerate(options):
        partner = by_id.get(opt.match_id) if opt.match_id else None
        if partner is None or partner is opt or partner.match_id != opt.id:
            found.error(
                f"options[{index}].matchId", "UNLINKED_PAIR",
                f"Option {opt.id!r} is not linked to a partner option",
            )


def _ordering(question: Question, found: Findings, ctx: RuleContext) -> None:
    seen = set()
    for index, opt in enumerate(question.options or []):
        if opt.position is None:
            found.error(f"options[{index}].position", "MISSING_POSITION", "Ordering options need a target position")
        elif opt.position in seen:
            found.error(
                f"options[{index}].position", "DUPLICATE_POSITION",
                f"Target position {opt.position} is used more than once",
            )
        else:
            seen.add(opt.position)


_TYPE_RULES: Dict[QuestionType, Callable[[Question, Findings, RuleContext], None]] = {
    QuestionType.MULTIPLE_CHOICE: _multiple_choice,
    QuestionType.TRUE_FALSE: _true_false,
    QuestionType.ESSAY: _essay,
    QuestionType.FILL_IN_BLANK: _fill_in_blank,
    QuestionType.CODE_SUBMISSION: _code_submission,
    QuestionType.FILE_UPLOAD: _file_upload,
    QuestionType.MATCHING: _matching,
    QuestionType.ORDERING: _ordering,
}


def validate(question: Question, min_word_limit: Optional[int] = None) -> ValidationResult:
    """
    Validate a question against its type contract.

    Every violation is collected; an unknown type tag is reported as an
    UNKNOWN_TYPE error alongside any type-independent problems.
    """
    found = Findings()
    contract = get_contract(question.type)

    if contract is None:
        found.error("type", "UNKNOWN_TYPE", f"Unknown question type {question.type!r}")
        if _is_blank(question.content.text):
            found.error("content.text", "REQUIRED_FIELD", "Question text is required")
        if not _is_positive_int(question.points):
            found.error("points", "INVALID_POINTS", "Points must be a whole number greater than 0")
        return found.result()

    _check_common(question, contract, found)

    if min_word_limit is None:
        min_word_limit = get_settings().ESSAY_MIN_WORD_LIMIT
    rule = _TYPE_RULES.get(contract.type)
    if rule is None:
        raise UnreachableStateError(f"No validation rule registered for {contract.type.value}")
    rule(question, found, RuleContext(min_word_limit=min_word_limit))

    return found.result()


def validate_all(questions: Iterable[Question]) -> Dict[str, ValidationResult]:
    """Validate many questions, keyed by id, preserving input order."""
    return {q.id: validate(q) for q in questions}


def invalid_questions(bank: QuestionBank) -> Dict[str, ValidationResult]:
    """Map question id to result for every question in the bank that fails."""
    return {qid: result for qid, result in validate_all(bank.questions).items() if not result.ok}
