"""
Assessment lifecycle.

draft -> published -> archived, plus draft -> archived. Nothing returns
to draft and archived is terminal. Each call is a pure function of the
assessment, the requested move and the supporting lookups; the outcome is
a TransitionResult carrying either the moved assessment or the guard that
failed.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Union

from authoring.core.errors import (
    AlreadyTerminalError,
    EmptyAssessmentError,
    IllegalTransitionError,
    InvalidQuestionsError,
    InvalidSettingsError,
    StateTransitionError,
    ValidationError,
)
from authoring.models.assessments import Assessment, AssessmentSettings, AssessmentStatus
from authoring.models.questions import Question
from authoring.models.rubrics import Rubric
from authoring.services.rubric_scoring import validate_structure
from authoring.services.validator import Findings, ValidationResult, validate

logger = logging.getLogger(__name__)

QuestionResolver = Callable[[str], Optional[Question]]
RubricResolver = Callable[[str], Optional[Rubric]]


@dataclass(frozen=True)
class TransitionResult:
    assessment: Assessment
    error: Optional[StateTransitionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> Assessment:
        """Return the moved assessment, raising the failed guard instead if there is one."""
        if self.error is not None:
            raise self.error
        return self.assessment


def _rejected(assessment: Assessment, error: StateTransitionError) -> TransitionResult:
    logger.debug(f"Transition rejected for assessment {assessment.id}: {error.error_type}")
    return TransitionResult(assessment=assessment, error=error)


def _moved(assessment: Assessment, status: AssessmentStatus) -> TransitionResult:
    logger.info(f"Assessment {assessment.id}: {assessment.status.value} -> {status.value}")
    return TransitionResult(assessment=assessment.replace(status=status))


def settings_problems(settings: AssessmentSettings) -> List[ValidationError]:
    """Every reason the settings would block publishing."""
    problems: List[ValidationError] = []

    if settings.passing_score is not None and not 0 <= settings.passing_score <= 100:
        problems.append(ValidationError(
            "settings.passingScore", "INVALID_PASSING_SCORE", "Passing score must be between 0 and 100",
        ))

    if settings.allow_retakes and settings.max_attempts is not None and settings.max_attempts < 1:
        problems.append(ValidationError(
            "settings.maxAttempts", "INVALID_MAX_ATTEMPTS", "Retakes need at least one attempt",
        ))

    if settings.time_limit is not None and settings.time_limit <= 0:
        problems.append(ValidationError(
            "settings.timeLimit", "INVALID_TIME_LIMIT", "Time limit must be greater than 0",
        ))

    start, end = settings.available_from, settings.available_until
    if start is not None and end is not None:
        try:
            inverted = start >= end
        except TypeError:
            problems.append(ValidationError(
                "settings.availableFrom", "INVALID_AVAILABILITY",
                "Availability window mixes timezone-aware and naive times",
            ))
        else:
            if inverted:
                problems.append(ValidationError(
                    "settings.availableFrom", "INVALID_AVAILABILITY",
                    "Availability window must start before it ends",
                ))

    return problems


def _question_failures(assessment: Assessment, resolve_question: QuestionResolver) -> Dict[str, List[ValidationError]]:
    failures: Dict[str, List[ValidationError]] = {}
    for question_id in assessment.question_ids:
        if question_id in failures:
            continue
        question = resolve_question(question_id)
        if question is None:
            failures[question_id] = [ValidationError(
                "questionId", "MISSING_QUESTION", f"Question {question_id} could not be found",
            )]
            continue
        result = validate(question)
        if not result.ok:
            failures[question_id] = list(result.errors)
    return failures


def _rubric_problems(assessment: Assessment, resolve_rubric: Optional[RubricResolver]) -> List[ValidationError]:
    if assessment.rubric_id is None or resolve_rubric is None:
        return []
    rubric = resolve_rubric(assessment.rubric_id)
    if rubric is None:
        return [ValidationError("rubricId", "MISSING_RUBRIC", f"Rubric {assessment.rubric_id} could not be found")]
    return [
        ValidationError(f"rubric.{e.field}", e.type, e.reason)
        for e in validate_structure(rubric).errors
    ]


def publish(
    assessment: Assessment,
    resolve_question: QuestionResolver,
    resolve_rubric: Optional[RubricResolver] = None,
) -> TransitionResult:
    """
    Move a draft to published.

    Guards run in order: current state, empty question list, validity of
    every referenced question, then settings (including an attached
    rubric when a rubric resolver is supplied).
    """
    if assessment.status != AssessmentStatus.DRAFT:
        return _rejected(assessment, IllegalTransitionError(assessment.status.value, AssessmentStatus.PUBLISHED.value))

    if not assessment.questions:
        return _rejected(assessment, EmptyAssessmentError(assessment.id))

    failures = _question_failures(assessment, resolve_question)
    if failures:
        return _rejected(assessment, InvalidQuestionsError(failures))

    problems = settings_problems(assessment.settings) + _rubric_problems(assessment, resolve_rubric)
    if problems:
        return _rejected(assessment, InvalidSettingsError(problems))

    return _moved(assessment, AssessmentStatus.PUBLISHED)


def archive(assessment: Assessment) -> TransitionResult:
    """Archive a draft or published assessment."""
    if assessment.status == AssessmentStatus.ARCHIVED:
        return _rejected(assessment, AlreadyTerminalError(assessment.id, assessment.status.value))
    return _moved(assessment, AssessmentStatus.ARCHIVED)


def transition(
    assessment: Assessment,
    target: Union[AssessmentStatus, str],
    resolve_question: Optional[QuestionResolver] = None,
    resolve_rubric: Optional[RubricResolver] = None,
) -> TransitionResult:
    """Dispatch a requested status change to the matching guard."""
    target = AssessmentStatus(target)
    if target == AssessmentStatus.PUBLISHED:
        if resolve_question is None:
            raise ValueError("publishing requires a question resolver")
        return publish(assessment, resolve_question, resolve_rubric)
    if target == AssessmentStatus.ARCHIVED:
        return archive(assessment)
    return _rejected(assessment, IllegalTransitionError(assessment.status.value, target.value))


def can_delete_question(question_id: str, assessments: Iterable[Assessment]) -> bool:
    """A question may be deleted only when no live (non-archived) assessment references it."""
    return not any(
        a.references(question_id) for a in assessments if a.status != AssessmentStatus.ARCHIVED
    )


def assessment_total_points(assessment: Assessment, resolve_question: QuestionResolver) -> int:
    """Sum of points over the referenced questions that resolve."""
    total = 0
    for question_id in assessment.question_ids:
        question = resolve_question(question_id)
        if question is not None:
            total += question.points
    return total


def validate_assessment(assessment: Assessment) -> ValidationResult:
    """
    Check an assessment record on its own, without resolving questions.

    Used on import: a title is required, settings follow the publish
    rules and a question may be referenced only once.
    """
    found = Findings()
    if not assessment.title or not assessment.title.strip():
        found.error("title", "REQUIRED_FIELD", "Assessment title is required")

    for problem in settings_problems(assessment.settings):
        found.error(problem.field, problem.type, problem.reason)

    seen = set()
    for index, ref in enumerate(assessment.questions):
        if ref.question_id in seen:
            found.error(
                f"questions[{index}].questionId", "DUPLICATE_QUESTION_REF",
                f"Question {ref.question_id} is referenced more than once",
            )
        seen.add(ref.question_id)

    return found.result()
