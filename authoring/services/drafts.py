"""
Pure update functions for authoring drafts.

Entities are immutable; every function returns a new value. Subtrees
(content, options, metadata, settings) are replaced whole, never patched
field by field, and nothing here validates: validation happens at the
save and publish checkpoints.
"""
from typing import Any, Iterable, List, Mapping, Optional, Union

from authoring.models.assessments import Assessment, AssessmentSettings, AssessmentStatus, QuestionRef
from authoring.models.base import new_id
from authoring.models.questions import Question, QuestionContent, QuestionOption
from authoring.models.rubrics import Rubric, RubricCriterion, RubricLevel

_QUESTION_FIELDS = {"type", "correct_answer", "points", "difficulty", "tags"}
_ASSESSMENT_FIELDS = {"title", "description", "instructions", "tags", "rubric_id"}

DEFAULT_LEVELS = (
    ("Excellent", 4),
    ("Good", 3),
    ("Satisfactory", 2),
    ("Needs Improvement", 1),
)


def _reject_unknown(changes: Mapping[str, Any], allowed: set, entity: str) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise TypeError(f"{entity} has no updatable field(s): {', '.join(unknown)}")


# ========== Questions ==========

def update_question(
    question: Question,
    *,
    content: Optional[Union[QuestionContent, Mapping[str, Any]]] = None,
    options: Optional[Iterable[Union[QuestionOption, Mapping[str, Any]]]] = None,
    metadata: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> Question:
    """Return a copy with whole subtrees and/or scalar fields replaced."""
    _reject_unknown(fields, _QUESTION_FIELDS, "Question")
    changes = dict(fields)
    if content is not None:
        changes["content"] = content
    if options is not None:
        changes["options"] = list(options)
    if metadata is not None:
        changes["metadata"] = dict(metadata)
    return question.replace(**changes)


def clear_options(question: Question) -> Question:
    """Drop the options subtree, e.g. after switching to a type that forbids it."""
    return question.replace(options=None)


# ========== Assessments ==========

def update_assessment(assessment: Assessment, **fields: Any) -> Assessment:
    _reject_unknown(fields, _ASSESSMENT_FIELDS, "Assessment")
    return assessment.replace(**fields)


def replace_settings(assessment: Assessment, settings: Union[AssessmentSettings, Mapping[str, Any]]) -> Assessment:
    return assessment.replace(settings=settings)


def _renumber(question_ids: List[str]) -> List[QuestionRef]:
    return [QuestionRef(question_id=qid, position=i) for i, qid in enumerate(question_ids, start=1)]


def add_question(assessment: Assessment, question_id: str, index: Optional[int] = None) -> Assessment:
    """Insert a reference (at the end by default); positions are renumbered 1..n."""
    ids = assessment.question_ids
    if index is None:
        ids.append(question_id)
    else:
        ids.insert(index, question_id)
    return assessment.replace(questions=_renumber(ids))


def remove_question(assessment: Assessment, question_id: str) -> Assessment:
    ids = [qid for qid in assessment.question_ids if qid != question_id]
    return assessment.replace(questions=_renumber(ids))


def move_question(assessment: Assessment, from_index: int, to_index: int) -> Assessment:
    """Move the reference at from_index to to_index (0-based, list semantics)."""
    ids = assessment.question_ids
    if not 0 <= from_index < len(ids):
        raise IndexError(f"from_index {from_index} out of range")
    moved = ids.pop(from_index)
    ids.insert(to_index, moved)
    return assessment.replace(questions=_renumber(ids))


def duplicate_assessment(source: Assessment, title: Optional[str] = None, new_identity: Optional[str] = None) -> Assessment:
    """
    Copy an assessment into a fresh draft.

    Settings are deep-copied; the question list is copied by reference
    (same question ids, no question duplication).
    """
    return Assessment(
        id=new_identity or new_id(),
        title=title if title is not None else f"{source.title} (Copy)",
        description=source.description,
        instructions=source.instructions,
        questions=[QuestionRef(question_id=r.question_id, position=r.position) for r in source.questions],
        settings=source.settings.model_copy(deep=True),
        status=AssessmentStatus.DRAFT,
        tags=list(source.tags),
        rubric_id=source.rubric_id,
        organization_id=source.organization_id,
    )


# ========== Rubrics ==========

def default_criterion(name: str = "", description: str = "") -> RubricCriterion:
    """A criterion pre-filled with the four standard achievement levels."""
    return RubricCriterion(
        name=name,
        description=description,
        levels=[RubricLevel(name=label, points=points) for label, points in DEFAULT_LEVELS],
    )


def add_criterion(rubric: Rubric, criterion: Optional[RubricCriterion] = None) -> Rubric:
    return rubric.replace(criteria=list(rubric.criteria) + [criterion or default_criterion()])


def remove_criterion(rubric: Rubric, criterion_id: str) -> Rubric:
    return rubric.replace(criteria=[c for c in rubric.criteria if c.id != criterion_id])


def replace_criterion(rubric: Rubric, criterion: RubricCriterion) -> Rubric:
    """Swap in a whole criterion (matched by id)."""
    return rubric.replace(
        criteria=[criterion if c.id == criterion.id else c for c in rubric.criteria]
    )
