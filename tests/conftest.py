import pytest

from authoring.core.config import get_settings
from authoring.models.assessments import Assessment, QuestionRef
from authoring.models.questions import Question

VALID_SHAPES = {
    "multiple_choice": {
        "options": [
            {"id": "a", "text": "Paris", "is_correct": True},
            {"id": "b", "text": "London"},
        ],
    },
    "true_false": {"correct_answer": True},
    "essay": {"metadata": {"wordLimit": 500}},
    "fill_in_blank": {"correct_answer": ["Paris", "paris"]},
    "code_submission": {
        "metadata": {"language": "python", "testCases": [{"input": "2", "expected": "4"}]},
    },
    "file_upload": {"metadata": {"allowedFileTypes": [".pdf"], "maxFiles": 1}},
    "matching": {
        "options": [
            {"id": "l1", "text": "France", "match_id": "r1"},
            {"id": "r1", "text": "Paris", "match_id": "l1"},
        ],
    },
    "ordering": {
        "options": [
            {"id": "s1", "text": "Boil water", "position": 1},
            {"id": "s2", "text": "Add tea", "position": 2},
        ],
    },
}


def make_question(question_type="multiple_choice", **overrides):
    """A question that passes validation unless overrides break it."""
    data = {
        "type": question_type,
        "content": {"text": f"A {question_type} question"},
        "points": 2,
    }
    data.update(VALID_SHAPES.get(question_type, {}))
    data.update(overrides)
    return Question.model_validate(data)


def make_assessment(question_ids=(), **overrides):
    data = {
        "title": "Unit 1 Quiz",
        "questions": [QuestionRef(question_id=qid, position=i) for i, qid in enumerate(question_ids, start=1)],
    }
    data.update(overrides)
    return Assessment.model_validate(data)


def resolver(*questions):
    by_id = {q.id: q for q in questions}
    return by_id.get


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
