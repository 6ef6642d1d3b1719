import pytest
from pydantic import ValidationError

from authoring.models.assessments import AssessmentSettings
from authoring.models.questions import Difficulty, Question, QuestionBank, QuestionType
from conftest import make_assessment, make_question


def test_difficulty_is_ordinal():
    assert Difficulty.BEGINNER < Difficulty.INTERMEDIATE < Difficulty.ADVANCED < Difficulty.EXPERT
    assert max([Difficulty.ADVANCED, Difficulty.EXPERT, Difficulty.BEGINNER]) is Difficulty.EXPERT
    assert sorted(Difficulty, reverse=True)[0] is Difficulty.EXPERT


def test_question_accepts_both_spellings_and_emits_camel_case():
    question = Question.model_validate({
        "type": "true_false",
        "content": {"text": "Sky is blue"},
        "correctAnswer": True,
        "points": 1,
        "createdBy": "author-7",
    })
    assert question.correct_answer is True
    assert question.question_type is QuestionType.TRUE_FALSE
    data = question.to_dict()
    assert data["createdBy"] == "author-7"
    assert "createdAt" not in data


def test_unknown_type_tag_survives_construction():
    question = make_question("hotspot")
    assert question.type == "hotspot"
    assert question.question_type is None


def test_metadata_accessors():
    question = make_question("essay", metadata={"wordLimit": 300})
    assert question.get_metadata("wordLimit") == 300
    assert question.get_metadata("rubric", "none") == "none"
    assert question.has_metadata("wordLimit")
    assert not make_question("essay", metadata={}).has_metadata("wordLimit")


def test_question_bank_lookup():
    q = make_question()
    bank = QuestionBank(name="Physics", questions=[q])
    assert bank.find(q.id) is q
    assert bank.find("missing") is None


def test_assessment_orders_references_by_position():
    assessment = make_assessment(questions=[
        {"question_id": "b", "position": 2},
        {"question_id": "a", "position": 1},
    ])
    assert assessment.question_ids == ["a", "b"]
    assert assessment.references("b")
    assert AssessmentSettings().show_results is True


def test_boolean_points_are_rejected():
    with pytest.raises(ValidationError) as excinfo:
        Question.model_validate({"type": "true_false", "content": {"text": "x"}, "points": True})
    assert excinfo.value.errors()[0]["loc"] == ("points",)
    assert Question.model_validate({"type": "essay", "content": {"text": "x"}, "points": "3"}).points == 3
