import pytest

from authoring.core.errors import UnreachableStateError
from authoring.models.questions import QuestionBank, QuestionType
from authoring.services import validator
from authoring.services.registry import QUESTION_TYPES, OptionsPolicy, get_contract, supported_types
from authoring.services.validator import invalid_questions, validate, validate_all
from conftest import VALID_SHAPES, make_question


def test_registry_covers_every_type():
    assert set(supported_types()) == set(QuestionType)
    assert get_contract("multiple_choice").options == OptionsPolicy.REQUIRED
    assert get_contract("true_false").options == OptionsPolicy.FORBIDDEN
    assert get_contract("crossword") is None
    assert len(QUESTION_TYPES) == 8


@pytest.mark.parametrize("question_type", sorted(VALID_SHAPES))
def test_valid_question_of_each_type_passes(question_type):
    result = validate(make_question(question_type))
    assert result.ok, result.messages()
    assert result.warnings == ()


@pytest.mark.parametrize("question_type", sorted(VALID_SHAPES))
def test_points_and_text_required_for_every_type(question_type):
    result = validate(make_question(question_type, points=0, content={"text": "  "}))
    assert not result.ok
    assert "INVALID_POINTS" in result.error_types()
    assert "REQUIRED_FIELD" in result.error_types()


def test_unknown_type_is_reported_not_raised():
    result = validate(make_question("crossword", points=-1))
    assert result.error_types() == ["UNKNOWN_TYPE", "INVALID_POINTS"]


def test_all_violations_are_collected():
    question = make_question(
        "multiple_choice",
        points=0,
        options=[{"id": "a", "text": "x"}],
    )
    assert set(validate(question).error_types()) == {
        "INVALID_POINTS",
        "INSUFFICIENT_OPTIONS",
        "NO_CORRECT_ANSWER",
    }


# ---------- multiple choice ----------

def test_multiple_choice_needs_a_correct_option():
    options = [{"id": "a", "text": "x"}, {"id": "b", "text": "y"}]
    result = validate(make_question("multiple_choice", options=options))
    assert result.error_types() == ["NO_CORRECT_ANSWER"]

    options[0]["is_correct"] = True
    assert validate(make_question("multiple_choice", options=options)).ok


def test_multiple_choice_rejects_missing_options_and_duplicate_ids():
    question = make_question("multiple_choice", options=None)
    assert "OPTIONS_REQUIRED" in validate(question).error_types()

    duplicate = make_question("multiple_choice", options=[
        {"id": "a", "text": "x", "is_correct": True},
        {"id": "a", "text": "y"},
    ])
    assert validate(duplicate).error_types() == ["DUPLICATE_OPTION_ID"]


def test_multiple_choice_may_mark_several_options_correct():
    question = make_question("multiple_choice", options=[
        {"id": "a", "text": "x", "is_correct": True},
        {"id": "b", "text": "y", "is_correct": True},
    ])
    assert validate(question).ok


def test_empty_option_text_only_warns():
    question = make_question("multiple_choice", options=[
        {"id": "a", "text": "x", "is_correct": True},
        {"id": "b", "text": ""},
    ])
    result = validate(question)
    assert result.ok
    assert [w.type for w in result.warnings] == ["EMPTY_OPTION_TEXT"]


# ---------- true / false and fill in blank ----------

@pytest.mark.parametrize("answer", [None, "true", 1, ["true"]])
def test_true_false_answer_must_be_boolean(answer):
    result = validate(make_question("true_false", correct_answer=answer))
    assert result.error_types() == ["INVALID_ANSWER_SHAPE"]


def test_true_false_false_is_a_valid_answer():
    assert validate(make_question("true_false", correct_answer=False)).ok


def test_options_on_true_false_only_warn():
    question = make_question("true_false", options=[{"id": "t", "text": "True"}])
    result = validate(question)
    assert result.ok
    assert [w.type for w in result.warnings] == ["OPTIONS_IGNORED"]


@pytest.mark.parametrize("answer", [None, [], "Paris", ["Paris", 3]])
def test_fill_in_blank_needs_string_list(answer):
    result = validate(make_question("fill_in_blank", correct_answer=answer))
    assert result.error_types() == ["INVALID_ANSWER_SHAPE"]


def test_fill_in_blank_blank_answer_warns():
    result = validate(make_question("fill_in_blank", correct_answer=["Paris", " "]))
    assert result.ok
    assert [w.type for w in result.warnings] == ["BLANK_ACCEPTED_ANSWER"]


# ---------- essay, code, file upload ----------

def test_essay_without_word_limit_is_valid():
    assert validate(make_question("essay", metadata={})).ok


@pytest.mark.parametrize("limit", [0, -5, "500", True])
def test_essay_word_limit_must_be_positive(limit):
    result = validate(make_question("essay", metadata={"wordLimit": limit}))
    assert result.error_types() == ["INVALID_WORD_LIMIT"]


def test_essay_low_word_limit_warns():
    result = validate(make_question("essay", metadata={"wordLimit": 5}))
    assert result.ok
    assert [w.type for w in result.warnings] == ["LOW_WORD_LIMIT"]

    assert validate(make_question("essay", metadata={"wordLimit": 5}), min_word_limit=3).warnings == ()


def test_code_submission_needs_language():
    result = validate(make_question("code_submission", metadata={"language": ""}))
    assert result.error_types() == ["MISSING_METADATA"]
    assert [w.type for w in result.warnings] == ["NO_TEST_CASES"]


def test_file_upload_rules():
    assert validate(make_question("file_upload", metadata={})).ok

    empty = validate(make_question("file_upload", metadata={"allowedFileTypes": []}))
    assert empty.error_types() == ["NO_ALLOWED_FILE_TYPES"]

    zero = validate(make_question("file_upload", metadata={"maxFiles": 0}))
    assert zero.error_types() == ["INVALID_MAX_FILES"]

    dupes = validate(make_question("file_upload", metadata={"allowedFileTypes": [".pdf", ".pdf"]}))
    assert dupes.ok
    assert [w.type for w in dupes.warnings] == ["DUPLICATE_FILE_TYPES"]


# ---------- matching and ordering ----------

def test_matching_requires_linked_pairs():
    odd = make_question("matching", options=[
        {"id": "l1", "text": "France", "match_id": "r1"},
        {"id": "r1", "text": "Paris", "match_id": "l1"},
        {"id": "l2", "text": "Spain"},
    ])
    assert set(validate(odd).error_types()) == {"ODD_OPTION_COUNT", "UNLINKED_PAIR"}

    one_way = make_question("matching", options=[
        {"id": "l1", "text": "France", "match_id": "r1"},
        {"id": "r1", "text": "Paris"},
    ])
    assert validate(one_way).error_types() == ["UNLINKED_PAIR", "UNLINKED_PAIR"]


def test_ordering_needs_distinct_positions():
    missing = make_question("ordering", options=[
        {"id": "s1", "text": "a", "position": 1},
        {"id": "s2", "text": "b"},
    ])
    assert validate(missing).error_types() == ["MISSING_POSITION"]

    clash = make_question("ordering", options=[
        {"id": "s1", "text": "a", "position": 1},
        {"id": "s2", "text": "b", "position": 1},
    ])
    assert validate(clash).error_types() == ["DUPLICATE_POSITION"]

    single = make_question("ordering", options=[{"id": "s1", "text": "a", "position": 1}])
    assert validate(single).error_types() == ["INSUFFICIENT_OPTIONS"]


# ---------- batches ----------

def test_validate_all_and_invalid_questions():
    good = make_question("true_false")
    bad = make_question("true_false", correct_answer=None)
    results = validate_all([good, bad])
    assert list(results) == [good.id, bad.id]

    bank = QuestionBank(name="Geography", questions=[good, bad])
    assert list(invalid_questions(bank)) == [bad.id]


def test_missing_rule_is_an_internal_error(monkeypatch):
    monkeypatch.delitem(validator._TYPE_RULES, QuestionType.ESSAY)
    with pytest.raises(UnreachableStateError):
        validate(make_question("essay"))
