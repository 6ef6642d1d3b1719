from authoring.services.suggestions import accept_suggested_question


def test_generator_shape_is_accepted():
    outcome = accept_suggested_question({
        "type": "MCQ",
        "stem": "Which organelle produces ATP?",
        "options": [
            {"text": "Nucleus", "is_correct": False},
            {"text": "Mitochondrion", "is_correct": True},
        ],
        "difficulty": "beginner",
    })
    assert outcome.accepted
    question = outcome.question
    assert question.type == "multiple_choice"
    assert question.content.text == "Which organelle produces ATP?"
    assert question.option_ids() == ["A", "B"]
    assert question.points == 1


def test_full_question_shape_is_accepted():
    outcome = accept_suggested_question({
        "type": "true_false",
        "content": {"text": "DNA is double stranded"},
        "correctAnswer": True,
        "points": 2,
    })
    assert outcome.accepted
    assert outcome.question.points == 2


def test_invalid_suggestion_is_rejected_with_reasons():
    outcome = accept_suggested_question({
        "type": "TrueFalse",
        "stem": "Water is wet",
        "correctAnswer": "probably",
    })
    assert not outcome.accepted
    assert [e.type for e in outcome.errors] == ["INVALID_ANSWER_SHAPE"]
    assert outcome.messages() == ["correctAnswer: Correct answer must be true or false"]


def test_structurally_broken_suggestion_is_rejected():
    outcome = accept_suggested_question({"type": "essay", "content": "not a mapping", "points": "many"})
    assert not outcome.accepted
    assert {e.field for e in outcome.errors} == {"content", "points"}


def test_unknown_type_never_gets_through():
    outcome = accept_suggested_question({"type": "Crossword", "stem": "Across: 5 letters"})
    assert not outcome.accepted
    assert outcome.errors[0].type == "UNKNOWN_TYPE"


def test_warnings_travel_with_accepted_question():
    outcome = accept_suggested_question({
        "type": "Essay",
        "stem": "Summarise the article",
        "metadata": {"wordLimit": 3},
    })
    assert outcome.accepted
    assert [w.type for w in outcome.warnings] == ["LOW_WORD_LIMIT"]


def test_non_string_type_is_a_structural_error():
    outcome = accept_suggested_question({"type": ["MCQ"], "stem": "Pick one"})
    assert not outcome.accepted
    assert [e.field for e in outcome.errors] == ["type"]
    assert outcome.errors[0].type == "INVALID_STRUCTURE"


def test_stem_wins_over_text_and_text_is_the_fallback():
    both = accept_suggested_question({"type": "Essay", "stem": "From stem", "text": "From text"})
    assert both.question.content.text == "From stem"

    blank_stem = accept_suggested_question({"type": "Essay", "stem": " ", "text": "From text"})
    assert blank_stem.question.content.text == "From text"
