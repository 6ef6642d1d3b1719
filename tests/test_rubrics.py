from authoring.models.rubrics import Rubric, RubricCriterion, RubricLevel
from authoring.services.rubric_scoring import criterion_max_points, total_points, validate_structure


def _criterion(*points, name="Clarity"):
    return RubricCriterion(name=name, levels=[RubricLevel(name=f"L{p}", points=p) for p in points])


def test_total_is_sum_of_best_levels():
    rubric = Rubric(name="Essay rubric", criteria=[_criterion(4, 3, 2, 1), _criterion(10, 5)])
    assert total_points(rubric) == 14
    assert rubric.total_points == 14
    assert rubric.to_dict()["totalPoints"] == 14


def test_total_is_recomputed_not_stored():
    rubric = Rubric(name="Essay rubric", criteria=[_criterion(4, 3)])
    grown = rubric.replace(criteria=list(rubric.criteria) + [_criterion(6)])
    assert grown.total_points == 10

    # a stale value on input is ignored
    loaded = Rubric.model_validate({"name": "r", "criteria": [], "totalPoints": 99})
    assert loaded.total_points == 0


def test_criterion_without_levels_scores_zero():
    assert criterion_max_points(RubricCriterion(name="Empty")) == 0
    assert _criterion(2, 7, 3).max_points == 7


def test_valid_structure():
    result = validate_structure(Rubric(name="Lab report", criteria=[_criterion(3, 0)]))
    assert result.ok
    assert result.warnings == ()


def test_structure_problems_are_all_reported():
    rubric = Rubric(
        name=" ",
        criteria=[
            RubricCriterion(name="Method", levels=[]),
            _criterion(2, -1, name=""),
        ],
    )
    result = validate_structure(rubric)
    assert result.error_types() == ["REQUIRED_FIELD", "NO_LEVELS", "NEGATIVE_POINTS"]
    assert [w.type for w in result.warnings] == ["UNNAMED_CRITERION"]
    assert "criteria[1].levels[1].points" in [e.field for e in result.errors]


def test_rubric_needs_a_criterion():
    assert validate_structure(Rubric(name="Blank")).error_types() == ["NO_CRITERIA"]
