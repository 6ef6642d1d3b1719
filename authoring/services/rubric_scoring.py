"""
Rubric scorer.

A rubric grades the best level reached on each criterion, so the
achievable total is the sum of each criterion's highest level. The total
is recomputed from scratch on every call; nothing is cached.
"""
from typing import TYPE_CHECKING

from authoring.services.validator import Findings, ValidationResult

if TYPE_CHECKING:
    from authoring.models.rubrics import Rubric, RubricCriterion


def criterion_max_points(criterion: "RubricCriterion") -> int:
    """Highest level value of one criterion; 0 for a criterion without levels."""
    return max((level.points for level in criterion.levels), default=0)


def total_points(rubric: "Rubric") -> int:
    return sum(criterion_max_points(criterion) for criterion in rubric.criteria)


def validate_structure(rubric: "Rubric") -> ValidationResult:
    """Check that a rubric is complete enough to grade with."""
    found = Findings()

    if not rubric.name or not rubric.name.strip():
        found.error("name", "REQUIRED_FIELD", "Rubric name is required")

    if not rubric.criteria:
        found.error("criteria", "NO_CRITERIA", "At least one criterion is required")

    for c_index, criterion in enumerate(rubric.criteria):
        prefix = f"criteria[{c_index}]"
        if not criterion.name or not criterion.name.strip():
            found.warn(f"{prefix}.name", "UNNAMED_CRITERION", "Criterion has no name")
        if not criterion.levels:
            found.error(f"{prefix}.levels", "NO_LEVELS", "Every criterion needs at least one level")
        for l_index, level in enumerate(criterion.levels):
            if level.points < 0:
                found.error(
                    f"{prefix}.levels[{l_index}].points", "NEGATIVE_POINTS",
                    "Level points cannot be negative",
                )

    return found.result()
