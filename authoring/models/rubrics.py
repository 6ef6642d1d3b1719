"""
Rubric models.
"""
from datetime import datetime
from typing import Optional, List

from pydantic import Field, computed_field

from authoring.models.base import DomainModel, new_id
from authoring.services.rubric_scoring import criterion_max_points, total_points


class RubricLevel(DomainModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    points: int = 0


class RubricCriterion(DomainModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    levels: List[RubricLevel] = Field(default_factory=list)

    @property
    def max_points(self) -> int:
        return criterion_max_points(self)


class Rubric(DomainModel):
    """
    A grading rubric.

    totalPoints is a derived view: it is recomputed from the criteria on
    every read and ignored on input.
    """
    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    criteria: List[RubricCriterion] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="totalPoints")
    @property
    def total_points(self) -> int:
        return total_points(self)
