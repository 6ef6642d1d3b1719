"""
Assessment models.
"""
from datetime import datetime
from typing import Optional, List
import enum

from pydantic import Field

from authoring.models.base import DomainModel, new_id


class AssessmentStatus(str, enum.Enum):
    """Assessment lifecycle status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class QuestionRef(DomainModel):
    """A reference to a bank question at a 1-based position."""
    question_id: str
    position: int


class AssessmentSettings(DomainModel):
    time_limit: Optional[int] = None  # minutes
    allow_retakes: bool = False
    max_attempts: Optional[int] = None
    shuffle_questions: bool = False
    shuffle_options: bool = False
    show_results: bool = True
    show_correct_answers: bool = False
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    passing_score: Optional[float] = None  # percent
    is_adaptive: bool = False


class Assessment(DomainModel):
    """
    An ordered set of question references plus delivery settings.

    Questions are referenced, never copied; the bank owns them.
    """
    id: str = Field(default_factory=new_id)
    title: str = ""
    description: str = ""
    instructions: str = ""
    questions: List[QuestionRef] = Field(default_factory=list)
    settings: AssessmentSettings = Field(default_factory=AssessmentSettings)
    status: AssessmentStatus = AssessmentStatus.DRAFT
    tags: List[str] = Field(default_factory=list)
    rubric_id: Optional[str] = None
    organization_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def question_ids(self) -> List[str]:
        return [ref.question_id for ref in sorted(self.questions, key=lambda r: r.position)]

    def references(self, question_id: str) -> bool:
        return any(ref.question_id == question_id for ref in self.questions)

    @property
    def is_terminal(self) -> bool:
        return self.status == AssessmentStatus.ARCHIVED
