"""
Question, option and question bank models.
"""
from datetime import datetime
from typing import Optional, List, Dict, Any, Literal
import enum

from pydantic import Field, field_validator

from authoring.models.base import DomainModel, MetadataMixin, new_id


class QuestionType(str, enum.Enum):
    """Supported question type tags."""
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    ESSAY = "essay"
    FILL_IN_BLANK = "fill_in_blank"
    CODE_SUBMISSION = "code_submission"
    FILE_UPLOAD = "file_upload"
    MATCHING = "matching"
    ORDERING = "ordering"

    @classmethod
    def parse(cls, tag: Any) -> Optional["QuestionType"]:
        """Return the member for a raw tag, or None when the tag is unknown."""
        try:
            return cls(tag)
        except ValueError:
            return None


class Difficulty(str, enum.Enum):
    """Ordinal difficulty: beginner < intermediate < advanced < expert."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank >= other.rank


_DIFFICULTY_ORDER = list(Difficulty)


class MediaRef(DomainModel):
    type: Literal["image", "video", "audio"]
    url: str
    alt: Optional[str] = None


class QuestionContent(DomainModel):
    text: str = ""
    instructions: Optional[str] = None
    hints: Optional[List[str]] = None
    media: Optional[List[MediaRef]] = None


class QuestionOption(DomainModel):
    """
    A choice-like option.

    match_id links a matching option to its partner; position is the
    target slot of an ordering option. Both are unused by other types.
    """
    id: str
    text: str = ""
    is_correct: bool = False
    explanation: Optional[str] = None
    match_id: Optional[str] = None
    position: Optional[int] = None


class Question(DomainModel, MetadataMixin):
    """
    A single authored question.

    type stays a raw string so that an unknown tag reaches the validator
    and is reported there instead of failing model construction.
    """
    id: str = Field(default_factory=new_id)
    type: str
    content: QuestionContent
    options: Optional[List[QuestionOption]] = None
    correct_answer: Any = None
    points: int
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("points", mode="before")
    @classmethod
    def reject_bool_points(cls, v):
        if isinstance(v, bool):
            raise ValueError("Points must be a number, not a boolean")
        return v

    @property
    def question_type(self) -> Optional[QuestionType]:
        return QuestionType.parse(self.type)

    @property
    def tag_set(self) -> frozenset:
        return frozenset(self.tags)

    def option_ids(self) -> List[str]:
        return [opt.id for opt in self.options or []]


class QuestionBank(DomainModel):
    """A named collection owning its questions."""
    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    questions: List[Question] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_public: bool = False
    organization_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)
