"""
Stateless filter and pagination contract shared by list-producing callers.
"""
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from authoring.core.config import get_settings
from authoring.core.errors import InvalidPageNumberError, InvalidPageSizeError
from authoring.models.assessments import Assessment, AssessmentStatus
from authoring.models.questions import Difficulty, Question

T = TypeVar("T")


class QuestionFilter(BaseModel):
    """Conjunction of the criteria that are set; an empty filter matches everything."""
    type: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    tags: List[str] = Field(default_factory=list)
    search: Optional[str] = None

    def matches(self, question: Question) -> bool:
        if self.type is not None and question.type != self.type:
            return False
        if self.difficulty is not None and question.difficulty != self.difficulty:
            return False
        if self.tags and not set(self.tags) <= question.tag_set:
            return False
        if self.search and self.search.casefold() not in question.content.text.casefold():
            return False
        return True


class AssessmentFilter(BaseModel):
    status: Optional[AssessmentStatus] = None
    tags: List[str] = Field(default_factory=list)
    search: Optional[str] = None

    def matches(self, assessment: Assessment) -> bool:
        if self.status is not None and assessment.status != self.status:
            return False
        if self.tags and not set(self.tags) <= set(assessment.tags):
            return False
        if self.search:
            needle = self.search.casefold()
            haystacks = (assessment.title, assessment.description)
            if not any(needle in h.casefold() for h in haystacks):
                return False
        return True


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit)

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def paginate(
    items: Sequence[T],
    predicate: Optional[Callable[[T], bool]],
    page: int = 1,
    limit: Optional[int] = None,
) -> Page[T]:
    """
    Filter, then slice.

    total is the size of the filtered set before slicing. page is
    1-indexed; limit defaults to DEFAULT_PAGE_SIZE and must lie in
    1..MAX_PAGE_SIZE. A page past the end is empty.
    """
    settings = get_settings()
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    if limit <= 0:
        raise InvalidPageSizeError(limit)
    if limit > settings.MAX_PAGE_SIZE:
        raise InvalidPageSizeError(limit, settings.MAX_PAGE_SIZE)
    if page < 1:
        raise InvalidPageNumberError(page)
    matched = [item for item in items if predicate is None or predicate(item)]
    start = (page - 1) * limit
    return Page(items=matched[start:start + limit], total=len(matched), page=page, limit=limit)


def apply(
    items: Sequence[Question],
    filter: Optional[QuestionFilter] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> Page[Question]:
    """Filter and paginate questions."""
    return paginate(items, filter.matches if filter else None, page, limit)


def apply_assessments(
    items: Sequence[Assessment],
    filter: Optional[AssessmentFilter] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> Page[Assessment]:
    return paginate(items, filter.matches if filter else None, page, limit)
