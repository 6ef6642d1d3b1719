"""
Question-type registry.

One row per question type describing its structural contract. The table
is pure data; the validator is the only consumer. Adding a type means
adding a row here and a rule function in the validator.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Any
import enum

from authoring.models.questions import QuestionType


class OptionsPolicy(str, enum.Enum):
    REQUIRED = "required"
    FORBIDDEN = "forbidden"


class AnswerShape(str, enum.Enum):
    """Expected shape of Question.correct_answer."""
    BOOLEAN = "boolean"
    STRING_LIST = "string_list"
    UNCHECKED = "unchecked"  # correctness lives on the options, or is graded by hand


@dataclass(frozen=True)
class QuestionTypeContract:
    type: QuestionType
    label: str
    options: OptionsPolicy
    answer_shape: AnswerShape
    required_content: Tuple[str, ...] = ("text",)
    min_options: int = 0
    required_metadata: Tuple[str, ...] = ()


QUESTION_TYPES: Mapping[QuestionType, QuestionTypeContract] = MappingProxyType({
    QuestionType.MULTIPLE_CHOICE: QuestionTypeContract(
        type=QuestionType.MULTIPLE_CHOICE,
        label="Multiple Choice",
        options=OptionsPolicy.REQUIRED,
        answer_shape=AnswerShape.UNCHECKED,
        min_options=2,
    ),
    QuestionType.TRUE_FALSE: QuestionTypeContract(
        type=QuestionType.TRUE_FALSE,
        label="True/False",
        options=OptionsPolicy.FORBIDDEN,
        answer_shape=AnswerShape.BOOLEAN,
    ),
    QuestionType.ESSAY: QuestionTypeContract(
        type=QuestionType.ESSAY,
        label="Essay",
        options=OptionsPolicy.FORBIDDEN,
        answer_shape=AnswerShape.UNCHECKED,
    ),
    QuestionType.FILL_IN_BLANK: QuestionTypeContract(
        type=QuestionType.FILL_IN_BLANK,
        label="Fill in the Blank",
        options=OptionsPolicy.FORBIDDEN,
        answer_shape=AnswerShape.STRING_LIST,
    ),
    QuestionType.CODE_SUBMISSION: QuestionTypeContract(
        type=QuestionType.CODE_SUBMISSION,
        label="Code Submission",
        options=OptionsPolicy.FORBIDDEN,
        answer_shape=AnswerShape.UNCHECKED,
        required_metadata=("language",),
    ),
    QuestionType.FILE_UPLOAD: QuestionTypeContract(
        type=QuestionType.FILE_UPLOAD,
        label="File Upload",
        options=OptionsPolicy.FORBIDDEN,
        answer_shape=AnswerShape.UNCHECKED,
    ),
    QuestionType.MATCHING: QuestionTypeContract(
        type=QuestionType.MATCHING,
        label="Matching",
        options=OptionsPolicy.REQUIRED,
        answer_shape=AnswerShape.UNCHECKED,
        min_options=2,
    ),
    QuestionType.ORDERING: QuestionTypeContract(
        type=QuestionType.ORDERING,
        label="Ordering",
        options=OptionsPolicy.REQUIRED,
        answer_shape=AnswerShape.UNCHECKED,
        min_options=2,
    ),
})


def get_contract(type_tag: Any) -> Optional[QuestionTypeContract]:
    """Look up the contract for a raw type tag; None when the tag is unknown."""
    question_type = QuestionType.parse(type_tag)
    if question_type is None:
        return None
    return QUESTION_TYPES.get(question_type)


def supported_types() -> Tuple[QuestionType, ...]:
    return tuple(QUESTION_TYPES)
