"""
CSV interchange: flat question rows.

Lossy both ways. Hints, metadata and the structured options of matching
and ordering questions have no column and are dropped on export; they
cannot be rebuilt on import. Assessments are not carried at all.

Multiple-choice options travel in one cell as ``id=text`` items joined by
CSV_LIST_SEPARATOR, and their correct answer as the joined ids of the
correct options. Tags and fill-in-blank answers are joined the same way.
A backslash escapes the separator, ``=`` and itself inside an item.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import csv
import io
import re

from authoring.core.config import get_settings
from authoring.core.errors import ContainerParseError, FormatError, UnsupportedFormatError
from authoring.interchange.records import (
    Codec,
    DecodedRecord,
    Format,
    Record,
    RecordKind,
    build_record,
    failed,
    split_by_kind,
)
from authoring.models.questions import Question, QuestionType

COLUMNS: Tuple[str, ...] = (
    "id",
    "type",
    "text",
    "instructions",
    "options",
    "correct_answer",
    "points",
    "difficulty",
    "tags",
)
REQUIRED_COLUMNS = ("type", "text", "points")

# Spreadsheet headers seen in the wild, after normalisation
HEADER_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "question_id"),
    "type": ("type", "question_type", "kind"),
    "text": ("text", "question", "question_text", "prompt", "stem"),
    "instructions": ("instructions", "instruction"),
    "options": ("options", "choices", "answers"),
    "correct_answer": ("correct_answer", "answer", "correct", "key", "answer_key"),
    "points": ("points", "score", "marks"),
    "difficulty": ("difficulty", "level"),
    "tags": ("tags", "tag", "labels"),
}

_TRUE = {"true", "t", "yes", "y", "1"}
_FALSE = {"false", "f", "no", "n", "0"}


def normalize_header(label: str) -> str:
    """Lower-case, trim, and fold spaces and dashes into underscores."""
    return re.sub(r"[\s\-]+", "_", (label or "").strip().lower())


def build_header_map(header_row: List[str]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for i, cell in enumerate(header_row):
        norm = normalize_header(cell)
        if not norm:
            continue
        for key, aliases in HEADER_ALIASES.items():
            if key not in out and norm in aliases:
                out[key] = i
                break
    return out


def _tokens(cell: str, delimiter: str, separator: str) -> List[str]:
    """Split on unescaped delimiters; escape sequences are kept for _unescape."""
    escapable = ("\\", separator, "=")
    parts: List[str] = []
    current: List[str] = []
    i = 0
    while i < len(cell):
        ch = cell[i]
        if ch == "\\" and i + 1 < len(cell) and cell[i + 1] in escapable:
            current.append(cell[i:i + 2])
            i += 2
            continue
        if ch == delimiter:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _unescape(item: str, separator: str) -> str:
    return re.sub(r"\\([\\=" + re.escape(separator) + r"])", r"\1", item)


def _escape(value: str, separator: str) -> str:
    for ch in ("\\", separator, "="):
        value = value.replace(ch, "\\" + ch)
    return value


def _split(cell: str, separator: str) -> List[str]:
    items = (part.strip() for part in _tokens(cell, separator, separator))
    return [_unescape(item, separator) for item in items if item]


def _join(values: Sequence[Any], separator: str) -> str:
    return separator.join(_escape(str(v), separator) for v in values)


def _parse_bool(cell: str) -> Any:
    """Map a truthy/falsy cell to a bool; anything else is left for the validator to reject."""
    lowered = cell.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return cell or None


class CsvCodec(Codec):
    format = Format.CSV
    content_type = "text/csv"
    extension = "csv"

    def __init__(self, separator: Optional[str] = None):
        self._separator = separator

    @property
    def separator(self) -> str:
        return self._separator or get_settings().CSV_LIST_SEPARATOR

    # ========== Import ==========

    def decode(self, data: bytes, kind: RecordKind) -> List[DecodedRecord]:
        if kind is not RecordKind.QUESTIONS:
            raise UnsupportedFormatError(self.format.value, kind.value)

        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ContainerParseError(self.format.value, f"CSV payload is not UTF-8: {e}")

        try:
            rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
        except csv.Error as e:
            raise ContainerParseError(self.format.value, f"Malformed CSV: {e}")

        if not rows:
            raise ContainerParseError(self.format.value, "CSV payload has no header row")

        header, body = rows[0], rows[1:]
        columns = build_header_map(header)
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise ContainerParseError(
                self.format.value, f"Missing required column(s): {', '.join(missing)}"
            )

        decoded: List[DecodedRecord] = []
        for index, row in enumerate(body, start=1):
            if len(row) != len(header):
                decoded.append(failed(index, f"expected {len(header)} cells, found {len(row)}"))
                continue
            cells = {key: row[col].strip() for key, col in columns.items()}
            decoded.append(self._decode_row(index, cells))
        return decoded

    def _decode_row(self, index: int, cells: Dict[str, str]) -> DecodedRecord:
        sep = self.separator
        question_type = cells["type"]
        data: Dict[str, Any] = {
            "type": question_type,
            "content": {"text": cells["text"], "instructions": cells.get("instructions") or None},
            "points": cells["points"],
            "tags": _split(cells.get("tags", ""), sep),
        }
        if cells.get("id"):
            data["id"] = cells["id"]
        if cells.get("difficulty"):
            data["difficulty"] = cells["difficulty"].lower()

        options = []
        for item in _tokens(cells.get("options", ""), sep, sep):
            item = item.strip()
            if not item:
                continue
            option_id, *rest = _tokens(item, "=", sep)
            if not rest or not option_id.strip():
                return failed(index, f"option {_unescape(item, sep)!r} is not in id=text form")
            options.append({
                "id": _unescape(option_id.strip(), sep),
                "text": _unescape("=".join(rest).strip(), sep),
            })

        answer = cells.get("correct_answer", "")
        if question_type == QuestionType.MULTIPLE_CHOICE.value:
            correct = set(_split(answer, sep))
            unknown = sorted(correct - {opt["id"] for opt in options})
            if unknown:
                return failed(index, f"correct answer names unknown option(s): {', '.join(unknown)}")
            for opt in options:
                opt["isCorrect"] = opt["id"] in correct
        elif question_type == QuestionType.TRUE_FALSE.value:
            data["correctAnswer"] = _parse_bool(answer)
        elif question_type == QuestionType.FILL_IN_BLANK.value:
            data["correctAnswer"] = _split(answer, sep) or None
        elif answer:
            data["correctAnswer"] = answer

        if options:
            data["options"] = options
        return build_record(RecordKind.QUESTIONS, index, data)

    # ========== Export ==========

    def encode(self, records: Sequence[Record], kind: RecordKind) -> Tuple[bytes, List[FormatError]]:
        if kind is not RecordKind.QUESTIONS:
            raise UnsupportedFormatError(self.format.value, kind.value)

        accepted, errors = split_by_kind(records, kind)
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=COLUMNS, lineterminator="\n")
        writer.writeheader()
        for _, question in accepted:
            writer.writerow(self._encode_row(question))
        return buf.getvalue().encode("utf-8"), errors

    def _encode_row(self, question: Question) -> Dict[str, str]:
        sep = self.separator
        flat_options = question.type not in (QuestionType.MATCHING.value, QuestionType.ORDERING.value)
        options = question.options if flat_options and question.options else []

        answer = question.correct_answer
        if question.type == QuestionType.MULTIPLE_CHOICE.value:
            answer_cell = _join([opt.id for opt in options if opt.is_correct], sep)
        elif isinstance(answer, bool):
            answer_cell = "true" if answer else "false"
        elif isinstance(answer, list):
            answer_cell = _join(answer, sep)
        else:
            answer_cell = "" if answer is None else str(answer)

        return {
            "id": question.id,
            "type": question.type,
            "text": question.content.text,
            "instructions": question.content.instructions or "",
            "options": sep.join(f"{_escape(opt.id, sep)}={_escape(opt.text, sep)}" for opt in options),
            "correct_answer": answer_cell,
            "points": str(question.points),
            "difficulty": question.difficulty.value,
            "tags": _join(question.tags, sep),
        }
