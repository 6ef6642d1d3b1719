"""
QTI-like XML interchange.

A small subset of the IMS QTI item and test vocabulary. Only
multiple-choice, true/false and essay items can be carried; any other
question type is skipped on export and rejected on import with an
UnsupportedTypeError for that record. Hints, option explanations and all
metadata except an essay's wordLimit are dropped.

Questions travel as ``<assessmentItems>`` of ``<assessmentItem>``;
assessments as ``<assessmentTests>`` of ``<assessmentTest>`` whose
``<testPart>`` lists ``<assessmentItemRef>`` elements in position order.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import xml.etree.ElementTree as ET

from authoring.core.errors import ContainerParseError, FormatError, UnsupportedTypeError
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
from authoring.models.assessments import Assessment
from authoring.models.questions import Question, QuestionType

SUPPORTED_TYPES = frozenset({
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TRUE_FALSE,
    QuestionType.ESSAY,
})

_ROOTS = {
    RecordKind.QUESTIONS: ("assessmentItems", "assessmentItem"),
    RecordKind.ASSESSMENTS: ("assessmentTests", "assessmentTest"),
}


def _text(element: Optional[ET.Element]) -> str:
    return (element.text or "").strip() if element is not None else ""


def _xml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_number(raw: str) -> Any:
    """Read an int where the text is integral, otherwise a float."""
    try:
        return int(raw)
    except ValueError:
        return float(raw)


def _append_tags(parent: ET.Element, tags: List[str]) -> None:
    if tags:
        container = ET.SubElement(parent, "tags")
        for tag in tags:
            ET.SubElement(container, "tag").text = tag


def _read_tags(parent: ET.Element) -> List[str]:
    return [_text(tag) for tag in parent.findall("tags/tag") if _text(tag)]


def _infer_type(item: ET.Element) -> str:
    """Best guess for an item without a questionType attribute."""
    if item.find("itemBody/choiceInteraction") is not None:
        return QuestionType.MULTIPLE_CHOICE.value
    if item.find("itemBody/extendedTextInteraction") is not None:
        return QuestionType.ESSAY.value
    declaration = item.find("responseDeclaration")
    if declaration is not None and declaration.get("baseType") == "boolean":
        return QuestionType.TRUE_FALSE.value
    return ""


class QtiCodec(Codec):
    format = Format.QTI
    content_type = "application/xml"
    extension = "xml"

    # ========== Import ==========

    def decode(self, data: bytes, kind: RecordKind) -> List[DecodedRecord]:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise ContainerParseError(self.format.value, f"Invalid XML: {e}")

        root_tag, record_tag = _ROOTS[kind]
        if root.tag != root_tag:
            raise ContainerParseError(
                self.format.value, f"Expected <{root_tag}> root element, found <{root.tag}>"
            )

        decoded: List[DecodedRecord] = []
        for index, element in enumerate(root, start=1):
            if element.tag != record_tag:
                decoded.append(failed(index, f"unexpected element <{element.tag}>"))
            elif kind is RecordKind.QUESTIONS:
                decoded.append(self._decode_item(index, element))
            else:
                decoded.append(self._decode_test(index, element))
        return decoded

    def _decode_item(self, index: int, item: ET.Element) -> DecodedRecord:
        raw_type = item.get("questionType") or _infer_type(item)
        question_type = QuestionType.parse(raw_type)
        if question_type not in SUPPORTED_TYPES:
            return DecodedRecord(index=index, error=UnsupportedTypeError(
                index, f"question type {raw_type or '(none)'!r} is not supported in QTI", question_type=raw_type,
            ))

        data: Dict[str, Any] = {
            "type": question_type.value,
            "content": {
                "text": _text(item.find("itemBody/prompt")),
                "instructions": _text(item.find("itemBody/instructions")) or None,
            },
            "points": item.get("points"),
            "tags": _read_tags(item),
        }
        if item.get("identifier"):
            data["id"] = item.get("identifier")
        if item.get("difficulty"):
            data["difficulty"] = item.get("difficulty")

        values = [_text(v) for v in item.findall("responseDeclaration/correctResponse/value")]

        if question_type is QuestionType.MULTIPLE_CHOICE:
            options = []
            for choice in item.findall("itemBody/choiceInteraction/simpleChoice"):
                if not choice.get("identifier"):
                    return failed(index, "simpleChoice without an identifier")
                options.append({
                    "id": choice.get("identifier"),
                    "text": _text(choice),
                    "isCorrect": choice.get("identifier") in values,
                })
            data["options"] = options
        elif question_type is QuestionType.TRUE_FALSE:
            value = values[0].lower() if values else ""
            data["correctAnswer"] = {"true": True, "false": False}.get(value, value or None)
        else:
            interaction = item.find("itemBody/extendedTextInteraction")
            if interaction is not None and interaction.get("expectedLength"):
                try:
                    data["metadata"] = {"wordLimit": _parse_number(interaction.get("expectedLength"))}
                except ValueError:
                    return failed(index, "expectedLength must be a number")

        return build_record(RecordKind.QUESTIONS, index, data)

    def _decode_test(self, index: int, test: ET.Element) -> DecodedRecord:
        data: Dict[str, Any] = {
            "title": test.get("title", ""),
            "description": _text(test.find("description")),
            "instructions": _text(test.find("instructions")),
            "tags": _read_tags(test),
        }
        for attr, key in (("identifier", "id"), ("status", "status"), ("rubricId", "rubricId")):
            if test.get(attr):
                data[key] = test.get(attr)

        settings = test.find("settings")
        if settings is not None:
            data["settings"] = dict(settings.attrib)

        refs = []
        for ref in test.findall("testPart/assessmentItemRef"):
            if not ref.get("identifier"):
                return failed(index, "assessmentItemRef without an identifier")
            refs.append({"questionId": ref.get("identifier"), "position": ref.get("position", len(refs) + 1)})
        data["questions"] = refs

        return build_record(RecordKind.ASSESSMENTS, index, data)

    # ========== Export ==========

    def encode(self, records: Sequence[Record], kind: RecordKind) -> Tuple[bytes, List[FormatError]]:
        accepted, errors = split_by_kind(records, kind)
        root_tag, _ = _ROOTS[kind]
        root = ET.Element(root_tag)

        for index, record in accepted:
            if kind is RecordKind.ASSESSMENTS:
                root.append(self._encode_test(record))
            elif record.question_type not in SUPPORTED_TYPES:
                errors.append(UnsupportedTypeError(
                    index, f"question type {record.type!r} cannot be exported to QTI", question_type=record.type,
                ))
            else:
                root.append(self._encode_item(record))

        ET.indent(root)
        errors.sort(key=lambda e: e.record_index)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True), errors

    def _encode_item(self, question: Question) -> ET.Element:
        item = ET.Element("assessmentItem", {
            "identifier": question.id,
            "questionType": question.type,
            "points": str(question.points),
            "difficulty": question.difficulty.value,
        })
        question_type = question.question_type

        declaration = ET.SubElement(item, "responseDeclaration", {"identifier": "RESPONSE"})
        if question_type is QuestionType.MULTIPLE_CHOICE:
            correct = [opt.id for opt in question.options or [] if opt.is_correct]
            declaration.set("cardinality", "single" if len(correct) == 1 else "multiple")
            declaration.set("baseType", "identifier")
        elif question_type is QuestionType.TRUE_FALSE:
            correct = [] if question.correct_answer is None else [_xml_value(question.correct_answer)]
            declaration.set("cardinality", "single")
            declaration.set("baseType", "boolean")
        else:
            correct = []
            declaration.set("cardinality", "single")
            declaration.set("baseType", "string")
        if correct:
            response = ET.SubElement(declaration, "correctResponse")
            for value in correct:
                ET.SubElement(response, "value").text = value

        body = ET.SubElement(item, "itemBody")
        ET.SubElement(body, "prompt").text = question.content.text
        if question.content.instructions:
            ET.SubElement(body, "instructions").text = question.content.instructions

        if question_type is QuestionType.MULTIPLE_CHOICE:
            interaction = ET.SubElement(body, "choiceInteraction", {
                "responseIdentifier": "RESPONSE",
                "maxChoices": "1" if len(correct) == 1 else "0",
            })
            for opt in question.options or []:
                ET.SubElement(interaction, "simpleChoice", {"identifier": opt.id}).text = opt.text
        elif question_type is QuestionType.ESSAY:
            interaction = ET.SubElement(body, "extendedTextInteraction", {"responseIdentifier": "RESPONSE"})
            if question.has_metadata("wordLimit"):
                interaction.set("expectedLength", _xml_value(question.get_metadata("wordLimit")))

        _append_tags(item, question.tags)
        return item

    def _encode_test(self, assessment: Assessment) -> ET.Element:
        attrs = {
            "identifier": assessment.id,
            "title": assessment.title,
            "status": assessment.status.value,
        }
        if assessment.rubric_id:
            attrs["rubricId"] = assessment.rubric_id
        test = ET.Element("assessmentTest", attrs)

        if assessment.description:
            ET.SubElement(test, "description").text = assessment.description
        if assessment.instructions:
            ET.SubElement(test, "instructions").text = assessment.instructions
        _append_tags(test, assessment.tags)

        ET.SubElement(test, "settings", {
            key: _xml_value(value) for key, value in assessment.settings.to_dict().items()
        })

        part = ET.SubElement(test, "testPart", {"identifier": "part-1"})
        for ref in sorted(assessment.questions, key=lambda r: r.position):
            ET.SubElement(part, "assessmentItemRef", {
                "identifier": ref.question_id,
                "position": str(ref.position),
            })
        return test
