"""
JSON interchange: full fidelity.

Records are serialized field for field in their wire (camelCase) shape,
inside an object keyed by the record kind. On input a bare top-level
array is accepted as well.
"""
from typing import List, Sequence, Tuple

import orjson

from authoring.core.errors import ContainerParseError, FormatError
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


class JsonCodec(Codec):
    format = Format.JSON
    content_type = "application/json"
    extension = "json"

    def decode(self, data: bytes, kind: RecordKind) -> List[DecodedRecord]:
        try:
            payload = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise ContainerParseError(self.format.value, f"Invalid JSON: {e}")

        if isinstance(payload, dict):
            payload = payload.get(kind.value)
        if not isinstance(payload, list):
            raise ContainerParseError(
                self.format.value,
                f"Expected an array or an object with a '{kind.value}' array",
            )

        decoded: List[DecodedRecord] = []
        for index, item in enumerate(payload, start=1):
            if not isinstance(item, dict):
                decoded.append(failed(index, f"{kind.label} record must be an object"))
            else:
                decoded.append(build_record(kind, index, item))
        return decoded

    def encode(self, records: Sequence[Record], kind: RecordKind) -> Tuple[bytes, List[FormatError]]:
        accepted, errors = split_by_kind(records, kind)
        payload = {kind.value: [record.to_dict() for _, record in accepted]}
        return orjson.dumps(payload, option=orjson.OPT_INDENT_2), errors
