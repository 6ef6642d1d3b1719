"""
Base entity model and mixins.
"""
from typing import Dict, Any, TypeVar
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ModelT = TypeVar("ModelT", bound="DomainModel")


def new_id() -> str:
    """Generate a fresh entity identity."""
    return str(uuid.uuid4())


class DomainModel(BaseModel):
    """
    Immutable entity base.

    Field names are snake_case in Python and camelCase on the wire; both
    spellings are accepted on input. Store-owned fields (createdAt,
    updatedAt, createdBy) are declared last on each entity and carried
    through untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to its wire dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def replace(self: ModelT, **changes: Any) -> ModelT:
        """Return a re-validated copy with the given fields replaced wholesale."""
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


class MetadataMixin:
    """Accessors for the open, type-specific metadata map."""

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get metadata value by key."""
        return self.metadata.get(key, default) if self.metadata else default

    def has_metadata(self, key: str) -> bool:
        return bool(self.metadata) and key in self.metadata
