"""
Pydantic schemas for registry resources.

``Resource`` is the persisted record as it appears both in API
responses and in the backing JSON document; field names are camelCase
on the wire.  ``ResourceCreate`` and ``ResourceUpdate`` validate
untrusted request bodies and normalise them (names and descriptions
are trimmed, tags are trimmed, lowercased and de-duplicated).
``ResourceFilters`` validates the query parameters of the list
endpoint.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


UPDATABLE_FIELDS = frozenset({"name", "description", "tags"})


def normalize_tags(value: Any) -> List[str]:
    """Trim and lowercase every tag and drop duplicates, keeping first occurrences."""
    if not isinstance(value, list):
        raise ValueError("tags must be an array of strings")
    tags: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValueError("tags must be an array of non-empty strings")
        tag = item.strip().lower()
        if tag not in tags:
            tags.append(tag)
    return tags


_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, (str, datetime)):
        raise ValueError("updatedAfter must be a valid ISO date string")
    try:
        parsed = _DATETIME.validate_python(value.strip() if isinstance(value, str) else value)
    except ValidationError:
        raise ValueError("updatedAfter must be a valid ISO date string") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()


def _clean_description(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("description must be a string")
    return value.strip()


class Resource(BaseModel):
    """A stored record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    version: int = 1

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: List[str]) -> List[str]:
        return normalize_tags(value)

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ResourceDocument(BaseModel):
    """Layout of the backing file: the whole collection under one field."""

    resources: List[Resource] = Field(default_factory=list)


class ResourceCreate(BaseModel):
    """Schema for creating a resource.  Only ``name`` is required."""

    name: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> str:
        return _require_text(value, "name is required")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> str:
        return _clean_description(value)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)


class ResourceUpdate(BaseModel):
    """Schema for updating a resource.

    All fields are optional but at least one of them must be present.
    Only the provided fields are replaced; ``tags`` replaces the whole
    tag set rather than merging into it.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> str:
        return _require_text(value, "name must be a non-empty string when provided")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> str:
        return _clean_description(value)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    @model_validator(mode="after")
    def require_one_field(self) -> "ResourceUpdate":
        if not UPDATABLE_FIELDS & self.model_fields_set:
            raise ValueError("Provide at least one field to update")
        return self

    def changes(self) -> dict:
        """Return only the fields the caller supplied."""
        return self.model_dump(include=set(UPDATABLE_FIELDS & self.model_fields_set))


class ResourceFilters(BaseModel):
    """Optional filters for listing resources, combined with logical AND."""

    model_config = ConfigDict(populate_by_name=True)

    search: Optional[str] = None
    tag: Optional[str] = None
    updated_after: Optional[datetime] = Field(None, alias="updatedAfter")

    @field_validator("search", mode="before")
    @classmethod
    def clean_search(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    @field_validator("tag", mode="before")
    @classmethod
    def clean_tag(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip().lower()

    @field_validator("updated_after", mode="before")
    @classmethod
    def clean_updated_after(cls, value: Any) -> Optional[datetime]:
        if value is None or value == "":
            return None
        return parse_timestamp(value)
