"""
Pydantic schemas for Notion database query responses and page records
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
import enum


class PropertyKind(str, enum.Enum):
    """Flattening rule families, one per group of Notion property types"""
    TEXT_LIKE = "text_like"
    RICH_TEXT = "rich_text"
    PERSON_REFERENCE = "person_reference"
    RELATION_REFERENCE = "relation_reference"
    SINGLE_CHOICE = "single_choice"
    AGGREGATE = "aggregate"
    OTHER = "other"

    @classmethod
    def for_type(cls, property_type: str) -> "PropertyKind":
        """Map a Notion property `type` tag to its kind; unknown tags are OTHER"""
        return _KIND_BY_TYPE.get(property_type, cls.OTHER)


_KIND_BY_TYPE = {
    "email": PropertyKind.TEXT_LIKE,
    "phone_number": PropertyKind.TEXT_LIKE,
    "url": PropertyKind.TEXT_LIKE,
    "rich_text": PropertyKind.RICH_TEXT,
    "title": PropertyKind.RICH_TEXT,
    "people": PropertyKind.PERSON_REFERENCE,
    "relation": PropertyKind.RELATION_REFERENCE,
    "select": PropertyKind.SINGLE_CHOICE,
    "rollup": PropertyKind.AGGREGATE,
}


class PropertyValue(BaseModel):
    """
    One property of a page.

    Notion stores the payload under a key equal to `type`, e.g.
    `{"type": "email", "email": "a@b.c"}`, so everything besides the tag is
    kept as an extra field.
    """

    type: str
    id: Optional[str] = None

    class Config:
        extra = "allow"
        frozen = True

    @property
    def kind(self) -> PropertyKind:
        return PropertyKind.for_type(self.type)

    @property
    def payload(self) -> Any:
        """The value stored under the `type` key, or None when absent"""
        return (self.model_extra or {}).get(self.type)


class Record(BaseModel):
    """A page of a Notion database"""

    id: str = Field(..., min_length=1)
    url: Optional[str] = None
    properties: Dict[str, PropertyValue]

    class Config:
        extra = "allow"
        frozen = True

    @property
    def property_names(self) -> List[str]:
        return list(self.properties.keys())


class QueryResponse(BaseModel):
    """One page of a `databases/{id}/query` response"""

    # No defaults: a body missing these is not a list page
    results: List[Dict[str, Any]]
    next_cursor: Optional[str] = None
    has_more: bool

    class Config:
        extra = "ignore"
