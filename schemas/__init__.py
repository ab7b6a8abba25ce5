"""
Pydantic schemas for data validation and serialization.

Schemas:
    notion: Notion query responses, page records and property values
    table: Header plus rows produced by the table projector

Usage:
    from schemas.notion import Record, PropertyValue, PropertyKind
    from schemas.table import Table

Example:
    value = PropertyValue.model_validate({"type": "email", "email": "ann@example.com"})
    assert value.kind == PropertyKind.TEXT_LIKE
"""
