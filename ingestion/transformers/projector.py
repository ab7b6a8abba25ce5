"""
Project fetched records into a header plus aligned rows
"""

from typing import Any, Dict, List, Optional, Sequence
import logging

from pydantic import ValidationError

from core.exceptions import EmptyInputError, RecordFormatError, SchemaMismatchError
from ingestion.transformers.flattener import PropertyFlattener, escape_cell, to_json_text
from schemas.notion import Record
from schemas.table import IDENTITY_COLUMNS, ORIGINAL_PROPERTIES_COLUMN, Table

logger = logging.getLogger(__name__)


class TableProjector:
    """
    Turn raw Notion pages into a table.

    The header is the first record's property names followed by the identity
    columns. It is computed once and every record is flattened in that exact
    name order, so a record whose property set differs is rejected instead of
    being silently misaligned.
    """

    def __init__(
        self,
        flattener: Optional[PropertyFlattener] = None,
        include_original_properties: bool = False
    ):
        self.flattener = flattener or PropertyFlattener()
        self.include_original_properties = include_original_properties

    def project(self, records: Sequence[Dict[str, Any]]) -> Table:
        """
        Build the table for one collection.

        Args:
            records: Raw page dicts as returned by the pager

        Returns:
            Table whose rows all have the header's width

        Raises:
            EmptyInputError: If there are no records to learn the header from
            RecordFormatError: If a record lacks an id or properties
            SchemaMismatchError: If a record's property names differ from the first one's
        """
        if not records:
            raise EmptyInputError(
                "Cannot derive a header from zero records",
                context={"records": 0}
            )

        parsed = [self._parse(raw, index) for index, raw in enumerate(records)]
        property_names = parsed[0].property_names
        header = self.build_header(property_names)

        rows = []
        for record, raw in zip(parsed, records):
            self._check_schema(record, property_names)
            rows.append(self.project_row(record, property_names, raw))

        logger.debug(f"Projected {len(rows)} rows with {len(header)} columns")
        return Table(header=header, rows=rows)

    def build_header(self, property_names: List[str]) -> List[str]:
        header = [escape_cell(name) for name in property_names] + IDENTITY_COLUMNS
        if self.include_original_properties:
            header.append(ORIGINAL_PROPERTIES_COLUMN)
        return header

    def project_row(
        self,
        record: Record,
        property_names: List[str],
        raw: Optional[Dict[str, Any]] = None
    ) -> List[str]:
        """Flatten one record in header order and append its identity cells"""
        ordered = {name: record.properties[name] for name in property_names}
        row = self.flattener.flatten(ordered)
        row.append(escape_cell(record.id))
        row.append(escape_cell(record.url) if record.url else self.flattener.sentinel)

        if self.include_original_properties:
            source = raw["properties"] if raw is not None else {
                name: value.model_dump(exclude_none=True) for name, value in record.properties.items()
            }
            row.append(to_json_text(source))

        return row

    @staticmethod
    def _parse(raw: Dict[str, Any], index: int) -> Record:
        try:
            return Record.model_validate(raw)
        except ValidationError as e:
            raise RecordFormatError(
                "Record does not have the expected id/properties shape",
                context={
                    "record_index": index,
                    "record_id": raw.get("id") if isinstance(raw, dict) else None,
                    "errors": e.error_count()
                },
                original_exception=e
            )

    @staticmethod
    def _check_schema(record: Record, property_names: List[str]):
        names = set(record.properties)
        expected = set(property_names)
        if names == expected:
            return

        raise SchemaMismatchError(
            f"Record {record.id} has a different property set than the header",
            context={
                "record_id": record.id,
                "missing": sorted(expected - names),
                "unexpected": sorted(names - expected)
            }
        )
