"""
Flatten Notion property values into printable TSV cells
"""

from typing import Any, Dict, List, Mapping, Union
import json
import logging

from schemas.notion import PropertyKind, PropertyValue
from schemas.table import EmptyCellPolicy

logger = logging.getLogger(__name__)

# Separator between elements of a multi-valued cell. It must differ from the
# TSV field delimiter.
JOIN_SEPARATOR = ";"
PERSON_SEPARATOR = " | "

_CELL_ESCAPES = str.maketrans({"\t": "\\t", "\r": "\\r", "\n": "\\n"})


def escape_cell(text: str) -> str:
    """Escape characters that would break the TSV row or field structure"""
    return text.translate(_CELL_ESCAPES)


def is_empty_payload(payload: Any) -> bool:
    """True for an absent value: None, "", [] or {}"""
    return payload is None or (isinstance(payload, (str, list, dict)) and len(payload) == 0)


def to_json_text(value: Any) -> str:
    """Compact JSON text, source key order, non-ASCII kept"""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class PropertyFlattener:
    """
    Convert a page's property map into an ordered list of cells.

    Dispatches on the property kind:
    - text-like (email, phone_number, url): trimmed string
    - rich text / title: trimmed plain text of each span, joined with ';'
    - people: "name | email" per person, joined with ';'
    - relation: related page ids, joined with ';'
    - select: the option name
    - rollup: plain text of every span of every array group, joined with ';'
    - anything else: trimmed string, or compact JSON for structured values

    Emptiness is judged on the raw payload only: None, "", [] and {} render
    the policy's sentinel for every kind. A populated value that trims to
    blank renders as the blank text, so an absent value stays distinguishable
    under the quoted policy. The flattener is pure: the same input always
    yields the same cells.
    """

    def __init__(self, empty_cell: Union[EmptyCellPolicy, str] = EmptyCellPolicy.BLANK):
        self.empty_cell = EmptyCellPolicy(empty_cell)

    @property
    def sentinel(self) -> str:
        return self.empty_cell.sentinel

    def flatten(self, properties: Mapping[str, Union[PropertyValue, Dict[str, Any]]]) -> List[str]:
        """
        Flatten properties in their mapping order.

        Returns:
            One cell per property, same order as `properties`
        """
        return [self.flatten_value(value) for value in properties.values()]

    def flatten_value(self, value: Union[PropertyValue, Dict[str, Any]]) -> str:
        """Render a single property value as one cell"""
        if not isinstance(value, PropertyValue):
            value = PropertyValue.model_validate(value)

        kind = value.kind
        payload = value.payload

        if is_empty_payload(payload):
            return self.sentinel

        if kind == PropertyKind.TEXT_LIKE:
            cell = self._flatten_text_like(payload)
        elif kind == PropertyKind.RICH_TEXT:
            cell = self._flatten_rich_text(payload)
        elif kind == PropertyKind.PERSON_REFERENCE:
            cell = self._flatten_people(payload)
        elif kind == PropertyKind.RELATION_REFERENCE:
            cell = self._flatten_relation(payload)
        elif kind == PropertyKind.SINGLE_CHOICE:
            cell = self._flatten_select(payload)
        elif kind == PropertyKind.AGGREGATE:
            cell = self._flatten_rollup(payload)
        else:
            cell = self._flatten_other(payload)

        if cell is None:
            return self.sentinel
        return escape_cell(cell)

    # ------------------------------------------------------------------
    # Kind handlers. Payloads are non-empty here; None means "render the
    # sentinel" (a rollup whose groups hold no values).
    # ------------------------------------------------------------------

    @staticmethod
    def _flatten_text_like(payload: Any):
        return str(payload).strip()

    @staticmethod
    def _span_texts(spans: List[Any]) -> List[str]:
        texts = []
        for span in spans:
            if isinstance(span, dict):
                texts.append(str(span.get("plain_text") or "").strip())
            else:
                texts.append(str(span).strip())
        return texts

    def _flatten_rich_text(self, payload: Any):
        if not isinstance(payload, list):
            return self._flatten_other(payload)
        return JOIN_SEPARATOR.join(self._span_texts(payload))

    @staticmethod
    def _flatten_people(payload: Any):
        entries = []
        for person in payload:
            name = (person.get("name") or "").strip()
            # Bots and unresolved users carry no `person` block
            address = ((person.get("person") or {}).get("email") or "").strip()
            entries.append(f"{name}{PERSON_SEPARATOR}{address}")
        return JOIN_SEPARATOR.join(entries)

    @staticmethod
    def _flatten_relation(payload: Any):
        return JOIN_SEPARATOR.join(str(item.get("id", "")) for item in payload)

    @staticmethod
    def _flatten_select(payload: Any):
        if isinstance(payload, dict):
            return str(payload.get("name") or "")
        return str(payload)

    def _flatten_rollup(self, payload: Any):
        if not isinstance(payload, dict):
            return self._flatten_other(payload)

        rollup_type = payload.get("type")
        if rollup_type != "array":
            # number / date / unsupported rollups hold a single value
            single = payload.get(rollup_type)
            return None if is_empty_payload(single) else self._flatten_other(single)

        groups = payload.get("array") or []
        if not groups:
            return None

        texts = []
        for group in groups:
            inner = group.get(group.get("type")) if isinstance(group, dict) else group
            if isinstance(inner, list):
                texts.extend(self._span_texts(inner))
            elif not is_empty_payload(inner):
                texts.append(self._flatten_other(inner))
        if not texts:
            return None
        return JOIN_SEPARATOR.join(texts)

    @staticmethod
    def _flatten_other(payload: Any):
        if isinstance(payload, str):
            return payload.strip()
        return to_json_text(payload)
