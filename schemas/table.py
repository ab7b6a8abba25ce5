"""
Tabular projection of a collection
"""

from pydantic import BaseModel, Field
from typing import List
import enum

IDENTITY_COLUMNS = ["id", "url"]
ORIGINAL_PROPERTIES_COLUMN = "original_properties_json"


class EmptyCellPolicy(str, enum.Enum):
    """How a property without a value is rendered"""
    BLANK = "blank"
    QUOTED = "quoted"

    @property
    def sentinel(self) -> str:
        return '""' if self is EmptyCellPolicy.QUOTED else ""


class Table(BaseModel):
    """Header plus positionally aligned rows of printable cells"""

    header: List[str]
    rows: List[List[str]] = Field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.header)

    def __len__(self) -> int:
        return len(self.rows)
