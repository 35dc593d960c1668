"""
app/schemas/query.py

Purpose: List query schemas

- Typed filter expression (field, operator, value)
- Sort and offset pagination options
- List result envelope
"""

from pydantic import BaseModel, Field
from typing import Any, Generic, List, Literal, Optional, TypeVar
from enum import Enum


class FilterOp(str, Enum):
    EQ = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    CONTAINS = "contains"


class FieldFilter(BaseModel):
    """
    One condition of a list query. All filters of a query must match.
    """
    field: str
    op: FilterOp = FilterOp.EQ
    value: Any = None

    @classmethod
    def parse(cls, expression: str) -> "FieldFilter":
        """
        Parses the query-string form `field:op:value`, e.g. `role:==:admin`.
        The value keeps any further colons.
        """
        parts = expression.split(":", 2)
        if len(parts) != 3 or not parts[0]:
            raise ValueError(f"Filter must look like field:op:value, got {expression!r}")
        field, op, value = parts
        return cls(field=field, op=FilterOp(op), value=value)


class ListOptions(BaseModel):
    filters: List[FieldFilter] = Field(default_factory=list)
    search: Optional[str] = None
    order_by: Optional[str] = None
    order_direction: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1)


T = TypeVar("T")


class ListResult(BaseModel, Generic[T]):
    items: List[T]
    has_more: bool
    total_count: int
    page: int = 1
    page_size: int = 10
