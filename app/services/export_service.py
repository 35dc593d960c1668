"""
app/services/export_service.py

Purpose: CSV export of dashboard records

- Projects records to their export columns (no sensitive fields)
- Renders rows as CSV text with minimal quoting
"""

import csv
import io
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List

from app.models.record import ProductRecord, StoredRecord, UserRecord


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return value


def objects_to_csv(rows: List[Dict[str, Any]]) -> str:
    """
    Renders a list of flat dicts as CSV.

    The header comes from the first row's keys. Fields containing a comma,
    quote or newline are quoted with internal quotes doubled.

    Args:
        rows: Records to export

    Returns:
        CSV text, empty for an empty list
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(row.get(header)) for header in headers])

    return buffer.getvalue().rstrip("\n")


def prepare_users_for_export(users: Iterable[UserRecord]) -> List[Dict[str, Any]]:
    return [
        {
            "id": user.id,
            "email": user.email,
            "displayName": user.display_name,
            "role": user.role,
            "createdAt": user.created_at,
        }
        for user in users
    ]


def prepare_products_for_export(products: Iterable[ProductRecord]) -> List[Dict[str, Any]]:
    return [
        {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "price": product.price,
            "category": product.category,
            "inStock": "Yes" if product.in_stock else "No",
            "createdAt": product.created_at,
        }
        for product in products
    ]


EXPORTERS = {
    "users": prepare_users_for_export,
    "products": prepare_products_for_export,
}


def export_collection(collection: str, records: Iterable[StoredRecord]) -> str:
    """
    Projects and renders records of a collection as CSV text.
    Collections without a projection export every stored field.
    """
    prepare = EXPORTERS.get(collection)
    if prepare is None:
        rows = [record.model_dump() for record in records]
    else:
        rows = prepare(records)
    return objects_to_csv(rows)
