"""
app/api/records.py

Purpose: CRUD endpoints for the managed collections

- One router per collection (users, products), gated by the route table
- Listing with filters, search, sort and pagination
- Bulk delete of selected rows
- CSV export of the selection or the search results
"""

from typing import List, Literal, Optional, Type

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import BaseModel

from app.api.deps import get_record_store, require_route
from app.core.config import settings
from app.core.exceptions import RecordNotFoundError, ValidationError
from app.core.logging import get_logger
from app.schemas.query import FieldFilter, ListOptions
from app.schemas.records import (
    BulkDeleteRequest,
    BulkDeleteResult,
    ProductCreate,
    ProductUpdate,
    UserCreate,
    UserUpdate,
)
from app.services.export_service import export_collection
from app.services.record_service import RecordStore
from utils.constants import PRODUCTS_EXPORT_FILENAME, USERS_EXPORT_FILENAME

logger = get_logger(__name__)


def parse_filters(expressions: List[str]) -> List[FieldFilter]:
    filters = []
    for expression in expressions:
        try:
            filters.append(FieldFilter.parse(expression))
        except ValueError as e:
            raise ValidationError(str(e), details={"filter": expression})
    return filters


def build_collection_router(
    collection: str,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    route: str,
    export_filename: str,
) -> APIRouter:
    """
    Builds the CRUD router of one collection. Every endpoint requires a role
    allowed on `route` by the permission table.
    """
    router = APIRouter(prefix=f"/{collection}", dependencies=[Depends(require_route(route))])

    @router.get("")
    async def list_records(
        filters: List[str] = Query(default=[], alias="filter", description="field:op:value, e.g. role:==:admin"),
        q: Optional[str] = Query(default=None, description="Free-text search"),
        order_by: Optional[str] = None,
        order_direction: Literal["asc", "desc"] = "desc",
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        store: RecordStore = Depends(get_record_store),
    ):
        options = ListOptions(
            filters=parse_filters(filters),
            search=q,
            order_by=order_by,
            order_direction=order_direction,
            page=page,
            page_size=page_size,
        )
        return store.list(collection, options)

    @router.post("", status_code=201)
    async def create_record(
        payload: create_model,
        store: RecordStore = Depends(get_record_store),
    ):
        return await store.create(collection, payload.model_dump(exclude_none=True))

    @router.get("/export")
    async def export_records(
        ids: List[str] = Query(default=[], description="Selected ids; all search results when empty"),
        q: Optional[str] = None,
        filename: Optional[str] = None,
        store: RecordStore = Depends(get_record_store),
    ):
        if ids:
            records = [r for r in (store.get_by_id(collection, i) for i in ids) if r is not None]
        else:
            records = store.select(collection, ListOptions(search=q))

        content = export_collection(collection, records)
        logger.info(f"Exported {len(records)} {collection}")
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename or export_filename}"'},
        )

    @router.post("/bulk-delete", response_model=BulkDeleteResult)
    async def bulk_delete_records(
        payload: BulkDeleteRequest,
        store: RecordStore = Depends(get_record_store),
    ):
        deleted, missing = await store.bulk_delete(collection, payload.ids)
        return BulkDeleteResult(deleted=deleted, not_found=missing)

    @router.get("/{record_id}")
    async def get_record(record_id: str, store: RecordStore = Depends(get_record_store)):
        record = store.get_by_id(collection, record_id)
        if record is None:
            raise RecordNotFoundError(
                f"Item with ID {record_id} not found in {collection}",
                details={"collection": collection, "id": record_id},
            )
        return record

    @router.patch("/{record_id}")
    async def update_record(
        record_id: str,
        payload: update_model,
        store: RecordStore = Depends(get_record_store),
    ):
        fields = payload.model_dump(exclude_unset=True)
        return await store.update(collection, record_id, fields)

    @router.delete("/{record_id}", status_code=204)
    async def delete_record(record_id: str, store: RecordStore = Depends(get_record_store)):
        await store.delete(collection, record_id)
        return Response(status_code=204)

    return router


users_router = build_collection_router(
    "users", UserCreate, UserUpdate, "/dashboard/users", USERS_EXPORT_FILENAME
)
products_router = build_collection_router(
    "products", ProductCreate, ProductUpdate, "/dashboard/products", PRODUCTS_EXPORT_FILENAME
)
