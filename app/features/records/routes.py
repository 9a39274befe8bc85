"""
Generic record API routes.

Thin handlers over ResourceOperations; all authorization and row scoping
happens in the access layer.
"""
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status

from app.core.exceptions import NotFoundError
from app.features.records.dependencies import get_resource_operations
from app.features.records.operations import ResourceOperations
from app.features.records.schemas import RESERVED_QUERY_PARAMS, RecordPayload, RecordQuery


router = APIRouter()

Operations = Annotated[ResourceOperations, Depends(get_resource_operations)]


@router.get("/{resource}", response_model=List[Dict[str, Any]])
async def list_records(
    resource: str,
    request: Request,
    ops: Operations,
    order_by: Optional[str] = None,
    limit: Annotated[Optional[int], Query(ge=1, le=1000)] = None,
    offset: Annotated[Optional[int], Query(ge=0)] = None,
):
    """List visible records. Any query parameter other than order_by/limit/offset filters by equality."""
    query = RecordQuery(
        filters={
            key: value for key, value in request.query_params.items()
            if key not in RESERVED_QUERY_PARAMS
        },
        order_by=order_by,
        limit=limit,
        offset=offset,
    )
    return await ops.get(
        resource,
        filters=query.filters,
        order_by=query.order_by,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{resource}/{record_id}", response_model=Dict[str, Any])
async def get_record(resource: str, record_id: str, ops: Operations):
    """Get a single visible record or 404."""
    row = await ops.find_one(resource, record_id)
    if row is None:
        raise NotFoundError(f"{resource} record not found")
    return row


@router.post("/{resource}", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_record(resource: str, payload: RecordPayload, ops: Operations):
    """Create a record; ownership, created-by and department are filled from the caller."""
    return await ops.create(resource, payload.values())


@router.patch("/{resource}/{record_id}", response_model=Dict[str, Any])
async def update_record(resource: str, record_id: str, payload: RecordPayload, ops: Operations):
    """Update a visible record or 404. Ownership cannot be reassigned here."""
    row = await ops.update(resource, record_id, payload.values())
    if row is None:
        raise NotFoundError(f"{resource} record not found")
    return row


@router.delete("/{resource}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(resource: str, record_id: str, ops: Operations, hard_delete: bool = False):
    """Soft delete a record (or physically remove it with ?hard_delete=true)."""
    if not await ops.delete(resource, record_id, hard_delete=hard_delete):
        raise NotFoundError(f"{resource} record not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
