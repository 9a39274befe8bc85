"""
Dependency wiring for the generic record endpoints.
"""
from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.dependencies import AccessGate, get_access_gate, get_role_resolver
from app.features.permissions.resolver import RoleResolver
from app.features.records.operations import ResourceOperations
from app.features.records.registry import ResourceRegistry, get_registry


def get_resource_registry(request: Request) -> ResourceRegistry:
    return getattr(request.app.state, "resource_registry", None) or get_registry()


async def get_resource_operations(
    db: Annotated[AsyncSession, Depends(get_db)],
    gate: Annotated[AccessGate, Depends(get_access_gate)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
    registry: Annotated[ResourceRegistry, Depends(get_resource_registry)],
) -> ResourceOperations:
    return ResourceOperations(db, gate, resolver, registry=registry)
