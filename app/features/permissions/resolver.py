"""
Principal -> role name resolution with a bounded-staleness cache.
"""
from typing import List, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import DependencyError
from app.features.permissions.cache import RoleCache
from app.features.permissions.models import Role, UserRoleBinding
from app.utils import get_logger


log = get_logger(__name__)

DEFAULT_ROLE_TTL_SECONDS = 300.0


class RoleBindingStore(Protocol):
    """Backing store of principal -> role bindings."""

    async def fetch_role_names(self, principal_id: str) -> List[str]:
        ...


class SqlRoleBindingStore:
    """
    Reads role bindings joined to role names.

    Uses its own sessions so resolution never shares a transaction with the
    request's data operations.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch_role_names(self, principal_id: str) -> List[str]:
        stmt = (
            select(Role.name)
            .join(UserRoleBinding, UserRoleBinding.role_id == Role.id)
            .where(
                UserRoleBinding.user_id == principal_id,
                Role.deleted_at.is_(None),
            )
            .order_by(Role.name)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [name for name in result.scalars().all() if name]


class RoleResolver:
    """
    Resolves a principal's role names, caching each result for `ttl` seconds.

    Concurrent misses for the same principal may each query the store; the
    last write wins and both writes carry the same data. Failed lookups are
    never cached.
    """

    def __init__(self, store: RoleBindingStore, cache: RoleCache, ttl: float = DEFAULT_ROLE_TTL_SECONDS):
        self.store = store
        self.cache = cache
        self.ttl = ttl

    async def resolve_roles(self, principal_id: str) -> List[str]:
        cached = self.cache.get(principal_id)
        if cached is not None:
            log.debug(f"Role cache hit for {principal_id}")
            return list(cached)

        log.debug(f"Role cache miss for {principal_id}")
        try:
            roles = await self.store.fetch_role_names(principal_id)
        except (SQLAlchemyError, OSError) as e:
            log.warning(f"Role lookup failed for {principal_id}: {e}")
            raise DependencyError(f"Role lookup failed for principal {principal_id}") from e

        roles = list(roles)
        self.cache.set(principal_id, tuple(roles), self.ttl)
        return roles

    def invalidate(self, principal_id: str) -> None:
        self.cache.delete(principal_id)

    def clear(self) -> None:
        self.cache.clear()
