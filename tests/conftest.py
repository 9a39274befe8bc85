"""Shared pytest fixtures for access layer tests."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.database.base import Base
from app.core.database.engine import import_models
from app.features.permissions.cache import TTLRoleCache
from app.features.permissions.dependencies import AccessGate
from app.features.permissions.policy import PolicyMatrix
from app.features.permissions.resolver import RoleResolver
from app.features.records.operations import ResourceOperations
from app.features.records.registry import ResourceRegistry
from app.features.users.context import AuthContext


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingRoleStore:
    """In-memory role-binding store that counts lookups."""

    def __init__(self, bindings: dict[str, list[str]] | None = None):
        self.bindings = dict(bindings or {})
        self.calls = 0
        self.error: Exception | None = None

    async def fetch_role_names(self, principal_id: str) -> list[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.bindings.get(principal_id, []))


ALICE = AuthContext(principal_id="auth-alice", profile_id="P-alice", department_id="D1")
BOB = AuthContext(principal_id="auth-bob", profile_id="P-bob", department_id="D1")
MIA = AuthContext(principal_id="auth-mia", profile_id="P-mia", department_id="D1")
ADA = AuthContext(principal_id="auth-ada", profile_id="P-ada", department_id="D2")
NOBODY = AuthContext(principal_id="auth-nobody", profile_id="P-nobody")

ROLE_BINDINGS = {
    "auth-alice": ["employee"],
    "auth-bob": ["employee"],
    "auth-mia": ["manager"],
    "auth-ada": ["admin"],
    "auth-nobody": [],
}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def role_store() -> CountingRoleStore:
    return CountingRoleStore(ROLE_BINDINGS)


@pytest.fixture
def resolver(role_store: CountingRoleStore, clock: FakeClock) -> RoleResolver:
    return RoleResolver(role_store, TTLRoleCache(clock=clock), ttl=300)


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry.build(PolicyMatrix.default())


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    """File-backed SQLite database with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'access.sqlite'}")
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


def gate_for(context: AuthContext, resolver: RoleResolver) -> AccessGate:
    async def authenticate() -> AuthContext:
        return context

    return AccessGate(authenticate, resolver)


@pytest.fixture
def ops_for(db: AsyncSession, resolver: RoleResolver, registry: ResourceRegistry):
    """Build ResourceOperations acting as the given caller."""

    def factory(context: AuthContext) -> ResourceOperations:
        return ResourceOperations(db, gate_for(context, resolver), resolver, registry=registry)

    return factory
