"""Authorization gate."""

import pytest

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.features.permissions.dependencies import AccessGate
from app.features.permissions.policy import Action, Permission, Resource
from app.features.users.context import AuthContext
from tests.conftest import ADA, ALICE, NOBODY, gate_for


TASKS_READ = Permission(Resource.TASKS, Action.READ)
TASKS_DELETE = Permission(Resource.TASKS, Action.DELETE)


async def test_granted_body_runs_once_with_caller_context(resolver):
    seen = []

    async def body(context):
        seen.append(context)
        return "done"

    assert await gate_for(ALICE, resolver).run(TASKS_READ, body) == "done"
    assert len(seen) == 1
    assert seen[0] == ALICE
    assert seen[0] is not ALICE


async def test_denied_body_never_runs(resolver):
    calls = []

    async def body(context):
        calls.append(context)

    with pytest.raises(AuthorizationError) as exc_info:
        await gate_for(ALICE, resolver).run(TASKS_DELETE, body)

    assert calls == []
    assert "tasks:delete" in exc_info.value.message


async def test_manage_grants_delete(resolver):
    async def body(context):
        return context.profile_id

    assert await gate_for(ADA, resolver).run(TASKS_DELETE, body) == ADA.profile_id


async def test_principal_without_roles_is_denied(resolver, role_store):
    async def body(context):
        raise AssertionError("body must not run")

    with pytest.raises(AuthorizationError):
        await gate_for(NOBODY, resolver).run(TASKS_READ, body)
    assert role_store.calls == 1


async def test_unknown_role_is_denied(resolver, role_store):
    role_store.bindings["auth-ghost"] = ["wizard"]
    ghost = AuthContext(principal_id="auth-ghost", profile_id="P-ghost")

    async def body(context):
        raise AssertionError("body must not run")

    with pytest.raises(AuthorizationError):
        await gate_for(ghost, resolver).run(TASKS_READ, body)


async def test_authentication_failure_skips_role_lookup(resolver, role_store):
    async def authenticate():
        raise AuthenticationError("Missing bearer token")

    async def body(context):
        raise AssertionError("body must not run")

    with pytest.raises(AuthenticationError):
        await AccessGate(authenticate, resolver).run(TASKS_READ, body)
    assert role_store.calls == 0
