"""HTTP surface: records and permission introspection endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.database.engine import get_db
from app.features.users.dependencies import get_auth_context
from app.features.workspace.models import Task
from app.main import app
from tests.conftest import ADA, ALICE, BOB, MIA, NOBODY


class Caller:
    """Mutable holder for the identity the overridden auth dependency returns."""

    def __init__(self):
        self.context = ALICE

    async def __call__(self):
        return self.context


@pytest.fixture
async def client(session_factory, resolver, registry):
    caller = Caller()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_context] = caller
    app.state.role_resolver = resolver
    app.state.resource_registry = registry

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        http.caller = caller
        yield http

    app.dependency_overrides.clear()


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_task_lifecycle(client):
    response = await client.post("/records/tasks", json={"title": "Write report", "colour": "red"})
    assert response.status_code == 201
    task = response.json()
    assert task["created_by"] == ALICE.profile_id
    assert task["department_id"] == ALICE.department_id
    assert "colour" not in task

    response = await client.patch(f"/records/tasks/{task['id']}", json={"status": "done", "created_by": "P-x"})
    assert response.status_code == 200
    assert response.json()["status"] == "done"
    assert response.json()["created_by"] == ALICE.profile_id

    response = await client.get("/records/tasks", params={"status": "done"})
    assert [row["id"] for row in response.json()] == [task["id"]]

    client.caller.context = BOB
    assert (await client.get(f"/records/tasks/{task['id']}")).status_code == 404
    assert (await client.patch(f"/records/tasks/{task['id']}", json={"status": "x"})).status_code == 404

    client.caller.context = ADA
    assert (await client.delete(f"/records/tasks/{task['id']}")).status_code == 204
    assert (await client.get(f"/records/tasks/{task['id']}")).status_code == 404


async def test_listing_applies_order_limit_and_offset(client, db):
    for position, title in enumerate(["c", "a", "b"]):
        db.add(Task(title=title, created_by=ALICE.profile_id, position=position))
    await db.commit()

    response = await client.get("/records/tasks", params={"order_by": "title", "limit": 2, "offset": 1})
    assert response.status_code == 200
    assert [row["title"] for row in response.json()] == ["b", "c"]


async def test_forbidden_action_returns_403(client):
    response = await client.delete("/records/tasks/anything")
    assert response.status_code == 403
    assert response.json() == {"detail": "Permission denied: requires tasks:delete"}


async def test_unknown_resource_returns_400(client):
    response = await client.get("/records/invoices")
    assert response.status_code == 400


async def test_soft_delete_without_column_returns_400(client, db):
    client.caller.context = ADA
    created = await client.post("/records/notifications", json={"user_id": ADA.profile_id, "title": "Hi"})
    assert created.status_code == 201
    notification_id = created.json()["id"]

    assert (await client.delete(f"/records/notifications/{notification_id}")).status_code == 400
    response = await client.delete(f"/records/notifications/{notification_id}", params={"hard_delete": "true"})
    assert response.status_code == 204


async def test_delete_of_missing_row_returns_404(client):
    client.caller.context = ADA
    assert (await client.delete("/records/tasks/missing")).status_code == 404


async def test_missing_token_returns_401(client):
    del app.dependency_overrides[get_auth_context]
    response = await client.get("/records/tasks")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_my_access_summary(client):
    client.caller.context = MIA
    body = (await client.get("/permissions/me")).json()
    assert body["roles"] == ["manager"]
    assert body["hierarchy_level"] == 50
    assert "tasks:update" in body["permissions"]
    assert "tasks:delete" not in body["permissions"]
    assert body["modules"] == ["ats", "crm", "import_ops", "ops", "tasks"]


async def test_module_access(client):
    assert (await client.get("/permissions/modules/crm")).json() == {"module": "crm", "allowed": True}
    assert (await client.get("/permissions/modules/admin")).json() == {"module": "admin", "allowed": False}

    client.caller.context = NOBODY
    assert (await client.get("/permissions/modules/tasks")).json()["allowed"] is False


async def test_permission_matrix_requires_roles_read(client):
    assert (await client.get("/permissions/matrix/tasks/delete")).status_code == 403

    client.caller.context = ADA
    response = await client.get("/permissions/matrix/tasks/delete")
    assert response.status_code == 200
    assert response.json() == {"permission": "tasks:delete", "roles": ["admin", "superadmin"]}


async def test_datetime_columns_round_trip_over_http(client):
    created = await client.post("/records/tasks", json={"title": "Dated", "due_date": "2026-11-01T09:00:00Z"})
    assert created.status_code == 201
    assert created.json()["due_date"].startswith("2026-11-01T09:00:00")

    patched = await client.patch(f"/records/tasks/{created.json()['id']}", json={"due_date": "2026-12-01T10:15:00Z"})
    assert patched.status_code == 200
    assert patched.json()["due_date"].startswith("2026-12-01T10:15:00")


async def test_boolean_filter_from_query_string(client):
    await client.post("/records/tasks", json={"title": "Starred", "is_starred": True})
    await client.post("/records/tasks", json={"title": "Plain"})

    response = await client.get("/records/tasks", params={"is_starred": "true"})
    assert response.status_code == 200
    assert [row["title"] for row in response.json()] == ["Starred"]


async def test_invalid_record_values_return_400(client):
    assert (await client.post("/records/tasks", json={})).status_code == 400
    response = await client.post("/records/tasks", json={"title": "T", "due_date": "soon"})
    assert response.status_code == 400
    assert "due_date" in response.json()["detail"]
    assert (await client.get("/records/tasks", params={"position": "first"})).status_code == 400
