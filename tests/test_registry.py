"""Resource schema registry."""

from datetime import datetime, timezone

import pytest

from app.core.exceptions import ConfigurationError, RecordValidationError
from app.features.permissions.policy import (
    DEFAULT_DEPARTMENT_COLUMNS,
    DEFAULT_MODULE_ACCESS,
    DEFAULT_OWNERSHIP_COLUMNS,
    DEFAULT_ROLE_HIERARCHY,
    DEFAULT_ROLE_PERMISSIONS,
    PolicyMatrix,
    Resource,
)
from app.features.records.registry import ResourceRegistry


def test_every_resource_is_registered(registry):
    for resource in Resource:
        assert resource in registry


def test_task_descriptor(registry):
    schema = registry.get("tasks")
    assert schema.resource is Resource.TASKS
    assert schema.primary_key == "id"
    assert schema.ownership_column == "created_by"
    assert schema.department_column == "department_id"
    assert schema.soft_delete_column == "deleted_at"
    assert schema.created_by_column == "created_by"
    assert schema.has_column("title")
    assert not schema.has_column("createdBy")


def test_notification_has_no_soft_delete(registry):
    schema = registry.get(Resource.NOTIFICATIONS)
    assert schema.ownership_column == "user_id"
    assert schema.soft_delete_column is None
    assert schema.department_column is None


def test_catalog_resources_have_no_ownership(registry):
    assert registry.get("roles").ownership_column is None
    assert registry.get("users").ownership_column == "id"


def test_unknown_resource_is_rejected(registry):
    with pytest.raises(ConfigurationError):
        registry.get("invoices")


def test_missing_ownership_column_fails_at_build():
    ownership = dict(DEFAULT_OWNERSHIP_COLUMNS, tasks=["assignee_id"])
    policy = PolicyMatrix(
        DEFAULT_ROLE_PERMISSIONS,
        DEFAULT_ROLE_HIERARCHY,
        DEFAULT_MODULE_ACCESS,
        ownership,
        DEFAULT_DEPARTMENT_COLUMNS,
    )
    with pytest.raises(ConfigurationError, match="assignee_id"):
        ResourceRegistry.build(policy)


def test_column_specs_carry_type_and_nullability(registry):
    schema = registry.get("tasks")
    assert schema.specs["due_date"].python_type is datetime
    assert schema.specs["due_date"].nullable
    assert not schema.specs["title"].nullable
    assert schema.required_columns == frozenset({"title"})


def test_coerce_converts_and_rejects(registry):
    schema = registry.get("tasks")
    assert schema.coerce("is_starred", "false") is False
    assert schema.coerce("due_date", None) is None
    assert schema.coerce("due_date", "2026-11-01T09:00:00Z") == datetime(2026, 11, 1, 9, tzinfo=timezone.utc)
    with pytest.raises(RecordValidationError):
        schema.coerce("position", "third")
