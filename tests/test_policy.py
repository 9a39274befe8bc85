"""Policy matrix lookups."""

import json

import pytest

from app.core.exceptions import ConfigurationError
from app.features.permissions import policy as policy_module
from app.features.permissions.policy import (
    Action,
    Permission,
    PolicyMatrix,
    Resource,
    load_policy_file,
)


@pytest.fixture
def matrix() -> PolicyMatrix:
    return PolicyMatrix.default()


@pytest.mark.parametrize("role", ["", "intern", "ADMIN", "root"])
def test_unknown_role_holds_no_permission(matrix, role):
    assert matrix.permissions_of(role) == frozenset()
    assert matrix.hierarchy_level(role) == 0
    assert not any(
        matrix.role_has_permission(role, resource, action)
        for resource in Resource
        for action in Action
    )


def test_no_roles_grants_nothing(matrix):
    assert not matrix.any_role_has_permission([], Resource.TASKS, Action.READ)


def test_manage_implies_every_action(matrix):
    for role in matrix.roles:
        for permission in matrix.permissions_of(role):
            if permission.action is Action.MANAGE:
                for action in Action:
                    assert matrix.role_has_permission(role, permission.resource, action)


def test_superadmin_manages_every_resource(matrix):
    for resource in Resource:
        assert matrix.role_has_permission("superadmin", resource, Action.DELETE)
        assert matrix.role_has_permission("superadmin", resource, Action.EXPORT)


def test_explicit_grants(matrix):
    assert matrix.role_has_permission("employee", Resource.TASKS, Action.CREATE)
    assert not matrix.role_has_permission("employee", Resource.TASKS, Action.DELETE)
    assert matrix.role_has_permission("admin", Resource.USERS, Action.READ)
    assert not matrix.role_has_permission("admin", Resource.USERS, Action.UPDATE)
    assert matrix.role_has_permission("creative", Resource.TASKS, Action.UPDATE)
    assert not matrix.role_has_permission("creative", Resource.TASKS, Action.CREATE)


def test_string_arguments_match_enum_arguments(matrix):
    assert matrix.role_has_permission("manager", "leads", "update")
    assert matrix.ownership_column("leads") == "owner_id"


def test_hierarchy_is_reflexive_and_monotonic(matrix):
    for role in matrix.roles:
        assert matrix.role_has_access(role, role)
    assert matrix.role_has_access("admin", "manager")
    assert not matrix.role_has_access("manager", "admin")
    assert matrix.role_has_access("sales_exec", "client_ops")
    assert matrix.role_has_access("client_ops", "sales_exec")
    assert matrix.role_has_access("employee", "nonexistent")


def test_roles_with_permission(matrix):
    assert matrix.roles_with_permission(Resource.SOPS, Action.READ) == {
        "superadmin", "admin", "manager", "employee"
    }
    assert matrix.roles_with_permission(Resource.ROLES, Action.UPDATE) == {"superadmin"}


def test_ownership_and_department_columns(matrix):
    assert matrix.ownership_column(Resource.TASKS) == "created_by"
    assert matrix.ownership_column(Resource.ORDERS) == "owner_id"
    assert matrix.ownership_column(Resource.ROLES) is None
    assert matrix.department_column(Resource.TASKS) == "department_id"
    assert matrix.department_column(Resource.CONTACTS) is None


def test_module_access(matrix):
    assert matrix.can_access_module("creative", "tasks")
    assert not matrix.can_access_module("creative", "crm")
    assert not matrix.can_access_module("admin", "unknown_module")
    assert matrix.modules_for(["client_ops"]) == ["import_ops", "ops", "tasks"]


def test_permission_string_form():
    permission = Permission(Resource.PASSWORD_VAULT, Action.READ)
    assert str(permission) == "password_vault:read"
    assert Permission.parse("password_vault:read") == permission


@pytest.mark.parametrize("value", ["tasks", "tasks:fly", "widgets:read"])
def test_permission_parse_rejects_bad_input(value):
    with pytest.raises(ConfigurationError):
        Permission.parse(value)


def test_unknown_resource_fails_loudly(matrix):
    with pytest.raises(ConfigurationError):
        Resource.parse("widgets")
    with pytest.raises(ConfigurationError):
        matrix.ownership_column("widgets")


def test_load_policy_file_replaces_sections(tmp_path):
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({
        "role_permissions": {"auditor": ["tasks:read", "orders:export"]},
        "role_hierarchy": {"auditor": 30},
    }))

    matrix = load_policy_file(path)

    assert matrix.role_has_permission("auditor", Resource.ORDERS, Action.EXPORT)
    assert not matrix.role_has_permission("admin", Resource.TASKS, Action.READ)
    assert matrix.hierarchy_level("auditor") == 30
    # Sections left out keep the compiled-in defaults
    assert matrix.ownership_column(Resource.TASKS) == "created_by"


@pytest.mark.parametrize("content", [
    "not json",
    json.dumps({"role_permissions": {"auditor": ["widgets:read"]}}),
    json.dumps({"ownership_columns": {"widgets": ["created_by"]}}),
    json.dumps({"role_hierarchy": {"auditor": "high"}}),
])
def test_load_policy_file_rejects_invalid_content(tmp_path, content):
    path = tmp_path / "policy.json"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_policy_file(path)


def test_install_policy_switches_module_functions(monkeypatch):
    monkeypatch.setattr(policy_module, "_active", policy_module.get_policy())
    custom = PolicyMatrix({"viewer": ["tasks:read"]}, {"viewer": 5}, {}, {}, {})

    policy_module.install_policy(custom)

    assert policy_module.role_has_permission("viewer", Resource.TASKS, Action.READ)
    assert not policy_module.role_has_permission("admin", Resource.TASKS, Action.READ)
    assert policy_module.hierarchy_level("viewer") == 5
