"""
Static policy matrix for role-based access control.

Single source of truth for:
- The resource and action taxonomy
- Role -> permission assignments and the numeric role hierarchy
- Ownership and department columns per resource (row visibility)
- Module -> allowed roles (navigation gating)

Every lookup is pure and fails closed: unknown roles hold no permissions and
sit at hierarchy level 0. A production deployment may replace the compiled-in
tables with a JSON file (see load_policy_file); the matrix is read-only for
the lifetime of the process once installed.
"""
import json
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, NamedTuple, Optional

from pydantic import BaseModel, Field, ValidationError

from app.core.exceptions import ConfigurationError
from app.utils import get_logger


log = get_logger(__name__)


# ============================================================================
# Taxonomy
# ============================================================================

class Resource(str, Enum):
    """Kinds of business entity subject to access control."""
    CONTACTS = "contacts"
    COMPANIES = "companies"
    LEADS = "leads"
    OPPORTUNITIES = "opportunities"
    TASKS = "tasks"
    ORDERS = "orders"
    QUOTATIONS = "quotations"
    SHIPMENTS = "shipments"
    APPLICATIONS = "applications"
    CANDIDATES = "candidates"
    INTERVIEWS = "interviews"
    USERS = "users"
    ROLES = "roles"
    PERMISSIONS = "permissions"
    DEPARTMENTS = "departments"
    TEAMS = "teams"
    EMPLOYEES = "employees"
    NOTIFICATIONS = "notifications"
    FILES = "files"
    SOPS = "sops"
    PASSWORD_VAULT = "password_vault"
    SUBSCRIPTIONS = "subscriptions"

    @classmethod
    def parse(cls, value: "str | Resource") -> "Resource":
        """Return the Resource named by value or raise ConfigurationError."""
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unknown resource: {value!r}") from None


class Action(str, Enum):
    """Operation kinds. MANAGE implies every other action on the same resource."""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    EXPORT = "export"

    @classmethod
    def parse(cls, value: "str | Action") -> "Action":
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unknown action: {value!r}") from None


class Permission(NamedTuple):
    """A (resource, action) pair. The "resource:action" form is for logs and config files only."""
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"

    @classmethod
    def parse(cls, value: str) -> "Permission":
        resource, sep, action = value.partition(":")
        if not sep:
            raise ConfigurationError(f"Malformed permission {value!r}, expected 'resource:action'")
        return cls(Resource.parse(resource), Action.parse(action))


# Roles that bypass ownership filtering entirely
ADMIN_ROLES: FrozenSet[str] = frozenset({"superadmin", "admin"})

# Roles whose listing is narrowed to their own department
DEPARTMENT_ROLES: FrozenSet[str] = frozenset({"manager", "admin"})


# ============================================================================
# Compiled-in defaults
# ============================================================================

def _grant(resources: Iterable[str], *actions: str) -> List[str]:
    return [f"{resource}:{action}" for resource in resources for action in actions]


_CRM = ["contacts", "companies", "leads", "opportunities"]
_OPS = ["orders", "quotations", "shipments"]
_ATS = ["applications", "candidates", "interviews"]

DEFAULT_ROLE_PERMISSIONS: Dict[str, List[str]] = {
    # Full access to everything
    "superadmin": _grant([resource.value for resource in Resource], "manage"),

    # Full access to business data, read-only on user management
    "admin": [
        *_grant(_CRM + ["tasks"] + _OPS + _ATS, "manage"),
        *_grant(["users", "roles", "permissions", "departments", "teams", "employees"], "read"),
        *_grant(["notifications", "files"], "manage"),
        *_grant(["sops", "password_vault", "subscriptions"], "read"),
    ],

    # Department-level access
    "manager": [
        *_grant(_CRM + ["tasks"] + _OPS, "read", "create", "update"),
        *_grant(_ATS, "read"),
        "notifications:read", "notifications:update",
        "files:read", "files:create",
        "sops:read",
    ],

    # Own records only
    "employee": [
        "contacts:read", "companies:read",
        "leads:read", "leads:create", "leads:update",
        "opportunities:read",
        "tasks:read", "tasks:create", "tasks:update",
        *_grant(_OPS, "read"),
        "applications:read", "applications:create",
        "candidates:read", "candidates:create",
        "interviews:read",
        "notifications:read", "notifications:update",
        "files:read", "files:create",
        "sops:read",
    ],

    # CRM-focused
    "sales_exec": [
        *_grant(_CRM + ["tasks"], "read", "create", "update"),
        "notifications:read", "notifications:update",
        "files:read", "files:create",
    ],

    # Operations-focused
    "client_ops": [
        "contacts:read", "companies:read", "leads:read",
        *_grant(_OPS + ["tasks"], "read", "create", "update"),
        "notifications:read", "notifications:update",
        "files:read", "files:create",
    ],

    "creative": [
        "tasks:read", "tasks:update",
        "files:read", "files:create",
        "notifications:read", "notifications:update",
    ],
}

DEFAULT_ROLE_HIERARCHY: Dict[str, int] = {
    "superadmin": 100,
    "admin": 90,
    "manager": 50,
    "sales_exec": 40,
    "client_ops": 40,
    "employee": 10,
    "creative": 10,
}

DEFAULT_MODULE_ACCESS: Dict[str, List[str]] = {
    "crm": ["superadmin", "admin", "manager", "sales_exec", "employee"],
    "ats": ["superadmin", "admin", "manager", "employee"],
    "ops": ["superadmin", "admin", "manager", "client_ops", "employee"],
    "import_ops": ["superadmin", "admin", "manager", "client_ops"],
    "tasks": ["superadmin", "admin", "manager", "sales_exec", "client_ops", "employee", "creative"],
    "admin": ["superadmin", "admin"],
}

# First column is authoritative; the rest are informational
DEFAULT_OWNERSHIP_COLUMNS: Dict[str, List[str]] = {
    "contacts": ["created_by"],
    "companies": ["created_by"],
    "leads": ["owner_id", "created_by"],
    "opportunities": ["owner_id", "created_by"],
    "tasks": ["created_by"],
    "orders": ["owner_id", "created_by"],
    "quotations": ["created_by"],
    "shipments": ["created_by"],
    "applications": ["candidate_id"],
    "candidates": ["contact_id"],
    "interviews": ["application_id"],
    "users": ["id"],
    "roles": [],
    "permissions": [],
    "departments": [],
    "teams": [],
    "employees": ["profile_id"],
    "notifications": ["user_id"],
    "files": ["created_by"],
    "sops": ["created_by"],
    "password_vault": ["created_by"],
    "subscriptions": ["owner_team_id"],
}

DEFAULT_DEPARTMENT_COLUMNS: Dict[str, List[str]] = {
    "leads": ["department_id"],
    "opportunities": ["department_id"],
    "tasks": ["department_id"],
    "orders": ["department_id"],
    "teams": ["department_id"],
    "employees": ["department_id"],
}


# ============================================================================
# Policy matrix
# ============================================================================

class PolicyMatrix:
    """
    Immutable authorization matrix.

    Built from string tables (the config-file form) and converted once to
    typed lookups; comparisons never go through "resource:action" strings.
    """

    def __init__(
        self,
        role_permissions: Mapping[str, Iterable[str]],
        role_hierarchy: Mapping[str, int],
        module_access: Mapping[str, Iterable[str]],
        ownership_columns: Mapping[str, Iterable[str]],
        department_columns: Mapping[str, Iterable[str]],
    ):
        self._permissions: Dict[str, FrozenSet[Permission]] = {
            role: frozenset(Permission.parse(p) for p in permissions)
            for role, permissions in role_permissions.items()
        }
        self._hierarchy: Dict[str, int] = dict(role_hierarchy)
        self._modules: Dict[str, FrozenSet[str]] = {
            module: frozenset(roles) for module, roles in module_access.items()
        }
        self._ownership: Dict[Resource, tuple] = {
            Resource.parse(resource): tuple(columns) for resource, columns in ownership_columns.items()
        }
        self._department: Dict[Resource, tuple] = {
            Resource.parse(resource): tuple(columns) for resource, columns in department_columns.items()
        }

    @classmethod
    def default(cls) -> "PolicyMatrix":
        return cls(
            DEFAULT_ROLE_PERMISSIONS,
            DEFAULT_ROLE_HIERARCHY,
            DEFAULT_MODULE_ACCESS,
            DEFAULT_OWNERSHIP_COLUMNS,
            DEFAULT_DEPARTMENT_COLUMNS,
        )

    @property
    def roles(self) -> List[str]:
        return sorted(set(self._permissions) | set(self._hierarchy))

    def permissions_of(self, role: str) -> FrozenSet[Permission]:
        return self._permissions.get(role, frozenset())

    def hierarchy_level(self, role: str) -> int:
        return self._hierarchy.get(role, 0)

    def role_has_permission(self, role: str, resource: Resource, action: Action) -> bool:
        """True iff the role holds resource:action or resource:manage."""
        resource, action = Resource.parse(resource), Action.parse(action)
        granted = self.permissions_of(role)
        return (
            Permission(resource, action) in granted
            or Permission(resource, Action.MANAGE) in granted
        )

    def any_role_has_permission(self, roles: Iterable[str], resource: Resource, action: Action) -> bool:
        return any(self.role_has_permission(role, resource, action) for role in roles)

    def role_has_access(self, role: str, other: str) -> bool:
        """True if role sits at or above other in the hierarchy."""
        return self.hierarchy_level(role) >= self.hierarchy_level(other)

    def roles_with_permission(self, resource: Resource, action: Action) -> FrozenSet[str]:
        """Reverse lookup for auditing; not used for request-time decisions."""
        return frozenset(
            role for role in self._permissions if self.role_has_permission(role, resource, action)
        )

    def ownership_column(self, resource: Resource) -> Optional[str]:
        columns = self._ownership.get(Resource.parse(resource), ())
        return columns[0] if columns else None

    def department_column(self, resource: Resource) -> Optional[str]:
        columns = self._department.get(Resource.parse(resource), ())
        return columns[0] if columns else None

    def can_access_module(self, role: str, module: str) -> bool:
        return role in self._modules.get(module, frozenset())

    def modules_for(self, roles: Iterable[str]) -> List[str]:
        roles = set(roles)
        return sorted(module for module, allowed in self._modules.items() if roles & allowed)


class PolicyDocument(BaseModel):
    """JSON form of the matrix. Omitted sections keep the compiled-in defaults."""
    role_permissions: Dict[str, List[str]] = Field(default_factory=lambda: dict(DEFAULT_ROLE_PERMISSIONS))
    role_hierarchy: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_ROLE_HIERARCHY))
    module_access: Dict[str, List[str]] = Field(default_factory=lambda: dict(DEFAULT_MODULE_ACCESS))
    ownership_columns: Dict[str, List[str]] = Field(default_factory=lambda: dict(DEFAULT_OWNERSHIP_COLUMNS))
    department_columns: Dict[str, List[str]] = Field(default_factory=lambda: dict(DEFAULT_DEPARTMENT_COLUMNS))

    def to_matrix(self) -> PolicyMatrix:
        return PolicyMatrix(
            self.role_permissions,
            self.role_hierarchy,
            self.module_access,
            self.ownership_columns,
            self.department_columns,
        )


def load_policy_file(path: str | Path) -> PolicyMatrix:
    """
    Parse a JSON policy file into a PolicyMatrix.

    Raises:
        ConfigurationError: unreadable file, invalid JSON shape, or unknown
            resource/action names.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        document = PolicyDocument.model_validate(raw)
    except (OSError, ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid policy file {path}: {e}") from e
    matrix = document.to_matrix()
    log.info(f"Loaded policy matrix from {path} ({len(matrix.roles)} roles)")
    return matrix


# ============================================================================
# Active matrix
# ============================================================================

_active = PolicyMatrix.default()


def get_policy() -> PolicyMatrix:
    return _active


def install_policy(matrix: PolicyMatrix) -> None:
    """
    Replace the active matrix.

    Callers must clear the role cache afterwards; cached entries do not carry
    a matrix version.
    """
    global _active
    _active = matrix
    log.info(f"Installed policy matrix with roles: {', '.join(matrix.roles)}")


def permissions_of(role: str) -> FrozenSet[Permission]:
    return _active.permissions_of(role)


def hierarchy_level(role: str) -> int:
    return _active.hierarchy_level(role)


def role_has_permission(role: str, resource: Resource, action: Action) -> bool:
    return _active.role_has_permission(role, resource, action)


def role_has_access(role: str, other: str) -> bool:
    return _active.role_has_access(role, other)


def roles_with_permission(resource: Resource, action: Action) -> FrozenSet[str]:
    return _active.roles_with_permission(resource, action)


def ownership_column(resource: Resource) -> Optional[str]:
    return _active.ownership_column(resource)


def department_column(resource: Resource) -> Optional[str]:
    return _active.department_column(resource)


def can_access_module(role: str, module: str) -> bool:
    return _active.can_access_module(role, module)
