"""
Per-resource schema descriptors.

Each Resource is bound to one SQLAlchemy table. The descriptor records which
columns exist, their Python types and nullability, and which of them carry
access semantics (ownership, department, soft-delete marker, created-by), so
the operations never probe rows or tables for attributes at request time.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Type

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import Column, Table

from app.core.database.base import Base
from app.core.exceptions import ConfigurationError, RecordValidationError
from app.features.permissions.policy import PolicyMatrix, Resource, get_policy


SOFT_DELETE_COLUMN = "deleted_at"
CREATED_BY_COLUMN = "created_by"


@dataclass(frozen=True)
class ColumnSpec:
    """
    Type and nullability of one column.

    Values from JSON bodies and query strings are converted with a pydantic
    adapter for the column's Python type before they reach a statement.
    """
    name: str
    python_type: Any
    nullable: bool
    required: bool
    adapter: TypeAdapter = field(repr=False, compare=False)

    @classmethod
    def from_column(cls, column: Column) -> "ColumnSpec":
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            python_type = Any
        nullable = bool(column.nullable)
        has_default = column.default is not None or column.server_default is not None
        autoincrement = column.primary_key and python_type is int and column.autoincrement in (True, "auto")
        return cls(
            name=column.name,
            python_type=python_type,
            nullable=nullable,
            required=not nullable and not has_default and not autoincrement,
            adapter=TypeAdapter(Optional[python_type] if nullable else python_type),
        )

    def coerce(self, value: Any) -> Any:
        """Return value converted to the column type or raise RecordValidationError."""
        try:
            return self.adapter.validate_python(value)
        except ValidationError as e:
            reason = e.errors()[0]["msg"] if e.errors() else str(e)
            raise RecordValidationError(f"Invalid value for {self.name}: {reason}") from e


@dataclass(frozen=True)
class ResourceSchema:
    resource: Resource
    table: Table
    columns: FrozenSet[str]
    primary_key: str
    ownership_column: Optional[str] = None
    department_column: Optional[str] = None
    soft_delete_column: Optional[str] = None
    created_by_column: Optional[str] = None
    specs: Mapping[str, ColumnSpec] = field(default_factory=dict, compare=False)

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def column(self, name: str):
        return self.table.c[name]

    def coerce(self, name: str, value: Any) -> Any:
        spec = self.specs.get(name)
        return spec.coerce(value) if spec is not None else value

    @property
    def required_columns(self) -> FrozenSet[str]:
        return frozenset(name for name, spec in self.specs.items() if spec.required)


def _model_map() -> Dict[Resource, Type[Base]]:
    from app.features.users.models import Profile
    from app.features.permissions.models import Role, PermissionEntry
    from app.features.hr.models import Department, Team, Employee
    from app.features.crm.models import Contact, Company, Lead, Opportunity
    from app.features.ats.models import Application, Candidate, Interview
    from app.features.ops.models import Order, Quotation, Shipment, Subscription
    from app.features.workspace.models import Task, Notification, StoredFile, Sop, VaultEntry

    return {
        Resource.CONTACTS: Contact,
        Resource.COMPANIES: Company,
        Resource.LEADS: Lead,
        Resource.OPPORTUNITIES: Opportunity,
        Resource.TASKS: Task,
        Resource.ORDERS: Order,
        Resource.QUOTATIONS: Quotation,
        Resource.SHIPMENTS: Shipment,
        Resource.APPLICATIONS: Application,
        Resource.CANDIDATES: Candidate,
        Resource.INTERVIEWS: Interview,
        Resource.USERS: Profile,
        Resource.ROLES: Role,
        Resource.PERMISSIONS: PermissionEntry,
        Resource.DEPARTMENTS: Department,
        Resource.TEAMS: Team,
        Resource.EMPLOYEES: Employee,
        Resource.NOTIFICATIONS: Notification,
        Resource.FILES: StoredFile,
        Resource.SOPS: Sop,
        Resource.PASSWORD_VAULT: VaultEntry,
        Resource.SUBSCRIPTIONS: Subscription,
    }


def describe(resource: Resource, table: Table, policy: PolicyMatrix) -> ResourceSchema:
    """
    Build the descriptor for one resource.

    Raises:
        ConfigurationError: the matrix names a column the table does not have,
            or the table has no single-column primary key
    """
    columns = frozenset(table.c.keys())
    pk = [column.name for column in table.primary_key.columns]
    if len(pk) != 1:
        raise ConfigurationError(f"Resource {resource.value} needs a single-column primary key")

    ownership = policy.ownership_column(resource)
    department = policy.department_column(resource)
    for kind, name in (("ownership", ownership), ("department", department)):
        if name is not None and name not in columns:
            raise ConfigurationError(
                f"{kind.capitalize()} column {name!r} for {resource.value} does not exist on table {table.name}"
            )

    return ResourceSchema(
        resource=resource,
        table=table,
        columns=columns,
        primary_key=pk[0],
        ownership_column=ownership,
        department_column=department,
        soft_delete_column=SOFT_DELETE_COLUMN if SOFT_DELETE_COLUMN in columns else None,
        created_by_column=CREATED_BY_COLUMN if CREATED_BY_COLUMN in columns else None,
        specs={column.name: ColumnSpec.from_column(column) for column in table.columns},
    )


class ResourceRegistry:
    """Lookup table Resource -> ResourceSchema, built once at startup."""

    def __init__(self, schemas: Mapping[Resource, ResourceSchema]):
        self._schemas = dict(schemas)

    @classmethod
    def build(
        cls,
        policy: Optional[PolicyMatrix] = None,
        tables: Optional[Mapping[Resource, Table]] = None,
    ) -> "ResourceRegistry":
        policy = policy or get_policy()
        if tables is None:
            tables = {resource: model.__table__ for resource, model in _model_map().items()}
        return cls({resource: describe(resource, table, policy) for resource, table in tables.items()})

    def __contains__(self, resource: object) -> bool:
        return resource in self._schemas

    def get(self, resource: Resource | str) -> ResourceSchema:
        resource = Resource.parse(resource)
        schema = self._schemas.get(resource)
        if schema is None:
            raise ConfigurationError(f"No table registered for resource {resource.value}")
        return schema


_registry: Optional[ResourceRegistry] = None


def get_registry() -> ResourceRegistry:
    global _registry
    if _registry is None:
        _registry = ResourceRegistry.build()
    return _registry


def reset_registry() -> None:
    """Forget the cached registry (after installing a new policy matrix)."""
    global _registry
    _registry = None
