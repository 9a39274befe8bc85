"""
Generic, permission-scoped CRUD over every registered resource.

Each operation runs inside the authorization gate and then narrows the rows it
touches with the same visibility rules for every resource:

- soft-deleted rows are never read (get, find_one, update)
- non-admin callers only reach rows whose ownership column holds their profile id
- non-admin managers listing a resource additionally only see their department

Usage:
    ops = ResourceOperations(db, gate, resolver)
    tasks = await ops.get("tasks", filters={"status": "active"}, order_by="created_at", limit=10)
    task = await ops.find_one("tasks", task_id)
    task = await ops.create("tasks", {"title": "New Task"})
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete as sql_delete, insert, select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DependencyError, RecordValidationError, UnsupportedOperationError
from app.features.permissions.dependencies import AccessGate
from app.features.permissions.policy import ADMIN_ROLES, DEPARTMENT_ROLES, Action, Permission, Resource
from app.features.permissions.resolver import RoleResolver
from app.features.records.registry import ResourceRegistry, ResourceSchema, get_registry
from app.features.users.context import AuthContext
from app.utils import get_logger


log = get_logger(__name__)

Row = Dict[str, Any]


@dataclass(frozen=True)
class CallerScope:
    """Role-derived visibility flags, computed once per operation."""
    roles: tuple
    is_admin: bool
    is_department_scoped: bool


class ResourceOperations:
    """
    get / find_one / create / update / delete for any Resource.

    Args:
        db: Session the statements run on
        gate: Authorization gate bound to the caller
        resolver: Role resolver (cache shared with the gate)
        registry: Resource schema descriptors (defaults to the process registry)
    """

    def __init__(
        self,
        db: AsyncSession,
        gate: AccessGate,
        resolver: RoleResolver,
        registry: Optional[ResourceRegistry] = None,
    ):
        self.db = db
        self.gate = gate
        self.resolver = resolver
        self.registry = registry or get_registry()

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    async def _scope(self, context: AuthContext) -> CallerScope:
        roles = set(await self.resolver.resolve_roles(context.principal_id))
        is_admin = bool(roles & ADMIN_ROLES)
        return CallerScope(
            roles=tuple(sorted(roles)),
            is_admin=is_admin,
            is_department_scoped=bool(roles & DEPARTMENT_ROLES) and not is_admin,
        )

    def _ownership_filter(self, schema: ResourceSchema, context: AuthContext, scope: CallerScope) -> list:
        if schema.ownership_column is None or scope.is_admin:
            return []
        return [schema.column(schema.ownership_column) == context.profile_id]

    def _soft_delete_filter(self, schema: ResourceSchema) -> list:
        if schema.soft_delete_column is None:
            return []
        return [schema.column(schema.soft_delete_column).is_(None)]

    def _row_filter(self, schema: ResourceSchema, record_id: str, context: AuthContext, scope: CallerScope) -> list:
        """Primary key + soft-delete exclusion + ownership. Department scoping is listing-only."""
        return [
            schema.column(schema.primary_key) == record_id,
            *self._soft_delete_filter(schema),
            *self._ownership_filter(schema, context, scope),
        ]

    def _known_columns(self, schema: ResourceSchema, data: Mapping[str, Any], drop: tuple = ()) -> Dict[str, Any]:
        """Payload values for real columns, converted to the column types. Keys in drop are discarded."""
        unknown = [key for key in data if not schema.has_column(key)]
        if unknown:
            log.debug(f"Dropping unknown columns for {schema.resource.value}: {unknown}")
        return {
            key: schema.coerce(key, value)
            for key, value in data.items()
            if schema.has_column(key) and key not in drop
        }

    def _protected_columns(self, schema: ResourceSchema) -> tuple:
        """Columns update never writes. The soft-delete marker is only set by delete."""
        return tuple(
            name for name in (
                schema.primary_key,
                schema.ownership_column,
                schema.created_by_column,
                schema.soft_delete_column,
            )
            if name
        )

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    async def _execute(self, statement):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            await self.db.rollback()
            log.warning(f"Statement failed: {e}")
            raise DependencyError(f"Storage operation failed: {e.__class__.__name__}") from e

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log.warning(f"Commit failed: {e}")
            raise DependencyError(f"Storage commit failed: {e.__class__.__name__}") from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def get(
        self,
        resource: Resource | str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Row]:
        """
        List the rows of a resource visible to the caller.

        Caller filters are equality matches, converted to the column type;
        unknown columns and None values are ignored. An empty list is not an
        error.

        Raises:
            RecordValidationError: a filter value does not fit its column
        """
        schema = self.registry.get(resource)

        async def body(context: AuthContext) -> List[Row]:
            scope = await self._scope(context)
            conditions = [
                *self._soft_delete_filter(schema),
                *self._ownership_filter(schema, context, scope),
            ]

            if schema.department_column and context.department_id and scope.is_department_scoped:
                conditions.append(schema.column(schema.department_column) == context.department_id)

            for key, value in (filters or {}).items():
                if value is None:
                    continue
                if not schema.has_column(key):
                    log.debug(f"Ignoring filter on unknown column {schema.resource.value}.{key}")
                    continue
                conditions.append(schema.column(key) == schema.coerce(key, value))

            stmt = select(schema.table).where(*conditions)
            if order_by and schema.has_column(order_by):
                stmt = stmt.order_by(schema.column(order_by))
            if limit is not None:
                stmt = stmt.limit(limit)
            if offset is not None:
                stmt = stmt.offset(offset)

            result = await self._execute(stmt)
            return [dict(row) for row in result.mappings().all()]

        return await self.gate.run(Permission(schema.resource, Action.READ), body)

    async def find_one(self, resource: Resource | str, record_id: str) -> Optional[Row]:
        """Return the row with this id, or None if it is missing or not visible to the caller."""
        schema = self.registry.get(resource)

        async def body(context: AuthContext) -> Optional[Row]:
            scope = await self._scope(context)
            stmt = select(schema.table).where(*self._row_filter(schema, record_id, context, scope)).limit(1)
            result = await self._execute(stmt)
            row = result.mappings().first()
            return dict(row) if row is not None else None

        return await self.gate.run(Permission(schema.resource, Action.READ), body)

    async def create(self, resource: Resource | str, data: Mapping[str, Any]) -> Row:
        """
        Insert a row, filling ownership, created-by and department columns from
        the caller when the payload leaves them empty.

        Raises:
            RecordValidationError: a value does not fit its column, or a
                required column is still empty
        """
        schema = self.registry.get(resource)

        async def body(context: AuthContext) -> Row:
            values = self._known_columns(schema, data)

            owner = schema.ownership_column
            if owner and owner != schema.primary_key and values.get(owner) is None:
                values[owner] = context.profile_id
            if schema.created_by_column and values.get(schema.created_by_column) is None:
                values[schema.created_by_column] = context.profile_id
            department = schema.department_column
            if department and context.department_id and values.get(department) is None:
                values[department] = context.department_id

            missing = sorted(name for name in schema.required_columns if values.get(name) is None)
            if missing:
                raise RecordValidationError(f"Missing required columns for {schema.resource.value}: {', '.join(missing)}")

            result = await self._execute(insert(schema.table).values(**values).returning(schema.table))
            row = dict(result.mappings().one())
            await self._commit()
            log.info(f"Created {schema.resource.value} {row.get(schema.primary_key)} by {context.profile_id}")
            return row

        return await self.gate.run(Permission(schema.resource, Action.CREATE), body)

    async def update(self, resource: Resource | str, record_id: str, data: Mapping[str, Any]) -> Optional[Row]:
        """
        Update a visible row and return it, or None if it is missing or not
        visible. The primary key, ownership, created-by and soft-delete
        columns are never changed here.
        """
        schema = self.registry.get(resource)

        async def body(context: AuthContext) -> Optional[Row]:
            scope = await self._scope(context)
            conditions = self._row_filter(schema, record_id, context, scope)

            existing = (await self._execute(select(schema.table).where(*conditions).limit(1))).mappings().first()
            if existing is None:
                return None

            values = self._known_columns(schema, data, drop=self._protected_columns(schema))
            if not values:
                return dict(existing)

            stmt = sql_update(schema.table).where(*conditions).values(**values).returning(schema.table)
            row = (await self._execute(stmt)).mappings().first()
            await self._commit()
            if row is None:
                return None
            log.info(f"Updated {schema.resource.value} {record_id} by {context.profile_id}")
            return dict(row)

        return await self.gate.run(Permission(schema.resource, Action.UPDATE), body)

    async def delete(self, resource: Resource | str, record_id: str, hard_delete: bool = False) -> bool:
        """
        Soft delete (stamp the soft-delete column) or, with hard_delete,
        physically remove a row the caller owns or may administer.

        Returns:
            True if a row was affected, False if none matched

        Raises:
            UnsupportedOperationError: soft delete on a resource without a
                soft-delete column
        """
        schema = self.registry.get(resource)

        async def body(context: AuthContext) -> bool:
            scope = await self._scope(context)
            conditions = [
                schema.column(schema.primary_key) == record_id,
                *self._ownership_filter(schema, context, scope),
            ]

            if hard_delete:
                stmt = sql_delete(schema.table).where(*conditions)
            elif schema.soft_delete_column:
                stmt = (
                    sql_update(schema.table)
                    .where(*conditions)
                    .values({schema.soft_delete_column: datetime.now(timezone.utc)})
                )
            else:
                raise UnsupportedOperationError(
                    f"Resource {schema.resource.value} does not support soft delete; use hard_delete"
                )

            result = await self._execute(stmt)
            await self._commit()
            deleted = result.rowcount > 0
            log.info(
                f"{'Hard' if hard_delete else 'Soft'} delete of {schema.resource.value} {record_id} "
                f"by {context.profile_id}: {'ok' if deleted else 'no match'}"
            )
            return deleted

        return await self.gate.run(Permission(schema.resource, Action.DELETE), body)
