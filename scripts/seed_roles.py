"""
Seed script to populate the role catalog and manage role bindings.

Run this script after database initialization to create:
- One role row per role of the policy matrix
- One permission catalog row per resource:action pair

It can also bind or unbind a principal to a role. Running servers pick up
binding changes once their cached entry for the principal expires.

Usage:
    uv run python -m scripts.seed_roles
    uv run python -m scripts.seed_roles --assign <principal_id> admin
    uv run python -m scripts.seed_roles --revoke <principal_id> admin
"""
import argparse
import asyncio
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config
from app.core.database.engine import get_db, init_db
from app.features.permissions.models import PermissionEntry, Role, UserRoleBinding
from app.features.permissions.policy import (
    Action,
    Permission,
    PolicyMatrix,
    Resource,
    get_policy,
    install_policy,
    load_policy_file,
)
from app.utils import get_logger


log = get_logger(__name__)


ROLE_DESCRIPTIONS = {
    "superadmin": "Full access to everything",
    "admin": "Full access to business data, read-only user management",
    "manager": "Department-level access",
    "employee": "Own records only",
    "sales_exec": "CRM-focused access",
    "client_ops": "Operations-focused access",
    "creative": "Tasks and files only",
}


async def seed_permission_catalog(db: AsyncSession) -> int:
    """Create a catalog row for every resource:action pair that is missing."""
    result = await db.execute(select(PermissionEntry.name))
    existing = set(result.scalars().all())
    created = 0
    for resource in Resource:
        for action in Action:
            name = str(Permission(resource, action))
            if name in existing:
                continue
            db.add(PermissionEntry(
                name=name,
                resource=resource.value,
                action=action.value,
                description=f"{action.value.capitalize()} {resource.value.replace('_', ' ')}",
            ))
            created += 1
    await db.commit()
    log.info(f"Created {created} permission catalog entries")
    return created


async def seed_roles(db: AsyncSession, policy: PolicyMatrix) -> int:
    """Create a role row for every role of the matrix that is missing."""
    created = 0
    for role_name in policy.roles:
        result = await db.execute(select(Role).where(Role.name == role_name))
        if result.scalars().first():
            log.debug(f"Role '{role_name}' already exists, skipping")
            continue
        db.add(Role(
            name=role_name,
            description=ROLE_DESCRIPTIONS.get(role_name),
            is_system=True,
        ))
        created += 1
        log.info(f"Created role '{role_name}' (level {policy.hierarchy_level(role_name)})")
    await db.commit()
    return created


async def assign_role(db: AsyncSession, principal_id: str, role_name: str) -> bool:
    """Bind principal to role. Returns False if the binding already existed."""
    role = (await db.execute(select(Role).where(Role.name == role_name))).scalars().first()
    if role is None:
        raise SystemExit(f"Role '{role_name}' does not exist; run the seed first")

    existing = await db.execute(
        select(UserRoleBinding).where(
            UserRoleBinding.user_id == principal_id,
            UserRoleBinding.role_id == role.id,
        )
    )
    if existing.scalars().first():
        log.info(f"{principal_id} already holds '{role_name}'")
        return False

    db.add(UserRoleBinding(user_id=principal_id, role_id=role.id))
    await db.commit()
    log.info(f"Assigned '{role_name}' to {principal_id}")
    return True


async def revoke_role(db: AsyncSession, principal_id: str, role_name: str) -> bool:
    """Remove a binding. Returns False if there was none."""
    role = (await db.execute(select(Role).where(Role.name == role_name))).scalars().first()
    if role is None:
        return False
    result = await db.execute(
        delete(UserRoleBinding).where(
            UserRoleBinding.user_id == principal_id,
            UserRoleBinding.role_id == role.id,
        )
    )
    await db.commit()
    revoked = result.rowcount > 0
    log.info(f"Revoked '{role_name}' from {principal_id}" if revoked else f"{principal_id} did not hold '{role_name}'")
    return revoked


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed roles and manage role bindings")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--assign", nargs=2, metavar=("PRINCIPAL_ID", "ROLE"))
    group.add_argument("--revoke", nargs=2, metavar=("PRINCIPAL_ID", "ROLE"))
    return parser.parse_args(argv)


async def main(argv=None):
    """Main function to seed roles and apply binding changes."""
    args = parse_args(argv)

    if config.POLICY_FILE:
        install_policy(load_policy_file(config.POLICY_FILE))

    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            await seed_permission_catalog(db)
            await seed_roles(db, get_policy())
            if args.assign:
                await assign_role(db, *args.assign)
            if args.revoke:
                await revoke_role(db, *args.revoke)
        except Exception as e:
            log.error(f"Error seeding roles: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
