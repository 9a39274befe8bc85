"""
Access introspection API routes.

Read-only views over the policy matrix for the calling principal.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from app.features.permissions.dependencies import get_role_resolver, require_permission
from app.features.permissions.policy import Action, Permission, Resource, get_policy
from app.features.permissions.resolver import RoleResolver
from app.features.permissions.schemas import AccessSummary, ModuleAccessResponse, RolesWithPermissionResponse
from app.features.users.context import AuthContext
from app.features.users.dependencies import get_auth_context


router = APIRouter()


@router.get("/me", response_model=AccessSummary)
async def get_my_access(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
):
    """Roles, permissions and modules of the current caller."""
    policy = get_policy()
    roles = await resolver.resolve_roles(context.principal_id)
    permissions = set()
    for role in roles:
        permissions.update(str(permission) for permission in policy.permissions_of(role))
    return AccessSummary(
        principal_id=context.principal_id,
        profile_id=context.profile_id,
        department_id=context.department_id,
        roles=sorted(roles),
        hierarchy_level=max((policy.hierarchy_level(role) for role in roles), default=0),
        permissions=sorted(permissions),
        modules=policy.modules_for(roles),
    )


@router.get("/modules/{module}", response_model=ModuleAccessResponse)
async def check_module_access(
    module: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
):
    """Whether any of the caller's roles may open a module."""
    policy = get_policy()
    roles = await resolver.resolve_roles(context.principal_id)
    return ModuleAccessResponse(
        module=module,
        allowed=any(policy.can_access_module(role, module) for role in roles),
    )


@router.get("/matrix/{resource}/{action}", response_model=RolesWithPermissionResponse)
async def roles_with_permission(
    resource: str,
    action: str,
    _context: Annotated[AuthContext, Depends(require_permission(Resource.ROLES, Action.READ))],
):
    """Roles granting resource:action (auditing aid, requires roles:read)."""
    permission = Permission(Resource.parse(resource), Action.parse(action))
    return RolesWithPermissionResponse(
        permission=str(permission),
        roles=sorted(get_policy().roles_with_permission(permission.resource, permission.action)),
    )
