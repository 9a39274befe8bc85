"""
Authorization gate and FastAPI dependencies for route protection.

The gate checks a static (resource, action) requirement against the caller's
resolved roles before running an operation body. It never builds row filters;
ownership and department scoping belong to the resource operations.
"""
from typing import Annotated, Awaitable, Callable, Optional, TypeVar
from fastapi import Depends, Request

from app.core.exceptions import AuthorizationError
from app.features.permissions.policy import Action, Permission, PolicyMatrix, Resource, get_policy
from app.features.permissions.resolver import RoleResolver
from app.features.users.context import AuthContext
from app.features.users.dependencies import get_auth_context
from app.utils import get_logger


log = get_logger(__name__)

T = TypeVar("T")

Authenticator = Callable[[], Awaitable[AuthContext]]


class AccessGate:
    """
    Runs operation bodies on behalf of an authenticated caller.

    Args:
        authenticate: Yields the caller's AuthContext or raises AuthenticationError
        resolver: Process-wide role resolver
        policy: Matrix to evaluate against (defaults to the active matrix)
    """

    def __init__(self, authenticate: Authenticator, resolver: RoleResolver, policy: Optional[PolicyMatrix] = None):
        self._authenticate = authenticate
        self._resolver = resolver
        self._policy = policy

    @property
    def policy(self) -> PolicyMatrix:
        return self._policy or get_policy()

    async def run(self, requirement: Permission, body: Callable[[AuthContext], Awaitable[T]]) -> T:
        """
        Invoke body exactly once if any of the caller's roles grants requirement.

        Raises:
            AuthenticationError: no identity for the caller
            AuthorizationError: no role grants the permission; body is not invoked
            DependencyError: role lookup failed
        """
        context = await self._authenticate()
        roles = await self._resolver.resolve_roles(context.principal_id)

        if not self.policy.any_role_has_permission(roles, requirement.resource, requirement.action):
            log.debug(f"Principal {context.principal_id} with roles {roles} denied {requirement}")
            raise AuthorizationError(f"Permission denied: requires {requirement}")

        log.debug(f"Principal {context.principal_id} granted {requirement}")
        return await body(
            AuthContext(
                principal_id=context.principal_id,
                profile_id=context.profile_id,
                department_id=context.department_id,
            )
        )


# ============================================================================
# FastAPI Dependencies
# ============================================================================

def get_role_resolver(request: Request) -> RoleResolver:
    """The process-wide resolver created at startup (see app.main)."""
    return request.app.state.role_resolver


async def get_access_gate(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
) -> AccessGate:
    """Gate bound to the already-authenticated caller of this request."""
    async def authenticate() -> AuthContext:
        return context

    return AccessGate(authenticate, resolver)


def require_permission(resource: Resource | str, action: Action | str):
    """
    FastAPI dependency to require a specific permission.

    Usage:
        @router.get("/matrix/{resource}/{action}")
        async def roles_for(
            context: AuthContext = Depends(require_permission("roles", "read"))
        ):
            # Caller has roles:read
            pass

    Returns:
        Dependency function that returns the caller's AuthContext if permitted

    Raises:
        AuthorizationError: 403 if no role grants the permission
    """
    requirement = Permission(Resource.parse(resource), Action.parse(action))

    async def permission_dependency(
        gate: Annotated[AccessGate, Depends(get_access_gate)],
    ) -> AuthContext:
        async def passthrough(context: AuthContext) -> AuthContext:
            return context

        return await gate.run(requirement, passthrough)

    return permission_dependency
