"""
FastAPI dependencies for authentication.
"""
from typing import Annotated, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.exceptions import AuthenticationError, DependencyError
from app.features.users.auth import verify_jwt_token, get_appwrite_user
from app.features.users.context import AuthContext
from app.features.users.models import Profile
from app.utils import get_logger


log = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def provision_profile(db: AsyncSession, principal_id: str) -> Profile:
    """Create the local profile for a principal seen for the first time."""
    appwrite_user = await get_appwrite_user(principal_id)
    name = (appwrite_user.get("name") or "").split(" ", 1)
    profile = Profile(
        user_id=principal_id,
        email=appwrite_user.get("email"),
        first_name=name[0] or None,
        last_name=name[1] if len(name) > 1 else None,
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    log.info(f"Provisioned profile {profile.id} for principal {principal_id}")
    return profile


async def get_auth_context(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> AuthContext:
    """
    Build the caller's AuthContext from the bearer token.
    
    This dependency:
    1. Extracts JWT from Authorization header
    2. Verifies the JWT
    3. Looks up the caller's profile (provisioning it from Appwrite on first login)
    
    Usage:
        @router.get("/me")
        async def get_me(context: AuthContext = Depends(get_auth_context)):
            return context
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    
    payload = verify_jwt_token(credentials.credentials)
    principal_id = payload.get("userId")
    if not principal_id:
        raise AuthenticationError("Invalid token payload")
    
    try:
        result = await db.execute(
            select(Profile).where(Profile.user_id == principal_id)
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            profile = await provision_profile(db, principal_id)
    except SQLAlchemyError as e:
        await db.rollback()
        raise DependencyError("Profile lookup failed") from e
    
    if profile.deleted_at is not None:
        raise AuthenticationError("Profile is deactivated")
    
    return AuthContext(
        principal_id=principal_id,
        profile_id=profile.id,
        department_id=profile.department_id,
    )


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
