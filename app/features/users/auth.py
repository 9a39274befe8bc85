"""
Authentication utilities for Appwrite JWT verification.
"""
from typing import Optional
import jwt
from appwrite.client import Client
from appwrite.services.users import Users
from appwrite.exception import AppwriteException

from app.core import config
from app.core.exceptions import AuthenticationError, DependencyError


class AppwriteClient:
    """Singleton Appwrite client for server-side operations."""
    
    _instance: Optional[Client] = None
    
    @classmethod
    def get_client(cls) -> Client:
        """Get or create Appwrite client instance."""
        if cls._instance is None:
            if not config.APPWRITE_ENDPOINT or not config.APPWRITE_PROJECT_ID:
                raise DependencyError("Appwrite is not configured")
            cls._instance = Client()
            cls._instance.set_endpoint(config.APPWRITE_ENDPOINT)
            cls._instance.set_project(config.APPWRITE_PROJECT_ID)
            cls._instance.set_key(config.APPWRITE_API_KEY)
        return cls._instance


def verify_jwt_token(token: str) -> dict:
    """
    Verify Appwrite JWT token and return payload.
    
    With JWT_SECRET configured the HS256 signature is checked; otherwise the
    token is only decoded and the principal is confirmed against Appwrite
    when its profile is first provisioned.
    
    Args:
        token: JWT token from Authorization header
        
    Returns:
        Decoded JWT payload containing user information
        
    Raises:
        AuthenticationError: If token is invalid or expired
    """
    try:
        if config.JWT_SECRET:
            return jwt.decode(token, config.JWT_SECRET, algorithms=["HS256"])
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True}
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {str(e)}")


async def get_appwrite_user(user_id: str) -> dict:
    """
    Get user information from Appwrite.
    
    Args:
        user_id: Appwrite user ID
        
    Returns:
        User information from Appwrite
        
    Raises:
        AuthenticationError: If the user is unknown to Appwrite
    """
    try:
        client = AppwriteClient.get_client()
        users = Users(client)
        return users.get(user_id)
    except AppwriteException as e:
        raise AuthenticationError(f"Failed to verify user: {str(e)}")
