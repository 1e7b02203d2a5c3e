"""
Authentication service for verifying Supabase access tokens.
"""
import logging
from typing import Optional, Dict, Any

from jose import JWTError, jwt

from ..config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class AuthService:
    """Service for authentication operations."""

    algorithm = "HS256"

    def __init__(self):
        """Initialize auth service with settings."""
        self.secret_key = settings.supabase_jwt_secret
        self.audience = settings.supabase_jwt_audience
        self.admin_role = settings.admin_role

    def decode_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Decode and validate a Supabase JWT.

        Returns:
            Decoded token payload or None if invalid
        """
        if not self.secret_key:
            logger.warning("Supabase JWT secret not configured")
            return None
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
            )
        except JWTError as e:
            logger.warning(f"Token decode error: {e}")
            return None

    def is_admin(self, payload: Dict[str, Any]) -> bool:
        """Check the role stored in the user's metadata."""
        metadata = payload.get("user_metadata") or {}
        return metadata.get("role") == self.admin_role


# Singleton instance
_auth_service = None


def get_auth_service() -> AuthService:
    """Get the singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
