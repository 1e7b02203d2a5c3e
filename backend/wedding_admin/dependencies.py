"""
FastAPI dependencies for authentication and authorization.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .schemas.auth import AdminUser
from .services.auth_service import get_auth_service

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Supabase JWT tokens
security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AdminUser:
    """
    Dependency to get the current operator, who must be an admin.

    Extracts the Supabase access token from the Authorization header,
    validates it and checks the role in its user metadata.

    Raises:
        HTTPException 401: If token is missing or invalid
        HTTPException 403: If the user is not an admin
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Please log in",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    auth_service = get_auth_service()

    payload = auth_service.decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    if not auth_service.is_admin(payload):
        logger.warning(f"Non-admin user {user_id} attempted an admin action")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized action"
        )

    return AdminUser(id=user_id, email=payload.get("email"))
