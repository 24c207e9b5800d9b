"""
Security utilities for authentication and authorization
Verifies bearer tokens and checks role capabilities
"""

import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from quizboard.core.config import settings
from quizboard.core.database import get_db
from quizboard.core.exceptions import AuthenticationError, AuthorizationError
from quizboard.models.user import User, UserRole

logger = logging.getLogger(__name__)

# HTTP Bearer scheme; missing credentials are reported by get_current_user
security = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "token"


class Capability(enum.Enum):
    """Actions gated at the authorization boundary"""
    MANAGE_QUIZZES = "manage_quizzes"
    TAKE_QUIZ = "take_quiz"
    VIEW_ALL_QUIZZES = "view_all_quizzes"
    VIEW_LEADERBOARD = "view_leaderboard"
    VIEW_ALL_RESULTS = "view_all_results"
    EXPORT_RESULTS = "export_results"


ROLE_CAPABILITIES = {
    UserRole.ADMIN: frozenset(Capability),
    UserRole.TEACHER: frozenset(
        {
            Capability.MANAGE_QUIZZES,
            Capability.VIEW_LEADERBOARD,
            Capability.VIEW_ALL_RESULTS,
            Capability.EXPORT_RESULTS,
        }
    ),
    UserRole.STUDENT: frozenset({Capability.TAKE_QUIZ, Capability.VIEW_LEADERBOARD}),
}


def has_capability(user: User, capability: Capability) -> bool:
    """Single place where roles are mapped to permissions"""
    return capability in ROLE_CAPABILITIES.get(user.role, frozenset())


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create JWT access token

        Tokens are normally issued by the account service; this exists for
        tooling and tests that share the signing key.
        """
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode JWT token

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError as e:
            logger.info(f"Token verification failed: {e}")
            raise AuthenticationError()


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the calling user from a bearer header or the token cookie

    Raises:
        AuthenticationError: no token, bad token or unknown/inactive user
    """
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise AuthenticationError()

    payload = SecurityUtils.decode_token(token)
    user_id = payload.get("sub") or payload.get("id")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise AuthenticationError()

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise AuthenticationError()
    return user


def require_capability(capability: Capability):
    """
    Dependency to require a capability

    Args:
        capability: Capability the caller's role must grant

    Returns:
        Dependency function yielding the current user
    """

    def capability_checker(current_user: User = Depends(get_current_user)) -> User:
        if not has_capability(current_user, capability):
            logger.info(
                "Capability denied",
                extra={"user_id": current_user.id, "capability": capability.value},
            )
            raise AuthorizationError(details={"required": capability.value})
        return current_user

    return capability_checker
