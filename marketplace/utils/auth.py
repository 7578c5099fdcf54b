"""
Authentication utilities for JWT token management and password hashing.
Provides the credential service and the per-request viewer context.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from marketplace.config import Settings
from marketplace.models.user import UserRole
from marketplace.utils.exceptions import InvalidTokenError, TokenExpiredError
import uuid


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, user_id: uuid.UUID, role: UserRole, exp: datetime):
        self.user_id = user_id
        self.role = role
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from a decoded claims dictionary."""
        return cls(
            user_id=uuid.UUID(data["sub"]),
            role=UserRole(data["role"]),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


@dataclass(frozen=True)
class ViewerContext:
    """
    Resolved identity for the current request.
    An anonymous viewer has neither user_id nor role.
    """

    user_id: Optional[uuid.UUID] = None
    role: Optional[UserRole] = None

    @classmethod
    def anonymous(cls) -> "ViewerContext":
        return cls()

    @classmethod
    def from_token(cls, payload: TokenPayload) -> "ViewerContext":
        return cls(user_id=payload.user_id, role=payload.role)

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_manage(self, owner_id: uuid.UUID) -> bool:
        """Admins manage everything, everyone else only what they own."""
        if self.is_admin:
            return True
        return self.user_id is not None and self.user_id == owner_id


class CredentialService:
    """
    Password hashing and signed-token issuance/verification.
    One instance per application, configured from settings.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.expire_minutes = settings.access_token_expire_minutes
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        """
        Hash password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            ValueError: If password is too short
        """
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify password against hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password from database

        Returns:
            True if password matches, False otherwise
        """
        return self.pwd_context.verify(plain_password, hashed_password)

    def create_access_token(
        self,
        user_id: uuid.UUID,
        role: UserRole,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token with user claims.

        Args:
            user_id: User's UUID
            role: User's role
            expires_delta: Optional custom expiration time

        Returns:
            Encoded JWT token string
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))

        to_encode = {
            "sub": str(user_id),
            "role": role.value,
            "exp": expire,
            "iat": now,
            "type": "access"
        }

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """
        Verify and decode a JWT access token.

        Args:
            token: JWT token string

        Returns:
            TokenPayload with the user ID and role

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is malformed, badly signed or lacks claims
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        if payload.get("type") != "access":
            raise InvalidTokenError("Invalid token type")

        try:
            return TokenPayload.from_dict(payload)
        except (KeyError, ValueError, TypeError):
            raise InvalidTokenError("Invalid token payload")


def extract_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """
    Extract JWT token from Authorization header.

    Args:
        authorization: Authorization header value

    Returns:
        JWT token string, or None when the header is absent

    Raises:
        InvalidTokenError: If header format is invalid
    """
    if not authorization or not authorization.strip():
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise InvalidTokenError("Invalid authorization header format")
    return parts[1]
