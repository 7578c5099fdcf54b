"""
Authentication service for registration, login and profile management.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from marketplace.repositories.user import UserRepository
from marketplace.models.user import User, UserRole
from marketplace.schemas.auth import RegisterRequest
from marketplace.schemas.user import UserUpdate
from marketplace.utils.auth import CredentialService
from marketplace.utils.exceptions import (
    ConflictError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (UserRole.USER, UserRole.OWNER)


class AuthService:
    """
    Account lifecycle: registration, login and profile updates.
    Token signing and password hashing are delegated to the credential service.
    """

    def __init__(self, db_session: AsyncSession, credentials: CredentialService):
        self.db = db_session
        self.credentials = credentials
        self.user_repo = UserRepository(db_session)

    def issue_token(self, user: User) -> str:
        return self.credentials.create_access_token(user_id=user.id, role=user.role)

    async def _create_account(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole,
        **extra
    ) -> User:
        try:
            normalized_email = User.validate_email_format(email)
            hashed_password = self.credentials.hash_password(password)
        except ValueError as e:
            raise ValidationError(str(e))

        if await self.user_repo.email_taken(normalized_email):
            logger.warning(f"Registration rejected, email already in use: {normalized_email}")
            raise ConflictError("User already exists")

        try:
            return await self.user_repo.create_user({
                "name": name,
                "email": normalized_email,
                "hashed_password": hashed_password,
                "role": role,
                **extra
            })
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError("User already exists")

    async def register(self, request: RegisterRequest) -> Tuple[User, str]:
        """
        Register a new account and issue a token for it.

        Args:
            request: Registration payload

        Returns:
            Tuple of (user, access_token)

        Raises:
            InsufficientPermissionsError: If the requested role is admin
            ConflictError: If the email is already registered
            ValidationError: If the email or password is rejected
        """
        if request.role not in SELF_REGISTER_ROLES:
            raise InsufficientPermissionsError(f"register as {request.role.value}")

        user = await self._create_account(
            name=request.name,
            email=request.email,
            password=request.password,
            role=request.role,
            phone=request.phone,
            address=request.address
        )
        logger.info(f"Registered user {user.id} with role {user.role.value}")
        return user, self.issue_token(user)

    async def create_admin(self, name: str, email: str, password: str) -> User:
        """Create an administrator account. Used by operators, never exposed over HTTP."""
        user = await self._create_account(name=name, email=email, password=password, role=UserRole.ADMIN)
        logger.info(f"Created admin {user.id}")
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate with email and password.

        Returns:
            Tuple of (user, access_token)

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not self.credentials.verify_password(password, user.hashed_password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user, self.issue_token(user)

    async def get_profile(self, user_id: uuid.UUID) -> User:
        """
        Raises:
            NotFoundError: If the account no longer exists
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")
        return user

    async def update_profile(self, user_id: uuid.UUID, update: UserUpdate) -> User:
        """
        Update profile fields that were sent.

        Raises:
            NotFoundError: If the account no longer exists
            ConflictError: If the new email belongs to another account
        """
        user = await self.get_profile(user_id)
        changes = update.model_dump(exclude_unset=True)

        # Required columns cannot be cleared
        for required in ("name", "email"):
            if required in changes and changes[required] is None:
                del changes[required]

        if "email" in changes:
            try:
                changes["email"] = User.validate_email_format(changes["email"])
            except ValueError as e:
                raise ValidationError(str(e))
            if await self.user_repo.email_taken(changes["email"], exclude_user_id=user.id):
                raise ConflictError("Email already in use")

        if not changes:
            return user

        try:
            updated = await self.user_repo.update(user, changes)
        except IntegrityError:
            raise ConflictError("Email already in use")
        logger.info(f"Updated profile of user {user_id}")
        return updated
