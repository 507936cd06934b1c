"""Auth Service — Business logic for registration, login and profile lookup.

Self-registration always creates a citizen; admins come from the seed script.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.models.user import User, UserRole
from civic_reporter.repositories.user_repository import user_repository
from civic_reporter.schemas.auth import LoginRequest, RegisterRequest
from civic_reporter.utils.exceptions import AuthenticationError, ValidationError
from civic_reporter.utils.jwt import create_access_token
from civic_reporter.utils.password import fits_bcrypt, hash_password, verify_password


class AuthService:
    """Service handling authentication business logic."""

    def build_user_response(self, user: User) -> dict:
        """Public view of a user. The password hash is never included."""
        return {
            "id": str(user.id),
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "role": user.role,
            "createdAt": user.created_at,
        }

    def issue_token(self, user: User) -> str:
        """Create the identity token for a user.

        Args:
            user: User model instance

        Returns:
            str: Signed bearer token valid for JWT_ACCESS_TOKEN_EXPIRE_DAYS
        """
        return create_access_token({"sub": str(user.id), "role": user.role})

    async def register(
        self,
        db: AsyncSession,
        data: RegisterRequest,
    ) -> tuple[User, str]:
        """Register a citizen account.

        Args:
            db: Async database session
            data: Registration request data

        Returns:
            tuple[User, str]: Created user and its identity token

        Raises:
            ValidationError: The email is already registered
        """
        existing: User | None = await user_repository.get_by_email(db, data.email)
        if existing is not None:
            raise ValidationError("Email already registered")

        try:
            user: User = await user_repository.create(
                db,
                {
                    "name": data.name,
                    "email": data.email.lower(),
                    "phone": data.phone,
                    "password_hash": hash_password(data.password),
                    "role": UserRole.CITIZEN.value,
                },
            )
        except IntegrityError:
            # Concurrent registration with the same email
            await db.rollback()
            raise ValidationError("Email already registered")
        return user, self.issue_token(user)

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> tuple[User, str]:
        """Verify credentials and issue a token.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        # Longer inputs can never match a stored hash
        if not fits_bcrypt(data.password):
            raise AuthenticationError("Invalid credentials")

        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user, self.issue_token(user)


# Singleton instance
auth_service: AuthService = AuthService()
