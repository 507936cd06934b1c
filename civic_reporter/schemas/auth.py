"""Authentication-related Pydantic request schemas.

Covers citizen registration and email/password login.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from civic_reporter.utils.password import BCRYPT_MAX_BYTES, fits_bcrypt


class RegisterRequest(BaseModel):
    """Citizen self-registration request schema.

    Attributes:
        name: Full display name
        email: Login email, unique
        password: Plain text, bcrypt-hashed on the server (6 chars to 72 UTF-8 bytes)
        phone: Contact number, optional
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        if not fits_bcrypt(value):
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    """Login request schema.

    Attributes:
        email: Login email
        password: Plain text password, verified against the bcrypt hash
    """

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
