from typing import Literal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as SchemaValidationError
from core.exceptions import ValidationError


class RegisterUserRequest(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value):
        value = value.strip()
        if len(value) < 3:
            raise ValueError('Name must be at least 3 characters long')
        return value

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class LoginUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class VerifyEmailQuery(BaseModel):
    token: str
    email: EmailStr

    @field_validator('token')
    @classmethod
    def validate_token(cls, value):
        if len(value) != 8 or not value.isdigit():
            raise ValueError('must be an 8-digit code')
        return value

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class AccessTokenClaims(BaseModel):
    """Claims of a short-lived access token. Enough to identify the user without a database read."""
    model_config = ConfigDict(frozen=True)

    type: Literal["access"] = "access"
    id: int
    name: str
    email: str
    session_id: int
    iat: int
    exp: int
    jti: str


class RefreshTokenClaims(BaseModel):
    """Claims of a long-lived refresh token: only the session it belongs to."""
    model_config = ConfigDict(frozen=True)

    type: Literal["refresh"] = "refresh"
    session_id: int
    iat: int
    exp: int
    jti: str


class Identity(BaseModel):
    """Who the current request is authenticated as."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    session_id: int

    @classmethod
    def from_claims(cls, claims: AccessTokenClaims) -> "Identity":
        return cls(id=claims.id, name=claims.name, email=claims.email, session_id=claims.session_id)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


def first_error_message(exc) -> str:
    """
    Returns the first human readable message of a pydantic ValidationError.

    Field constraint messages ("String should have at least 6 characters")
    are prefixed with the field name so the flash message makes sense on
    its own.
    """
    errors = exc.errors()
    if not errors:
        return "Validation error"
    error = errors[0]
    message = error.get("msg", "Validation error")
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    if location:
        return f"{location[-1].replace('_', ' ').capitalize()}: {message}"
    return message


def parse_form(schema: type[BaseModel], **fields) -> BaseModel:
    """
    Validates submitted form fields against ``schema``.

    Raises:
        ValidationError: the form is invalid; message is the first violation
    """
    try:
        return schema(**fields)
    except SchemaValidationError as e:
        raise ValidationError(first_error_message(e))
