"""
Security module for authentication.

Provides JWT token handling, password hashing, and credential checks
using industry-standard libraries (bcrypt, python-jose).
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import bcrypt
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.core.config import settings
from budget_planning.models.user import User
from budget_planning.repositories.user import UserRepository

# JWT Algorithm
ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class TokenData(BaseModel):
    """
    JWT token payload data model.

    Contains the claims stored in the JWT token.
    """
    email: str
    role: Optional[str] = None
    exp: Optional[datetime] = None


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    if isinstance(hashed_password, str):
        hashed_bytes = hashed_password.encode('utf-8')
    else:
        hashed_bytes = hashed_password

    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode('utf-8')


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token({"sub": "vova@gmail.com", "role": "PARENT"})
        >>> # Use token in Authorization header: Bearer <token>
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=ALGORITHM
    )


def create_user_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue an access token for a user (subject is the email)."""
    return create_access_token(
        data={"sub": user.email, "role": user.role.value},
        expires_delta=expires_delta,
    )


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        TokenData if valid, None if invalid, expired or missing a subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM]
        )
    except JWTError:
        return None

    email: Optional[str] = payload.get("sub")
    if email is None:
        return None

    return TokenData(email=email, role=payload.get("role"), exp=payload.get("exp"))


async def authenticate_user(
    session: AsyncSession,
    email: str,
    password: str,
) -> Optional[User]:
    """
    Authenticate a user with email and password.

    Args:
        session: Database session
        email: Login username (the user's email)
        password: Plain text password

    Returns:
        User if authentication successful, None otherwise
    """
    user = await UserRepository(session).get_by_email(email)

    if not user:
        return None

    if not verify_password(password, user.hashed_password):
        return None

    return user


class Token(BaseModel):
    """
    Access token response model.

    Returned by the login endpoint after successful authentication.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type (always 'bearer')")
