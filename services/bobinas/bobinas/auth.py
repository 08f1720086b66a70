"""
Authentication and authorization utilities.

Provides password hashing, JWT token creation/validation, sign-up, sign-in and
sign-out, and the FastAPI dependency that resolves the acting user. The rest
of the service only consumes CurrentUser.id, stored as the owner of new
bobinas.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from . import cache, crud, errors, models, schemas
from .config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Security scheme for JWT bearer tokens
security = HTTPBearer()


class CurrentUser(BaseModel):
    """Current authenticated user information."""
    id: str
    email: str
    token: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if the password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user: models.User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user: The user the token identifies
        expires_delta: Optional custom expiration time delta

    Returns:
        Encoded JWT token string
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "jti": uuid.uuid4().hex,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decode and check an access token.

    Raises:
        errors.AuthError: If the token is invalid, expired, incomplete or revoked
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.error(f"JWT validation error: {e}")
        raise errors.AuthError("Could not validate credentials") from e
    if not payload.get("sub") or not payload.get("jti"):
        logger.error("Token is missing 'sub' or 'jti' claim")
        raise errors.AuthError("Could not validate credentials")
    if cache.is_token_revoked(payload["jti"]):
        logger.warning(f"Revoked token presented for user {payload['sub']}")
        raise errors.AuthError("Token has been revoked")
    return payload


def sign_up(db: Session, email: str, password: str, display_name: str) -> schemas.Token:
    """
    Register a new user and sign them in.

    Raises:
        errors.ConflictError: If the email is already registered
    """
    if crud.get_user_by_email(db, email=email):
        raise errors.ConflictError("email", email)
    user = crud.create_user(db, name=display_name, email=email, password_hash=get_password_hash(password))
    logger.info(f"Registered user {user.id}")
    return schemas.Token(access_token=create_access_token(user))


def sign_in(db: Session, email: str, password: str) -> schemas.Token:
    """
    Authenticate a user by email and password.

    Raises:
        errors.AuthError: If the credentials are wrong or the account is inactive
    """
    user = crud.get_user_by_email(db, email=email)
    if user is None or not verify_password(password, user.password_hash):
        raise errors.AuthError("Incorrect email or password")
    if not user.is_active:
        raise errors.AuthError("User account is inactive")
    return schemas.Token(access_token=create_access_token(user))


def sign_out(token: str) -> None:
    """
    Revoke an access token until its expiry.

    Raises:
        errors.AuthError: If the token is not valid
    """
    payload = decode_token(token)
    remaining = int(payload["exp"] - datetime.now(timezone.utc).timestamp())
    cache.revoke_token(payload["jti"], remaining)
    logger.info(f"Signed out user {payload['sub']}")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """
    FastAPI dependency to get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Authorization credentials (injected)

    Returns:
        Current authenticated user information

    Raises:
        HTTPException: 401 if token is invalid or revoked
    """
    token = credentials.credentials
    try:
        payload = decode_token(token)
    except errors.AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser(id=payload["sub"], email=payload.get("email") or "", token=token)
