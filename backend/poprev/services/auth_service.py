"""Password hashing, token issuance and the account operations behind /auth."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from poprev.config import settings
from poprev.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    PermissionDeniedError,
)
from poprev.models.user import Role
from poprev.schemas.auth import (
    AuthPayload,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserRead,
)
from poprev.store.base import ContentStore

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt."""
    try:
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds))
    except ValueError as e:
        # bcrypt refuses secrets longer than 72 bytes
        raise BadRequestError(f"Invalid password: {e}")
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    minutes = settings.jwt_expires_minutes if expires_minutes is None else expires_minutes
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Verify signature and expiry, returning the user id in the token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Not authorized, token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Not authorized, invalid token")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Not authorized, invalid token")
    return subject


def resolve_user(store: ContentStore, token: str) -> UserRead:
    """Map a bearer token onto an active user."""
    user = store.get_user(decode_access_token(token))
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise PermissionDeniedError("User account is deactivated")
    return user


def register(store: ContentStore, data: RegisterRequest) -> AuthPayload:
    if store.get_user_credentials(data.email):
        raise ConflictError("User with this email already exists")

    user = store.create_user(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        role=Role.viewer,
    )
    logger.info(f"Registered user {user.id}")
    return AuthPayload(token=create_access_token(user.id), user=user)


def login(store: ContentStore, data: LoginRequest) -> AuthPayload:
    credentials = store.get_user_credentials(data.email)
    if not credentials or not verify_password(data.password, credentials.password_hash):
        logger.warning("Failed login attempt")
        raise AuthenticationError("Invalid credentials")
    if not credentials.is_active:
        raise PermissionDeniedError("User account is deactivated")

    user = store.record_login(credentials.id)
    return AuthPayload(token=create_access_token(user.id), user=user)


def update_profile(store: ContentStore, user: UserRead, data: ProfileUpdate) -> UserRead:
    changes = {}
    if data.name is not None:
        changes["name"] = data.name
    if data.email is not None and data.email != user.email:
        if store.get_user_credentials(data.email):
            raise ConflictError("User with this email already exists")
        changes["email"] = data.email

    if not changes:
        return user
    return store.update_user(user.id, **changes)


def change_password(store: ContentStore, user: UserRead, data: ChangePasswordRequest) -> None:
    credentials = store.get_user_credentials(user.email)
    if not credentials or not verify_password(data.current_password, credentials.password_hash):
        raise BadRequestError("Current password is incorrect")

    store.update_user(user.id, password_hash=hash_password(data.new_password))
    logger.info(f"Password changed for user {user.id}")
