import logging

from transcriptor.auth import (
    create_access_token,
    hash_password,
    verify_password,
)
from transcriptor.errors import AuthError, ValidationError
from transcriptor.models.user import DEFAULT_ROLE, PUBLIC_ROLES, ROLES, User
from transcriptor.store import Store

logger = logging.getLogger(__name__)

# Compared against when the username is unknown, so both login failures do
# the same bcrypt work.
_DUMMY_HASH = hash_password("transcriptor-dummy-password")

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

__all__ = ["create_user", "login", "public_profile", "register"]


def _clean_fields(name: str | None, username: str | None, password: str | None):
    name = (name or "").strip()
    username = (username or "").strip()
    if not name or not username or not password:
        raise ValidationError("Name, username and password are required")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return name, username, password


def public_profile(user: User) -> dict:
    return {"id": user.id, "name": user.name, "role": user.role}


def register(
    store: Store,
    name: str | None,
    username: str | None,
    password: str | None,
    role: str | None = None,
) -> User:
    """Self-service sign-up. Only the public roles can be chosen."""
    name, username, password = _clean_fields(name, username, password)
    if role not in PUBLIC_ROLES:
        role = DEFAULT_ROLE
    user = store.create_user(name, username, hash_password(password), role)
    logger.info(f"Registered user {user.username} ({user.role})")
    return user


def create_user(
    store: Store,
    name: str | None,
    username: str | None,
    password: str | None,
    role: str | None = None,
) -> User:
    """Admin-side creation: any role, but it has to be a known one."""
    name, username, password = _clean_fields(name, username, password)
    role = role or DEFAULT_ROLE
    if role not in ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}")
    user = store.create_user(name, username, hash_password(password), role)
    logger.info(f"Created user {user.username} ({user.role})")
    return user


def login(store: Store, username: str | None, password: str | None) -> tuple[str, User]:
    username = (username or "").strip()
    user = store.find_user_by_username(username) if username else None
    hashed = user.password_hash if user else _DUMMY_HASH
    if not verify_password(password or "", hashed) or not user:
        logger.warning(f"Failed login for {username!r}")
        raise AuthError("Invalid credentials")
    return create_access_token(user.id, user.name, user.role), user
