from datetime import UTC, datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from transcriptor.config import settings
from transcriptor.errors import AuthError
from transcriptor.models.user import ROLES


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: int, name: str, role: str) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    return jwt.encode(
        {"sub": str(user_id), "name": name, "role": role, "exp": expire},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def verify_token(token: str | None) -> dict:
    """Decode a bearer token and return its claims.

    Missing, malformed, tampered and expired tokens all raise the same
    ``AuthError``.
    """
    if not token:
        raise AuthError("Not authenticated")
    try:
        claims = decode_token(token)
        user_id = int(claims["sub"])
        role = claims["role"]
    except (JWTError, KeyError, TypeError, ValueError):
        raise AuthError("Invalid token")
    if user_id < 1 or role not in ROLES:
        raise AuthError("Invalid token")
    return claims
