from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlmodel import Session

from transcriptor.auth import verify_token
from transcriptor.database import get_session
from transcriptor.errors import ForbiddenError
from transcriptor.store import SqlStore, Store

security = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    id: int
    name: str
    role: str


def get_store(session: Session = Depends(get_session)) -> Store:
    return SqlStore(session)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    """Resolve the caller from the bearer token alone; no session lookup."""
    claims = verify_token(credentials.credentials if credentials else None)
    return Identity(id=int(claims["sub"]), name=claims.get("name", ""), role=claims["role"])


def require_role(identity: Identity, role: str) -> None:
    if identity.role != role:
        raise ForbiddenError(f"{role.capitalize()} required")


def authorize_transcript_access(identity: Identity, target_user_id: int) -> None:
    if identity.role == "admin" or identity.id == target_user_id:
        return
    raise ForbiddenError("Not allowed to access these transcripts")


def resolve_effective_owner(identity: Identity, requested_user_id: int | None) -> int:
    if identity.role == "admin" and requested_user_id is not None:
        return requested_user_id
    return identity.id


async def get_admin_identity(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    require_role(identity, "admin")
    return identity
