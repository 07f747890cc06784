import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from transcriptor.api.deps import get_admin_identity, get_store
from transcriptor.services import accounts
from transcriptor.store import Store

logger = logging.getLogger(__name__)

# Every route below is admin-only
router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_admin_identity)],
)

RECENT_TRANSCRIPTS = 5


class CreateUserRequest(BaseModel):
    name: str | None = None
    username: str | None = None
    password: str | None = None
    role: str | None = None


class UserResponse(BaseModel):
    id: int
    name: str
    username: str
    role: str
    created_at: datetime


class RecentTranscript(BaseModel):
    id: int
    user_id: int
    user_name: str
    content: str
    created_at: datetime


class StatsResponse(BaseModel):
    total_users: int
    users_by_role: dict[str, int]
    total_transcripts: int
    recent_transcripts: list[RecentTranscript]


@router.get("/users", response_model=list[UserResponse])
def list_users(store: Store = Depends(get_store)):
    return store.list_users()


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(body: CreateUserRequest, store: Store = Depends(get_store)):
    return accounts.create_user(
        store, body.name, body.username, body.password, body.role
    )


@router.delete("/users/{user_id}")
def delete_user(user_id: int, store: Store = Depends(get_store)):
    store.delete_user(user_id)
    logger.info(f"Deleted user {user_id} and their transcripts")
    return {"detail": "User deleted"}


@router.get("/stats", response_model=StatsResponse)
def stats(store: Store = Depends(get_store)):
    """User counts per role, transcript total and the latest transcripts."""
    by_role = store.count_users_by_role()
    names = {user.id: user.name for user in store.list_users()}
    recent = [
        RecentTranscript(
            id=t.id,
            user_id=t.user_id,
            user_name=names.get(t.user_id, ""),
            content=t.content,
            created_at=t.created_at,
        )
        for t in store.list_recent_transcripts(RECENT_TRANSCRIPTS)
    ]
    return StatsResponse(
        total_users=sum(by_role.values()),
        users_by_role=by_role,
        total_transcripts=store.count_transcripts(),
        recent_transcripts=recent,
    )
