import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from transcriptor.api.deps import (
    Identity,
    authorize_transcript_access,
    get_admin_identity,
    get_current_identity,
    get_store,
    resolve_effective_owner,
)
from transcriptor.errors import ValidationError
from transcriptor.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transcripts"])


class TranscriptRequest(BaseModel):
    content: str | None = None
    # The browser client posts camelCase ``userId``
    user_id: int | None = Field(
        default=None, validation_alias=AliasChoices("user_id", "userId")
    )


class TranscriptResponse(BaseModel):
    id: int
    user_id: int
    content: str
    created_at: datetime


def _save(store: Store, owner_id: int, content: str | None):
    content = (content or "").strip()
    if not content:
        raise ValidationError("Transcript content cannot be empty")
    transcript = store.insert_transcript(owner_id, content)
    logger.info(f"Saved transcript {transcript.id} for user {owner_id}")
    return transcript


@router.post("/transcripts", response_model=TranscriptResponse, status_code=201)
def create_transcript(
    body: TranscriptRequest,
    store: Store = Depends(get_store),
    identity: Identity = Depends(get_current_identity),
):
    owner_id = resolve_effective_owner(identity, body.user_id)
    return _save(store, owner_id, body.content)


@router.get("/transcripts/{user_id}", response_model=list[TranscriptResponse])
def list_transcripts(
    user_id: int,
    store: Store = Depends(get_store),
    identity: Identity = Depends(get_current_identity),
):
    authorize_transcript_access(identity, user_id)
    return store.list_transcripts_by_user(user_id)


@router.post(
    "/admin/transcripts", response_model=TranscriptResponse, status_code=201
)
def admin_create_transcript(
    body: TranscriptRequest,
    store: Store = Depends(get_store),
    _admin: Identity = Depends(get_admin_identity),
):
    if body.user_id is None:
        raise ValidationError("user_id is required")
    return _save(store, body.user_id, body.content)
