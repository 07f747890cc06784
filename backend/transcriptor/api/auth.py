from fastapi import APIRouter, Depends
from pydantic import BaseModel

from transcriptor.api.deps import Identity, get_current_identity, get_store
from transcriptor.services import accounts
from transcriptor.store import Store

router = APIRouter(tags=["auth"])


class RegisterRequest(BaseModel):
    name: str | None = None
    username: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class PublicUser(BaseModel):
    id: int
    name: str
    role: str


class RegisteredUser(PublicUser):
    username: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: PublicUser


@router.post("/register", response_model=RegisteredUser, status_code=201)
def register(body: RegisterRequest, store: Store = Depends(get_store)):
    return accounts.register(
        store, body.name, body.username, body.password, body.role
    )


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, store: Store = Depends(get_store)):
    token, user = accounts.login(store, body.username, body.password)
    return TokenResponse(access_token=token, user=accounts.public_profile(user))


@router.get("/me", response_model=PublicUser)
async def me(identity: Identity = Depends(get_current_identity)):
    return identity
