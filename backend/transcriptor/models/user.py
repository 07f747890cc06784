from datetime import UTC, datetime

from sqlmodel import Field, SQLModel

ROLES = ("admin", "officer", "deaf")
PUBLIC_ROLES = ("officer", "deaf")
DEFAULT_ROLE = "officer"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    username: str = Field(unique=True, index=True)
    password_hash: str
    role: str = Field(default=DEFAULT_ROLE)  # "admin" | "officer" | "deaf"
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
