"""Storage for users and transcripts.

``SqlStore`` runs on a SQLModel session, ``MemoryStore`` keeps everything in
dicts. Both honour the same contracts: newest-first listings, unique
usernames, and a user deletion that takes the user's transcripts with it or
leaves everything untouched.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from itertools import count

from sqlalchemy import delete, func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from transcriptor.errors import ConflictError, NotFoundError, StorageError
from transcriptor.models.transcript import Transcript
from transcriptor.models.user import ROLES, User

logger = logging.getLogger(__name__)


def _newest_first(transcripts: list[Transcript]) -> list[Transcript]:
    return sorted(transcripts, key=lambda t: (t.created_at, t.id), reverse=True)


class Store(ABC):
    @abstractmethod
    def ping(self) -> None:
        """Raise ``StorageError`` if the backing store is unreachable."""

    @abstractmethod
    def find_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    def list_users(self) -> list[User]: ...

    @abstractmethod
    def create_user(
        self, name: str, username: str, password_hash: str, role: str
    ) -> User: ...

    @abstractmethod
    def delete_user(self, user_id: int) -> None: ...

    @abstractmethod
    def insert_transcript(self, user_id: int, content: str) -> Transcript: ...

    @abstractmethod
    def list_transcripts_by_user(self, user_id: int) -> list[Transcript]: ...

    @abstractmethod
    def list_recent_transcripts(self, limit: int) -> list[Transcript]: ...

    @abstractmethod
    def count_transcripts(self) -> int: ...

    @abstractmethod
    def count_users_by_role(self) -> dict[str, int]: ...


class SqlStore(Store):
    def __init__(self, session: Session):
        self.session = session

    def _fail(self, action: str, exc: SQLAlchemyError) -> StorageError:
        self.session.rollback()
        logger.error(f"Storage failure while trying to {action}: {exc}")
        return StorageError()

    def ping(self) -> None:
        try:
            self.session.exec(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise self._fail("reach the database", exc)

    def find_user_by_username(self, username: str) -> User | None:
        try:
            return self.session.exec(
                select(User).where(User.username == username)
            ).first()
        except SQLAlchemyError as exc:
            raise self._fail("look up a user", exc)

    def get_user(self, user_id: int) -> User | None:
        try:
            return self.session.get(User, user_id)
        except SQLAlchemyError as exc:
            raise self._fail("load a user", exc)

    def list_users(self) -> list[User]:
        try:
            return list(
                self.session.exec(select(User).order_by(col(User.id).desc())).all()
            )
        except SQLAlchemyError as exc:
            raise self._fail("list users", exc)

    def create_user(
        self, name: str, username: str, password_hash: str, role: str
    ) -> User:
        if self.find_user_by_username(username):
            raise ConflictError("Username already exists")
        user = User(
            name=name, username=username, password_hash=password_hash, role=role
        )
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent insert of the same username
            self.session.rollback()
            raise ConflictError("Username already exists")
        except SQLAlchemyError as exc:
            raise self._fail("create a user", exc)
        self.session.refresh(user)
        return user

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        try:
            self.session.exec(delete(Transcript).where(Transcript.user_id == user_id))
            self.session.delete(user)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete a user", exc)

    def insert_transcript(self, user_id: int, content: str) -> Transcript:
        if not self.get_user(user_id):
            raise NotFoundError("User not found")
        transcript = Transcript(user_id=user_id, content=content)
        try:
            self.session.add(transcript)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("save a transcript", exc)
        self.session.refresh(transcript)
        return transcript

    def list_transcripts_by_user(self, user_id: int) -> list[Transcript]:
        try:
            return list(
                self.session.exec(
                    select(Transcript)
                    .where(Transcript.user_id == user_id)
                    .order_by(
                        col(Transcript.created_at).desc(), col(Transcript.id).desc()
                    )
                ).all()
            )
        except SQLAlchemyError as exc:
            raise self._fail("list transcripts", exc)

    def list_recent_transcripts(self, limit: int) -> list[Transcript]:
        try:
            return list(
                self.session.exec(
                    select(Transcript)
                    .order_by(
                        col(Transcript.created_at).desc(), col(Transcript.id).desc()
                    )
                    .limit(limit)
                ).all()
            )
        except SQLAlchemyError as exc:
            raise self._fail("list recent transcripts", exc)

    def count_transcripts(self) -> int:
        try:
            return self.session.exec(
                select(func.count()).select_from(Transcript)
            ).one()
        except SQLAlchemyError as exc:
            raise self._fail("count transcripts", exc)

    def count_users_by_role(self) -> dict[str, int]:
        try:
            rows = self.session.exec(
                select(User.role, func.count()).group_by(User.role)
            ).all()
        except SQLAlchemyError as exc:
            raise self._fail("count users", exc)
        counts = {role: 0 for role in ROLES}
        counts.update({role: total for role, total in rows})
        return counts


class MemoryStore(Store):
    def __init__(self):
        self.users: dict[int, User] = {}
        self.transcripts: dict[int, Transcript] = {}
        self._user_ids = count(1)
        self._transcript_ids = count(1)

    def ping(self) -> None:
        return None

    def find_user_by_username(self, username: str) -> User | None:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    def get_user(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    def list_users(self) -> list[User]:
        return sorted(self.users.values(), key=lambda u: u.id, reverse=True)

    def create_user(
        self, name: str, username: str, password_hash: str, role: str
    ) -> User:
        if self.find_user_by_username(username):
            raise ConflictError("Username already exists")
        user = User(
            id=next(self._user_ids),
            name=name,
            username=username,
            password_hash=password_hash,
            role=role,
        )
        self.users[user.id] = user
        return user

    def delete_user(self, user_id: int) -> None:
        if user_id not in self.users:
            raise NotFoundError("User not found")
        self.transcripts = {
            tid: t for tid, t in self.transcripts.items() if t.user_id != user_id
        }
        del self.users[user_id]

    def insert_transcript(self, user_id: int, content: str) -> Transcript:
        if user_id not in self.users:
            raise NotFoundError("User not found")
        transcript = Transcript(
            id=next(self._transcript_ids),
            user_id=user_id,
            content=content,
        )
        self.transcripts[transcript.id] = transcript
        return transcript

    def list_transcripts_by_user(self, user_id: int) -> list[Transcript]:
        return _newest_first(
            [t for t in self.transcripts.values() if t.user_id == user_id]
        )

    def list_recent_transcripts(self, limit: int) -> list[Transcript]:
        return _newest_first(list(self.transcripts.values()))[:limit]

    def count_transcripts(self) -> int:
        return len(self.transcripts)

    def count_users_by_role(self) -> dict[str, int]:
        counts = {role: 0 for role in ROLES}
        counts.update(Counter(user.role for user in self.users.values()))
        return counts
