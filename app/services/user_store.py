from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import Base, User
from app.db.session import get_engine, get_session_factory
from app.models.schemas import UserRecord
from app.services.errors import NotFoundError, StoreUnavailableError
from app.services.validation import validate_new_user, validate_user_patch

logger = logging.getLogger(__name__)


def parse_user_id(raw: Any) -> uuid.UUID:
    """Turn a path segment into a primary key.

    A malformed id can never match a stored user, so it is reported as not found.
    """

    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError, AttributeError) as exc:
        raise NotFoundError() from exc


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=str(user.id),
        name=user.name,
        username=user.username,
        email=user.email,
        phone=user.phone,
    )


class UserStore:
    """CRUD over the ``users`` table.

    Built explicitly by the process entry point (or a test) and handed to the
    HTTP layer; every operation runs in its own session.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = get_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "UserStore":
        return cls(get_engine(database_url))

    def init_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("store.error", extra={"error": str(exc)})
            raise StoreUnavailableError("Storage unavailable") from exc
        finally:
            db.close()

    def ping(self) -> bool:
        try:
            with self.session() as db:
                db.execute(text("SELECT 1"))
        except StoreUnavailableError:
            return False
        return True

    def list_users(self) -> list[UserRecord]:
        with self.session() as db:
            rows = db.execute(select(User).order_by(User.created_at)).scalars().all()
            return [_to_record(row) for row in rows]

    def create(self, fields: Mapping[str, Any]) -> UserRecord:
        new_user = validate_new_user(fields)
        with self.session() as db:
            user = User(
                id=uuid.uuid4(),
                name=new_user.name,
                username=new_user.username,
                email=new_user.email,
                phone=new_user.phone,
            )
            db.add(user)
            db.commit()
            logger.info("user.created", extra={"user_id": str(user.id)})
            return _to_record(user)

    def _load(self, db: Session, user_id: Any) -> User:
        user = db.get(User, parse_user_id(user_id))
        if user is None:
            raise NotFoundError()
        return user

    def get(self, user_id: Any) -> UserRecord:
        with self.session() as db:
            return _to_record(self._load(db, user_id))

    def update(self, user_id: Any, fields: Mapping[str, Any]) -> UserRecord:
        with self.session() as db:
            user = self._load(db, user_id)
            patch = validate_user_patch(fields)
            for name, value in patch.changes.items():
                setattr(user, name, value)
            if patch:
                db.commit()
                logger.info("user.updated", extra={"user_id": str(user.id), "fields": sorted(patch.changes)})
            return _to_record(user)

    def delete(self, user_id: Any) -> None:
        with self.session() as db:
            user = self._load(db, user_id)
            deleted_id = str(user.id)
            db.delete(user)
            db.commit()
            logger.info("user.deleted", extra={"user_id": deleted_id})
