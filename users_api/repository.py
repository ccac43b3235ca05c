"""
Persistence for users.

``UserRepository`` is the contract the service layer depends on and
``SqlUserRepository`` is the SQLAlchemy implementation backed by the
``users`` table.  Every operation opens its own session, so a single
repository instance can be shared by all request threads.

Soft-deleted rows (``deleted_at`` set) are invisible to every
operation.  Uniqueness violations surface as ``EmailConflictError``;
other database errors propagate unchanged.
"""

import abc
import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from users_api.errors import EmailConflictError, UserNotFoundError
from users_api.models import User, utcnow

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class UserRepository(abc.ABC):
    @abc.abstractmethod
    def get_all(self) -> List[User]:
        """Return every live user ordered by id."""

    @abc.abstractmethod
    def get_by_id(self, user_id: int) -> User:
        """Return the live user with ``user_id`` or raise ``UserNotFoundError``."""

    @abc.abstractmethod
    def create(self, user: User) -> User:
        """Insert ``user`` and return it with id and timestamps assigned."""

    @abc.abstractmethod
    def update(self, user: User) -> User:
        """Write the name, email and age of ``user`` onto its stored row."""

    @abc.abstractmethod
    def delete(self, user_id: int) -> None:
        """Soft-delete the live user with ``user_id``."""


class SqlUserRepository(UserRepository):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @staticmethod
    def _live(session: Session):
        return session.query(User).filter(User.deleted_at.is_(None))

    def _get_live(self, session: Session, user_id: int) -> User:
        user = self._live(session).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _commit(self, session: Session, email: str) -> None:
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if _is_unique_violation(e):
                raise EmailConflictError(email) from e
            raise

    def get_all(self) -> List[User]:
        with self._session_factory() as session:
            return self._live(session).order_by(User.id).all()

    def get_by_id(self, user_id: int) -> User:
        with self._session_factory() as session:
            return self._get_live(session, user_id)

    def create(self, user: User) -> User:
        now = utcnow()
        user.created_at = now
        user.updated_at = now
        with self._session_factory() as session:
            session.add(user)
            self._commit(session, user.email)
            session.refresh(user)
            logger.info("Created user %s (%s)", user.id, user.email)
            return user

    def update(self, user: User) -> User:
        with self._session_factory() as session:
            row = self._get_live(session, user.id)
            row.name = user.name
            row.email = user.email
            row.age = user.age
            row.updated_at = max(utcnow(), _as_utc(row.updated_at))
            self._commit(session, user.email)
            session.refresh(row)
            logger.info("Updated user %s", row.id)
            return row

    def delete(self, user_id: int) -> None:
        with self._session_factory() as session:
            row = self._get_live(session, user_id)
            row.deleted_at = utcnow()
            session.commit()
            logger.info("Soft-deleted user %s", user_id)

