"""Keyed document store for user records.

Each user is one ``UserDocument`` row. Writes carry the revision the record was
loaded with and only land while that revision is still current. Otherwise another
request saved in between and the write is refused with ``StaleRecord``.
"""

import logging

from fastapi import Depends
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .database import get_session
from .exceptions import Conflict, IOFailure, NotFound, StaleRecord
from .models import UserDocument, UserRecord, utcnow

logger = logging.getLogger(__name__)


class UserStore:

    def __init__(self, session: Session):
        self.session = session

    def _fetch(self, username: str):
        statement = select(UserDocument).where(UserDocument.username == username)
        # Always re-read the row, the session may hold an older copy
        statement = statement.execution_options(populate_existing=True)
        return self.session.exec(statement).first()

    def exists(self, username: str) -> bool:
        try:
            return self._fetch(username) is not None
        except SQLAlchemyError as e:
            logger.exception("Could not check user %s", username)
            raise IOFailure() from e

    def load(self, username: str) -> UserRecord:
        try:
            row = self._fetch(username)
        except SQLAlchemyError as e:
            logger.exception("Could not load user %s", username)
            raise IOFailure() from e
        if row is None:
            raise NotFound("User does not exist")
        record = UserRecord.model_validate(row.data)
        record.revision = row.revision
        return record

    def create(self, record: UserRecord) -> UserRecord:
        if self.exists(record.username):
            raise Conflict("Username already exists")
        row = UserDocument(
            username=record.username,
            revision=1,
            data=_serialize(record),
        )
        try:
            self.session.add(row)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("Username already exists")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Could not create user %s", record.username)
            raise IOFailure() from e
        record.revision = row.revision
        return record

    def save(self, record: UserRecord) -> UserRecord:
        # The revision check and the write are one statement
        statement = (
            update(UserDocument)
            .where(UserDocument.username == record.username)
            .where(UserDocument.revision == record.revision)
            .values(data=_serialize(record), revision=record.revision + 1, updated_at=utcnow())
        )
        try:
            result = self.session.connection().execute(statement)
            if result.rowcount == 0:
                self.session.rollback()
                if not self.exists(record.username):
                    raise NotFound("User does not exist")
                logger.warning(
                    "Stale write for %s: revision %s is no longer current",
                    record.username, record.revision,
                )
                raise StaleRecord(record.username)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Could not save user %s", record.username)
            raise IOFailure() from e
        record.revision += 1
        return record


def _serialize(record: UserRecord) -> dict:
    return record.model_dump(mode="json", by_alias=True, exclude={"revision"})


def get_store(session: Session = Depends(get_session)) -> UserStore:
    """
    A FastAPI dependency wrapping the request's database session in a UserStore.
    """
    return UserStore(session)
