from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import DuplicateEmailError, StoreError
from db.session import get_db
from models import WaitlistEntry
from utils.validation import WaitlistSubmission

logger = logging.getLogger(__name__)


class WaitlistStore:
    """Persistence for waitlist entries over one SQLAlchemy session.

    Every SQLAlchemy failure is rolled back and re-raised as ``StoreError``,
    except unique-constraint violations on insert, which become
    ``DuplicateEmailError``.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _fail(self, action: str, exc: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.exception("Waitlist store failed to %s", action)
        return StoreError()

    def get_by_email(self, email: str) -> WaitlistEntry | None:
        try:
            return self.db.scalar(select(WaitlistEntry).where(WaitlistEntry.email == email))
        except SQLAlchemyError as exc:
            raise self._fail("look up email", exc) from exc

    def add(self, submission: WaitlistSubmission) -> WaitlistEntry:
        entry = WaitlistEntry(
            email=submission.email,
            role=submission.role.value,
            first_name=submission.first_name,
            last_name=submission.last_name,
            phone=submission.phone,
        )
        self.db.add(entry)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateEmailError() from exc
        except SQLAlchemyError as exc:
            raise self._fail("insert entry", exc) from exc
        self.db.refresh(entry)
        return entry

    def count(self) -> int:
        try:
            return self.db.scalar(select(func.count()).select_from(WaitlistEntry)) or 0
        except SQLAlchemyError as exc:
            raise self._fail("count entries", exc) from exc

    def list_entries(self) -> list[WaitlistEntry]:
        query = select(WaitlistEntry).order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc())
        try:
            return list(self.db.scalars(query).all())
        except SQLAlchemyError as exc:
            raise self._fail("list entries", exc) from exc

    def pending_notification(self) -> list[WaitlistEntry]:
        query = select(WaitlistEntry).where(WaitlistEntry.notified.is_(False)).order_by(WaitlistEntry.id)
        try:
            return list(self.db.scalars(query).all())
        except SQLAlchemyError as exc:
            raise self._fail("select pending entries", exc) from exc

    def mark_notified(self, entry: WaitlistEntry) -> None:
        entry.notified = True
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("mark entry notified", exc) from exc

    def clear(self) -> int:
        try:
            result = self.db.execute(delete(WaitlistEntry))
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("clear entries", exc) from exc
        return result.rowcount or 0


def get_store(db: Session = Depends(get_db)) -> WaitlistStore:
    return WaitlistStore(db)
