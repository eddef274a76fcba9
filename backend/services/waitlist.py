from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from core.errors import DuplicateEmailError, NotifierError
from models import WaitlistEntry
from services.notifier import Notifier
from services.waitlist_store import WaitlistStore
from utils.templates import AdminDashboardContext, DashboardRow
from utils.validation import validate_submission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaunchReport:
    success: int
    errors: int
    total: int


def submit_waitlist_entry(store: WaitlistStore, raw: Mapping[str, Any]) -> WaitlistEntry:
    submission = validate_submission(raw)

    # Fast path only; the unique constraint on insert is what actually guards races.
    if store.get_by_email(submission.email) is not None:
        raise DuplicateEmailError()

    entry = store.add(submission)
    logger.info("Waitlist signup #%s (%s)", entry.id, entry.role)
    return entry


def send_welcome_in_background(notifier: Notifier, email: str, role: str) -> None:
    """Background task body: a failed welcome email is logged and dropped."""
    try:
        notifier.send_welcome(email, role)
    except NotifierError as exc:
        logger.error("Welcome email to %s failed: %s", email, exc)
        return
    except Exception:
        logger.exception("Welcome email to %s failed", email)
        return
    logger.info("Welcome email sent to %s", email)


def notify_launch(store: WaitlistStore, notifier: Notifier) -> LaunchReport:
    pending = store.pending_notification()
    success = 0
    errors = 0
    for entry in pending:
        try:
            notifier.send_launch(entry.email)
        except NotifierError as exc:
            logger.error("Launch email to %s failed: %s", entry.email, exc)
            errors += 1
            continue
        except Exception:
            logger.exception("Launch email to %s failed", entry.email)
            errors += 1
            continue
        store.mark_notified(entry)
        success += 1

    logger.info("Launch notification finished: %s sent, %s failed, %s pending", success, errors, len(pending))
    return LaunchReport(success=success, errors=errors, total=len(pending))


def _local_time(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def build_dashboard_context(entries: Iterable[WaitlistEntry], brand_name: str, timezone_name: str) -> AdminDashboardContext:
    tz = ZoneInfo(timezone_name)
    rows: list[DashboardRow] = []
    for position, entry in enumerate(entries, start=1):
        created = _local_time(entry.created_at, tz)
        full_name = " ".join(part for part in (entry.first_name, entry.last_name) if part)
        rows.append(
            DashboardRow(
                position=position,
                full_name=full_name or "N/A",
                email=entry.email,
                phone=entry.phone or "N/A",
                role=entry.role or "unknown",
                role_display=entry.role.capitalize() if entry.role else "N/A",
                date=f"{created:%b} {created.day}, {created.year}",
                time=created.strftime("%I:%M:%S %p").lstrip("0"),
            )
        )
    return AdminDashboardContext(brand_name=brand_name, rows=rows)
