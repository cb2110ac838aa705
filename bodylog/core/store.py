"""
Load and save entries against the progress_logs table.

Entries are keyed by (user_id, entry_date); saving replaces whatever was
stored for that key.
"""

import logging
from datetime import date as DateType

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bodylog.core.entry import MEASUREMENT_FIELDS, Entry
from bodylog.core.trend import TrendEntry
from bodylog.models.progress_log import ProgressLog

log = logging.getLogger(__name__)

_RECORD_COLUMNS = (
    "entry_date",
    "notes",
    "weight_lb",
    "sex",
    "body_fat_percent",
    "body_fat_mode",
    "photos",
) + tuple(f"{name}_cm" for name in MEASUREMENT_FIELDS)


class StorageError(Exception):
    """A load or save against the database failed."""


def _row_to_record(row: ProgressLog) -> dict:
    return {col: getattr(row, col) for col in _RECORD_COLUMNS}


def _get_row(db: Session, user_id: str, d: DateType) -> ProgressLog | None:
    return (
        db.query(ProgressLog)
        .filter(ProgressLog.user_id == user_id)
        .filter(ProgressLog.entry_date == d)
        .one_or_none()
    )


def load_entry(db: Session, user_id: str, d: DateType) -> tuple[Entry, bool]:
    """Return (entry, found); a blank entry when nothing is stored for that date."""
    try:
        row = _get_row(db, user_id, d)
    except SQLAlchemyError as e:
        raise StorageError(f"Loading entry {user_id}/{d} failed: {e}") from e

    if row is None:
        return Entry.blank(d), False
    return Entry.from_record(_row_to_record(row)), True


def _write(db: Session, user_id: str, record: dict) -> ProgressLog:
    row = _get_row(db, user_id, record["entry_date"])
    if row is None:
        row = ProgressLog(user_id=user_id, entry_date=record["entry_date"])
        db.add(row)

    for col, value in record.items():
        setattr(row, col, value)

    db.commit()
    return row


def save_entry(db: Session, user_id: str, entry: Entry) -> ProgressLog:
    """Upsert the entry; the last write for a (user, date) wins."""
    record = entry.to_record()
    try:
        try:
            row = _write(db, user_id, record)
        except IntegrityError:
            # another writer created the row after our lookup; overwrite it
            db.rollback()
            log.info("Entry %s/%s created concurrently; retrying as update", user_id, entry.date)
            row = _write(db, user_id, record)
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Saving entry {user_id}/{entry.date} failed: {e}") from e

    log.info(
        "Saved entry %s/%s (body fat %s, mode %s)",
        user_id,
        entry.date.isoformat(),
        record["body_fat_percent"],
        record["body_fat_mode"],
    )
    return row


def list_entry_dates(db: Session, user_id: str) -> list[DateType]:
    try:
        rows = (
            db.query(ProgressLog.entry_date)
            .filter(ProgressLog.user_id == user_id)
            .order_by(ProgressLog.entry_date)
            .all()
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Listing entries for {user_id} failed: {e}") from e
    return [r[0] for r in rows]


def load_history(db: Session, user_id: str) -> list[TrendEntry]:
    """All of a user's entries as trend rows, oldest first. Water % is not stored."""
    try:
        rows = (
            db.query(ProgressLog)
            .filter(ProgressLog.user_id == user_id)
            .order_by(ProgressLog.entry_date.asc())
            .all()
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Loading history for {user_id} failed: {e}") from e

    return [
        TrendEntry(
            date=row.entry_date,
            weight=row.weight_lb,
            body_fat=row.body_fat_percent,
        )
        for row in rows
    ]
