"""Bookmark toggling with a per-user quota."""

import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, aliased

from link_server.errors import QuotaExceeded
from link_server.models import Trip, User

logger = logging.getLogger("link")

BOOKMARK_LIMIT = 5


def count_bookmarked(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Trip.id))
        .filter(Trip.user_id == user_id, Trip.is_bookmarked == True)  # noqa: E712
        .scalar()
    )


def _unbookmark(db: Session, trip: Trip) -> Trip:
    trip.is_bookmarked = False
    trip.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(trip)
    logger.info("Bookmark removed", extra={"extra_data": {"trip_id": trip.id, "user_id": trip.user_id}})
    return trip


def toggle_bookmark(db: Session, trip: Trip) -> Trip:
    """Flip ``trip.is_bookmarked``, refusing to bookmark past BOOKMARK_LIMIT.

    The trip must already have passed the ownership check. The owner's row
    is locked and the trip re-read before deciding which way to flip, so the
    decision never rests on a stale copy. Unbookmarking always succeeds.
    Bookmarking is a single UPDATE whose WHERE clause re-counts the owner's
    bookmarks, so two concurrent requests cannot both take the last slot.
    Commits on success; on QuotaExceeded nothing has been written.
    """
    trip_id, user_id = trip.id, trip.user_id

    # Serializes toggles for the same user (no-op on SQLite, which locks the whole database)
    db.query(User.id).filter(User.id == user_id).with_for_update().first()
    db.refresh(trip)

    if trip.is_bookmarked:
        return _unbookmark(db, trip)

    sibling = aliased(Trip)
    bookmarked = (
        select(func.count(sibling.id))
        .where(sibling.user_id == user_id, sibling.is_bookmarked == True)  # noqa: E712
        .scalar_subquery()
    )
    result = db.execute(
        update(Trip)
        .where(
            Trip.id == trip_id,
            Trip.is_bookmarked == False,  # noqa: E712
            bookmarked < BOOKMARK_LIMIT,
        )
        .values(is_bookmarked=True, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        db.refresh(trip)
        # Another request bookmarked this very trip after our read
        if trip.is_bookmarked:
            return trip
        logger.info(
            "Bookmark quota exceeded",
            extra={"extra_data": {"trip_id": trip_id, "user_id": user_id, "limit": BOOKMARK_LIMIT}},
        )
        raise QuotaExceeded()

    db.commit()
    db.refresh(trip)
    logger.info("Bookmark added", extra={"extra_data": {"trip_id": trip_id, "user_id": user_id}})
    return trip
