import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from link_server.bookmarks import toggle_bookmark
from link_server.database import get_db
from link_server.deps import get_identity, get_owned_trip
from link_server.errors import InvalidInput, NotFound, Unexpected
from link_server.models import Trip, User, TRIP_STATUSES
from link_server.schemas import UpdateTripIn
from link_server.security import Identity
from link_server.serializers import serialize_trip
from link_server.storage import has_upload, save_image

logger = logging.getLogger("link")

router = APIRouter()

REQUIRED_FIELDS_MESSAGE = "필수 필드를 모두 입력해주세요."


def _parse_date(value: str) -> datetime:
    """Parse an ISO date or datetime; aware values are converted to naive UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise InvalidInput(f"Invalid date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_members(value: str | None) -> list[str] | None:
    if not value:
        return None
    try:
        members = json.loads(value)
    except ValueError:
        raise InvalidInput("members must be a JSON list of names")
    if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
        raise InvalidInput("members must be a JSON list of names")
    return members


@router.get("/trips")
def list_trips(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    trips = (
        db.query(Trip)
        .filter(Trip.user_id == identity.user_id)
        .order_by(Trip.start_date.desc())
        .all()
    )
    return {"trips": [serialize_trip(t) for t in trips]}


@router.post("/trips", status_code=201)
def create_trip(
    title: str = Form(""),
    description: str = Form(""),
    destination: str = Form(""),
    start_date: str = Form("", alias="startDate"),
    end_date: str = Form("", alias="endDate"),
    status: str = Form("planning"),
    color: str = Form(""),
    members: str = Form(""),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    if not title.strip() or not destination.strip() or not start_date or not end_date:
        raise InvalidInput(REQUIRED_FIELDS_MESSAGE)
    if status not in TRIP_STATUSES:
        raise InvalidInput("Invalid status")

    start = _parse_date(start_date)
    end = _parse_date(end_date)
    if end < start:
        raise InvalidInput("endDate must not be before startDate")
    member_names = _parse_members(members)

    user = db.query(User).filter(User.id == identity.user_id).first()
    if not user:
        raise NotFound("User not found")

    cover_image_url = save_image(cover_image) if has_upload(cover_image) else None

    trip = Trip(
        user_id=user.id,
        title=title.strip(),
        description=description or None,
        destination=destination.strip(),
        start_date=start,
        end_date=end,
        cover_image=cover_image_url,
        status=status,
        members=member_names,
        color=color or None,
    )
    try:
        db.add(trip)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error creating trip", exc_info=True)
        raise Unexpected("Failed to create trip")
    db.refresh(trip)
    logger.info("Trip created", extra={"extra_data": {"trip_id": trip.id, "user_id": user.id}})
    return {"trip": serialize_trip(trip)}


@router.get("/trips/{trip_id}")
def get_trip(trip_id: str, identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    trip = get_owned_trip(trip_id, identity, db)
    return {"trip": serialize_trip(trip)}


@router.patch("/trips/{trip_id}")
def update_trip(
    trip_id: str,
    data: UpdateTripIn,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    trip = get_owned_trip(trip_id, identity, db)
    raw = data.model_dump(exclude_unset=True)

    # Required columns ignore explicit nulls; optional ones are cleared by them
    for field in ("title", "destination", "start_date", "end_date", "status"):
        if raw.get(field) is not None:
            setattr(trip, field, raw[field])
    for field in ("description", "members", "color"):
        if field in raw:
            setattr(trip, field, raw[field])

    if trip.end_date < trip.start_date:
        db.rollback()
        raise InvalidInput("endDate must not be before startDate")

    trip.updated_at = datetime.utcnow()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error updating trip", exc_info=True, extra={"extra_data": {"trip_id": trip_id}})
        raise Unexpected("Failed to update trip")
    db.refresh(trip)
    return {"trip": serialize_trip(trip)}


@router.delete("/trips/{trip_id}")
def delete_trip(trip_id: str, identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    trip = get_owned_trip(trip_id, identity, db)
    try:
        db.delete(trip)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error deleting trip", exc_info=True, extra={"extra_data": {"trip_id": trip_id}})
        raise Unexpected("Failed to delete trip")
    logger.info("Trip deleted", extra={"extra_data": {"trip_id": trip_id, "user_id": identity.user_id}})
    return {"message": "Trip deleted successfully"}


@router.patch("/trips/{trip_id}/bookmark")
def toggle_trip_bookmark(
    trip_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    trip = get_owned_trip(trip_id, identity, db)
    try:
        trip = toggle_bookmark(db, trip)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error toggling bookmark", exc_info=True, extra={"extra_data": {"trip_id": trip_id}})
        raise Unexpected("Failed to toggle bookmark")
    return {"trip": serialize_trip(trip)}
