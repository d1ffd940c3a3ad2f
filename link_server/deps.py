import logging

from fastapi import Request
from sqlalchemy.orm import Session

from link_server.errors import Forbidden, NotFound, Unauthenticated
from link_server.models import Trip, User
from link_server.security import Identity

logger = logging.getLogger("link")


def get_identity(request: Request) -> Identity:
    """Dependency: the caller's identity, or 401 when there is no valid session."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise Unauthenticated()
    return identity


def get_optional_identity(request: Request) -> Identity | None:
    return getattr(request.state, "identity", None)


def get_owned_trip(trip_id: str, identity: Identity, db: Session) -> Trip:
    """Load a trip and check that ``identity`` owns it.

    Raises NotFound when the trip does not exist and Forbidden when it
    belongs to someone else.
    """
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFound("Trip not found")
    if trip.user_id != identity.user_id:
        logger.warning(
            "Trip ownership check failed",
            extra={"extra_data": {"trip_id": trip_id, "user_id": identity.user_id}},
        )
        raise Forbidden()
    return trip


def get_current_user(identity: Identity, db: Session) -> User:
    user = db.query(User).filter(User.id == identity.user_id).first()
    if not user:
        raise NotFound("User not found")
    return user
