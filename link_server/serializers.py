from link_server.models import Trip, User


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "image": user.image,
    }


def serialize_trip(trip: Trip) -> dict:
    return {
        "id": str(trip.id),
        "userId": str(trip.user_id),
        "title": trip.title,
        "description": trip.description,
        "destination": trip.destination,
        "startDate": trip.start_date.isoformat(),
        "endDate": trip.end_date.isoformat(),
        "coverImage": trip.cover_image,
        "status": trip.status,
        "isBookmarked": trip.is_bookmarked,
        "members": trip.members or [],
        "color": trip.color,
        "createdAt": trip.created_at.isoformat(),
        "updatedAt": trip.updated_at.isoformat(),
    }
