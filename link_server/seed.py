"""Populate the database with a demo user and sample trips.

Usage: python -m link_server.seed [--email EMAIL] [--password PASSWORD]
"""

import argparse
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from link_server.database import Base, SessionLocal, engine
from link_server.logging_config import setup_logging
from link_server.models import Trip, User
from link_server.security import hash_password

logger = logging.getLogger("link")

DEMO_EMAIL = "demo@link.example"

SAMPLE_TRIPS = [
    {
        "title": "제주도 힐링 여행",
        "description": "친구들과 함께하는 제주도 3박 4일 여행",
        "destination": "제주도",
        "start_date": datetime(2024, 11, 1),
        "end_date": datetime(2024, 11, 4),
        "status": "planning",
        "is_bookmarked": False,
        "members": ["김우현", "박민수", "이지은"],
        "color": "purple",
    },
    {
        "title": "부산 바다 여행",
        "description": "가족과 함께하는 부산 해운대 여행",
        "destination": "부산",
        "start_date": datetime(2024, 12, 15),
        "end_date": datetime(2024, 12, 17),
        "status": "planning",
        "is_bookmarked": True,
        "members": ["김우현", "김엄마", "김아빠"],
        "color": "blue",
    },
    {
        "title": "서울 맛집 투어",
        "description": "서울의 유명한 맛집들을 돌아다니는 투어",
        "destination": "서울",
        "start_date": datetime(2024, 10, 20),
        "end_date": datetime(2024, 10, 20),
        "status": "completed",
        "is_bookmarked": False,
        "members": ["김우현", "최영희"],
        "color": "pink",
    },
]


def seed(db: Session, email: str = DEMO_EMAIL, password: str | None = None) -> User:
    """Replace the user with ``email`` (and their trips) by a fresh demo account."""
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        db.delete(existing)
        db.flush()

    user = User(
        email=email,
        name="김우현",
        hashed_password=hash_password(password) if password else None,
    )
    db.add(user)
    db.flush()

    for data in SAMPLE_TRIPS:
        db.add(Trip(user_id=user.id, **data))

    db.commit()
    db.refresh(user)
    logger.info(
        "Database seeded",
        extra={"extra_data": {"user_id": user.id, "trips": len(SAMPLE_TRIPS)}},
    )
    return user


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the L:nk database with demo data")
    parser.add_argument("--email", default=DEMO_EMAIL)
    parser.add_argument("--password", default=None, help="enables credential login for the demo user")
    args = parser.parse_args(argv)

    setup_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db, email=args.email.strip().lower(), password=args.password)
    finally:
        db.close()


if __name__ == "__main__":
    main()
