from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from link_server.config import DATABASE_URL

# SQLite connections are shared with the threadpool that runs sync routes
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Session:  # type: ignore[misc]
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
