"""Database setup and models for pins and comments.

This module provides the database connection, models, and utilities
for the pin store using SQLAlchemy. SQLite is used by default; any
SQLAlchemy URL can be supplied through the DATABASE_URL environment variable.
"""

import os
import uuid
from datetime import datetime, timezone

from dotenv import load_dotenv
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

load_dotenv()

# Database setup
DEFAULT_DATABASE_URL = "sqlite:///./good_samaritan.db"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

# Decimal places kept for pin coordinates (matches Numeric(10, 7)).
COORDINATE_SCALE = 7

Base = declarative_base()


def make_engine(url: str):
    """Create an engine for the given URL.

    SQLite needs cross-thread access for FastAPI's threadpool and has foreign
    keys switched off by default, so both are handled here.

    Args:
        url: SQLAlchemy database URL.

    Returns:
        Configured SQLAlchemy engine.
    """
    if url.startswith("sqlite"):
        new_engine = create_engine(url, connect_args={"check_same_thread": False})

        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds") + "Z"


class Pin(Base):
    """A user-submitted geo-tagged location.

    Attributes:
        id: UUID primary key.
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.
        title: Short title.
        description: Free text description.
        author_name: Display name supplied by the client (not verified).
        created_at: When the pin was created (UTC).
        comments: Comments attached to the pin.
    """

    __tablename__ = "pins"

    id = Column(String(36), primary_key=True, default=_new_id)
    lat = Column(Numeric(10, COORDINATE_SCALE, asdecimal=False), nullable=False)
    lng = Column(Numeric(10, COORDINATE_SCALE, asdecimal=False), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    author_name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)

    comments = relationship(
        "Comment",
        back_populates="pin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at.desc()",
    )

    def to_dict(self):
        """Convert the pin to its JSON representation.

        Returns:
            Dictionary with camelCase keys and float coordinates.
        """
        return {
            "id": self.id,
            "lat": round(float(self.lat), COORDINATE_SCALE),
            "lng": round(float(self.lng), COORDINATE_SCALE),
            "title": self.title,
            "description": self.description,
            "authorName": self.author_name,
            "createdAt": _isoformat(self.created_at) if self.created_at else None,
        }


class Comment(Base):
    """A comment in a pin's discussion thread.

    Attributes:
        id: UUID primary key.
        pin_id: Owning pin, deleted together with it.
        author_name: Display name supplied by the client (not verified).
        content: Comment text.
        created_at: When the comment was created (UTC).
    """

    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=_new_id)
    pin_id = Column(
        String(36),
        ForeignKey("pins.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_name = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)

    pin = relationship("Pin", back_populates="comments")

    def to_dict(self):
        """Convert the comment to its JSON representation.

        Returns:
            Dictionary with camelCase keys.
        """
        return {
            "id": self.id,
            "pinId": self.pin_id,
            "authorName": self.author_name,
            "content": self.content,
            "createdAt": _isoformat(self.created_at) if self.created_at else None,
        }


def get_db():
    """Dependency for getting database session.

    Yields:
        Database session that will be closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize the database by creating all tables.

    Args:
        bind: Engine to create tables on. Defaults to the application engine.
    """
    Base.metadata.create_all(bind=bind or engine)
