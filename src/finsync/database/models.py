"""SQLAlchemy models for the finsync local store."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    category_id = Column(String, nullable=False)
    source = Column(String, nullable=True)
    status = Column(String, nullable=False, default="paid")
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_id = Column(String, nullable=True)
    is_tithe = Column(Boolean, nullable=False, default=False)
    import_batch_id = Column(String, nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class Recurrence(Base):
    """Recurring bill or income model."""

    __tablename__ = "recurrences"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False, default="")
    category_id = Column(String, nullable=False)
    source = Column(String, nullable=True)
    frequency = Column(String, nullable=False, default="monthly")
    start_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    create_as_pending = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    icon = Column(String, nullable=True)
    position = Column(Integer, nullable=False, default=0)


class Settings(Base):
    """Settings model; a single row with id 1."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    is_tither = Column(Boolean, nullable=False, default=False)
    theme = Column(String, nullable=False, default="system")
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class SyncQueueEntry(Base):
    """Queued outbound mutation, ordered by position."""

    __tablename__ = "sync_queue"

    position = Column(Integer, primary_key=True)
    item_id = Column(String, unique=True, nullable=False)
    type = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)


class LastImportBatch(Base):
    """The single remembered import batch; a single row with id 1."""

    __tablename__ = "last_import_batch"

    id = Column(Integer, primary_key=True)
    batch_id = Column(String, nullable=False)
    count = Column(Integer, nullable=False)
    timestamp = Column(BigInteger, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
