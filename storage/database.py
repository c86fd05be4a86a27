"""
Database schema and connection management.

Relational tables for profiles, job requests, candidate notifications,
confirmations and conversations, plus a small connection manager that
hands out transactional sessions.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """Base profile shared by clients and freelancers."""

    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=new_id)
    role = Column(String, nullable=False)  # client, freelancer
    full_name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    city = Column(String, nullable=True)

    freelancer_profile = relationship(
        "FreelancerProfile", back_populates="profile", uselist=False
    )


class FreelancerProfile(Base):
    """Matching-relevant freelancer attributes."""

    __tablename__ = "freelancer_profiles"

    id = Column(String, ForeignKey("profiles.id"), primary_key=True)
    available_now = Column(Boolean, nullable=False, default=False)
    has_first_aid = Column(Boolean, nullable=False, default=False)
    newborn_experience = Column(Boolean, nullable=False, default=False)
    special_needs_experience = Column(Boolean, nullable=False, default=False)
    max_children = Column(Integer, nullable=False, default=1)
    hourly_rate_min = Column(Integer, nullable=True)
    hourly_rate_max = Column(Integer, nullable=True)
    languages = Column(JSON, nullable=False, default=list)

    profile = relationship("Profile", back_populates="freelancer_profile")


class JobRequest(Base):
    """A client's request for childcare and its matching state."""

    __tablename__ = "job_requests"

    id = Column(String, primary_key=True, default=new_id)
    client_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="ready")
    stage = Column(String, nullable=False, default="Request")

    care_type = Column(String, nullable=False)
    children_count = Column(Integer, nullable=False)
    children_age_group = Column(String, nullable=False)
    location_city = Column(String, nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=True)
    shift_hours = Column(String, nullable=True)
    languages_pref = Column(JSON, nullable=False, default=list)
    requirements = Column(JSON, nullable=False, default=list)
    budget_min = Column(Integer, nullable=True)
    budget_max = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    confirm_window_seconds = Column(Integer, nullable=False, default=90)
    confirm_starts_at = Column(DateTime(timezone=True), nullable=True)
    confirm_ends_at = Column(DateTime(timezone=True), nullable=True)
    selected_freelancer_id = Column(String, nullable=True)
    locked_at = Column(DateTime(timezone=True), nullable=True)

    # Negotiation sub-state, written by the chat layer
    offered_hourly_rate = Column(Integer, nullable=True)
    price_offer_status = Column(String, nullable=True)  # pending, accepted, declined

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class JobCandidateNotification(Base):
    """One notification per (job, freelancer) in a fan-out batch."""

    __tablename__ = "job_candidate_notifications"

    id = Column(String, primary_key=True, default=new_id)
    job_id = Column(String, ForeignKey("job_requests.id"), nullable=False, index=True)
    freelancer_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="pending")  # pending, opened
    opened_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class JobConfirmation(Base):
    """Ledger row recording a freelancer's availability for a job."""

    __tablename__ = "job_confirmations"
    __table_args__ = (UniqueConstraint("job_id", "freelancer_id"),)

    id = Column(String, primary_key=True, default=new_id)
    job_id = Column(String, ForeignKey("job_requests.id"), nullable=False, index=True)
    freelancer_id = Column(String, nullable=False)
    status = Column(String, nullable=False, default="available")  # available, declined
    note = Column(Text, nullable=True)
    is_open_job_accepted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Conversation(Base):
    """Chat thread opened between the client and the selected freelancer."""

    __tablename__ = "conversations"

    id = Column(String, primary_key=True, default=new_id)
    job_id = Column(String, ForeignKey("job_requests.id"), nullable=False, index=True)
    client_id = Column(String, nullable=False)
    freelancer_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Database:
    """Database connection manager"""

    def __init__(self):
        self._engine = None
        self._session_factory = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def init_db(self, connection_string: Optional[str] = None):
        """Initialize database connection"""
        connection_string = connection_string or "sqlite:///./nanny_match.db"

        try:
            if connection_string.startswith("sqlite"):
                # Sync routes run in a threadpool
                self._engine = create_engine(
                    connection_string,
                    connect_args={"check_same_thread": False},
                )
            else:
                self._engine = create_engine(
                    connection_string,
                    pool_size=20,
                    max_overflow=0,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                )
            self._session_factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self._engine,
            )
            logger.info("Database connection established")
        except Exception as e:
            logger.error(f"Database connection failed: {str(e)}")
            raise

    @contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations"""
        if not self._session_factory:
            self.init_db()

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database operation failed: {str(e)}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create all database tables"""
        if not self._engine:
            self.init_db()

        try:
            Base.metadata.create_all(bind=self._engine)
            logger.info("Database tables created")
        except Exception as e:
            logger.error(f"Table creation failed: {str(e)}")
            raise

    def dispose(self):
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


# Global database instance
db = Database()
