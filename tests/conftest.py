"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from api.services.job_service import job_service
from main import app
from storage.database import FreelancerProfile, Profile, db


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def database(tmp_path):
    """Point the global database at a fresh SQLite file for each test."""
    db.init_db(f"sqlite:///{tmp_path / 'test.db'}")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock(datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(job_service, "clock", fake)
    return fake


@pytest.fixture
def client(clock) -> TestClient:
    return TestClient(app)


def as_client(user_id: str = "client-1") -> dict:
    return {"X-User-Id": user_id, "X-User-Role": "client"}


def as_freelancer(user_id: str) -> dict:
    return {"X-User-Id": user_id, "X-User-Role": "freelancer"}


def add_freelancer(
    freelancer_id: str,
    city: str = "Tel Aviv",
    available_now: bool = True,
    max_children: int = 3,
    has_first_aid: bool = False,
    newborn_experience: bool = False,
    special_needs_experience: bool = False,
    rate_min: Optional[int] = None,
    rate_max: Optional[int] = None,
    languages: Optional[List[str]] = None,
    full_name: Optional[str] = None,
) -> None:
    with db.session_scope() as session:
        session.add(
            Profile(
                id=freelancer_id,
                role="freelancer",
                full_name=full_name or freelancer_id.title(),
                city=city,
            )
        )
        session.add(
            FreelancerProfile(
                id=freelancer_id,
                available_now=available_now,
                max_children=max_children,
                has_first_aid=has_first_aid,
                newborn_experience=newborn_experience,
                special_needs_experience=special_needs_experience,
                hourly_rate_min=rate_min,
                hourly_rate_max=rate_max,
                languages=languages or [],
            )
        )


@pytest.fixture
def tel_aviv_pool():
    """Three Tel Aviv freelancers, only f1 fits a 2-child first-aid job."""
    add_freelancer("f1", max_children=3, has_first_aid=True, rate_min=30, rate_max=50)
    add_freelancer("f2", max_children=1, has_first_aid=True, rate_min=40, rate_max=60)
    add_freelancer("f3", max_children=2, has_first_aid=False, rate_min=40, rate_max=60)


@pytest.fixture
def job_payload() -> dict:
    return {
        "care_type": "nanny",
        "children_count": 2,
        "children_age_group": "3-6",
        "location_city": "Tel Aviv",
        "requirements": ["first_aid"],
        "budget_min": 40,
        "budget_max": 60,
        "confirm_window_seconds": 90,
    }
