import asyncio
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from judging.core.exceptions import StoreError
from judging.db.base import Base
from judging.db.init_db import init_db
from judging.db.session import get_db
from judging.models.category import Category
from judging.models.submission import Submission
from judging.schemas.review import ScoreRecord, SubmissionForReview
from judging.services.scheduler import Scheduler, TimerHandle
from judging.services.stores import RankingStore, ScoreStore


class ManualTimer(TimerHandle):
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Fake clock: timers only fire when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds):
        self.now += seconds
        due = sorted(
            (t for t in self.timers if not t.cancelled and t.due <= self.now),
            key=lambda t: t.due,
        )
        self.timers = [t for t in self.timers if t not in due and not t.cancelled]
        for timer in due:
            timer.callback()

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]


class FakeScoreStore(ScoreStore):
    """Records upserts; can hold requests open or make them fail."""

    def __init__(self):
        self.calls = []
        self.records = {}
        self.outstanding = 0
        self.max_outstanding = 0
        self.hold = False
        self.fail = False
        self._release = asyncio.Event()

    def release(self):
        self._release.set()

    async def upsert_review(self, submission_id, rating, feedback):
        self.calls.append((submission_id, rating, feedback))
        self.outstanding += 1
        self.max_outstanding = max(self.max_outstanding, self.outstanding)
        try:
            if self.hold:
                await self._release.wait()
                self._release.clear()
            if self.fail:
                raise StoreError("store unavailable")
            record = ScoreRecord(submission_id=submission_id, rating=rating, feedback=feedback)
            self.records[submission_id] = record
            return record
        finally:
            self.outstanding -= 1


class FakeRankingStore(RankingStore):
    def __init__(self, existing=None):
        self.existing = list(existing or [])
        self.saved = []
        self.fail = False
        self.fail_load = False
        self.hold = False
        self._release = asyncio.Event()

    def release(self):
        self._release.set()

    async def get_rankings(self, category_id, judge_id):
        if self.fail_load:
            raise StoreError("store unavailable")
        return list(self.existing)

    async def save_rankings(self, category_id, judge_id, entries):
        self.saved.append((category_id, judge_id, list(entries)))
        if self.hold:
            await self._release.wait()
        if self.fail:
            raise StoreError("store unavailable")
        self.existing = list(entries)


async def settle(rounds=10):
    """Let pending tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def make_submission(id, rating=None, feedback=None, status="submitted", minutes=0):
    return SubmissionForReview(
        id=id,
        media_type="photo",
        media_url=f"https://media.example.com/{id}.jpg",
        status=status,
        submitted_at=datetime(2025, 3, 1, 12, 0) + timedelta(minutes=minutes),
        participant_code=f"P-{id}",
        review_id=f"review-{id}" if rating is not None or feedback else None,
        rating=rating,
        feedback=feedback,
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def score_store():
    return FakeScoreStore()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    init_db(db)
    db.close()
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def category(db):
    category = Category(id="cat-1", name="Short Film")
    db.add(category)
    db.add_all([
        Submission(id="sub-9", category_id="cat-1", participant_code="A-001",
                   submitted_at=datetime(2025, 3, 1, 9, 0)),
        Submission(id="sub-7", category_id="cat-1", participant_code="A-002",
                   submitted_at=datetime(2025, 3, 1, 10, 0)),
        Submission(id="sub-5", category_id="cat-1", participant_code="A-003",
                   submitted_at=datetime(2025, 3, 1, 11, 0)),
        Submission(id="sub-dq", category_id="cat-1", participant_code="A-004",
                   status="disqualified", submitted_at=datetime(2025, 3, 1, 12, 0)),
    ])
    db.commit()
    return category


@pytest.fixture
def client(session_factory):
    from judging.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
