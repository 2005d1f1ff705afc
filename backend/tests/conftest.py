"""
DevCamper Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest imports this module before any test module, so the
       environment below is in place before `app.config.settings` is built.

Fixture Hierarchy (all function-scoped):
    ├── engine:          in-memory SQLite (aiosqlite, StaticPool) with all tables
    ├── db_session:      AsyncSession on that engine
    ├── geocoder:        FakeGeocoder with a few known addresses/zipcodes
    ├── make_bootcamp / make_course: row factories
    ├── publisher / other_publisher / admin / plain_user: Actor + token
    └── test_client:     HTTPX AsyncClient with DB and geocoder overridden
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEOCODER_API_KEY"] = "test-key-not-real"
os.environ["FILE_UPLOAD_PATH"] = tempfile.mkdtemp(prefix="devcamper_test_")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from typing import AsyncGenerator, Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db_session
from app.dependencies import Actor, get_geocoder
from app.models import Bootcamp, Course
from app.security import create_access_token
from app.services.geocoder_base import GeocodeResult, Geocoder


# ══════════════════════════════════════════════════════════════════════════
# Geocoder double
# ══════════════════════════════════════════════════════════════════════════

BOSTON = GeocodeResult(
    latitude=42.3505,
    longitude=-71.1054,
    formatted_address="233 Bay State Rd, Boston, MA 02215, US",
    street="233 Bay State Rd",
    city="Boston",
    state="MA",
    zipcode="02215",
    country_code="US",
)
CAMBRIDGE = GeocodeResult(
    latitude=42.3736,
    longitude=-71.1097,
    formatted_address="1 Massachusetts Ave, Cambridge, MA 02138, US",
    street="1 Massachusetts Ave",
    city="Cambridge",
    state="MA",
    zipcode="02138",
    country_code="US",
)
NEW_YORK = GeocodeResult(
    latitude=40.7128,
    longitude=-74.0060,
    formatted_address="45 Upper College Rd, New York, NY 10001, US",
    street="45 Upper College Rd",
    city="New York",
    state="NY",
    zipcode="10001",
    country_code="US",
)


class FakeGeocoder(Geocoder):
    """Answers from a fixed table; unknown queries have no match."""

    def __init__(self, table: Dict[str, List[GeocodeResult]]):
        self.table = table
        self.calls: List[str] = []

    async def geocode(self, query: str) -> List[GeocodeResult]:
        self.calls.append(query)
        return list(self.table.get(query, []))

    @property
    def configured(self) -> bool:
        return True


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder(
        {
            "233 Bay State Rd Boston MA 02215": [BOSTON],
            "1 Massachusetts Ave Cambridge MA 02138": [CAMBRIDGE],
            "45 Upper College Rd New York NY 10001": [NEW_YORK],
            "02215": [BOSTON],
            "10001": [NEW_YORK],
        }
    )


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """
    In-memory SQLite shared by every session of one test.

    StaticPool keeps a single connection, so the schema created here is the
    one every session (fixture or request) sees.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Actors
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def publisher() -> Actor:
    return Actor(id=uuid.uuid4(), role="publisher")


@pytest.fixture
def other_publisher() -> Actor:
    return Actor(id=uuid.uuid4(), role="publisher")


@pytest.fixture
def admin() -> Actor:
    return Actor(id=uuid.uuid4(), role="admin")


@pytest.fixture
def plain_user() -> Actor:
    return Actor(id=uuid.uuid4(), role="user")


def auth_header(actor: Actor) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(actor.id, actor.role)}"}


# ══════════════════════════════════════════════════════════════════════════
# Row factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_bootcamp(db_session):
    """
    Insert a bootcamp and commit.

    Usage:
        bootcamp = await make_bootcamp(name="Devworks", careers=["Business"])
    """
    counter = {"n": 0}

    async def _make(location: GeocodeResult = BOSTON, **overrides) -> Bootcamp:
        counter["n"] += 1
        fields = {
            "name": f"Bootcamp {counter['n']}",
            "slug": f"bootcamp-{counter['n']}",
            "description": "Full stack web development",
            "careers": ["Web Development"],
            "user_id": uuid.uuid4(),
            "longitude": location.longitude,
            "latitude": location.latitude,
            "formatted_address": location.formatted_address,
            "street": location.street,
            "city": location.city,
            "state": location.state,
            "zipcode": location.zipcode,
            "country": location.country_code,
        }
        fields.update(overrides)
        bootcamp = Bootcamp(**fields)
        db_session.add(bootcamp)
        await db_session.commit()
        return bootcamp

    return _make


@pytest.fixture
def make_course(db_session):
    async def _make(bootcamp: Bootcamp, **overrides) -> Course:
        fields = {
            "title": "Front End Web Development",
            "description": "HTML, CSS and JavaScript",
            "weeks": "8",
            "tuition": 8000,
            "minimum_skill": "beginner",
            "bootcamp_id": bootcamp.id,
            "user_id": bootcamp.user_id,
        }
        fields.update(overrides)
        course = Course(**fields)
        db_session.add(course)
        await db_session.commit()
        return course

    return _make


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG: SOI marker + JFIF header + EOI marker.

    Not a real picture, but libmagic reports it as image/jpeg.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, geocoder):
    """
    HTTPX AsyncClient against the FastAPI app.

    Each request gets its own session on the test engine (commit on success,
    rollback on error, like get_db_session) and the FakeGeocoder.
    """
    from app.main import app

    async def _override_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_db
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
