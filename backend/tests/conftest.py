"""Shared test fixtures for the filament inventory backend tests."""

import logging
import os
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest

# IMPORTANT: Set environment variables BEFORE any app imports
# This must happen before settings/config are loaded
os.environ["LOG_TO_FILE"] = "false"
os.environ["DEBUG"] = "false"
os.environ["LOW_STOCK_THRESHOLD"] = "1"

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

# Ensure settings use our env vars - import and override before database import
from backend.app.core.config import settings  # noqa: E402

settings.log_to_file = False

from backend.app.core.database import Base  # noqa: E402

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    # Import all models to register them
    from backend.app.models import filament  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def async_client(test_engine, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    from backend.app.core.database import get_db
    from backend.app.main import app

    # Create a new session maker for the test engine
    test_async_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with test_async_session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Filament Builders
# ============================================================================


def build_filament(created_at: datetime | None = None, **kwargs):
    """Build an unsaved Filament with sensible defaults."""
    from backend.app.models.filament import Filament

    defaults = {
        "brand": "Hatchbox",
        "material": "PLA",
        "color_name": "Red",
        "color_hex": "#FF0000",
        "color_family": "Red",
        "diameter": 1.75,
        "spool_weight": 1000.0,
        "quantity": 1,
    }
    defaults.update(kwargs)
    if created_at is not None:
        defaults["created_at"] = created_at
        defaults["updated_at"] = created_at
    return Filament(**defaults)


@pytest.fixture
def make_filament():
    """Builder for unsaved filaments; pass any column as a keyword."""
    return build_filament


@pytest.fixture
def sample_filaments():
    """Five filaments covering every material, status and favorite case.

    Listed oldest first: Matte Black, Ocean Blue, Fire Red, Snow White, Neon Green.
    """
    now = datetime.now(timezone.utc)
    return [
        build_filament(
            brand="Hatchbox",
            material="PLA",
            color_name="Matte Black",
            color_hex="#1A1A1A",
            color_family="Black",
            quantity=3,
            price=24.99,
            tags="matte,basic",
            favorite=True,
            created_at=now - timedelta(seconds=400),
        ),
        build_filament(
            brand="Polymaker",
            material="PETG",
            color_name="Ocean Blue",
            color_hex="#1E90FF",
            color_family="Blue",
            quantity=1,
            price=29.99,
            tags="translucent",
            created_at=now - timedelta(seconds=300),
        ),
        build_filament(
            brand="eSUN",
            material="ABS",
            color_name="Fire Red",
            color_hex="#DC2626",
            color_family="Red",
            quantity=2,
            price=19.99,
            tags="heat-resistant",
            created_at=now - timedelta(seconds=200),
        ),
        build_filament(
            brand="Hatchbox",
            material="PLA",
            color_name="Snow White",
            color_hex="#F5F5F5",
            color_family="White",
            quantity=0,
            price=22.99,
            tags="basic",
            created_at=now - timedelta(seconds=100),
        ),
        build_filament(
            brand="Polymaker",
            material="TPU",
            color_name="Neon Green",
            color_hex="#39FF14",
            color_family="Green",
            quantity=1,
            price=None,
            tags="flexible,special",
            favorite=True,
            created_at=now,
        ),
    ]


@pytest.fixture
def filament_factory(db_session):
    """Factory to create persisted test filaments."""

    async def _create_filament(**kwargs):
        filament = build_filament(**kwargs)
        db_session.add(filament)
        await db_session.commit()
        await db_session.refresh(filament)
        return filament

    return _create_filament


# ============================================================================
# Log Capture Fixtures for Error Detection
# ============================================================================


class LogCapture(logging.Handler):
    """Handler that captures log records for testing."""

    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord):
        self.records.append(record)

    def get_errors(self) -> list[logging.LogRecord]:
        """Get all ERROR and CRITICAL level records."""
        return [r for r in self.records if r.levelno >= logging.ERROR]

    def get_warnings(self) -> list[logging.LogRecord]:
        """Get all WARNING level records."""
        return [r for r in self.records if r.levelno == logging.WARNING]

    def has_errors(self) -> bool:
        return len(self.get_errors()) > 0

    def format_errors(self) -> str:
        """Format all errors as a string for assertion messages."""
        errors = self.get_errors()
        if not errors:
            return "No errors"
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")
        return "\n".join(formatter.format(r) for r in errors)


@pytest.fixture
def capture_logs():
    """Fixture that captures log output during a test.

    Usage:
        def test_something(capture_logs):
            some_function()
            assert not capture_logs.has_errors(), capture_logs.format_errors()
    """
    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    # Attach to root logger to capture all logs
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    yield handler

    root_logger.removeHandler(handler)


@pytest.fixture
def assert_no_log_errors(capture_logs):
    """Fixture that automatically asserts no errors were logged."""
    yield capture_logs

    errors = capture_logs.get_errors()
    if errors:
        pytest.fail(f"Unexpected log errors:\n{capture_logs.format_errors()}")
