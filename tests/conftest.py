import pytest
import pytest_asyncio

# ============================================================================
# Global State
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Give every test a fresh event bus and settings cache."""
    from rivo_player.config.settings import clear_settings_cache
    from rivo_player.domain.shared.events import reset_event_bus

    reset_event_bus()
    clear_settings_cache()
    yield
    reset_event_bus()
    clear_settings_cache()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from rivo_player.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def track_cache(in_memory_database):
    """Create a SQLite track cache with in-memory database."""
    from rivo_player.infrastructure.persistence.repositories.track_repository import (
        SQLiteTrackRepository,
    )

    return SQLiteTrackRepository(in_memory_database)


@pytest_asyncio.fixture
async def ledger_repository(in_memory_database):
    """Create a play ledger repository with in-memory database."""
    from rivo_player.infrastructure.persistence.repositories.ledger_repository import (
        SQLitePlayLedgerRepository,
    )

    return SQLitePlayLedgerRepository(in_memory_database)


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    from rivo_player.domain.music.entities import Track
    from rivo_player.domain.music.value_objects import TrackId

    return Track(
        id=TrackId("65f1c0ffee0000000000abcd"),
        title="Test Track",
        artist="Test Artist",
        artist_id="artist-1",
        path="https://cdn.rivo.test/music/test.mp3",
        duration_seconds=180,
    )


@pytest.fixture
def sample_tracks():
    """Create a small queue of tracks."""
    from rivo_player.domain.music.entities import Track
    from rivo_player.domain.music.value_objects import TrackId

    return [
        Track(
            id=TrackId(f"track-{i}"),
            title=f"Track {i}",
            artist="Queue Artist",
            path=f"https://cdn.rivo.test/music/{i}.mp3",
            duration_seconds=200,
        )
        for i in range(4)
    ]


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def playback_settings(tmp_path):
    """Playback settings with no retry delay and a temporary cache directory."""
    from rivo_player.config.settings import PlaybackSettings

    return PlaybackSettings(
        fallback_retry_delay_seconds=0.0,
        tick_interval_seconds=0.01,
        cache_dir=tmp_path / "music_cache",
    )


@pytest.fixture
def backend_settings():
    """Backend settings with fast retries."""
    from pydantic import SecretStr

    from rivo_player.config.settings import BackendSettings

    return BackendSettings(
        base_url="https://api.rivo.test",
        token=SecretStr("secret-token"),
        report_max_attempts=3,
        report_backoff_base_seconds=0.0,
    )
