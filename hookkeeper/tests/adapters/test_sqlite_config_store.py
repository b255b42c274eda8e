"""Integration tests for the SQLite hook configuration repository."""

import tempfile
from pathlib import Path

import aiosqlite
import pytest

from hookkeeper.adapters.store.sqlite import SQLiteHookConfigRepository
from hookkeeper.core.models import Credential, HookConfiguration


@pytest.fixture
def temp_db() -> Path:
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp) / "hookkeeper.db"


@pytest.fixture
def repository(temp_db: Path) -> SQLiteHookConfigRepository:
    return SQLiteHookConfigRepository(db_path=str(temp_db))


@pytest.mark.asyncio
async def test_load_empty_database_returns_none(
    repository: SQLiteHookConfigRepository,
) -> None:
    assert await repository.load() is None


@pytest.mark.asyncio
async def test_save_and_load_configuration(
    repository: SQLiteHookConfigRepository,
) -> None:
    config = HookConfiguration(
        manage_hook=False,
        hook_url_override="https://hooks.example.net/github-webhook/",
        credentials=(
            Credential("https://api.github.com", "ci-bot", "ghp_secret"),
            Credential("https://ghe.example.com/api/v3", "ghe-bot"),
        ),
    )

    await repository.save(config)
    loaded = await repository.load()

    assert loaded == config


@pytest.mark.asyncio
async def test_save_replaces_previous_configuration(
    repository: SQLiteHookConfigRepository, temp_db: Path
) -> None:
    await repository.save(HookConfiguration(False, "https://a.example.com/", ()))
    await repository.save(HookConfiguration(True, None, ()))

    assert await repository.load() == HookConfiguration()

    async with aiosqlite.connect(str(temp_db)) as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM hook_config")
        (count,) = await cursor.fetchone()
    assert count == 1


@pytest.mark.asyncio
async def test_configuration_survives_new_repository_instance(temp_db: Path) -> None:
    config = HookConfiguration(True, None, (Credential("https://api.github.com", "bot", "t"),))
    await SQLiteHookConfigRepository(str(temp_db)).save(config)

    assert await SQLiteHookConfigRepository(str(temp_db)).load() == config


@pytest.mark.asyncio
async def test_corrupt_credentials_raise_value_error(
    repository: SQLiteHookConfigRepository, temp_db: Path
) -> None:
    await repository.save(HookConfiguration())
    async with aiosqlite.connect(str(temp_db)) as conn:
        await conn.execute("UPDATE hook_config SET credentials_json = 'not json'")
        await conn.commit()

    with pytest.raises(ValueError, match="Row parsing failed"):
        await repository.load()
