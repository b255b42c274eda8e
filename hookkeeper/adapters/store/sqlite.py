"""SQLite hook configuration repository.

Implements HookConfigRepositoryPort using SQLite with aiosqlite for async
access. The configuration lives in a single row that is replaced on save.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from hookkeeper.core.models import Credential, HookConfiguration
from hookkeeper.core.ports import HookConfigRepositoryPort

logger = logging.getLogger(__name__)

_ROW_ID = 1


class SQLiteHookConfigRepository(HookConfigRepositoryPort):
    """SQLite-backed storage for the hook configuration."""

    def __init__(self, db_path: str):
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._schema_lock = asyncio.Lock()
        self._schema_initialized = False

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        """
        async with self._schema_lock:
            if self._schema_initialized:
                return

            async with aiosqlite.connect(str(self.db_path)) as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS hook_config (
                        id INTEGER PRIMARY KEY CHECK (id = 1),
                        manage_hook INTEGER NOT NULL DEFAULT 1,
                        hook_url TEXT,
                        credentials_json TEXT NOT NULL DEFAULT '[]'
                    )
                    """
                )
                await conn.commit()
            self._schema_initialized = True

    async def load(self) -> HookConfiguration | None:
        """Load the stored configuration, or None if nothing was saved."""
        await self._init_schema()

        async with aiosqlite.connect(str(self.db_path)) as conn:
            cursor = await conn.execute(
                "SELECT manage_hook, hook_url, credentials_json FROM hook_config WHERE id = ?",
                (_ROW_ID,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_config(row)

    async def save(self, config: HookConfiguration) -> None:
        """Replace the stored configuration."""
        await self._init_schema()

        credentials_json = json.dumps([c.to_dict() for c in config.credentials])
        async with aiosqlite.connect(str(self.db_path)) as conn:
            await conn.execute(
                """
                INSERT OR REPLACE INTO hook_config
                (id, manage_hook, hook_url, credentials_json)
                VALUES (?, ?, ?, ?)
                """,
                (
                    _ROW_ID,
                    1 if config.manage_hook else 0,
                    config.hook_url_override,
                    credentials_json,
                ),
            )
            await conn.commit()
        logger.debug(f"Saved hook configuration to {self.db_path}")

    @staticmethod
    def _row_to_config(row: Any) -> HookConfiguration:
        """Convert a database row to a HookConfiguration.

        Raises:
            ValueError: If the row cannot be parsed.
        """
        try:
            manage_hook, hook_url, credentials_json = row
            credentials = tuple(
                Credential.from_dict(item) for item in json.loads(credentials_json)
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Row parsing failed: {e}") from e

        return HookConfiguration(
            manage_hook=bool(manage_hook),
            hook_url_override=hook_url,
            credentials=credentials,
        )
