"""
SQLite storage backend for engine state.

Uses aiosqlite for async operations. Scores and nodes are stored as
pydantic JSON so every field round-trips unchanged.
"""

from datetime import datetime

import aiosqlite

from node_memory.config import StorageConfig
from node_memory.models.archive import ForgottenNode
from node_memory.models.node import ActiveNode, Interaction, InteractionKind
from node_memory.models.score import ForgettingParameters, RetentionScore
from node_memory.storage.base import BaseRetentionStorage, EngineState, StorageError


# SQL Schema
SCHEMA = """
-- Key/value settings (parameters, score pass metadata)
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at TEXT
);

-- Latest retention score per active node
CREATE TABLE IF NOT EXISTS retention_scores (
    node_id TEXT PRIMARY KEY,
    overall_score REAL NOT NULL,
    should_forget INTEGER DEFAULT 0,
    score_json TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_overall_score ON retention_scores(overall_score);

-- Archive of forgotten nodes
CREATE TABLE IF NOT EXISTS forgotten_nodes (
    id TEXT PRIMARY KEY,
    node_id TEXT NOT NULL UNIQUE,
    content TEXT NOT NULL,
    node_type TEXT NOT NULL,
    created_at TEXT NOT NULL,
    forgotten_at TEXT NOT NULL,
    reason TEXT NOT NULL,
    memory_score REAL DEFAULT 0.0,
    is_pinned INTEGER DEFAULT 0,
    is_ai_generated INTEGER DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_forgotten_at ON forgotten_nodes(forgotten_at);

-- Interaction log
CREATE TABLE IF NOT EXISTS interactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    node_id TEXT NOT NULL,
    kind TEXT NOT NULL,
    at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_interaction_node ON interactions(node_id);

-- Active nodes known to the engine
CREATE TABLE IF NOT EXISTS active_nodes (
    id TEXT PRIMARY KEY,
    node_json TEXT NOT NULL
);
"""

PARAMETERS_KEY = "forgetting_parameters"
SCORES_COMPUTED_AT_KEY = "scores_computed_at"
STATE_SAVED_KEY = "state_saved_at"


def _serialize_datetime(dt: datetime) -> str:
    """Serialize datetime to ISO format string."""
    return dt.isoformat()


def _deserialize_datetime(s: str) -> datetime:
    """Deserialize datetime from ISO format string."""
    return datetime.fromisoformat(s)


class SQLiteRetentionStorage(BaseRetentionStorage):
    """
    SQLite-based storage for engine state.

    Usage:
        async with SQLiteRetentionStorage(StorageConfig(sqlite_path=path)) as storage:
            await storage.save_state(engine.export_state())
    """

    def __init__(self, config: StorageConfig | None = None):
        self.config = config or StorageConfig()
        self.db_path = self.config.sqlite_path
        self._connection: aiosqlite.Connection | None = None
        self._connected = False

    async def connect(self) -> None:
        """Initialize connection and create schema."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self._connection = await aiosqlite.connect(str(self.db_path))
            self._connection.row_factory = aiosqlite.Row

            await self._connection.executescript(SCHEMA)
            await self._connection.commit()

            self._connected = True
        except Exception as e:
            raise StorageError(f"Failed to connect to SQLite: {e}") from e

    async def disconnect(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
        self._connected = False

    async def is_connected(self) -> bool:
        """Check if storage is connected."""
        return self._connected and self._connection is not None

    def _ensure_connected(self) -> None:
        """Raise error if not connected."""
        if not self._connected:
            raise StorageError("Not connected to database")

    # Settings

    async def _set_setting(self, key: str, value: str | None, now: str) -> None:
        await self._connection.execute(
            "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, now),
        )

    async def _get_setting(self, key: str) -> str | None:
        async with self._connection.execute(
            "SELECT value FROM settings WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
        return row["value"] if row else None

    async def save_parameters(self, parameters: ForgettingParameters) -> None:
        """Persist only the forgetting parameters."""
        self._ensure_connected()
        try:
            await self._set_setting(
                PARAMETERS_KEY,
                parameters.model_dump_json(),
                _serialize_datetime(datetime.now().astimezone()),
            )
            await self._connection.commit()
        except Exception as e:
            await self._connection.rollback()
            raise StorageError(f"Failed to save parameters: {e}") from e

    async def load_parameters(self) -> ForgettingParameters | None:
        """Load the forgetting parameters, or None if never saved."""
        self._ensure_connected()
        raw = await self._get_setting(PARAMETERS_KEY)
        if raw is None:
            return None
        return ForgettingParameters.model_validate_json(raw)

    # Row conversion

    def _forgotten_to_row(self, entry: ForgottenNode) -> tuple:
        return (
            entry.id,
            entry.node_id,
            entry.content,
            entry.node_type.value,
            _serialize_datetime(entry.created_at),
            _serialize_datetime(entry.forgotten_at),
            entry.reason,
            entry.memory_score,
            1 if entry.is_pinned else 0,
            1 if entry.is_ai_generated else 0,
        )

    def _row_to_forgotten(self, row: aiosqlite.Row) -> ForgottenNode:
        return ForgottenNode(
            id=row["id"],
            node_id=row["node_id"],
            content=row["content"],
            node_type=row["node_type"],
            created_at=_deserialize_datetime(row["created_at"]),
            forgotten_at=_deserialize_datetime(row["forgotten_at"]),
            reason=row["reason"],
            memory_score=row["memory_score"],
            is_pinned=bool(row["is_pinned"]),
            is_ai_generated=bool(row["is_ai_generated"]),
        )

    # Full state

    async def save_state(self, state: EngineState) -> None:
        """Replace the stored state in one transaction."""
        self._ensure_connected()
        now = _serialize_datetime(datetime.now().astimezone())

        try:
            await self._set_setting(PARAMETERS_KEY, state.parameters.model_dump_json(), now)
            await self._set_setting(
                SCORES_COMPUTED_AT_KEY,
                _serialize_datetime(state.scores_computed_at) if state.scores_computed_at else None,
                now,
            )
            await self._set_setting(STATE_SAVED_KEY, now, now)

            await self._connection.execute("DELETE FROM retention_scores")
            await self._connection.executemany(
                "INSERT INTO retention_scores (node_id, overall_score, should_forget, score_json) "
                "VALUES (?, ?, ?, ?)",
                [
                    (node_id, score.overall_score, 1 if score.should_forget else 0, score.model_dump_json())
                    for node_id, score in state.scores.items()
                ],
            )

            await self._connection.execute("DELETE FROM forgotten_nodes")
            await self._connection.executemany(
                "INSERT INTO forgotten_nodes (id, node_id, content, node_type, created_at, "
                "forgotten_at, reason, memory_score, is_pinned, is_ai_generated) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [self._forgotten_to_row(entry) for entry in state.archive],
            )

            await self._connection.execute("DELETE FROM interactions")
            await self._connection.executemany(
                "INSERT INTO interactions (node_id, kind, at) VALUES (?, ?, ?)",
                [
                    (event.node_id, event.kind.value, _serialize_datetime(event.at))
                    for event in state.interactions
                ],
            )

            await self._connection.execute("DELETE FROM active_nodes")
            await self._connection.executemany(
                "INSERT INTO active_nodes (id, node_json) VALUES (?, ?)",
                [(node.id, node.model_dump_json()) for node in state.active_nodes],
            )

            await self._connection.commit()
        except Exception as e:
            await self._connection.rollback()
            raise StorageError(f"Failed to save engine state: {e}") from e

    async def load_state(self) -> EngineState | None:
        """Load the stored state, or None if nothing was saved yet."""
        self._ensure_connected()

        if await self._get_setting(STATE_SAVED_KEY) is None:
            return None

        parameters = await self.load_parameters() or ForgettingParameters()
        computed_at_raw = await self._get_setting(SCORES_COMPUTED_AT_KEY)

        async with self._connection.execute("SELECT node_id, score_json FROM retention_scores") as cursor:
            score_rows = await cursor.fetchall()
        async with self._connection.execute(
            "SELECT * FROM forgotten_nodes ORDER BY forgotten_at, id"
        ) as cursor:
            archive_rows = await cursor.fetchall()
        async with self._connection.execute(
            "SELECT node_id, kind, at FROM interactions ORDER BY id"
        ) as cursor:
            interaction_rows = await cursor.fetchall()
        async with self._connection.execute("SELECT node_json FROM active_nodes") as cursor:
            node_rows = await cursor.fetchall()

        return EngineState(
            parameters=parameters,
            scores={
                row["node_id"]: RetentionScore.model_validate_json(row["score_json"])
                for row in score_rows
            },
            scores_computed_at=_deserialize_datetime(computed_at_raw) if computed_at_raw else None,
            archive=[self._row_to_forgotten(row) for row in archive_rows],
            interactions=[
                Interaction(
                    node_id=row["node_id"],
                    kind=InteractionKind(row["kind"]),
                    at=_deserialize_datetime(row["at"]),
                )
                for row in interaction_rows
            ],
            active_nodes=[ActiveNode.model_validate_json(row["node_json"]) for row in node_rows],
        )

    async def count_archived(self) -> int:
        """Number of archived nodes currently stored."""
        self._ensure_connected()
        async with self._connection.execute("SELECT COUNT(*) AS n FROM forgotten_nodes") as cursor:
            row = await cursor.fetchone()
        return row["n"]
