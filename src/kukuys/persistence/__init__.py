"""Persistence layer for the player collection and the game state singleton."""

from __future__ import annotations

import sqlite3
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional

from kukuys.config.economy import STARTING_COINS, STARTING_SLOTS
from kukuys.models import GameState, Player


_PLAYER_COLUMNS = (
    "id",
    "name",
    "tier",
    "role",
    "drafting",
    "mechanics",
    "mental_strength",
    "leadership",
    "trashtalk",
    "energy",
    "is_roster",
    "is_streaming",
    "team",
    "image_url",
    "grinding_until",
    "sleeping_until",
)
_STATE_COLUMNS = ("coins", "internet_level", "food_level", "collection_slots")
_BOOL_COLUMNS = {"is_roster", "is_streaming"}

# Columns added after the first release; older databases get them on start-up.
_PLAYER_MIGRATIONS = (
    ("image_url", "TEXT"),
    ("team", "TEXT"),
    ("grinding_until", "INTEGER"),
    ("sleeping_until", "INTEGER"),
    ("role", "TEXT"),
)
_STATE_MIGRATIONS = (
    ("collection_slots", "INTEGER NOT NULL DEFAULT 8"),
    ("last_updated", "TEXT"),
)


class GameStore:
    """Simple SQLite-backed store for players and the game state row."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "kukuys-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                self.db_path = fallback_dir / "kukuy_master.sqlite"
                conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None)
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri, timeout=10.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        conn = self._connect()
        try:
            self._create_schema(conn)
        finally:
            conn.close()

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS game_state (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                coins INTEGER NOT NULL DEFAULT 1000 CHECK (coins >= 0),
                internet_level INTEGER NOT NULL DEFAULT 1,
                food_level INTEGER NOT NULL DEFAULT 1,
                collection_slots INTEGER NOT NULL DEFAULT 8,
                last_updated TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                tier TEXT NOT NULL,
                drafting INTEGER NOT NULL,
                mechanics INTEGER NOT NULL,
                mental_strength INTEGER NOT NULL,
                leadership INTEGER NOT NULL,
                trashtalk INTEGER NOT NULL,
                energy INTEGER NOT NULL DEFAULT 100,
                is_roster INTEGER NOT NULL DEFAULT 0,
                is_streaming INTEGER NOT NULL DEFAULT 0
            )
            """
        )
        for column, column_type in _PLAYER_MIGRATIONS:
            try:
                conn.execute(f"ALTER TABLE players ADD COLUMN {column} {column_type}")
            except sqlite3.OperationalError:
                pass
        for column, column_type in _STATE_MIGRATIONS:
            try:
                conn.execute(f"ALTER TABLE game_state ADD COLUMN {column} {column_type}")
            except sqlite3.OperationalError:
                pass
        conn.execute(
            "INSERT OR IGNORE INTO game_state (id, coins, collection_slots, last_updated) VALUES (1, ?, ?, ?)",
            (STARTING_COINS, STARTING_SLOTS, _utc_now()),
        )

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold a write lock for a check-then-act sequence.

        Commits when the block exits normally and rolls back on any
        exception, so a rejected operation leaves no trace.
        """

        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    @contextmanager
    def connection(self, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
        """Reuse ``conn`` when given, otherwise run in a transaction of its own."""

        if conn is not None:
            yield conn
            return
        with self.transaction() as own:
            yield own

    # -- game state -------------------------------------------------------

    def get_state(self, conn: Optional[sqlite3.Connection] = None) -> GameState:
        with self.connection(conn) as c:
            row = c.execute("SELECT * FROM game_state WHERE id = 1").fetchone()
        if row is None:  # pragma: no cover - the row is seeded with the schema
            raise KeyError("Game state row missing")
        return self._row_to_state(row)

    def update_state(self, conn: Optional[sqlite3.Connection] = None, **values: Any) -> GameState:
        unknown = set(values) - set(_STATE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown game state fields: {sorted(unknown)}")
        with self.connection(conn) as c:
            if values:
                assignments = ", ".join(f"{column} = ?" for column in values)
                c.execute(
                    f"UPDATE game_state SET {assignments}, last_updated = ? WHERE id = 1",
                    (*values.values(), _utc_now()),
                )
            return self.get_state(c)

    def adjust_coins(self, delta: int, conn: Optional[sqlite3.Connection] = None) -> GameState:
        """Add ``delta`` coins; a result below zero raises ValueError."""

        with self.connection(conn) as c:
            state = self.get_state(c)
            if state.coins + delta < 0:
                raise ValueError(f"Coin balance {state.coins} cannot cover {-delta}")
            return self.update_state(c, coins=state.coins + delta)

    # -- players ----------------------------------------------------------

    def get_player(self, player_id: str, conn: Optional[sqlite3.Connection] = None) -> Optional[Player]:
        with self.connection(conn) as c:
            row = c.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_player(row)

    def list_players(self, conn: Optional[sqlite3.Connection] = None) -> List[Player]:
        with self.connection(conn) as c:
            rows = c.execute("SELECT * FROM players ORDER BY rowid").fetchall()
        return [self._row_to_player(row) for row in rows]

    def list_roster(self, conn: Optional[sqlite3.Connection] = None) -> List[Player]:
        with self.connection(conn) as c:
            rows = c.execute("SELECT * FROM players WHERE is_roster = 1 ORDER BY rowid").fetchall()
        return [self._row_to_player(row) for row in rows]

    def count_players(self, conn: Optional[sqlite3.Connection] = None) -> int:
        with self.connection(conn) as c:
            return int(c.execute("SELECT COUNT(*) FROM players").fetchone()[0])

    def insert_player(self, player: Player, conn: Optional[sqlite3.Connection] = None) -> Player:
        payload = player.model_dump()
        placeholders = ", ".join("?" for _ in _PLAYER_COLUMNS)
        with self.connection(conn) as c:
            c.execute(
                f"INSERT INTO players ({', '.join(_PLAYER_COLUMNS)}) VALUES ({placeholders})",
                tuple(_to_column(column, payload[column]) for column in _PLAYER_COLUMNS),
            )
            inserted = self.get_player(player.id, c)
        if inserted is None:  # pragma: no cover
            raise KeyError(f"Player {player.id} not found after insert")
        return inserted

    def update_player_fields(
        self,
        player_id: str,
        values: Mapping[str, Any],
        *,
        only_if: Mapping[str, Any] | None = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """Update selected columns of one player.

        ``only_if`` adds equality guards to the WHERE clause. Returns False
        when no row matched (unknown id or a guard no longer holds).
        """

        columns = set(values) | set(only_if or {})
        unknown = columns - set(_PLAYER_COLUMNS[1:])
        if unknown:
            raise ValueError(f"Unknown player fields: {sorted(unknown)}")
        if not values:
            return False
        assignments = ", ".join(f"{column} = ?" for column in values)
        params: list[Any] = [_to_column(column, value) for column, value in values.items()]
        where = "id = ?"
        params.append(player_id)
        for column, expected in (only_if or {}).items():
            if expected is None:
                where += f" AND {column} IS NULL"
            else:
                where += f" AND {column} = ?"
                params.append(_to_column(column, expected))
        with self.connection(conn) as c:
            cursor = c.execute(f"UPDATE players SET {assignments} WHERE {where}", tuple(params))
            return cursor.rowcount > 0

    def delete_player(self, player_id: str, conn: Optional[sqlite3.Connection] = None) -> bool:
        with self.connection(conn) as c:
            cursor = c.execute("DELETE FROM players WHERE id = ?", (player_id,))
            return cursor.rowcount > 0

    def reset(self, conn: Optional[sqlite3.Connection] = None) -> GameState:
        """Delete every player and restore the starting game state."""

        with self.connection(conn) as c:
            c.execute("DELETE FROM players")
            return self.update_state(
                c,
                coins=STARTING_COINS,
                collection_slots=STARTING_SLOTS,
                internet_level=1,
                food_level=1,
            )

    def _row_to_player(self, row: sqlite3.Row) -> Player:
        data = {column: row[column] for column in _PLAYER_COLUMNS}
        for column in _BOOL_COLUMNS:
            data[column] = bool(data[column])
        return Player(**data)

    def _row_to_state(self, row: sqlite3.Row) -> GameState:
        return GameState(
            coins=row["coins"],
            internet_level=row["internet_level"],
            food_level=row["food_level"],
            collection_slots=row["collection_slots"],
            last_updated=row["last_updated"],
        )


def _to_column(column: str, value: Any) -> Any:
    if column in _BOOL_COLUMNS:
        return int(bool(value))
    return value


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
