"""
Game History Store — append-only, cryptographically chained record of finished games.

Every finished game produces one GameRecord.

Behavioral Contract:
- Append-only. No record is ever modified or deleted.
- Each record is hashed and chained to the previous record (tamper-evident ledger).
- Every record carries the full session log, so the game can be replayed.
- Queryable by id, winner, table and recency.
"""

import hashlib
import json
import logging
import sqlite3
import threading
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from eightball.legality.targets import current_score
from eightball.models.events import SessionEventKind
from eightball.models.history import GameRecord
from eightball.models.outcome import Outcome, OutcomeKind
from eightball.models.session import Player

logger = logging.getLogger(__name__)


def record_from_outcome(outcome: Outcome, table_id: Optional[str] = None) -> GameRecord:
    """Build an unsigned GameRecord from a GAME_OVER outcome."""
    if outcome.kind != OutcomeKind.GAME_OVER or outcome.winner is None:
        raise ValueError(
            f"Only a finished game can be recorded, got {outcome.kind.value}."
        )
    session = outcome.session
    return GameRecord(
        id=f"game_{uuid4().hex[:12]}",
        table_id=table_id,
        winner=outcome.winner,
        final_score=current_score(session),
        shot_count=sum(1 for e in session.log if e.kind == SessionEventKind.SHOT),
        log=session.log,
        pocketed=session.pocketed,
        solids_player=session.target.solids_player,
        finished_at=session.log[-1].timestamp,
    )


def _compute_signature(record: GameRecord) -> str:
    record_dict = record.model_dump(mode="json")
    # Zero out signature before hashing (it's what we're computing)
    record_dict["signature"] = ""
    record_bytes = json.dumps(record_dict, sort_keys=True, default=str).encode()
    return hashlib.sha256(record_bytes).hexdigest()


class GameHistoryStore:
    """
    Append-only game history.
    SQLite; pass a file path to keep history across restarts.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()  # One append at a time
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the games table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS games (
                id TEXT PRIMARY KEY,
                table_id TEXT,
                winner TEXT NOT NULL,
                shot_count INTEGER NOT NULL,
                finished_at TEXT NOT NULL,
                signature TEXT NOT NULL,
                prior_record_hash TEXT,
                record_json TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_games_winner ON games(winner)
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_games_table_id ON games(table_id)
        """)
        self._conn.commit()

    def append(self, record: GameRecord) -> GameRecord:
        """
        Append a game record. Computes its hash and chains
        it to the previous record.
        """
        with self._lock:
            record.prior_record_hash = self._get_latest_hash()
            record.signature = _compute_signature(record)

            self._conn.execute(
                """
                INSERT INTO games (
                    id, table_id, winner, shot_count, finished_at,
                    signature, prior_record_hash, record_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.table_id,
                    record.winner.value,
                    record.shot_count,
                    record.finished_at.isoformat(),
                    record.signature,
                    record.prior_record_hash,
                    json.dumps(record.model_dump(mode="json"), default=str),
                ),
            )
            self._conn.commit()
        logger.info(
            "Recorded game %s: %s won in %d shots",
            record.id, record.winner.value, record.shot_count,
        )
        return record

    def _get_latest_hash(self) -> Optional[str]:
        """Get the signature of the most recent record."""
        row = self._conn.execute(
            "SELECT signature FROM games ORDER BY rowid DESC LIMIT 1"
        ).fetchone()
        return row["signature"] if row else None

    def _deserialize(self, row: sqlite3.Row) -> GameRecord:
        return GameRecord.model_validate_json(row["record_json"])

    def get_by_id(self, record_id: str) -> Optional[GameRecord]:
        row = self._conn.execute(
            "SELECT record_json FROM games WHERE id = ?", (record_id,)
        ).fetchone()
        return self._deserialize(row) if row else None

    def query_by_winner(self, winner: Player) -> List[GameRecord]:
        rows = self._conn.execute(
            "SELECT record_json FROM games WHERE winner = ? ORDER BY rowid",
            (winner.value,),
        ).fetchall()
        return [self._deserialize(r) for r in rows]

    def query_by_table(self, table_id: str) -> List[GameRecord]:
        """All games played on one table, oldest first."""
        rows = self._conn.execute(
            "SELECT record_json FROM games WHERE table_id = ? ORDER BY rowid",
            (table_id,),
        ).fetchall()
        return [self._deserialize(r) for r in rows]

    def query_recent(self, limit: int = 50) -> List[GameRecord]:
        """Get the most recent game records, oldest first."""
        rows = self._conn.execute(
            "SELECT record_json FROM games ORDER BY rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._deserialize(r) for r in reversed(rows)]

    def verify_chain_integrity(self) -> bool:
        """Verify no records have been tampered with."""
        rows = self._conn.execute(
            "SELECT record_json, signature FROM games ORDER BY rowid"
        ).fetchall()

        prior_sig = None
        for row in rows:
            record = GameRecord.model_validate_json(row["record_json"])
            if record.signature != row["signature"]:
                return False
            if _compute_signature(record) != record.signature:
                return False
            if record.prior_record_hash != prior_sig:
                return False
            prior_sig = record.signature

        return True

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) as cnt FROM games").fetchone()
        return row["cnt"]

    def close(self) -> None:
        self._conn.close()
