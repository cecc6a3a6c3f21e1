"""
Eight-Ball Kernel API — FastAPI endpoints.

The surface the game loop and physics bridge drive:
- Table lifecycle (open, inspect, close)
- Session transitions (rack, place the cue ball, spot the eight)
- Shot rulings
- Game history queries
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from eightball.exceptions import EventOrderError, InvalidPhaseTransition, PocketedRecordError
from eightball.history.store import GameHistoryStore, record_from_outcome
from eightball.models.events import ShotEvent
from eightball.models.outcome import OutcomeKind
from eightball.models.rules import RulesConfig
from eightball.models.session import Session
from eightball.ruling.engine import RulingEngine
from eightball.tables.store import TableStore

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class TransitionRequest(BaseModel):
    timestamp: datetime


class ShotRequest(BaseModel):
    events: List[ShotEvent] = []


# --- Application Factory ---

def create_app(
    table_store: Optional[TableStore] = None,
    history_store: Optional[GameHistoryStore] = None,
    rules_config: Optional[RulesConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Eight-Ball Kernel API",
        description="Two-player 8-ball rules engine",
        version="0.1.0",
    )

    tables = table_store or TableStore()
    history = history_store or GameHistoryStore()
    engine = RulingEngine(rules_config)

    app.state.table_store = tables
    app.state.history_store = history
    app.state.engine = engine

    def _get_session(table_id: str) -> Session:
        session = tables.get(table_id)
        if session is None:
            raise HTTPException(404, "Table not found")
        return session

    def _view(table_id: str, session: Session) -> dict:
        return {
            "id": table_id,
            "session": session.model_dump(mode="json"),
            "current_player": engine.current_player(session).value,
            "current_target": engine.current_target(session).value,
            "score": engine.current_score(session).model_dump(),
        }

    def _apply(
        table_id: str,
        transition: Callable[[datetime, Session], Session],
        req: TransitionRequest,
    ) -> dict:
        with tables.hold(table_id) as session:
            if session is None:
                raise HTTPException(404, "Table not found")
            try:
                updated = transition(req.timestamp, session)
            except InvalidPhaseTransition as e:
                raise HTTPException(409, str(e))
            except EventOrderError as e:
                raise HTTPException(422, str(e))
            tables.replace(table_id, updated)
        return _view(table_id, updated)

    # === TABLES ===

    @app.post("/tables")
    def open_table():
        """Start a new game on a new table."""
        session = engine.start()
        table_id = tables.open_table(session)
        logger.info("Opened %s", table_id)
        return _view(table_id, session)

    @app.get("/tables")
    def list_tables():
        result = []
        for table_id in tables.table_ids():
            session = tables.get(table_id)
            if session is None:
                continue  # Closed while listing
            result.append({
                "id": table_id,
                "phase": session.phase.value,
                "current_player": session.current_player.value,
            })
        return result

    @app.get("/tables/{table_id}")
    def get_table(table_id: str):
        return _view(table_id, _get_session(table_id))

    @app.delete("/tables/{table_id}")
    def close_table(table_id: str):
        if not tables.close_table(table_id):
            raise HTTPException(404, "Table not found")
        return {"status": "closed", "table_id": table_id}

    # === SESSION TRANSITIONS ===

    @app.post("/tables/{table_id}/rack")
    def rack(table_id: str, req: TransitionRequest):
        return _apply(table_id, engine.rack, req)

    @app.post("/tables/{table_id}/place-behind-headstring")
    def place_behind_headstring(table_id: str, req: TransitionRequest):
        return _apply(table_id, engine.place_ball_behind_headstring, req)

    @app.post("/tables/{table_id}/place-in-hand")
    def place_in_hand(table_id: str, req: TransitionRequest):
        return _apply(table_id, engine.place_ball_in_hand, req)

    @app.post("/tables/{table_id}/spot-eight-ball")
    def spot_eight_ball(table_id: str, req: TransitionRequest):
        return _apply(table_id, engine.spot_eight_ball, req)

    # === SHOTS ===

    @app.post("/tables/{table_id}/shot")
    def shot(table_id: str, req: ShotRequest):
        """Rule on a completed shot. Finished games are written to history."""
        with tables.hold(table_id) as session:
            if session is None:
                raise HTTPException(404, "Table not found")
            try:
                outcome = engine.player_shot(req.events, session)
            except InvalidPhaseTransition as e:
                raise HTTPException(409, str(e))
            except (EventOrderError, PocketedRecordError) as e:
                raise HTTPException(422, str(e))

            tables.replace(table_id, outcome.session)
            record = None
            if outcome.kind == OutcomeKind.GAME_OVER:
                record = history.append(record_from_outcome(outcome, table_id=table_id))

        response = {
            "outcome": outcome.kind.value,
            "fault": outcome.fault.value if outcome.fault else None,
            "winner": outcome.winner.value if outcome.winner else None,
            "table": _view(table_id, outcome.session),
        }
        if record is not None:
            response["record_id"] = record.id
        return response

    # === HISTORY ===

    @app.get("/history")
    def get_history(limit: int = 50):
        return [r.model_dump(mode="json") for r in history.query_recent(limit=limit)]

    @app.get("/history/verify")
    def verify_history():
        return {
            "integrity_valid": history.verify_chain_integrity(),
            "total_records": history.count(),
        }

    @app.get("/history/{record_id}")
    def get_history_record(record_id: str):
        record = history.get_by_id(record_id)
        if record is None:
            raise HTTPException(404, "Game record not found")
        return record.model_dump(mode="json")

    # === RULES ===

    @app.get("/rules/config")
    def get_rules_config():
        return engine.config.model_dump()

    return app


# Default application instance
app = create_app()
