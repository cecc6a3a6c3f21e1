"""Game Record — the permanent entry for one finished game."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from eightball.models.events import SessionEvent
from eightball.models.session import PocketedBall, Player, Score


class GameRecord(BaseModel):
    """
    The System of Record entry. One per finished game.
    Carries everything needed to replay the game from its log.
    """

    id: str
    table_id: Optional[str] = None

    # RESULT
    winner: Player
    final_score: Score
    shot_count: int

    # HISTORY
    log: List[SessionEvent]
    pocketed: List[PocketedBall]
    solids_player: Optional[Player] = None
    finished_at: datetime

    # INTEGRITY
    signature: str = ""
    prior_record_hash: Optional[str] = None
