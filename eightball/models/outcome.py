"""Outcome — the Ruling Engine's verdict on a completed shot."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from eightball.models.session import Player, Session


class OutcomeKind(str, Enum):
    ILLEGAL_BREAK = "illegal_break"     # Other player racks and breaks
    PLAYERS_FAULT = "players_fault"     # See FaultReason
    NEXT_SHOT = "next_shot"
    GAME_OVER = "game_over"


class FaultReason(str, Enum):
    SPOT_EIGHT_BALL = "spot_eight_ball"
    PLACE_BALL_IN_HAND = "place_ball_in_hand"


class Outcome(BaseModel):
    """
    Result of player_shot. `session` is always the session to continue
    with; `fault` is set for PLAYERS_FAULT and `winner` for GAME_OVER.
    """

    kind: OutcomeKind
    session: Session
    fault: Optional[FaultReason] = None
    winner: Optional[Player] = None
