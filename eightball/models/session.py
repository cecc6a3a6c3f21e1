"""Session — the aggregate root owned by the game loop."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from eightball.models.events import SessionEvent


class Player(str, Enum):
    PLAYER_1 = "player1"
    PLAYER_2 = "player2"

    @property
    def opponent(self) -> "Player":
        return Player.PLAYER_2 if self is Player.PLAYER_1 else Player.PLAYER_1


class Phase(str, Enum):
    """Which session-level transition is currently allowed."""
    AWAITING_RACK = "awaiting_rack"
    AWAITING_PLACE_BALL_BEHIND_HEADSTRING = "awaiting_place_ball_behind_headstring"
    AWAITING_PLAYER_SHOT = "awaiting_player_shot"
    AWAITING_PLACE_BALL_IN_HAND = "awaiting_place_ball_in_hand"
    AWAITING_SPOT_EIGHT_BALL = "awaiting_spot_eight_ball"
    AWAITING_START = "awaiting_start"       # Terminal


class TargetLabel(str, Enum):
    OPEN_TABLE = "open_table"
    SOLIDS = "solids"
    STRIPES = "stripes"
    EIGHT_BALL = "eight_ball"


class TargetAssignment(BaseModel):
    """Open until a player claims a group; never reverts once assigned."""

    solids_player: Optional[Player] = None

    @property
    def is_open(self) -> bool:
        return self.solids_player is None

    @property
    def stripes_player(self) -> Optional[Player]:
        if self.solids_player is None:
            return None
        return self.solids_player.opponent


class PocketedBall(BaseModel):
    """A ball and the player whose shot pocketed it."""

    ball: int = Field(ge=1, le=15)
    player: Player


class Score(BaseModel):
    player1: int = 0
    player2: int = 0


class Session(BaseModel):
    """
    One game between two players.

    Transition functions never mutate a Session; they return a copy
    with fresh lists, so a caller holding the old value keeps it intact.
    """

    phase: Phase = Phase.AWAITING_RACK
    current_player: Player = Player.PLAYER_1
    log: List[SessionEvent] = []
    pocketed: List[PocketedBall] = []
    target: TargetAssignment = TargetAssignment()

    @property
    def last_event(self) -> Optional[SessionEvent]:
        return self.log[-1] if self.log else None
