"""
Shot and session events.

ShotEvents are produced by the physics collaborator, one per detected
contact during a shot. SessionEvents make up the append-only session log.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class ShotEventKind(str, Enum):
    CUE_HIT_BALL = "cue_hit_ball"
    CUE_HIT_WALL = "cue_hit_wall"
    BALL_TO_POCKET = "ball_to_pocket"
    BALL_TO_WALL = "ball_to_wall"
    BALL_OFF_TABLE = "ball_off_table"
    SCRATCH = "scratch"


# Kinds that name the object ball involved
BALL_EVENT_KINDS = frozenset({
    ShotEventKind.CUE_HIT_BALL,
    ShotEventKind.BALL_TO_POCKET,
    ShotEventKind.BALL_TO_WALL,
    ShotEventKind.BALL_OFF_TABLE,
})


class ShotEvent(BaseModel):
    """A single contact observed during one shot."""

    kind: ShotEventKind
    timestamp: datetime
    ball: Optional[int] = Field(default=None, ge=1, le=15)

    @model_validator(mode="after")
    def _check_ball(self) -> "ShotEvent":
        if self.kind in BALL_EVENT_KINDS and self.ball is None:
            raise ValueError(f"{self.kind.value} requires a ball")
        if self.kind not in BALL_EVENT_KINDS and self.ball is not None:
            raise ValueError(f"{self.kind.value} does not take a ball")
        return self


class SessionEventKind(str, Enum):
    RACKED = "racked"
    BALL_PLACED_BEHIND_HEAD_STRING = "ball_placed_behind_head_string"
    BALL_PLACED_IN_HAND = "ball_placed_in_hand"
    EIGHT_BALL_SPOTTED = "eight_ball_spotted"
    SHOT = "shot"
    GAME_OVER = "game_over"


class SessionEvent(BaseModel):
    """One entry of the session log."""

    kind: SessionEventKind
    timestamp: datetime
    shot_events: List[ShotEvent] = []       # Only populated for SHOT


def is_timezone_aware(when: datetime) -> bool:
    """Naive and aware datetimes cannot be ordered against each other."""
    return when.tzinfo is not None and when.utcoffset() is not None


# --- Constructors used by the physics bridge ---

def cue_hit_ball(when: datetime, ball: int) -> ShotEvent:
    return ShotEvent(kind=ShotEventKind.CUE_HIT_BALL, timestamp=when, ball=ball)


def cue_hit_wall(when: datetime) -> ShotEvent:
    return ShotEvent(kind=ShotEventKind.CUE_HIT_WALL, timestamp=when)


def ball_fell_in_pocket(when: datetime, ball: int) -> ShotEvent:
    return ShotEvent(kind=ShotEventKind.BALL_TO_POCKET, timestamp=when, ball=ball)


def ball_hit_wall(when: datetime, ball: int) -> ShotEvent:
    return ShotEvent(kind=ShotEventKind.BALL_TO_WALL, timestamp=when, ball=ball)


def ball_off_table(when: datetime, ball: int) -> ShotEvent:
    return ShotEvent(kind=ShotEventKind.BALL_OFF_TABLE, timestamp=when, ball=ball)


def scratch(when: datetime) -> ShotEvent:
    """The cue ball was pocketed or left the table."""
    return ShotEvent(kind=ShotEventKind.SCRATCH, timestamp=when)
