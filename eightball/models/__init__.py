"""Eight-ball rules kernel data models."""

from eightball.models.ball import EIGHT_BALL, BallGroup, ball_group
from eightball.models.events import (
    SessionEvent,
    SessionEventKind,
    ShotEvent,
    ShotEventKind,
    ball_fell_in_pocket,
    ball_hit_wall,
    ball_off_table,
    cue_hit_ball,
    cue_hit_wall,
    is_timezone_aware,
    scratch,
)
from eightball.models.history import GameRecord
from eightball.models.outcome import FaultReason, Outcome, OutcomeKind
from eightball.models.rules import RulesConfig
from eightball.models.session import (
    Phase,
    Player,
    PocketedBall,
    Score,
    Session,
    TargetAssignment,
    TargetLabel,
)
from eightball.models.shot import ClassifiedShot

__all__ = [
    "EIGHT_BALL",
    "BallGroup",
    "ClassifiedShot",
    "FaultReason",
    "GameRecord",
    "Outcome",
    "OutcomeKind",
    "Phase",
    "Player",
    "PocketedBall",
    "RulesConfig",
    "Score",
    "Session",
    "SessionEvent",
    "SessionEventKind",
    "ShotEvent",
    "ShotEventKind",
    "TargetAssignment",
    "TargetLabel",
    "ball_fell_in_pocket",
    "ball_group",
    "ball_hit_wall",
    "ball_off_table",
    "cue_hit_ball",
    "cue_hit_wall",
    "is_timezone_aware",
    "scratch",
]
