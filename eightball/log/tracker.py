"""
Event Log & Phase Tracker — the session's history and its allowed next step.

Behavioral Contract:
- The log is append-only. No entry is ever modified, removed or re-sorted.
- Every transition checks the session's phase first and raises
  InvalidPhaseTransition on mismatch instead of guessing the caller's intent.
- A successful transition appends exactly one SessionEvent and returns
  a new Session; the input session is left untouched.
- Timestamps must arrive in resolved play order. An entry earlier than the
  log tail raises EventOrderError; equal timestamps keep append order.
  Mixing naive and timezone-aware timestamps also raises EventOrderError.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from eightball.exceptions import EventOrderError, InvalidPhaseTransition
from eightball.models.events import (
    SessionEvent,
    SessionEventKind,
    ShotEvent,
    is_timezone_aware,
)
from eightball.models.session import Phase, Player, Session

logger = logging.getLogger(__name__)


# operation -> (required phase, logged event, resulting phase)
_TRANSITIONS: Dict[str, Tuple[Phase, SessionEventKind, Phase]] = {
    "rack": (
        Phase.AWAITING_RACK,
        SessionEventKind.RACKED,
        Phase.AWAITING_PLACE_BALL_BEHIND_HEADSTRING,
    ),
    "place_ball_behind_headstring": (
        Phase.AWAITING_PLACE_BALL_BEHIND_HEADSTRING,
        SessionEventKind.BALL_PLACED_BEHIND_HEAD_STRING,
        Phase.AWAITING_PLAYER_SHOT,
    ),
    "place_ball_in_hand": (
        Phase.AWAITING_PLACE_BALL_IN_HAND,
        SessionEventKind.BALL_PLACED_IN_HAND,
        Phase.AWAITING_PLAYER_SHOT,
    ),
    "spot_eight_ball": (
        Phase.AWAITING_SPOT_EIGHT_BALL,
        SessionEventKind.EIGHT_BALL_SPOTTED,
        Phase.AWAITING_PLACE_BALL_BEHIND_HEADSTRING,
    ),
}


def start() -> Session:
    """A brand-new game: empty log, Player 1 to break, open table."""
    return Session()


def require_phase(session: Session, expected: Phase, operation: str) -> None:
    """Raise InvalidPhaseTransition unless the session is in `expected`."""
    if session.phase != expected:
        logger.warning(
            "Rejected %s: session is %s, expected %s",
            operation, session.phase.value, expected.value,
        )
        raise InvalidPhaseTransition(operation, expected, session.phase)


def append_event(
    session: Session,
    kind: SessionEventKind,
    timestamp: datetime,
    shot_events: Optional[List[ShotEvent]] = None,
) -> Session:
    """Return a copy of `session` with one more log entry."""
    tail = session.last_event
    if tail is not None and is_timezone_aware(timestamp) != is_timezone_aware(tail.timestamp):
        raise EventOrderError(
            f"{kind.value} at {timestamp.isoformat()} cannot be ordered against "
            f"the last logged {tail.kind.value} at {tail.timestamp.isoformat()}: "
            "naive and timezone-aware timestamps are mixed."
        )
    if tail is not None and timestamp < tail.timestamp:
        raise EventOrderError(
            f"{kind.value} at {timestamp.isoformat()} is earlier than "
            f"the last logged {tail.kind.value} at {tail.timestamp.isoformat()}."
        )
    entry = SessionEvent(
        kind=kind,
        timestamp=timestamp,
        shot_events=list(shot_events or []),
    )
    return session.model_copy(update={"log": [*session.log, entry]})


def _transition(operation: str, timestamp: datetime, session: Session) -> Session:
    expected, kind, next_phase = _TRANSITIONS[operation]
    require_phase(session, expected, operation)
    updated = append_event(session, kind, timestamp)
    logger.debug("%s: %s -> %s", operation, expected.value, next_phase.value)
    return updated.model_copy(update={"phase": next_phase})


def rack(timestamp: datetime, session: Session) -> Session:
    return _transition("rack", timestamp, session)


def place_ball_behind_headstring(timestamp: datetime, session: Session) -> Session:
    return _transition("place_ball_behind_headstring", timestamp, session)


def place_ball_in_hand(timestamp: datetime, session: Session) -> Session:
    return _transition("place_ball_in_hand", timestamp, session)


def spot_eight_ball(timestamp: datetime, session: Session) -> Session:
    return _transition("spot_eight_ball", timestamp, session)


def current_player(session: Session) -> Player:
    return session.current_player


def switch_player(session: Session) -> Session:
    return session.model_copy(
        update={"current_player": session.current_player.opponent}
    )


def is_break_shot(session: Session) -> bool:
    """A shot is a break when the cue ball was just placed behind the head string."""
    tail = session.last_event
    return (
        tail is not None
        and tail.kind == SessionEventKind.BALL_PLACED_BEHIND_HEAD_STRING
    )
