"""
Shot Classifier — partitions the sub-events of one shot.

Input: every ShotEvent the physics collaborator observed between the cue
strike and the table coming to rest. An empty list means the cue struck
nothing. The classifier is stateless and knows nothing about players.
"""

import logging
from typing import List, Optional

from eightball.exceptions import EventOrderError
from eightball.models.ball import EIGHT_BALL, BallGroup, ball_group
from eightball.models.events import ShotEvent, ShotEventKind, is_timezone_aware
from eightball.models.shot import ClassifiedShot

logger = logging.getLogger(__name__)

# Contacts that make an earlier cue-ball hit count
_CONSEQUENCE_KINDS = frozenset({
    ShotEventKind.CUE_HIT_WALL,
    ShotEventKind.BALL_TO_WALL,
    ShotEventKind.BALL_TO_POCKET,
})


def in_play_order(events: List[ShotEvent]) -> List[ShotEvent]:
    """
    Events sorted by timestamp. The sort is stable, so events sharing a
    timestamp stay in the order the caller supplied them.

    Raises EventOrderError when naive and timezone-aware timestamps are mixed.
    """
    if len({is_timezone_aware(e.timestamp) for e in events}) > 1:
        raise EventOrderError(
            "Shot events mix naive and timezone-aware timestamps."
        )
    return sorted(events, key=lambda e: e.timestamp)


def first_contact_group(events: List[ShotEvent]) -> Optional[BallGroup]:
    """
    Group of the first ball the cue struck, provided something after that
    reached a rail or a pocket. Contact with no consequence is not recognised.
    """
    for i, event in enumerate(events):
        if event.kind != ShotEventKind.CUE_HIT_BALL:
            continue
        if any(later.kind in _CONSEQUENCE_KINDS for later in events[i + 1:]):
            return ball_group(event.ball)
        return None
    return None


def classify_shot(shot_events: List[ShotEvent]) -> ClassifiedShot:
    """Partition one shot's events into what the Ruling Engine needs."""
    events = in_play_order(shot_events)

    pocketed = []
    off_table = []
    rails = set()
    scratched = False

    for event in events:
        if event.kind == ShotEventKind.BALL_TO_POCKET:
            pocketed.append(event.ball)
        elif event.kind == ShotEventKind.BALL_TO_WALL:
            rails.add(event.ball)
        elif event.kind == ShotEventKind.BALL_OFF_TABLE:
            off_table.append(event.ball)
        elif event.kind == ShotEventKind.SCRATCH:
            scratched = True

    classified = ClassifiedShot(
        pocketed=pocketed,
        scratched=scratched,
        eight_pocketed=EIGHT_BALL in pocketed,
        first_contact_group=first_contact_group(events),
        rail_contacted_ball_numbers=rails,
        off_table=off_table,
    )
    logger.debug(
        "Classified %d events: pocketed=%s scratched=%s first_contact=%s rails=%d",
        len(events),
        pocketed,
        scratched,
        classified.first_contact_group.value if classified.first_contact_group else None,
        len(rails),
    )
    return classified
