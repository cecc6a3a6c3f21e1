"""
Legality & Target Resolution.

Decides which group each player is shooting at, whether a first contact
was legal against that target, and what the score is. Targets are derived
from the session on demand; only the TargetAssignment itself is stored.
"""

from typing import List, Optional

from eightball.exceptions import PocketedRecordError
from eightball.models.ball import BallGroup, ball_group
from eightball.models.rules import RulesConfig
from eightball.models.session import (
    Player,
    PocketedBall,
    Score,
    Session,
    TargetAssignment,
    TargetLabel,
)
from eightball.models.shot import ClassifiedShot

_DEFAULT_CONFIG = RulesConfig()

# Which first-contact group each target permits
_LEGAL_FIRST_CONTACT = {
    TargetLabel.OPEN_TABLE: {BallGroup.SOLID, BallGroup.STRIPE},
    TargetLabel.SOLIDS: {BallGroup.SOLID},
    TargetLabel.STRIPES: {BallGroup.STRIPE},
    TargetLabel.EIGHT_BALL: {BallGroup.EIGHT},
}


def group_of(player: Player, target: TargetAssignment) -> Optional[BallGroup]:
    """The group assigned to `player`, or None while the table is open."""
    if target.solids_player == player:
        return BallGroup.SOLID
    if target.stripes_player == player:
        return BallGroup.STRIPE
    return None


def _count_pocketed(session: Session, group: BallGroup) -> int:
    return sum(1 for p in session.pocketed if ball_group(p.ball) == group)


def target_for(
    player: Player,
    session: Session,
    config: RulesConfig = _DEFAULT_CONFIG,
) -> TargetLabel:
    """What `player` must hit next, given everything pocketed so far."""
    group = group_of(player, session.target)
    if group is None:
        return TargetLabel.OPEN_TABLE
    if _count_pocketed(session, group) >= config.balls_per_group:
        return TargetLabel.EIGHT_BALL
    return TargetLabel.SOLIDS if group == BallGroup.SOLID else TargetLabel.STRIPES


def current_target(session: Session, config: RulesConfig = _DEFAULT_CONFIG) -> TargetLabel:
    return target_for(session.current_player, session, config)


def current_score(session: Session) -> Score:
    """Pocketed balls of each player's group. Both zero while the table is open."""
    if session.target.is_open:
        return Score()
    solids = _count_pocketed(session, BallGroup.SOLID)
    stripes = _count_pocketed(session, BallGroup.STRIPE)
    if session.target.stripes_player == Player.PLAYER_1:
        return Score(player1=stripes, player2=solids)
    return Score(player1=solids, player2=stripes)


def check_next_target(classified: ClassifiedShot, session: Session) -> TargetAssignment:
    """
    Assign groups if this shot settles them. Only an open table changes:
    the shooter takes a group when every object ball pocketed belongs to it.
    """
    if not session.target.is_open:
        return session.target

    groups = classified.pocketed_groups
    if len(groups) != 1:
        return session.target

    shooter = session.current_player
    group = next(iter(groups))
    solids_player = shooter if group == BallGroup.SOLID else shooter.opponent
    return TargetAssignment(solids_player=solids_player)


def is_legal_hit(first_contact: Optional[BallGroup], previous_target: TargetLabel) -> bool:
    """Whether the cue ball's first recognised contact was allowed."""
    if first_contact is None:
        return False
    return first_contact in _LEGAL_FIRST_CONTACT[previous_target]


def record_pocketed(session: Session, balls: List[int], shooter: Player) -> Session:
    """Append `balls` to the pocketed record, credited to `shooter`."""
    already = {p.ball for p in session.pocketed}
    added = []
    for ball in balls:
        if ball in already:
            raise PocketedRecordError(f"Ball {ball} is already pocketed.")
        already.add(ball)
        added.append(PocketedBall(ball=ball, player=shooter))
    if not added:
        return session
    return session.model_copy(update={"pocketed": [*session.pocketed, *added]})
