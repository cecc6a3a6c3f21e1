"""
Ruling Engine — decides what a completed shot means.

Orchestrates the Phase Tracker, the Shot Classifier and Target Resolution.

Behavioral Contract:
- Accepts the full, time-ordered list of ShotEvents for one shot, once,
  after the table has come to rest. Partial shots are never observed.
- Accepts a session only in AWAITING_PLAYER_SHOT.
- Returns an Outcome carrying the session to continue with. The input
  session is never modified.
- Pure and synchronous: no I/O, no hidden state between calls.
"""

import logging
from datetime import datetime
from typing import List, Optional

from eightball.classifier.shot import classify_shot, in_play_order
from eightball.legality.targets import (
    check_next_target,
    current_score,
    current_target,
    is_legal_hit,
    record_pocketed,
    target_for,
)
from eightball.log import tracker
from eightball.models.ball import BallGroup, ball_group
from eightball.models.events import SessionEvent, SessionEventKind, ShotEvent
from eightball.models.outcome import FaultReason, Outcome, OutcomeKind
from eightball.models.rules import RulesConfig
from eightball.models.session import Phase, Player, Score, Session, TargetLabel
from eightball.models.shot import ClassifiedShot

logger = logging.getLogger(__name__)

_FAULT_PHASES = {
    FaultReason.SPOT_EIGHT_BALL: Phase.AWAITING_SPOT_EIGHT_BALL,
    FaultReason.PLACE_BALL_IN_HAND: Phase.AWAITING_PLACE_BALL_IN_HAND,
}

_TARGET_GROUPS = {
    TargetLabel.SOLIDS: BallGroup.SOLID,
    TargetLabel.STRIPES: BallGroup.STRIPE,
}


def _shooter_continues(classified: ClassifiedShot, previous_target: TargetLabel) -> bool:
    """Whether the shooter stays at the table after a shot without a foul."""
    if classified.scratched:
        return False
    balls = classified.object_balls_pocketed
    if not balls:
        return False
    if previous_target == TargetLabel.OPEN_TABLE:
        return len(classified.pocketed_groups) == 1
    group = _TARGET_GROUPS.get(previous_target)
    if group is None:
        return False
    return any(ball_group(b) == group for b in balls)


class RulingEngine:
    """
    The rules engine for one ruleset configuration.

    Holds no session state; every method takes a session and returns
    a new one, so one engine can serve any number of tables.
    """

    def __init__(self, config: Optional[RulesConfig] = None):
        self.config = config or RulesConfig()

    # --- Session workflow ---

    def start(self) -> Session:
        return tracker.start()

    def rack(self, timestamp: datetime, session: Session) -> Session:
        return tracker.rack(timestamp, session)

    def place_ball_behind_headstring(self, timestamp: datetime, session: Session) -> Session:
        return tracker.place_ball_behind_headstring(timestamp, session)

    def place_ball_in_hand(self, timestamp: datetime, session: Session) -> Session:
        return tracker.place_ball_in_hand(timestamp, session)

    def spot_eight_ball(self, timestamp: datetime, session: Session) -> Session:
        return tracker.spot_eight_ball(timestamp, session)

    # --- Read-only views ---

    def current_player(self, session: Session) -> Player:
        return tracker.current_player(session)

    def current_target(self, session: Session) -> TargetLabel:
        return current_target(session, self.config)

    def current_score(self, session: Session) -> Score:
        return current_score(session)

    # --- Shots ---

    def player_shot(
        self,
        shot_events: List[ShotEvent],
        session: Session,
        logged_at: Optional[datetime] = None,
    ) -> Outcome:
        """
        Rule on one completed shot.

        The SHOT entry is logged at `logged_at` when given, otherwise at the
        first event's time (or the previous entry's time for an empty shot).

        1. Break shot: illegal break, or the eight ball off the table.
        2. Update target assignment and pocketed record.
        3. Eight ball pocketed ends the game.
        4. Fouls hand the table to the opponent.
        5. Otherwise the next shot, by the shooter or the opponent.
        """
        tracker.require_phase(session, Phase.AWAITING_PLAYER_SHOT, "player_shot")

        events = in_play_order(shot_events)
        if logged_at is not None:
            shot_time = logged_at
        elif events:
            shot_time = events[0].timestamp
        else:
            shot_time = session.last_event.timestamp
        shooter = session.current_player
        classified = classify_shot(events)

        # 1. Break shot
        if tracker.is_break_shot(session):
            rails = len(classified.rail_contacted_ball_numbers)
            nothing_pocketed = not classified.pocketed and not classified.scratched
            if rails < self.config.min_break_rail_contacts and nothing_pocketed:
                logged = tracker.append_event(session, SessionEventKind.SHOT, shot_time)
                racking = tracker.switch_player(logged).model_copy(
                    update={"phase": Phase.AWAITING_RACK}
                )
                logger.info(
                    "Illegal break by %s: %d rail contacts, nothing pocketed",
                    shooter.value, rails,
                )
                return Outcome(kind=OutcomeKind.ILLEGAL_BREAK, session=racking)

            if classified.eight_off_table:
                logged = tracker.append_event(
                    session, SessionEventKind.SHOT, shot_time, events
                )
                scored = self._apply_pockets(classified, logged, shooter)
                return self._fault(scored, FaultReason.SPOT_EIGHT_BALL)

        # 2. Regular shot
        logged = tracker.append_event(session, SessionEventKind.SHOT, shot_time, events)
        previous_target = target_for(shooter, logged, self.config)
        scored = self._apply_pockets(classified, logged, shooter)
        legal_hit = is_legal_hit(classified.first_contact_group, previous_target)

        # 3. Eight ball down
        if classified.eight_pocketed:
            end_time = events[-1].timestamp if events else shot_time
            cleared = target_for(shooter, scored, self.config) == TargetLabel.EIGHT_BALL
            if cleared and not classified.scratched and legal_hit:
                winner = shooter
            else:
                winner = shooter.opponent
            return self._game_over(scored, winner, end_time)

        # 4. Fouls
        if classified.eight_off_table:
            return self._fault(scored, FaultReason.SPOT_EIGHT_BALL)
        if classified.scratched or not legal_hit or classified.object_balls_off_table:
            return self._fault(scored, FaultReason.PLACE_BALL_IN_HAND)

        # 5. Next shot
        if _shooter_continues(classified, previous_target):
            next_session = scored
        else:
            next_session = tracker.switch_player(scored)
        logger.debug(
            "Next shot: %s (target %s)",
            next_session.current_player.value,
            self.current_target(next_session).value,
        )
        return Outcome(kind=OutcomeKind.NEXT_SHOT, session=next_session)

    def _apply_pockets(
        self, classified: ClassifiedShot, session: Session, shooter: Player
    ) -> Session:
        """Settle the target assignment, then credit the pocketed balls."""
        assigned = session.model_copy(
            update={"target": check_next_target(classified, session)}
        )
        return record_pocketed(assigned, classified.pocketed, shooter)

    def _fault(self, session: Session, reason: FaultReason) -> Outcome:
        faulted = tracker.switch_player(session).model_copy(
            update={"phase": _FAULT_PHASES[reason]}
        )
        logger.info(
            "Foul by %s: %s", session.current_player.value, reason.value
        )
        return Outcome(kind=OutcomeKind.PLAYERS_FAULT, session=faulted, fault=reason)

    def _game_over(self, session: Session, winner: Player, timestamp: datetime) -> Outcome:
        finished = tracker.append_event(
            session, SessionEventKind.GAME_OVER, timestamp
        ).model_copy(update={"phase": Phase.AWAITING_START})
        logger.info("Game over: %s wins", winner.value)
        return Outcome(kind=OutcomeKind.GAME_OVER, session=finished, winner=winner)

    # --- Replay ---

    def replay(self, entries: List[SessionEvent]) -> Outcome:
        """
        Rebuild a game by feeding a recorded log back through the workflow.

        Returns the outcome of the last shot, or a NEXT_SHOT outcome wrapping
        the rebuilt session when the log ends between shots. GAME_OVER
        entries are produced by the shot that caused them and are skipped.
        """
        session = self.start()
        last: Optional[Outcome] = None
        for entry in entries:
            if entry.kind == SessionEventKind.RACKED:
                session = self.rack(entry.timestamp, session)
            elif entry.kind == SessionEventKind.BALL_PLACED_BEHIND_HEAD_STRING:
                session = self.place_ball_behind_headstring(entry.timestamp, session)
            elif entry.kind == SessionEventKind.BALL_PLACED_IN_HAND:
                session = self.place_ball_in_hand(entry.timestamp, session)
            elif entry.kind == SessionEventKind.EIGHT_BALL_SPOTTED:
                session = self.spot_eight_ball(entry.timestamp, session)
            elif entry.kind == SessionEventKind.SHOT:
                last = self.player_shot(entry.shot_events, session, entry.timestamp)
                session = last.session
                continue
            else:
                continue
            last = None

        if last is not None:
            return last
        return Outcome(kind=OutcomeKind.NEXT_SHOT, session=session)


# --- Module-level API on the default ruleset ---

_default_engine = RulingEngine()


def start() -> Session:
    return _default_engine.start()


def rack(timestamp: datetime, session: Session) -> Session:
    return _default_engine.rack(timestamp, session)


def place_ball_behind_headstring(timestamp: datetime, session: Session) -> Session:
    return _default_engine.place_ball_behind_headstring(timestamp, session)


def place_ball_in_hand(timestamp: datetime, session: Session) -> Session:
    return _default_engine.place_ball_in_hand(timestamp, session)


def spot_eight_ball(timestamp: datetime, session: Session) -> Session:
    return _default_engine.spot_eight_ball(timestamp, session)


def player_shot(shot_events: List[ShotEvent], session: Session) -> Outcome:
    return _default_engine.player_shot(shot_events, session)


def replay(entries: List[SessionEvent]) -> Outcome:
    return _default_engine.replay(entries)


def current_player(session: Session) -> Player:
    return _default_engine.current_player(session)
