"""Tests for Legality & Target Resolution."""

import pytest

from eightball.exceptions import PocketedRecordError
from eightball.legality.targets import (
    check_next_target,
    current_score,
    current_target,
    group_of,
    is_legal_hit,
    record_pocketed,
    target_for,
)
from eightball.models.ball import BallGroup
from eightball.models.rules import RulesConfig
from eightball.models.session import (
    Player,
    PocketedBall,
    Session,
    TargetAssignment,
    TargetLabel,
)
from eightball.models.shot import ClassifiedShot


def _make_session(
    solids_player=None,
    pocketed=(),
    shooter: Player = Player.PLAYER_1,
) -> Session:
    return Session(
        current_player=shooter,
        target=TargetAssignment(solids_player=solids_player),
        pocketed=[PocketedBall(ball=b, player=p) for b, p in pocketed],
    )


class TestCheckNextTarget:
    def test_single_solid_assigns_shooter_solids(self):
        session = _make_session(shooter=Player.PLAYER_2)
        target = check_next_target(ClassifiedShot(pocketed=[3]), session)
        assert target.solids_player == Player.PLAYER_2

    def test_single_stripe_assigns_opponent_solids(self):
        session = _make_session(shooter=Player.PLAYER_1)
        target = check_next_target(ClassifiedShot(pocketed=[9, 14]), session)
        assert target.solids_player == Player.PLAYER_2

    def test_mixed_groups_stay_open(self):
        session = _make_session()
        target = check_next_target(ClassifiedShot(pocketed=[1, 9]), session)
        assert target.is_open

    def test_nothing_pocketed_stays_open(self):
        session = _make_session()
        assert check_next_target(ClassifiedShot(), session).is_open

    def test_eight_is_ignored_for_assignment(self):
        session = _make_session()
        target = check_next_target(ClassifiedShot(pocketed=[2, 8]), session)
        assert target.solids_player == Player.PLAYER_1

    def test_assignment_never_changes(self):
        session = _make_session(solids_player=Player.PLAYER_1, shooter=Player.PLAYER_2)
        target = check_next_target(ClassifiedShot(pocketed=[1]), session)
        assert target.solids_player == Player.PLAYER_1


class TestIsLegalHit:
    @pytest.mark.parametrize("group", [BallGroup.SOLID, BallGroup.STRIPE])
    def test_open_table_allows_either_group(self, group):
        assert is_legal_hit(group, TargetLabel.OPEN_TABLE)

    def test_open_table_forbids_eight(self):
        assert not is_legal_hit(BallGroup.EIGHT, TargetLabel.OPEN_TABLE)

    def test_solids(self):
        assert is_legal_hit(BallGroup.SOLID, TargetLabel.SOLIDS)
        assert not is_legal_hit(BallGroup.STRIPE, TargetLabel.SOLIDS)
        assert not is_legal_hit(BallGroup.EIGHT, TargetLabel.SOLIDS)

    def test_stripes(self):
        assert is_legal_hit(BallGroup.STRIPE, TargetLabel.STRIPES)
        assert not is_legal_hit(BallGroup.SOLID, TargetLabel.STRIPES)

    def test_eight_ball(self):
        assert is_legal_hit(BallGroup.EIGHT, TargetLabel.EIGHT_BALL)
        assert not is_legal_hit(BallGroup.SOLID, TargetLabel.EIGHT_BALL)

    @pytest.mark.parametrize("target", list(TargetLabel))
    def test_no_contact_is_never_legal(self, target):
        assert not is_legal_hit(None, target)


class TestCurrentTarget:
    def test_open(self):
        assert current_target(_make_session()) == TargetLabel.OPEN_TABLE

    def test_assigned_groups(self):
        session = _make_session(solids_player=Player.PLAYER_1)
        assert target_for(Player.PLAYER_1, session) == TargetLabel.SOLIDS
        assert target_for(Player.PLAYER_2, session) == TargetLabel.STRIPES
        assert group_of(Player.PLAYER_2, session.target) == BallGroup.STRIPE
        assert group_of(Player.PLAYER_1, session.target) == BallGroup.SOLID

    def test_no_group_while_open(self):
        session = _make_session()
        assert group_of(Player.PLAYER_1, session.target) is None
        assert group_of(Player.PLAYER_2, session.target) is None

    def test_cleared_group_targets_eight(self):
        session = _make_session(
            solids_player=Player.PLAYER_1,
            pocketed=[(b, Player.PLAYER_1) for b in range(1, 8)],
        )
        assert current_target(session) == TargetLabel.EIGHT_BALL
        assert target_for(Player.PLAYER_2, session) == TargetLabel.STRIPES

    def test_six_of_seven_is_not_enough(self):
        session = _make_session(
            solids_player=Player.PLAYER_1,
            pocketed=[(b, Player.PLAYER_1) for b in range(1, 7)],
        )
        assert current_target(session) == TargetLabel.SOLIDS

    def test_group_size_from_config(self):
        session = _make_session(
            solids_player=Player.PLAYER_1,
            pocketed=[(1, Player.PLAYER_1), (2, Player.PLAYER_1)],
        )
        config = RulesConfig(balls_per_group=2)
        assert current_target(session, config) == TargetLabel.EIGHT_BALL


class TestCurrentScore:
    def test_open_table_scores_nothing(self):
        session = _make_session(pocketed=[(1, Player.PLAYER_1), (9, Player.PLAYER_1)])
        score = current_score(session)
        assert (score.player1, score.player2) == (0, 0)

    def test_score_follows_groups(self):
        session = _make_session(
            solids_player=Player.PLAYER_2,
            pocketed=[
                (1, Player.PLAYER_2),
                (2, Player.PLAYER_2),
                (10, Player.PLAYER_2),  # Opponent's ball, pocketed by player 2
                (8, Player.PLAYER_2),
            ],
        )
        score = current_score(session)
        assert score.player2 == 2
        assert score.player1 == 1


class TestRecordPocketed:
    def test_append(self):
        session = record_pocketed(_make_session(), [3, 11], Player.PLAYER_1)
        assert [(p.ball, p.player) for p in session.pocketed] == [
            (3, Player.PLAYER_1),
            (11, Player.PLAYER_1),
        ]

    def test_nothing_to_record_returns_same_session(self):
        session = _make_session()
        assert record_pocketed(session, [], Player.PLAYER_1) is session

    def test_duplicate_rejected(self):
        session = _make_session(pocketed=[(3, Player.PLAYER_1)])
        with pytest.raises(PocketedRecordError):
            record_pocketed(session, [3], Player.PLAYER_2)

    def test_duplicate_within_shot_rejected(self):
        with pytest.raises(PocketedRecordError):
            record_pocketed(_make_session(), [5, 5], Player.PLAYER_1)
