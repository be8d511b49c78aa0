"""
Tests for automatic selections and full-match simulation
"""
import random

from crease.engine import match_controller as mc
from crease.engine.autopilot import choose_bowler, choose_openers, nominate_super_over, play_match
from crease.engine.match_controller import MatchStatus
from crease.engine.bowler_rotation import max_overs_per_bowler

from factories import create_test_team


class TestSelections:
    """Default picks"""

    def test_openers(self):
        assert choose_openers(list(create_test_team(1, 1).playing_xi)) == (1, 2)

    def test_best_bowler(self):
        match = mc.record_toss(mc.create_match(create_test_team(1, 1), create_test_team(2, 101)), 1, "bat")
        match = mc.start_first_innings(match, 1, 2)
        assert choose_bowler(match) == 111

    def test_super_over_nominees(self):
        nominees = nominate_super_over(create_test_team(1, 1))
        assert nominees.batsman_ids == (1, 2)
        assert nominees.bowler_id == 11


class TestPlayMatch:
    """Whole matches respect the laws of the game"""

    def test_seeded_match_finishes(self):
        seen = []
        match = play_match(
            create_test_team(1, 1), create_test_team(2, 101), overs=5,
            rng=random.Random(3), on_ball=lambda m, e: seen.append(e),
        )

        assert match.is_finished
        assert match.status == MatchStatus.COMPLETED
        assert len(seen) == len(match.first_innings.ball_log) + len(match.second_innings.ball_log)
        for innings in (match.first_innings, match.second_innings):
            assert innings.is_completed
            assert innings.legal_balls <= 30
            assert innings.wickets <= 10

    def test_seed_is_repeatable(self):
        first = play_match(create_test_team(1, 1), create_test_team(2, 101), overs=5, rng=random.Random(9))
        second = play_match(create_test_team(1, 1), create_test_team(2, 101), overs=5, rng=random.Random(9))
        assert first.result == second.result
        assert first.first_innings.ball_log == second.first_innings.ball_log

    def test_bowling_laws(self):
        match = play_match(create_test_team(1, 1), create_test_team(2, 101), overs=20, rng=random.Random(21))
        for innings in (match.first_innings, match.second_innings):
            bowlers_by_over = {}
            for event in innings.ball_log:
                bowlers_by_over[event.over] = event.bowler
            overs = sorted(bowlers_by_over)
            for previous, current in zip(overs, overs[1:]):
                assert bowlers_by_over[previous] != bowlers_by_over[current]
            for bowler in innings.bowling_card:
                assert bowler.legal_balls_bowled <= max_overs_per_bowler(20) * 6
