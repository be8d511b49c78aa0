"""
Tests for the match controller: setup, toss, innings hand-over, results,
man of the match and impact substitutions.
"""
from dataclasses import replace

import pytest

from crease.engine import match_controller as mc
from crease.engine.autopilot import play_innings
from crease.engine.errors import InvalidSelection
from crease.engine.innings import Innings
from crease.engine.match_controller import MatchStatus
from crease.engine.state import Player

from factories import (
    DOT, SINGLE, DOUBLE, FOUR, WICKET,
    ScriptedModel, ScriptedRandom, create_mock_player, create_test_team,
    match_with_substitution,
)


def _new_match(overs=20):
    return mc.create_match(create_test_team(1, 1), create_test_team(2, 101), overs=overs)


def _after_first_innings(outcomes, overs=20):
    match = mc.record_toss(_new_match(overs), 1, "bat")
    match = mc.start_first_innings(match, 1, 2)
    model = ScriptedModel(outcomes)
    match = play_innings(match, model)
    assert model.remaining == 0
    return match


def _after_second_innings(match, outcomes):
    match = mc.start_second_innings(match, 101, 102)
    model = ScriptedModel(outcomes)
    match = play_innings(match, model)
    assert model.remaining == 0
    return match


class TestCreateMatch:
    """Team setup validation"""

    def test_valid_match(self):
        match = _new_match()
        assert match.status == MatchStatus.SCHEDULED
        assert match.current_innings == 0
        assert match.innings is None
        assert not match.is_finished

    def test_short_xi_rejected(self):
        short = create_test_team(1, 1)
        short = replace(short, playing_xi=short.playing_xi[:10])
        with pytest.raises(InvalidSelection) as exc:
            mc.create_match(short, create_test_team(2, 101))
        assert "Must select exactly 11 players" in exc.value.reason

    def test_overseas_limit(self):
        with pytest.raises(InvalidSelection) as exc:
            mc.create_match(create_test_team(1, 1, overseas=5), create_test_team(2, 101))
        assert "Max 4 overseas" in exc.value.reason

    def test_same_team_twice(self):
        with pytest.raises(InvalidSelection):
            mc.create_match(create_test_team(1, 1), create_test_team(1, 101))

    def test_player_in_both_squads(self):
        with pytest.raises(InvalidSelection) as exc:
            mc.create_match(create_test_team(1, 1), create_test_team(2, 5))
        assert "both squads" in exc.value.reason

    def test_too_few_overs_for_a_bowling_quota(self):
        with pytest.raises(InvalidSelection) as exc:
            _new_match(overs=4)
        assert "at least 5 overs" in exc.value.reason

    def test_stats_reset_on_creation(self):
        team = create_test_team(1, 1)
        used = replace(team, playing_xi=(replace(team.playing_xi[0], runs=40),) + team.playing_xi[1:])
        match = mc.create_match(used, create_test_team(2, 101))
        assert match.team1.playing_xi[0].runs == 0


class TestToss:
    """Recorded and random tosses"""

    def test_record_toss(self):
        match = mc.record_toss(_new_match(), 2, "bowl")
        assert match.status == MatchStatus.TOSS_DONE
        assert match.batting_first_id == 1

    def test_invalid_choice(self):
        with pytest.raises(InvalidSelection):
            mc.record_toss(_new_match(), 1, "field")

    def test_unknown_team(self):
        with pytest.raises(InvalidSelection):
            mc.record_toss(_new_match(), 3, "bat")

    def test_toss_only_once(self):
        match = mc.record_toss(_new_match(), 1, "bat")
        with pytest.raises(InvalidSelection):
            mc.record_toss(match, 2, "bat")

    def test_random_toss(self):
        match = mc.random_toss(_new_match(), ScriptedRandom([0.7, 0.2]))
        assert match.toss_winner_id == 2
        assert match.toss_choice == "bat"
        assert match.batting_first_id == 2

    def test_random_toss_with_choice(self):
        rng = ScriptedRandom([0.1])
        match = mc.random_toss(_new_match(), rng, choice="bowl")
        assert match.toss_winner_id == 1
        assert match.batting_first_id == 2
        assert rng.calls == 1

    def test_innings_needs_toss(self):
        with pytest.raises(InvalidSelection):
            mc.start_first_innings(_new_match(), 1, 2)


class TestSimulateNextBall:
    """Selection prompts and innings hand-over"""

    def test_bowler_required(self):
        match = mc.start_first_innings(mc.record_toss(_new_match(), 1, "bat"), 1, 2)
        with pytest.raises(InvalidSelection) as exc:
            mc.simulate_next_ball(match, model=ScriptedModel([DOT]))
        assert exc.value.reason == "Select a bowler for the next over first"

    def test_batsman_required(self):
        match = mc.start_first_innings(mc.record_toss(_new_match(), 1, "bat"), 1, 2)
        match = mc.select_bowler(match, 111)
        match, event = mc.simulate_next_ball(match, model=ScriptedModel([WICKET]))
        assert event.is_wicket
        with pytest.raises(InvalidSelection) as exc:
            mc.simulate_next_ball(match, model=ScriptedModel([DOT]))
        assert exc.value.reason == "Select the next batsman first"

    def test_commentary_attached(self):
        match = mc.start_first_innings(mc.record_toss(_new_match(), 1, "bat"), 1, 2)
        match = mc.select_bowler(match, 111)
        match, event = mc.simulate_next_ball(match, model=ScriptedModel([FOUR]))
        assert event.commentary.startswith("0.1 - ")
        assert match.innings.last_event.commentary == event.commentary

    def test_bowler_from_other_side_rejected(self):
        match = mc.start_first_innings(mc.record_toss(_new_match(), 1, "bat"), 1, 2)
        with pytest.raises(InvalidSelection):
            mc.select_bowler(match, 5)

    def test_innings_break(self):
        match = _after_first_innings([FOUR] * 40 + [WICKET] * 6 + [DOT] * 74)
        assert match.status == MatchStatus.INNINGS_BREAK
        assert match.first_innings.score_display == "160/6"
        assert match.first_innings.legal_balls == 120

        with pytest.raises(InvalidSelection):
            mc.simulate_next_ball(match, model=ScriptedModel([DOT]))


class TestResult:
    """Result strings, ties and record projection"""

    def test_chasing_side_wins_by_wickets(self):
        match = _after_first_innings([FOUR] * 40 + [WICKET] * 6 + [DOT] * 74)
        match = _after_second_innings(match, [FOUR] * 40 + [WICKET] * 4 + [DOT] * 65 + [SINGLE])

        assert match.second_innings.target == 161
        assert match.second_innings.legal_balls == 110
        assert match.status == MatchStatus.COMPLETED
        assert match.result == "Team2 won by 6 wickets"
        assert match.winner_id == 2
        assert match.man_of_the_match_id is not None

    def test_defending_side_wins_by_runs(self):
        match = _after_first_innings([FOUR] * 40 + [WICKET] * 6 + [DOT] * 74)
        match = _after_second_innings(match, [DOT] * 120)
        assert match.result == "Team1 won by 160 runs"
        assert match.winner_id == 1

    def test_one_run_margin_is_singular(self):
        match = _after_first_innings([SINGLE] + [DOT] * 29, overs=5)
        match = _after_second_innings(match, [DOT] * 30)
        assert match.result == "Team1 won by 1 run"

    def test_tie(self):
        match = _after_first_innings([FOUR] * 37 + [DOUBLE] + [WICKET] * 8 + [DOT] * 74)
        match = _after_second_innings(match, [FOUR] * 37 + [DOUBLE] + [WICKET] * 9 + [DOT] * 73)

        assert match.first_innings.score_display == "150/8"
        assert match.second_innings.score_display == "150/9"
        assert match.status == MatchStatus.TIED
        assert match.result == "Match Tied"
        assert match.winner_id is None
        assert match.man_of_the_match_id is not None

    def test_finished_match_is_frozen(self):
        match = _after_first_innings([FOUR] * 40 + [WICKET] * 6 + [DOT] * 74)
        match = _after_second_innings(match, [DOT] * 120)

        with pytest.raises(InvalidSelection) as exc:
            mc.simulate_next_ball(match, model=ScriptedModel([DOT]))
        assert exc.value.reason == "Match is already finished"
        with pytest.raises(InvalidSelection):
            mc.select_bowler(match, 1)

    def test_records_projected_across_both_innings(self):
        match = _after_first_innings([FOUR] * 40 + [WICKET] * 6 + [DOT] * 74)
        match = _after_second_innings(match, [FOUR] * 40 + [WICKET] * 4 + [DOT] * 65 + [SINGLE])

        team2 = mc.team_records(match, 2)
        assert sum(p.wickets for p in team2) == 6
        assert sum(p.runs for p in team2) == 161
        assert sum(p.legal_balls_bowled for p in team2) == 120
        assert len(mc.latest_player_records(match)) == 22

    def test_derive_result_needs_both_innings(self):
        match = _after_first_innings([FOUR] * 40 + [WICKET] * 6 + [DOT] * 74)
        with pytest.raises(InvalidSelection):
            mc.derive_result(match)


class TestManOfTheMatch:
    """Impact score across both XIs"""

    def test_impact_score(self):
        batter = Player(id=1, name="A", batting=80, bowling=20, runs=50, balls_faced=30, fours=4, sixes=1)
        bowler = Player(id=2, name="B", batting=20, bowling=80, wickets=3, maidens=1,
                        legal_balls_bowled=24, runs_conceded=28)
        assert mc.impact_score(batter) == pytest.approx(97)
        assert mc.impact_score(bowler) == pytest.approx(85)
        assert mc.impact_score(create_mock_player(3)) == 0

    def test_economy_bonus(self):
        bowler = Player(id=2, name="B", batting=20, bowling=80, legal_balls_bowled=24, runs_conceded=18)
        assert mc.impact_score(bowler) == pytest.approx(25)

    def test_highest_impact_wins(self):
        match = _new_match()
        batter = replace(match.team1.playing_xi[0], runs=50, balls_faced=30, fours=4, sixes=1)
        bowler = replace(match.team2.playing_xi[10], wickets=3, maidens=1, legal_balls_bowled=24, runs_conceded=28)
        first = Innings(
            batting_team_id=1, bowling_team_id=2, overs=20,
            batting_order=(batter,), bowling_card=(bowler,), is_completed=True,
        )
        match = replace(match, first_innings=first)
        assert mc.man_of_the_match(match).id == batter.id

    def test_tie_goes_to_earlier_player(self):
        match = _new_match()
        assert mc.man_of_the_match(match).id == 1


class TestImpactPlayer:
    """One substitution per side, within the overseas limit"""

    def test_substitution(self):
        setup = mc.use_impact_player(create_test_team(1, 1), 12, 5)
        ids = [p.id for p in setup.playing_xi]
        assert 12 in ids
        assert 5 not in ids
        assert ids.index(12) == 4
        assert setup.impact_player_used
        assert setup.substituted_player_id == 5
        assert 12 not in [p.id for p in setup.impact_players]

    def test_only_once(self):
        setup = mc.use_impact_player(create_test_team(1, 1), 12, 5)
        with pytest.raises(InvalidSelection) as exc:
            mc.use_impact_player(setup, 13, 6)
        assert "already used" in exc.value.reason

    def test_overseas_limit(self):
        setup = create_test_team(1, 1, overseas=4)
        with pytest.raises(InvalidSelection):
            mc.use_impact_player(setup, 13, 11)
        swapped = mc.use_impact_player(setup, 13, 1)
        assert swapped.overseas_count == 4

    def test_unknown_players(self):
        with pytest.raises(InvalidSelection):
            mc.use_impact_player(create_test_team(1, 1), 99, 5)
        with pytest.raises(InvalidSelection):
            mc.use_impact_player(create_test_team(1, 1), 12, 99)

    def test_cannot_replace_player_on_the_field(self):
        match = mc.start_first_innings(mc.record_toss(_new_match(), 1, "bat"), 1, 2)
        with pytest.raises(InvalidSelection):
            mc.use_impact_player_in_match(match, 1, 12, 1)

        match = mc.use_impact_player_in_match(match, 1, 12, 11)
        assert 12 in [p.id for p in match.team1.playing_xi]
        assert match.team2.impact_player_used is False

    def test_substituted_player_keeps_their_record(self):
        match = match_with_substitution()
        assert 1 not in [p.id for p in mc.team_records(match, 1)]
        assert match.team1.substituted_player.id == 1

        match = play_innings(match, ScriptedModel([], default=DOT))
        match = mc.start_second_innings(match, 101, 102)
        match = play_innings(match, ScriptedModel([], default=DOT))
        assert match.result == "Team1 won by 20 runs"

        records = {p.id: p for p in mc.latest_player_records(match)}
        assert len(records) == 23
        assert records[1].runs == 20
        assert records[1].fours == 5
        assert records[1].dismissed
        assert mc.man_of_the_match(match).id == 1
