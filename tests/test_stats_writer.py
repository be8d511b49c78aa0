"""
Tests for saving match figures into the all-time stats table
"""
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crease.database import Base
from crease.engine import match_controller as mc
from crease.engine.autopilot import play_innings, play_match
from crease.engine.errors import InvalidSelection
from crease.engine.state import Player
from crease.models.stats import PlayerAllTimeStats
from crease.services.stats_writer import save_match_stats, save_player_stats

from factories import DOT, ScriptedModel, create_test_team, match_with_substitution


@pytest.fixture
def session_factory():
    """In-memory database shared by every session"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


def _locked():
    raise OperationalError("INSERT INTO player_all_time_stats", {}, Exception("database is locked"))


def _batter(runs, dismissed=True, fours=0):
    return Player(
        id=1, name="Player1", batting=80, bowling=20,
        runs=runs, balls_faced=runs, fours=fours, dismissed=dismissed,
    )


def _bowler(wickets, runs_conceded, maidens=0):
    return Player(
        id=9, name="Player9", batting=20, bowling=80,
        wickets=wickets, runs_conceded=runs_conceded, legal_balls_bowled=24, maidens=maidens,
    )


class TestSavePlayerStats:
    """Additive merge into one row per player"""

    def test_batting_totals(self, session_factory):
        assert save_player_stats(_batter(55, dismissed=False, fours=4), "Team1", session_factory)
        assert save_player_stats(_batter(120, fours=10), "Team1", session_factory)

        session = session_factory()
        row = session.get(PlayerAllTimeStats, 1)
        assert row.matches_batted == 2
        assert row.total_runs == 175
        assert row.highest_score == 120
        assert row.fifties == 1
        assert row.hundreds == 1
        assert row.not_outs == 1
        assert row.fours == 14
        assert row.batting_average == 175
        assert row.team_name == "Team1"
        assert row.matches_bowled == 0
        session.close()

    def test_best_bowling_kept(self, session_factory):
        for wickets, runs in [(2, 30), (3, 40), (3, 20), (1, 5)]:
            assert save_player_stats(_bowler(wickets, runs), "Team2", session_factory)

        session = session_factory()
        row = session.get(PlayerAllTimeStats, 9)
        assert row.matches_bowled == 4
        assert row.total_wickets == 9
        assert row.balls_bowled == 96
        assert row.runs_conceded == 95
        assert row.best_bowling == "3/20"
        assert row.matches_batted == 0
        session.close()

    def test_wicketless_first_spell_sets_best(self, session_factory):
        save_player_stats(_bowler(0, 42), None, session_factory)
        session = session_factory()
        assert session.get(PlayerAllTimeStats, 9).best_bowling == "0/42"
        session.close()

    def test_retries_then_gives_up(self):
        sleeps = []
        assert not save_player_stats(
            _batter(10), "Team1", _locked, attempts=3, base_delay=0.5, sleep=sleeps.append
        )
        assert sleeps == [0.5, 1.0]

    def test_recovers_after_transient_failure(self, session_factory):
        calls = []

        def flaky_factory():
            calls.append(1)
            if len(calls) == 1:
                _locked()
            return session_factory()

        sleeps = []
        assert save_player_stats(_batter(30), "Team1", flaky_factory, attempts=3, base_delay=0.5, sleep=sleeps.append)
        assert sleeps == [0.5]


class TestSaveMatchStats:
    """Whole-match save after a result"""

    def test_saves_everyone_who_played(self, session_factory):
        match = play_match(create_test_team(1, 1), create_test_team(2, 101), overs=5, rng=random.Random(5))
        report = save_match_stats(match, session_factory=session_factory, sleep=lambda d: None)

        assert report.ok
        played = [p for p in mc.latest_player_records(match) if p.has_batted or p.has_bowled]
        assert sorted(report.saved) == sorted(p.id for p in played)

        session = session_factory()
        assert session.query(PlayerAllTimeStats).count() == len(played)
        session.close()

    def test_failures_reported_not_raised(self):
        match = play_match(create_test_team(1, 1), create_test_team(2, 101), overs=5, rng=random.Random(5))
        report = save_match_stats(match, session_factory=_locked, attempts=2, base_delay=0, sleep=lambda d: None)

        assert not report.ok
        assert report.saved == []
        assert report.failed

    def test_unfinished_match_rejected(self, session_factory):
        match = mc.create_match(create_test_team(1, 1), create_test_team(2, 101))
        with pytest.raises(InvalidSelection):
            save_match_stats(match, session_factory=session_factory)

    def test_substituted_player_saved(self, session_factory):
        match = match_with_substitution()
        match = play_innings(match, ScriptedModel([], default=DOT))
        match = mc.start_second_innings(match, 101, 102)
        match = play_innings(match, ScriptedModel([], default=DOT))

        report = save_match_stats(match, session_factory=session_factory, sleep=lambda d: None)
        assert 1 in report.saved

        session = session_factory()
        row = session.query(PlayerAllTimeStats).filter_by(player_id=1).one()
        assert row.total_runs == 20
        assert row.fours == 5
        session.close()
