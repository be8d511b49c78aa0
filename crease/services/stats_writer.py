"""
Persists per-match player figures into the all-time stats table once a match
is finished. Each player is written on its own with bounded retries; players
that still fail are reported back, the match itself is never touched.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crease.config import settings
from crease.database import get_session
from crease.engine.errors import InvalidSelection
from crease.engine.match_controller import Match, team_records
from crease.engine.state import Player
from crease.models.stats import PlayerAllTimeStats
from crease.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

STAT_FIELDS = [
    "matches_batted", "total_runs", "balls_faced", "highest_score", "fifties", "hundreds",
    "fours", "sixes", "not_outs", "matches_bowled", "total_wickets", "balls_bowled",
    "runs_conceded", "best_bowling_wickets", "best_bowling_runs", "maidens",
]


@dataclass
class StatsSaveReport:
    saved: list = field(default_factory=list)
    failed: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def merge_player_stats(row: PlayerAllTimeStats, player: Player, team_name: Optional[str] = None):
    """Add one match's figures to the stored totals"""
    row.player_name = player.name
    if team_name:
        row.team_name = team_name

    if player.has_batted:
        row.matches_batted += 1
        row.total_runs += player.runs
        row.balls_faced += player.balls_faced
        row.highest_score = max(row.highest_score, player.runs)
        if player.runs >= 100:
            row.hundreds += 1
        elif player.runs >= 50:
            row.fifties += 1
        row.fours += player.fours
        row.sixes += player.sixes
        if not player.dismissed:
            row.not_outs += 1

    if player.has_bowled:
        first_spell = row.matches_bowled == 0
        row.matches_bowled += 1
        row.total_wickets += player.wickets
        row.balls_bowled += player.legal_balls_bowled
        row.runs_conceded += player.runs_conceded
        row.maidens += player.maidens

        better = player.wickets > row.best_bowling_wickets or (
            player.wickets == row.best_bowling_wickets and player.runs_conceded < row.best_bowling_runs
        )
        if first_spell or better:
            row.best_bowling_wickets = player.wickets
            row.best_bowling_runs = player.runs_conceded


def _write_player(session_factory: Callable[[], Session], player: Player, team_name: Optional[str]):
    session = session_factory()
    try:
        row = session.get(PlayerAllTimeStats, player.id)
        if row is None:
            row = PlayerAllTimeStats(player_id=player.id, player_name=player.name, **{f: 0 for f in STAT_FIELDS})
            session.add(row)
        merge_player_stats(row, player, team_name)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    finally:
        session.close()


def save_player_stats(
    player: Player,
    team_name: Optional[str] = None,
    session_factory: Callable[[], Session] = get_session,
    attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Read-merge-write one player's row. Returns False once retries are exhausted."""
    try:
        retry_with_backoff(
            lambda: _write_player(session_factory, player, team_name),
            attempts=attempts or settings.STATS_SAVE_RETRIES,
            base_delay=settings.STATS_RETRY_BASE_DELAY if base_delay is None else base_delay,
            sleep=sleep,
            retry_on=(SQLAlchemyError,),
        )
    except SQLAlchemyError as e:
        logger.error("Failed to save stats for player %s (%s): %s", player.id, player.name, e)
        return False
    return True


def save_match_stats(
    match: Match,
    session_factory: Callable[[], Session] = get_session,
    attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> StatsSaveReport:
    """Save every player who batted or bowled in a finished match, substitutes included"""
    if not match.is_finished:
        raise InvalidSelection("Stats can only be saved once the match has a result")

    report = StatsSaveReport()
    for setup in (match.team1, match.team2):
        for player in team_records(match, setup.team_id, include_substituted=True):
            if not (player.has_batted or player.has_bowled):
                continue
            if save_player_stats(player, setup.name, session_factory, attempts, base_delay, sleep):
                report.saved.append(player.id)
            else:
                report.failed.append(player.id)

    if report.failed:
        logger.warning("Match %s: stats not saved for players %s", match.id, report.failed)
    else:
        logger.info("Match %s: stats saved for %s players", match.id, len(report.saved))
    return report
