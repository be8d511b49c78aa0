"""
AutoPilot - default selections so a whole match can be played without a
human choosing bowlers and batsmen.
"""
import logging
from typing import Callable, Optional

from crease.engine import match_controller as mc
from crease.engine.conditions import Venue
from crease.engine.errors import InvalidSelection
from crease.engine.match_controller import Match, MatchStatus
from crease.engine.outcome_model import OutcomeModel
from crease.engine.probability import RandomSource, default_rng
from crease.engine.state import BallEvent, Player, TeamSetup
from crease.engine.super_over import SuperOverNominees, resolve_super_over

logger = logging.getLogger(__name__)


def choose_openers(xi: list[Player]) -> tuple[int, int]:
    """First two in the batting order"""
    return xi[0].id, xi[1].id


def choose_bowler(match: Match) -> int:
    """Best available bowler, preferring the one with fewer balls bowled"""
    options = mc.available_bowlers_for(match)
    if not options:
        raise InvalidSelection("No legal bowler available")
    best = max(options, key=lambda p: (p.bowling, -p.legal_balls_bowled))
    return best.id


def choose_batsman(match: Match) -> int:
    """Next player in the batting order"""
    options = mc.available_batsmen_for(match)
    if not options:
        raise InvalidSelection("No batsman left to come in")
    return options[0].id


def nominate_super_over(setup: TeamSetup) -> SuperOverNominees:
    """Two best batsmen and the best bowler"""
    batsmen = sorted(setup.playing_xi, key=lambda p: p.batting, reverse=True)[:2]
    bowler = max(setup.playing_xi, key=lambda p: p.bowling)
    return SuperOverNominees(setup.team_id, (batsmen[0].id, batsmen[1].id), bowler.id)


def play_innings(
    match: Match,
    model: OutcomeModel,
    on_ball: Optional[Callable[[Match, BallEvent], None]] = None,
) -> Match:
    """Bowl the current innings out, making every selection on the way"""
    innings_number = match.current_innings
    while match.current_innings == innings_number and match.status in (
        MatchStatus.FIRST_INNINGS, MatchStatus.SECOND_INNINGS
    ):
        innings = match.innings
        if innings.striker is None or innings.non_striker is None:
            match = mc.select_batsman(match, choose_batsman(match))
            continue
        if innings.current_bowler is None:
            match = mc.select_bowler(match, choose_bowler(match))
            continue
        match, event = mc.simulate_next_ball(match, model=model)
        if on_ball:
            on_ball(match, event)
    return match


def play_match(
    team1: TeamSetup,
    team2: TeamSetup,
    overs: int = 20,
    rng: RandomSource = None,
    venue: Optional[Venue] = None,
    on_ball: Optional[Callable[[Match, BallEvent], None]] = None,
) -> Match:
    """Play a full match, including any Super Over"""
    rng = rng or default_rng()
    model = OutcomeModel(rng)

    match = mc.create_match(team1, team2, overs, venue=venue, rng=rng)
    match = mc.random_toss(match, rng)

    batting = mc.team_records(match, match.batting_first_id)
    match = mc.start_first_innings(match, *choose_openers(batting))
    match = play_innings(match, model, on_ball)

    chasing = mc.team_records(match, match.first_innings.bowling_team_id)
    match = mc.start_second_innings(match, *choose_openers(chasing))
    match = play_innings(match, model, on_ball)

    if match.status == MatchStatus.TIED:
        nominees = [nominate_super_over(match.team1), nominate_super_over(match.team2)]
        match, _ = resolve_super_over(match, nominees, model=model)

    logger.info("Match %s finished: %s", match.id, match.result)
    return match
