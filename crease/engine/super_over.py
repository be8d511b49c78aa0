"""
Super Over tiebreaker.

Each side faces one over with two nominated batsmen and loses the innings
at the second wicket. Team 1 always bats first. A tied Super Over is played
again with the same nominees, up to settings.MAX_SUPER_OVERS times.
"""
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from crease.config import settings
from crease.engine import innings as innings_sm
from crease.engine.conditions import ConditionModifiers
from crease.engine.errors import InvalidSelection
from crease.engine.innings import Innings
from crease.engine.match_controller import Match, MatchStatus
from crease.engine.outcome_model import OutcomeModel
from crease.engine.probability import RandomSource
from crease.engine.state import Phase, TeamSetup, find_player

logger = logging.getLogger(__name__)

SUPER_OVER_WICKETS = 2


@dataclass(frozen=True)
class SuperOverNominees:
    team_id: int
    batsman_ids: tuple  # exactly two
    bowler_id: int


@dataclass(frozen=True)
class SuperOverRound:
    number: int
    first_innings: Innings
    second_innings: Innings


@dataclass(frozen=True)
class SuperOverResult:
    winner_id: Optional[int]
    margin: Optional[str]
    result: str
    rounds: tuple = ()


def _nominees_for(nominees: Iterable[SuperOverNominees], setup: TeamSetup) -> SuperOverNominees:
    picked = [n for n in nominees if n.team_id == setup.team_id]
    if len(picked) != 1:
        raise InvalidSelection(f"{setup.name} must nominate their Super Over players once")
    nominee = picked[0]

    if len(nominee.batsman_ids) != 2 or len(set(nominee.batsman_ids)) != 2:
        raise InvalidSelection(f"{setup.name} must nominate two different batsmen")
    for player_id in (*nominee.batsman_ids, nominee.bowler_id):
        if find_player(setup.playing_xi, player_id) is None:
            raise InvalidSelection(f"Player {player_id} is not in the {setup.name} XI")
    return nominee


def _play_innings(
    batting: TeamSetup,
    bowling: TeamSetup,
    batting_nominees: SuperOverNominees,
    bowler_id: int,
    model: OutcomeModel,
    modifiers: Optional[ConditionModifiers],
    target: Optional[int] = None,
) -> Innings:
    # Super Over figures are kept apart from the main match records
    batting_xi = [p.reset_match_stats() for p in batting.playing_xi]
    bowler = find_player(bowling.playing_xi, bowler_id).reset_match_stats()

    innings = innings_sm.start_innings(
        batting.team_id, bowling.team_id, 1,
        batting_xi=batting_xi,
        opener_ids=batting_nominees.batsman_ids,
        target=target,
        wicket_limit=SUPER_OVER_WICKETS,
        is_super_over=True,
    )
    # No rotation policy: the nominated bowler bowls the whole over
    innings = replace(innings, current_bowler=bowler)

    while not innings.is_completed:
        if innings.striker is None or innings.non_striker is None:
            incoming = next(
                p for p in innings_sm.available_batsmen(innings, batting_xi)
                if p.id not in batting_nominees.batsman_ids
            )
            innings = innings_sm.select_batsman(innings, batting_xi, incoming.id)
        outcome = model.compute_outcome(innings.striker, innings.current_bowler, Phase.DEATH, modifiers)
        innings = innings_sm.apply_ball(innings, outcome)
    return innings


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def resolve_super_over(
    match: Match,
    nominees: Iterable[SuperOverNominees],
    rng: RandomSource = None,
    conditions: Optional[ConditionModifiers] = None,
    model: Optional[OutcomeModel] = None,
) -> tuple[Match, SuperOverResult]:
    """Play Super Overs on a tied match until one side wins or the limit is hit"""
    if match.status != MatchStatus.TIED:
        raise InvalidSelection("A Super Over is only played when the match is tied")

    nominees = list(nominees)
    team1, team2 = match.team1, match.team2
    nominees1 = _nominees_for(nominees, team1)
    nominees2 = _nominees_for(nominees, team2)
    model = model or OutcomeModel(rng)

    rounds = []
    winner, margin = None, None
    for number in range(1, settings.MAX_SUPER_OVERS + 1):
        first = _play_innings(team1, team2, nominees1, nominees2.bowler_id, model, conditions)
        second = _play_innings(
            team2, team1, nominees2, nominees1.bowler_id, model, conditions,
            target=first.total_runs + 1,
        )
        rounds.append(SuperOverRound(number, first, second))
        logger.info(
            "Match %s Super Over %s: %s %s, %s %s",
            match.id, number, team1.name, first.score_display, team2.name, second.score_display,
        )

        if second.total_runs > first.total_runs:
            winner = team2
            margin = _plural(SUPER_OVER_WICKETS - second.wickets, "wicket")
            break
        if first.total_runs > second.total_runs:
            winner = team1
            margin = _plural(first.total_runs - second.total_runs, "run")
            break

    if winner is None:
        outcome = SuperOverResult(None, None, "Match Tied (Super Over tied)", tuple(rounds))
    else:
        outcome = SuperOverResult(
            winner.team_id, margin, f"{winner.name} won Super Over by {margin}", tuple(rounds)
        )
    logger.info("Match %s: %s", match.id, outcome.result)

    match = replace(
        match,
        status=MatchStatus.COMPLETED,
        result=outcome.result,
        winner_id=outcome.winner_id,
        super_overs=match.super_overs + tuple(rounds),
    )
    return match, outcome
