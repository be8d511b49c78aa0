"""
Match controller - toss, both innings, result, man of the match and impact
substitutions. Every function takes a Match and returns a new one.
"""
import enum
import itertools
import logging
from dataclasses import dataclass, replace
from typing import Optional

from crease.engine import innings as innings_sm
from crease.engine.bowler_rotation import max_overs_per_bowler
from crease.engine.commentary import describe_ball
from crease.engine.conditions import (
    ConditionModifiers, MatchConditions, Venue,
    calculate_modifiers, evolve_conditions, generate_initial_conditions,
)
from crease.engine.errors import InvalidSelection
from crease.engine.innings import Innings, InningsStatus
from crease.engine.outcome_model import OutcomeModel
from crease.engine.probability import RandomSource, default_rng
from crease.engine.state import BallEvent, Player, TeamSetup, find_player, project_latest
from crease.validators.team_setup_validator import MAX_OVERSEAS, TeamSetupValidator

logger = logging.getLogger(__name__)

_match_ids = itertools.count(1)


class MatchStatus(enum.Enum):
    SCHEDULED = "scheduled"
    TOSS_DONE = "toss_done"
    FIRST_INNINGS = "first_innings"
    INNINGS_BREAK = "innings_break"
    SECOND_INNINGS = "second_innings"
    TIED = "tied"  # Super Over required
    COMPLETED = "completed"


TOSS_CHOICES = ("bat", "bowl")


@dataclass(frozen=True)
class Match:
    id: int
    team1: TeamSetup
    team2: TeamSetup
    overs: int
    status: MatchStatus = MatchStatus.SCHEDULED
    toss_winner_id: Optional[int] = None
    toss_choice: Optional[str] = None
    first_innings: Optional[Innings] = None
    second_innings: Optional[Innings] = None
    current_innings: int = 0  # 0 before play, then 1 or 2
    result: Optional[str] = None
    winner_id: Optional[int] = None
    man_of_the_match_id: Optional[int] = None
    super_overs: tuple = ()
    venue: Optional[Venue] = None
    conditions: Optional[MatchConditions] = None

    @property
    def innings(self) -> Optional[Innings]:
        if self.current_innings == 1:
            return self.first_innings
        if self.current_innings == 2:
            return self.second_innings
        return None

    @property
    def is_finished(self) -> bool:
        return self.result is not None

    def team(self, team_id: int) -> TeamSetup:
        if team_id == self.team1.team_id:
            return self.team1
        if team_id == self.team2.team_id:
            return self.team2
        raise InvalidSelection(f"Team {team_id} is not playing this match")

    def opponent(self, team_id: int) -> TeamSetup:
        return self.team2 if self.team(team_id) is self.team1 else self.team1

    @property
    def batting_first_id(self) -> Optional[int]:
        if self.toss_winner_id is None:
            return None
        if self.toss_choice == "bat":
            return self.toss_winner_id
        return self.opponent(self.toss_winner_id).team_id


def _replace_team(match: Match, setup: TeamSetup) -> Match:
    if setup.team_id == match.team1.team_id:
        return replace(match, team1=setup)
    return replace(match, team2=setup)


def _require_status(match: Match, *allowed: MatchStatus):
    if match.is_finished:
        raise InvalidSelection("Match is already finished")
    if match.status not in allowed:
        raise InvalidSelection(f"Not allowed while match is {match.status.value}")


def create_match(
    team1: TeamSetup,
    team2: TeamSetup,
    overs: int = 20,
    match_id: Optional[int] = None,
    venue: Optional[Venue] = None,
    rng: RandomSource = None,
) -> Match:
    """Validate both setups and start a match with fresh per-match counters"""
    errors = []
    for setup in (team1, team2):
        check = TeamSetupValidator.validate(setup)
        errors.extend(f"{setup.name}: {e}" for e in check["errors"])
    if team1.team_id == team2.team_id:
        errors.append("A team cannot play itself")
    ids1 = {p.id for p in team1.playing_xi + team1.impact_players}
    ids2 = {p.id for p in team2.playing_xi + team2.impact_players}
    if ids1 & ids2:
        errors.append("A player cannot be in both squads")
    if max_overs_per_bowler(overs) < 1:
        errors.append("A match needs at least 5 overs per innings")
    if errors:
        raise InvalidSelection("; ".join(errors))

    conditions = generate_initial_conditions(venue, rng) if venue is not None else None
    match = Match(
        id=match_id if match_id is not None else next(_match_ids),
        team1=team1.with_fresh_stats(),
        team2=team2.with_fresh_stats(),
        overs=overs,
        venue=venue,
        conditions=conditions,
    )
    logger.info("Match %s created: %s vs %s (%s overs)", match.id, team1.name, team2.name, overs)
    return match


def record_toss(match: Match, winner_id: int, choice: str) -> Match:
    _require_status(match, MatchStatus.SCHEDULED)
    match.team(winner_id)
    if choice not in TOSS_CHOICES:
        raise InvalidSelection(f"Toss choice must be one of {', '.join(TOSS_CHOICES)}")
    logger.info("Match %s: %s won the toss and chose to %s", match.id, match.team(winner_id).name, choice)
    return replace(match, toss_winner_id=winner_id, toss_choice=choice, status=MatchStatus.TOSS_DONE)


def random_toss(match: Match, rng: RandomSource = None, choice: Optional[str] = None) -> Match:
    """Flip the coin; the winner picks `choice`, or a random one if not given"""
    rng = rng or default_rng()
    winner = match.team1 if rng.random() < 0.5 else match.team2
    if choice is None:
        choice = "bat" if rng.random() < 0.5 else "bowl"
    return record_toss(match, winner.team_id, choice)


def team_records(match: Match, team_id: int, include_substituted: bool = False) -> list[Player]:
    """
    The team's XI with every player's latest per-match record. With
    `include_substituted`, a player replaced by the impact player is listed
    after the XI so their figures still count.
    """
    cards = []
    for innings in (match.first_innings, match.second_innings):
        if innings is not None:
            cards.extend([innings.batting_order, innings.bowling_card])
    setup = match.team(team_id)
    players = setup.match_squad if include_substituted else setup.playing_xi
    return project_latest(players, *cards)


def latest_player_records(match: Match) -> list[Player]:
    """Everyone who took part (team1 first), projected to their latest per-match records"""
    return (
        team_records(match, match.team1.team_id, include_substituted=True)
        + team_records(match, match.team2.team_id, include_substituted=True)
    )


def _with_innings(match: Match, innings: Innings) -> Match:
    if match.current_innings == 1:
        return replace(match, first_innings=innings)
    return replace(match, second_innings=innings)


def start_first_innings(match: Match, opener1_id: int, opener2_id: int) -> Match:
    _require_status(match, MatchStatus.TOSS_DONE)
    batting_id = match.batting_first_id
    bowling_id = match.opponent(batting_id).team_id
    first = innings_sm.start_innings(
        batting_id, bowling_id, match.overs,
        batting_xi=team_records(match, batting_id),
        opener_ids=(opener1_id, opener2_id),
    )
    return replace(match, first_innings=first, current_innings=1, status=MatchStatus.FIRST_INNINGS)


def start_second_innings(match: Match, opener1_id: int, opener2_id: int) -> Match:
    """Swap sides and set the target at first-innings runs + 1"""
    _require_status(match, MatchStatus.INNINGS_BREAK)
    first = match.first_innings
    second = innings_sm.start_innings(
        first.bowling_team_id, first.batting_team_id, match.overs,
        batting_xi=team_records(match, first.bowling_team_id),
        opener_ids=(opener1_id, opener2_id),
        target=first.total_runs + 1,
    )
    logger.info("Match %s: second innings started, target %s", match.id, second.target)
    return replace(match, second_innings=second, current_innings=2, status=MatchStatus.SECOND_INNINGS)


def _live_innings(match: Match) -> Innings:
    _require_status(match, MatchStatus.FIRST_INNINGS, MatchStatus.SECOND_INNINGS)
    return match.innings


def select_bowler(match: Match, bowler_id: int) -> Match:
    innings = _live_innings(match)
    bowling_xi = team_records(match, innings.bowling_team_id)
    return _with_innings(match, innings_sm.select_bowler(innings, bowling_xi, bowler_id))


def select_batsman(match: Match, batsman_id: int) -> Match:
    innings = _live_innings(match)
    batting_xi = team_records(match, innings.batting_team_id)
    return _with_innings(match, innings_sm.select_batsman(innings, batting_xi, batsman_id))


def available_bowlers_for(match: Match) -> list[Player]:
    innings = _live_innings(match)
    return innings_sm.bowling_options(innings, team_records(match, innings.bowling_team_id))


def available_batsmen_for(match: Match) -> list[Player]:
    innings = _live_innings(match)
    return innings_sm.available_batsmen(innings, team_records(match, innings.batting_team_id))


def current_modifiers(match: Match) -> Optional[ConditionModifiers]:
    """Condition multipliers at this point of the match, if it has a venue"""
    if match.conditions is None:
        return None
    balls = sum(i.legal_balls for i in (match.first_innings, match.second_innings) if i is not None)
    evolved = evolve_conditions(match.conditions, balls, match.current_innings == 2, match.overs)
    return calculate_modifiers(evolved, match.venue)


def simulate_next_ball(
    match: Match,
    conditions: Optional[ConditionModifiers] = None,
    rng: RandomSource = None,
    model: Optional[OutcomeModel] = None,
) -> tuple[Match, BallEvent]:
    """
    Bowl one ball of the current innings.

    `conditions` overrides the multipliers derived from the match venue.
    """
    model = model or OutcomeModel(rng)
    innings = _live_innings(match)
    status = innings.status
    if status == InningsStatus.AWAITING_BATSMAN:
        raise InvalidSelection("Select the next batsman first")
    if status in (InningsStatus.AWAITING_BOWLER, InningsStatus.OVER_BREAK):
        raise InvalidSelection("Select a bowler for the next over first")

    modifiers = conditions if conditions is not None else current_modifiers(match)
    outcome = model.compute_outcome(
        innings.striker, innings.current_bowler, innings.phase, modifiers
    )
    striker_id = innings.striker.id
    bowler_id = innings.current_bowler.id
    updated = innings_sm.apply_ball(innings, outcome)

    event = updated.last_event
    commentary = describe_ball(
        event,
        find_player(updated.bowling_card, bowler_id),
        find_player(updated.batting_order, striker_id),
        innings.phase,
        required_runs=updated.runs_required,
        balls_remaining=updated.balls_remaining if updated.target is not None else None,
    )
    event = replace(event, commentary=commentary)
    updated = replace(updated, ball_log=updated.ball_log[:-1] + (event,))

    match = _with_innings(match, updated)
    if updated.is_completed:
        if match.current_innings == 1:
            logger.info(
                "Match %s: innings break, %s need %s",
                match.id, match.team(updated.bowling_team_id).name, updated.total_runs + 1,
            )
            match = replace(match, status=MatchStatus.INNINGS_BREAK)
        else:
            match = derive_result(match)
    return match, event


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def derive_result(match: Match) -> Match:
    """Result once both innings are complete; level scores tie the match"""
    first, second = match.first_innings, match.second_innings
    if first is None or second is None or not (first.is_completed and second.is_completed):
        raise InvalidSelection("Both innings must be complete to derive a result")

    motm = man_of_the_match(match)
    motm_id = motm.id if motm else None

    if second.total_runs > first.total_runs:
        winner = match.team(second.batting_team_id)
        result = f"{winner.name} won by {_plural(10 - second.wickets, 'wicket')}"
    elif second.total_runs < first.total_runs:
        winner = match.team(first.batting_team_id)
        result = f"{winner.name} won by {_plural(first.total_runs - second.total_runs, 'run')}"
    else:
        logger.info("Match %s tied at %s, Super Over required", match.id, first.total_runs)
        return replace(
            match, status=MatchStatus.TIED, result="Match Tied",
            winner_id=None, man_of_the_match_id=motm_id,
        )

    logger.info("Match %s: %s", match.id, result)
    return replace(
        match, status=MatchStatus.COMPLETED, result=result,
        winner_id=winner.team_id, man_of_the_match_id=motm_id,
    )


def impact_score(player: Player) -> float:
    score = 0.0
    if player.has_batted:
        score += player.runs * 1.5 + player.fours * 2 + player.sixes * 4
        if player.balls_faced > 0 and player.strike_rate > 150:
            score += 10
    if player.has_bowled:
        score += player.wickets * 25 + player.maidens * 10
        if player.legal_balls_bowled > 0:
            if player.economy < 6:
                score += 15
            if player.economy < 5:
                score += 10
    return score


def man_of_the_match(match: Match) -> Optional[Player]:
    """Highest impact score across both sides, substitutes included; the earlier player wins a tie"""
    best, best_score = None, None
    for player in latest_player_records(match):
        score = impact_score(player)
        if best_score is None or score > best_score:
            best, best_score = player, score
    return best


def use_impact_player(setup: TeamSetup, impact_id: int, replace_id: int) -> TeamSetup:
    """Bring an impact player into the XI in place of `replace_id`. Once per match."""
    if setup.impact_player_used:
        raise InvalidSelection(f"{setup.name} have already used their impact player")

    incoming = find_player(setup.impact_players, impact_id)
    if incoming is None:
        raise InvalidSelection("Player is not one of the impact players")
    outgoing = find_player(setup.playing_xi, replace_id)
    if outgoing is None:
        raise InvalidSelection("Player to replace is not in the playing XI")

    new_xi = tuple(incoming if p.id == replace_id else p for p in setup.playing_xi)
    overseas = sum(1 for p in new_xi if p.is_overseas)
    if overseas > MAX_OVERSEAS:
        raise InvalidSelection(f"Substitution would put {overseas} overseas players in the XI")

    return replace(
        setup,
        playing_xi=new_xi,
        impact_players=tuple(p for p in setup.impact_players if p.id != impact_id),
        impact_player_used=True,
        substituted_player_id=replace_id,
        substituted_player=outgoing,
    )


def use_impact_player_in_match(match: Match, team_id: int, impact_id: int, replace_id: int) -> Match:
    if match.is_finished:
        raise InvalidSelection("Match is already finished")

    innings = match.innings
    if innings is not None:
        busy = [p.id for p in (innings.striker, innings.non_striker, innings.current_bowler) if p]
        if replace_id in busy:
            raise InvalidSelection("Cannot replace a player who is on the field right now")

    setup = use_impact_player(match.team(team_id), impact_id, replace_id)
    logger.info("Match %s: %s impact substitution %s for %s", match.id, setup.name, impact_id, replace_id)
    return _replace_team(match, setup)
