"""
Innings state machine.

An `Innings` is an immutable value; `apply_ball`, `select_bowler` and
`select_batsman` each return a new one. The driver owns the current
reference and must fill any empty batsman slot and pick a bowler before the
next ball can be applied.
"""
import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from crease.engine.bowler_rotation import available_bowlers, max_overs_per_bowler
from crease.engine.errors import InningsStateError, InvalidSelection
from crease.engine.state import (
    BallEvent, DismissalType, ExtraType, Outcome, Phase, Player,
    find_player, overs_notation, overs_string, phase_for_over, project_latest, upsert_player,
)

logger = logging.getLogger(__name__)


class InningsStatus(enum.Enum):
    NOT_STARTED = "not_started"
    AWAITING_BOWLER = "awaiting_bowler"
    AWAITING_BATSMAN = "awaiting_batsman"
    IN_PROGRESS = "in_progress"
    OVER_BREAK = "over_break"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ExtrasBreakdown:
    wides: int = 0
    no_balls: int = 0
    byes: int = 0
    leg_byes: int = 0

    @property
    def total(self) -> int:
        return self.wides + self.no_balls + self.byes + self.leg_byes

    def add(self, outcome: Outcome) -> "ExtrasBreakdown":
        if outcome.extra == ExtraType.WIDE:
            return replace(self, wides=self.wides + outcome.runs)
        if outcome.extra == ExtraType.NO_BALL:
            return replace(self, no_balls=self.no_balls + 1)
        if outcome.extra == ExtraType.BYE:
            return replace(self, byes=self.byes + outcome.runs)
        if outcome.extra == ExtraType.LEG_BYE:
            return replace(self, leg_byes=self.leg_byes + outcome.runs)
        return self


@dataclass(frozen=True)
class Partnership:
    batsman1_id: int
    batsman1_name: str
    batsman2_id: int
    batsman2_name: str
    start_over: float
    phase: Phase
    runs: int = 0
    balls: int = 0
    batsman1_runs: int = 0
    batsman1_balls: int = 0
    batsman2_runs: int = 0
    batsman2_balls: int = 0
    fours: int = 0
    sixes: int = 0
    end_over: Optional[float] = None
    is_active: bool = True

    def involves(self, player_id: int) -> bool:
        return player_id in (self.batsman1_id, self.batsman2_id)


@dataclass(frozen=True)
class FallOfWicket:
    wicket_number: int
    score: int
    overs: str
    batsman_name: str
    bowler_name: str
    phase: Phase


@dataclass(frozen=True)
class Innings:
    batting_team_id: int
    bowling_team_id: int
    overs: int
    total_runs: int = 0
    wickets: int = 0
    legal_balls: int = 0
    extras: ExtrasBreakdown = field(default_factory=ExtrasBreakdown)

    striker: Optional[Player] = None
    non_striker: Optional[Player] = None
    current_bowler: Optional[Player] = None
    last_over_bowler_id: Optional[int] = None

    batting_order: tuple = ()
    bowling_card: tuple = ()
    partnerships: tuple = ()
    fall_of_wickets: tuple = ()
    ball_log: tuple = ()

    is_free_hit: bool = False
    is_completed: bool = False
    target: Optional[int] = None
    phase: Phase = Phase.POWERPLAY
    over_runs: int = 0

    # Super Over innings: 2 wickets, no partnership/fall-of-wicket bookkeeping
    wicket_limit: int = 10
    is_super_over: bool = False

    @property
    def status(self) -> InningsStatus:
        if self.is_completed:
            return InningsStatus.COMPLETED
        if self.striker is None and self.non_striker is None and not self.ball_log:
            return InningsStatus.NOT_STARTED
        if self.striker is None or self.non_striker is None:
            return InningsStatus.AWAITING_BATSMAN
        if self.current_bowler is None:
            if self.legal_balls > 0 and self.legal_balls % 6 == 0:
                return InningsStatus.OVER_BREAK
            return InningsStatus.AWAITING_BOWLER
        return InningsStatus.IN_PROGRESS

    @property
    def max_balls(self) -> int:
        return self.overs * 6

    @property
    def balls_remaining(self) -> int:
        return self.max_balls - self.legal_balls

    @property
    def overs_display(self) -> str:
        return overs_string(self.legal_balls)

    @property
    def score_display(self) -> str:
        return f"{self.total_runs}/{self.wickets}"

    @property
    def run_rate(self) -> float:
        if self.legal_balls == 0:
            return 0.0
        return (self.total_runs / self.legal_balls) * 6

    @property
    def runs_required(self) -> Optional[int]:
        if self.target is None:
            return None
        return max(0, self.target - self.total_runs)

    @property
    def required_rate(self) -> Optional[float]:
        if self.target is None:
            return None
        if self.balls_remaining <= 0:
            return 99.99
        return (self.runs_required / self.balls_remaining) * 6

    @property
    def active_partnership(self) -> Optional[Partnership]:
        for partnership in reversed(self.partnerships):
            if partnership.is_active:
                return partnership
        return None

    @property
    def last_event(self) -> Optional[BallEvent]:
        return self.ball_log[-1] if self.ball_log else None

    @property
    def this_over(self) -> list[BallEvent]:
        """Events of the over in progress (empty during an over break)"""
        current = self.legal_balls // 6
        if self.legal_balls > 0 and self.legal_balls % 6 == 0:
            return []
        return [e for e in self.ball_log if e.over == current]


def start_innings(
    batting_team_id: int,
    bowling_team_id: int,
    overs: int,
    batting_xi: Optional[Iterable[Player]] = None,
    opener_ids: Optional[tuple] = None,
    target: Optional[int] = None,
    wicket_limit: int = 10,
    is_super_over: bool = False,
) -> Innings:
    """Fresh innings, optionally with the opening pair already at the crease"""
    innings = Innings(
        batting_team_id=batting_team_id,
        bowling_team_id=bowling_team_id,
        overs=overs,
        target=target,
        phase=phase_for_over(0, overs),
        wicket_limit=wicket_limit,
        is_super_over=is_super_over,
    )
    if opener_ids:
        if batting_xi is None:
            raise InvalidSelection("Batting XI is required to choose openers")
        batting_xi = list(batting_xi)
        if len(set(opener_ids)) != 2:
            raise InvalidSelection("Choose two different opening batsmen")
        for opener_id in opener_ids:
            innings = select_batsman(innings, batting_xi, opener_id)
    return innings


def available_batsmen(innings: Innings, batting_xi: Iterable[Player]) -> list[Player]:
    """XI players who can still come in to bat"""
    at_crease = {p.id for p in (innings.striker, innings.non_striker) if p is not None}
    return [
        p for p in project_latest(batting_xi, innings.batting_order)
        if not p.dismissed and p.id not in at_crease
    ]


def bowling_options(innings: Innings, bowling_xi: Iterable[Player]) -> list[Player]:
    """Bowlers eligible for the next over, with their figures so far"""
    return available_bowlers(
        project_latest(bowling_xi, innings.bowling_card),
        innings.last_over_bowler_id,
        innings.overs,
    )


def select_bowler(innings: Innings, bowling_xi: Iterable[Player], bowler_id: int) -> Innings:
    """Hand the ball to a bowler for the next over"""
    if innings.is_completed:
        raise InvalidSelection("Innings is already complete")
    if innings.current_bowler is not None:
        raise InvalidSelection(f"{innings.current_bowler.name} is already bowling this over")

    bowlers = project_latest(bowling_xi, innings.bowling_card)
    bowler = find_player(bowlers, bowler_id)
    if bowler is None:
        raise InvalidSelection("Bowler is not in the bowling XI")

    if bowler not in available_bowlers(bowlers, innings.last_over_bowler_id, innings.overs):
        if bowler.id == innings.last_over_bowler_id:
            raise InvalidSelection(f"{bowler.name} bowled the previous over")
        raise InvalidSelection(
            f"{bowler.name} has bowled the maximum of {max_overs_per_bowler(innings.overs)} overs"
        )

    return replace(innings, current_bowler=bowler)


def select_batsman(innings: Innings, batting_xi: Iterable[Player], batsman_id: int) -> Innings:
    """Send in a batsman to fill the empty slot (striker's end first)"""
    if innings.is_completed:
        raise InvalidSelection("Innings is already complete")
    if innings.striker is not None and innings.non_striker is not None:
        raise InvalidSelection("Both batsmen are already at the crease")

    batsman = find_player(project_latest(batting_xi, innings.batting_order), batsman_id)
    if batsman is None:
        raise InvalidSelection("Batsman is not in the batting XI")
    if batsman.dismissed:
        raise InvalidSelection(f"{batsman.name} is already out")
    at_crease = [p.id for p in (innings.striker, innings.non_striker) if p is not None]
    if batsman.id in at_crease:
        raise InvalidSelection(f"{batsman.name} is already batting")

    if innings.striker is None:
        updated = replace(innings, striker=batsman)
        partner = innings.non_striker
    else:
        updated = replace(innings, non_striker=batsman)
        partner = innings.striker

    updated = replace(updated, batting_order=upsert_player(innings.batting_order, batsman))

    if partner is not None and not innings.is_super_over:
        partnership = Partnership(
            batsman1_id=partner.id,
            batsman1_name=partner.name,
            batsman2_id=batsman.id,
            batsman2_name=batsman.name,
            start_over=overs_notation(innings.legal_balls),
            phase=innings.phase,
        )
        updated = replace(updated, partnerships=innings.partnerships + (partnership,))

    return updated


def describe_dismissal(dismissal: Optional[DismissalType], bowler_name: str) -> str:
    if dismissal == DismissalType.RUN_OUT:
        return "run out"
    if dismissal == DismissalType.LBW:
        return f"lbw b {bowler_name}"
    if dismissal == DismissalType.CAUGHT:
        return f"caught b {bowler_name}"
    if dismissal == DismissalType.CAUGHT_BEHIND:
        return f"caught behind b {bowler_name}"
    if dismissal == DismissalType.STUMPED:
        return f"stumped b {bowler_name}"
    return f"b {bowler_name}"


def _update_partnership(
    partnership: Partnership,
    striker_id: int,
    outcome: Outcome,
    bat_runs: int,
    faced: int,
) -> Partnership:
    if striker_id == partnership.batsman1_id:
        split = {
            "batsman1_runs": partnership.batsman1_runs + bat_runs,
            "batsman1_balls": partnership.batsman1_balls + faced,
        }
    else:
        split = {
            "batsman2_runs": partnership.batsman2_runs + bat_runs,
            "batsman2_balls": partnership.batsman2_balls + faced,
        }
    return replace(
        partnership,
        runs=partnership.runs + outcome.total_runs,
        balls=partnership.balls + (1 if outcome.is_legal else 0),
        fours=partnership.fours + (1 if outcome.is_boundary_four else 0),
        sixes=partnership.sixes + (1 if outcome.is_six else 0),
        **split,
    )


def apply_ball(innings: Innings, outcome: Outcome, bowler: Optional[Player] = None) -> Innings:
    """
    Apply one delivery to the innings and return the new innings.

    The innings must be IN_PROGRESS: both batsmen at the crease, a bowler
    selected and not completed. Anything else is a driver bug. `bowler`, when
    given, must be the bowler of the current over.
    """
    if innings.status != InningsStatus.IN_PROGRESS:
        raise InningsStateError(f"Cannot bowl a ball while innings is {innings.status.value}")
    if bowler is not None and bowler.id != innings.current_bowler.id:
        raise InningsStateError(f"{bowler.name} is not bowling this over")

    striker = innings.striker
    non_striker = innings.non_striker
    bowler = innings.current_bowler
    was_free_hit = innings.is_free_hit

    # Free hit: any dismissal becomes a dot ball (run-outs included)
    if was_free_hit and outcome.is_wicket:
        outcome = Outcome(runs=0)

    legal = outcome.is_legal
    total = outcome.total_runs
    bat_runs = outcome.bat_runs
    faced = 1 if legal else 0

    # Striker
    striker = replace(
        striker,
        runs=striker.runs + bat_runs,
        balls_faced=striker.balls_faced + faced,
        fours=striker.fours + (1 if outcome.is_boundary_four else 0),
        sixes=striker.sixes + (1 if outcome.is_six else 0),
    )
    if outcome.is_wicket:
        striker = replace(
            striker,
            dismissed=True,
            dismissal_info=describe_dismissal(outcome.dismissal, bowler.name),
        )

    # Bowler
    legal_balls = innings.legal_balls + faced
    over_complete = legal and legal_balls % 6 == 0
    over_runs = innings.over_runs + total
    credited_wicket = outcome.is_wicket and outcome.dismissal != DismissalType.RUN_OUT
    bowler = replace(
        bowler,
        runs_conceded=bowler.runs_conceded + total,
        wickets=bowler.wickets + (1 if credited_wicket else 0),
        wides=bowler.wides + (1 if outcome.extra == ExtraType.WIDE else 0),
        no_balls=bowler.no_balls + (1 if outcome.extra == ExtraType.NO_BALL else 0),
        dot_balls=bowler.dot_balls + (1 if legal and total == 0 else 0),
        legal_balls_bowled=bowler.legal_balls_bowled + faced,
    )
    if over_complete and over_runs == 0:
        bowler = replace(bowler, maidens=bowler.maidens + 1)

    total_runs = innings.total_runs + total
    wickets = innings.wickets + (1 if outcome.is_wicket else 0)

    event = BallEvent(
        over=innings.legal_balls // 6,
        ball=innings.legal_balls % 6 + 1,
        bowler=bowler.name,
        batsman=striker.name,
        runs=total,
        extra=outcome.extra,
        extra_runs=total - bat_runs,
        is_wicket=outcome.is_wicket,
        dismissal=outcome.dismissal if outcome.is_wicket else None,
        was_free_hit=was_free_hit,
        score=f"{total_runs}/{wickets}",
    )

    # Partnership and fall of wicket
    partnerships = innings.partnerships
    fall_of_wickets = innings.fall_of_wickets
    active = innings.active_partnership
    if not innings.is_super_over and active is not None:
        active = _update_partnership(active, striker.id, outcome, bat_runs, faced)
        if outcome.is_wicket:
            active = replace(active, is_active=False, end_over=overs_notation(legal_balls))
        partnerships = partnerships[:-1] + (active,)
    if not innings.is_super_over and outcome.is_wicket:
        fall_of_wickets = fall_of_wickets + (
            FallOfWicket(
                wicket_number=wickets,
                score=total_runs,
                overs=overs_string(legal_balls),
                batsman_name=striker.name,
                bowler_name=bowler.name,
                phase=innings.phase,
            ),
        )

    # Strike rotation: the dismissed batsman's slot stays empty
    next_striker, next_non_striker = striker, non_striker
    if outcome.is_wicket:
        next_striker = None
    elif outcome.runs_run % 2 == 1:
        next_striker, next_non_striker = non_striker, striker
    if over_complete:
        next_striker, next_non_striker = next_non_striker, next_striker

    updated = replace(
        innings,
        total_runs=total_runs,
        wickets=wickets,
        legal_balls=legal_balls,
        extras=innings.extras.add(outcome),
        striker=next_striker,
        non_striker=next_non_striker,
        current_bowler=bowler,
        batting_order=upsert_player(innings.batting_order, striker),
        bowling_card=upsert_player(innings.bowling_card, bowler),
        partnerships=partnerships,
        fall_of_wickets=fall_of_wickets,
        ball_log=innings.ball_log + (event,),
        is_free_hit=outcome.extra == ExtraType.NO_BALL,
        over_runs=over_runs,
    )

    if over_complete:
        phase = phase_for_over(legal_balls // 6, innings.overs)
        partnerships = updated.partnerships
        if partnerships and partnerships[-1].is_active:
            partnerships = partnerships[:-1] + (replace(partnerships[-1], phase=phase),)
        updated = replace(
            updated,
            last_over_bowler_id=bowler.id,
            current_bowler=None,
            phase=phase,
            partnerships=partnerships,
            over_runs=0,
        )

    if _is_complete(updated):
        updated = replace(updated, is_completed=True)
        logger.info(
            "Innings complete: team %s %s (%s ov)",
            updated.batting_team_id, updated.score_display, updated.overs_display,
        )

    return updated


def _is_complete(innings: Innings) -> bool:
    if innings.legal_balls >= innings.max_balls:
        return True
    if innings.wickets >= innings.wicket_limit:
        return True
    if innings.target is not None and innings.total_runs >= innings.target:
        return True
    return False
