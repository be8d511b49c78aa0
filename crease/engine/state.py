"""
Core value types shared by the engine.
All of them are frozen; operations return updated copies.
"""
import enum
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional


class Phase(enum.Enum):
    POWERPLAY = "powerplay"
    MIDDLE = "middle"
    DEATH = "death"


class ExtraType(enum.Enum):
    WIDE = "wide"
    NO_BALL = "no_ball"
    BYE = "bye"
    LEG_BYE = "leg_bye"


class DismissalType(enum.Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    CAUGHT_BEHIND = "caught_behind"
    RUN_OUT = "run_out"
    STUMPED = "stumped"


def phase_for_over(over: int, total_overs: int) -> Phase:
    """Phase of the (0-based) over about to be bowled"""
    if over < 6:
        return Phase.POWERPLAY
    if over >= total_overs - 4:
        return Phase.DEATH
    return Phase.MIDDLE


def overs_notation(legal_balls: int) -> float:
    """Base-6 overs figure: 15 legal balls -> 2.3"""
    return legal_balls // 6 + (legal_balls % 6) / 10


def overs_string(legal_balls: int) -> str:
    return f"{legal_balls // 6}.{legal_balls % 6}"


@dataclass(frozen=True)
class PlayerForm:
    """Rolling performance history, maintained outside the engine"""
    recent_form: float = 50.0  # 0-100
    last5_runs: int = 0
    last5_wickets: int = 0
    career_matches: int = 0
    career_runs: int = 0
    career_wickets: int = 0


@dataclass(frozen=True)
class Player:
    id: int
    name: str
    batting: int  # 0-100
    bowling: int  # 0-100
    is_overseas: bool = False
    form: PlayerForm = field(default_factory=PlayerForm)

    # Per-match batting
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    dismissed: bool = False
    dismissal_info: str = ""

    # Per-match bowling
    legal_balls_bowled: int = 0
    maidens: int = 0
    wickets: int = 0
    runs_conceded: int = 0
    wides: int = 0
    no_balls: int = 0
    dot_balls: int = 0

    @property
    def overs_bowled(self) -> float:
        return overs_notation(self.legal_balls_bowled)

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return (self.runs / self.balls_faced) * 100

    @property
    def economy(self) -> float:
        if self.legal_balls_bowled == 0:
            return 0.0
        return (self.runs_conceded / self.legal_balls_bowled) * 6

    @property
    def has_batted(self) -> bool:
        return self.balls_faced > 0 or self.runs > 0 or self.dismissed

    @property
    def has_bowled(self) -> bool:
        return self.legal_balls_bowled > 0 or self.wickets > 0

    def reset_match_stats(self) -> "Player":
        """Fresh copy with every per-match counter zeroed"""
        return Player(
            id=self.id,
            name=self.name,
            batting=self.batting,
            bowling=self.bowling,
            is_overseas=self.is_overseas,
            form=self.form,
        )


def upsert_player(players: tuple, player: Player) -> tuple:
    """Replace the entry with the same id, or append it"""
    for index, existing in enumerate(players):
        if existing.id == player.id:
            return players[:index] + (player,) + players[index + 1:]
    return players + (player,)


def project_latest(players: Iterable[Player], *record_sets: Iterable[Player]) -> list[Player]:
    """
    Return `players` in their original order, each replaced by its most recent
    record by id. Later record sets win over earlier ones.
    """
    latest = {}
    for records in record_sets:
        for record in records:
            latest[record.id] = record
    return [latest.get(p.id, p) for p in players]


def find_player(players: Iterable[Player], player_id: int) -> Optional[Player]:
    return next((p for p in players if p.id == player_id), None)


@dataclass(frozen=True)
class TeamSetup:
    """A team's chosen XI and impact substitutes for one match"""
    team_id: int
    name: str
    playing_xi: tuple
    impact_players: tuple = ()
    impact_player_used: bool = False
    substituted_player_id: Optional[int] = None
    substituted_player: Optional[Player] = None

    @property
    def overseas_count(self) -> int:
        return sum(1 for p in self.playing_xi if p.is_overseas)

    @property
    def match_squad(self) -> tuple:
        """The XI plus any player substituted out of it"""
        if self.substituted_player is None:
            return self.playing_xi
        return self.playing_xi + (self.substituted_player,)

    def with_fresh_stats(self) -> "TeamSetup":
        return replace(
            self,
            playing_xi=tuple(p.reset_match_stats() for p in self.playing_xi),
            impact_players=tuple(p.reset_match_stats() for p in self.impact_players),
            substituted_player=self.substituted_player.reset_match_stats() if self.substituted_player else None,
        )


@dataclass(frozen=True)
class Outcome:
    """Result of a single delivery before it is applied to the innings"""
    runs: int = 0
    is_wicket: bool = False
    dismissal: Optional[DismissalType] = None
    extra: Optional[ExtraType] = None

    @property
    def is_legal(self) -> bool:
        return self.extra not in (ExtraType.WIDE, ExtraType.NO_BALL)

    @property
    def total_runs(self) -> int:
        """Runs added to the total; a wide or no-ball includes its penalty run"""
        return self.runs

    @property
    def bat_runs(self) -> int:
        """Runs credited to the striker"""
        if self.extra in (ExtraType.WIDE, ExtraType.BYE, ExtraType.LEG_BYE):
            return 0
        if self.extra == ExtraType.NO_BALL:
            return max(0, self.runs - 1)
        return self.runs

    @property
    def runs_run(self) -> int:
        """Runs completed between the wickets, which decide strike rotation"""
        if self.extra in (ExtraType.WIDE, ExtraType.NO_BALL):
            return max(0, self.runs - 1)
        return self.runs

    @property
    def is_boundary_four(self) -> bool:
        return self.extra is None and not self.is_wicket and self.runs == 4

    @property
    def is_six(self) -> bool:
        return self.extra is None and not self.is_wicket and self.runs == 6


@dataclass(frozen=True)
class BallEvent:
    """What happened on one delivery, for logs, commentary and the API"""
    over: int  # 0-based over number
    ball: int  # legal ball in the over, 1-6 (an illegal ball repeats the count)
    bowler: str
    batsman: str
    runs: int
    extra: Optional[ExtraType] = None
    extra_runs: int = 0
    is_wicket: bool = False
    dismissal: Optional[DismissalType] = None
    was_free_hit: bool = False
    score: str = "0/0"
    commentary: str = ""

    @property
    def label(self) -> str:
        if self.is_wicket:
            return "W"
        if self.extra == ExtraType.WIDE:
            return "Wd"
        if self.extra == ExtraType.NO_BALL:
            return "Nb"
        if self.extra in (ExtraType.BYE, ExtraType.LEG_BYE):
            return f"{self.extra_runs}{'b' if self.extra == ExtraType.BYE else 'lb'}"
        return str(self.runs)
