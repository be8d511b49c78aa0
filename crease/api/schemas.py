"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel
from typing import Optional


# Setup Schemas
class PlayerIn(BaseModel):
    id: int
    name: str
    batting: int
    bowling: int
    is_overseas: bool = False
    recent_form: float = 50.0
    last5_runs: int = 0
    last5_wickets: int = 0


class TeamSetupIn(BaseModel):
    team_id: int
    name: str
    playing_xi: list[PlayerIn]
    impact_players: list[PlayerIn] = []


class CreateMatchRequest(BaseModel):
    team1: TeamSetupIn
    team2: TeamSetupIn
    overs: Optional[int] = None
    venue: Optional[str] = None  # key of a known venue, e.g. "wankhede"


class TossRequest(BaseModel):
    winner_id: Optional[int] = None  # random toss when omitted
    elected_to: Optional[str] = None  # "bat" or "bowl"


class StartInningsRequest(BaseModel):
    opener1_id: int
    opener2_id: int


class SelectPlayerRequest(BaseModel):
    player_id: int


class ImpactPlayerRequest(BaseModel):
    team_id: int
    impact_player_id: int
    replace_player_id: int


class NomineesIn(BaseModel):
    team_id: int
    batsman_ids: list[int]
    bowler_id: int


class SuperOverRequest(BaseModel):
    nominees: list[NomineesIn] = []  # best batsmen/bowler picked when empty


# Match state Schemas
class PlayerStateBrief(BaseModel):
    id: int
    name: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False
    dismissal: str = ""


class BowlerStateBrief(BaseModel):
    id: int
    name: str
    overs: str = "0.0"
    maidens: int = 0
    runs: int = 0
    wickets: int = 0
    economy: float = 0.0


class InningsStateResponse(BaseModel):
    batting_team_id: int
    bowling_team_id: int
    status: str
    runs: int
    wickets: int
    overs: str
    run_rate: float
    extras: int
    target: Optional[int] = None
    required_rate: Optional[float] = None
    balls_remaining: int

    striker: Optional[PlayerStateBrief] = None
    non_striker: Optional[PlayerStateBrief] = None
    bowler: Optional[BowlerStateBrief] = None

    is_free_hit: bool
    phase: str
    partnership_runs: int = 0
    this_over: list[str]
    fall_of_wickets: list[str]
    last_ball_commentary: Optional[str] = None


class MatchStateResponse(BaseModel):
    id: int
    status: str
    team1_id: int
    team1_name: str
    team2_id: int
    team2_name: str
    overs: int
    toss_winner_id: Optional[int] = None
    toss_choice: Optional[str] = None
    current_innings: int
    innings: Optional[InningsStateResponse] = None
    first_innings_score: Optional[str] = None
    second_innings_score: Optional[str] = None
    result: Optional[str] = None
    winner_id: Optional[int] = None
    man_of_the_match_id: Optional[int] = None


class AvailableBowlersResponse(BaseModel):
    bowlers: list[BowlerStateBrief]
    message: Optional[str] = None


class BallResultResponse(BaseModel):
    outcome: str
    runs: int
    is_wicket: bool
    is_boundary: bool
    is_six: bool
    commentary: str
    match_state: MatchStateResponse


class SuperOverResponse(BaseModel):
    result: str
    winner_id: Optional[int] = None
    margin: Optional[str] = None
    rounds: list[str]
    match_state: MatchStateResponse


class WinPredictionResponse(BaseModel):
    batting_team_id: int
    bowling_team_id: int
    batting_probability: float
    bowling_probability: float
    current_run_rate: float
    phase: str
    momentum: str
    projected_score: Optional[int] = None
    runs_required: Optional[int] = None
    balls_remaining: Optional[int] = None
    required_run_rate: Optional[float] = None
