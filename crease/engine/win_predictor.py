"""
Live win probability for the innings in progress. Read-only.
"""
from dataclasses import dataclass
from typing import Optional

from crease.engine.state import Phase

PAR_SCORE = 165


@dataclass(frozen=True)
class WinPrediction:
    batting_team_id: int
    bowling_team_id: int
    batting_probability: float
    bowling_probability: float
    current_run_rate: float
    phase: Phase
    momentum: str  # "high", "medium", "low"
    projected_score: Optional[int] = None
    runs_required: Optional[int] = None
    balls_remaining: Optional[int] = None
    required_run_rate: Optional[float] = None


def _clamp(value: float, low: float = 5, high: float = 95) -> float:
    return min(high, max(low, value))


def _phase(overs_completed: float, total_overs: int) -> Phase:
    if overs_completed < 6:
        return Phase.POWERPLAY
    if overs_completed >= total_overs - 4:
        return Phase.DEATH
    return Phase.MIDDLE


def first_innings_prediction(innings, total_overs: int) -> WinPrediction:
    overs_completed = innings.legal_balls / 6
    run_rate = innings.total_runs / overs_completed if overs_completed > 0 else 0.0
    overs_remaining = total_overs - overs_completed

    wicket_factor = max(0.5, 1 - innings.wickets * 0.08)
    death_bonus = 1.3 if overs_remaining <= 4 else 1
    projected = round(innings.total_runs + run_rate * overs_remaining * wicket_factor * death_bonus)

    par = PAR_SCORE * total_overs / 20
    batting = _clamp(50 + (projected - par) * 0.5)

    if run_rate > 8:
        momentum = "high"
    elif run_rate > 6:
        momentum = "medium"
    else:
        momentum = "low"

    return WinPrediction(
        batting_team_id=innings.batting_team_id,
        bowling_team_id=innings.bowling_team_id,
        batting_probability=batting,
        bowling_probability=100 - batting,
        current_run_rate=round(run_rate, 2),
        phase=_phase(overs_completed, total_overs),
        momentum=momentum,
        projected_score=projected,
    )


def chase_prediction(innings, total_overs: int) -> WinPrediction:
    overs_completed = innings.legal_balls / 6
    runs_required = innings.target - innings.total_runs
    balls_remaining = total_overs * 6 - innings.legal_balls
    wickets_remaining = 10 - innings.wickets

    required_rate = runs_required / (balls_remaining / 6) if balls_remaining > 0 else 999.0
    run_rate = innings.total_runs / overs_completed if overs_completed > 0 else 0.0

    if runs_required <= 0:
        chasing = 100.0
    elif wickets_remaining <= 0 or balls_remaining <= 0:
        chasing = 0.0
    else:
        resource = (balls_remaining / (total_overs * 6)) * (wickets_remaining / 10)
        chasing = 50 + (run_rate - required_rate) * 8
        chasing -= innings.wickets * 5
        if balls_remaining > 30 and required_rate < 10:
            chasing += 10
        elif balls_remaining < 12 and required_rate > 12:
            chasing -= 20
        chasing += (resource - 0.5) * 30
        chasing = _clamp(chasing)

    if run_rate > required_rate + 2:
        momentum = "high"
    elif run_rate > required_rate - 1:
        momentum = "medium"
    else:
        momentum = "low"

    return WinPrediction(
        batting_team_id=innings.batting_team_id,
        bowling_team_id=innings.bowling_team_id,
        batting_probability=chasing,
        bowling_probability=100 - chasing,
        current_run_rate=round(run_rate, 2),
        phase=_phase(overs_completed, total_overs),
        momentum=momentum,
        runs_required=max(0, runs_required),
        balls_remaining=balls_remaining,
        required_run_rate=round(required_rate, 2),
    )


def predict(match) -> Optional[WinPrediction]:
    """Prediction for the match's current innings, or None before play"""
    innings = match.innings
    if innings is None:
        return None
    if match.current_innings == 1:
        return first_innings_prediction(innings, match.overs)
    return chase_prediction(innings, match.overs)
