from crease.engine.errors import InvalidSelection, InningsStateError
from crease.engine.state import (
    Phase, ExtraType, DismissalType, Player, PlayerForm, TeamSetup, Outcome, BallEvent,
)
from crease.engine.outcome_model import OutcomeModel, compute_outcome
from crease.engine.bowler_rotation import available_bowlers, max_overs_per_bowler
from crease.engine.innings import Innings, InningsStatus, apply_ball, start_innings
from crease.engine.match_controller import Match, MatchStatus
from crease.engine.super_over import SuperOverNominees, SuperOverResult, resolve_super_over
from crease.engine.win_predictor import WinPrediction, predict

__all__ = [
    "InvalidSelection",
    "InningsStateError",
    "Phase",
    "ExtraType",
    "DismissalType",
    "Player",
    "PlayerForm",
    "TeamSetup",
    "Outcome",
    "BallEvent",
    "OutcomeModel",
    "compute_outcome",
    "available_bowlers",
    "max_overs_per_bowler",
    "Innings",
    "InningsStatus",
    "apply_ball",
    "start_innings",
    "Match",
    "MatchStatus",
    "SuperOverNominees",
    "SuperOverResult",
    "resolve_super_over",
    "WinPrediction",
    "predict",
]
