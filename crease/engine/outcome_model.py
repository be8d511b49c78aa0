"""
Outcome model - turns a batter/bowler matchup into one delivery outcome.
"""
from typing import Optional

from crease.engine.conditions import ConditionModifiers, NEUTRAL_MODIFIERS
from crease.engine.probability import RandomSource, default_rng, weighted_choice
from crease.engine.state import DismissalType, ExtraType, Outcome, Phase, Player


class OutcomeModel:
    """
    Probability model for a single ball.

    Weights are relative (they do not need to sum to 100). Extras are rolled
    before the main draw and never carry a wicket.
    """

    SINGLE_WEIGHT = 35
    DOUBLE_WEIGHT = 15
    TRIPLE_WEIGHT = 3

    # Floors for the skill-driven weights
    MIN_DOT = 20
    MIN_WICKET = 3
    MIN_FOUR = 8
    MIN_SIX = 2

    PHASE_MULTIPLIERS = {
        Phase.POWERPLAY: {"four": 1.5, "six": 1.3, "single": 1.2, "wicket": 1.1, "dot": 0.8},
        Phase.MIDDLE: {},
        Phase.DEATH: {"four": 1.3, "six": 1.6, "wicket": 1.4, "single": 0.8, "dot": 1.1},
    }

    EXTRAS_CHANCE = 0.08
    DEATH_EXTRAS_CHANCE = 0.10

    EXTRA_TYPES = [
        (ExtraType.WIDE, 40),
        (ExtraType.NO_BALL, 30),
        (ExtraType.BYE, 15),
        (ExtraType.LEG_BYE, 15),
    ]

    EXTRA_RUNS = {
        ExtraType.WIDE: [(1, 100)],
        ExtraType.NO_BALL: [(1, 60), (4, 30), (6, 10)],  # penalty included
        ExtraType.BYE: [(1, 80), (4, 20)],
        ExtraType.LEG_BYE: [(1, 60), (2, 30), (4, 10)],
    }

    DISMISSAL_TYPES = [
        (DismissalType.CAUGHT, 0.50),
        (DismissalType.BOWLED, 0.20),
        (DismissalType.LBW, 0.15),
        (DismissalType.CAUGHT_BEHIND, 0.10),
        (DismissalType.RUN_OUT, 0.03),
        (DismissalType.STUMPED, 0.02),
    ]

    # Order of the main draw
    OUTCOMES = ["dot", "single", "double", "triple", "four", "six", "wicket"]
    OUTCOME_RUNS = {"dot": 0, "single": 1, "double": 2, "triple": 3, "four": 4, "six": 6, "wicket": 0}

    def __init__(self, rng: RandomSource = None):
        self.rng = rng or default_rng()

    @staticmethod
    def skill_differential(striker: Player, bowler: Player) -> float:
        """Positive favours the batter"""
        return (
            (striker.batting - bowler.bowling)
            + 0.15 * (striker.form.recent_form - bowler.form.recent_form)
            + 0.02 * striker.form.last5_runs
            - 0.5 * bowler.form.last5_wickets
        )

    @staticmethod
    def is_pace_matchup(striker: Player, bowler: Player) -> bool:
        return bowler.bowling > 60 and striker.batting < bowler.bowling

    def outcome_weights(
        self,
        striker: Player,
        bowler: Player,
        phase: Phase,
        modifiers: Optional[ConditionModifiers] = None,
    ) -> dict:
        """Relative weights of the seven main outcomes"""
        diff = self.skill_differential(striker, bowler)
        modifiers = modifiers or NEUTRAL_MODIFIERS

        weights = {
            "dot": max(self.MIN_DOT, 35 - 0.3 * diff),
            "single": float(self.SINGLE_WEIGHT),
            "double": float(self.DOUBLE_WEIGHT),
            "triple": float(self.TRIPLE_WEIGHT),
            "four": max(self.MIN_FOUR, 12 + 0.2 * diff),
            "six": max(self.MIN_SIX, 5 + 0.1 * diff),
            "wicket": max(self.MIN_WICKET, 5 - 0.08 * diff),
        }

        weights["four"] *= modifiers.boundary_multiplier
        weights["six"] *= modifiers.six_multiplier
        weights["dot"] *= modifiers.dot_ball_multiplier
        if self.is_pace_matchup(striker, bowler):
            weights["wicket"] *= modifiers.pace_wicket_multiplier
        else:
            weights["wicket"] *= modifiers.spin_wicket_multiplier

        for key, factor in self.PHASE_MULTIPLIERS[phase].items():
            weights[key] *= factor

        return weights

    def extras_chance(self, phase: Phase, modifiers: Optional[ConditionModifiers] = None) -> float:
        base = self.DEATH_EXTRAS_CHANCE if phase == Phase.DEATH else self.EXTRAS_CHANCE
        return base * (modifiers or NEUTRAL_MODIFIERS).extras_multiplier

    def _roll_extra(self) -> Outcome:
        types, type_weights = zip(*self.EXTRA_TYPES)
        extra = weighted_choice(types, type_weights, self.rng)
        runs, run_weights = zip(*self.EXTRA_RUNS[extra])
        return Outcome(runs=weighted_choice(runs, run_weights, self.rng), extra=extra)

    def _roll_dismissal(self) -> DismissalType:
        kinds, weights = zip(*self.DISMISSAL_TYPES)
        return weighted_choice(kinds, weights, self.rng)

    def compute_outcome(
        self,
        striker: Player,
        bowler: Player,
        phase: Phase,
        modifiers: Optional[ConditionModifiers] = None,
    ) -> Outcome:
        """Draw the outcome of one delivery"""
        if self.rng.random() < self.extras_chance(phase, modifiers):
            return self._roll_extra()

        weights = self.outcome_weights(striker, bowler, phase, modifiers)
        picked = weighted_choice(self.OUTCOMES, [weights[k] for k in self.OUTCOMES], self.rng)

        if picked == "wicket":
            return Outcome(runs=0, is_wicket=True, dismissal=self._roll_dismissal())
        return Outcome(runs=self.OUTCOME_RUNS[picked])


def compute_outcome(
    striker: Player,
    bowler: Player,
    phase: Phase,
    modifiers: Optional[ConditionModifiers] = None,
    rng: RandomSource = None,
) -> Outcome:
    return OutcomeModel(rng).compute_outcome(striker, bowler, phase, modifiers)
