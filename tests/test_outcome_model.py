"""
Tests for the outcome model and weighted draws
"""
import random
from dataclasses import fields

import pytest

from crease.engine.conditions import ConditionModifiers
from crease.engine.outcome_model import OutcomeModel, compute_outcome
from crease.engine.probability import weighted_choice, weighted_index
from crease.engine.state import DismissalType, ExtraType, Outcome, Phase, Player, PlayerForm

from factories import ScriptedRandom, create_mock_player


class TestWeightedDraw:
    """Cumulative categorical draw"""

    def test_roll_lands_in_bucket(self):
        assert weighted_index([1, 1, 2], ScriptedRandom([0.0])) == 0
        assert weighted_index([1, 1, 2], ScriptedRandom([0.3])) == 1
        assert weighted_index([1, 1, 2], ScriptedRandom([0.5])) == 2

    def test_zero_weight_never_picked(self):
        assert weighted_choice(["a", "b", "c"], [0, 5, 0], ScriptedRandom([0.0])) == "b"
        assert weighted_choice(["a", "b", "c"], [0, 5, 0], ScriptedRandom([0.999])) == "b"

    def test_invalid_weights(self):
        with pytest.raises(ValueError):
            weighted_index([0, 0])
        with pytest.raises(ValueError):
            weighted_choice(["a"], [1, 2])


class TestOutcomeWeights:
    """Skill, phase and condition adjustments"""

    def test_even_matchup(self):
        model = OutcomeModel()
        weights = model.outcome_weights(create_mock_player(1), create_mock_player(2), Phase.MIDDLE)

        assert weights["dot"] == pytest.approx(35)
        assert weights["single"] == pytest.approx(35)
        assert weights["double"] == pytest.approx(15)
        assert weights["triple"] == pytest.approx(3)
        assert weights["four"] == pytest.approx(12)
        assert weights["six"] == pytest.approx(5)
        assert weights["wicket"] == pytest.approx(5)

    def test_floors_apply_for_dominant_batter(self):
        model = OutcomeModel()
        striker = create_mock_player(1, batting=90)
        bowler = create_mock_player(2, bowling=30)
        weights = model.outcome_weights(striker, bowler, Phase.MIDDLE)

        assert model.skill_differential(striker, bowler) == pytest.approx(60)
        assert weights["dot"] == pytest.approx(20)
        assert weights["wicket"] == pytest.approx(3)
        assert weights["four"] == pytest.approx(24)
        assert weights["six"] == pytest.approx(11)

    def test_floors_apply_for_dominant_bowler(self):
        model = OutcomeModel()
        weights = model.outcome_weights(
            create_mock_player(1, batting=20), create_mock_player(2, bowling=90), Phase.MIDDLE
        )
        assert weights["four"] == pytest.approx(8)
        assert weights["six"] == pytest.approx(2)
        assert weights["dot"] == pytest.approx(56)

    def test_powerplay_multipliers(self):
        weights = OutcomeModel().outcome_weights(
            create_mock_player(1), create_mock_player(2), Phase.POWERPLAY
        )
        assert weights["four"] == pytest.approx(18)
        assert weights["dot"] == pytest.approx(28)

    def test_death_multipliers(self):
        weights = OutcomeModel().outcome_weights(
            create_mock_player(1), create_mock_player(2), Phase.DEATH
        )
        assert weights["six"] == pytest.approx(8)
        assert weights["wicket"] == pytest.approx(7)

    def test_pace_matchup_uses_pace_wicket_multiplier(self):
        model = OutcomeModel()
        striker = create_mock_player(1, batting=50)
        bowler = create_mock_player(2, bowling=80)
        assert model.is_pace_matchup(striker, bowler)

        pace = model.outcome_weights(
            striker, bowler, Phase.MIDDLE, ConditionModifiers(pace_wicket_multiplier=2.0)
        )
        spin = model.outcome_weights(
            striker, bowler, Phase.MIDDLE, ConditionModifiers(spin_wicket_multiplier=2.0)
        )
        assert pace["wicket"] == pytest.approx(14.8)
        assert spin["wicket"] == pytest.approx(7.4)

    def test_form_shifts_differential(self):
        bowler = create_mock_player(2)
        in_form = Player(id=1, name="Player1", batting=60, bowling=60,
                         form=PlayerForm(recent_form=70, last5_runs=100))
        assert OutcomeModel.skill_differential(create_mock_player(1), bowler) == pytest.approx(0)
        assert OutcomeModel.skill_differential(in_form, bowler) == pytest.approx(5)


class TestComputeOutcome:
    """Scripted draws through extras, main outcome and dismissal"""

    def test_wide(self):
        rng = ScriptedRandom([0.0, 0.0, 0.0])
        outcome = OutcomeModel(rng).compute_outcome(create_mock_player(1), create_mock_player(2), Phase.MIDDLE)
        assert outcome == Outcome(runs=1, extra=ExtraType.WIDE)
        assert rng.calls == 3

    def test_no_ball_with_runs_off_the_bat(self):
        rng = ScriptedRandom([0.01, 0.5, 0.95])
        outcome = OutcomeModel(rng).compute_outcome(create_mock_player(1), create_mock_player(2), Phase.MIDDLE)
        assert outcome.extra == ExtraType.NO_BALL
        assert outcome.runs == 6
        assert outcome.total_runs == 6
        assert outcome.bat_runs == 5
        assert not outcome.is_wicket

    def test_dot(self):
        rng = ScriptedRandom([0.99, 0.0])
        outcome = OutcomeModel(rng).compute_outcome(create_mock_player(1), create_mock_player(2), Phase.MIDDLE)
        assert outcome == Outcome(runs=0)
        assert rng.calls == 2

    def test_wicket_draws_dismissal(self):
        rng = ScriptedRandom([0.99, 0.9999, 0.0])
        outcome = OutcomeModel(rng).compute_outcome(create_mock_player(1), create_mock_player(2), Phase.MIDDLE)
        assert outcome.is_wicket
        assert outcome.dismissal == DismissalType.CAUGHT
        assert outcome.runs == 0
        assert outcome.extra is None

    def test_extras_more_likely_at_death(self):
        striker, bowler = create_mock_player(1), create_mock_player(2)
        death = OutcomeModel(ScriptedRandom([0.09, 0.0, 0.0])).compute_outcome(striker, bowler, Phase.DEATH)
        middle = OutcomeModel(ScriptedRandom([0.09, 0.0])).compute_outcome(striker, bowler, Phase.MIDDLE)
        assert death.extra == ExtraType.WIDE
        assert middle.extra is None

    def test_seeded_model_is_repeatable(self):
        striker, bowler = create_mock_player(1), create_mock_player(2)
        model_a = OutcomeModel(random.Random(42))
        model_b = OutcomeModel(random.Random(42))
        run_a = [model_a.compute_outcome(striker, bowler, Phase.MIDDLE) for _ in range(50)]
        run_b = [model_b.compute_outcome(striker, bowler, Phase.MIDDLE) for _ in range(50)]
        assert run_a == run_b
        assert compute_outcome(striker, bowler, Phase.MIDDLE, rng=random.Random(42)) == run_a[0]

    def test_extras_rate_close_to_base_chance(self):
        model = OutcomeModel(random.Random(7))
        striker, bowler = create_mock_player(1), create_mock_player(2)
        outcomes = [model.compute_outcome(striker, bowler, Phase.MIDDLE) for _ in range(2000)]
        rate = sum(1 for o in outcomes if o.extra is not None) / len(outcomes)
        assert 0.05 < rate < 0.11

    def test_extras_never_carry_a_wicket(self):
        model = OutcomeModel(random.Random(11))
        striker, bowler = create_mock_player(1), create_mock_player(2)
        for _ in range(500):
            outcome = model.compute_outcome(striker, bowler, Phase.DEATH)
            if outcome.extra is not None:
                assert not outcome.is_wicket


class TestConditionModifiersReachTheModel:
    """Every multiplier the conditions produce changes the outcome draw"""

    @pytest.mark.parametrize("field_name,affected", [
        ("boundary_multiplier", "four"),
        ("six_multiplier", "six"),
        ("dot_ball_multiplier", "dot"),
        ("pace_wicket_multiplier", "wicket"),
    ])
    def test_weight_multipliers(self, field_name, affected):
        model = OutcomeModel()
        striker = create_mock_player(1, batting=50)
        bowler = create_mock_player(2, bowling=80)
        base = model.outcome_weights(striker, bowler, Phase.MIDDLE)
        boosted = model.outcome_weights(
            striker, bowler, Phase.MIDDLE, ConditionModifiers(**{field_name: 2.0})
        )
        assert boosted[affected] == pytest.approx(base[affected] * 2)

    def test_spin_multiplier_for_spin_matchup(self):
        model = OutcomeModel()
        striker, bowler = create_mock_player(1), create_mock_player(2)
        assert not model.is_pace_matchup(striker, bowler)
        boosted = model.outcome_weights(
            striker, bowler, Phase.MIDDLE, ConditionModifiers(spin_wicket_multiplier=2.0)
        )
        assert boosted["wicket"] == pytest.approx(10)

    def test_extras_multiplier(self):
        model = OutcomeModel()
        assert model.extras_chance(Phase.MIDDLE, ConditionModifiers(extras_multiplier=1.5)) == pytest.approx(0.12)

    def test_only_multipliers_the_model_reads(self):
        multipliers = {f.name for f in fields(ConditionModifiers) if f.name.endswith("_multiplier")}
        assert multipliers == {
            "boundary_multiplier", "six_multiplier", "dot_ball_multiplier",
            "pace_wicket_multiplier", "spin_wicket_multiplier", "extras_multiplier",
        }
