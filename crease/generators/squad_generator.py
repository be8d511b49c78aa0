"""
Squad Generator - fictional franchise squads ready to be used as TeamSetups
"""
import random
from typing import Optional

from faker import Faker

from crease.engine.state import Player, PlayerForm, TeamSetup

# Faker instances per region - en_US stands in where a locale is missing
fake_in = Faker('en_IN')
fake_au = Faker('en_AU')
fake_en = Faker('en_GB')
fake_za = Faker('en_US')


FRANCHISES = [
    "Mumbai Titans",
    "Chennai Kings",
    "Bangalore Warriors",
    "Kolkata Knights",
    "Delhi Capitals",
    "Punjab Lions",
    "Rajasthan Royals",
    "Hyderabad Hawks",
]


class SquadGenerator:
    """Generates playing XIs with a sensible batting order and bowling attack"""

    # Batting order slot -> role. Top order bats, tail bowls.
    XI_ROLES = [
        "batsman", "batsman", "batsman", "batsman",
        "wicket_keeper", "all_rounder", "all_rounder",
        "bowler", "bowler", "bowler", "bowler",
    ]

    IMPACT_ROLES = ["batsman", "bowler", "all_rounder", "bowler"]

    OVERSEAS_FAKERS = [fake_au, fake_en, fake_za]

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)
        if seed is not None:
            Faker.seed(seed)

    def _attribute(self, base: int, variance: int) -> int:
        return max(1, min(99, base + self.rng.randint(-variance, variance)))

    def _ratings(self, role: str) -> tuple[int, int]:
        if role == "batsman":
            return self._attribute(75, 10), self._attribute(20, 10)
        if role == "bowler":
            return self._attribute(30, 12), self._attribute(75, 10)
        if role == "all_rounder":
            return self._attribute(62, 10), self._attribute(62, 10)
        return self._attribute(65, 10), self._attribute(15, 8)  # wicket keeper

    def _form(self, role: str) -> PlayerForm:
        matches = self.rng.randint(5, 120)
        return PlayerForm(
            recent_form=float(self.rng.randint(30, 80)),
            last5_runs=self.rng.randint(0, 180) if role != "bowler" else self.rng.randint(0, 40),
            last5_wickets=self.rng.randint(0, 10) if role in ("bowler", "all_rounder") else 0,
            career_matches=matches,
            career_runs=matches * self.rng.randint(2, 30),
            career_wickets=matches * self.rng.randint(0, 2) if role != "batsman" else 0,
        )

    def generate_player(self, player_id: int, role: str, is_overseas: bool = False) -> Player:
        faker_instance = self.rng.choice(self.OVERSEAS_FAKERS) if is_overseas else fake_in
        batting, bowling = self._ratings(role)
        return Player(
            id=player_id,
            name=faker_instance.name_male(),
            batting=batting,
            bowling=bowling,
            is_overseas=is_overseas,
            form=self._form(role),
        )

    def generate_team(
        self,
        team_id: int,
        name: Optional[str] = None,
        first_player_id: int = 1,
        overseas: int = 4,
        impact_players: int = 4,
    ) -> TeamSetup:
        """
        Generate a TeamSetup with an 11-player XI and impact substitutes.

        Player ids run consecutively from `first_player_id`, XI first.
        """
        overseas_slots = set(self.rng.sample(range(len(self.XI_ROLES)), min(overseas, 4)))
        xi = tuple(
            self.generate_player(first_player_id + i, role, i in overseas_slots)
            for i, role in enumerate(self.XI_ROLES)
        )
        next_id = first_player_id + len(xi)
        impact = tuple(
            self.generate_player(next_id + i, role)
            for i, role in enumerate(self.IMPACT_ROLES[:impact_players])
        )
        return TeamSetup(
            team_id=team_id,
            name=name or FRANCHISES[(team_id - 1) % len(FRANCHISES)],
            playing_xi=xi,
            impact_players=impact,
        )

    def generate_fixture(self, names: Optional[tuple] = None) -> tuple[TeamSetup, TeamSetup]:
        """Two teams with non-overlapping player ids"""
        name1, name2 = names or self.rng.sample(FRANCHISES, 2)
        return (
            self.generate_team(1, name1, first_player_id=1),
            self.generate_team(2, name2, first_player_id=101),
        )
