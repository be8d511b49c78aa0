"""
Bowler rotation rules: a quota of overs per bowler, and no bowler may bowl
two overs in a row.
"""
import math
from typing import Iterable, Optional

from crease.engine.state import Player


def max_overs_per_bowler(overs_format: int) -> int:
    """4 in a T20, 10 in a 50-over game"""
    return overs_format // 5


def is_eligible(bowler: Player, last_over_bowler_id: Optional[int], overs_format: int) -> bool:
    if math.floor(bowler.overs_bowled) >= max_overs_per_bowler(overs_format):
        return False
    return bowler.id != last_over_bowler_id


def available_bowlers(
    bowling_xi: Iterable[Player],
    last_over_bowler_id: Optional[int],
    overs_format: int,
) -> list[Player]:
    """
    Bowlers allowed to bowl the next over. An empty list means no legal
    bowler is left; callers have to surface that to the user.
    """
    return [b for b in bowling_xi if is_eligible(b, last_over_bowler_id, overs_format)]
