"""
All-time player statistics, accumulated across completed matches
"""
from typing import Optional
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from crease.database import Base


class PlayerAllTimeStats(Base):
    """
    Career totals for one player, keyed by player id.
    Rows are merged additively after each match; best figures are kept.
    """
    __tablename__ = "player_all_time_stats"

    player_id: Mapped[int] = mapped_column(primary_key=True)
    player_name: Mapped[str] = mapped_column(String(100))
    team_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Batting stats
    matches_batted: Mapped[int] = mapped_column(Integer, default=0)
    total_runs: Mapped[int] = mapped_column(Integer, default=0)
    balls_faced: Mapped[int] = mapped_column(Integer, default=0)
    highest_score: Mapped[int] = mapped_column(Integer, default=0)
    fifties: Mapped[int] = mapped_column(Integer, default=0)
    hundreds: Mapped[int] = mapped_column(Integer, default=0)
    fours: Mapped[int] = mapped_column(Integer, default=0)
    sixes: Mapped[int] = mapped_column(Integer, default=0)
    not_outs: Mapped[int] = mapped_column(Integer, default=0)

    # Bowling stats
    matches_bowled: Mapped[int] = mapped_column(Integer, default=0)
    total_wickets: Mapped[int] = mapped_column(Integer, default=0)
    balls_bowled: Mapped[int] = mapped_column(Integer, default=0)
    runs_conceded: Mapped[int] = mapped_column(Integer, default=0)
    best_bowling_wickets: Mapped[int] = mapped_column(Integer, default=0)
    best_bowling_runs: Mapped[int] = mapped_column(Integer, default=0)
    maidens: Mapped[int] = mapped_column(Integer, default=0)

    @property
    def batting_average(self) -> float:
        """Runs per dismissal"""
        dismissals = self.matches_batted - self.not_outs
        if dismissals <= 0:
            return float(self.total_runs)
        return round(self.total_runs / dismissals, 2)

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return round((self.total_runs / self.balls_faced) * 100, 2)

    @property
    def economy(self) -> float:
        if self.balls_bowled == 0:
            return 0.0
        return round((self.runs_conceded / self.balls_bowled) * 6, 2)

    @property
    def best_bowling(self) -> str:
        return f"{self.best_bowling_wickets}/{self.best_bowling_runs}"

    def __repr__(self):
        return f"<PlayerAllTimeStats {self.player_name}: {self.total_runs} runs, {self.total_wickets} wkts>"
