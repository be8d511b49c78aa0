from crease.models.stats import PlayerAllTimeStats

__all__ = [
    "PlayerAllTimeStats",
]
