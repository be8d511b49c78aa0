from crease.generators.squad_generator import SquadGenerator

__all__ = ["SquadGenerator"]
