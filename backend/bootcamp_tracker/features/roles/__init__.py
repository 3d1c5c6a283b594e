"""Lane role inference and the champion play rates behind it."""

from .classifier import identify_roles, playrate_table
from .orm_models import ChampionPlayrateORM

__all__ = ["identify_roles", "playrate_table", "ChampionPlayrateORM"]
