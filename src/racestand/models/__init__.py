"""RaceStand data models."""

from racestand.models.championship import ChampionshipConfig, build_config
from racestand.models.competitor import Competitor, RaceResult, empty_results, generate_id

__all__ = [
    "ChampionshipConfig",
    "Competitor",
    "RaceResult",
    "build_config",
    "empty_results",
    "generate_id",
]
