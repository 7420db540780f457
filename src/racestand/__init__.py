"""RaceStand: championship standings and "what do I need" projections."""

from racestand.exceptions import (
    CompetitorError,
    PayloadError,
    RaceStandError,
    RaceStandValidationError,
    ResultError,
)
from racestand.models import ChampionshipConfig, Competitor, RaceResult
from racestand.scenarios import (
    Scenario,
    ScenarioOutcome,
    ScenarioResult,
    ScenarioStatus,
    compute_scenarios,
)
from racestand.scoring import race_points, total_points
from racestand.serialization import (
    dump_championship,
    dumps_championship,
    load_championship,
    validate_payload,
)
from racestand.standings import Standing, compute_standings
from racestand.state import ChampionshipState
from racestand.status import PositionStatus, StatusResult, compute_status

__all__ = [
    "ChampionshipConfig",
    "ChampionshipState",
    "Competitor",
    "CompetitorError",
    "PayloadError",
    "PositionStatus",
    "RaceResult",
    "RaceStandError",
    "RaceStandValidationError",
    "ResultError",
    "Scenario",
    "ScenarioOutcome",
    "ScenarioResult",
    "ScenarioStatus",
    "Standing",
    "StatusResult",
    "compute_scenarios",
    "compute_standings",
    "compute_status",
    "dump_championship",
    "dumps_championship",
    "load_championship",
    "race_points",
    "total_points",
    "validate_payload",
]

__version__ = "0.1.0"
