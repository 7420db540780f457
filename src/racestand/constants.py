"""Shared constants for the standings and scenario engine."""

from __future__ import annotations

# Modern F1 points for P1..P10
DEFAULT_SCORING: tuple[int, ...] = (25, 18, 15, 12, 10, 8, 6, 4, 2, 1)
DEFAULT_TOTAL_ROUNDS = 5
DEFAULT_FL_BONUS = 1

MIN_COMPETITORS = 2

# Finishing positions compared when breaking a points tie (P1..P20)
TIEBREAK_DEPTH = 20

# Scenario enumeration
MAX_SCENARIO_POSITION = 20
EXTRA_SCENARIO_POSITIONS = 3
KEY_POSITIONS: tuple[int, ...] = (1, 2, 3, 4, 5, 8, 10)

SCENARIO_LIMITS: dict[str, int] = {
    "SAFE": 5,
    "RISK": 3,
    "FAIL": 2,
}

LOG_DIR_ENV_VAR = "RACESTAND_LOG_DIR"
LOG_FILE_NAME = "engine_calls.log"
