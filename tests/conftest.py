"""Shared test fixtures, competitor factories and sample import documents."""

from __future__ import annotations

import logging

import pytest

from racestand.models import ChampionshipConfig, Competitor, RaceResult

F1_SCORING = (25, 18, 15, 12, 10, 8, 6, 4, 2, 1)


SAMPLE_PAYLOAD = {
    "championship": {
        "name": "GT4 Sprint Cup",
        "scoring": [25, 18, 15, 12, 10],
        "totalRounds": 3,
        "countBest": 3,
        "flEnabled": True,
        "flBonus": 1,
        "targetPosition": 1,
    },
    "competitors": [
        {
            "name": "Leader",
            "isMyDriver": True,
            "results": [
                {"position": 1, "fastestLap": True},
                {"position": 2, "fastestLap": False},
                {"position": None, "fastestLap": False},
            ],
        },
        {
            "name": "Challenger",
            "isMyDriver": False,
            "results": [
                {"position": 2, "fastestLap": False},
                {"position": 1, "fastestLap": True},
                {"position": None, "fastestLap": False},
            ],
        },
    ],
}


def _make_competitor(
    name: str,
    positions: list[int | None],
    is_my_driver: bool = False,
    fastest_laps: tuple[int, ...] = (),
) -> Competitor:
    """Build a competitor from finishing positions; *fastest_laps* are race indices."""
    return Competitor(
        id=f"comp_{name.replace(' ', '_')}",
        name=name,
        is_my_driver=is_my_driver,
        results=tuple(
            RaceResult(position=pos, fastest_lap=i in fastest_laps)
            for i, pos in enumerate(positions)
        ),
    )


def _make_config(**overrides) -> ChampionshipConfig:
    data = {"scoring": F1_SCORING, "total_rounds": 5, "count_best": 5}
    data.update(overrides)
    return ChampionshipConfig(**data)


@pytest.fixture
def make_competitor():
    return _make_competitor


@pytest.fixture
def make_config():
    return _make_config


@pytest.fixture
def final_race_config() -> ChampionshipConfig:
    """Five-place table, three rounds, all count."""
    return _make_config(scoring=(25, 18, 15, 12, 10), total_rounds=3, count_best=3)


@pytest.fixture(autouse=True)
def _redirect_engine_log(tmp_path):
    """Send the engine log to tmp_path and reset the cached logger."""
    import racestand._logging as mod

    old_logger = mod._logger
    old_dir = mod._LOG_DIR
    old_file = mod._LOG_FILE

    named_logger = logging.getLogger(mod.LOGGER_NAME)
    named_logger.handlers.clear()

    mod._logger = None
    mod._LOG_DIR = str(tmp_path)
    mod._LOG_FILE = str(tmp_path / "engine_calls.log")

    yield tmp_path

    for h in named_logger.handlers[:]:
        h.close()
        named_logger.removeHandler(h)
    mod._logger = old_logger
    mod._LOG_DIR = old_dir
    mod._LOG_FILE = old_file
