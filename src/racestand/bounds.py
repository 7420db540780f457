"""Best- and worst-case championship totals from the races still to run."""

from __future__ import annotations

from racestand.formatters import format_race_entry
from racestand.models import ChampionshipConfig, Competitor
from racestand.scoring import best_of, dropped_indices, race_points_list


def best_case_points(config: ChampionshipConfig, competitor: Competitor) -> list[int]:
    """Per-race points with every remaining race scored as a win (plus FL)."""
    points = race_points_list(config, competitor.results)
    for i in competitor.remaining_race_indices:
        points[i] = config.max_race_points
    return points


def max_points(config: ChampionshipConfig, competitor: Competitor) -> int:
    """Highest total the competitor can still reach."""
    return best_of(best_case_points(config, competitor), config.count_best)


def min_points(config: ChampionshipConfig, competitor: Competitor) -> int:
    """Lowest total the competitor can still end on: nothing more is scored."""
    return best_of(race_points_list(config, competitor.results), config.count_best)


def max_points_breakdown(config: ChampionshipConfig, competitor: Competitor) -> str:
    """Race-by-race text of the best case, e.g. ``R1:P2 (R2:P5) R3:P1+FL``."""
    dropped = dropped_indices(best_case_points(config, competitor), config.count_best)
    parts = []
    for i, result in enumerate(competitor.results):
        if result.is_remaining:
            position, fastest_lap = 1, config.fl_enabled
        else:
            position, fastest_lap = result.position, result.fastest_lap
        parts.append(format_race_entry(i, position, fastest_lap, dropped=i in dropped))
    return " ".join(parts)
