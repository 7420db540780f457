"""Per-race scoring and best-N-of-M aggregation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from racestand.models import ChampionshipConfig, RaceResult


def race_points(config: ChampionshipConfig, position: int | None, fastest_lap: bool = False) -> int:
    """Points for one finish; positions beyond the table and absent finishes score 0."""
    if position is None:
        return 0
    points = config.scoring[position - 1] if 1 <= position <= len(config.scoring) else 0
    if config.fl_enabled and fastest_lap:
        points += config.fl_bonus
    return points


def result_points(config: ChampionshipConfig, result: RaceResult) -> int:
    return race_points(config, result.position, result.fastest_lap)


def race_points_list(config: ChampionshipConfig, results: Iterable[RaceResult]) -> list[int]:
    """Points scored in each race, in race order."""
    return [result_points(config, r) for r in results]


def best_of(points: Iterable[int], count_best: int) -> int:
    """Sum of the *count_best* highest race scores."""
    return sum(sorted(points, reverse=True)[:count_best])


def dropped_indices(points: Sequence[int], count_best: int) -> frozenset[int]:
    """Indices of the races that fall outside the best *count_best*.

    Among equal scores the later race is the one dropped.
    """
    ranked = sorted(range(len(points)), key=lambda i: points[i], reverse=True)
    return frozenset(ranked[count_best:])


def total_points(config: ChampionshipConfig, results: Iterable[RaceResult]) -> int:
    """Championship total after drop rounds."""
    return best_of(race_points_list(config, results), config.count_best)
