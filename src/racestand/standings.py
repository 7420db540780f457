"""Championship standings with win-count tie-breaks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from racestand._logging import log_engine_call
from racestand.constants import TIEBREAK_DEPTH
from racestand.models import ChampionshipConfig, Competitor, RaceResult
from racestand.scoring import total_points


@dataclass(frozen=True)
class Standing:
    competitor: Competitor
    total_points: int
    rank: int
    is_tied: bool
    histogram: tuple[int, ...]

    @property
    def competitor_id(self) -> str:
        return self.competitor.id

    @property
    def name(self) -> str:
        return self.competitor.name

    @property
    def is_my_driver(self) -> bool:
        return self.competitor.is_my_driver

    @property
    def wins(self) -> int:
        return self.histogram[0]


def position_histogram(results: Iterable[RaceResult]) -> tuple[int, ...]:
    """Count of finishes at P1..P20, used to break points ties."""
    counts = [0] * TIEBREAK_DEPTH
    for result in results:
        if result.position is not None and result.position <= TIEBREAK_DEPTH:
            counts[result.position - 1] += 1
    return tuple(counts)


def _sort_key(entry: tuple[Competitor, int, tuple[int, ...]]) -> tuple:
    competitor, points, histogram = entry
    return (
        -points,
        tuple(-count for count in histogram),
        competitor.name.casefold(),
        competitor.name,
    )


def rank_competitors(
    config: ChampionshipConfig,
    competitors: Sequence[Competitor],
) -> list[Standing]:
    """Rank every competitor by points, then P1..P20 finish counts, then name.

    Competitors share a rank only when both their totals and their full
    finish-count histograms match; the next distinct competitor resumes at
    its 1-based index.
    """
    entries = sorted(
        (
            (comp, total_points(config, comp.results), position_histogram(comp.results))
            for comp in competitors
        ),
        key=_sort_key,
    )

    standings: list[Standing] = []
    current_rank = 1
    for index, (comp, points, histogram) in enumerate(entries):
        is_tied = False
        if index > 0:
            prev = standings[-1]
            is_tied = points == prev.total_points and histogram == prev.histogram
            if not is_tied:
                current_rank = index + 1
        standings.append(
            Standing(
                competitor=comp,
                total_points=points,
                rank=current_rank,
                is_tied=is_tied,
                histogram=histogram,
            )
        )
    return standings


@log_engine_call
def compute_standings(
    config: ChampionshipConfig,
    competitors: Sequence[Competitor],
) -> list[Standing]:
    """Current standings; see rank_competitors for the ordering rules."""
    return rank_competitors(config, competitors)


def find_standing(standings: Iterable[Standing], competitor_id: str) -> Standing | None:
    return next((s for s in standings if s.competitor_id == competitor_id), None)


def standing_at_rank(standings: Iterable[Standing], rank: int) -> Standing | None:
    """First standing holding *rank*, or None if a tie skipped it."""
    return next((s for s in standings if s.rank == rank), None)


def holder_of_rank(standings: Sequence[Standing], rank: int) -> Standing | None:
    """Standing at *rank*, or the last one ranked above it when a tie spans *rank*."""
    exact = standing_at_rank(standings, rank)
    if exact is not None:
        return exact
    return next((s for s in reversed(standings) if s.rank <= rank), None)
