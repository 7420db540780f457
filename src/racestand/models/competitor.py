"""Competitor and per-race result models."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel


def generate_id() -> str:
    """Return a fresh competitor identifier."""
    return "comp_" + uuid.uuid4().hex[:9]


class RaceResult(BaseModel):
    """One competitor's outcome in one race.

    A missing position means the race has not been run yet or the competitor
    was not classified (DNS, DNF and DSQ all collapse to ``None``).
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    position: PositiveInt | None = None
    fastest_lap: bool = False

    @property
    def is_remaining(self) -> bool:
        return self.position is None


class Competitor(BaseModel):
    """A driver in the championship with one result slot per round."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(default_factory=generate_id)
    name: str = Field(min_length=1)
    is_my_driver: bool = False
    results: tuple[RaceResult, ...] = ()

    @property
    def remaining_race_indices(self) -> list[int]:
        """Indices of the races without a classified position."""
        return [i for i, result in enumerate(self.results) if result.is_remaining]

    def count_finishes(self, position: int) -> int:
        """How many times this competitor finished in *position*."""
        return sum(1 for result in self.results if result.position == position)


def empty_results(total_rounds: int) -> tuple[RaceResult, ...]:
    """A season's worth of not-yet-run results."""
    return tuple(RaceResult() for _ in range(total_rounds))
