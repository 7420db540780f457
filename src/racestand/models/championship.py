"""Championship configuration model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from racestand.constants import DEFAULT_FL_BONUS, DEFAULT_SCORING, DEFAULT_TOTAL_ROUNDS
from racestand.exceptions import RaceStandValidationError


class ChampionshipConfig(BaseModel):
    """Points table, season length, drop rounds and fastest-lap rules."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    scoring: tuple[NonNegativeInt, ...] = Field(default=DEFAULT_SCORING, min_length=1)
    total_rounds: int = Field(default=DEFAULT_TOTAL_ROUNDS, ge=1)
    count_best: int = Field(default=DEFAULT_TOTAL_ROUNDS, ge=1)
    fl_enabled: bool = False
    fl_bonus: NonNegativeInt = DEFAULT_FL_BONUS
    target_position: int = Field(default=1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _clamp_count_best(cls, data: Any) -> Any:
        """Keep count_best within total_rounds, whichever spelling was used."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        rounds_key = "totalRounds" if "totalRounds" in data else "total_rounds"
        best_key = "countBest" if "countBest" in data else "count_best"
        total_rounds = data.get(rounds_key, DEFAULT_TOTAL_ROUNDS)
        count_best = data.get(best_key, DEFAULT_TOTAL_ROUNDS)
        if (
            isinstance(total_rounds, int)
            and isinstance(count_best, int)
            and count_best > total_rounds >= 1
        ):
            data[best_key] = total_rounds
        return data

    @property
    def max_race_points(self) -> int:
        """Best possible single-race score: a win, plus the fastest lap if it pays."""
        return self.scoring[0] + (self.fl_bonus if self.fl_enabled else 0)

    @property
    def drop_rounds(self) -> int:
        """Number of races excluded from each competitor's total."""
        return self.total_rounds - self.count_best

    def with_changes(self, **changes: Any) -> ChampionshipConfig:
        """Return a validated copy with *changes* applied (snake_case field names)."""
        data = self.model_dump()
        data.update(changes)
        return build_config(data)


def build_config(data: dict[str, Any]) -> ChampionshipConfig:
    """Validate *data* into a ChampionshipConfig, raising RaceStandValidationError."""
    try:
        return ChampionshipConfig.model_validate(data)
    except ValidationError as exc:
        raise RaceStandValidationError(
            f"Invalid championship configuration: {exc}"
        ) from exc
