"""Caller-owned championship state with validated mutations.

The engine functions are pure; this class is the single place where a
championship is edited. Every mutation replaces the immutable models it
touches, and every query recomputes from scratch.
"""

from __future__ import annotations

from typing import Any

from racestand._logging import get_logger, log_engine_call
from racestand.constants import MIN_COMPETITORS
from racestand.exceptions import CompetitorError, ResultError
from racestand.models import ChampionshipConfig, Competitor, RaceResult, empty_results
from racestand.scenarios import ScenarioResult, compute_scenarios
from racestand.standings import Standing, rank_competitors
from racestand.status import StatusResult, compute_status


class ChampionshipState:
    """A championship being edited interactively.

    Usage:
        state = ChampionshipState()
        state.add_competitor("Alice")
        state.add_competitor("Bob")
        state.set_result(state.competitors[0].id, 0, 1)
        print(state.status().message)
    """

    def __init__(
        self,
        config: ChampionshipConfig | None = None,
        competitors: list[Competitor] | None = None,
    ) -> None:
        self.config = config or ChampionshipConfig()
        self.competitors: list[Competitor] = list(competitors or [])

    def __repr__(self) -> str:
        return (
            f"ChampionshipState(name={self.config.name!r}, "
            f"competitors={len(self.competitors)})"
        )

    # ── Lookups ────────────────────────────────────────────

    @property
    def tracked(self) -> Competitor | None:
        """The competitor flagged as "my driver", if any."""
        return next((c for c in self.competitors if c.is_my_driver), None)

    def get_competitor(self, competitor_id: str) -> Competitor:
        for comp in self.competitors:
            if comp.id == competitor_id:
                return comp
        raise CompetitorError("Driver not found")

    def _index_of(self, competitor_id: str) -> int:
        for index, comp in enumerate(self.competitors):
            if comp.id == competitor_id:
                return index
        raise CompetitorError("Driver not found")

    def _name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        folded = name.casefold()
        return any(
            c.name.casefold() == folded for c in self.competitors if c.id != exclude_id
        )

    def is_race_completed(self, race_index: int) -> bool:
        """True once any competitor has a classified finish in the race."""
        return any(
            race_index < len(c.results) and not c.results[race_index].is_remaining
            for c in self.competitors
        )

    # ── Configuration ──────────────────────────────────────

    def update_config(self, **changes: Any) -> ChampionshipConfig:
        """Apply config changes, then fit every results list to the season length."""
        self.config = self.config.with_changes(**changes)
        rounds = self.config.total_rounds
        self.competitors = [
            c.model_copy(update={"results": (c.results + empty_results(rounds))[:rounds]})
            for c in self.competitors
        ]
        get_logger().info("STATE: update_config(%s)", ", ".join(sorted(changes)))
        return self.config

    # ── Competitors ────────────────────────────────────────

    def add_competitor(self, name: str) -> Competitor:
        """Add a competitor; the first one added becomes the tracked driver."""
        trimmed = name.strip()
        if not trimmed:
            raise CompetitorError("Name cannot be empty")
        if self._name_taken(trimmed):
            raise CompetitorError("Driver already exists")

        competitor = Competitor(
            name=trimmed,
            is_my_driver=not self.competitors,
            results=empty_results(self.config.total_rounds),
        )
        self.competitors.append(competitor)
        get_logger().info("STATE: add_competitor(%r) -> %s", trimmed, competitor.id)
        return competitor

    def add_default_drivers(self) -> None:
        self.add_competitor("Driver 1")
        self.add_competitor("Driver 2")

    def remove_competitor(self, competitor_id: str) -> None:
        """Remove a competitor, handing the tracked flag to the first one left."""
        if len(self.competitors) <= MIN_COMPETITORS:
            raise CompetitorError("Minimum 2 drivers required")
        index = self._index_of(competitor_id)
        removed = self.competitors.pop(index)
        if removed.is_my_driver and self.competitors:
            self.competitors[0] = self.competitors[0].model_copy(update={"is_my_driver": True})
        get_logger().info("STATE: remove_competitor(%s)", competitor_id)

    def set_my_driver(self, competitor_id: str) -> None:
        self._index_of(competitor_id)
        self.competitors = [
            c.model_copy(update={"is_my_driver": c.id == competitor_id})
            for c in self.competitors
        ]

    def rename_competitor(self, competitor_id: str, name: str) -> Competitor:
        """Rename a competitor. Blank or unchanged names leave it as it was."""
        index = self._index_of(competitor_id)
        current = self.competitors[index]
        new_name = name.strip()
        if not new_name or new_name == current.name:
            return current
        if self._name_taken(new_name, exclude_id=competitor_id):
            raise CompetitorError("Driver name already exists")
        self.competitors[index] = current.model_copy(update={"name": new_name})
        return self.competitors[index]

    # ── Results ────────────────────────────────────────────

    def _replace_result(self, index: int, race_index: int, result: RaceResult) -> None:
        comp = self.competitors[index]
        if not 0 <= race_index < len(comp.results):
            raise ResultError(f"Race index {race_index} out of range")
        results = list(comp.results)
        results[race_index] = result
        self.competitors[index] = comp.model_copy(update={"results": tuple(results)})

    def set_result(self, competitor_id: str, race_index: int, position: int | str | None) -> None:
        """Set (or clear, with None / "") a finishing position."""
        index = self._index_of(competitor_id)
        if position is None or position == "":
            parsed = None
        else:
            try:
                parsed = int(position)
            except (TypeError, ValueError) as exc:
                raise ResultError("Invalid position") from exc
            if parsed < 1:
                raise ResultError("Invalid position")

        comp = self.competitors[index]
        if 0 <= race_index < len(comp.results):
            current = comp.results[race_index]
        else:
            current = RaceResult()
        self._replace_result(
            index, race_index, RaceResult(position=parsed, fastest_lap=current.fastest_lap),
        )
        get_logger().info("STATE: set_result(%s, R%d, %s)", competitor_id, race_index + 1, parsed)

    def set_fastest_lap(self, competitor_id: str, race_index: int, has_fastest_lap: bool) -> None:
        """Flag the fastest lap of a race; only one competitor can hold it."""
        index = self._index_of(competitor_id)
        comp = self.competitors[index]
        if not 0 <= race_index < len(comp.results):
            raise ResultError(f"Race index {race_index} out of range")

        if has_fastest_lap:
            for other_index, other in enumerate(self.competitors):
                if race_index < len(other.results) and other.results[race_index].fastest_lap:
                    self._replace_result(
                        other_index,
                        race_index,
                        other.results[race_index].model_copy(update={"fastest_lap": False}),
                    )

        current = self.competitors[index].results[race_index]
        self._replace_result(
            index, race_index, current.model_copy(update={"fastest_lap": has_fastest_lap}),
        )

    # ── Queries ────────────────────────────────────────────

    @log_engine_call
    def standings(self) -> list[Standing]:
        return rank_competitors(self.config, self.competitors)

    def status(self, target_position: int | None = None) -> StatusResult:
        tracked = self.tracked
        return compute_status(
            self.config, self.competitors, tracked.id if tracked else None, target_position,
        )

    def scenarios(self, target_position: int | None = None) -> ScenarioResult:
        tracked = self.tracked
        return compute_scenarios(
            self.config, self.competitors, tracked.id if tracked else None, target_position,
        )
