"""Classify the tracked competitor's chances of holding a target position."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from racestand._logging import log_engine_call
from racestand.bounds import max_points, max_points_breakdown, min_points
from racestand.constants import MIN_COMPETITORS
from racestand.formatters import pluralise
from racestand.models import ChampionshipConfig, Competitor
from racestand.standings import Standing, holder_of_rank, rank_competitors, standing_at_rank


class PositionStatus(str, Enum):
    """Outcome of a status query."""

    NONE = "NONE"
    GUARANTEED = "GUARANTEED"
    SECURED = "SECURED"
    ON_TRACK = "ON_TRACK"
    ACHIEVABLE = "ACHIEVABLE"
    NOT_POSSIBLE = "NOT_POSSIBLE"


@dataclass(frozen=True)
class RivalSummary:
    competitor_id: str
    name: str
    current_points: int
    current_rank: int
    max_points: int
    min_points: int
    max_breakdown: str
    is_threat: bool
    can_overtake: bool
    can_be_caught: bool


@dataclass(frozen=True)
class StatusResult:
    status: PositionStatus
    message: str
    details: str = ""
    rank: int | None = None
    points: int | None = None
    max_points: int | None = None
    min_points: int | None = None
    threats: tuple[RivalSummary, ...] = ()
    rivals: tuple[RivalSummary, ...] = ()


def find_tracked(competitors: Sequence[Competitor], tracked_id: str | None) -> Competitor | None:
    return next((c for c in competitors if c.id == tracked_id), None)


def best_possible_rank(
    config: ChampionshipConfig,
    competitors: Sequence[Competitor],
    tracked: Competitor,
    tracked_max: int,
) -> int:
    """1 + the number of rivals already guaranteed to finish above *tracked_max*."""
    return 1 + sum(
        1 for c in competitors
        if c.id != tracked.id and min_points(config, c) > tracked_max
    )


def summarise_rivals(
    config: ChampionshipConfig,
    standings: Sequence[Standing],
    tracked: Standing,
    tracked_min: int,
    tracked_max: int,
) -> list[RivalSummary]:
    """Bounds for every competitor other than *tracked*, in standings order."""
    rivals = []
    for standing in standings:
        if standing.competitor_id == tracked.competitor_id:
            continue
        comp = standing.competitor
        rival_max = max_points(config, comp)
        rival_min = min_points(config, comp)
        rivals.append(
            RivalSummary(
                competitor_id=comp.id,
                name=comp.name,
                current_points=standing.total_points,
                current_rank=standing.rank,
                max_points=rival_max,
                min_points=rival_min,
                max_breakdown=max_points_breakdown(config, comp),
                is_threat=rival_max >= tracked_min,
                can_overtake=rival_max > tracked.total_points,
                can_be_caught=rival_min < tracked_max,
            )
        )
    return rivals


def _rivals_for_position(
    rivals: Sequence[RivalSummary],
    target_position: int,
    target_holder: Standing | None,
) -> tuple[RivalSummary, ...]:
    """Rivals near the target rank, at it, or able to reach its current points."""
    return tuple(
        r for r in rivals
        if abs(r.current_rank - target_position) <= 2
        or (target_holder is not None and r.max_points >= target_holder.total_points)
        or r.current_rank == target_position
    )


@log_engine_call
def compute_status(
    config: ChampionshipConfig,
    competitors: Sequence[Competitor],
    tracked_id: str | None,
    target_position: int | None = None,
) -> StatusResult:
    """Classify whether *tracked_id* can still finish at or above *target_position*.

    Args:
        config: Championship rules.
        competitors: Every competitor, tracked one included.
        tracked_id: Id of the competitor the query is about.
        target_position: Championship rank to secure; defaults to the
                         configuration's target position.

    Returns:
        A StatusResult. Missing tracked competitor or fewer than two
        competitors yields ``PositionStatus.NONE`` rather than an error.
    """
    target = target_position or config.target_position
    tracked = find_tracked(competitors, tracked_id)
    if tracked is None or len(competitors) < MIN_COMPETITORS:
        return StatusResult(status=PositionStatus.NONE, message="Add competitors to begin")

    standings = rank_competitors(config, competitors)
    mine = next(s for s in standings if s.competitor_id == tracked.id)
    my_rank, my_points = mine.rank, mine.total_points
    my_max = max_points(config, tracked)
    my_min = min_points(config, tracked)

    target_holder = holder_of_rank(standings, target)
    below_target = standing_at_rank(standings, target + 1)
    rivals = summarise_rivals(config, standings, mine, my_min, my_max)
    remaining = len(tracked.remaining_race_indices)

    if my_rank <= target:
        # Tied rivals share our rank and can still finish ahead
        threats = [
            r for r in rivals
            if (r.current_rank > target or r.current_rank == my_rank)
            and r.max_points >= my_min
        ]
        if not threats and not remaining:
            status = PositionStatus.GUARANTEED
            if below_target is not None:
                buffer = my_min - below_target.total_points
                message = f"P{target} GUARANTEED! +{buffer} points buffer over P{target + 1}"
                details = f"{below_target.name} cannot catch up."
            else:
                message = f"P{target} GUARANTEED!"
                details = "No drivers can catch up."
        elif not threats:
            status = PositionStatus.SECURED
            buffer = my_points - below_target.total_points if below_target else my_points
            message = f"P{target} secured with this result"
            if below_target is not None and buffer > 0:
                details = f"+{buffer} points ahead of {below_target.name}"
            else:
                details = f"{pluralise(remaining, 'race')} remaining"
        else:
            status = PositionStatus.ON_TRACK
            top_threat = max(threats, key=lambda r: r.max_points)
            ahead = my_points - below_target.total_points if below_target else my_points
            message = f"Currently P{my_rank}. {ahead} points ahead of P{target + 1} cutoff."
            details = f"{top_threat.name} could reach {top_threat.max_points} pts (max)"
    else:
        holder_min = min_points(config, target_holder.competitor) if target_holder else 0
        if my_max > holder_min:
            status = PositionStatus.ACHIEVABLE
            gap = (target_holder.total_points if target_holder else 0) - my_points
            if gap > 0:
                message = f"{gap} points behind P{target}. Position still achievable."
                if target_holder is not None:
                    details = (
                        f"Need to overtake {target_holder.name} "
                        f"({target_holder.total_points} pts)"
                    )
                else:
                    details = f"Can reach up to {my_max} pts"
            else:
                message = f"P{target} is achievable"
                details = f"Can reach up to {my_max} pts with remaining races"
        else:
            status = PositionStatus.NOT_POSSIBLE
            best = best_possible_rank(config, competitors, tracked, my_max)
            message = f"Cannot achieve P{target}. Best possible: P{best}."
            if target_holder is not None:
                details = (
                    f"{target_holder.name}'s minimum ({holder_min} pts) "
                    f"exceeds your maximum ({my_max} pts)"
                )
            else:
                details = f"Maximum possible: {my_max} pts"

    return StatusResult(
        status=status,
        message=message,
        details=details,
        rank=my_rank,
        points=my_points,
        max_points=my_max,
        min_points=my_min,
        threats=tuple(r for r in rivals if r.is_threat),
        rivals=_rivals_for_position(rivals, target, target_holder),
    )
