"""Enumerate the results the tracked competitor needs in the remaining races.

Every candidate set of finishing positions is scored for the tracked
competitor and compared against a single key rival. Because two drivers
cannot share a finishing position, the rival's ceiling is recomputed per
scenario: when the tracked competitor wins a race the rival can do no better
than second in it. That conditional ceiling is what separates SAFE scenarios
from RISK ones.

For three or more remaining races only a fixed set of key positions is
sampled, so the list is representative rather than exhaustive.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import combinations_with_replacement

from racestand._logging import log_engine_call
from racestand.bounds import max_points, min_points
from racestand.constants import (
    EXTRA_SCENARIO_POSITIONS,
    KEY_POSITIONS,
    MAX_SCENARIO_POSITION,
    MIN_COMPETITORS,
    SCENARIO_LIMITS,
)
from racestand.formatters import format_positions, format_race_entry
from racestand.models import ChampionshipConfig, Competitor
from racestand.scoring import best_of, dropped_indices, race_points, race_points_list
from racestand.standings import Standing, holder_of_rank, rank_competitors, standing_at_rank
from racestand.status import best_possible_rank, find_tracked


class ScenarioStatus(str, Enum):
    SAFE = "SAFE"
    RISK = "RISK"
    FAIL = "FAIL"


class ScenarioOutcome(str, Enum):
    """What a scenario query produced."""

    NONE = "NONE"
    COMPLETE = "COMPLETE"
    GUARANTEED = "GUARANTEED"
    NOT_POSSIBLE = "NOT_POSSIBLE"
    SCENARIOS = "SCENARIOS"


_STATUS_ORDER = {ScenarioStatus.SAFE: 0, ScenarioStatus.RISK: 1, ScenarioStatus.FAIL: 2}


@dataclass(frozen=True)
class BreakdownEntry:
    text: str
    points: int
    is_dropped: bool
    is_best_case: bool


@dataclass(frozen=True)
class RivalBreakdown:
    """How one rival reaches their best total in a given scenario."""

    competitor_id: str
    name: str
    max_points: int
    entries: tuple[BreakdownEntry, ...]

    @property
    def text(self) -> str:
        return " + ".join(entry.text for entry in self.entries)


@dataclass(frozen=True)
class Scenario:
    positions: tuple[int, ...]
    display: str
    my_points: int
    rival_max_points: int
    status: ScenarioStatus
    rivals_breakdown: tuple[RivalBreakdown, ...] = ()


@dataclass(frozen=True)
class ScenarioResult:
    outcome: ScenarioOutcome
    message: str = ""
    contention: str = ""
    scenarios: tuple[Scenario, ...] = ()
    rival_name: str | None = None
    rival_max_points: int = 0


# ── Building blocks ────────────────────────────────────────


def find_key_rival(
    standings: Sequence[Standing],
    tracked: Standing,
    target_position: int,
) -> Standing | None:
    """The competitor whose result decides the target position.

    At or above the target it is the closest challenger below it, falling
    back to a competitor tied with the tracked one. Below the target it is
    whoever holds the target rank, or the last of a tied block spanning it.
    """
    if tracked.rank > target_position:
        return holder_of_rank(standings, target_position)

    rival = standing_at_rank(standings, target_position + 1)
    if rival is None:
        rival = next(
            (
                s for s in standings
                if s.rank == tracked.rank and s.competitor_id != tracked.competitor_id
            ),
            None,
        )
    return rival


def _rival_best_case(
    config: ChampionshipConfig,
    rival: Competitor,
    remaining_indices: Sequence[int],
    positions: Sequence[int],
) -> list[tuple[int | None, bool, int, bool]]:
    """Per-race (position, fastest_lap, points, is_best_case) for the rival's ceiling.

    Known results stay as they are. Open races go to P1 plus fastest lap,
    except where the tracked competitor has taken P1, which leaves P2.
    """
    my_positions = dict(zip(remaining_indices, positions))
    races = []
    for i, result in enumerate(rival.results):
        if not result.is_remaining:
            points = race_points(config, result.position, result.fastest_lap)
            races.append((result.position, result.fastest_lap, points, False))
            continue
        position = 2 if my_positions.get(i, 0) == 1 else 1
        points = race_points(config, position, fastest_lap=True)
        races.append((position, config.fl_enabled, points, True))
    return races


def conditional_max_points(
    config: ChampionshipConfig,
    rival: Competitor,
    remaining_indices: Sequence[int],
    positions: Sequence[int],
) -> int:
    """Rival's best total given the tracked competitor finishes in *positions*.

    Never exceeds ``max_points(config, rival)``.
    """
    races = _rival_best_case(config, rival, remaining_indices, positions)
    return best_of((points for _, _, points, _ in races), config.count_best)


def rival_breakdown(
    config: ChampionshipConfig,
    rival: Competitor,
    remaining_indices: Sequence[int],
    positions: Sequence[int],
) -> RivalBreakdown:
    races = _rival_best_case(config, rival, remaining_indices, positions)
    points = [p for _, _, p, _ in races]
    dropped = dropped_indices(points, config.count_best)
    entries = tuple(
        BreakdownEntry(
            text=format_race_entry(i, position, fastest_lap, dropped=i in dropped),
            points=race_pts,
            is_dropped=i in dropped,
            is_best_case=best_case,
        )
        for i, (position, fastest_lap, race_pts, best_case) in enumerate(races)
    )
    return RivalBreakdown(
        competitor_id=rival.id,
        name=rival.name,
        max_points=best_of(points, config.count_best),
        entries=entries,
    )


def candidate_positions(config: ChampionshipConfig, remaining: int) -> list[tuple[int, ...]]:
    """Finishing-position combinations to try for *remaining* races.

    Order within a combination is irrelevant to the total, so each
    combination is a sorted tuple.
    """
    if remaining < 1:
        return []
    max_position = min(len(config.scoring) + EXTRA_SCENARIO_POSITIONS, MAX_SCENARIO_POSITION)
    if remaining <= 2:
        alphabet = range(1, max_position + 1)
    else:
        alphabet = sorted({min(p, max_position) for p in KEY_POSITIONS})
    return list(combinations_with_replacement(alphabet, remaining))


def classify_scenario(my_points: int, rival_conditional_max: int, rival_min: int) -> ScenarioStatus:
    if my_points > rival_conditional_max:
        return ScenarioStatus.SAFE
    if my_points > rival_min:
        return ScenarioStatus.RISK
    return ScenarioStatus.FAIL


def _hypothetical_points(
    config: ChampionshipConfig,
    current_points: Sequence[int],
    remaining_indices: Sequence[int],
    positions: Sequence[int],
) -> list[int]:
    points = list(current_points)
    for race_index, position in zip(remaining_indices, positions):
        points[race_index] = race_points(config, position)
    return points


def _dropped_slots(
    config: ChampionshipConfig,
    all_points: Sequence[int],
    slot_points: Sequence[int],
) -> frozenset[int]:
    """Scenario slots scoring below the lowest result that still counts."""
    if config.drop_rounds <= 0 or config.count_best >= len(all_points):
        return frozenset()
    cutoff = sorted(all_points, reverse=True)[config.count_best - 1]
    return frozenset(i for i, pts in enumerate(slot_points) if pts < cutoff)


# ── Generation ─────────────────────────────────────────────


def generate_scenarios(
    config: ChampionshipConfig,
    competitors: Sequence[Competitor],
    tracked: Competitor,
    target_position: int,
    remaining_indices: Sequence[int] | None = None,
) -> list[Scenario]:
    """Classify every candidate result set, then keep the top of each band.

    Sorted SAFE, RISK, FAIL; within a band by points (desc) and then by
    position sum (desc, i.e. easiest first). Scenarios repeating a
    (status, points) pair are dropped before the per-band limits apply.
    """
    if remaining_indices is None:
        remaining_indices = tracked.remaining_race_indices
    standings = rank_competitors(config, competitors)
    mine = next(s for s in standings if s.competitor_id == tracked.id)
    key_rival = find_key_rival(standings, mine, target_position)
    rival = key_rival.competitor if key_rival else None
    rival_min = min_points(config, rival) if rival else 0
    current_points = race_points_list(config, tracked.results)

    classified = []
    for positions in candidate_positions(config, len(remaining_indices)):
        my_points = best_of(
            _hypothetical_points(config, current_points, remaining_indices, positions),
            config.count_best,
        )
        rival_max = (
            conditional_max_points(config, rival, remaining_indices, positions) if rival else 0
        )
        status = classify_scenario(my_points, rival_max, rival_min)
        classified.append((positions, my_points, rival_max, status))

    classified.sort(key=lambda c: (_STATUS_ORDER[c[3]], -c[1], -sum(c[0])))

    seen: set[tuple[ScenarioStatus, int]] = set()
    kept: dict[ScenarioStatus, list[tuple]] = {status: [] for status in ScenarioStatus}
    for entry in classified:
        key = (entry[3], entry[1])
        if key in seen:
            continue
        seen.add(key)
        if len(kept[entry[3]]) < SCENARIO_LIMITS[entry[3].value]:
            kept[entry[3]].append(entry)

    rivals = [c for c in competitors if c.id != tracked.id]
    scenarios = []
    for status in ScenarioStatus:
        for positions, my_points, rival_max, _ in kept[status]:
            all_points = _hypothetical_points(config, current_points, remaining_indices, positions)
            slot_points = [race_points(config, p) for p in positions]
            breakdowns = sorted(
                (rival_breakdown(config, r, remaining_indices, positions) for r in rivals),
                key=lambda b: b.max_points,
                reverse=True,
            )
            scenarios.append(
                Scenario(
                    positions=positions,
                    display=format_positions(
                        positions, _dropped_slots(config, all_points, slot_points)
                    ),
                    my_points=my_points,
                    rival_max_points=rival_max,
                    status=status,
                    rivals_breakdown=tuple(b for b in breakdowns if b.max_points > 0),
                )
            )
    return scenarios


@log_engine_call
def compute_scenarios(
    config: ChampionshipConfig,
    competitors: Sequence[Competitor],
    tracked_id: str | None,
    target_position: int | None = None,
) -> ScenarioResult:
    """Work out which results in the remaining races secure *target_position*."""
    target = target_position or config.target_position
    tracked = find_tracked(competitors, tracked_id)
    if tracked is None or len(competitors) < MIN_COMPETITORS:
        return ScenarioResult(outcome=ScenarioOutcome.NONE)

    remaining_indices = tracked.remaining_race_indices
    if not remaining_indices:
        return ScenarioResult(
            outcome=ScenarioOutcome.COMPLETE,
            message="Championship complete. No more races remaining.",
        )

    standings = rank_competitors(config, competitors)
    mine = next(s for s in standings if s.competitor_id == tracked.id)
    my_max = max_points(config, tracked)
    my_min = min_points(config, tracked)

    key_rival = find_key_rival(standings, mine, target)
    rival_max = max_points(config, key_rival.competitor) if key_rival else 0
    rival_name = key_rival.name if key_rival else None

    if mine.rank <= target:
        if key_rival is None or rival_max < my_min:
            return ScenarioResult(
                outcome=ScenarioOutcome.GUARANTEED,
                message="Position already secured! No specific results needed.",
                rival_name=rival_name,
                rival_max_points=rival_max,
            )
    elif my_max <= (min_points(config, key_rival.competitor) if key_rival else 0):
        best = best_possible_rank(config, competitors, tracked, my_max)
        return ScenarioResult(
            outcome=ScenarioOutcome.NOT_POSSIBLE,
            message=f"Cannot achieve P{target}. Best possible: P{best}.",
            rival_name=rival_name,
            rival_max_points=rival_max,
        )

    scenarios = generate_scenarios(config, competitors, tracked, target, remaining_indices)
    safe = [s for s in scenarios if s.status is ScenarioStatus.SAFE]
    risk = [s for s in scenarios if s.status is ScenarioStatus.RISK]
    single_race = len(remaining_indices) == 1

    if safe:
        easiest = safe[-1]
        where = "in the final race" if single_race else "in remaining races (any order)"
        message = f"To guarantee P{target}: finish {easiest.display} {where}."
    elif risk:
        message = (
            f"No guaranteed path to P{target}. Best hope: {risk[0].display} "
            "(depends on rival results)."
        )
    else:
        message = f"P{target} cannot be achieved with remaining races."

    contention = ""
    viable = [s for s in scenarios if s.status is not ScenarioStatus.FAIL]
    if viable:
        worst = max(viable[-1].positions)
        if single_race:
            contention = f"Minimum to stay in contention: P{worst} or better in the final race."
        else:
            contention = (
                f"Minimum to stay in contention: P{worst} or better average in remaining races."
            )

    return ScenarioResult(
        outcome=ScenarioOutcome.SCENARIOS,
        message=message,
        contention=contention,
        scenarios=tuple(scenarios),
        rival_name=rival_name,
        rival_max_points=rival_max,
    )
