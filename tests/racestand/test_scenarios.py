"""Tests for scenario generation and the zero-sum rival ceiling."""

from __future__ import annotations

import pytest

from racestand.bounds import max_points
from racestand.constants import SCENARIO_LIMITS
from racestand.scenarios import (
    ScenarioOutcome,
    ScenarioStatus,
    candidate_positions,
    classify_scenario,
    compute_scenarios,
    conditional_max_points,
    generate_scenarios,
)
from racestand.scoring import total_points


@pytest.fixture
def final_race_field(make_competitor):
    """Level on points with one race to go."""
    return [
        make_competitor("Leader", [1, 2, None], is_my_driver=True),
        make_competitor("Challenger", [2, 1, None]),
    ]


def _by_positions(scenarios):
    return {s.positions: s for s in scenarios}


class TestCandidatePositions:
    def test_no_remaining_races(self, final_race_config) -> None:
        assert candidate_positions(final_race_config, 0) == []

    def test_single_race_covers_table_plus_three(self, final_race_config) -> None:
        assert candidate_positions(final_race_config, 1) == [(p,) for p in range(1, 9)]

    def test_two_races_are_unordered_pairs(self, final_race_config) -> None:
        pairs = candidate_positions(final_race_config, 2)
        assert len(pairs) == 36
        assert all(a <= b for a, b in pairs)

    def test_three_races_sample_key_positions(self, final_race_config) -> None:
        combos = candidate_positions(final_race_config, 3)
        used = {p for combo in combos for p in combo}
        assert used == {1, 2, 3, 4, 5, 8}
        assert len(combos) == 56

    def test_long_table_caps_at_twenty(self, make_config) -> None:
        config = make_config(scoring=tuple(range(30, 0, -1)))
        assert candidate_positions(config, 1)[-1] == (20,)

    def test_key_positions_with_full_table(self, make_config) -> None:
        combos = candidate_positions(make_config(), 3)
        assert {p for combo in combos for p in combo} == {1, 2, 3, 4, 5, 8, 10}
        assert len(combos) == 84


class TestConditionalMax:
    def test_rival_limited_to_second_when_we_win(self, final_race_config, final_race_field) -> None:
        _, rival = final_race_field
        assert conditional_max_points(final_race_config, rival, [2], [1]) == 61
        assert conditional_max_points(final_race_config, rival, [2], [2]) == 68

    def test_never_exceeds_unconditional_max(self, make_config, make_competitor) -> None:
        config = make_config(total_rounds=4, count_best=3, fl_enabled=True)
        rival = make_competitor("Rival", [3, None, None, 7])
        ceiling = max_points(config, rival)
        for positions in candidate_positions(config, 2):
            assert conditional_max_points(config, rival, [1, 2], positions) <= ceiling

    def test_known_results_are_kept(self, final_race_config, make_competitor) -> None:
        # Tracked competitor has an open race the rival already finished
        rival = make_competitor("Rival", [2, 1, 3])
        assert conditional_max_points(final_race_config, rival, [2], [1]) == 58


class TestClassify:
    @pytest.mark.parametrize(
        "mine, rival_max, rival_min, expected",
        [
            (68, 61, 43, ScenarioStatus.SAFE),
            (61, 68, 43, ScenarioStatus.RISK),
            (43, 68, 43, ScenarioStatus.FAIL),
            (61, 61, 43, ScenarioStatus.RISK),
        ],
    )
    def test_bands(self, mine, rival_max, rival_min, expected) -> None:
        assert classify_scenario(mine, rival_max, rival_min) is expected

    def test_worse_finish_never_improves_status(
        self, final_race_config, final_race_field,
    ) -> None:
        leader, rival = final_race_field
        order = {ScenarioStatus.SAFE: 0, ScenarioStatus.RISK: 1, ScenarioStatus.FAIL: 2}
        rival_min = total_points(final_race_config, rival.results)
        previous = -1
        for (position,) in candidate_positions(final_race_config, 1):
            results = list(leader.results)
            results[2] = results[2].model_copy(update={"position": position})
            mine = total_points(final_race_config, results)
            ceiling = conditional_max_points(final_race_config, rival, [2], [position])
            rank = order[classify_scenario(mine, ceiling, rival_min)]
            assert rank >= previous
            previous = rank


class TestGenerateScenarios:
    def test_winning_final_race_is_safe(self, final_race_config, final_race_field) -> None:
        leader = final_race_field[0]
        scenarios = _by_positions(
            generate_scenarios(final_race_config, final_race_field, leader, 1)
        )
        win = scenarios[(1,)]
        assert win.my_points == 68
        assert win.rival_max_points == 61
        assert win.status is ScenarioStatus.SAFE
        assert win.display == "P1"

    def test_third_place_is_risk(self, final_race_config, final_race_field) -> None:
        leader = final_race_field[0]
        scenarios = _by_positions(
            generate_scenarios(final_race_config, final_race_field, leader, 1)
        )
        third = scenarios[(3,)]
        assert third.my_points == 58
        assert third.rival_max_points == 68
        assert third.status is ScenarioStatus.RISK

    def test_order_dedup_and_limits(self, final_race_config, final_race_field) -> None:
        leader = final_race_field[0]
        scenarios = generate_scenarios(final_race_config, final_race_field, leader, 1)
        assert [s.positions for s in scenarios] == [(1,), (2,), (3,), (4,), (8,)]
        assert [s.status for s in scenarios] == [
            ScenarioStatus.SAFE,
            ScenarioStatus.RISK,
            ScenarioStatus.RISK,
            ScenarioStatus.RISK,
            ScenarioStatus.FAIL,
        ]

    def test_rival_breakdown(self, final_race_config, final_race_field) -> None:
        leader = final_race_field[0]
        win = generate_scenarios(final_race_config, final_race_field, leader, 1)[0]
        (breakdown,) = win.rivals_breakdown
        assert breakdown.name == "Challenger"
        assert breakdown.max_points == 61
        assert breakdown.text == "R1:P2 + R2:P1 + R3:P2"
        assert [e.is_best_case for e in breakdown.entries] == [False, False, True]

    def test_pointless_rivals_left_out_of_breakdown(
        self, final_race_config, final_race_field, make_competitor,
    ) -> None:
        field = [*final_race_field, make_competitor("Ghost", [6, 7, 8])]
        win = generate_scenarios(final_race_config, field, field[0], 1)[0]
        assert [b.name for b in win.rivals_breakdown] == ["Challenger"]

    def test_all_safe_when_rival_far_back(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("Leader", [1, 1, None], is_my_driver=True),
            make_competitor("Challenger", [3, 3, None]),
        ]
        scenarios = generate_scenarios(final_race_config, field, field[0], 1)
        safe = [s for s in scenarios if s.status is ScenarioStatus.SAFE]
        assert [s.positions for s in safe] == [(1,), (2,), (3,), (4,), (5,)]
        assert [s.my_points for s in safe] == [75, 68, 65, 62, 60]

    def test_dropped_slot_shown_as_any(self, make_config, make_competitor) -> None:
        config = make_config(scoring=(25, 18, 15, 12, 10), total_rounds=3, count_best=2)
        field = [
            make_competitor("Leader", [1, 1, None], is_my_driver=True),
            make_competitor("Challenger", [2, 2, None]),
        ]
        scenarios = generate_scenarios(config, field, field[0], 1)
        # Every finish leaves Leader on 50, so one scenario survives dedup
        assert len(scenarios) == 1
        assert scenarios[0].positions == (8,)
        assert scenarios[0].display == "any"
        assert scenarios[0].status is ScenarioStatus.SAFE

    def test_three_remaining_races(self, make_config, make_competitor) -> None:
        config = make_config(total_rounds=4, count_best=4)
        field = [
            make_competitor("Leader", [1, None, None, None], is_my_driver=True),
            make_competitor("Challenger", [2, None, None, None]),
        ]
        scenarios = generate_scenarios(config, field, field[0], 1)
        assert scenarios[0].positions == (1, 1, 1)
        assert scenarios[0].my_points == 100
        assert scenarios[0].rival_max_points == 72
        for status in ScenarioStatus:
            banded = [s for s in scenarios if s.status is status]
            assert len(banded) <= SCENARIO_LIMITS[status.value]
        seen = {(s.status, s.my_points) for s in scenarios}
        assert len(seen) == len(scenarios)
        assert all(set(s.positions) <= {1, 2, 3, 4, 5, 8, 10} for s in scenarios)


class TestComputeScenarios:
    def test_none_without_tracked(self, final_race_config, final_race_field) -> None:
        result = compute_scenarios(final_race_config, final_race_field, "missing", 1)
        assert result.outcome is ScenarioOutcome.NONE
        assert result.scenarios == ()

    def test_complete(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("Leader", [1, 2, 1], is_my_driver=True),
            make_competitor("Challenger", [2, 1, 2]),
        ]
        result = compute_scenarios(final_race_config, field, "comp_Leader", 1)
        assert result.outcome is ScenarioOutcome.COMPLETE
        assert result.message == "Championship complete. No more races remaining."

    def test_guaranteed(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("Leader", [1, 1, None], is_my_driver=True),
            make_competitor("Challenger", [5, 5, None]),
        ]
        result = compute_scenarios(final_race_config, field, "comp_Leader", 1)
        assert result.outcome is ScenarioOutcome.GUARANTEED
        assert result.message == "Position already secured! No specific results needed."
        assert result.rival_name == "Challenger"
        assert result.rival_max_points == 45

    def test_not_possible(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("Leader", [1, 1, None]),
            make_competitor("Challenger", [5, 5, None], is_my_driver=True),
        ]
        result = compute_scenarios(final_race_config, field, "comp_Challenger", 1)
        assert result.outcome is ScenarioOutcome.NOT_POSSIBLE
        assert result.message == "Cannot achieve P1. Best possible: P2."

    def test_final_race_messages(self, final_race_config, final_race_field) -> None:
        result = compute_scenarios(final_race_config, final_race_field, "comp_Leader", 1)
        assert result.outcome is ScenarioOutcome.SCENARIOS
        assert result.rival_name == "Challenger"
        assert result.rival_max_points == 68
        assert result.message == "To guarantee P1: finish P1 in the final race."
        assert result.contention == (
            "Minimum to stay in contention: P4 or better in the final race."
        )

    def test_easiest_safe_result_is_suggested(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("Leader", [1, 1, None], is_my_driver=True),
            make_competitor("Challenger", [3, 3, None]),
        ]
        result = compute_scenarios(final_race_config, field, "comp_Leader", 1)
        assert result.message == "To guarantee P1: finish P5 in the final race."
        assert result.contention == (
            "Minimum to stay in contention: P8 or better in the final race."
        )

    def test_chasing_without_guarantee(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("Leader", [1, 1, None]),
            make_competitor("Challenger", [2, 2, None], is_my_driver=True),
        ]
        result = compute_scenarios(final_race_config, field, "comp_Challenger", 1)
        assert result.outcome is ScenarioOutcome.SCENARIOS
        assert all(s.status is not ScenarioStatus.SAFE for s in result.scenarios)
        assert result.message == (
            "No guaranteed path to P1. Best hope: P1 (depends on rival results)."
        )

    def test_multi_race_wording(self, make_config, make_competitor) -> None:
        config = make_config(scoring=(25, 18, 15, 12, 10), total_rounds=3, count_best=3)
        field = [
            make_competitor("Leader", [1, None, None], is_my_driver=True),
            make_competitor("Challenger", [2, None, None]),
        ]
        result = compute_scenarios(config, field, "comp_Leader", 1)
        assert result.message.endswith("in remaining races (any order).")
        assert result.contention.endswith("average in remaining races.")

    def test_target_inside_tie_uses_tied_holder(self, final_race_config, make_competitor) -> None:
        field = [
            make_competitor("A", [1, 2, None]),
            make_competitor("B", [2, 1, None]),
            make_competitor("C", [5, 5, None], is_my_driver=True),
        ]
        result = compute_scenarios(final_race_config, field, "comp_C", 2)
        assert result.outcome is ScenarioOutcome.SCENARIOS
        assert result.rival_name == "B"
        assert result.rival_max_points == 68
        assert all(s.status is not ScenarioStatus.SAFE for s in result.scenarios)
        assert result.scenarios[0].positions == (1,)
        assert result.scenarios[0].rival_max_points == 61
        assert result.message == (
            "No guaranteed path to P2. Best hope: P1 (depends on rival results)."
        )
