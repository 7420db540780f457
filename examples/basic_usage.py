"""Basic usage examples for the RaceStand engine."""

from racestand import ChampionshipState


def main() -> None:
    state = ChampionshipState()
    state.update_config(
        name="Club Sprint Series",
        scoring=(25, 18, 15, 12, 10),
        total_rounds=3,
        count_best=3,
    )
    alice = state.add_competitor("Alice")
    bob = state.add_competitor("Bob")

    # Two rounds run, one to go
    for race, (a, b) in enumerate([(1, 2), (2, 1)]):
        state.set_result(alice.id, race, a)
        state.set_result(bob.id, race, b)

    print("=== Standings ===")
    for s in state.standings():
        tie = " (tied)" if s.is_tied else ""
        print(f"  P{s.rank}{tie} {s.name}: {s.total_points} pts, {s.wins} wins")

    print("\n=== Status ===")
    status = state.status()
    print(f"  {status.status.value}: {status.message}")
    if status.details:
        print(f"  {status.details}")

    print("\n=== What does Alice need? ===")
    result = state.scenarios()
    print(f"  {result.message}")
    if result.contention:
        print(f"  {result.contention}")
    for scenario in result.scenarios:
        print(
            f"  [{scenario.status.value}] {scenario.display}: "
            f"{scenario.my_points} pts vs {result.rival_name} max {scenario.rival_max_points}"
        )


if __name__ == "__main__":
    main()
