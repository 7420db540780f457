"""Load a championship from JSON, inspect rival ceilings, and export it again."""

import json
import sys

from racestand import PayloadError, dumps_championship, load_championship, validate_payload

SEASON = {
    "championship": {
        "name": "Endurance Trophy",
        "scoring": [25, 18, 15, 12, 10, 8, 6, 4, 2, 1],
        "totalRounds": 6,
        "countBest": 5,
        "flEnabled": True,
        "flBonus": 1,
        "targetPosition": 2,
    },
    "competitors": [
        {"name": name, "isMyDriver": name == "Kim", "results": [
            {"position": pos, "fastestLap": False} for pos in positions
        ]}
        for name, positions in [
            ("Kim", [2, 3, 1, None, None, None]),
            ("Lee", [1, 1, 4, None, None, None]),
            ("Ray", [3, 2, 2, None, None, None]),
            ("Sam", [5, 4, 3, None, None, None]),
        ]
    ],
}


def main() -> None:
    problems = validate_payload(SEASON)
    if problems:
        print("\n".join(problems))
        sys.exit(1)

    try:
        state = load_championship(json.dumps(SEASON), strict=True)
    except PayloadError as exc:
        print(f"Import failed: {exc}")
        sys.exit(1)

    status = state.status()
    print(f"{state.tracked.name}: {status.message}")
    for rival in status.rivals:
        print(f"  {rival.name}: {rival.min_points}-{rival.max_points} pts  {rival.max_breakdown}")

    print("\nExported:")
    print(dumps_championship(state, indent=2))


if __name__ == "__main__":
    main()
