"""Import and export of the portable championship JSON document.

Schema::

    {
      "championship": {"name", "scoring", "totalRounds", "countBest",
                       "flEnabled", "flBonus", "targetPosition"},
      "competitors": [{"name", "isMyDriver",
                       "results": [{"position", "fastestLap"}]}]
    }
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from racestand.exceptions import PayloadError, RaceStandValidationError
from racestand.models import ChampionshipConfig, Competitor, build_config, empty_results
from racestand.state import ChampionshipState

_EXPORTED_COMPETITOR_FIELDS = {"name", "is_my_driver", "results"}

_RULE_ERROR = "payload_rule"

NonEmptyName = Annotated[StrictStr, StringConstraints(strip_whitespace=True, min_length=1)]


# ── Document schema ────────────────────────────────────────


class _PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ResultPayload(_PayloadModel):
    position: Annotated[StrictInt, Field(ge=1)] | None = None
    fastest_lap: StrictBool


class CompetitorPayload(_PayloadModel):
    name: NonEmptyName
    is_my_driver: StrictBool | None = None
    results: list[ResultPayload]


class ChampionshipPayload(_PayloadModel):
    name: NonEmptyName
    scoring: list[Annotated[StrictInt, Field(ge=0)]] = Field(min_length=1)
    total_rounds: Annotated[StrictInt, Field(ge=1)]
    count_best: Annotated[StrictInt, Field(ge=1)] | None = None
    fl_enabled: StrictBool | None = None
    fl_bonus: Annotated[StrictInt, Field(ge=0)] | None = None
    target_position: Annotated[StrictInt, Field(ge=1)] | None = None

    @model_validator(mode="after")
    def _count_best_within_season(self) -> ChampionshipPayload:
        if self.count_best is not None and self.count_best > self.total_rounds:
            raise PydanticCustomError(_RULE_ERROR, "countBest cannot exceed totalRounds")
        return self


class ChampionshipDocument(_PayloadModel):
    championship: ChampionshipPayload
    competitors: list[CompetitorPayload] = Field(min_length=1)


# ── Error messages ─────────────────────────────────────────

_CHAMPIONSHIP_MESSAGES = {
    "name": "Championship name is required and must be a non-empty string",
    "scoring": "Scoring must be a non-empty array of numbers",
    "totalRounds": "Total rounds must be a number >= 1",
    "countBest": "countBest must be a number >= 1",
    "flEnabled": "flEnabled must be a boolean",
    "flBonus": "flBonus must be a non-negative number",
    "targetPosition": "targetPosition must be a number >= 1",
}

_COMPETITOR_MESSAGES = {
    "name": "name is required and must be a non-empty string",
    "isMyDriver": "isMyDriver must be a boolean",
    "results": "results must be an array",
}

_RESULT_MESSAGES = {
    "position": "position must be a positive number or null",
    "fastestLap": "fastestLap must be a boolean",
}


def _error_message(error: dict[str, Any]) -> str:
    """Turn one pydantic error into the document-level message for its location."""
    loc = error["loc"]
    if not loc:
        return "Payload must be an object"

    if loc[0] == "championship":
        if error["type"] == _RULE_ERROR:
            return error["msg"]
        if len(loc) == 1:
            return "Missing championship object"
        if loc[1] == "scoring" and len(loc) > 2:
            return "Scoring array must contain only non-negative numbers"
        return _CHAMPIONSHIP_MESSAGES.get(loc[1], f"{loc[1]}: {error['msg']}")

    if loc[0] == "competitors":
        if len(loc) == 1:
            if error["type"] == "too_short":
                return "At least one competitor is required"
            return "Competitors must be an array"
        prefix = f"Competitor {loc[1] + 1}"
        if len(loc) == 2:
            return f"{prefix}: must be an object"
        if loc[2] == "results" and len(loc) > 3:
            prefix = f"{prefix}, Result {loc[3] + 1}"
            if len(loc) == 4:
                return f"{prefix}: must be an object"
            return f"{prefix}: {_RESULT_MESSAGES.get(loc[4], error['msg'])}"
        return f"{prefix}: {_COMPETITOR_MESSAGES.get(loc[2], error['msg'])}"

    return f"{'.'.join(str(part) for part in loc)}: {error['msg']}"


def _document_rules(document: ChampionshipDocument) -> list[str]:
    """Rules spanning several competitors, checked once the schema holds."""
    errors: list[str] = []
    total_rounds = document.championship.total_rounds
    seen_names: set[str] = set()
    tracked = 0
    fastest_laps: dict[int, int] = {}

    for number, competitor in enumerate(document.competitors, start=1):
        if len(competitor.results) != total_rounds:
            errors.append(
                f"Competitor {number}: results length ({len(competitor.results)}) "
                f"does not match totalRounds ({total_rounds})"
            )
        folded = competitor.name.casefold()
        if folded in seen_names:
            errors.append(f"Competitor {number}: Driver already exists")
        seen_names.add(folded)
        if competitor.is_my_driver:
            tracked += 1
        for race_index, result in enumerate(competitor.results):
            if result.fastest_lap:
                fastest_laps[race_index] = fastest_laps.get(race_index, 0) + 1

    if tracked > 1:
        errors.append("Only one competitor can be marked isMyDriver")
    for race_index in sorted(fastest_laps):
        if fastest_laps[race_index] > 1:
            errors.append(f"Result {race_index + 1}: more than one competitor has fastestLap")
    return errors


def validate_payload(data: Any) -> list[str]:
    """Check an import document and return every problem found (empty if valid)."""
    try:
        document = ChampionshipDocument.model_validate(data)
    except ValidationError as exc:
        return list(dict.fromkeys(_error_message(error) for error in exc.errors()))
    return _document_rules(document)


# ── Load / dump ────────────────────────────────────────────


def _enforce_competitor_rules(competitors: list[Competitor]) -> list[Competitor]:
    """Reject duplicate names, keep the first tracked flag and the first fastest lap per race."""
    seen_names: set[str] = set()
    tracked_seen = False
    fastest_lap_races: set[int] = set()
    fixed = []
    for comp in competitors:
        folded = comp.name.casefold()
        if folded in seen_names:
            raise PayloadError("Driver already exists", [f"Duplicate competitor name: {comp.name}"])
        seen_names.add(folded)

        is_my_driver = comp.is_my_driver and not tracked_seen
        tracked_seen = tracked_seen or is_my_driver

        results = []
        for race_index, result in enumerate(comp.results):
            if result.fastest_lap and race_index in fastest_lap_races:
                result = result.model_copy(update={"fastest_lap": False})
            elif result.fastest_lap:
                fastest_lap_races.add(race_index)
            results.append(result)

        fixed.append(
            comp.model_copy(update={"is_my_driver": is_my_driver, "results": tuple(results)})
        )

    if fixed and not tracked_seen:
        fixed[0] = fixed[0].model_copy(update={"is_my_driver": True})
    return fixed


def load_championship(data: dict[str, Any] | str, strict: bool = False) -> ChampionshipState:
    """Build a ChampionshipState from an import document (dict or JSON text).

    Championship fields are merged over the defaults, results are fitted to
    the season length, fresh ids are generated, and exactly one competitor
    ends up tracked. Names must be unique ignoring case; a second tracked
    flag or a second fastest lap in the same race is dropped. With
    ``strict=True`` the document must also pass validate_payload.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise PayloadError(f"Import data is not valid JSON: {exc}") from exc

    if (
        not isinstance(data, dict)
        or not isinstance(data.get("championship"), dict)
        or not isinstance(data.get("competitors"), list)
    ):
        raise PayloadError("Invalid import data structure")

    if strict:
        errors = validate_payload(data)
        if errors:
            raise PayloadError("Import data failed validation", errors)

    merged = ChampionshipConfig().model_dump(by_alias=True)
    merged.update(data["championship"])
    try:
        config = build_config(merged)
    except RaceStandValidationError as exc:
        raise PayloadError(str(exc)) from exc

    rounds = config.total_rounds
    raw_competitors = []
    for raw in data["competitors"]:
        if not isinstance(raw, dict):
            raise PayloadError("Invalid import data structure")
        raw_competitors.append({
            "name": raw.get("name"),
            "isMyDriver": raw.get("isMyDriver") or False,
            "results": raw.get("results") or [],
        })
    try:
        competitors = TypeAdapter(list[Competitor]).validate_python(raw_competitors)
    except ValidationError as exc:
        raise PayloadError(f"Failed to validate competitors: {exc}") from exc

    competitors = [
        c.model_copy(update={"results": (c.results + empty_results(rounds))[:rounds]})
        for c in competitors
    ]
    return ChampionshipState(config=config, competitors=_enforce_competitor_rules(competitors))


def dump_championship(state: ChampionshipState) -> dict[str, Any]:
    """Export *state* as a JSON-ready import document."""
    return {
        "championship": state.config.model_dump(mode="json", by_alias=True),
        "competitors": [
            c.model_dump(mode="json", by_alias=True, include=_EXPORTED_COMPETITOR_FIELDS)
            for c in state.competitors
        ],
    }


def dumps_championship(state: ChampionshipState, indent: int | None = None) -> str:
    return json.dumps(dump_championship(state), indent=indent)
