"""Formatting helpers for standings and scenario text."""

from __future__ import annotations


def format_position(position: int | None, fastest_lap: bool = False) -> str:
    """Format a finish as P3, P1+FL, or 'DNS' if None."""
    if position is None:
        return "DNS"
    text = f"P{position}"
    if fastest_lap:
        text += "+FL"
    return text


def format_race_entry(
    race_index: int,
    position: int | None,
    fastest_lap: bool = False,
    dropped: bool = False,
) -> str:
    """Format one race as R2:P5, wrapped in parentheses when the round is dropped."""
    text = f"R{race_index + 1}:{format_position(position, fastest_lap)}"
    if dropped:
        return f"({text})"
    return text


def format_positions(positions: tuple[int, ...], dropped: frozenset[int] = frozenset()) -> str:
    """Format scenario finishes as 'P1 + P3', showing dropped slots as 'any'."""
    return " + ".join(
        "any" if i in dropped else f"P{pos}" for i, pos in enumerate(positions)
    )


def pluralise(count: int, noun: str) -> str:
    """Return '1 race' / '3 races'."""
    return f"{count} {noun}{'' if count == 1 else 's'}"
