"""Point keeping for timed games."""

from __future__ import annotations

from typing import Dict, Iterable

from .config import TimedScoring, config, timed_scoring
from .paths import path_index
from .types import Color, MoveResult


def empty_scores(colors: Iterable[Color]) -> Dict[Color, int]:
    return {Color(c): 0 for c in colors}


def score_deltas(
    result: MoveResult, points: TimedScoring = timed_scoring
) -> Dict[Color, int]:
    """Points won or lost by each color through one applied move."""
    move = result.move
    deltas: Dict[Color, int] = {move.color: 0}

    if move.origin == config.YARD:
        deltas[move.color] += points.leave_yard
    else:
        steps = path_index(move.color, move.destination) - path_index(
            move.color, move.origin
        )
        deltas[move.color] += max(steps, 0) * points.step

    if result.events.reached_home:
        deltas[move.color] += points.reach_home

    for victim, _pawn_id in result.events.captured:
        deltas[move.color] += points.capture
        deltas[victim] = deltas.get(victim, 0) + points.captured
    return deltas


def apply_deltas(scores: Dict[Color, int], deltas: Dict[Color, int]) -> Dict[Color, int]:
    updated = dict(scores)
    for color, delta in deltas.items():
        updated[color] = max(0, updated.get(color, 0) + delta)
    return updated
