from __future__ import annotations

import random
from typing import ClassVar

from ..config import StrategyWeights, strategy_weights
from .base import BaseStrategy
from .types import MoveOption, StrategyContext


class AggressiveStrategy(BaseStrategy):
    """Finishes first, then hunts, then brings pawns out and runs.

    Scores are additive and independent across candidates; a small uniform
    random term separates otherwise equal moves.
    """

    name: ClassVar[str] = "aggressive"

    def __init__(
        self,
        rng: random.Random | None = None,
        weights: StrategyWeights = strategy_weights,
    ) -> None:
        super().__init__(rng)
        self.weights = weights

    def _tie_breaker(self) -> float:
        return self.rng.random() * self.weights.tie_breaker

    def _score_move(self, ctx: StrategyContext, move: MoveOption) -> float:
        w = self.weights
        score = 0.0

        # 1) Finishing a pawn beats everything else
        if move.finishes:
            score += w.finish

        # 2) Captures, scaled with the number of pawns hit
        if move.can_capture:
            score += w.capture + w.capture_per_pawn * move.capture_count

        # 3) Getting out of the yard
        if move.leaves_yard:
            score += w.leave_yard
            score += move.destination_index * w.entry_progress
        else:
            score += move.progress * w.progress

        if move.enters_safe_zone:
            score += w.safe_square

        # 4) Keep defensive stacks on safe squares together
        if move.breaks_safe_stack:
            score += w.break_safe_stack

        return score
