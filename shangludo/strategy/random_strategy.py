from __future__ import annotations

from typing import ClassVar, Optional

from .base import BaseStrategy
from .types import MoveOption, StrategyContext


class RandomStrategy(BaseStrategy):
    """Picks uniformly among the candidate moves."""

    name: ClassVar[str] = "random"

    def select_move(self, ctx: StrategyContext) -> Optional[MoveOption]:
        if not ctx.moves:
            return None
        return self.rng.choice(ctx.moves)
