from __future__ import annotations

import random
from typing import ClassVar, Optional

from loguru import logger

from ..board import Board
from ..rules import RuleSet, forced_entry_moves, legal_moves
from ..types import Color, Move
from .features import build_move_options
from .types import MoveOption, StrategyContext


class BaseStrategy:
    """Base class for move-choosing strategies with shared move selection."""

    name: ClassVar[str] = "base"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def decide(
        self, board: Board, color: Color, dice_roll: int, rules: RuleSet
    ) -> Optional[Move]:
        """Pick a move for ``color``, or None when nothing can move.

        If the roll is a six and nothing is legal while a pawn waits in the
        yard, a yard entry is forced even onto an own two-pawn stack.
        """
        moves = legal_moves(board, color, dice_roll, rules)
        forced = False
        if not moves:
            moves = forced_entry_moves(board, color, dice_roll)
            forced = bool(moves)
            if forced:
                logger.debug(f"{color.label} forces a yard entry on a six")
        if not moves:
            return None
        ctx = build_move_options(board, color, dice_roll, moves, rules, forced=forced)
        option = self.select_move(ctx)
        return option.move if option is not None else None

    def select_move(self, ctx: StrategyContext) -> Optional[MoveOption]:
        best: Optional[MoveOption] = None
        best_score = float("-inf")
        for option in ctx.iter_legal():
            score = self._score_move(ctx, option) + self._tie_breaker()
            if score > best_score:
                best, best_score = option, score
        return best

    def _tie_breaker(self) -> float:
        return 0.0

    def _score_move(
        self, ctx: StrategyContext, move: MoveOption
    ) -> float:  # pragma: no cover - abstract
        raise NotImplementedError
