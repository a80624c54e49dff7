"""Move-choosing strategies for computer-controlled players."""

from __future__ import annotations

from typing import Optional

from ..board import Board
from ..rules import RuleSet
from ..types import Color, Move
from .aggressive import AggressiveStrategy
from .base import BaseStrategy
from .features import build_move_options
from .random_strategy import RandomStrategy
from .registry import DEFAULT_STRATEGY, available, create
from .types import MoveOption, StrategyContext


def choose_move(
    board: Board,
    color: Color,
    dice: int,
    rules: RuleSet,
    strategy: Optional[BaseStrategy] = None,
) -> Optional[Move]:
    """AI entry point: the move ``strategy`` (aggressive by default) would play."""
    strategy = strategy or create(DEFAULT_STRATEGY)
    return strategy.decide(board, color, dice, rules)


__all__ = [
    "AggressiveStrategy",
    "BaseStrategy",
    "DEFAULT_STRATEGY",
    "MoveOption",
    "RandomStrategy",
    "StrategyContext",
    "available",
    "build_move_options",
    "choose_move",
    "create",
]
