from __future__ import annotations

from typing import Sequence

from ..board import Board
from ..config import config
from ..paths import path_index
from ..rules import RuleSet
from ..types import Color, Move
from .types import MoveOption, StrategyContext


def _create_move_option(
    board: Board, move: Move, rules: RuleSet, forced: bool
) -> MoveOption:
    color = move.color
    leaves_yard = move.origin == config.YARD
    origin_index = -1 if leaves_yard else path_index(color, move.origin)
    destination_index = path_index(color, move.destination)
    progress = destination_index if leaves_yard else destination_index - origin_index
    finishes = destination_index == config.HOME_INDEX
    capture_count = _capture_count(board, color, move.destination, rules)
    return MoveOption(
        move=move,
        origin_index=origin_index,
        destination_index=destination_index,
        progress=progress,
        leaves_yard=leaves_yard,
        finishes=finishes,
        capture_count=capture_count,
        enters_safe_zone=rules.is_safe(move.destination),
        breaks_safe_stack=_breaks_safe_stack(board, color, move.origin, rules),
        extra_turn=move.dice == config.EXIT_YARD_ROLL or finishes or capture_count > 0,
        forced=forced,
    )


def build_move_options(
    board: Board,
    color: Color,
    dice_roll: int,
    moves: Sequence[Move],
    rules: RuleSet,
    *,
    forced: bool = False,
) -> StrategyContext:
    """Convert a board and its legal moves into a strategy context."""
    options = [_create_move_option(board, mv, rules, forced) for mv in moves]
    return StrategyContext(
        board=board, color=color, dice_roll=int(dice_roll), rules=rules, moves=options
    )


def _capture_count(board: Board, color: Color, dest: int, rules: RuleSet) -> int:
    # Counts every opponent pawn on the square, stacked ones included.
    if rules.is_safe(dest):
        return 0
    return len(board.pawns_at(dest, exclude_color=color))


def _breaks_safe_stack(board: Board, color: Color, origin: int, rules: RuleSet) -> bool:
    if origin == config.YARD or not rules.is_safe(origin):
        return False
    return board.count_at(color, origin) >= 2
