from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List

from loguru import logger

from .board import Board
from .config import config
from .exceptions import InvalidDiceValue
from .paths import entry_square, path_index, path_of, safe_squares
from .types import Color, Move, MoveEvents, MoveResult


@dataclass(slots=True)
class RuleSet:
    secondary_safe_points: bool = config.SECONDARY_SAFE_POINTS
    # Derived (populated in __post_init__ due to slots)
    safe_squares: FrozenSet[int] = field(default=frozenset(), init=False)

    def __post_init__(self) -> None:
        self.safe_squares = safe_squares(self.secondary_safe_points)

    def is_safe(self, sq: int) -> bool:
        return sq in self.safe_squares


def validate_dice(dice: int) -> None:
    if isinstance(dice, bool) or not isinstance(dice, int):
        raise InvalidDiceValue(f"Dice value must be an integer, got {dice!r}")
    if not config.DICE_MIN <= dice <= config.DICE_MAX:
        raise InvalidDiceValue(f"Dice value {dice} outside 1..6")


# --- Rules: destinations and legality ---
def destination_for_roll(color: Color, position: int, dice: int) -> int | None:
    """Square a pawn at ``position`` reaches with ``dice``, ignoring stacking."""
    if position == config.YARD:
        return entry_square(color) if dice == config.EXIT_YARD_ROLL else None
    idx = path_index(color, position)
    if idx == -1 or idx == config.HOME_INDEX:
        return None
    target = idx + dice
    if target >= config.PATH_LENGTH:
        return None
    return path_of(color)[target]


def _blocked_by_own_stack(board: Board, color: Color, dest: int, rules: RuleSet) -> bool:
    # Never stack a third own pawn on an unsafe square
    return not rules.is_safe(dest) and board.count_at(color, dest) >= 2


def legal_moves(board: Board, color: Color, dice: int, rules: RuleSet) -> List[Move]:
    """Every legal move of ``color`` for ``dice``, in pawn order.

    An empty list means the player has no legal response to this roll.
    """
    validate_dice(dice)
    moves: List[Move] = []
    for pw in board.pawns_of(color):
        if pw.reached_home:
            continue
        dest = destination_for_roll(color, pw.position, dice)
        if dest is None:
            continue
        if _blocked_by_own_stack(board, color, dest, rules):
            continue
        moves.append(
            Move(
                color=color,
                pawn_id=pw.pawn_id,
                origin=pw.position,
                destination=dest,
                dice=dice,
            )
        )
    return moves


def forced_entry_moves(board: Board, color: Color, dice: int) -> List[Move]:
    """Yard entries on a six with the stacking rule waived.

    Only the AI fallback uses this, when ``legal_moves`` came back empty.
    """
    if dice != config.EXIT_YARD_ROLL:
        return []
    start = entry_square(color)
    return [
        Move(color=color, pawn_id=pw.pawn_id, origin=config.YARD, destination=start, dice=dice)
        for pw in board.pawns_of(color)
        if pw.in_yard
    ]


# --- Applying a move ---
def apply_move(board: Board, move: Move, rules: RuleSet) -> MoveResult:
    """Apply ``move`` to a copy of ``board`` and report what happened."""
    validate_dice(move.dice)
    after = board.copy()
    color = move.color
    pw = after.pawn(color, move.pawn_id)
    dest = move.destination
    events = MoveEvents(left_yard=pw.in_yard)

    # 1) move
    pw.move_to(dest)

    # 2) captures: a lone opponent on an unsafe square goes back to its yard
    if not rules.is_safe(dest):
        for other, pieces in after.pawns.items():
            if other == color:
                continue
            occupants = [p for p in pieces if p.on_board and p.position == dest]
            if len(occupants) == 1:
                victim = occupants[0]
                victim.send_to_yard()
                events.captured.append((other, victim.pawn_id))
                logger.debug(
                    f"{color.label} pawn {pw.pawn_id} captured {other.label} pawn {victim.pawn_id} at {dest}"
                )

    # 3) home arrival
    if path_index(color, dest) == config.HOME_INDEX:
        pw.reached_home = True
        events.reached_home = True
        logger.debug(f"{color.label} pawn {pw.pawn_id} reached home")

    # 4) win
    winner = color if after.has_won(color) else None

    # 5) extra turn
    extra = (
        move.dice == config.EXIT_YARD_ROLL or events.capture or events.reached_home
    )
    return MoveResult(
        board=after, move=move, events=events, extra_turn=extra, winner=winner
    )


def winner_of(board: Board) -> Color | None:
    return board.winner()
