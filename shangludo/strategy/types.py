from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List

from ..types import Color, Move

if TYPE_CHECKING:
    from ..board import Board
    from ..rules import RuleSet


@dataclass(slots=True)
class MoveOption:
    """Structured metadata about a candidate move."""

    move: Move
    origin_index: int  # -1 when leaving the yard
    destination_index: int
    progress: int
    leaves_yard: bool
    finishes: bool
    capture_count: int
    enters_safe_zone: bool
    breaks_safe_stack: bool
    extra_turn: bool
    forced: bool = False  # stacking rule waived by the entry fallback

    @property
    def pawn_id(self) -> int:
        return self.move.pawn_id

    @property
    def can_capture(self) -> bool:
        return self.capture_count > 0


@dataclass(slots=True)
class StrategyContext:
    """Input payload shared by strategies."""

    board: "Board"
    color: Color
    dice_roll: int
    rules: "RuleSet"
    moves: List[MoveOption]

    def iter_legal(self) -> Iterable[MoveOption]:
        return iter(self.moves)
