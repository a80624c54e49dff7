from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from .board import Board


class Color(IntEnum):
    RED = 0
    GREEN = 1
    YELLOW = 2
    BLUE = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: str) -> "Color":
        try:
            return cls[str(label).upper()]
        except KeyError:
            raise ValueError(f"Unknown color '{label}'") from None


class Phase(Enum):
    SETUP = "setup"
    ROLLING = "rolling"
    MOVING = "moving"
    AI_THINKING = "ai_thinking"
    GAME_OVER = "game_over"


class GameMode(Enum):
    CLASSIC = "classic"
    QUICK = "quick"
    TIMED = "timed"


class ParticipantKind(Enum):
    HUMAN = "human"
    AI = "ai"
    NONE = "none"


class PawnState(Enum):
    YARD = "yard"
    ON_BOARD = "on_board"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class Move:
    color: Color
    pawn_id: int
    origin: int  # square, or config.YARD
    destination: int
    dice: int


@dataclass(slots=True)
class MoveEvents:
    left_yard: bool = False
    reached_home: bool = False
    captured: List[Tuple[Color, int]] = field(default_factory=list)

    @property
    def capture(self) -> bool:
        return bool(self.captured)


@dataclass(slots=True)
class MoveResult:
    board: "Board"
    move: Move
    events: MoveEvents
    extra_turn: bool
    winner: Optional[Color] = None
