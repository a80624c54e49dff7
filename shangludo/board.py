from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .config import config
from .paths import entry_square, home_square, path_index
from .pawn import Pawn
from .types import Color


@dataclass(slots=True)
class Board:
    """Owns pawn placement for every active color (no rule logic).

    This is the whole mutable game state the rule engine works on. The rule
    functions never mutate a board they are given; they copy it first.
    """

    pawns: Dict[Color, List[Pawn]]

    @classmethod
    def initial(
        cls, colors: Iterable[Color], *, start_on_entry: bool = False
    ) -> "Board":
        pawns: Dict[Color, List[Pawn]] = {}
        for color in colors:
            color = Color(color)
            position = entry_square(color) if start_on_entry else config.YARD
            pawns[color] = [
                Pawn(color=color, pawn_id=i, position=position)
                for i in range(config.PAWNS_PER_PLAYER)
            ]
        return cls(pawns=pawns)

    @property
    def colors(self) -> List[Color]:
        return list(self.pawns)

    def pawns_of(self, color: Color) -> List[Pawn]:
        return self.pawns[color]

    def pawn(self, color: Color, pawn_id: int) -> Pawn:
        for pw in self.pawns[color]:
            if pw.pawn_id == pawn_id:
                return pw
        raise KeyError(f"{color.label} has no pawn {pawn_id}")

    def pawns_at(
        self, sq: int, *, exclude_color: Optional[Color] = None
    ) -> List[Pawn]:
        out: List[Pawn] = []
        for color, pieces in self.pawns.items():
            if color == exclude_color:
                continue
            out.extend(p for p in pieces if p.on_board and p.position == sq)
        return out

    def count_at(self, color: Color, sq: int) -> int:
        return sum(1 for p in self.pawns[color] if p.on_board and p.position == sq)

    def finished_count(self, color: Color) -> int:
        return sum(1 for p in self.pawns[color] if p.reached_home)

    def yard_count(self, color: Color) -> int:
        return sum(1 for p in self.pawns[color] if p.in_yard)

    def has_won(self, color: Color) -> bool:
        pieces = self.pawns.get(color, [])
        return bool(pieces) and all(p.reached_home for p in pieces)

    def winner(self) -> Optional[Color]:
        for color in self.pawns:
            if self.has_won(color):
                return color
        return None

    def copy(self) -> "Board":
        return Board(
            pawns={
                color: [
                    Pawn(p.color, p.pawn_id, p.position, p.reached_home)
                    for p in pieces
                ]
                for color, pieces in self.pawns.items()
            }
        )

    def inconsistencies(self) -> List[str]:
        """Describe every structural problem of this snapshot (empty if sound)."""
        problems: List[str] = []
        for color, pieces in self.pawns.items():
            if len(pieces) != config.PAWNS_PER_PLAYER:
                problems.append(f"{color.label} has {len(pieces)} pawns")
            ids = [p.pawn_id for p in pieces]
            if sorted(ids) != list(range(config.PAWNS_PER_PLAYER)):
                problems.append(f"{color.label} pawn ids are {ids}")
            for p in pieces:
                if p.color != color:
                    problems.append(
                        f"{color.label} pawn {p.pawn_id} belongs to {p.color.label}"
                    )
                if p.position == config.YARD:
                    if p.reached_home:
                        problems.append(
                            f"{color.label} pawn {p.pawn_id} is home but in the yard"
                        )
                    continue
                if path_index(color, p.position) == -1:
                    problems.append(
                        f"{color.label} pawn {p.pawn_id} at {p.position} is off its path"
                    )
                elif p.reached_home != (p.position == home_square(color)):
                    problems.append(
                        f"{color.label} pawn {p.pawn_id} home flag disagrees with square"
                    )
        return problems
