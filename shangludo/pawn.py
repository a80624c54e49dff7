from dataclasses import dataclass

from .config import config
from .types import Color, PawnState


@dataclass(slots=True)
class Pawn:
    """Lightweight pawn model. Holds state only.

    Rule logic (legal destinations, captures, home arrival) lives in
    :mod:`shangludo.rules`; path lookups live in :mod:`shangludo.paths`.
    """

    color: Color
    pawn_id: int  # 0..3 per color
    position: int = config.YARD  # board square, or YARD
    reached_home: bool = False

    @property
    def state(self) -> PawnState:
        if self.reached_home:
            return PawnState.FINISHED
        if self.position == config.YARD:
            return PawnState.YARD
        return PawnState.ON_BOARD

    @property
    def in_yard(self) -> bool:
        return self.state is PawnState.YARD

    @property
    def on_board(self) -> bool:
        return self.state is PawnState.ON_BOARD

    def move_to(self, new_position: int) -> None:
        self.position = new_position

    def send_to_yard(self) -> None:
        self.position = config.YARD
        self.reached_home = False
