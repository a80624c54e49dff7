from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .board import Board
from .config import config
from .paths import path_index
from .pawn import Pawn
from .types import Color, GameMode


@dataclass(slots=True)
class RankEntry:
    color: Color
    finished_count: int
    effective_score: int
    progress_sum: int
    progress_percentage: int


@dataclass(slots=True)
class GameSummary:
    title: str
    winner: Optional[Color]
    draw: bool
    ranking: List[RankEntry] = field(default_factory=list)


def _pawn_index(pw: Pawn) -> int:
    """Path index used for progress; -1 in the yard."""
    if pw.reached_home:
        return config.HOME_INDEX
    if pw.in_yard:
        return -1
    return path_index(pw.color, pw.position)


def progress_sum(pawns: Sequence[Pawn]) -> int:
    total = 0
    for pw in pawns:
        if pw.reached_home:
            total += config.PATH_LENGTH
        elif not pw.in_yard:
            total += max(path_index(pw.color, pw.position), 0)
    return total


def progress_percentage(pawns: Sequence[Pawn], mode: GameMode) -> int:
    if not pawns:
        return 0
    full = config.HOME_INDEX
    if mode is GameMode.QUICK:
        # quick games only look at the most advanced pawn
        best = max(_pawn_index(pw) for pw in pawns)
        return int(min(100, 100 * max(best, 0) // full))
    current = sum(max(_pawn_index(pw), 0) for pw in pawns)
    return int(min(100, 100 * current // (len(pawns) * full)))


def rank(
    board: Board,
    turn_order: Sequence[Color],
    scores: Optional[Dict[Color, int]] = None,
    mode: GameMode = GameMode.CLASSIC,
) -> List[RankEntry]:
    """Order the colors of ``turn_order`` from best to worst.

    The primary key is the timed score, the quick-mode progress percentage or
    the number of finished pawns, depending on ``mode``; ties fall back to the
    summed path progress. The sort is stable, so remaining ties keep turn order.
    """
    scores = scores or {}
    entries: List[RankEntry] = []
    for color in turn_order:
        pieces = board.pawns.get(color, [])
        finished = sum(1 for pw in pieces if pw.reached_home)
        percentage = progress_percentage(pieces, mode)
        if mode is GameMode.TIMED:
            effective = int(scores.get(color, 0))
        elif mode is GameMode.QUICK:
            effective = percentage
        else:
            effective = finished
        entries.append(
            RankEntry(
                color=color,
                finished_count=finished,
                effective_score=effective,
                progress_sum=progress_sum(pieces),
                progress_percentage=percentage,
            )
        )
    entries.sort(key=lambda e: (e.effective_score, e.progress_sum), reverse=True)
    return entries


def summarize(
    ranking: List[RankEntry], winner: Optional[Color] = None
) -> GameSummary:
    """Decide the outcome of a finished game from its ranking.

    A recorded ``winner`` (all four pawns home) always wins. Otherwise the top
    effective score wins unless it is shared or every score is zero.
    """
    if winner is not None:
        return GameSummary(
            title=f"Winner: {winner.display_name}",
            winner=winner,
            draw=False,
            ranking=ranking,
        )
    if not ranking:
        return GameSummary(title="Game Over!", winner=None, draw=False, ranking=ranking)
    top = ranking[0].effective_score
    leaders = [e for e in ranking if e.effective_score == top]
    if all(e.effective_score == 0 for e in ranking) or len(leaders) > 1:
        return GameSummary(title="It's a Draw!", winner=None, draw=True, ranking=ranking)
    return GameSummary(
        title=f"Winner: {ranking[0].color.display_name}",
        winner=ranking[0].color,
        draw=False,
        ranking=ranking,
    )
