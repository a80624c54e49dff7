"""
Shangludo
Four-player Ludo rule engine, AI opponent and turn controller.
"""

from .board import Board
from .config import config, strategy_weights, timed_scoring
from .exceptions import (
    GameOverError,
    InvalidDiceValue,
    InvalidMoveSelection,
    InvalidSetup,
    LudoError,
    PhaseError,
    StaleSnapshotLoad,
)
from .game import Game, GameSetup, GameState, Participant, TurnOutcome
from .paths import entry_square, is_safe, path_index, path_of
from .pawn import Pawn
from .ranking import GameSummary, RankEntry, rank, summarize
from .rules import RuleSet, apply_move, legal_moves
from .strategy import AggressiveStrategy, RandomStrategy, choose_move
from .types import (
    Color,
    GameMode,
    Move,
    MoveEvents,
    MoveResult,
    ParticipantKind,
    PawnState,
    Phase,
)

__all__ = [
    "AggressiveStrategy",
    "Board",
    "Color",
    "Game",
    "GameMode",
    "GameOverError",
    "GameSetup",
    "GameState",
    "GameSummary",
    "InvalidDiceValue",
    "InvalidMoveSelection",
    "InvalidSetup",
    "LudoError",
    "Move",
    "MoveEvents",
    "MoveResult",
    "Participant",
    "ParticipantKind",
    "Pawn",
    "PawnState",
    "Phase",
    "PhaseError",
    "RandomStrategy",
    "RankEntry",
    "RuleSet",
    "StaleSnapshotLoad",
    "TurnOutcome",
    "apply_move",
    "choose_move",
    "config",
    "entry_square",
    "is_safe",
    "legal_moves",
    "path_index",
    "path_of",
    "rank",
    "strategy_weights",
    "summarize",
    "timed_scoring",
]
