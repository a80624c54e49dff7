from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger

from .board import Board
from .config import config
from .exceptions import (
    GameOverError,
    InvalidMoveSelection,
    InvalidSetup,
    PhaseError,
)
from .ranking import GameSummary, RankEntry, rank, summarize
from .rules import RuleSet, apply_move, forced_entry_moves, legal_moves, validate_dice
from .scheduler import Scheduler, TimerHandle, TimerKey
from .scoring import apply_deltas, empty_scores, score_deltas
from .strategy import BaseStrategy, DEFAULT_STRATEGY, create as create_strategy
from .types import Color, GameMode, Move, MoveResult, ParticipantKind, Phase


@dataclass(slots=True)
class Participant:
    color: Color
    kind: ParticipantKind = ParticipantKind.HUMAN
    name: str = ""
    strategy: str = DEFAULT_STRATEGY

    def __post_init__(self) -> None:
        self.color = Color(self.color)
        if not self.name:
            suffix = "AI" if self.kind is ParticipantKind.AI else "Player"
            self.name = f"{self.color.display_name} {suffix}"

    @property
    def active(self) -> bool:
        return self.kind is not ParticipantKind.NONE


def default_participants() -> List[Participant]:
    return [
        Participant(Color.RED, ParticipantKind.HUMAN),
        Participant(Color.GREEN, ParticipantKind.AI),
        Participant(Color.YELLOW, ParticipantKind.AI),
        Participant(Color.BLUE, ParticipantKind.AI),
    ]


@dataclass(slots=True)
class GameSetup:
    """Everything fixed for the lifetime of one game."""

    mode: GameMode = GameMode.CLASSIC
    participants: List[Participant] = field(default_factory=default_participants)
    turn_order: List[Color] = field(default_factory=lambda: list(Color))
    secondary_safe_points: bool = config.SECONDARY_SAFE_POINTS
    turn_timer_seconds: float = config.TURN_TIMER_SECONDS  # 0 disables
    game_timer_seconds: float = config.GAME_TIMER_SECONDS  # timed mode only
    ai_think_delay: float = config.AI_THINK_DELAY
    require_human: bool = True

    def participant(self, color: Color) -> Participant:
        for p in self.participants:
            if p.color == color:
                return p
        return Participant(color, ParticipantKind.NONE)

    @property
    def active_colors(self) -> List[Color]:
        return [c for c in Color if self.participant(c).active]

    def resolved_turn_order(self) -> List[Color]:
        active = self.active_colors
        order = [Color(c) for c in self.turn_order if Color(c) in active]
        return order or active

    @property
    def uses_turn_timer(self) -> bool:
        return self.mode is not GameMode.QUICK and self.turn_timer_seconds > 0

    @property
    def uses_game_timer(self) -> bool:
        return self.mode is GameMode.TIMED and self.game_timer_seconds > 0

    def validate(self) -> None:
        colors = [p.color for p in self.participants]
        if len(set(colors)) != len(colors):
            raise InvalidSetup("Each color may only be configured once")
        if len(self.active_colors) < 2:
            raise InvalidSetup("At least two active players are required")
        order = self.resolved_turn_order()
        if len(set(order)) != len(order):
            raise InvalidSetup("Turn order lists a color twice")
        if set(order) != set(self.active_colors):
            missing = [c.label for c in self.active_colors if c not in order]
            raise InvalidSetup(f"Turn order leaves out {', '.join(missing)}")
        if self.require_human and not any(
            self.participant(c).kind is ParticipantKind.HUMAN for c in order
        ):
            raise InvalidSetup("At least one human player is required")


@dataclass(slots=True)
class TurnOutcome:
    color: Color
    dice: int
    moves: List[Move]
    result: Optional[MoveResult] = None
    no_move: bool = False
    auto: bool = False
    phase: Phase = Phase.ROLLING
    next_color: Optional[Color] = None

    @property
    def waiting_for_human(self) -> bool:
        return self.phase is Phase.MOVING


@dataclass(slots=True)
class GameState:
    """Serializable picture of a running game (see :mod:`shangludo.persistence`)."""

    setup: GameSetup
    board: Board
    phase: Phase
    current: Color
    dice: Optional[int] = None
    scores: Dict[Color, int] = field(default_factory=dict)
    game_time_remaining: Optional[float] = None


class Game:
    """Turn controller: roll -> move -> extra turn / next player -> game over."""

    def __init__(
        self,
        setup: GameSetup | None = None,
        *,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.setup = setup or GameSetup()
        self.setup.validate()
        self.rules = RuleSet(secondary_safe_points=self.setup.secondary_safe_points)
        self.turn_order: List[Color] = self.setup.resolved_turn_order()
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.strategies: Dict[Color, BaseStrategy] = {}
        self.phase = Phase.SETUP
        self.board = self._initial_board()
        self.current: Color = self.turn_order[0]
        self.dice: Optional[int] = None
        self.winner: Optional[Color] = None
        self.summary: Optional[GameSummary] = None
        self.scores: Dict[Color, int] = empty_scores(self.turn_order)
        self._generation = 0
        self._session = 0
        self._timers: Dict[str, TimerHandle] = {}
        self._game_deadline: Optional[float] = None
        self._game_time_left: Optional[float] = None
        self._build_strategies()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self.phase is not Phase.SETUP:
            raise PhaseError(f"Cannot start a game in phase {self.phase.value}")
        logger.info(
            f"Starting {self.setup.mode.value} game, order: "
            f"{', '.join(c.label for c in self.turn_order)}"
        )
        if self.setup.uses_game_timer:
            self._arm_game_timer(self.setup.game_timer_seconds)
        self._enter_rolling(self.turn_order[0])

    def reset(self) -> None:
        """Discard the current game and go back to SETUP with a fresh board."""
        self._cancel_timers()
        self._session += 1
        self._generation += 1
        self.phase = Phase.SETUP
        self.board = self._initial_board()
        self.current = self.turn_order[0]
        self.dice = None
        self.winner = None
        self.summary = None
        self.scores = empty_scores(self.turn_order)
        self._game_deadline = None
        self._game_time_left = None

    @classmethod
    def resume(
        cls,
        state: GameState,
        *,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
    ) -> "Game":
        """Rebuild a controller exactly where ``state`` left off."""
        game = cls(state.setup, scheduler=scheduler, rng=rng)
        game.board = state.board.copy()
        game.scores = {**empty_scores(game.turn_order), **state.scores}
        game.current = state.current
        if game.setup.uses_game_timer:
            remaining = (
                state.game_time_remaining
                if state.game_time_remaining is not None
                else game.setup.game_timer_seconds
            )
            game._arm_game_timer(remaining)
        if state.phase is Phase.ROLLING:
            game._enter_rolling(state.current)
        else:
            game.dice = state.dice
            game._set_phase(state.phase)
            if state.phase is Phase.AI_THINKING:
                game._arm_ai_timer()
        logger.info(f"Resumed game at {game.phase.value} for {game.current.label}")
        return game

    def state(self) -> GameState:
        return GameState(
            setup=self.setup,
            board=self.board.copy(),
            phase=self.phase,
            current=self.current,
            dice=self.dice,
            scores=dict(self.scores),
            game_time_remaining=self.game_time_remaining,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def game_time_remaining(self) -> Optional[float]:
        if self._game_deadline is not None and self.scheduler is not None:
            return max(0.0, self._game_deadline - self.scheduler.time())
        return self._game_time_left

    def participant(self, color: Color | None = None) -> Participant:
        return self.setup.participant(self.current if color is None else color)

    def is_ai_turn(self) -> bool:
        return self.participant().kind is ParticipantKind.AI

    def next_color(self, color: Color | None = None) -> Color:
        color = self.current if color is None else color
        idx = self.turn_order.index(color)
        return self.turn_order[(idx + 1) % len(self.turn_order)]

    def legal_moves(self) -> List[Move]:
        if self.dice is None or self.phase not in (Phase.MOVING, Phase.AI_THINKING):
            return []
        return legal_moves(self.board, self.current, self.dice, self.rules)

    def ranking(self) -> List[RankEntry]:
        return rank(self.board, self.turn_order, self.scores, self.setup.mode)

    # ------------------------------------------------------------------
    # Core turn progression
    # ------------------------------------------------------------------
    def roll(self, value: int | None = None) -> TurnOutcome:
        """Commit a die for the current player and route the turn."""
        self._ensure_phase(Phase.ROLLING)
        dice = self.rng.randint(config.DICE_MIN, config.DICE_MAX) if value is None else value
        validate_dice(dice)
        color = self.current
        self._cancel_timer("turn")
        self.dice = dice

        moves = legal_moves(self.board, color, dice, self.rules)
        is_ai = self.is_ai_turn()
        has_response = bool(moves) or (
            is_ai and bool(forced_entry_moves(self.board, color, dice))
        )
        logger.debug(f"{color.label} rolled {dice}, {len(moves)} legal moves")

        if not has_response:
            return self._no_move(color, dice, moves)

        if is_ai:
            self._set_phase(Phase.AI_THINKING)
            self._arm_ai_timer()
            return TurnOutcome(color=color, dice=dice, moves=moves, phase=self.phase)

        if len(moves) == 1:
            outcome = self._apply(moves[0])
            outcome.moves = moves
            outcome.auto = True
            return outcome

        self._set_phase(Phase.MOVING)
        return TurnOutcome(color=color, dice=dice, moves=moves, phase=self.phase)

    def select_move(self, pawn_id: int, color: Color | None = None) -> TurnOutcome:
        """Apply a human choice; the pawn must have a legal move for the current die."""
        self._ensure_phase(Phase.MOVING)
        if color is not None and Color(color) != self.current:
            logger.warning(f"{Color(color).label} tried to move during {self.current.label}'s turn")
            raise InvalidMoveSelection(
                f"It is {self.current.label}'s turn", color=color, pawn_id=pawn_id
            )
        moves = self.legal_moves()
        chosen = next((mv for mv in moves if mv.pawn_id == pawn_id), None)
        if chosen is None:
            logger.warning(f"{self.current.label} pawn {pawn_id} cannot move {self.dice}")
            raise InvalidMoveSelection(
                f"Pawn {pawn_id} of {self.current.label} cannot move with {self.dice}",
                color=self.current,
                pawn_id=pawn_id,
            )
        outcome = self._apply(chosen)
        outcome.moves = moves
        return outcome

    def play_ai(self) -> TurnOutcome:
        """Let the current AI player's strategy pick and play its move."""
        self._ensure_phase(Phase.AI_THINKING)
        self._cancel_timer("ai")
        color, dice = self.current, self.dice
        moves = legal_moves(self.board, color, dice, self.rules)
        move = self._strategy_for(color).decide(self.board, color, dice, self.rules)
        if move is None:
            return self._no_move(color, dice, moves)
        outcome = self._apply(move)
        outcome.moves = moves
        return outcome

    def auto_play(self) -> Optional[TurnOutcome]:
        """Drive an AI player one step (roll or move). Returns None on a human turn."""
        if self.game_over or not self.is_ai_turn():
            return None
        if self.phase is Phase.ROLLING:
            return self.roll()
        if self.phase is Phase.AI_THINKING:
            return self.play_ai()
        return None

    def end_game(self) -> GameSummary:
        """Close the game and decide the outcome from the ranking."""
        if self.phase is Phase.SETUP:
            raise PhaseError("Cannot end a game that has not started")
        if self.summary is not None:
            return self.summary
        self._cancel_timers()
        self._generation += 1
        if self.scheduler is not None and self._game_deadline is not None:
            self._game_time_left = self.game_time_remaining
        self._game_deadline = None
        self.summary = summarize(self.ranking(), self.winner)
        self.winner = self.summary.winner
        self.phase = Phase.GAME_OVER
        self.dice = None
        logger.info(f"Game over: {self.summary.title}")
        return self.summary

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _initial_board(self) -> Board:
        return Board.initial(
            self.turn_order, start_on_entry=self.setup.mode is GameMode.QUICK
        )

    def _build_strategies(self) -> None:
        for color in self.turn_order:
            p = self.setup.participant(color)
            if p.kind is not ParticipantKind.AI:
                continue
            rng = random.Random(self.rng.getrandbits(32))
            try:
                self.strategies[color] = create_strategy(p.strategy, rng=rng)
            except KeyError as e:
                logger.warning(
                    f"Unknown strategy '{p.strategy}' for {color.label}, falling back to {DEFAULT_STRATEGY}: {e}"
                )
                self.strategies[color] = create_strategy(DEFAULT_STRATEGY, rng=rng)

    def _strategy_for(self, color: Color) -> BaseStrategy:
        return self.strategies[color]

    def _ensure_phase(self, phase: Phase) -> None:
        if self.phase is Phase.GAME_OVER:
            raise GameOverError("The game is over")
        if self.phase is not phase:
            raise PhaseError(
                f"Expected phase {phase.value}, game is in {self.phase.value}"
            )

    def _set_phase(self, phase: Phase) -> None:
        self._generation += 1
        self.phase = phase

    def _enter_rolling(self, color: Color) -> None:
        self._cancel_timer("turn")
        self._cancel_timer("ai")
        self.current = color
        self.dice = None
        self._set_phase(Phase.ROLLING)
        if self.setup.uses_turn_timer:
            self._arm(
                "turn", self.setup.turn_timer_seconds, self._on_turn_timeout
            )
        if self.is_ai_turn():
            self._arm_ai_timer()

    def _no_move(self, color: Color, dice: int, moves: List[Move]) -> TurnOutcome:
        if dice == config.EXIT_YARD_ROLL:
            logger.debug(f"{color.label} has no move on a six and rolls again")
            nxt = color
        else:
            logger.debug(f"{color.label} has no possible moves")
            nxt = self.next_color(color)
        self._enter_rolling(nxt)
        return TurnOutcome(
            color=color,
            dice=dice,
            moves=moves,
            no_move=True,
            phase=self.phase,
            next_color=nxt,
        )

    def _apply(self, move: Move) -> TurnOutcome:
        color, dice = self.current, self.dice
        result = apply_move(self.board, move, self.rules)
        self.board = result.board
        if self.setup.mode is GameMode.TIMED:
            self.scores = apply_deltas(self.scores, score_deltas(result))

        if result.winner is not None:
            self.winner = result.winner
            logger.info(f"{result.winner.display_name} wins")
            self.end_game()
            nxt = None
        elif result.extra_turn:
            nxt = color
            self._enter_rolling(color)
        else:
            nxt = self.next_color(color)
            self._enter_rolling(nxt)
        return TurnOutcome(
            color=color,
            dice=dice,
            moves=[move],
            result=result,
            phase=self.phase,
            next_color=nxt,
        )

    # --- timers ---
    def _key(self, purpose: str) -> TimerKey:
        if purpose == "game":
            return TimerKey(purpose, self.phase, None, self._session)
        return TimerKey(purpose, self.phase, self.current, self._generation)

    def _is_current(self, key: TimerKey) -> bool:
        if self.phase is Phase.GAME_OVER:
            return False
        if key.purpose == "game":
            return key.generation == self._session
        return (
            key.generation == self._generation
            and key.phase is self.phase
            and key.color == self.current
        )

    def _arm(self, purpose: str, delay: float, callback) -> None:
        if self.scheduler is None:
            return
        self._cancel_timer(purpose)
        self._timers[purpose] = self.scheduler.schedule(
            delay, self._key(purpose), callback
        )

    def _arm_ai_timer(self) -> None:
        self._arm("ai", self.setup.ai_think_delay, self._on_ai_timer)

    def _arm_game_timer(self, seconds: float) -> None:
        self._game_time_left = seconds
        if self.scheduler is None:
            return
        self._game_deadline = self.scheduler.time() + seconds
        self._arm("game", seconds, self._on_game_timeout)

    def _cancel_timer(self, purpose: str) -> None:
        handle = self._timers.pop(purpose, None)
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self) -> None:
        for purpose in list(self._timers):
            self._cancel_timer(purpose)

    def _on_turn_timeout(self, key: TimerKey) -> None:
        if not self._is_current(key) or self.phase is not Phase.ROLLING:
            logger.debug(f"Ignoring stale turn timer for {key.color}")
            return
        logger.info(f"{self.participant().name} ran out of time")
        self._enter_rolling(self.next_color())

    def _on_ai_timer(self, key: TimerKey) -> None:
        if not self._is_current(key):
            logger.debug(f"Ignoring stale AI timer for {key.color}")
            return
        self._timers.pop("ai", None)
        self.auto_play()

    def _on_game_timeout(self, key: TimerKey) -> None:
        if not self._is_current(key):
            logger.debug("Ignoring stale game timer")
            return
        self._timers.pop("game", None)
        self._game_deadline = None
        self._game_time_left = 0.0
        logger.info("Game timer expired")
        self.end_game()
