"""Save and resume games as indented JSON documents.

A saved game is rejected as a whole (``StaleSnapshotLoad``) when it is
finished, malformed, or describes a board that cannot occur.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List

from loguru import logger

from .board import Board
from .config import config
from .exceptions import StaleSnapshotLoad
from .game import Game, GameSetup, GameState, Participant
from .pawn import Pawn
from .rules import RuleSet, legal_moves
from .strategy import DEFAULT_STRATEGY
from .types import Color, GameMode, ParticipantKind, Phase

FORMAT_VERSION = 1
RESUMABLE_PHASES = (Phase.ROLLING, Phase.MOVING, Phase.AI_THINKING)


def to_dict(source: Game | GameState) -> Dict[str, Any]:
    state = source.state() if isinstance(source, Game) else source
    setup = state.setup
    return {
        "version": FORMAT_VERSION,
        "mode": setup.mode.value,
        "phase": state.phase.value,
        "current_color": state.current.label,
        "dice": state.dice,
        "turn_order": [c.label for c in setup.turn_order],
        "participants": {
            p.color.label: {"kind": p.kind.value, "name": p.name, "strategy": p.strategy}
            for p in setup.participants
        },
        "secondary_safe_points": setup.secondary_safe_points,
        "turn_timer_seconds": setup.turn_timer_seconds,
        "game_timer_seconds": setup.game_timer_seconds,
        "ai_think_delay": setup.ai_think_delay,
        "require_human": setup.require_human,
        "game_time_remaining": state.game_time_remaining,
        "scores": {c.label: s for c, s in state.scores.items()},
        "pawns": {
            color.label: [
                {"id": p.pawn_id, "position": p.position, "home": p.reached_home}
                for p in pieces
            ]
            for color, pieces in state.board.pawns.items()
        },
    }


def from_dict(data: Any) -> GameState:
    """Validate and rebuild a game state; nothing is returned unless all of it is sound."""
    try:
        state = _parse(data)
    except StaleSnapshotLoad as e:
        logger.warning(f"Rejected saved game: {e}")
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Rejected saved game: {e!r}")
        raise StaleSnapshotLoad(f"Malformed saved game: {e!r}") from e
    _check(state)
    return state


def dump(source: Game | GameState) -> str:
    return json.dumps(to_dict(source), indent=2, sort_keys=True)


def load(text: str) -> GameState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StaleSnapshotLoad(f"Saved game is not valid JSON: {e}") from e
    return from_dict(data)


def save(source: Game | GameState, path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        f.write(dump(source))


def load_file(path: str) -> GameState:
    with open(path, "r") as f:
        return load(f.read())


def _parse(data: Any) -> GameState:
    if not isinstance(data, dict):
        raise StaleSnapshotLoad("Saved game is not a mapping")
    if data.get("version") != FORMAT_VERSION:
        raise StaleSnapshotLoad(f"Unsupported save version {data.get('version')!r}")

    participants = [
        Participant(
            color=Color.from_label(label),
            kind=ParticipantKind(entry["kind"]),
            name=str(entry.get("name", "")),
            strategy=str(entry.get("strategy", "")) or DEFAULT_STRATEGY,
        )
        for label, entry in data["participants"].items()
    ]
    setup = GameSetup(
        mode=GameMode(data["mode"]),
        participants=participants,
        turn_order=[Color.from_label(c) for c in data["turn_order"]],
        secondary_safe_points=bool(data["secondary_safe_points"]),
        turn_timer_seconds=float(data["turn_timer_seconds"]),
        game_timer_seconds=float(data["game_timer_seconds"]),
        ai_think_delay=float(data.get("ai_think_delay", config.AI_THINK_DELAY)),
        require_human=bool(data.get("require_human", True)),
    )

    pawns: Dict[Color, List[Pawn]] = {}
    for label, entries in data["pawns"].items():
        color = Color.from_label(label)
        pawns[color] = [
            Pawn(
                color=color,
                pawn_id=int(e["id"]),
                position=int(e["position"]),
                reached_home=bool(e["home"]),
            )
            for e in entries
        ]

    dice = data.get("dice")
    remaining = data.get("game_time_remaining")
    return GameState(
        setup=setup,
        board=Board(pawns=pawns),
        phase=Phase(data["phase"]),
        current=Color.from_label(data["current_color"]),
        dice=None if dice is None else int(dice),
        scores={Color.from_label(c): int(s) for c, s in data.get("scores", {}).items()},
        game_time_remaining=None if remaining is None else float(remaining),
    )


def _check(state: GameState) -> None:
    def reject(reason: str) -> None:
        logger.warning(f"Rejected saved game: {reason}")
        raise StaleSnapshotLoad(reason)

    if state.phase not in RESUMABLE_PHASES:
        reject(f"Phase {state.phase.value} cannot be resumed")
    try:
        state.setup.validate()
    except ValueError as e:
        reject(f"Invalid setup: {e}")
    order = state.setup.resolved_turn_order()
    if state.current not in order:
        reject(f"Current color {state.current.label} is not in the turn order")
    if sorted(state.board.pawns) != sorted(order):
        reject("Board colors do not match the active players")
    if state.phase is Phase.ROLLING and state.dice is not None:
        reject("A rolling phase cannot carry a committed die")
    if state.phase is not Phase.ROLLING and (
        state.dice is None or not config.DICE_MIN <= state.dice <= config.DICE_MAX
    ):
        reject(f"Phase {state.phase.value} needs a die in 1..6, got {state.dice}")
    problems = state.board.inconsistencies()
    if problems:
        reject("; ".join(problems))
    finished = [c.label for c in state.board.pawns if state.board.has_won(c)]
    if finished:
        reject(f"{', '.join(finished)} already won")
    kind = state.setup.participant(state.current).kind
    if state.phase is Phase.AI_THINKING and kind is not ParticipantKind.AI:
        reject(f"{state.current.label} is not an AI player but the AI is thinking")
    if state.phase is Phase.MOVING and kind is not ParticipantKind.HUMAN:
        reject(f"{state.current.label} is not a human player but a move is awaited")
    if state.phase is Phase.MOVING:
        rules = RuleSet(secondary_safe_points=state.setup.secondary_safe_points)
        if not legal_moves(state.board, state.current, state.dice, rules):
            reject(f"{state.current.label} is waiting to move but has no legal move")
