# Specific exception types for different error conditions
class LudoError(Exception):
    """Base exception for rule-engine and controller errors."""

    pass


class InvalidMoveSelection(LudoError):
    """Raised when the selected pawn has no move in the current legal-move list."""

    def __init__(self, message: str, *, color=None, pawn_id=None):
        super().__init__(message)
        self.color = color
        self.pawn_id = pawn_id


class StaleSnapshotLoad(LudoError):
    """Raised when a saved game is terminal or structurally inconsistent."""

    pass


class PhaseError(LudoError):
    """Raised when an action is requested in a phase that does not accept it."""

    pass


class GameOverError(PhaseError):
    """Raised when a roll or move is requested after the game has ended."""

    pass


class InvalidDiceValue(LudoError, ValueError):
    """Raised when a die value outside 1..6 is supplied (caller bug)."""

    pass


class InvalidSetup(LudoError, ValueError):
    """Raised when a game setup cannot start a game."""

    pass
