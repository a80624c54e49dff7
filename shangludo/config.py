import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class Config:
    # --- Board constants ---
    GRID_SIZE: int = 15  # squares are y * GRID_SIZE + x
    RING_LENGTH: int = 52  # outer ring of the cross
    RING_STEPS: int = 51  # ring squares on each color's own path
    HOME_STRETCH_SIZE: int = 6  # 5 lane squares + the color's centre triangle
    PAWNS_PER_PLAYER: int = 4
    YARD: int = -1
    DICE_MIN: int = 1
    DICE_MAX: int = 6
    EXIT_YARD_ROLL: int = 6
    SAFE_STAR_OFFSET: int = 8  # ring steps from an entry square to its star

    # --- Runtime knobs ---
    TURN_TIMER_SECONDS: float = float(os.getenv("TURN_TIMER_SECONDS", 10))
    GAME_TIMER_SECONDS: float = float(os.getenv("GAME_TIMER_SECONDS", 300))
    AI_THINK_DELAY: float = float(os.getenv("AI_THINK_DELAY", 0.5))
    SECONDARY_SAFE_POINTS: bool = bool(int(os.getenv("SECONDARY_SAFE_POINTS", 1)))
    MAX_TURNS: int = int(os.getenv("MAX_TURNS", 2000))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Derived (populated in __post_init__ due to slots)
    PATH_LENGTH: int = 0
    HOME_STRETCH_START: int = 0
    HOME_INDEX: int = 0

    def __post_init__(self):
        # 0..50 ring, 51..55 home lane, 56 home
        self.PATH_LENGTH = self.RING_STEPS + self.HOME_STRETCH_SIZE
        self.HOME_STRETCH_START = self.RING_STEPS
        self.HOME_INDEX = self.PATH_LENGTH - 1

        if self.RING_STEPS >= self.RING_LENGTH:
            raise ValueError("RING_STEPS must be shorter than the ring")


@dataclass(slots=True)
class StrategyWeights:
    finish: float = 1000.0
    capture: float = 700.0
    capture_per_pawn: float = 100.0  # per opponent pawn on the target square
    leave_yard: float = 120.0
    safe_square: float = 40.0
    progress: float = 10.0  # per path step gained
    entry_progress: float = 5.0  # per path index when leaving the yard
    break_safe_stack: float = -250.0
    tie_breaker: float = 1.0  # width of the uniform random term


@dataclass(slots=True)
class TimedScoring:
    step: int = 1
    leave_yard: int = 1
    reach_home: int = 50
    capture: int = 20
    captured: int = -20


config = Config()
strategy_weights = StrategyWeights()
timed_scoring = TimedScoring()
