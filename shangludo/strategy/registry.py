from __future__ import annotations

import random
from typing import Dict, Type

from .aggressive import AggressiveStrategy
from .base import BaseStrategy
from .random_strategy import RandomStrategy

STRATEGY_REGISTRY: Dict[str, Type[BaseStrategy]] = {
    AggressiveStrategy.name: AggressiveStrategy,
    RandomStrategy.name: RandomStrategy,
}

DEFAULT_STRATEGY = AggressiveStrategy.name


def create(strategy_name: str, rng: random.Random | None = None) -> BaseStrategy:
    cls = STRATEGY_REGISTRY.get(strategy_name.lower())
    if cls is None:
        raise KeyError(f"Unknown strategy '{strategy_name}'.")
    return cls(rng=rng)


def available() -> Dict[str, Type[BaseStrategy]]:
    return dict(STRATEGY_REGISTRY)
