from __future__ import annotations

import random
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Type

from loguru import logger

from ..config import DifficultySettings, difficulty_settings
from ..constants import Difficulty
from ..types import Move
from .base import Strategy
from .easy import EasyStrategy
from .hard import HardStrategy
from .medium import MediumStrategy

if TYPE_CHECKING:
    from ..game import GameState

STRATEGY_REGISTRY: Dict[Difficulty, Type[Strategy]] = {
    Difficulty.EASY: EasyStrategy,
    Difficulty.MEDIUM: MediumStrategy,
    Difficulty.HARD: HardStrategy,
}


def create(difficulty: Difficulty | str, **kwargs) -> Strategy:
    cls = STRATEGY_REGISTRY.get(Difficulty.from_name(difficulty))
    if cls is None:
        raise KeyError(f"Unknown strategy '{difficulty}'.")
    return cls(**kwargs)


def available() -> List[str]:
    return [difficulty.value for difficulty in STRATEGY_REGISTRY]


class AIController:
    """Routes move selection to the strategy matching each player's difficulty."""

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        rng: Optional[random.Random] = None,
        settings: Optional[DifficultySettings] = None,
    ):
        self.settings = settings or difficulty_settings
        self.rng = rng or random.Random()
        self.strategies: Dict[Difficulty, Strategy] = {
            level: cls(randomness=self.settings.randomness(level), rng=self.rng)
            for level, cls in STRATEGY_REGISTRY.items()
        }
        self.difficulty = Difficulty.MEDIUM
        self.set_difficulty(difficulty)

    def set_difficulty(self, difficulty: Difficulty | str) -> bool:
        try:
            self.difficulty = Difficulty.from_name(difficulty)
        except ValueError:
            logger.warning(f"Unknown AI difficulty {difficulty!r}, keeping {self.difficulty.value}")
            return False
        return True

    def get_strategy(self, difficulty: Optional[Difficulty] = None) -> Strategy:
        return self.strategies[difficulty or self.difficulty]

    def think_time_ms(self, difficulty: Optional[Difficulty] = None) -> int:
        return self.settings.think_time_ms(difficulty or self.difficulty)

    def select_move(
        self, valid_moves: Sequence[Move], state: GameState
    ) -> Optional[Move]:
        player = state.current_player
        difficulty = player.ai_difficulty if player.is_ai else self.difficulty
        strategy = self.get_strategy(difficulty)
        move = strategy.select_move(valid_moves, state)
        if move is not None:
            logger.debug(
                f"{strategy.name} AI for {player.name} chose {move.kind.value} "
                f"with {move.token_id}"
            )
        return move
