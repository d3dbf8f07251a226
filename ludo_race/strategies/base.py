from __future__ import annotations

import random
from typing import TYPE_CHECKING, ClassVar, List, Optional, Sequence

from ..config import difficulty_settings
from ..constants import Difficulty
from ..types import Move
from .heuristics import HeuristicScorer

if TYPE_CHECKING:
    from ..game import GameState


class Strategy:
    """Base class for computer players with the shared selection flow."""

    name: ClassVar[str] = "base"
    difficulty: ClassVar[Difficulty] = Difficulty.MEDIUM

    def __init__(
        self,
        randomness: Optional[float] = None,
        rng: Optional[random.Random] = None,
        scorer: Optional[HeuristicScorer] = None,
    ):
        if randomness is None:
            randomness = difficulty_settings.randomness(self.difficulty)
        self.randomness = randomness
        self.rng = rng or random.Random()
        self.scorer = scorer or HeuristicScorer()

    def select_move(
        self, valid_moves: Sequence[Move], state: GameState
    ) -> Optional[Move]:
        """Pick one of the legal moves; None only when there are none."""
        if not valid_moves:
            return None
        if len(valid_moves) == 1:
            return valid_moves[0]
        if self.rng.random() < self.randomness:
            return self.random_move(valid_moves)
        return self._choose(list(valid_moves), state)

    def random_move(self, moves: Sequence[Move]) -> Move:
        return self.rng.choice(list(moves))

    def _choose(
        self, moves: List[Move], state: GameState
    ) -> Move:  # pragma: no cover - abstract
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(randomness={self.randomness})"
