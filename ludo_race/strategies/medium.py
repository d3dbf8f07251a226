from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence, Tuple

from ..constants import Difficulty
from ..types import Move
from .base import Strategy

if TYPE_CHECKING:
    from ..game import GameState


class MediumStrategy(Strategy):
    """Best heuristic score with a little noise so ties break unpredictably."""

    name = "medium"
    difficulty = Difficulty.MEDIUM

    def _choose(self, moves: List[Move], state: GameState) -> Move:
        jitter = self.scorer.weights.medium_jitter
        best_move = moves[0]
        best_score = float("-inf")
        for move, score in self.scorer.scored_moves(moves, state):
            score += self.rng.random() * jitter
            if score > best_score:
                best_score = score
                best_move = move
        return best_move

    def moves_with_scores(
        self, moves: Sequence[Move], state: GameState
    ) -> List[Tuple[Move, float]]:
        """Noise-free scores, highest first."""
        scored = self.scorer.scored_moves(moves, state)
        return sorted(scored, key=lambda item: item[1], reverse=True)
