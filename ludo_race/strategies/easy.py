from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..constants import Difficulty
from ..types import CaptureMove, FinishMove, Move, UnlockMove
from .base import Strategy

if TYPE_CHECKING:
    from ..game import GameState


class EasyStrategy(Strategy):
    """Mostly random; otherwise capture, then finish, then unlock when few tokens are out."""

    name = "easy"
    difficulty = Difficulty.EASY

    def _choose(self, moves: List[Move], state: GameState) -> Move:
        captures = [m for m in moves if isinstance(m, CaptureMove)]
        if captures:
            return self.random_move(captures)

        finishes = [m for m in moves if isinstance(m, FinishMove)]
        if finishes:
            return self.random_move(finishes)

        player = state.players[moves[0].player_index]
        if len(player.get_active_tokens()) < 2:
            unlocks = [m for m in moves if isinstance(m, UnlockMove)]
            if unlocks:
                return self.random_move(unlocks)

        return self.random_move(moves)
