from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ..board import Board, Position
from ..config import HeuristicWeights, config, weights as default_weights
from ..player import Player
from ..types import CaptureMove, FinishMove, Move, UnlockMove

if TYPE_CHECKING:
    from ..game import GameState


class HeuristicScorer:
    """Shared move and board evaluation used by every AI tier."""

    def __init__(self, weights: Optional[HeuristicWeights] = None):
        self.weights = weights or default_weights

    def _attacker_distances(
        self, position: Optional[Position], player_index: int, state: GameState
    ) -> List[int]:
        """Distances of opponent track tokens that sit within striking range behind a cell."""
        if position is None or Board.is_safe_cell(position):
            return []
        target = Board.track_index_of(position)
        if target < 0:
            return []
        distances = []
        for player in state.players:
            if player.index == player_index:
                continue
            for token in player.tokens:
                if not token.is_on_track():
                    continue
                distance = Board.track_distance(token.track_index, target)
                if 0 < distance <= config.THREAT_RANGE:
                    distances.append(distance)
        return distances

    def is_in_danger(
        self, position: Optional[Position], player_index: int, state: GameState
    ) -> bool:
        return bool(self._attacker_distances(position, player_index, state))

    def threat_level(
        self, position: Optional[Position], player_index: int, state: GameState
    ) -> int:
        """0 when safe; otherwise 7 minus the distance of the closest attacker."""
        distances = self._attacker_distances(position, player_index, state)
        if not distances:
            return 0
        return config.THREAT_RANGE + 1 - min(distances)

    def evaluate_move(self, move: Move, state: GameState) -> float:
        w = self.weights
        player = state.players[move.player_index]
        score = 0.0

        if isinstance(move, CaptureMove):
            score += w.capture + move.captured.total_steps * w.captured_progress_factor
        elif isinstance(move, FinishMove):
            score += w.finish
        elif isinstance(move, UnlockMove):
            score += w.unlock
            active = len(player.get_active_tokens())
            if active == 0:
                score += w.unlock_bonus_no_active
            elif active == 1:
                score += w.unlock_bonus_one_active
        else:
            score += move.dice_value * w.advance

        if move.enters_home_path:
            score += w.enter_home_path
        if Board.is_safe_cell(move.to_position):
            score += w.reach_safe
        if self.is_in_danger(move.from_position, player.index, state):
            score += w.escape_danger
        if move.token.is_on_home_path():
            score += w.protect_lead
        if not Board.is_safe_cell(move.to_position) and self.is_in_danger(
            move.to_position, player.index, state
        ):
            score -= w.danger_penalty
        return score

    def scored_moves(
        self, moves: Sequence[Move], state: GameState
    ) -> List[Tuple[Move, float]]:
        return [(move, self.evaluate_move(move, state)) for move in moves]

    def count_tokens_at_risk(self, player: Player, state: GameState) -> int:
        return sum(
            1
            for token in player.get_active_tokens()
            if self.is_in_danger(token.position, player.index, state)
        )

    def evaluate_board_state(self, player: Player, state: GameState) -> float:
        """Aggregate standing of one player; higher is better."""
        w = self.weights
        score = player.finished_tokens * w.board_finished
        for token in player.get_active_tokens():
            score += token.total_steps * w.board_step
            if token.is_on_home_path():
                score += w.board_home_path + token.home_path_index * w.board_home_path_step
            if Board.is_safe_cell(token.position):
                score += w.board_safe
            if self.is_in_danger(token.position, player.index, state):
                score -= w.board_danger
        return score
