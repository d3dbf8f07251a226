from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, List

from ..board import Board
from ..config import config
from ..constants import Difficulty
from ..player import Player
from ..types import CaptureMove, FinishMove, Move, UnlockMove
from .base import Strategy

if TYPE_CHECKING:
    from ..game import GameState


class GamePhaseEstimate(Enum):
    EARLY = "early"
    MID = "mid"
    LATE = "late"


class HardStrategy(Strategy):
    """
    Heuristic score adjusted for what happens after the move: how exposed the
    destination is, how crowded the entry cell is, how deep the token already
    is in its home stretch, and which stage the whole game has reached.
    """

    name = "hard"
    difficulty = Difficulty.HARD

    def _choose(self, moves: List[Move], state: GameState) -> Move:
        player = state.players[moves[0].player_index]
        phase = self.game_phase(state)
        at_risk = self.scorer.count_tokens_at_risk(player, state)

        best_move = moves[0]
        best_score = float("-inf")
        for move in moves:
            score = self.score_move(move, state, player, phase, at_risk)
            if score > best_score:
                best_score = score
                best_move = move
        return best_move

    def score_move(
        self,
        move: Move,
        state: GameState,
        player: Player,
        phase: GamePhaseEstimate,
        tokens_at_risk: int,
    ) -> float:
        w = self.scorer.weights
        score = self.scorer.evaluate_move(move, state)

        future_risk = self.scorer.threat_level(move.to_position, player.index, state)
        score -= future_risk * w.future_risk_factor

        score += self.phase_adjustment(move, phase)

        if isinstance(move, UnlockMove):
            score -= self.entry_risk(player, state) * w.entry_risk_factor

        if move.token.is_on_home_path():
            score += (move.token.home_path_index + 1) * w.home_stretch_depth_bonus

        if tokens_at_risk > 1 and Board.is_safe_cell(move.to_position):
            score += w.defensive_safe_bonus
        return score

    def game_phase(self, state: GameState) -> GamePhaseEstimate:
        w = self.scorer.weights
        avg_progress = sum(p.overall_progress() for p in state.players) / len(
            state.players
        )
        finished = sum(p.finished_tokens for p in state.players)
        if avg_progress < w.early_progress_threshold or finished < w.early_finished_threshold:
            return GamePhaseEstimate.EARLY
        if avg_progress < w.mid_progress_threshold or finished < w.mid_finished_threshold:
            return GamePhaseEstimate.MID
        return GamePhaseEstimate.LATE

    def phase_adjustment(self, move: Move, phase: GamePhaseEstimate) -> float:
        w = self.scorer.weights
        capture = isinstance(move, CaptureMove)
        adjustment = 0.0
        if phase is GamePhaseEstimate.EARLY:
            if isinstance(move, UnlockMove):
                adjustment += w.early_unlock_bonus
            if capture:
                adjustment -= w.early_capture_penalty
        elif phase is GamePhaseEstimate.MID:
            if capture:
                adjustment += w.mid_capture_bonus
            if move.enters_home_path:
                adjustment += w.mid_enter_home_bonus
        else:
            if isinstance(move, FinishMove):
                adjustment += w.late_finish_bonus
            if move.enters_home_path:
                adjustment += w.late_enter_home_bonus
            if capture:
                adjustment += w.late_capture_bonus
        return adjustment

    def entry_risk(self, player: Player, state: GameState) -> int:
        """Summed closeness of opponents lurking behind this player's entry cell."""
        entry = Board.entry_index(player.color)
        risk = 0
        for opponent in state.players:
            if opponent.index == player.index:
                continue
            for token in opponent.tokens:
                if not token.is_on_track():
                    continue
                distance = Board.track_distance(token.track_index, entry)
                if 0 < distance <= config.THREAT_RANGE:
                    risk += config.THREAT_RANGE + 1 - distance
        return risk
