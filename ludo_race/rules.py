"""
Game rules: move enumeration, capture resolution, validation and
committing a chosen move.
"""

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from loguru import logger

from .board import Board, Position
from .config import Config, config as default_config
from .player import Player
from .token import Token, TokenState
from .types import (
    ActionResult,
    AdvanceMove,
    CaptureMove,
    FinishMove,
    Move,
    MoveRecord,
    MoveResult,
    UnlockMove,
)

if TYPE_CHECKING:
    from .game import GameState


class Rules:
    """Stateless rule book; all game data comes in through arguments."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config

    def can_unlock(self, dice_value: int) -> bool:
        return dice_value == self.config.UNLOCK_VALUE

    def can_move(self, token: Token, dice_value: int) -> Tuple[bool, Optional[str]]:
        """Whether a token may use this roll, with the refusal reason if not."""
        if token.state is TokenState.FINISHED:
            return False, "Token already finished"
        if token.state is TokenState.HOME:
            if self.can_unlock(dice_value):
                return True, None
            return False, "Need 6 to unlock"
        calc = token.calculate_move(dice_value)
        return calc.valid, calc.reason

    def tokens_at(
        self, position: Optional[Position], players: Sequence[Player]
    ) -> List[Token]:
        if position is None:
            return []
        return [
            token
            for player in players
            for token in player.tokens
            if token.position == position
        ]

    def is_safe_position(self, position: Optional[Position]) -> bool:
        """Cells where an occupant cannot be captured."""
        if Board.is_safe_cell(position):
            return True
        return Board.is_entry_cell(position) and not self.config.CAPTURE_ON_ENTRY_CELLS

    def check_capture(
        self, position: Optional[Position], player_index: int, players: Sequence[Player]
    ) -> Optional[Token]:
        """The opponent token a move onto `position` would send home, if any."""
        if position is None or self.is_safe_position(position):
            return None
        track_index = Board.track_index_of(position)
        if track_index < 0:
            return None
        for player in players:
            if player.index == player_index:
                continue
            for token in player.tokens:
                if token.is_on_track() and token.track_index == track_index:
                    return token
        return None

    def get_valid_moves(
        self, player: Player, dice_value: int, players: Sequence[Player]
    ) -> List[Move]:
        """Every legal move for this roll, in token-slot order."""
        moves: List[Move] = []
        for token in player.tokens:
            if token.state is TokenState.HOME:
                if self.can_unlock(dice_value):
                    entry = Board.entry_index(player.color)
                    moves.append(
                        UnlockMove(
                            token=token,
                            dice_value=dice_value,
                            to_position=Board.track_position(entry),
                            to_track_index=entry,
                        )
                    )
                continue
            if token.state is not TokenState.ACTIVE:
                continue

            calc = token.calculate_move(dice_value)
            if not calc.valid:
                continue
            fields = dict(
                token=token,
                dice_value=dice_value,
                from_position=token.position,
                to_position=calc.new_position,
                from_track_index=token.track_index,
                to_track_index=calc.new_track_index,
                from_home_path_index=token.home_path_index,
                to_home_path_index=calc.new_home_path_index,
                path=calc.path,
                enters_home_path=calc.enters_home_path,
            )
            if calc.finished:
                moves.append(FinishMove(**fields))
                continue
            captured = None
            if calc.new_track_index >= 0:
                captured = self.check_capture(calc.new_position, player.index, players)
            if captured is not None:
                moves.append(CaptureMove(captured=captured, **fields))
            else:
                moves.append(AdvanceMove(**fields))
        return moves

    def validate_move(self, move: Move, state: "GameState") -> ActionResult:
        """Check a move against the current state before it is committed."""
        token = state.get_token(move.token_id)
        if token is None:
            return ActionResult.reject("Token not found")
        if token is not move.token:
            return ActionResult.reject("Token not found")
        if token.player_index != state.turn.current_player_index:
            return ActionResult.reject("Not your token")
        if move.dice_value != state.turn.dice_value:
            return ActionResult.reject("Dice value mismatch")

        if isinstance(move, UnlockMove):
            if not self.can_unlock(move.dice_value):
                return ActionResult.reject("Need 6 to unlock")
            if token.state is not TokenState.HOME:
                return ActionResult.reject("Token not at home")
            if move.to_track_index != Board.entry_index(token.color):
                return ActionResult.reject("Invalid selection")
            return ActionResult.ok()

        if token.state is TokenState.FINISHED:
            return ActionResult.reject("Token already finished")
        if token.state is not TokenState.ACTIVE:
            return ActionResult.reject("Token not active")
        if (
            token.track_index != move.from_track_index
            or token.home_path_index != move.from_home_path_index
        ):
            return ActionResult.reject("Invalid selection")

        # The destination must be the one this roll actually reaches.
        calc = token.calculate_move(move.dice_value)
        if not calc.valid:
            return ActionResult.reject(calc.reason)
        if (
            calc.new_track_index != move.to_track_index
            or calc.new_home_path_index != move.to_home_path_index
            or calc.finished != isinstance(move, FinishMove)
            or calc.enters_home_path != move.enters_home_path
        ):
            return ActionResult.reject("Invalid selection")

        victim = None
        if not calc.finished and calc.new_track_index >= 0:
            victim = self.check_capture(
                calc.new_position, token.player_index, state.players
            )
        if isinstance(move, CaptureMove):
            if victim is None or victim is not move.captured:
                return ActionResult.reject("Invalid selection")
        elif victim is not None:
            # Landing on an opponent is always a capture.
            return ActionResult.reject("Invalid selection")
        return ActionResult.ok()

    def execute_move(self, move: Move, state: "GameState") -> MoveResult:
        """Commit a move that has already been validated."""
        token = move.token
        player = state.players[token.player_index]
        from_position = token.position
        captured: Optional[Token] = None
        finished = False
        grants_extra = False

        if isinstance(move, UnlockMove):
            token.unlock()
            grants_extra = True
        elif isinstance(move, FinishMove):
            token.apply_destination(
                move.to_track_index,
                move.to_home_path_index,
                move.dice_value,
                finished=True,
            )
            player.finished_tokens += 1
            finished = True
            logger.info(
                f"{player.name} brought {token.id} home "
                f"({player.finished_tokens}/{len(player.tokens)})"
            )
        else:
            token.apply_destination(
                move.to_track_index, move.to_home_path_index, move.dice_value
            )
            if isinstance(move, CaptureMove):
                captured = move.captured
                captured.send_home()
                player.record_capture()
                grants_extra = True
                logger.info(f"{token.id} captured {captured.id}")

        player.record_move()
        state.record_move(
            MoveRecord(
                turn_number=state.turn_number,
                player_index=player.index,
                token_id=token.id,
                kind=move.kind,
                dice_value=move.dice_value,
                from_position=from_position,
                to_position=token.position,
                captured_token_id=captured.id if captured else None,
            )
        )

        extra_turn = grants_extra or self.can_roll_again(
            move.dice_value, state.turn.consecutive_sixes
        )
        return MoveResult(
            move=move,
            captured=captured,
            finished=finished,
            extra_turn=extra_turn,
            new_position=token.position,
        )

    def has_won(self, player: Player) -> bool:
        return player.finished_tokens >= self.config.TOKENS_PER_PLAYER

    def can_roll_again(self, dice_value: int, consecutive_sixes: int) -> bool:
        return (
            dice_value == self.config.UNLOCK_VALUE
            and consecutive_sixes < self.config.MAX_CONSECUTIVE_SIXES
        )

    def is_turn_forfeited(self, consecutive_sixes: int) -> bool:
        return consecutive_sixes >= self.config.MAX_CONSECUTIVE_SIXES
