"""
Turn state machine: rolling, move enumeration, selection, execution,
extra turns, forfeiture and turn hand-over. Drives computer players and
applies actions relayed from a remote peer.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from loguru import logger

from .config import PacingConfig, pacing_config
from .dice import Dice
from .events import EventBus, GameEvent
from .exceptions import ActionPayloadError
from .game import GameState
from .player import Player
from .rules import Rules
from .serialization import (
    DiceRollAction,
    MoveAction,
    RelayAction,
    TurnEndAction,
    action_from_dict,
    move_action,
    move_from_payload,
)
from .strategies.registry import AIController
from .types import ActionResult, GamePhase, Move, TurnPhase, UnlockMove


@dataclass(slots=True)
class Pacing:
    """Presentation delays. A scale of 0 turns every wait into a no-op."""

    dice_roll_ms: int = 800
    token_move_ms: int = 300
    turn_delay_ms: int = 500
    ai_think_ms: int = 800
    message_ms: int = 2000
    scale: float = 0.0
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_config(
        cls,
        cfg: Optional[PacingConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "Pacing":
        cfg = cfg or pacing_config
        return cls(
            dice_roll_ms=cfg.dice_roll_ms,
            token_move_ms=cfg.token_move_ms,
            turn_delay_ms=cfg.turn_delay_ms,
            ai_think_ms=cfg.ai_think_ms,
            message_ms=cfg.message_ms,
            scale=cfg.scale,
            sleep=sleep,
        )

    def wait(self, ms: float) -> None:
        if self.scale <= 0 or ms <= 0:
            return
        self.sleep(ms * self.scale / 1000.0)


class TurnManager:
    """Owns the turn flow for one GameState."""

    def __init__(
        self,
        state: GameState,
        rules: Optional[Rules] = None,
        dice: Optional[Dice] = None,
        bus: Optional[EventBus] = None,
        ai: Optional[AIController] = None,
        pacing: Optional[Pacing] = None,
        on_action: Optional[Callable[[RelayAction], None]] = None,
    ):
        self.state = state
        self.rules = rules or Rules(state.config)
        self.dice = dice or Dice()
        self.bus = bus or EventBus()
        self.ai = ai or AIController()
        self.pacing = pacing or Pacing.from_config()
        self.on_action = on_action
        self._started = False

    @property
    def turn(self):
        return self.state.turn

    @property
    def current_player(self) -> Player:
        return self.state.current_player

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _blocked(self) -> Optional[str]:
        if self.state.is_over:
            return "Game over"
        if self.state.is_paused:
            return "Game paused"
        return None

    def _reject(self, reason: str, action: str) -> ActionResult:
        logger.warning(f"{action} rejected for {self.current_player.name}: {reason}")
        return ActionResult.reject(reason)

    def _relay(self, action: RelayAction) -> None:
        if self.on_action is not None:
            self.on_action(action)

    # ------------------------------------------------------------------
    # Turn lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin play with the current player's turn."""
        if self.state.phase in (GamePhase.MENU, GamePhase.SETUP):
            self.state.phase = GamePhase.PLAYING
        self._started = True
        self.bus.publish(GameEvent.GAME_STARTED, players=list(self.state.players))
        self.start_turn()

    def start_turn(self) -> None:
        player = self.current_player
        self.turn.phase = TurnPhase.WAITING
        logger.debug(f"turn {self.state.turn_number}: {player.name} to roll")
        self.bus.publish(
            GameEvent.TURN_STARTED, player=player, player_index=player.index
        )

    def end_turn(self, relay: bool = True) -> Player:
        """Hand the turn to the next seat and start it."""
        player = self.current_player
        self.turn.phase = TurnPhase.COMPLETE
        self.bus.publish(GameEvent.TURN_ENDED, player=player, player_index=player.index)

        next_index = (player.index + 1) % len(self.state.players)
        if relay:
            self._relay(TurnEndAction(player.index, next_index))

        self.state.next_turn()
        self.dice.reset()
        self.pacing.wait(self.pacing.turn_delay_ms)
        self.start_turn()
        return self.current_player

    def skip_turn(self) -> ActionResult:
        if self.state.is_over:
            return self._reject("Game over", "skip")
        player = self.current_player
        logger.info(f"{player.name} skips the turn")
        self.bus.publish(GameEvent.TURN_SKIPPED, player=player, player_index=player.index)
        self.end_turn()
        return ActionResult.ok()

    # ------------------------------------------------------------------
    # Rolling
    # ------------------------------------------------------------------
    def roll_dice(self) -> ActionResult:
        blocked = self._blocked()
        if blocked:
            return self._reject(blocked, "roll")
        if self.turn.phase is not TurnPhase.WAITING:
            return self._reject("Not waiting for roll", "roll")

        self.turn.phase = TurnPhase.ROLLING
        value = self.dice.roll()
        self.pacing.wait(self.pacing.dice_roll_ms)
        self._record_roll(value)
        self._relay(
            DiceRollAction(
                self.current_player.index, value, self.turn.consecutive_sixes
            )
        )
        if self._forfeit_if_needed():
            return ActionResult.ok(dice_value=value)

        player = self.current_player
        moves = self.rules.get_valid_moves(player, value, self.state.players)
        self.turn.valid_moves = moves
        self.turn.phase = TurnPhase.SELECTING
        self.bus.publish(GameEvent.VALID_MOVES, player=player, moves=list(moves))

        if not moves:
            logger.debug(f"{player.name} has no legal move for {value}")
            self.bus.publish(
                GameEvent.NO_VALID_MOVES, player=player, dice_value=value
            )
            self.pacing.wait(self.pacing.message_ms)
            self.end_turn()
            return ActionResult.ok(dice_value=value)

        # A pause requested while the roll was announced holds the turn here
        if self.state.is_paused:
            return ActionResult.ok(dice_value=value)
        if len(moves) == 1:
            return self._commit(moves[0])
        if player.is_ai:
            return self._ai_select()
        return ActionResult.ok(dice_value=value)

    def _record_roll(self, value: int, remote: bool = False) -> None:
        player = self.current_player
        self.state.set_dice_value(value)
        if value == self.state.config.UNLOCK_VALUE:
            player.record_six()
        logger.info(
            f"{player.name} rolled {value} (sixes in a row: {self.turn.consecutive_sixes})"
        )
        self.bus.publish(
            GameEvent.DICE_ROLLED,
            player=player,
            value=value,
            consecutive_sixes=self.turn.consecutive_sixes,
            remote=remote,
        )

    def _forfeit_if_needed(self, relay: bool = True) -> bool:
        if not self.rules.is_turn_forfeited(self.turn.consecutive_sixes):
            return False
        player = self.current_player
        logger.info(f"{player.name} rolled too many sixes in a row, turn forfeited")
        self.bus.publish(
            GameEvent.TURN_FORFEITED,
            player=player,
            consecutive_sixes=self.turn.consecutive_sixes,
        )
        self.pacing.wait(self.pacing.message_ms)
        self.end_turn(relay=relay)
        return True

    # ------------------------------------------------------------------
    # Selection and execution
    # ------------------------------------------------------------------
    def select_token(
        self, token_id: str, dice_value: Optional[int] = None
    ) -> ActionResult:
        """Choose which token uses the current roll."""
        blocked = self._blocked()
        if blocked:
            return self._reject(blocked, "selection")

        reason = None
        move = None
        if self.turn.phase is not TurnPhase.SELECTING:
            reason = "Not selecting"
        elif dice_value is not None and dice_value != self.turn.dice_value:
            reason = "Dice value mismatch"
        else:
            move = next(
                (m for m in self.turn.valid_moves if m.token_id == token_id), None
            )
            if move is None:
                reason = "Invalid selection"
        if reason:
            self.bus.publish(
                GameEvent.SELECTION_REJECTED, token_id=token_id, reason=reason
            )
            return self._reject(reason, "selection")
        return self._commit(move)

    def execute_move(self, move: Move) -> ActionResult:
        """Validate and commit a move for the current roll."""
        blocked = self._blocked()
        if blocked:
            return self._reject(blocked, "move")
        if self.turn.phase is not TurnPhase.SELECTING:
            return self._reject("Not selecting", "move")
        check = self.rules.validate_move(move, self.state)
        if not check.success:
            return self._reject(check.reason, "move")
        return self._commit(move)

    def _ai_select(self) -> ActionResult:
        player = self.current_player
        self.pacing.wait(self.ai.think_time_ms(player.ai_difficulty))
        move = self.ai.select_move(self.turn.valid_moves, self.state)
        if move is None:
            return self._reject("Invalid selection", "AI selection")
        return self._commit(move)

    def _commit(self, move: Move, relay: bool = True) -> ActionResult:
        player = self.current_player
        dice_value = self.turn.dice_value
        self.turn.phase = TurnPhase.MOVING
        self.turn.selected_token_id = move.token_id
        self.bus.publish(GameEvent.MOVE_STARTED, player=player, move=move)
        if relay:
            self._relay(move_action(move))

        result = self.rules.execute_move(move, self.state)
        self.pacing.wait(self.pacing.token_move_ms * max(1, len(move.path)))
        logger.debug(
            f"{player.name} {move.kind.value} {move.token_id} with {move.dice_value}"
        )

        if isinstance(move, UnlockMove):
            self.bus.publish(GameEvent.TOKEN_UNLOCKED, player=player, token=move.token)
        if result.captured is not None:
            self.bus.publish(
                GameEvent.TOKEN_CAPTURED,
                player=player,
                token=move.token,
                captured=result.captured,
            )
        if result.finished:
            self.bus.publish(GameEvent.TOKEN_FINISHED, player=player, token=move.token)
        self.bus.publish(GameEvent.MOVE_COMPLETED, player=player, move=move, result=result)

        if self.rules.has_won(player):
            self.state.set_winner(player)
            logger.info(f"{player.name} wins after {self.state.turn_number + 1} turns")
            self.bus.publish(
                GameEvent.GAME_WON, player=player, rankings=self.state.rankings()
            )
            return ActionResult.ok(dice_value=dice_value, move_result=result)

        if result.extra_turn:
            self.turn.clear_roll()
            logger.debug(f"{player.name} earns another roll")
            self.bus.publish(GameEvent.EXTRA_TURN, player=player)
        else:
            self.end_turn(relay=relay)
        return ActionResult.ok(dice_value=dice_value, move_result=result)

    # ------------------------------------------------------------------
    # Driving the game
    # ------------------------------------------------------------------
    def step(self) -> ActionResult:
        """Advance by one pending action: an AI roll or a held selection."""
        blocked = self._blocked()
        if blocked:
            return ActionResult.reject(blocked)
        if not self._started:
            self.start()

        player = self.current_player
        if self.turn.phase is TurnPhase.WAITING:
            if not player.is_ai:
                return ActionResult.reject("Waiting for player")
            return self.roll_dice()
        if self.turn.phase is TurnPhase.SELECTING and self.turn.valid_moves:
            if len(self.turn.valid_moves) == 1:
                return self._commit(self.turn.valid_moves[0])
            if player.is_ai:
                return self._ai_select()
        return ActionResult.reject("Waiting for selection")

    def play_turn(self) -> ActionResult:
        """Step until the current turn hands over, the game ends or input is needed."""
        turn_number = self.state.turn_number
        result = ActionResult.reject("Game over")
        while not self.state.is_over and self.state.turn_number == turn_number:
            result = self.step()
            if not result.success:
                break
        return result

    def run(self, max_turns: Optional[int] = None) -> Optional[Player]:
        """Play computer turns until someone wins or the turn limit is reached."""
        limit = max_turns if max_turns is not None else self.state.config.MAX_TURNS
        if not self._started:
            self.start()
        while not self.state.is_over and self.state.turn_number < limit:
            result = self.step()
            if not result.success:
                logger.warning(f"run stopped: {result.reason}")
                break
        return self.state.winner

    # ------------------------------------------------------------------
    # Pause
    # ------------------------------------------------------------------
    def pause(self) -> bool:
        if not self.state.pause():
            logger.warning("pause refused")
            return False
        self.bus.publish(GameEvent.GAME_PAUSED)
        return True

    def resume(self) -> bool:
        if not self.state.resume():
            return False
        self.bus.publish(GameEvent.GAME_RESUMED)
        return True

    # ------------------------------------------------------------------
    # Remote peers
    # ------------------------------------------------------------------
    def apply_remote_action(self, action: Union[RelayAction, Dict]) -> ActionResult:
        """Apply a roll, move or turn end decided by another peer."""
        if isinstance(action, dict):
            action = action_from_dict(action)
        if self.state.is_over:
            return self._reject("Game over", "remote action")

        if isinstance(action, TurnEndAction):
            return self._apply_remote_turn_end(action)
        if action.player_index != self.turn.current_player_index:
            return self._reject("Player index mismatch", "remote action")

        if isinstance(action, DiceRollAction):
            if self.turn.phase is not TurnPhase.WAITING:
                return self._reject("Not waiting for roll", "remote roll")
            if not self.dice.force_value(action.value):
                raise ActionPayloadError(f"dice value out of range: {action.value}")
            self.turn.phase = TurnPhase.ROLLING
            self._record_roll(action.value, remote=True)
            if self.turn.consecutive_sixes != action.consecutive_sixes:
                logger.warning(
                    f"sixes count out of sync ({self.turn.consecutive_sixes} local, "
                    f"{action.consecutive_sixes} remote), adopting remote"
                )
                self.turn.consecutive_sixes = action.consecutive_sixes
            if self._forfeit_if_needed(relay=False):
                return ActionResult.ok(dice_value=action.value)
            # The peer decides the move; wait for it
            self.turn.phase = TurnPhase.SELECTING
            self.turn.valid_moves = []
            return ActionResult.ok(dice_value=action.value)

        if isinstance(action, MoveAction):
            if self.turn.phase is not TurnPhase.SELECTING:
                return self._reject("Not selecting", "remote move")
            move = move_from_payload(self.state, action.move)
            check = self.rules.validate_move(move, self.state)
            if not check.success:
                return self._reject(check.reason, "remote move")
            return self._commit(move, relay=False)

        raise ActionPayloadError(f"unsupported action {action!r}")

    def _apply_remote_turn_end(self, action: TurnEndAction) -> ActionResult:
        current = self.turn.current_player_index
        if current == action.next_player_index and current != action.player_index:
            # Already handed over locally (forfeit or a relayed move)
            return ActionResult.ok()
        if current != action.player_index:
            return self._reject("Player index mismatch", "remote turn end")
        self.end_turn(relay=False)
        return ActionResult.ok()
