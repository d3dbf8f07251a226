"""
Persistence snapshots and relay action payloads.

A snapshot is a plain dict (JSON-safe) capturing everything needed to
resume a game. Relay actions are the three messages exchanged between
peers of an online game: a dice roll, a chosen move and a turn end.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Union

from loguru import logger

from .board import Board, Position
from .config import Config
from .constants import Difficulty
from .exceptions import ActionPayloadError, SnapshotError
from .game import GameState, TurnState
from .player import Player
from .rules import Rules
from .token import Token, TokenState
from .types import (
    AdvanceMove,
    CaptureMove,
    FinishMove,
    GamePhase,
    Move,
    MoveKind,
    TurnPhase,
    UnlockMove,
)

SNAPSHOT_VERSION = 1


def _position(data: Optional[Dict]) -> Optional[Position]:
    return Position.from_dict(data)


def snapshot(state: GameState) -> Dict[str, Any]:
    turn = state.turn
    return {
        "version": SNAPSHOT_VERSION,
        "phase": state.phase.value,
        "mode": state.mode,
        "turn_phase": turn.phase.value,
        "current_player_index": turn.current_player_index,
        "dice_value": turn.dice_value,
        "consecutive_sixes": turn.consecutive_sixes,
        "rolls_this_turn": turn.rolls_this_turn,
        "turn_number": state.turn_number,
        "winner_index": state.winner.index if state.winner else None,
        "players": [
            {
                "index": p.index,
                "color": p.color.value,
                "name": p.name,
                "is_ai": p.is_ai,
                "ai_difficulty": p.ai_difficulty.value,
                "finished_tokens": p.finished_tokens,
                "captures": p.captures,
                "total_moves": p.total_moves,
                "sixes_rolled": p.sixes_rolled,
                "tokens": [
                    {
                        "id": t.id,
                        "state": t.state.value,
                        "position": t.position.to_dict() if t.position else None,
                        "track_index": t.track_index,
                        "home_path_index": t.home_path_index,
                        "total_steps": t.total_steps,
                    }
                    for t in p.tokens
                ],
            }
            for p in state.players
        ],
    }


def _restore_player(
    data: Dict[str, Any], config: Optional[Config] = None
) -> Player:
    player = Player(
        int(data["index"]),
        data.get("name"),
        bool(data.get("is_ai", False)),
        Difficulty.from_name(data.get("ai_difficulty", Difficulty.MEDIUM.value)),
        config=config,
    )
    if data.get("color") not in (None, player.color.value):
        raise SnapshotError(
            f"player {player.index} colour {data['color']!r} does not match seat"
        )
    token_data = data["tokens"]
    if len(token_data) != len(player.tokens):
        raise SnapshotError(f"player {player.index} has {len(token_data)} tokens")

    for token, saved in zip(player.tokens, token_data):
        if saved.get("id", token.id) != token.id:
            raise SnapshotError(f"unexpected token id {saved['id']!r}")
        token.state = TokenState(saved["state"])
        token.track_index = int(saved["track_index"])
        token.home_path_index = int(saved["home_path_index"])
        token.total_steps = int(saved.get("total_steps", 0))
        _check_token(token)
        if "position" in saved and _position(saved["position"]) != token.position:
            raise SnapshotError(f"{token.id} position does not match its indices")

    player.finished_tokens = int(data["finished_tokens"])
    if player.finished_tokens != len(player.get_finished_tokens()):
        raise SnapshotError(f"player {player.index} finished count is inconsistent")
    player.captures = int(data.get("captures", 0))
    player.total_moves = int(data.get("total_moves", 0))
    player.sixes_rolled = int(data.get("sixes_rolled", 0))
    return player


def _check_token(token: Token) -> None:
    on_track = token.track_index >= 0
    on_home = token.home_path_index >= 0
    if token.state is not TokenState.ACTIVE:
        if on_track or on_home:
            raise SnapshotError(f"{token.id} is {token.state.value} but has a location")
        return
    if on_track == on_home:
        raise SnapshotError(f"{token.id} must be on exactly one path")
    if token.track_index >= Board.TRACK_LENGTH:
        raise SnapshotError(f"{token.id} track index out of range")
    if token.home_path_index >= Board.finish_index():
        raise SnapshotError(f"{token.id} home stretch index out of range")


def restore(
    data: Dict[str, Any],
    config: Optional[Config] = None,
    resume_turn: bool = True,
) -> GameState:
    """Rebuild a game from a snapshot.

    With resume_turn=False the turn restarts at the roll: the current player
    is kept but the dice and any pending selection are dropped.
    """
    if data.get("version", SNAPSHOT_VERSION) != SNAPSHOT_VERSION:
        raise SnapshotError(f"unsupported snapshot version {data.get('version')}")
    try:
        players = [_restore_player(p, config) for p in data["players"]]
        for expected, player in enumerate(players):
            if player.index != expected:
                raise SnapshotError("players are out of seat order")

        state = GameState(players, mode=data.get("mode", "local"), config=config)
        state.phase = GamePhase(data["phase"])
        state.is_paused = state.phase is GamePhase.PAUSED
        state.turn_number = int(data.get("turn_number", 0))
        winner_index = data.get("winner_index")
        state.winner = players[winner_index] if winner_index is not None else None

        turn = TurnState(current_player_index=int(data["current_player_index"]))
        if not 0 <= turn.current_player_index < len(players):
            raise SnapshotError("current player index out of range")
        turn.consecutive_sixes = int(data.get("consecutive_sixes", 0))
        turn.rolls_this_turn = int(data.get("rolls_this_turn", 0))
        if resume_turn:
            turn.phase = TurnPhase(data["turn_phase"])
            turn.dice_value = data.get("dice_value")
        state.turn = turn
    except SnapshotError:
        raise
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise SnapshotError(f"corrupt snapshot: {exc}") from exc

    if resume_turn and turn.phase is TurnPhase.SELECTING and turn.dice_value:
        # Legal moves are a pure function of the board and the roll
        turn.valid_moves = Rules(state.config).get_valid_moves(
            state.current_player, turn.dice_value, state.players
        )
    elif not resume_turn:
        turn.phase = TurnPhase.COMPLETE if state.is_over else TurnPhase.WAITING
    return state


def dumps(state: GameState, **kwargs) -> str:
    return json.dumps(snapshot(state), **kwargs)


def loads(text: str, config: Optional[Config] = None, resume_turn: bool = True) -> GameState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc
    return restore(data, config=config, resume_turn=resume_turn)


def save_game(state: GameState, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(dumps(state, indent=2), encoding="utf-8")
    logger.info(f"game saved to {path}")
    return path


def load_game(
    path: Union[str, Path], config: Optional[Config] = None, resume_turn: bool = False
) -> GameState:
    path = Path(path)
    state = loads(path.read_text(encoding="utf-8"), config=config, resume_turn=resume_turn)
    logger.info(f"game loaded from {path}")
    return state


# ===== Relay actions =====


@dataclass(frozen=True, slots=True)
class DiceRollAction:
    player_index: int
    value: int
    consecutive_sixes: int

    type: ClassVar[str] = "DICE_ROLL"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": {
                "player_index": self.player_index,
                "value": self.value,
                "consecutive_sixes": self.consecutive_sixes,
            },
        }


@dataclass(frozen=True, slots=True)
class MoveAction:
    player_index: int
    token_id: str
    move: Dict[str, Any] = field(default_factory=dict)

    type: ClassVar[str] = "TOKEN_SELECT"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": {
                "player_index": self.player_index,
                "token_id": self.token_id,
                "move": self.move,
            },
        }


@dataclass(frozen=True, slots=True)
class TurnEndAction:
    player_index: int
    next_player_index: int

    type: ClassVar[str] = "TURN_END"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": {
                "player_index": self.player_index,
                "next_player_index": self.next_player_index,
            },
        }


RelayAction = Union[DiceRollAction, MoveAction, TurnEndAction]


def move_to_payload(move: Move) -> Dict[str, Any]:
    return {
        "token_id": move.token_id,
        "type": move.kind.value,
        "dice_value": move.dice_value,
        "from_position": move.from_position.to_dict() if move.from_position else None,
        "to_position": move.to_position.to_dict() if move.to_position else None,
        "from_track_index": move.from_track_index,
        "to_track_index": move.to_track_index,
        "from_home_path_index": move.from_home_path_index,
        "to_home_path_index": move.to_home_path_index,
        "enters_home_path": move.enters_home_path,
        "path": [p.to_dict() for p in move.path],
        "captured_token_id": move.captured.id if isinstance(move, CaptureMove) else None,
    }


def move_action(move: Move) -> MoveAction:
    return MoveAction(move.player_index, move.token_id, move_to_payload(move))


def move_from_payload(state: GameState, payload: Dict[str, Any]) -> Move:
    """Rebuild a Move against this game's tokens without re-running enumeration."""
    try:
        token = state.get_token(payload["token_id"])
        if token is None:
            raise ActionPayloadError(f"unknown token {payload['token_id']!r}")
        kind = MoveKind(payload["type"])
        dice_value = int(payload["dice_value"])
        to_position = _position(payload.get("to_position"))

        if kind is MoveKind.UNLOCK:
            return UnlockMove(
                token=token,
                dice_value=dice_value,
                to_position=to_position,
                to_track_index=int(payload["to_track_index"]),
            )

        fields = dict(
            token=token,
            dice_value=dice_value,
            from_position=_position(payload.get("from_position")),
            to_position=to_position,
            from_track_index=int(payload["from_track_index"]),
            to_track_index=int(payload["to_track_index"]),
            from_home_path_index=int(payload["from_home_path_index"]),
            to_home_path_index=int(payload["to_home_path_index"]),
            path=tuple(_position(p) for p in payload.get("path", [])),
            enters_home_path=bool(payload.get("enters_home_path", False)),
        )
        if kind is MoveKind.FINISH:
            return FinishMove(**fields)
        if kind is MoveKind.CAPTURE:
            captured = state.get_token(payload.get("captured_token_id") or "")
            if captured is None:
                raise ActionPayloadError("capture payload names no known victim")
            return CaptureMove(captured=captured, **fields)
        return AdvanceMove(**fields)
    except ActionPayloadError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise ActionPayloadError(f"malformed move payload: {exc}") from exc


def action_from_dict(data: Dict[str, Any]) -> RelayAction:
    try:
        action_type = data["type"]
        payload = data["payload"]
        if action_type == DiceRollAction.type:
            return DiceRollAction(
                int(payload["player_index"]),
                int(payload["value"]),
                int(payload.get("consecutive_sixes", 0)),
            )
        if action_type == MoveAction.type:
            return MoveAction(
                int(payload["player_index"]),
                str(payload["token_id"]),
                dict(payload["move"]),
            )
        if action_type == TurnEndAction.type:
            return TurnEndAction(
                int(payload["player_index"]), int(payload["next_player_index"])
            )
    except (KeyError, TypeError, ValueError) as exc:
        raise ActionPayloadError(f"malformed action: {exc}") from exc
    raise ActionPayloadError(f"unknown action type {data.get('type')!r}")
