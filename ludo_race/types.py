from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional, Tuple, Union

from .board import Position
from .constants import Difficulty

if TYPE_CHECKING:
    from .token import Token

__all__ = [
    "Difficulty",
    "MoveKind",
    "UnlockMove",
    "AdvanceMove",
    "CaptureMove",
    "FinishMove",
    "Move",
    "MoveResult",
    "ActionResult",
    "MoveRecord",
    "TurnPhase",
    "GamePhase",
]


class MoveKind(Enum):
    UNLOCK = "unlock"
    MOVE = "move"
    CAPTURE = "capture"
    FINISH = "finish"


class TurnPhase(Enum):
    WAITING = "WAITING"
    ROLLING = "ROLLING"
    SELECTING = "SELECTING"
    MOVING = "MOVING"
    COMPLETE = "COMPLETE"


class GamePhase(Enum):
    MENU = "MENU"
    SETUP = "SETUP"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"


@dataclass(frozen=True, slots=True)
class UnlockMove:
    token: Token
    dice_value: int
    to_position: Position
    to_track_index: int

    kind: ClassVar[MoveKind] = MoveKind.UNLOCK

    @property
    def token_id(self) -> str:
        return self.token.id

    @property
    def player_index(self) -> int:
        return self.token.player_index

    @property
    def from_position(self) -> Optional[Position]:
        return None

    @property
    def from_track_index(self) -> int:
        return -1

    @property
    def from_home_path_index(self) -> int:
        return -1

    @property
    def to_home_path_index(self) -> int:
        return -1

    @property
    def path(self) -> Tuple[Position, ...]:
        return (self.to_position,)

    @property
    def enters_home_path(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class _TravelMove:
    token: Token
    dice_value: int
    from_position: Position
    to_position: Position
    from_track_index: int
    to_track_index: int
    from_home_path_index: int
    to_home_path_index: int
    path: Tuple[Position, ...]
    enters_home_path: bool

    @property
    def token_id(self) -> str:
        return self.token.id

    @property
    def player_index(self) -> int:
        return self.token.player_index


@dataclass(frozen=True, slots=True)
class AdvanceMove(_TravelMove):
    kind: ClassVar[MoveKind] = MoveKind.MOVE


@dataclass(frozen=True, slots=True)
class FinishMove(_TravelMove):
    kind: ClassVar[MoveKind] = MoveKind.FINISH


@dataclass(frozen=True, slots=True)
class CaptureMove(_TravelMove):
    captured: Token

    kind: ClassVar[MoveKind] = MoveKind.CAPTURE


Move = Union[UnlockMove, AdvanceMove, CaptureMove, FinishMove]


@dataclass(slots=True)
class MoveResult:
    move: Move
    captured: Optional[Token] = None
    finished: bool = False
    extra_turn: bool = False
    new_position: Optional[Position] = None


@dataclass(slots=True)
class ActionResult:
    success: bool
    reason: Optional[str] = None
    dice_value: Optional[int] = None
    move_result: Optional[MoveResult] = None

    @classmethod
    def ok(
        cls, dice_value: Optional[int] = None, move_result: Optional[MoveResult] = None
    ) -> ActionResult:
        return cls(True, None, dice_value, move_result)

    @classmethod
    def reject(cls, reason: str) -> ActionResult:
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.success


@dataclass(frozen=True, slots=True)
class MoveRecord:
    turn_number: int
    player_index: int
    token_id: str
    kind: MoveKind
    dice_value: int
    from_position: Optional[Position]
    to_position: Optional[Position]
    captured_token_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "turn_number": self.turn_number,
            "player_index": self.player_index,
            "token_id": self.token_id,
            "kind": self.kind.value,
            "dice_value": self.dice_value,
            "from_position": self.from_position.to_dict()
            if self.from_position
            else None,
            "to_position": self.to_position.to_dict() if self.to_position else None,
            "captured_token_id": self.captured_token_id,
        }
