"""
Four-player race-board engine: board geometry, rules, a turn state machine
and computer opponents at three difficulty levels.
"""

from .board import Board, Position
from .constants import Difficulty, PlayerColor
from .dice import Dice
from .events import EventBus, GameEvent, Notification, NotificationQueue
from .game import GameState, PlayerSpec
from .player import Player
from .rules import Rules
from .token import Token, TokenState
from .turn_manager import Pacing, TurnManager
from .types import (
    ActionResult,
    AdvanceMove,
    CaptureMove,
    FinishMove,
    GamePhase,
    Move,
    MoveKind,
    MoveResult,
    TurnPhase,
    UnlockMove,
)

__all__ = [
    "Board",
    "Position",
    "Difficulty",
    "PlayerColor",
    "Dice",
    "EventBus",
    "GameEvent",
    "Notification",
    "NotificationQueue",
    "GameState",
    "PlayerSpec",
    "Player",
    "Rules",
    "Token",
    "TokenState",
    "Pacing",
    "TurnManager",
    "ActionResult",
    "AdvanceMove",
    "CaptureMove",
    "FinishMove",
    "GamePhase",
    "Move",
    "MoveKind",
    "MoveResult",
    "TurnPhase",
    "UnlockMove",
]
