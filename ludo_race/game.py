"""
Explicit game state shared by the turn manager, rules and AI.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from loguru import logger

from .config import Config, config as default_config
from .constants import Difficulty
from .player import Player
from .token import Token
from .types import GamePhase, Move, MoveRecord, TurnPhase


@dataclass(slots=True)
class PlayerSpec:
    name: Optional[str] = None
    is_ai: bool = False
    ai_difficulty: Difficulty = Difficulty.MEDIUM


@dataclass(slots=True)
class TurnState:
    phase: TurnPhase = TurnPhase.WAITING
    current_player_index: int = 0
    dice_value: Optional[int] = None
    consecutive_sixes: int = 0
    rolls_this_turn: int = 0
    valid_moves: List[Move] = field(default_factory=list)
    selected_token_id: Optional[str] = None

    def clear_roll(self) -> None:
        """Drop the current roll and selection; the same player rolls next."""
        self.phase = TurnPhase.WAITING
        self.dice_value = None
        self.valid_moves = []
        self.selected_token_id = None

    def advance(self, next_index: int) -> None:
        self.clear_roll()
        self.current_player_index = next_index
        self.consecutive_sixes = 0
        self.rolls_this_turn = 0


class GameState:
    """Players, phases and per-turn bookkeeping for one game."""

    def __init__(
        self,
        players: Sequence[Player] = (),
        mode: str = "local",
        config: Optional[Config] = None,
    ):
        self.config = config or default_config
        self.players: List[Player] = list(players)
        self.mode = mode
        self.is_online = mode == "online"
        self.phase = GamePhase.MENU if not self.players else GamePhase.SETUP
        self.turn = TurnState()
        self.turn_number = 0
        self.winner: Optional[Player] = None
        self.move_history: List[MoveRecord] = []
        self.is_paused = False

    @classmethod
    def new_game(
        cls,
        specs: Sequence[PlayerSpec],
        mode: str = "local",
        config: Optional[Config] = None,
    ) -> "GameState":
        cfg = config or default_config
        if not 2 <= len(specs) <= 4:
            raise ValueError("A game needs between 2 and 4 players")
        players = [
            Player(i, spec.name, spec.is_ai, spec.ai_difficulty, config=cfg)
            for i, spec in enumerate(specs)
        ]
        state = cls(players, mode=mode, config=cfg)
        state.phase = GamePhase.PLAYING
        logger.info(
            f"new {mode} game: " + ", ".join(p.name for p in state.players)
        )
        return state

    @property
    def current_player(self) -> Player:
        return self.players[self.turn.current_player_index]

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    def get_player(self, index: int) -> Optional[Player]:
        if 0 <= index < len(self.players):
            return self.players[index]
        return None

    def get_token(self, token_id: str) -> Optional[Token]:
        for player in self.players:
            token = player.get_token_by_id(token_id)
            if token is not None:
                return token
        return None

    def all_tokens(self) -> List[Token]:
        return [t for p in self.players for t in p.tokens]

    def active_tokens(self) -> List[Token]:
        return [t for t in self.all_tokens() if t.is_active()]

    def set_dice_value(self, value: int) -> None:
        """Record a fresh roll and update the run of sixes."""
        self.turn.dice_value = value
        self.turn.rolls_this_turn += 1
        if value == self.config.UNLOCK_VALUE:
            self.turn.consecutive_sixes += 1
        else:
            self.turn.consecutive_sixes = 0

    def next_turn(self) -> Player:
        next_index = (self.turn.current_player_index + 1) % len(self.players)
        self.turn.advance(next_index)
        self.turn_number += 1
        return self.current_player

    def set_winner(self, player: Player) -> None:
        self.winner = player
        self.phase = GamePhase.GAME_OVER
        self.turn.phase = TurnPhase.COMPLETE

    def pause(self) -> bool:
        if self.is_online or self.phase is not GamePhase.PLAYING:
            return False
        self.is_paused = True
        self.phase = GamePhase.PAUSED
        return True

    def resume(self) -> bool:
        if not self.is_paused:
            return False
        self.is_paused = False
        self.phase = GamePhase.PLAYING
        return True

    def record_move(self, record: MoveRecord) -> None:
        self.move_history.append(record)

    def rankings(self) -> List[Player]:
        """Players ordered by finished tokens, then overall progress."""
        return sorted(
            self.players,
            key=lambda p: (p.finished_tokens, p.overall_progress()),
            reverse=True,
        )
