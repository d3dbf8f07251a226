"""
Player representation: a seat, its four tokens and running statistics.
"""

from typing import Dict, List, Optional

from .config import Config, config as default_config
from .constants import Difficulty, PlayerColor
from .token import Token, TokenState


class Player:
    """Represents a player in the game."""

    def __init__(
        self,
        index: int,
        name: Optional[str] = None,
        is_ai: bool = False,
        ai_difficulty: Difficulty = Difficulty.MEDIUM,
        config: Optional[Config] = None,
    ):
        self.config = config or default_config
        self.index = index
        self.color = PlayerColor.from_index(index)
        self.name = name or f"Player {index + 1}"
        self.is_ai = is_ai
        self.ai_difficulty = ai_difficulty

        self.tokens: List[Token] = [
            Token(player_index=index, slot=slot)
            for slot in range(self.config.TOKENS_PER_PLAYER)
        ]

        # Running count of tokens that reached the finish
        self.finished_tokens = 0

        # Statistics
        self.captures = 0
        self.total_moves = 0
        self.sixes_rolled = 0

    def get_token(self, slot: int) -> Optional[Token]:
        if 0 <= slot < len(self.tokens):
            return self.tokens[slot]
        return None

    def get_token_by_id(self, token_id: str) -> Optional[Token]:
        for token in self.tokens:
            if token.id == token_id:
                return token
        return None

    def get_home_tokens(self) -> List[Token]:
        return [t for t in self.tokens if t.state is TokenState.HOME]

    def get_active_tokens(self) -> List[Token]:
        return [t for t in self.tokens if t.state is TokenState.ACTIVE]

    def get_finished_tokens(self) -> List[Token]:
        return [t for t in self.tokens if t.state is TokenState.FINISHED]

    def has_tokens_in_home(self) -> bool:
        return any(t.is_at_home() for t in self.tokens)

    def has_active_tokens(self) -> bool:
        return any(t.is_active() for t in self.tokens)

    def can_move(self, dice_value: int) -> bool:
        """Whether any token could use this roll."""
        for token in self.tokens:
            if token.is_at_home() and dice_value == self.config.UNLOCK_VALUE:
                return True
            if token.is_active() and token.calculate_move(dice_value).valid:
                return True
        return False

    def has_won(self) -> bool:
        return self.finished_tokens >= self.config.TOKENS_PER_PLAYER

    def record_capture(self) -> None:
        self.captures += 1

    def record_six(self) -> None:
        self.sixes_rolled += 1

    def record_move(self) -> None:
        self.total_moves += 1

    def overall_progress(self) -> float:
        """Average token progress across all four tokens."""
        return sum(t.progress() for t in self.tokens) / len(self.tokens)

    def clone(self) -> "Player":
        copy = Player(
            self.index, self.name, self.is_ai, self.ai_difficulty, self.config
        )
        copy.tokens = [t.clone() for t in self.tokens]
        copy.finished_tokens = self.finished_tokens
        copy.captures = self.captures
        copy.total_moves = self.total_moves
        copy.sixes_rolled = self.sixes_rolled
        return copy

    def to_dict(self) -> Dict:
        return {
            "index": self.index,
            "color": self.color.value,
            "name": self.name,
            "is_ai": self.is_ai,
            "ai_difficulty": self.ai_difficulty.value,
            "finished_tokens": self.finished_tokens,
            "captures": self.captures,
            "total_moves": self.total_moves,
            "sixes_rolled": self.sixes_rolled,
            "tokens": [t.to_dict() for t in self.tokens],
        }

    def __str__(self) -> str:
        return (
            f"Player({self.name}, {self.color.value}, "
            f"finished={self.finished_tokens}/{len(self.tokens)})"
        )
