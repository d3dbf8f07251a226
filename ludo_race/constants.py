"""
Constants for the race-board engine.
Board geometry tables, player ordering and the core game numbers.
"""

from enum import Enum
from typing import Dict, List, Tuple

Cell = Tuple[int, int]


class PlayerColor(Enum):
    """Seat colours in clockwise turn order."""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"

    @classmethod
    def from_index(cls, index: int) -> "PlayerColor":
        return PLAYER_ORDER[index]

    @property
    def index(self) -> int:
        return PLAYER_ORDER.index(self)


PLAYER_ORDER: List[PlayerColor] = [
    PlayerColor.RED,
    PlayerColor.GREEN,
    PlayerColor.YELLOW,
    PlayerColor.BLUE,
]


class Difficulty(Enum):
    """Computer-player skill tiers."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def from_name(cls, name: "str | Difficulty") -> "Difficulty":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown difficulty: {name!r}") from None


class GameConstants:
    """Core game constants and rules."""

    BOARD_SIZE = 15
    TRACK_LENGTH = 52
    HOME_STRETCH_LENGTH = 6
    TOKENS_PER_PLAYER = 4
    MIN_PLAYERS = 2
    MAX_PLAYERS = 4

    # Dice
    DICE_MIN = 1
    DICE_MAX = 6
    UNLOCK_VALUE = 6
    MAX_CONSECUTIVE_SIXES = 3

    # Sentinel for "not on this path"
    OFF_PATH = -1


class BoardConstants:
    """Board layout tables on the 15x15 grid, cells as (row, col)."""

    # Clockwise from red's entry cell
    MAIN_TRACK: List[Cell] = [
        # Red side, heading up
        (6, 1), (6, 2), (6, 3), (6, 4), (6, 5),
        (5, 6), (4, 6), (3, 6), (2, 6), (1, 6),
        # Top row, heading right
        (0, 6), (0, 7), (0, 8),
        (1, 8), (2, 8), (3, 8), (4, 8), (5, 8),
        (6, 9), (6, 10), (6, 11), (6, 12), (6, 13),
        # Right column, heading down
        (6, 14), (7, 14), (8, 14),
        (8, 13), (8, 12), (8, 11), (8, 10), (8, 9),
        (9, 8), (10, 8), (11, 8), (12, 8), (13, 8),
        # Bottom row, heading left
        (14, 8), (14, 7), (14, 6),
        (13, 6), (12, 6), (11, 6), (10, 6), (9, 6),
        (8, 5), (8, 4), (8, 3), (8, 2), (8, 1),
        # Left column, back up to red's entry
        (8, 0), (7, 0), (6, 0),
    ]  # fmt: skip

    TRACK_ENTRY_INDICES: Dict[PlayerColor, int] = {
        PlayerColor.RED: 0,
        PlayerColor.GREEN: 13,
        PlayerColor.YELLOW: 26,
        PlayerColor.BLUE: 39,
    }

    # Last shared-track cell before each colour turns into its home stretch
    LAP_COMPLETION_INDICES: Dict[PlayerColor, int] = {
        PlayerColor.RED: 51,
        PlayerColor.GREEN: 12,
        PlayerColor.YELLOW: 25,
        PlayerColor.BLUE: 38,
    }

    # Final cell of each stretch is the finish
    HOME_PATHS: Dict[PlayerColor, List[Cell]] = {
        PlayerColor.RED: [(7, 1), (7, 2), (7, 3), (7, 4), (7, 5), (7, 6)],
        PlayerColor.GREEN: [(1, 7), (2, 7), (3, 7), (4, 7), (5, 7), (6, 7)],
        PlayerColor.YELLOW: [(7, 13), (7, 12), (7, 11), (7, 10), (7, 9), (7, 8)],
        PlayerColor.BLUE: [(13, 7), (12, 7), (11, 7), (10, 7), (9, 7), (8, 7)],
    }

    HOME_BASES: Dict[PlayerColor, List[Cell]] = {
        PlayerColor.RED: [(2, 2), (2, 4), (4, 2), (4, 4)],
        PlayerColor.GREEN: [(2, 10), (2, 12), (4, 10), (4, 12)],
        PlayerColor.YELLOW: [(10, 10), (10, 12), (12, 10), (12, 12)],
        PlayerColor.BLUE: [(10, 2), (10, 4), (12, 2), (12, 4)],
    }

    SAFE_ZONE_INDICES: List[int] = [2, 15, 28, 41]

    # Centre square bounds (inclusive)
    CENTER_MIN = 6
    CENTER_MAX = 8
