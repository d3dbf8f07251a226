"""
Board geometry for the race board.
Maps track indices, home stretches and home bases to grid cells and
classifies cells for renderers. Everything here is static and shared.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .constants import BoardConstants, GameConstants, PlayerColor
from .exceptions import GeometryError


@dataclass(frozen=True, slots=True)
class Position:
    """A cell on the 15x15 grid."""

    row: int
    col: int

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, int]]) -> Optional["Position"]:
        if data is None:
            return None
        return cls(int(data["row"]), int(data["col"]))

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


def _positions(cells: Iterable[Tuple[int, int]]) -> Tuple[Position, ...]:
    return tuple(Position(row, col) for row, col in cells)


_TRACK: Tuple[Position, ...] = _positions(BoardConstants.MAIN_TRACK)
_TRACK_LOOKUP: Dict[Position, int] = {pos: idx for idx, pos in enumerate(_TRACK)}
_HOME_PATHS: Dict[PlayerColor, Tuple[Position, ...]] = {
    color: _positions(cells) for color, cells in BoardConstants.HOME_PATHS.items()
}
_HOME_PATH_LOOKUP: Dict[Position, Tuple[PlayerColor, int]] = {
    pos: (color, idx)
    for color, path in _HOME_PATHS.items()
    for idx, pos in enumerate(path)
}
_HOME_BASES: Dict[PlayerColor, Tuple[Position, ...]] = {
    color: _positions(cells) for color, cells in BoardConstants.HOME_BASES.items()
}
_HOME_BASE_LOOKUP: Dict[Position, PlayerColor] = {
    pos: color for color, slots in _HOME_BASES.items() for pos in slots
}
_ENTRY_LOOKUP: Dict[Position, PlayerColor] = {
    _TRACK[idx]: color for color, idx in BoardConstants.TRACK_ENTRY_INDICES.items()
}
_SAFE_CELLS: FrozenSet[Position] = frozenset(
    _TRACK[idx] for idx in BoardConstants.SAFE_ZONE_INDICES
)


class Board:
    """Static lookups over the board tables."""

    SIZE = GameConstants.BOARD_SIZE
    TRACK_LENGTH = len(_TRACK)
    HOME_STRETCH_LENGTH = GameConstants.HOME_STRETCH_LENGTH

    @classmethod
    def track_position(cls, index: int) -> Position:
        """Cell of a shared-track index; the index wraps around the loop."""
        return _TRACK[index % cls.TRACK_LENGTH]

    @classmethod
    def track_positions(cls) -> Tuple[Position, ...]:
        return _TRACK

    @classmethod
    def track_index_of(cls, position: Optional[Position]) -> int:
        """Track index of a cell, or -1 when the cell is not on the shared track."""
        if position is None:
            return GameConstants.OFF_PATH
        return _TRACK_LOOKUP.get(position, GameConstants.OFF_PATH)

    @classmethod
    def home_path(cls, color: PlayerColor) -> Tuple[Position, ...]:
        return _HOME_PATHS[color]

    @classmethod
    def home_path_position(cls, color: PlayerColor, index: int) -> Position:
        path = _HOME_PATHS[color]
        if index < 0 or index >= len(path):
            raise GeometryError(
                f"home stretch index {index} out of range for {color.value}"
            )
        return path[index]

    @classmethod
    def finish_index(cls) -> int:
        return cls.HOME_STRETCH_LENGTH - 1

    @classmethod
    def home_base_position(cls, color: PlayerColor, slot: int) -> Position:
        slots = _HOME_BASES[color]
        if slot < 0 or slot >= len(slots):
            raise GeometryError(f"home base slot {slot} out of range for {color.value}")
        return slots[slot]

    @classmethod
    def entry_index(cls, color: PlayerColor) -> int:
        return BoardConstants.TRACK_ENTRY_INDICES[color]

    @classmethod
    def entry_position(cls, color: PlayerColor) -> Position:
        return _TRACK[cls.entry_index(color)]

    @classmethod
    def lap_completion_index(cls, color: PlayerColor) -> int:
        return BoardConstants.LAP_COMPLETION_INDICES[color]

    @classmethod
    def is_safe_cell(cls, position: Optional[Position]) -> bool:
        return position in _SAFE_CELLS

    @classmethod
    def safe_cells(cls) -> List[Position]:
        return [_TRACK[idx] for idx in BoardConstants.SAFE_ZONE_INDICES]

    @classmethod
    def entry_color_at(cls, position: Optional[Position]) -> Optional[PlayerColor]:
        """Colour whose entry cell this is, if any."""
        return _ENTRY_LOOKUP.get(position)

    @classmethod
    def is_entry_cell(cls, position: Optional[Position]) -> bool:
        return position in _ENTRY_LOOKUP

    @classmethod
    def home_path_at(
        cls, position: Optional[Position]
    ) -> Optional[Tuple[PlayerColor, int]]:
        """(colour, stretch index) when the cell belongs to a home stretch."""
        return _HOME_PATH_LOOKUP.get(position)

    @classmethod
    def track_distance(cls, from_index: int, to_index: int) -> int:
        """Forward distance along the loop from one track index to another."""
        if to_index >= from_index:
            return to_index - from_index
        return (cls.TRACK_LENGTH - from_index) + to_index

    @classmethod
    def is_path_clear(
        cls, from_index: int, steps: int, occupied: Iterable[Position] = ()
    ) -> bool:
        blocked = set(occupied)
        for step in range(1, steps + 1):
            if _TRACK[(from_index + step) % cls.TRACK_LENGTH] in blocked:
                return False
        return True

    @classmethod
    def cell_info(cls, row: int, col: int) -> Optional[Dict]:
        """Classify a grid cell; None when outside the grid."""
        if row < 0 or row >= cls.SIZE or col < 0 or col >= cls.SIZE:
            return None
        pos = Position(row, col)

        color = _HOME_BASE_LOOKUP.get(pos)
        if color is not None:
            return {"type": "home-base", "color": color.value}

        color = _ENTRY_LOOKUP.get(pos)
        if color is not None:
            return {"type": "entry-point", "color": color.value}

        home = _HOME_PATH_LOOKUP.get(pos)
        if home is not None:
            color, idx = home
            return {
                "type": "home-path",
                "color": color.value,
                "index": idx,
                "is_final": idx == cls.finish_index(),
            }

        track_idx = _TRACK_LOOKUP.get(pos)
        if track_idx is not None:
            return {
                "type": "track",
                "track_index": track_idx,
                "is_safe_zone": pos in _SAFE_CELLS,
            }

        lo, hi = BoardConstants.CENTER_MIN, BoardConstants.CENTER_MAX
        if lo <= row <= hi and lo <= col <= hi:
            return {"type": "center"}
        return {"type": "empty"}

    @classmethod
    def layout(cls) -> List[Dict]:
        """Every non-empty cell with its classification, row-major."""
        cells = []
        for row in range(cls.SIZE):
            for col in range(cls.SIZE):
                info = cls.cell_info(row, col)
                if info["type"] != "empty":
                    cells.append({"row": row, "col": col, **info})
        return cells
