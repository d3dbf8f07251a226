"""
Token model: one game piece, its location state and move arithmetic.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .board import Board, Position
from .config import config
from .constants import GameConstants, PlayerColor
from .exceptions import GeometryError

OFF_PATH = GameConstants.OFF_PATH


class TokenState(Enum):
    """Possible states of a game token."""

    HOME = "home"
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class MoveCalculation:
    """Outcome of walking a token a number of steps, without committing it."""

    valid: bool
    reason: Optional[str] = None
    new_track_index: int = OFF_PATH
    new_home_path_index: int = OFF_PATH
    new_position: Optional[Position] = None
    finished: bool = False
    enters_home_path: bool = False
    path: Tuple[Position, ...] = ()

    @classmethod
    def invalid(cls, reason: str) -> "MoveCalculation":
        return cls(valid=False, reason=reason)


@dataclass(slots=True, eq=False)
class Token:
    """
    A single piece. Exactly one location holds at a time: in the home base,
    on the shared track (track_index), on the home stretch (home_path_index)
    or finished.
    """

    player_index: int
    slot: int
    state: TokenState = TokenState.HOME
    track_index: int = OFF_PATH
    home_path_index: int = OFF_PATH
    total_steps: int = 0

    @property
    def color(self) -> PlayerColor:
        return PlayerColor.from_index(self.player_index)

    @property
    def id(self) -> str:
        return f"{self.color.value}_{self.slot}"

    @property
    def position(self) -> Optional[Position]:
        """Grid cell while on the board; None at home or once finished."""
        if self.state is not TokenState.ACTIVE:
            return None
        if self.home_path_index >= 0:
            return Board.home_path_position(self.color, self.home_path_index)
        return Board.track_position(self.track_index)

    @property
    def home_position(self) -> Position:
        return Board.home_base_position(self.color, self.slot)

    def is_at_home(self) -> bool:
        return self.state is TokenState.HOME

    def is_active(self) -> bool:
        return self.state is TokenState.ACTIVE

    def is_finished(self) -> bool:
        return self.state is TokenState.FINISHED

    def is_on_track(self) -> bool:
        return self.state is TokenState.ACTIVE and self.track_index >= 0

    def is_on_home_path(self) -> bool:
        return self.state is TokenState.ACTIVE and self.home_path_index >= 0

    def is_lap_eligible(self) -> bool:
        return self.total_steps >= config.LAP_ELIGIBILITY_STEPS

    def unlock(self) -> bool:
        """Place the token on its colour's entry cell. Only valid from home."""
        if self.state is not TokenState.HOME:
            return False
        self.state = TokenState.ACTIVE
        self.track_index = Board.entry_index(self.color)
        self.home_path_index = OFF_PATH
        self.total_steps = 0
        logger.debug(f"{self.id} unlocked at track {self.track_index}")
        return True

    def _distance_to_lap_completion(self) -> int:
        return Board.track_distance(
            self.track_index, Board.lap_completion_index(self.color)
        )

    def calculate_move(self, steps: int) -> MoveCalculation:
        """Where `steps` would take this token, or why it cannot go there."""
        if self.state is not TokenState.ACTIVE:
            return MoveCalculation.invalid("Token not active")
        if steps <= 0:
            return MoveCalculation.invalid("Invalid step count")

        home_path = Board.home_path(self.color)
        finish = len(home_path) - 1

        if self.home_path_index >= 0:
            new_index = self.home_path_index + steps
            if new_index > finish:
                return MoveCalculation.invalid("Overshoots home")
            return MoveCalculation(
                valid=True,
                new_home_path_index=new_index,
                new_position=home_path[new_index],
                finished=new_index == finish,
                path=self.path_positions(steps),
            )

        distance = self._distance_to_lap_completion()
        if self.is_lap_eligible() and steps > distance:
            new_index = steps - distance - 1
            if new_index > finish:
                return MoveCalculation.invalid("Overshoots home")
            return MoveCalculation(
                valid=True,
                new_home_path_index=new_index,
                new_position=home_path[new_index],
                finished=new_index == finish,
                enters_home_path=True,
                path=self.path_positions(steps),
            )

        new_track = (self.track_index + steps) % Board.TRACK_LENGTH
        return MoveCalculation(
            valid=True,
            new_track_index=new_track,
            new_position=Board.track_position(new_track),
            path=self.path_positions(steps),
        )

    def path_positions(self, steps: int) -> Tuple[Position, ...]:
        """Cells visited one step at a time, ending on the destination."""
        if self.state is not TokenState.ACTIVE:
            return ()
        home_path = Board.home_path(self.color)
        cells: List[Position] = []

        if self.home_path_index >= 0:
            for step in range(1, steps + 1):
                idx = self.home_path_index + step
                if idx >= len(home_path):
                    break
                cells.append(home_path[idx])
            return tuple(cells)

        eligible = self.is_lap_eligible()
        distance = self._distance_to_lap_completion()
        for step in range(1, steps + 1):
            if eligible and step > distance:
                idx = step - distance - 1
                if idx >= len(home_path):
                    break
                cells.append(home_path[idx])
            else:
                cells.append(Board.track_position(self.track_index + step))
        return tuple(cells)

    def move(self, steps: int) -> MoveCalculation:
        """Calculate and commit a move of `steps`; invalid moves change nothing."""
        result = self.calculate_move(steps)
        if result.valid:
            self.apply_destination(
                result.new_track_index,
                result.new_home_path_index,
                steps,
                finished=result.finished,
            )
        return result

    def apply_destination(
        self,
        track_index: int,
        home_path_index: int,
        steps: int,
        finished: bool = False,
    ) -> None:
        """Commit an already-computed destination to this token."""
        if self.state is not TokenState.ACTIVE:
            raise GeometryError(f"{self.id} is not on the board")

        if finished:
            self.state = TokenState.FINISHED
            self.track_index = OFF_PATH
            self.home_path_index = OFF_PATH
            self.total_steps += steps
            logger.debug(f"{self.id} finished")
            return

        on_track = 0 <= track_index < Board.TRACK_LENGTH
        on_home = 0 <= home_path_index < Board.finish_index()
        if on_track == on_home:
            raise GeometryError(
                f"{self.id}: invalid destination track={track_index} "
                f"home_path={home_path_index}"
            )
        self.track_index = track_index if on_track else OFF_PATH
        self.home_path_index = home_path_index if on_home else OFF_PATH
        self.total_steps += steps

    def send_home(self) -> None:
        """Return a captured token to its home base, forgetting its progress."""
        self.state = TokenState.HOME
        self.track_index = OFF_PATH
        self.home_path_index = OFF_PATH
        self.total_steps = 0

    def progress(self) -> float:
        """Fraction of the journey covered, 0 at home and 1 once finished."""
        if self.state is TokenState.HOME:
            return 0.0
        if self.state is TokenState.FINISHED:
            return 1.0
        span = Board.TRACK_LENGTH + Board.HOME_STRETCH_LENGTH
        if self.home_path_index >= 0:
            return min((Board.TRACK_LENGTH + self.home_path_index) / span, 0.99)
        return min(self.total_steps / span, 0.99)

    def clone(self) -> "Token":
        return Token(
            player_index=self.player_index,
            slot=self.slot,
            state=self.state,
            track_index=self.track_index,
            home_path_index=self.home_path_index,
            total_steps=self.total_steps,
        )

    def to_dict(self) -> Dict:
        position = self.position
        return {
            "id": self.id,
            "player_index": self.player_index,
            "slot": self.slot,
            "color": self.color.value,
            "state": self.state.value,
            "position": position.to_dict() if position else None,
            "track_index": self.track_index,
            "home_path_index": self.home_path_index,
            "total_steps": self.total_steps,
        }

    def __str__(self) -> str:
        return (
            f"Token({self.id}, state={self.state.value}, "
            f"track={self.track_index}, home_path={self.home_path_index})"
        )
