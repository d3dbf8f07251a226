"""
Dice for the race board: a seedable six-sided die with roll history.
"""

import random
from collections import deque
from typing import Deque, Dict, List, Optional

import numpy as np
from loguru import logger

from .config import config


class Dice:
    """Single die. Values come from an injected RNG unless scripted."""

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        min_value: int = config.DICE_MIN,
        max_value: int = config.DICE_MAX,
    ):
        self.rng = rng or random.Random(seed)
        self.min_value = min_value
        self.max_value = max_value
        self.value: Optional[int] = None
        self.history: List[int] = []
        self._scripted: Deque[int] = deque()

    def roll(self) -> int:
        """Roll the die, consuming a scripted value first when one is queued."""
        if self._scripted:
            value = self._scripted.popleft()
        else:
            value = self.rng.randint(self.min_value, self.max_value)
        self.value = value
        self.history.append(value)
        logger.debug(f"rolled {value}")
        return value

    def force_value(self, value: int) -> bool:
        """Set the face directly; used by tests and when replaying a relayed roll."""
        if not self.is_valid_value(value):
            return False
        self.value = value
        self.history.append(value)
        return True

    def queue_rolls(self, *values: int) -> None:
        """Make the next rolls return these values in order."""
        for value in values:
            if not self.is_valid_value(value):
                raise ValueError(f"dice value out of range: {value}")
            self._scripted.append(value)

    def is_valid_value(self, value: int) -> bool:
        return isinstance(value, int) and self.min_value <= value <= self.max_value

    def last_rolls(self, count: int = 10) -> List[int]:
        return self.history[-count:]

    def stats(self) -> Dict:
        """Face counts, percentages and average over the roll history."""
        faces = range(self.min_value, self.max_value + 1)
        if not self.history:
            return {
                "total": 0,
                "counts": {face: 0 for face in faces},
                "percentages": {face: 0.0 for face in faces},
                "average": 0.0,
            }
        rolls = np.asarray(self.history, dtype=np.int64)
        counts = np.bincount(rolls, minlength=self.max_value + 1)
        total = int(rolls.size)
        return {
            "total": total,
            "counts": {face: int(counts[face]) for face in faces},
            "percentages": {
                face: round(float(counts[face]) / total * 100, 1) for face in faces
            },
            "average": round(float(rolls.mean()), 2),
        }

    def reset(self) -> None:
        """Clear the current face between turns."""
        self.value = None

    def clear_history(self) -> None:
        self.history.clear()
