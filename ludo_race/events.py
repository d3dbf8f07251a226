"""
Outbound notifications for renderers, audio, network relays and logging.
Every notification has a type and a payload; observers subscribe by type
or to everything.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional


class GameEvent(str, Enum):
    GAME_STARTED = "game:start"
    GAME_WON = "game:won"
    GAME_PAUSED = "game:pause"
    GAME_RESUMED = "game:resume"

    TURN_STARTED = "turn:start"
    TURN_ENDED = "turn:end"
    TURN_SKIPPED = "turn:skip"
    TURN_FORFEITED = "turn:forfeit"
    EXTRA_TURN = "turn:extra"
    NO_VALID_MOVES = "turn:no-moves"

    DICE_ROLLED = "dice:rolled"
    VALID_MOVES = "moves:valid"
    SELECTION_REJECTED = "moves:rejected"

    MOVE_STARTED = "move:start"
    MOVE_COMPLETED = "move:complete"
    TOKEN_UNLOCKED = "token:unlock"
    TOKEN_CAPTURED = "token:capture"
    TOKEN_FINISHED = "token:finish"


@dataclass(frozen=True, slots=True)
class Notification:
    type: GameEvent
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "payload": self.payload}


Observer = Callable[[Notification], None]


class EventBus:
    """Synchronous publish/subscribe; observer errors propagate to the publisher."""

    def __init__(self):
        self._observers: Dict[GameEvent, List[Observer]] = defaultdict(list)
        self._catch_all: List[Observer] = []

    def subscribe(
        self, event: Optional[GameEvent], observer: Observer
    ) -> Callable[[], None]:
        """Register an observer for one event type, or all of them with None.

        Returns a callable that removes the subscription.
        """
        bucket = self._catch_all if event is None else self._observers[event]
        bucket.append(observer)

        def unsubscribe() -> None:
            if observer in bucket:
                bucket.remove(observer)

        return unsubscribe

    def once(self, event: GameEvent, observer: Observer) -> Callable[[], None]:
        def wrapper(notification: Notification) -> None:
            unsubscribe()
            observer(notification)

        unsubscribe = self.subscribe(event, wrapper)
        return unsubscribe

    def publish(self, event: GameEvent, **payload: Any) -> Notification:
        notification = Notification(event, payload)
        # Copy so observers may unsubscribe while being notified
        for observer in list(self._observers.get(event, ())):
            observer(notification)
        for observer in list(self._catch_all):
            observer(notification)
        return notification

    def clear(self, event: Optional[GameEvent] = None) -> None:
        if event is None:
            self._observers.clear()
            self._catch_all.clear()
        else:
            self._observers.pop(event, None)


class NotificationQueue:
    """Outbound channel that keeps notifications in publish order until drained."""

    def __init__(self, bus: Optional[EventBus] = None, maxlen: Optional[int] = None):
        self._items: Deque[Notification] = deque(maxlen=maxlen)
        self._unsubscribe = bus.subscribe(None, self.push) if bus else None

    def push(self, notification: Notification) -> None:
        self._items.append(notification)

    def drain(self) -> List[Notification]:
        items = list(self._items)
        self._items.clear()
        return items

    def types(self) -> List[GameEvent]:
        return [n.type for n in self._items]

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Notification]:
        return iter(self._items)
