import itertools
import threading
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class StateStream(Generic[T]):
    """
    Holds the latest value and replays it to every new subscriber.

    All emissions go through the shared update lock, so subscribers never see
    two updates interleaved.
    """

    def __init__(self, initial: T, lock: Optional[threading.RLock] = None):
        self._value = initial
        self._lock = lock or threading.RLock()
        self._subscribers: Dict[int, Callable[[T], None]] = {}
        self._ids = itertools.count(1)

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        token = next(self._ids)
        with self._lock:
            self._subscribers[token] = callback
            callback(self._value)

        def unsubscribe():
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def emit(self, value: T) -> None:
        with self._lock:
            self._value = value
            for callback in list(self._subscribers.values()):
                callback(value)
