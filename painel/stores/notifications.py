import threading
from typing import Callable, Optional

from painel.core.config import settings
from painel.core.stream import StateStream
from painel.schemas.state import ToastMessage, ToastType


def _thread_timer(delay: float, callback: Callable[[], None]):
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class NotificationChannel:
    """
    Single-slot toast: each `show` replaces the pending message and arms its own
    clear. Only the clear armed by the latest `show` may blank the slot.
    """

    def __init__(self, timeout: Optional[float] = None, timer_factory=_thread_timer, lock: Optional[threading.RLock] = None):
        self._timeout = settings.TOAST_TIMEOUT_SECONDS if timeout is None else timeout
        self._timer_factory = timer_factory
        self._lock = lock or threading.RLock()
        self._generation = 0
        self._timer = None
        self.state: StateStream[Optional[ToastMessage]] = StateStream(None, self._lock)

    @property
    def current(self) -> Optional[ToastMessage]:
        return self.state.value

    def show(self, message: str, type: ToastType = ToastType.SUCCESS) -> None:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._timer is not None:
                self._timer.cancel()
            self.state.emit(ToastMessage(message=message, type=type))
            self._timer = self._timer_factory(self._timeout, lambda: self._clear(generation))

    def success(self, message: str) -> None:
        self.show(message, ToastType.SUCCESS)

    def error(self, message: str) -> None:
        self.show(message, ToastType.ERROR)

    def _clear(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            self.state.emit(None)
