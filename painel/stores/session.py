import logging
import threading
from typing import Callable, Optional

from painel.core.stream import StateStream
from painel.schemas.state import AuthUser, SessionState, SessionStatus

logger = logging.getLogger(__name__)


def describe_error(exc: Exception) -> str:
    message = getattr(exc, "message", None) or str(exc)
    return message or exc.__class__.__name__


class SessionStore:
    """
    Typed view over the auth provider's session stream.

    Starts in `loading` and moves to `authenticated`, `unauthenticated` or
    `error` as the provider calls back. Errors are not retried.
    """

    def __init__(self, provider, lock: Optional[threading.RLock] = None):
        self._provider = provider
        self._lock = lock or threading.RLock()
        self._resolved = threading.Event()
        self.state = StateStream(SessionState(), self._lock)
        self._unsubscribe: Optional[Callable[[], None]] = provider.on_auth_state_changed(
            self._on_user, self._on_error
        )

    @property
    def current(self) -> SessionState:
        return self.state.value

    def subscribe(self, callback: Callable[[SessionState], None]) -> Callable[[], None]:
        return self.state.subscribe(callback)

    def current_uid(self) -> Optional[str]:
        user = self.state.value.user
        if user is not None:
            return user.uid
        cached = getattr(self._provider, "current_user", None)
        return cached.uid if cached is not None else None

    def wait_until_resolved(self) -> SessionState:
        self._resolved.wait()
        return self.state.value

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_user(self, user: Optional[AuthUser]) -> None:
        if user is not None:
            next_state = SessionState(status=SessionStatus.AUTHENTICATED, user=user, error=None)
        else:
            next_state = SessionState(status=SessionStatus.UNAUTHENTICATED, user=None, error=None)
        self._publish(next_state)

    def _on_error(self, exc: Exception) -> None:
        logger.error("Auth state stream failed: %s", exc)
        self._publish(SessionState(status=SessionStatus.ERROR, user=None, error=describe_error(exc)))

    def _publish(self, next_state: SessionState) -> None:
        self.state.emit(next_state)
        self._resolved.set()
