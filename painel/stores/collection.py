import logging
import threading
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from painel.core.errors import AuthRequiredError
from painel.core.stream import StateStream
from painel.schemas.state import DataState, DataStatus, SessionState, SessionStatus
from painel.stores.session import SessionStore, describe_error

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=BaseModel)


class CollectionStore(Generic[ItemT]):
    """
    Keeps one live listener on the signed-in user's partition of a collection
    and republishes it as a `DataState`.

    The listener is torn down and replaced whenever the session user changes;
    re-delivery of the same user id leaves it untouched.
    """

    collection: str = ""
    item_model: Type[ItemT]

    def __init__(self, documents, session: SessionStore, lock: Optional[threading.RLock] = None):
        self._documents = documents
        self._session = session
        self._lock = lock or threading.RLock()
        self._current_uid: Optional[str] = None
        self._stop_listener: Optional[Callable[[], None]] = None
        self.state: StateStream[DataState[List[ItemT]]] = StateStream(
            DataState[List[self.item_model]].loading([]), self._lock
        )
        self._unsubscribe_session = session.subscribe(self._on_session)

    @property
    def current(self) -> DataState[List[ItemT]]:
        return self.state.value

    def subscribe(self, callback) -> Callable[[], None]:
        return self.state.subscribe(callback)

    def snapshot(self) -> List[ItemT]:
        return list(self.state.value.data)

    def close(self) -> None:
        with self._lock:
            self._unsubscribe_session()
            self._stop()

    def _require_uid(self) -> str:
        uid = self._session.current_uid()
        if not uid:
            raise AuthRequiredError()
        return uid

    def _on_session(self, session: SessionState) -> None:
        with self._lock:
            if session.status == SessionStatus.LOADING:
                self._emit(DataStatus.LOADING, self.state.value.data)
                return

            if session.status == SessionStatus.ERROR:
                self._stop()
                self._emit(DataStatus.ERROR, [], session.error or "Erro de autenticação.")
                return

            uid = session.user.uid if session.user is not None else None
            if not uid:
                self._stop()
                self._emit(DataStatus.READY, [])
                return

            if uid == self._current_uid:
                return

            self._stop()
            self._current_uid = uid
            self._emit(DataStatus.LOADING, [])
            self._start(uid)

    def _start(self, uid: str) -> None:
        def on_next(docs: List[Dict[str, Any]]) -> None:
            with self._lock:
                if uid != self._current_uid:
                    return
                items = [self.item_model.model_validate(doc) for doc in docs]
                self._emit(DataStatus.READY, items)

        def on_error(exc: Exception) -> None:
            logger.error("Listener for %s failed: %s", self.collection, exc)
            with self._lock:
                if uid != self._current_uid:
                    return
                self._stop_listener = None
                self._emit(DataStatus.ERROR, [], describe_error(exc))

        self._stop_listener = self._documents.listen(uid, self.collection, on_next, on_error)

    def _stop(self) -> None:
        if self._stop_listener is not None:
            self._stop_listener()
            self._stop_listener = None
        self._current_uid = None

    def _emit(self, status: DataStatus, data: List[ItemT], error: Optional[str] = None) -> None:
        self.state.emit(
            DataState[List[self.item_model]](status=status, data=list(data), error=error)
        )
