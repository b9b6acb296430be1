import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from painel.core.errors import BackendError, DocumentNotFoundError
from painel.models.documents import ChamadoDocument, ClienteDocument, utcnow

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


# Placeholder resolved to the commit instant by the store, never by the caller.
SERVER_TIMESTAMP = _ServerTimestamp()

COLLECTIONS = {
    "chamados": ChamadoDocument,
    "clientes": ClienteDocument,
}

Snapshot = List[Dict[str, Any]]
OnNext = Callable[[Snapshot], None]
OnError = Callable[[Exception], None]


class DocumentStore:
    """
    Per-user document collections with push-based listeners.

    Every committed write re-reads the affected partition and delivers the full
    snapshot to each live listener of that partition. Listeners also receive
    the current snapshot as soon as they are registered.
    """

    def __init__(self, session_factory, dispatch_lock: Optional[threading.RLock] = None):
        self._session_factory = session_factory
        self._lock = dispatch_lock or threading.RLock()
        self._listeners: Dict[Tuple[str, str], Dict[int, Tuple[OnNext, OnError]]] = {}
        self._ids = itertools.count(1)

    def listen(self, uid: str, collection: str, on_next: OnNext, on_error: OnError) -> Callable[[], None]:
        model = self._model(collection)
        key = (uid, collection)
        token = next(self._ids)

        with self._lock:
            self._listeners.setdefault(key, {})[token] = (on_next, on_error)
            try:
                docs = self._read(uid, model)
            except SQLAlchemyError as exc:
                logger.error("Snapshot read failed for %s/%s: %s", uid, collection, exc)
                self._listeners[key].pop(token, None)
                on_error(exc)
            else:
                on_next(docs)

        def unsubscribe():
            with self._lock:
                listeners = self._listeners.get(key)
                if listeners is not None:
                    listeners.pop(token, None)
                    if not listeners:
                        del self._listeners[key]

        return unsubscribe

    def listener_count(self, uid: str, collection: str) -> int:
        with self._lock:
            return len(self._listeners.get((uid, collection), {}))

    def add(self, uid: str, collection: str, payload: Dict[str, Any]) -> str:
        model = self._model(collection)
        fields = self._resolve(model, payload)
        db = self._session_factory()
        try:
            doc = model(user_id=uid, **fields)
            db.add(doc)
            db.commit()
            doc_id = doc.id
        except SQLAlchemyError as exc:
            db.rollback()
            raise BackendError(str(exc)) from exc
        finally:
            db.close()

        logger.debug("Created %s/%s/%s", uid, collection, doc_id)
        self._notify(uid, collection)
        return doc_id

    def update(self, uid: str, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        model = self._model(collection)
        resolved = self._resolve(model, fields)
        db = self._session_factory()
        try:
            doc = db.query(model).filter(model.id == doc_id, model.user_id == uid).first()
            if doc is None:
                raise DocumentNotFoundError(collection, doc_id)
            for name, value in resolved.items():
                setattr(doc, name, value)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise BackendError(str(exc)) from exc
        finally:
            db.close()

        self._notify(uid, collection)

    def delete(self, uid: str, collection: str, doc_id: str) -> None:
        model = self._model(collection)
        db = self._session_factory()
        try:
            doc = db.query(model).filter(model.id == doc_id, model.user_id == uid).first()
            if doc is None:
                raise DocumentNotFoundError(collection, doc_id)
            db.delete(doc)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise BackendError(str(exc)) from exc
        finally:
            db.close()

        self._notify(uid, collection)

    def get(self, uid: str, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        model = self._model(collection)
        db = self._session_factory()
        try:
            doc = db.query(model).filter(model.id == doc_id, model.user_id == uid).first()
            return self._to_dict(model, doc) if doc is not None else None
        finally:
            db.close()

    def ping(self) -> bool:
        db = self._session_factory()
        try:
            db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False
        finally:
            db.close()

    def _notify(self, uid: str, collection: str) -> None:
        key = (uid, collection)
        with self._lock:
            listeners = list(self._listeners.get(key, {}).items())
            if not listeners:
                return
            try:
                docs = self._read(uid, self._model(collection))
            except SQLAlchemyError as exc:
                # A failed listener is dead until someone registers again.
                logger.error("Snapshot read failed for %s/%s: %s", uid, collection, exc)
                self._listeners.pop(key, None)
                for _, (_, on_error) in listeners:
                    on_error(exc)
                return
            for _, (on_next, _) in listeners:
                on_next([dict(doc) for doc in docs])

    def _read(self, uid: str, model) -> Snapshot:
        db = self._session_factory()
        try:
            rows = db.query(model).filter(model.user_id == uid).order_by(model.id).all()
            return [self._to_dict(model, row) for row in rows]
        finally:
            db.close()

    @staticmethod
    def _to_dict(model, row) -> Dict[str, Any]:
        return {
            column.name: getattr(row, column.name)
            for column in model.__table__.columns
            if column.name != "user_id"
        }

    @staticmethod
    def _model(collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise BackendError(f"Coleção desconhecida: {collection}") from None

    @staticmethod
    def _resolve(model, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns = {column.name for column in model.__table__.columns} - {"id", "user_id"}
        now = utcnow()
        resolved = {}
        for name, value in fields.items():
            if name not in columns:
                raise BackendError(f"Campo desconhecido: {name}")
            resolved[name] = now if value is SERVER_TIMESTAMP else value
        return resolved
