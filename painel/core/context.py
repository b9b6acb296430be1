import logging
import threading

from sqlalchemy.orm import sessionmaker

from painel.backend.auth_provider import LocalAuthProvider
from painel.backend.document_store import DocumentStore
from painel.core.config import settings
from painel.core.db import Base, build_engine
from painel.stores.chamados import ChamadosStore
from painel.stores.clientes import ClientesStore
from painel.stores.notifications import NotificationChannel
from painel.stores.session import SessionStore

logger = logging.getLogger(__name__)


class AppContext:
    """
    The one dashboard session of this process: backend collaborators plus the
    stores built on top of them, all sharing a single update lock.
    """

    def __init__(self, session_factory, min_password_length: int = None, toast_timer=None):
        self.lock = threading.RLock()
        self.session_factory = session_factory

        self.auth = LocalAuthProvider(
            session_factory,
            min_password_length=min_password_length or settings.MIN_PASSWORD_LENGTH,
            dispatch_lock=self.lock,
        )
        self.documents = DocumentStore(session_factory, dispatch_lock=self.lock)
        self.session = SessionStore(self.auth, lock=self.lock)
        self.chamados = ChamadosStore(self.documents, self.session, lock=self.lock)
        self.clientes = ClientesStore(self.documents, self.session, lock=self.lock)
        if toast_timer is not None:
            self.notifications = NotificationChannel(timer_factory=toast_timer, lock=self.lock)
        else:
            self.notifications = NotificationChannel(lock=self.lock)

    @classmethod
    def from_url(cls, database_url: str, **kwargs) -> "AppContext":
        engine = build_engine(database_url)
        Base.metadata.create_all(bind=engine)
        logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
        return cls(sessionmaker(autocommit=False, autoflush=False, bind=engine), **kwargs)

    def close(self) -> None:
        self.chamados.close()
        self.clientes.close()
        self.session.close()
