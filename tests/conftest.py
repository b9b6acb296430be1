import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from painel.backend.document_store import DocumentStore
from painel.core.context import AppContext
from painel.core.db import Base, build_engine
from painel.main import app
from painel.schemas.state import AuthUser
from painel.stores.chamados import ChamadosStore
from painel.stores.clientes import ClientesStore
from painel.stores.session import SessionStore


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeTimers:
    """Collects scheduled clears so tests decide when (and whether) they fire."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire(self, index):
        self.timers[index].callback()


class FakeAuthProvider:
    """Auth stream driven by the test; nothing is emitted until the test says so."""

    def __init__(self):
        self.current_user = None
        self._observers = []

    def on_auth_state_changed(self, on_next, on_error=None):
        entry = (on_next, on_error)
        self._observers.append(entry)
        return lambda: self._observers.remove(entry)

    def emit(self, user):
        self.current_user = user
        for on_next, _ in list(self._observers):
            on_next(user)

    def fail(self, exc):
        for _, on_error in list(self._observers):
            on_error(exc)


class ListenSpy:
    def __init__(self, documents):
        self._documents = documents
        self.calls = []

    def __call__(self, uid, collection, on_next, on_error):
        self.calls.append((uid, collection))
        return self._real(uid, collection, on_next, on_error)

    def install(self):
        self._real = self._documents.listen
        self._documents.listen = self
        return self


@pytest.fixture()
def session_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def documents(session_factory):
    return DocumentStore(session_factory)


@pytest.fixture()
def provider():
    return FakeAuthProvider()


@pytest.fixture()
def listen_spy(documents):
    return ListenSpy(documents).install()


@pytest.fixture()
def stores(documents, provider, listen_spy):
    session = SessionStore(provider)
    chamados = ChamadosStore(documents, session)
    clientes = ClientesStore(documents, session)
    return session, chamados, clientes


@pytest.fixture()
def alice():
    return AuthUser(uid="alice-uid", email="alice@example.com")


@pytest.fixture()
def timers():
    return FakeTimers()


@pytest.fixture()
def ctx(timers):
    context = AppContext.from_url("sqlite://", toast_timer=timers)
    yield context
    context.close()


@pytest.fixture()
def client(ctx):
    app.state.context = ctx
    yield TestClient(app, follow_redirects=False)
    app.state.context = None


@pytest.fixture()
def logged_client(client):
    response = client.post(
        "/auth/cadastro",
        json={"email": "ana@example.com", "senha": "segredo1", "confirmar": "segredo1"},
    )
    assert response.status_code == 201
    return client
