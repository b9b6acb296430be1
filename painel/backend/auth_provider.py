import hashlib
import hmac
import itertools
import logging
import re
import secrets
import threading
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from painel.core.errors import AuthProviderError
from painel.models.documents import User
from painel.schemas.state import AuthUser

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
HASH_ITERATIONS = 120_000

OnUser = Callable[[Optional[AuthUser]], None]
OnError = Callable[[Exception], None]


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), HASH_ITERATIONS)
    return f"pbkdf2_sha256${HASH_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        _, iterations, salt, expected = stored.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


class LocalAuthProvider:
    """
    Email/password accounts with a session stream.

    Observers registered with `on_auth_state_changed` receive the current user
    right away and then every sign-in/sign-out. `report_error` pushes a fault to
    the error callbacks instead.
    """

    def __init__(self, session_factory, min_password_length: int = 6, dispatch_lock: Optional[threading.RLock] = None):
        self._session_factory = session_factory
        self._min_password_length = min_password_length
        self._lock = dispatch_lock or threading.RLock()
        self._observers: Dict[int, Tuple[OnUser, Optional[OnError]]] = {}
        self._ids = itertools.count(1)
        self.current_user: Optional[AuthUser] = None

    def on_auth_state_changed(self, on_next: OnUser, on_error: Optional[OnError] = None) -> Callable[[], None]:
        token = next(self._ids)
        with self._lock:
            self._observers[token] = (on_next, on_error)
            on_next(self.current_user)

        def unsubscribe():
            with self._lock:
                self._observers.pop(token, None)

        return unsubscribe

    def sign_up(self, email: str, senha: str) -> str:
        email = email.strip().lower()
        if not EMAIL_RE.match(email):
            raise AuthProviderError("auth/invalid-email", "Email inválido.")
        if len(senha) < self._min_password_length:
            raise AuthProviderError("auth/weak-password", "Senha fraca.")

        db = self._session_factory()
        try:
            if db.query(User).filter(User.email == email).first():
                raise AuthProviderError("auth/email-already-in-use", "Email já está em uso.")
            user = User(email=email, password_hash=hash_password(senha))
            db.add(user)
            db.commit()
            auth_user = AuthUser(uid=user.uid, email=user.email)
        except IntegrityError as exc:
            db.rollback()
            raise AuthProviderError("auth/email-already-in-use", "Email já está em uso.") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise AuthProviderError("auth/internal-error", str(exc)) from exc
        finally:
            db.close()

        logger.info("Account created for %s", email)
        self._set_user(auth_user)
        return auth_user.uid

    def sign_in(self, email: str, senha: str) -> AuthUser:
        email = email.strip().lower()
        if not EMAIL_RE.match(email):
            raise AuthProviderError("auth/invalid-email", "Email inválido.")

        db = self._session_factory()
        try:
            user = db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as exc:
            raise AuthProviderError("auth/internal-error", str(exc)) from exc
        finally:
            db.close()

        if user is None or not verify_password(senha, user.password_hash):
            raise AuthProviderError("auth/invalid-credential", "Credenciais inválidas.")

        auth_user = AuthUser(uid=user.uid, email=user.email)
        self._set_user(auth_user)
        return auth_user

    def sign_out(self) -> None:
        self._set_user(None)

    def report_error(self, exc: Exception) -> None:
        with self._lock:
            observers = list(self._observers.values())
            for _, on_error in observers:
                if on_error is not None:
                    on_error(exc)

    def _set_user(self, user: Optional[AuthUser]) -> None:
        with self._lock:
            self.current_user = user
            for on_next, _ in list(self._observers.values()):
                on_next(user)
