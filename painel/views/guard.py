from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from pydantic import BaseModel

from painel.schemas.state import SessionState, SessionStatus

LOGIN_PATH = "/login"
SIGNUP_PATH = "/cadastro"
DEFAULT_PATH = "/abertos"


class GuardOutcome(str, Enum):
    ALLOW = "allow"
    WAIT = "wait"
    REDIRECT = "redirect"


class GuardDecision(BaseModel):
    outcome: GuardOutcome
    redirect_to: Optional[str] = None


def login_redirect(return_path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'returnUrl': return_path})}"


def evaluate_guard(session: SessionState, path: str) -> GuardDecision:
    """Hold while the session is loading, then allow a signed-in user or send to login."""
    if session.status == SessionStatus.LOADING:
        return GuardDecision(outcome=GuardOutcome.WAIT)
    if session.user is not None:
        return GuardDecision(outcome=GuardOutcome.ALLOW)
    return GuardDecision(outcome=GuardOutcome.REDIRECT, redirect_to=login_redirect(path))


def resolve_return_url(return_url: Optional[str]) -> str:
    if not return_url or return_url in (LOGIN_PATH, SIGNUP_PATH):
        return DEFAULT_PATH
    return return_url
