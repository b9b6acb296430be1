import pytest

from painel.schemas.state import AuthUser, SessionState, SessionStatus
from painel.views.guard import GuardOutcome, evaluate_guard, login_redirect, resolve_return_url


def test_guard_waits_while_session_loading():
    decision = evaluate_guard(SessionState(), "/abertos")
    assert decision.outcome == GuardOutcome.WAIT
    assert decision.redirect_to is None


def test_guard_allows_signed_in_user():
    session = SessionState(status=SessionStatus.AUTHENTICATED, user=AuthUser(uid="u1", email="a@b.co"))
    assert evaluate_guard(session, "/dashboard").outcome == GuardOutcome.ALLOW


@pytest.mark.parametrize("status", [SessionStatus.UNAUTHENTICATED, SessionStatus.ERROR])
def test_guard_redirects_with_return_url(status):
    decision = evaluate_guard(SessionState(status=status), "/concluidos?ano=2024")
    assert decision.outcome == GuardOutcome.REDIRECT
    assert decision.redirect_to == "/login?returnUrl=%2Fconcluidos%3Fano%3D2024"


def test_login_redirect_encodes_path():
    assert login_redirect("/abertos") == "/login?returnUrl=%2Fabertos"


@pytest.mark.parametrize("url,expected", [
    (None, "/abertos"),
    ("", "/abertos"),
    ("/login", "/abertos"),
    ("/cadastro", "/abertos"),
    ("/dashboard", "/dashboard"),
])
def test_resolve_return_url(url, expected):
    assert resolve_return_url(url) == expected
