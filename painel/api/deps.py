from fastapi import Depends, HTTPException, Request, status

from painel.core.context import AppContext
from painel.schemas.state import SessionState
from painel.views.guard import GuardOutcome, evaluate_guard


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def require_session(request: Request, ctx: AppContext = Depends(get_context)) -> SessionState:
    """
    Route guard: waits for the session to resolve, then lets a signed-in user
    through or redirects to the login page with the requested path attached.
    """
    session = ctx.session.wait_until_resolved()
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    decision = evaluate_guard(session, path)
    if decision.outcome != GuardOutcome.ALLOW:
        raise HTTPException(
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            detail="Login required",
            headers={"Location": decision.redirect_to},
        )
    return session
