from fastapi import APIRouter, Depends, status

from painel.actions import auth as auth_actions
from painel.api.deps import get_context
from painel.core.context import AppContext
from painel.schemas.state import AuthResponse, LoginRequest, SessionState, SignUpRequest

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/cadastro", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def cadastro(form: SignUpRequest, ctx: AppContext = Depends(get_context)):
    """
    Create an account and sign it in. Form errors come back as 422 with the
    offending field.
    """
    redirect_to = auth_actions.sign_up(ctx, form)
    return AuthResponse(session=ctx.session.current, redirect_to=redirect_to)


@router.post("/login", response_model=AuthResponse)
def login(form: LoginRequest, ctx: AppContext = Depends(get_context)):
    redirect_to = auth_actions.sign_in(ctx, form)
    return AuthResponse(session=ctx.session.current, redirect_to=redirect_to)


@router.post("/logout", response_model=AuthResponse)
def logout(ctx: AppContext = Depends(get_context)):
    redirect_to = auth_actions.sign_out(ctx)
    return AuthResponse(session=ctx.session.current, redirect_to=redirect_to)


@router.get("/sessao", response_model=SessionState)
def sessao(ctx: AppContext = Depends(get_context)):
    return ctx.session.current
