import logging

from painel.backend.auth_provider import EMAIL_RE
from painel.core.config import settings
from painel.core.errors import AuthProviderError, FormValidationError
from painel.schemas.state import LoginRequest, SignUpRequest
from painel.views.guard import resolve_return_url

logger = logging.getLogger(__name__)

SIGNUP_ERRORS = {
    "auth/invalid-email": "Email inválido.",
    "auth/weak-password": "Senha fraca. Use pelo menos 6 caracteres.",
}

LOGIN_ERRORS = {
    "auth/invalid-email": "Email inválido.",
    "auth/user-not-found": "Credenciais inválidas.",
    "auth/wrong-password": "Credenciais inválidas.",
    "auth/invalid-credential": "Credenciais inválidas.",
    "auth/too-many-requests": "Muitas tentativas. Tente novamente mais tarde.",
}


def _validate_email(email: str) -> None:
    if not email:
        raise FormValidationError("Informe o email.", field="email")
    if not EMAIL_RE.match(email):
        raise FormValidationError("Informe um email válido.", field="email")


def sign_up(ctx, form: SignUpRequest) -> str:
    """Validate the sign-up form, create the account and return where to go next."""
    email = form.email.strip()
    _validate_email(email)
    if not form.senha:
        raise FormValidationError("Informe a senha.", field="senha")
    if len(form.senha) < settings.MIN_PASSWORD_LENGTH:
        raise FormValidationError(
            f"A senha deve ter pelo menos {settings.MIN_PASSWORD_LENGTH} caracteres.", field="senha"
        )
    if not form.confirmar:
        raise FormValidationError("Confirme a senha.", field="confirmar")
    if form.confirmar != form.senha:
        raise FormValidationError("As senhas não conferem.", field="confirmar")

    try:
        ctx.auth.sign_up(email, form.senha)
    except AuthProviderError as exc:
        logger.warning("Sign-up failed: code=%s message=%s", exc.code, exc.message)
        raise FormValidationError(_signup_message(ctx, exc)) from exc
    return resolve_return_url(form.return_url)


def _signup_message(ctx, exc: AuthProviderError) -> str:
    if exc.code == "auth/email-already-in-use":
        if ctx.session.current_uid():
            return "Sua conta já foi criada, faça login."
        return "Email já está em uso."
    return SIGNUP_ERRORS.get(exc.code, "Erro ao cadastrar.")


def sign_in(ctx, form: LoginRequest) -> str:
    email = form.email.strip()
    _validate_email(email)
    if not form.senha:
        raise FormValidationError("Informe a senha.", field="senha")

    try:
        ctx.auth.sign_in(email, form.senha)
    except AuthProviderError as exc:
        raise FormValidationError(LOGIN_ERRORS.get(exc.code, "Erro ao entrar.")) from exc
    return resolve_return_url(form.return_url)


def sign_out(ctx) -> str:
    ctx.auth.sign_out()
    return "/login"
