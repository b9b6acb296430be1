from painel.core.errors import BackendError, FormValidationError
from painel.schemas.cliente import ClienteForm
from painel.schemas.state import ToastType


def _require_nome(ctx, form: ClienteForm) -> str:
    nome = form.nome.strip()
    if not nome:
        ctx.notifications.show("Informe o nome do cliente.", ToastType.ERROR)
        raise FormValidationError("Informe o nome do cliente.", field="nome")
    return nome


def _report(ctx, label: str, exc: BackendError):
    message = f"{label}: {exc.message}"
    ctx.notifications.show(message, ToastType.ERROR)
    raise BackendError(message) from exc


def cadastrar(ctx, form: ClienteForm) -> str:
    nome = _require_nome(ctx, form)
    try:
        cliente_id = ctx.clientes.add_cliente(nome, form.telefone, form.email, form.observacao)
    except BackendError as exc:
        _report(ctx, "Erro ao cadastrar", exc)
    ctx.notifications.show("Cliente cadastrado com sucesso.", ToastType.SUCCESS)
    return cliente_id


def salvar_edicao(ctx, cliente_id: str, form: ClienteForm) -> None:
    nome = _require_nome(ctx, form)
    try:
        ctx.clientes.update_cliente(cliente_id, {
            "nome": nome,
            "telefone": form.telefone.strip(),
            "email": form.email.strip(),
            "observacao": form.observacao.strip(),
        })
    except BackendError as exc:
        _report(ctx, "Erro ao atualizar", exc)
    ctx.notifications.show("Cliente atualizado.", ToastType.SUCCESS)


def excluir(ctx, cliente_id: str) -> None:
    try:
        ctx.clientes.delete_cliente(cliente_id)
    except BackendError as exc:
        _report(ctx, "Erro ao excluir", exc)
    ctx.notifications.show("Cliente excluido.", ToastType.SUCCESS)
