from datetime import date
from typing import Optional

from painel.core.errors import BackendError, FormValidationError
from painel.schemas.chamado import ChamadoCreate, ChamadoUpdate, StatusChamado, TipoCadastro
from painel.schemas.state import ToastType
from painel.views.common import is_iso_date


def _fail(ctx, message: str, field: Optional[str] = None):
    ctx.notifications.show(message, ToastType.ERROR)
    raise FormValidationError(message, field=field)


def _valid_date(value: str) -> bool:
    if not is_iso_date(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _backend_failure(ctx, label: str, exc: BackendError):
    message = f"{label}: {exc.message}"
    ctx.notifications.show(message, ToastType.ERROR)
    raise BackendError(message) from exc


def salvar(ctx, form: ChamadoCreate, today: Optional[date] = None) -> str:
    """Ticket intake: either a new open ticket or one recorded already resolved."""
    motivo = form.motivo.strip()
    cliente_id = form.cliente_id
    cliente_nome = ctx.clientes.nome_by_id(cliente_id)
    data = form.data or (today or date.today()).isoformat()
    resolucao = form.resolucao.strip()

    if not motivo or not cliente_id or not cliente_nome or not data:
        _fail(ctx, "Preencha motivo, cliente e data.")
    if not _valid_date(data):
        _fail(ctx, "Informe uma data válida.", field="data")
    if form.modo == TipoCadastro.ANTIGO and not resolucao:
        _fail(ctx, "Informe como foi resolvido.", field="resolucao")

    try:
        if form.modo == TipoCadastro.NOVO:
            chamado_id = ctx.chamados.add_open_ticket(motivo, cliente_id, cliente_nome, data)
        else:
            chamado_id = ctx.chamados.add_resolved_ticket(motivo, cliente_id, cliente_nome, data, resolucao)
    except BackendError as exc:
        _backend_failure(ctx, "Erro ao salvar", exc)

    ctx.notifications.show("Chamado salvo com sucesso.", ToastType.SUCCESS)
    return chamado_id


def finalizar(ctx, chamado_id: str, resolucao: str) -> None:
    texto = (resolucao or "").strip()
    if not texto:
        _fail(ctx, "Informe como foi resolvido.", field="resolucao")
    try:
        ctx.chamados.complete_ticket(chamado_id, texto)
    except BackendError as exc:
        _backend_failure(ctx, "Erro ao finalizar", exc)
    ctx.notifications.show("Chamado finalizado.", ToastType.SUCCESS)


def salvar_edicao(ctx, chamado_id: str, form: ChamadoUpdate) -> None:
    """
    Free-form edit. Picking a client rewrites both name fields from the roster;
    otherwise the label shown when editing began is kept.
    """
    atual = next((item for item in ctx.chamados.snapshot() if item.id == chamado_id), None)
    status = atual.status if atual is not None else StatusChamado.ABERTO

    motivo = form.motivo.strip()
    cliente_id = form.cliente_id
    cliente_nome = ctx.clientes.nome_by_id(cliente_id) if cliente_id else form.cliente_nome_original.strip()
    data = form.data
    resolucao = form.resolucao.strip()

    if not motivo or not cliente_nome or not data:
        _fail(ctx, "Preencha motivo, cliente e data.")
    if not _valid_date(data):
        _fail(ctx, "Informe uma data válida.", field="data")
    if status == StatusChamado.CONCLUIDO and not resolucao:
        _fail(ctx, "Informe como foi resolvido.", field="resolucao")

    payload = {
        "motivo": motivo,
        "data": data,
        "cliente_nome": cliente_nome,
        "cliente": cliente_nome,
    }
    if cliente_id:
        payload["cliente_id"] = cliente_id
    if status == StatusChamado.CONCLUIDO:
        payload["resolucao"] = resolucao

    try:
        ctx.chamados.update_ticket(chamado_id, payload)
    except BackendError as exc:
        _backend_failure(ctx, "Erro ao atualizar", exc)
    ctx.notifications.show("Chamado atualizado.", ToastType.SUCCESS)


def excluir(ctx, chamado_id: str) -> None:
    try:
        ctx.chamados.delete_ticket(chamado_id)
    except BackendError as exc:
        _backend_failure(ctx, "Erro ao excluir", exc)
    ctx.notifications.show("Chamado excluído.", ToastType.SUCCESS)
