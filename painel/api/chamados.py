from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from painel.actions import chamados as chamado_actions
from painel.api.deps import get_context, require_session
from painel.core.context import AppContext
from painel.schemas.chamado import ChamadoCreate, ChamadoUpdate, FinalizarRequest
from painel.schemas.state import IdResponse
from painel.views.abertos import AbertosViewModel, build_abertos_view
from painel.views.concluidos import ConcluidosFiltros, ConcluidosViewModel, build_concluidos_view

router = APIRouter(tags=["Chamados"], dependencies=[Depends(require_session)])


@router.get("/abertos", response_model=AbertosViewModel)
def abertos(ctx: AppContext = Depends(get_context)):
    """
    Open tickets, newest date first, each with its resolved client label.
    """
    return build_abertos_view(ctx.chamados.current, ctx.clientes.current)


@router.get("/concluidos", response_model=ConcluidosViewModel)
def concluidos(
    ano: str = "",
    mes: str = "",
    data: str = "",
    cliente_id: str = "",
    texto: str = "",
    pagina: int = Query(1),
    tamanho: Optional[int] = None,
    ctx: AppContext = Depends(get_context),
):
    """
    Completed tickets filtered, paginated and grouped by date.
    """
    filtros = ConcluidosFiltros(ano=ano, mes=mes, data=data, cliente_id=cliente_id, texto=texto)
    return build_concluidos_view(
        ctx.chamados.current,
        ctx.clientes.current,
        filtros=filtros,
        pagina=pagina,
        tamanho=tamanho,
    )


@router.post("/chamados", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
def create_chamado(form: ChamadoCreate, ctx: AppContext = Depends(get_context)):
    return IdResponse(id=chamado_actions.salvar(ctx, form))


@router.post("/chamados/{chamado_id}/finalizar", status_code=status.HTTP_204_NO_CONTENT)
def finalizar_chamado(chamado_id: str, request: FinalizarRequest, ctx: AppContext = Depends(get_context)):
    chamado_actions.finalizar(ctx, chamado_id, request.resolucao)


@router.patch("/chamados/{chamado_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_chamado(chamado_id: str, form: ChamadoUpdate, ctx: AppContext = Depends(get_context)):
    chamado_actions.salvar_edicao(ctx, chamado_id, form)


@router.delete("/chamados/{chamado_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chamado(chamado_id: str, ctx: AppContext = Depends(get_context)):
    chamado_actions.excluir(ctx, chamado_id)
