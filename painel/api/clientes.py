from fastapi import APIRouter, Depends, status

from painel.actions import clientes as cliente_actions
from painel.api.deps import get_context, require_session
from painel.core.context import AppContext
from painel.schemas.cliente import ClienteForm
from painel.schemas.state import IdResponse
from painel.views.clientes import ClientesViewModel, build_clientes_view

router = APIRouter(prefix="/clientes", tags=["Clientes"], dependencies=[Depends(require_session)])


@router.get("", response_model=ClientesViewModel)
def list_clientes(ctx: AppContext = Depends(get_context)):
    return build_clientes_view(ctx.clientes.current)


@router.post("", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
def create_cliente(form: ClienteForm, ctx: AppContext = Depends(get_context)):
    return IdResponse(id=cliente_actions.cadastrar(ctx, form))


@router.patch("/{cliente_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_cliente(cliente_id: str, form: ClienteForm, ctx: AppContext = Depends(get_context)):
    cliente_actions.salvar_edicao(ctx, cliente_id, form)


@router.delete("/{cliente_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cliente(cliente_id: str, ctx: AppContext = Depends(get_context)):
    cliente_actions.excluir(ctx, cliente_id)
