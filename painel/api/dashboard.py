from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from painel.api.deps import get_context, require_session
from painel.core.context import AppContext
from painel.schemas.state import ToastMessage
from painel.views.dashboard import ANO_TODOS, DashboardViewModel, TopClientesPeriodo, build_dashboard_view

router = APIRouter(tags=["Dashboard"], dependencies=[Depends(require_session)])


def _parse_ano(ano: str):
    if ano == ANO_TODOS:
        return ANO_TODOS
    try:
        return int(ano)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid year: {ano}")


@router.get("/dashboard", response_model=DashboardViewModel)
def dashboard(
    ano: str = ANO_TODOS,
    ano_mensal: Optional[int] = None,
    periodo: TopClientesPeriodo = TopClientesPeriodo.TODOS,
    ano_diario: Optional[int] = None,
    mes_diario: Optional[int] = None,
    ctx: AppContext = Depends(get_context),
):
    """
    Cards, monthly and daily histograms and the top clients ranking.
    """
    return build_dashboard_view(
        ctx.chamados.current,
        ctx.clientes.current,
        ano=_parse_ano(ano),
        ano_mensal=ano_mensal,
        periodo=periodo,
        ano_diario=ano_diario,
        mes_diario=mes_diario,
    )


@router.get("/notificacao", response_model=Optional[ToastMessage])
def notificacao(ctx: AppContext = Depends(get_context)):
    return ctx.notifications.current
