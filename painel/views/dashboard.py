"""
Dashboard aggregation.

All counters come from string comparisons on the `YYYY-MM-DD` date; nothing
here parses ticket dates into date objects except to shift "today" for the
recency windows and to size the daily histogram.
"""
import calendar
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel

from painel.core.config import settings
from painel.schemas.chamado import Chamado, StatusChamado
from painel.schemas.cliente import Cliente
from painel.schemas.state import DataState
from painel.views.common import (
    MESES_ABREV,
    clientes_by_id,
    cliente_label,
    combine_error,
    combine_loading,
    is_iso_date,
    normalize_text,
)

ANO_TODOS = "__all__"
SEM_CLIENTE_DASHBOARD = "Sem cliente"

AnoFiltro = Union[int, str]


class TopClientesPeriodo(str, Enum):
    TODOS = "todos"
    ULTIMO_MES = "ultimoMes"
    ULTIMOS_7_DIAS = "ultimos7Dias"
    HOJE = "hoje"


class ClienteResumo(BaseModel):
    nome: str
    total: int


class DashboardCards(BaseModel):
    total_ano: int
    total_mes: int
    total_hoje: int
    abertos_hoje: int
    concluidos_hoje: int
    abertos_atuais: int
    concluidos_atuais: int

    principal_label: str
    principal_valor: int
    principal_nota: str
    mes_label: str
    total_ano_label: str
    total_ano_nota: str


class GraficoMensal(BaseModel):
    ano: AnoFiltro
    labels: List[str]
    totais: List[int]
    total: int


class GraficoDiario(BaseModel):
    ano: int
    mes: int
    mes_label: str
    labels: List[int]
    totais: List[int]
    total_mes: int
    sem_chamados: bool


class DashboardViewModel(BaseModel):
    carregando: bool
    erro: Optional[str] = None
    ano_selecionado: AnoFiltro
    ano_selecionado_label: str
    anos_disponiveis: List[int]
    cards: DashboardCards
    grafico_mensal: GraficoMensal
    top_clientes: List[ClienteResumo]
    top_clientes_periodo: TopClientesPeriodo
    grafico_diario: GraficoDiario


def build_available_years(items: Sequence[Chamado], today: date) -> List[int]:
    years = {int(item.data[:4]) for item in items if is_iso_date(item.data)}
    if years:
        return sorted(years, reverse=True)
    return [today.year]


def resolve_ano(ano: Optional[AnoFiltro], anos: Sequence[int]) -> AnoFiltro:
    if ano == ANO_TODOS:
        return ANO_TODOS
    if isinstance(ano, int) and ano in anos:
        return ano
    return anos[0]


def resolve_ano_mensal(ano: Optional[int], anos: Sequence[int], today: date) -> int:
    if ano in anos:
        return ano
    if today.year in anos:
        return today.year
    return anos[0]


def _in_scope(data: str, ano: AnoFiltro) -> bool:
    return ano == ANO_TODOS or data.startswith(f"{ano}-")


def build_cards(items: Sequence[Chamado], ano: AnoFiltro, today: date) -> DashboardCards:
    hoje = today.isoformat()
    mes_atual = hoje[5:7]

    total_ano = total_mes = total_hoje = 0
    abertos_hoje = concluidos_hoje = 0
    abertos_atuais = concluidos_atuais = 0

    for item in items:
        if item.status == StatusChamado.ABERTO:
            abertos_atuais += 1
        elif item.status == StatusChamado.CONCLUIDO:
            concluidos_atuais += 1

        data = item.data or ""
        if not is_iso_date(data):
            continue

        if data == hoje:
            total_hoje += 1
            if item.status == StatusChamado.ABERTO:
                abertos_hoje += 1
            elif item.status == StatusChamado.CONCLUIDO:
                concluidos_hoje += 1

        if not _in_scope(data, ano):
            continue
        total_ano += 1
        if data[5:7] == mes_atual:
            total_mes += 1

    ano_eh_atual = ano == ANO_TODOS or ano == today.year
    sufixo = "todos os anos" if ano == ANO_TODOS else str(ano)

    return DashboardCards(
        total_ano=total_ano,
        total_mes=total_mes,
        total_hoje=total_hoje,
        abertos_hoje=abertos_hoje,
        concluidos_hoje=concluidos_hoje,
        abertos_atuais=abertos_atuais,
        concluidos_atuais=concluidos_atuais,
        principal_label="Chamados hoje" if ano_eh_atual else "Chamados no ano",
        principal_valor=total_hoje if ano_eh_atual else total_ano,
        principal_nota=(
            f"{abertos_hoje} abertos / {concluidos_hoje} concluidos" if ano_eh_atual else f"Ano {sufixo}"
        ),
        mes_label=f"Chamados em {MESES_ABREV[today.month - 1]} ({sufixo})",
        total_ano_label="Total geral" if ano == ANO_TODOS else "Total do ano selecionado",
        total_ano_nota="Acumulado de todos os anos" if ano == ANO_TODOS else f"Acumulado de {ano}",
    )


def build_monthly_totals(items: Sequence[Chamado], ano: AnoFiltro) -> GraficoMensal:
    totais = [0] * 12
    for item in items:
        data = item.data or ""
        if not is_iso_date(data) or not _in_scope(data, ano):
            continue
        index = int(data[5:7]) - 1
        if 0 <= index < 12:
            totais[index] += 1
    return GraficoMensal(ano=ano, labels=list(MESES_ABREV), totais=totais, total=sum(totais))


def _match_periodo(data: str, periodo: TopClientesPeriodo, today: date) -> bool:
    hoje = today.isoformat()
    if periodo == TopClientesPeriodo.HOJE:
        return data == hoje
    if periodo == TopClientesPeriodo.ULTIMOS_7_DIAS:
        return (today - timedelta(days=6)).isoformat() <= data <= hoje
    if periodo == TopClientesPeriodo.ULTIMO_MES:
        return (today - timedelta(days=29)).isoformat() <= data <= hoje
    return True


def build_top_clientes(
    items: Sequence[Chamado],
    clientes_map: Dict[str, Cliente],
    ano: AnoFiltro,
    periodo: TopClientesPeriodo,
    today: date,
    limit: Optional[int] = None,
) -> List[ClienteResumo]:
    limit = settings.TOP_CLIENTES_LIMIT if limit is None else limit
    ranking: Dict[str, ClienteResumo] = {}

    for item in items:
        data = item.data or ""
        if not is_iso_date(data) or not _in_scope(data, ano):
            continue
        if not _match_periodo(data, periodo, today):
            continue
        nome = cliente_label(item, clientes_map, SEM_CLIENTE_DASHBOARD)
        key = f"id:{item.cliente_id}" if item.cliente_id else f"nome:{nome}"
        resumo = ranking.setdefault(key, ClienteResumo(nome=nome, total=0))
        resumo.total += 1

    ordered = sorted(ranking.values(), key=lambda resumo: (-resumo.total, normalize_text(resumo.nome)))
    return ordered[:limit]


def build_daily_totals(items: Sequence[Chamado], ano: int, mes: int) -> GraficoDiario:
    dias = calendar.monthrange(ano, mes)[1]
    totais = [0] * dias
    prefixo = f"{ano:04d}-{mes:02d}-"

    for item in items:
        data = item.data or ""
        if not is_iso_date(data) or not data.startswith(prefixo):
            continue
        dia = int(data[8:10])
        if 1 <= dia <= dias:
            totais[dia - 1] += 1

    total = sum(totais)
    return GraficoDiario(
        ano=ano,
        mes=mes,
        mes_label=MESES_ABREV[mes - 1],
        labels=list(range(1, dias + 1)),
        totais=totais,
        total_mes=total,
        sem_chamados=total == 0,
    )


def build_dashboard_view(
    chamados: DataState[List[Chamado]],
    clientes: DataState[List[Cliente]],
    ano: Optional[AnoFiltro] = ANO_TODOS,
    ano_mensal: Optional[int] = None,
    periodo: TopClientesPeriodo = TopClientesPeriodo.TODOS,
    ano_diario: Optional[int] = None,
    mes_diario: Optional[int] = None,
    today: Optional[date] = None,
) -> DashboardViewModel:
    today = today or date.today()
    items = chamados.data
    anos = build_available_years(items, today)

    ano_resolvido = resolve_ano(ano, anos)
    ano_mensal_resolvido = resolve_ano_mensal(ano_mensal if ano_mensal is not None else today.year, anos, today)

    ano_diario_resolvido = resolve_ano(ano_diario if ano_diario is not None else today.year, anos)
    if ano_diario_resolvido == ANO_TODOS:
        ano_diario_resolvido = anos[0]
    mes_diario_resolvido = min(12, max(1, mes_diario if mes_diario is not None else today.month))

    clientes_map = clientes_by_id(clientes.data)

    return DashboardViewModel(
        carregando=combine_loading(chamados, clientes),
        erro=combine_error(chamados, clientes),
        ano_selecionado=ano_resolvido,
        ano_selecionado_label="Todos" if ano_resolvido == ANO_TODOS else str(ano_resolvido),
        anos_disponiveis=anos,
        cards=build_cards(items, ano_resolvido, today),
        grafico_mensal=build_monthly_totals(items, ano_mensal_resolvido),
        top_clientes=build_top_clientes(items, clientes_map, ano_resolvido, periodo, today),
        top_clientes_periodo=periodo,
        grafico_diario=build_daily_totals(items, ano_diario_resolvido, mes_diario_resolvido),
    )
