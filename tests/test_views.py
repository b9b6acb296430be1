from datetime import date, datetime, timezone

import pytest

from painel.schemas.chamado import Chamado
from painel.schemas.cliente import Cliente
from painel.schemas.state import DataState
from painel.views.abertos import build_abertos_view
from painel.views.clientes import build_clientes_view
from painel.views.common import cliente_label, normalize_text, sort_by_data_desc
from painel.views.concluidos import (
    ConcluidosFiltros,
    build_concluidos_view,
    build_date_options,
    page_buttons,
    paginate,
    resolve_filtros,
)
from painel.views.dashboard import (
    ANO_TODOS,
    TopClientesPeriodo,
    build_cards,
    build_daily_totals,
    build_dashboard_view,
    build_top_clientes,
)

TODAY = date(2024, 5, 10)


def at(day, hour=12):
    return datetime(2024, 5, day, hour, tzinfo=timezone.utc)


def chamado(id, data, status="concluido", **extra):
    return Chamado(id=id, data=data, status=status, **extra)


def ready(items):
    return DataState.ready(items)


# --- labels and ordering -----------------------------------------------------

def test_label_prefers_denormalized_name_then_roster_then_legacy():
    roster = {"c1": Cliente(id="c1", nome="ACME")}

    assert cliente_label(Chamado(cliente_nome="Nome salvo", cliente_id="c1", cliente="Legado"), roster) == "Nome salvo"
    assert cliente_label(Chamado(cliente_id="c1", cliente="Legado"), roster) == "ACME"
    assert cliente_label(Chamado(cliente_id="sumiu", cliente="Legado"), roster) == "Legado"
    assert cliente_label(Chamado(), roster) == "Cliente não informado"


def test_sort_newest_date_then_latest_instant():
    items = [
        chamado("a", "2024-05-01", criado_em=at(1, 8)),
        chamado("b", "2024-05-03", criado_em=at(3, 8)),
        chamado("c", "2024-05-01", criado_em=at(1, 18)),
        chamado("d", "2024-05-01"),
    ]
    assert [item.id for item in sort_by_data_desc(items)] == ["b", "c", "a", "d"]


def test_sort_completed_prefers_completion_instant():
    items = [
        chamado("a", "2024-05-01", criado_em=at(1, 20), concluido_em=at(2, 8)),
        chamado("b", "2024-05-01", criado_em=at(1, 8), concluido_em=at(4, 8)),
    ]
    assert [item.id for item in sort_by_data_desc(items, prefer_concluido=True)] == ["b", "a"]
    assert [item.id for item in sort_by_data_desc(items)] == ["a", "b"]


def test_normalize_text_folds_case_and_accents():
    assert normalize_text("Manutenção ÉLÉTRICA") == "manutencao eletrica"


# --- open and client lists ---------------------------------------------------

def test_abertos_view_keeps_only_open_tickets():
    chamados = ready([
        chamado("a", "2024-05-01", status="aberto", cliente_id="c1"),
        chamado("b", "2024-05-02", status="concluido"),
        chamado("c", "2024-05-03", status="aberto"),
    ])
    clientes = ready([Cliente(id="c2", nome="beta"), Cliente(id="c1", nome="Álvaro")])

    view = build_abertos_view(chamados, clientes)

    assert [item.id for item in view.abertos] == ["c", "a"]
    assert view.abertos[1].cliente_label == "Álvaro"
    assert [c.nome for c in view.clientes] == ["Álvaro", "beta"]
    assert view.carregando is False


def test_views_report_loading_and_error():
    loading = DataState.loading([])
    failed = DataState.failed([], "sem permissão")

    assert build_abertos_view(loading, ready([])).carregando is True
    assert build_abertos_view(ready([]), failed).erro == "sem permissão"
    assert build_clientes_view(failed).erro == "sem permissão"


# --- completed page ----------------------------------------------------------

def _concluidos_fixture():
    return [
        chamado("1", "2024-05-02", motivo="Impressora travada", cliente_id="c1"),
        chamado("2", "2024-05-02", motivo="Rede lenta", cliente="ACME"),
        chamado("3", "2024-04-15", motivo="Impressão falhou", resolucao="Troca de toner", cliente_id="c2"),
        chamado("4", "2023-12-31", motivo="Backup", cliente_id="c1"),
        chamado("5", "2024-05-09", status="aberto", motivo="Impressora"),
    ]


def _roster():
    return [Cliente(id="c1", nome="ACME"), Cliente(id="c2", nome="Beta")]


def test_date_options_newest_year_first_months_ascending():
    options = build_date_options(_concluidos_fixture())
    assert list(options) == ["2024", "2023"]
    assert [m.valor for m in options["2024"]] == ["04", "05"]
    assert options["2024"][0].label == "Abr"


def test_filters_combine_with_and():
    view = build_concluidos_view(
        ready(_concluidos_fixture()),
        ready(_roster()),
        ConcluidosFiltros(ano="2024", cliente_id="c1", texto="impressora"),
    )
    ids = [item.id for grupo in view.grupos for item in grupo.items]
    assert ids == ["1"]
    assert view.total_concluidos == 4
    assert view.total_filtrados == 1


def test_client_filter_matches_legacy_name_case_insensitively():
    view = build_concluidos_view(
        ready(_concluidos_fixture()),
        ready(_roster()),
        ConcluidosFiltros(cliente_id="c1"),
    )
    ids = sorted(item.id for grupo in view.grupos for item in grupo.items)
    assert ids == ["1", "2", "4"]


def test_text_filter_ignores_accents_and_searches_resolution():
    view = build_concluidos_view(
        ready(_concluidos_fixture()),
        ready(_roster()),
        ConcluidosFiltros(texto="IMPRESSAO"),
    )
    assert [item.id for grupo in view.grupos for item in grupo.items] == ["3"]

    view = build_concluidos_view(ready(_concluidos_fixture()), ready(_roster()), ConcluidosFiltros(texto="toner"))
    assert [item.id for grupo in view.grupos for item in grupo.items] == ["3"]


def test_exact_date_overrides_year_and_month():
    view = build_concluidos_view(
        ready(_concluidos_fixture()),
        ready(_roster()),
        ConcluidosFiltros(ano="2023", mes="12", data="2024-04-15"),
    )
    assert [item.id for grupo in view.grupos for item in grupo.items] == ["3"]


def test_unavailable_year_and_month_are_reset():
    options = build_date_options(_concluidos_fixture())

    assert resolve_filtros(ConcluidosFiltros(ano="2020", mes="01"), options) == ConcluidosFiltros()
    assert resolve_filtros(ConcluidosFiltros(ano="2024", mes="01"), options) == ConcluidosFiltros(ano="2024")

    view = build_concluidos_view(ready(_concluidos_fixture()), ready(_roster()), ConcluidosFiltros(ano="2020"))
    assert view.filtros.ano == ""
    assert view.total_filtrados == 4


def test_groups_by_date_descending():
    view = build_concluidos_view(ready(_concluidos_fixture()), ready(_roster()))
    assert [grupo.data for grupo in view.grupos] == ["2024-05-02", "2024-04-15", "2023-12-31"]
    assert len(view.grupos[0].items) == 2


def test_pagination_clamps_and_counts():
    items = list(range(25))
    page, paginacao = paginate(items, 5, 10, [10, 20, 50, 100])
    assert paginacao.total_paginas == 3
    assert paginacao.pagina == 3
    assert page == [20, 21, 22, 23, 24]

    page, paginacao = paginate([], 4, 10, [10, 20])
    assert paginacao.total_paginas == 1
    assert paginacao.pagina == 1
    assert page == []


def test_unknown_page_size_falls_back_to_first_option():
    _, paginacao = paginate(list(range(30)), 1, 7, [10, 20])
    assert paginacao.tamanho == 10


@pytest.mark.parametrize("current,pages,expected", [
    (1, 5, [1, 2, 3, 4, 5]),
    (2, 10, [1, 2, 3, 4, 5, None, 10]),
    (5, 10, [1, None, 4, 5, 6, None, 10]),
    (10, 10, [1, None, 6, 7, 8, 9, 10]),
    (7, 10, [1, None, 6, 7, 8, 9, 10]),
])
def test_page_buttons(current, pages, expected):
    assert page_buttons(current, pages) == expected


# --- dashboard ---------------------------------------------------------------

def _dashboard_items():
    return [
        chamado("1", "2024-05-10", status="aberto", cliente_id="c1"),
        chamado("2", "2024-05-10", status="concluido", cliente_id="c1"),
        chamado("3", "2024-05-08", status="concluido", cliente="Loja"),
        chamado("4", "2024-04-20", status="concluido", cliente_id="c2"),
        chamado("5", "2023-05-10", status="concluido", cliente_id="c2"),
        chamado("6", "2023-01-03", status="aberto"),
    ]


def test_today_counters_follow_calendar_date():
    cards = build_cards(_dashboard_items(), 2023, TODAY)
    assert cards.total_hoje == 2
    assert cards.abertos_hoje == 1
    assert cards.concluidos_hoje == 1
    assert cards.total_ano == 2
    assert cards.total_mes == 1
    assert cards.principal_label == "Chamados no ano"
    assert cards.principal_valor == 2


def test_cards_for_current_year_and_all_years():
    cards = build_cards(_dashboard_items(), 2024, TODAY)
    assert cards.principal_label == "Chamados hoje"
    assert cards.principal_valor == 2
    assert cards.total_ano == 4
    assert cards.total_mes == 3
    assert cards.abertos_atuais == 2
    assert cards.concluidos_atuais == 4

    todos = build_cards(_dashboard_items(), ANO_TODOS, TODAY)
    assert todos.total_ano == 6
    assert todos.total_mes == 4
    assert todos.total_ano_label == "Total geral"


def test_top_clientes_by_period():
    roster = {"c1": Cliente(id="c1", nome="ACME"), "c2": Cliente(id="c2", nome="Beta")}
    items = _dashboard_items()

    todos = build_top_clientes(items, roster, ANO_TODOS, TopClientesPeriodo.TODOS, TODAY)
    assert [(r.nome, r.total) for r in todos] == [("ACME", 2), ("Beta", 2), ("Loja", 1), ("Sem cliente", 1)]

    semana = build_top_clientes(items, roster, 2024, TopClientesPeriodo.ULTIMOS_7_DIAS, TODAY)
    assert [(r.nome, r.total) for r in semana] == [("ACME", 2), ("Loja", 1)]

    hoje = build_top_clientes(items, roster, 2024, TopClientesPeriodo.HOJE, TODAY)
    assert [(r.nome, r.total) for r in hoje] == [("ACME", 2)]

    mes = build_top_clientes(items, roster, 2024, TopClientesPeriodo.ULTIMO_MES, TODAY, limit=2)
    assert [(r.nome, r.total) for r in mes] == [("ACME", 2), ("Beta", 1)]


def test_daily_totals_size_follows_calendar():
    items = [chamado("1", "2024-02-29"), chamado("2", "2024-02-29"), chamado("3", "2023-02-28")]

    leap = build_daily_totals(items, 2024, 2)
    assert len(leap.totais) == 29
    assert leap.totais[28] == 2
    assert leap.total_mes == 2

    common = build_daily_totals(items, 2023, 2)
    assert len(common.labels) == 28

    empty = build_daily_totals(items, 2024, 3)
    assert empty.sem_chamados is True


def test_dashboard_view_resolves_years():
    view = build_dashboard_view(
        ready(_dashboard_items()),
        ready([Cliente(id="c1", nome="ACME")]),
        ano=1999,
        today=TODAY,
    )
    assert view.anos_disponiveis == [2024, 2023]
    assert view.ano_selecionado == 2024
    assert view.grafico_mensal.ano == 2024
    assert view.grafico_mensal.totais[4] == 3
    assert view.grafico_diario.mes == 5
    assert view.grafico_diario.totais[9] == 2


def test_dashboard_without_tickets_uses_current_year():
    view = build_dashboard_view(ready([]), ready([]), today=TODAY)
    assert view.anos_disponiveis == [2024]
    assert view.ano_selecionado == ANO_TODOS
    assert view.ano_selecionado_label == "Todos"
    assert view.cards.total_ano == 0
    assert view.grafico_diario.sem_chamados is True
    assert view.carregando is False


def test_top_clientes_ties_ignore_case_and_accents():
    roster = {
        "c1": Cliente(id="c1", nome="Beta"),
        "c2": Cliente(id="c2", nome="alpha"),
        "c3": Cliente(id="c3", nome="Ômega"),
        "c4": Cliente(id="c4", nome="delta"),
    }
    items = [chamado(str(i), "2024-05-01", cliente_id=cid) for i, cid in enumerate(["c1", "c2", "c3", "c4"])]

    ranking = build_top_clientes(items, roster, ANO_TODOS, TopClientesPeriodo.TODOS, TODAY)
    assert [r.nome for r in ranking] == ["alpha", "Beta", "delta", "Ômega"]
