"""
Completed-tickets page: filtering, date options, grouping and pagination.

Every function here is pure; the caller passes the current store states and
the page's own filter/page state and gets back a renderable model.
"""
import math
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from painel.core.config import settings
from painel.schemas.chamado import Chamado, ChamadoItemView, StatusChamado
from painel.schemas.cliente import Cliente
from painel.schemas.state import DataState
from painel.views.common import (
    MESES_ABREV,
    clientes_by_id,
    combine_error,
    combine_loading,
    is_iso_date,
    normalize_text,
    sort_by_data_desc,
    sort_clientes,
    with_labels,
)

SEM_DATA = "Sem data"
PAGE_WINDOW_LIMIT = 7

PageButton = Optional[int]


class ConcluidosFiltros(BaseModel):
    ano: str = ""
    mes: str = ""
    data: str = ""
    cliente_id: str = ""
    texto: str = ""


class MesFiltroOption(BaseModel):
    valor: str
    label: str


class GrupoConcluidos(BaseModel):
    data: str
    items: List[ChamadoItemView]


class Paginacao(BaseModel):
    pagina: int
    tamanho: int
    total_paginas: int
    tamanhos: List[int]
    botoes: List[PageButton] = Field(description="Page numbers to render; None marks an ellipsis.")


class ConcluidosViewModel(BaseModel):
    carregando: bool
    erro: Optional[str] = None
    clientes: List[Cliente]
    filtros: ConcluidosFiltros
    anos_disponiveis: List[str]
    meses_disponiveis: List[MesFiltroOption]
    grupos: List[GrupoConcluidos]
    total_concluidos: int
    total_filtrados: int
    total_exibidos: int
    paginacao: Paginacao


def build_date_options(items: Sequence[Chamado]) -> Dict[str, List[MesFiltroOption]]:
    """Years (newest first) mapped to their months (ascending) present in `items`."""
    meses_por_ano: Dict[str, set] = {}
    for item in items:
        if not is_iso_date(item.data):
            continue
        meses_por_ano.setdefault(item.data[:4], set()).add(item.data[5:7])

    options = {}
    for ano in sorted(meses_por_ano, reverse=True):
        options[ano] = [
            MesFiltroOption(valor=mes, label=_mes_label(mes))
            for mes in sorted(meses_por_ano[ano])
        ]
    return options


def _mes_label(mes: str) -> str:
    try:
        return MESES_ABREV[int(mes) - 1]
    except (ValueError, IndexError):
        return mes


def resolve_filtros(filtros: ConcluidosFiltros, options: Dict[str, List[MesFiltroOption]]) -> ConcluidosFiltros:
    """Drop a year that is no longer available (and its month), or an unavailable month."""
    if filtros.ano and filtros.ano not in options:
        return filtros.model_copy(update={"ano": "", "mes": ""})
    if filtros.ano and filtros.mes:
        if not any(option.valor == filtros.mes for option in options[filtros.ano]):
            return filtros.model_copy(update={"mes": ""})
    return filtros


def filter_concluidos(
    items: Sequence[ChamadoItemView],
    filtros: ConcluidosFiltros,
    clientes_map: Dict[str, Cliente],
) -> List[ChamadoItemView]:
    texto_busca = normalize_text(filtros.texto.strip())
    cliente_filtro_nome = ""
    if filtros.cliente_id:
        cliente = clientes_map.get(filtros.cliente_id)
        cliente_filtro_nome = normalize_text(cliente.nome if cliente else "")

    result = []
    for item in items:
        data = item.data or ""

        if filtros.data:
            if data != filtros.data:
                continue
        else:
            if filtros.ano and not data.startswith(f"{filtros.ano}-"):
                continue
            if filtros.mes and data[5:7] != filtros.mes:
                continue

        if filtros.cliente_id:
            if item.cliente_id:
                if item.cliente_id != filtros.cliente_id:
                    continue
            else:
                if not cliente_filtro_nome:
                    continue
                if normalize_text(item.cliente_label or item.cliente or "") != cliente_filtro_nome:
                    continue

        if texto_busca:
            alvo = normalize_text(" ".join([
                item.motivo or "",
                item.resolucao or "",
                item.descricao or "",
                item.cliente_label or "",
            ]))
            if texto_busca not in alvo:
                continue

        result.append(item)
    return result


def group_by_data(items: Sequence[ChamadoItemView]) -> List[GrupoConcluidos]:
    grupos: Dict[str, List[ChamadoItemView]] = {}
    for item in items:
        grupos.setdefault(item.data or SEM_DATA, []).append(item)
    return [
        GrupoConcluidos(data=data, items=grupos[data])
        for data in sorted(grupos, reverse=True)
    ]


def total_pages(total_items: int, page_size: int) -> int:
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(1, page), max(1, pages))


def resolve_page_size(page_size: Optional[int], options: Sequence[int]) -> int:
    if page_size in options:
        return page_size
    return options[0]


def page_buttons(current: int, pages: int) -> List[PageButton]:
    """
    All pages up to seven, otherwise a window with `None` as the ellipsis:
    first five near the start, last five near the end, and the neighbours of
    the current page in between.
    """
    if pages <= PAGE_WINDOW_LIMIT:
        return list(range(1, pages + 1))
    if current <= 4:
        return [1, 2, 3, 4, 5, None, pages]
    if current >= pages - 3:
        return [1, None] + list(range(pages - 4, pages + 1))
    return [1, None, current - 1, current, current + 1, None, pages]


def paginate(items: Sequence, page: int, page_size: Optional[int], options: Sequence[int]) -> Tuple[List, Paginacao]:
    size = resolve_page_size(page_size, options)
    pages = total_pages(len(items), size)
    current = clamp_page(page, pages)
    start = (current - 1) * size
    paginacao = Paginacao(
        pagina=current,
        tamanho=size,
        total_paginas=pages,
        tamanhos=list(options),
        botoes=page_buttons(current, pages),
    )
    return list(items[start:start + size]), paginacao


def build_concluidos_view(
    chamados: DataState[List[Chamado]],
    clientes: DataState[List[Cliente]],
    filtros: Optional[ConcluidosFiltros] = None,
    pagina: int = 1,
    tamanho: Optional[int] = None,
    tamanhos: Optional[Sequence[int]] = None,
) -> ConcluidosViewModel:
    filtros = filtros or ConcluidosFiltros()
    tamanhos = list(tamanhos or settings.PAGE_SIZE_OPTIONS)

    roster = sort_clientes(clientes.data)
    clientes_map = clientes_by_id(roster)
    concluidos = with_labels(
        sort_by_data_desc(
            (item for item in chamados.data if item.status == StatusChamado.CONCLUIDO),
            prefer_concluido=True,
        ),
        clientes_map,
    )

    options = build_date_options(concluidos)
    filtros = resolve_filtros(filtros, options)
    filtrados = filter_concluidos(concluidos, filtros, clientes_map)
    exibidos, paginacao = paginate(filtrados, pagina, tamanho, tamanhos)

    return ConcluidosViewModel(
        carregando=combine_loading(chamados, clientes),
        erro=combine_error(chamados, clientes),
        clientes=roster,
        filtros=filtros,
        anos_disponiveis=list(options),
        meses_disponiveis=options.get(filtros.ano, []) if filtros.ano else [],
        grupos=group_by_data(exibidos),
        total_concluidos=len(concluidos),
        total_filtrados=len(filtrados),
        total_exibidos=len(exibidos),
        paginacao=paginacao,
    )
