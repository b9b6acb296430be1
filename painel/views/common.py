import re
import unicodedata
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from painel.schemas.chamado import Chamado, ChamadoItemView
from painel.schemas.cliente import Cliente
from painel.schemas.state import DataState, DataStatus

SEM_CLIENTE = "Cliente não informado"
MESES_ABREV = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def today_iso(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()


def is_iso_date(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(ISO_DATE_RE.match(value))


def normalize_text(value: str) -> str:
    """Case and diacritic folding used by every text comparison in the views."""
    decomposed = unicodedata.normalize("NFD", value or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def clientes_by_id(clientes: Iterable[Cliente]) -> Dict[str, Cliente]:
    return {item.id: item for item in clientes if item.id}


def cliente_label(item: Chamado, clientes_map: Dict[str, Cliente], placeholder: str = SEM_CLIENTE) -> str:
    if item.cliente_nome:
        return item.cliente_nome
    if item.cliente_id:
        cliente = clientes_map.get(item.cliente_id)
        if cliente is not None and cliente.nome:
            return cliente.nome
    return item.cliente or placeholder


def with_labels(items: Iterable[Chamado], clientes_map: Dict[str, Cliente]) -> List[ChamadoItemView]:
    return [
        ChamadoItemView(**item.model_dump(), cliente_label=cliente_label(item, clientes_map))
        for item in items
    ]


def sort_clientes(clientes: Iterable[Cliente]) -> List[Cliente]:
    return sorted(clientes, key=lambda item: normalize_text(item.nome or ""))


def _millis(value: Optional[datetime]) -> Optional[float]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def sort_by_data_desc(items: Iterable[Chamado], prefer_concluido: bool = False) -> List[Chamado]:
    """
    Newest `data` first. Ties go to the latest instant: creation for open
    lists, completion for completed lists, each falling back to the other.
    Entries without any instant end their tie group.
    """
    def instant(item: Chamado) -> Optional[float]:
        first, second = (item.concluido_em, item.criado_em) if prefer_concluido else (item.criado_em, item.concluido_em)
        return _millis(first if first is not None else second)

    # Two stable passes: instant descending, then data descending.
    by_instant = sorted(
        items,
        key=lambda item: (instant(item) is None, -(instant(item) or 0.0)),
    )
    return sorted(by_instant, key=lambda item: item.data or "", reverse=True)


def combine_loading(*states: DataState) -> bool:
    return any(state.status == DataStatus.LOADING for state in states)


def combine_error(*states: DataState) -> Optional[str]:
    for state in states:
        if state.error:
            return state.error
    return None
