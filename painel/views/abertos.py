from typing import List, Optional

from pydantic import BaseModel

from painel.schemas.chamado import Chamado, ChamadoItemView, StatusChamado
from painel.schemas.cliente import Cliente
from painel.schemas.state import DataState
from painel.views.common import (
    clientes_by_id,
    combine_error,
    combine_loading,
    sort_by_data_desc,
    sort_clientes,
    with_labels,
)


class AbertosViewModel(BaseModel):
    carregando: bool
    erro: Optional[str] = None
    abertos: List[ChamadoItemView]
    clientes: List[Cliente]


def build_abertos_view(chamados: DataState[List[Chamado]], clientes: DataState[List[Cliente]]) -> AbertosViewModel:
    roster = sort_clientes(clientes.data)
    clientes_map = clientes_by_id(roster)
    abertos = sort_by_data_desc(item for item in chamados.data if item.status == StatusChamado.ABERTO)

    return AbertosViewModel(
        carregando=combine_loading(chamados, clientes),
        erro=combine_error(chamados, clientes),
        abertos=with_labels(abertos, clientes_map),
        clientes=roster,
    )
