from typing import List, Optional

from pydantic import BaseModel

from painel.schemas.cliente import Cliente
from painel.schemas.state import DataState
from painel.views.common import combine_loading, sort_clientes


class ClientesViewModel(BaseModel):
    carregando: bool
    erro: Optional[str] = None
    clientes: List[Cliente]


def build_clientes_view(clientes: DataState[List[Cliente]]) -> ClientesViewModel:
    return ClientesViewModel(
        carregando=combine_loading(clientes),
        erro=clientes.error,
        clientes=sort_clientes(clientes.data),
    )
