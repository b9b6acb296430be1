from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StatusChamado(str, Enum):
    ABERTO = "aberto"
    CONCLUIDO = "concluido"


class TipoCadastro(str, Enum):
    NOVO = "novo"
    ANTIGO = "antigo"


class Chamado(BaseModel):
    id: Optional[str] = None
    motivo: str = ""
    cliente: Optional[str] = Field(None, description="Legacy denormalized client name.")
    cliente_id: Optional[str] = None
    cliente_nome: Optional[str] = None
    descricao: Optional[str] = None
    data: str = Field("", description="Calendar date as YYYY-MM-DD.")
    status: StatusChamado = StatusChamado.ABERTO
    resolucao: str = ""
    criado_em: Optional[datetime] = None
    concluido_em: Optional[datetime] = None
    tipo_cadastro: TipoCadastro = TipoCadastro.NOVO

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class ChamadoCreate(BaseModel):
    modo: TipoCadastro = Field(TipoCadastro.NOVO, description="novo opens the ticket, antigo records it already resolved.")
    motivo: str = ""
    cliente_id: str = ""
    data: Optional[str] = Field(None, description="Defaults to today.")
    resolucao: str = ""


class ChamadoUpdate(BaseModel):
    motivo: str = ""
    cliente_id: str = ""
    cliente_nome_original: str = Field("", description="Label shown when the edit started; kept if no client is picked.")
    data: str = ""
    resolucao: str = ""


class FinalizarRequest(BaseModel):
    resolucao: str = ""


class ChamadoItemView(Chamado):
    cliente_label: str
