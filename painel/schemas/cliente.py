from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Cliente(BaseModel):
    id: Optional[str] = None
    nome: str = ""
    observacao: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    ativo: bool = True
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClienteForm(BaseModel):
    nome: str = ""
    telefone: str = ""
    email: str = ""
    observacao: str = ""
