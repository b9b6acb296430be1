from typing import Any, Dict, Optional

from painel.backend.document_store import SERVER_TIMESTAMP
from painel.schemas.cliente import Cliente
from painel.stores.collection import CollectionStore


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class ClientesStore(CollectionStore[Cliente]):
    collection = "clientes"
    item_model = Cliente

    def add_cliente(self, nome: str, telefone: str = "", email: str = "", observacao: str = "") -> str:
        uid = self._require_uid()
        payload = {
            "nome": nome.strip(),
            "observacao": _clean(observacao),
            "telefone": _clean(telefone),
            "email": _clean(email),
            "ativo": True,
            "criado_em": SERVER_TIMESTAMP,
            "atualizado_em": SERVER_TIMESTAMP,
        }
        return self._documents.add(uid, self.collection, payload)

    def update_cliente(self, cliente_id: str, fields: Dict[str, Any]) -> None:
        uid = self._require_uid()
        self._documents.update(uid, self.collection, cliente_id, {
            **fields,
            "atualizado_em": SERVER_TIMESTAMP,
        })

    def delete_cliente(self, cliente_id: str) -> None:
        uid = self._require_uid()
        self._documents.delete(uid, self.collection, cliente_id)

    def nome_by_id(self, cliente_id: str) -> str:
        if not cliente_id:
            return ""
        for item in self.snapshot():
            if item.id == cliente_id:
                return item.nome
        return ""
