import logging
from typing import Any, Dict

from painel.backend.document_store import SERVER_TIMESTAMP
from painel.core.errors import FormValidationError
from painel.schemas.chamado import Chamado, StatusChamado, TipoCadastro
from painel.stores.collection import CollectionStore

logger = logging.getLogger(__name__)


def _require_resolucao(resolucao) -> str:
    texto = (resolucao or "").strip()
    if not texto:
        raise FormValidationError("Informe como foi resolvido.", field="resolucao")
    return texto


class ChamadosStore(CollectionStore[Chamado]):
    """Live tickets of the signed-in user plus the ticket write operations."""

    collection = "chamados"
    item_model = Chamado

    def add_open_ticket(self, motivo: str, cliente_id: str, cliente_nome: str, data: str) -> str:
        uid = self._require_uid()
        payload = {
            "motivo": motivo,
            "cliente": cliente_nome,
            "cliente_id": cliente_id,
            "cliente_nome": cliente_nome,
            "data": data,
            "status": StatusChamado.ABERTO.value,
            "resolucao": "",
            "criado_em": SERVER_TIMESTAMP,
            "concluido_em": None,
            "tipo_cadastro": TipoCadastro.NOVO.value,
        }
        return self._documents.add(uid, self.collection, payload)

    def add_resolved_ticket(self, motivo: str, cliente_id: str, cliente_nome: str, data: str, resolucao: str) -> str:
        uid = self._require_uid()
        resolucao = _require_resolucao(resolucao)
        payload = {
            "motivo": motivo,
            "cliente": cliente_nome,
            "cliente_id": cliente_id,
            "cliente_nome": cliente_nome,
            "data": data,
            "status": StatusChamado.CONCLUIDO.value,
            "resolucao": resolucao,
            "criado_em": SERVER_TIMESTAMP,
            "concluido_em": SERVER_TIMESTAMP,
            "tipo_cadastro": TipoCadastro.ANTIGO.value,
        }
        return self._documents.add(uid, self.collection, payload)

    def complete_ticket(self, chamado_id: str, resolucao: str) -> None:
        uid = self._require_uid()
        resolucao = _require_resolucao(resolucao)
        self._documents.update(uid, self.collection, chamado_id, {
            "status": StatusChamado.CONCLUIDO.value,
            "resolucao": resolucao,
            "concluido_em": SERVER_TIMESTAMP,
        })

    def update_ticket(self, chamado_id: str, fields: Dict[str, Any]) -> None:
        uid = self._require_uid()
        atual = next((item for item in self.snapshot() if item.id == chamado_id), None)
        status = fields.get("status", atual.status if atual is not None else None)
        if status == StatusChamado.CONCLUIDO:
            # A completed ticket always carries its resolution.
            resolucao = fields["resolucao"] if "resolucao" in fields else (atual.resolucao if atual else "")
            _require_resolucao(resolucao)
        self._documents.update(uid, self.collection, chamado_id, dict(fields))

    def delete_ticket(self, chamado_id: str) -> None:
        uid = self._require_uid()
        self._documents.delete(uid, self.collection, chamado_id)
        logger.info("Deleted chamado %s", chamado_id)
