from painel.models.documents import ChamadoDocument, ClienteDocument, User

__all__ = ["User", "ChamadoDocument", "ClienteDocument"]
