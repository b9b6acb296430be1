from typing import Optional


class PainelError(Exception):
    """Base class for errors raised by the dashboard layers."""


class AuthRequiredError(PainelError):
    """Raised before any backend call when no session user id is available."""

    def __init__(self, message: str = "Faça login."):
        super().__init__(message)
        self.message = message


class FormValidationError(PainelError):
    """A required field is missing or malformed. Never reaches the backend."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class AuthProviderError(PainelError):
    """Failure reported by the auth provider, tagged with a provider error code."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class BackendError(PainelError):
    """A document write, update or delete failed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DocumentNotFoundError(BackendError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Documento {collection}/{doc_id} não encontrado.")
        self.collection = collection
        self.doc_id = doc_id
