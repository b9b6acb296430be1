from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DataStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class DataState(BaseModel, Generic[T]):
    """
    Uniform loading/ready/error wrapper for any live-derived collection.
    """
    status: DataStatus = DataStatus.LOADING
    data: T
    error: Optional[str] = None

    @classmethod
    def loading(cls, data):
        return cls(status=DataStatus.LOADING, data=data, error=None)

    @classmethod
    def ready(cls, data):
        return cls(status=DataStatus.READY, data=data, error=None)

    @classmethod
    def failed(cls, data, error: str):
        return cls(status=DataStatus.ERROR, data=data, error=error)


class SessionStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    ERROR = "error"


class AuthUser(BaseModel):
    uid: str
    email: str


class SessionState(BaseModel):
    status: SessionStatus = SessionStatus.LOADING
    user: Optional[AuthUser] = None
    error: Optional[str] = None


class ToastType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class ToastMessage(BaseModel):
    message: str
    type: ToastType = ToastType.SUCCESS


class SignUpRequest(BaseModel):
    email: str = ""
    senha: str = ""
    confirmar: str = ""
    return_url: Optional[str] = Field(None, description="Where to go after sign-up.")


class LoginRequest(BaseModel):
    email: str = ""
    senha: str = ""
    return_url: Optional[str] = Field(None, description="Where to go after sign-in.")


class AuthResponse(BaseModel):
    session: SessionState
    redirect_to: str


class IdResponse(BaseModel):
    id: str
