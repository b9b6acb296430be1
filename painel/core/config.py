from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Painel de Chamados"
    DATABASE_URL: str = "sqlite:///./painel.db"
    LOG_LEVEL: str = "INFO"

    TOAST_TIMEOUT_SECONDS: float = 3.0
    TOP_CLIENTES_LIMIT: int = 5
    PAGE_SIZE_OPTIONS: List[int] = [10, 20, 50, 100]
    MIN_PASSWORD_LENGTH: int = 6

    class Config:
        env_file = ".env"

settings = Settings()
