from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./lexdocs.db"
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Базовый адрес приложения для ссылок на общий доступ
    app_url: str = "http://localhost:3001"
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    sql_echo: bool = False

    # 32 байта -> 64 hex-символа, 256 бит энтропии
    share_token_bytes: int = 32

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
