from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    PROJECT_NAME: str = "Organization Directory API"
    DATABASE_URL: str = Field(..., description="Async SQLAlchemy connection string")
    # если ключ не задан, авторизация отключена
    API_KEY: Optional[str] = Field(None, description="Static API Key for security")
    API_PREFIX: str = "/api"

    # дебаг режим (эхо sql)
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # залить демо-данные в пустую базу при старте
    SEED_DEMO_DATA: bool = False

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
