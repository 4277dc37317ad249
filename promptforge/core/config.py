from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    API_V1_PREFIX: str = "/api/v1"

    # Auth provider (tokens are issued elsewhere, only verified here)
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Local record store
    LOCAL_STORE_URL: str = "sqlite:///./promptforge.db"

    # Remote mirror (hosted relational backend, REST interface)
    REMOTE_URL: str | None = None
    REMOTE_API_KEY: str | None = None
    REMOTE_TIMEOUT_SECONDS: float = 10.0

    # Refinement stub
    REFINE_DELAY_MIN_MS: int = 1000
    REFINE_DELAY_JITTER_MS: int = 2000
    DEFAULT_LLM_PROVIDER: str = "openai"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
