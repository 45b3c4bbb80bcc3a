from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://localhost:5432/contracts"

    @field_validator('DATABASE_URL', mode='before')
    @classmethod
    def convert_database_url(cls, v: str) -> str:
        """Convert postgres:// and postgresql:// to postgresql+asyncpg:// for async support."""
        for scheme in ('postgres://', 'postgresql://'):
            if v and v.startswith(scheme):
                return v.replace(scheme, 'postgresql+asyncpg://', 1)
        return v

    # CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # External schedule store (appointment documents)
    SCHEDULE_API_URL: str = "http://localhost:5001"
    SCHEDULE_API_TIMEOUT: float = 10.0

    # External estimate API (primary estimate source, optional)
    ESTIMATE_API_URL: str | None = None
    ESTIMATE_API_TIMEOUT: float = 10.0

    # Contract numbering
    BUSINESS_TIMEZONE: str = "Asia/Seoul"
    CONTRACT_NUMBER_PREFIX: str = "C"
    ESTIMATE_NUMBER_PREFIX: str = "E"
    FINAL_ESTIMATE_MARKER: str = "-final"

    # Measurement schedules
    DEFAULT_MEASUREMENT_TIME: str = "09:00"
    MEASUREMENT_SCHEDULE_TYPE: str = "실측"
    SCHEDULE_CREATED_BY: str = "current_user"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    DOCS_ENABLED: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def sqlalchemy_echo(self) -> bool:
        """SQL echo only for local debugging, never in production."""
        return self.DEBUG and not self.is_production


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
