# classgroups/config/settings.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENV: str = "development"
    # postgresql+asyncpg://user:pass@db:5432/classgroups in production
    DATABASE_URL: str = "sqlite+aiosqlite:///./classgroups.db"
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    MAX_GROUPS_LIMIT: int = 100
    CORS_ALLOW_ORIGINS: str = "*"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]


settings = Settings()
