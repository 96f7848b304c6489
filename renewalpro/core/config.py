from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "RenewalPro API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    # Database (Postgres in production, SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./renewalpro_dev.db",
        alias="DATABASE_URL",
    )

    # Backend platform (auth provider admin API, hosted checkout, billing portal).
    # Both are required: the service refuses to boot without them.
    platform_url: str = Field(alias="PLATFORM_URL")
    platform_api_key: str = Field(alias="PLATFORM_API_KEY")
    platform_timeout: int = Field(default=15, alias="PLATFORM_TIMEOUT")

    # Admin record caches (shared between workers through Redis)
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    cache_ttl_seconds: int = Field(default=300, alias="CACHE_TTL_SECONDS")

    # Invitations
    invitation_ttl_days: int = Field(default=7, alias="INVITATION_TTL_DAYS")

    # Agents
    default_agent_price: float = Field(default=199.0, alias="DEFAULT_AGENT_PRICE")

    # Fee schedule month placement (1-12)
    schedule_renewal_month: int = Field(default=3, ge=1, le=12, alias="SCHEDULE_RENEWAL_MONTH")
    schedule_agent_month: int = Field(default=1, ge=1, le=12, alias="SCHEDULE_AGENT_MONTH")
    schedule_director_month: int = Field(
        default=1, ge=1, le=12, alias="SCHEDULE_DIRECTOR_MONTH",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
