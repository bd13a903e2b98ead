from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Database - PostgreSQL for production, SQLite for development
    database_url: str = Field(
        default="sqlite:///./palmaire.db",
        alias="DATABASE_URL"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # CORS - Frontend URLs from environment (comma-separated)
    allowed_origins: str = Field(
        default="http://localhost:5000,http://127.0.0.1:5000,http://localhost:5173,http://127.0.0.1:5173",
        alias="ALLOWED_ORIGINS"
    )

    # Rate limiting (in-memory unless REDIS_URL is set)
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    redis_url: str = Field(default="", alias="REDIS_URL")

    # ==============================================
    # Booking rules
    # ==============================================
    default_currency: str = Field(default="USD", alias="DEFAULT_CURRENCY")

    # Holds: soft locks between quote and payment
    hold_default_minutes: int = Field(default=15, alias="HOLD_DEFAULT_MINUTES")
    hold_min_minutes: int = Field(default=5, alias="HOLD_MIN_MINUTES")
    hold_max_minutes: int = Field(default=60, alias="HOLD_MAX_MINUTES")

    # Background sweep of overdue holds (seconds). 0 disables the sweeper,
    # expiry is still evaluated at read time.
    hold_sweep_interval: int = Field(default=0, alias="HOLD_SWEEP_INTERVAL")

    max_advance_days: int = Field(default=730, alias="MAX_ADVANCE_DAYS")
    max_stay_nights: int = Field(default=365, alias="MAX_STAY_NIGHTS")

    # ==============================================
    # Stripe (Server-Side Only!)
    # ==============================================
    stripe_secret_key: str = Field(default="", alias="STRIPE_SECRET_KEY")
    stripe_publishable_key: str = Field(default="", alias="STRIPE_PUBLISHABLE_KEY")
    stripe_webhook_secret: str = Field(default="", alias="STRIPE_WEBHOOK_SECRET")

    # ==============================================
    # CRM (GoHighLevel)
    # ==============================================
    crm_api_key: str = Field(default="", alias="CRM_API_KEY")

    # Endpoints are tried in order until one accepts the request
    crm_base_urls: str = Field(
        default="https://rest.gohighlevel.com/v1,https://services.leadconnectorhq.com,https://api.gohighlevel.com/v1",
        alias="CRM_BASE_URLS"
    )
    crm_timeout_seconds: int = Field(default=10, alias="CRM_TIMEOUT_SECONDS")
    crm_source_name: str = Field(default="Palm Aire Court Website", alias="CRM_SOURCE_NAME")

    @field_validator('database_url')
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgres:// URLs, SQLAlchemy needs postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('hold_min_minutes', 'hold_max_minutes', 'hold_default_minutes')
    @classmethod
    def validate_hold_minutes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Hold durations must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def cors_origins(self) -> List[str]:
        """
        Parse allowed origins from comma-separated string.
        Returns a list suitable for CORSMiddleware.
        """
        origins = []
        for origin in self.allowed_origins.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)

        return origins or ["http://localhost:5173"]

    @property
    def crm_base_url_list(self) -> List[str]:
        return [url.strip().rstrip("/") for url in self.crm_base_urls.split(",") if url.strip()]

    @property
    def crm_enabled(self) -> bool:
        return bool(self.crm_api_key)

    @property
    def stripe_enabled(self) -> bool:
        return bool(self.stripe_secret_key)

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Initialize settings on module load
settings = get_settings()
