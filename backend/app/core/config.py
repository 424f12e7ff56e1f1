from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Hosting Storefront API"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/storefront.db"

    # Session tokens issued by the authentication layer
    SESSION_JWT_SECRET: str = "change-me-storefront-session-signing-secret"
    SESSION_TOKEN_TTL_HOURS: int = 12

    # Pricing
    CURRENCY: str = "USD"

    # Insert the default plan catalog on startup when the plans table is empty
    SEED_DEFAULT_PLANS: bool = False

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()
