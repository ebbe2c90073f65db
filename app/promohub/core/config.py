from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "PROMOHUB"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DEFAULT_TENANT_ID: str = "default"
    PROMOTIONS_DEFAULT_PAGE_SIZE: int = 20
    PROMOTIONS_MAX_PAGE_SIZE: int = 100
    PROMOTIONS_CACHE_ENABLED: bool = True
    PROMOTIONS_CACHE_TTL_SEARCH_SEC: float = 10.0
    PROMOTIONS_CACHE_TTL_ACTIVE_SEC: float = 30.0
    PROMOTIONS_CACHE_TTL_DEFAULT_SEC: float = 20.0
    CAROUSEL_AUDIT_MAX_ENTRIES: int = 200
    APPROVAL_FALLBACK_ACTOR: str = "unknown"
    METRICS_ENABLED: bool = True

settings = Settings()
