from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Upstream catalog API
    API_BASE_URL: str = "https://omnimart-api.onrender.com"
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Cache
    CACHE_TTL_SECONDS: int = 300  # 5 minutes

    # Discounts synthesized from inline product data
    DEFAULT_DISCOUNT_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
