from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Collector defaults
    default_max_pages: int = 5  # 0 = no page cap
    default_delay_ms: int = 1000
    default_max_retries: int = 3
    user_agent: str = "iTunes/12.1.2 (Macintosh; OS X 10.10.3) AppleWebKit/0600.5.17"

    # HTTP
    request_timeout_seconds: float = 30.0

    # App Store region markers (US storefront)
    store_front: str = "143441-1,12"
    apple_tz: str = "3600"

    # Logging
    debug: bool = False


settings = Settings()
