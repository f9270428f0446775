from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    env: str = "development"
    log_level: str = "info"

    fetch_timeout_ms: int = 20000
    fetch_user_agent: str = "Requestable/1.0"
    fetch_follow_redirects: bool = True
    fetch_proxy_url: str | None = None
    fetch_wait_timeout_ms: int = 0

    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
