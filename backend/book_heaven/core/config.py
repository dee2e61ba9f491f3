from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "book_heaven"
    environment: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    database_url: str = "sqlite:///./book_heaven.db"

    redis_url: str = "redis://redis:6379/0"
    rq_default_timeout: int = 300
    rate_limit_per_min: int = 60

    # "queue" hands notifications to the RQ worker, "inline" writes them in the request
    notification_mode: str = "queue"
    offer_auto_reject_on_accept: bool = True

    progress_completion_threshold: float = 95.0
    # "last_write_wins" or "version_checked"
    progress_write_policy: str = "last_write_wins"

    log_level: str = "INFO"


settings = Settings()
