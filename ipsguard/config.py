from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./ips.db"
    redis_url: str = "redis://localhost:6379/0"
    environment: str = "development"
    log_level: str = "INFO"

    cors_origins: list[str] = ["http://localhost:5173"]

    ips_enabled: bool = True
    ips_skip_paths: list[str] = ["/health", "/admin", "/ws", "/docs", "/openapi.json"]
    payload_max_length: int = 1000
    seed_default_rules: bool = True

    ip_suspicious_threshold: int = 5
    ip_blocked_threshold: int = 10

    alert_threshold_low: int = 5
    alert_threshold_medium: int = 10
    alert_threshold_high: int = 20
    alert_threshold_critical: int = 50
    alert_sweep_interval_seconds: int = 3600

    bookkeeping_queue_size: int = 10000

    redis_publish_enabled: bool = False
    threat_channel: str = "ips:threats"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
