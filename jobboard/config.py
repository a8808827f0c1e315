"""
Configuration management for the Job Board API.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Runtime
    environment: str = "production"  # development | production

    # Database
    mongo_uri: str = "mongodb://localhost:27017"
    database_name: str = "jobboard"
    store_timeout_ms: int = 5000

    # Auth
    secret_key: str = "super_secret_random_key_CHANGE_THIS"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30
    password_reset_expire_minutes: int = 10

    # CORS (comma-separated)
    allowed_origins: str = ""

    # Email
    mail_host: str = "smtp.gmail.com"
    mail_port: int = 587
    mail_username: str = ""
    mail_password: str = ""
    mail_from: str = "noreply@jobboard.dev"
    mail_from_name: str = "JobBoard"
    mail_use_tls: bool = True
    mail_timeout: float = 10.0
    mail_workers: int = 3

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def origins(self) -> list:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
