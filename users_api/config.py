import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Pick env file by APP_ENV (default dev)
ENV_FILES = {
    "dev": ".env.dev",
    "docker": ".env.docker",
    "test": ".env.test",
}


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings read from environment variables."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "Users API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))
    api_prefix: str = field(default_factory=lambda: os.getenv("API_PREFIX", "/api/v1"))

    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./app.db"))
    sql_echo: bool = field(default_factory=lambda: _env_bool("SQL_ECHO"))
    db_retries: int = field(default_factory=lambda: int(os.getenv("DB_RETRIES", "10")))
    db_retry_delay: float = field(default_factory=lambda: float(os.getenv("DB_RETRY_DELAY", "1.5")))

    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8080")))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str | None = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    cors_origins: list[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))


def get_settings() -> Settings:
    """Load the env file selected by ``APP_ENV`` and build ``Settings``.

    Values already exported in the environment are overridden by the
    env file, matching how the deployment images are configured.
    """
    envfile = ENV_FILES.get(os.getenv("APP_ENV", "dev"), ".env.dev")
    load_dotenv(envfile, override=True)
    return Settings()
