"""
Application configuration with environment-specific settings.

Supported environment files (loaded in order of precedence):
1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
2. .env (fallback)

The sync engine itself only needs to know which data environments exist,
which store backend holds them, and how aggressively to copy. Everything
else here is service plumbing.
"""
import os
import logging
from pathlib import Path
from typing import Literal
from pydantic_settings import BaseSettings
from pydantic import ConfigDict

# Get the project root directory (3 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "sql")


class Settings(BaseSettings):
    """Application settings with environment-specific configuration."""

    # Deployment environment of this service (not a data environment)
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "SyncEnv API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Store
    STORE_BACKEND: str = "memory"  # "memory" or "sql"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./syncenv.db")

    # Data environments - comma-separated for env var parsing
    SYNC_ENVIRONMENTS: str = "Production,Local"
    DEFAULT_SOURCE_ENVIRONMENT: str = "Production"
    DEFAULT_TARGET_ENVIRONMENT: str = "Local"

    # Sync behaviour
    SYNC_ACTOR: str = "syncenv-server"
    SYNC_MAX_CONCURRENCY: int = 8
    FIND_GAMES_LIMIT: int = 10

    # Seed empty environments with sample data on startup
    SEED_SAMPLE_DATA: bool = True

    # CORS - comma-separated string for env var parsing
    CORS_ORIGINS_STR: str = ""

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Allowed CORS origins; localhost defaults outside production."""
        if self.CORS_ORIGINS_STR:
            origins = [o.strip() for o in self.CORS_ORIGINS_STR.split(",") if o.strip()]
            if self.is_production() and "*" in origins:
                logger.warning("Wildcard CORS origins (*) are not allowed in production")
                return [o for o in origins if o != "*"]
            return origins

        if self.is_production():
            return []
        return [
            "http://localhost:3000",
            "http://localhost:8001",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:8001",
        ]

    @property
    def environments(self) -> list[str]:
        """Configured data environment names, in declaration order."""
        names = []
        for name in self.SYNC_ENVIRONMENTS.split(","):
            name = name.strip()
            if name and name not in names:
                names.append(name)
        return names

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    def validate_settings(self) -> list[str]:
        """
        Validate settings that pydantic cannot check on its own.

        Returns:
            List of problems (empty if the configuration is usable)
        """
        problems = []

        if self.STORE_BACKEND not in STORE_BACKENDS:
            problems.append(
                f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got '{self.STORE_BACKEND}'"
            )

        if self.STORE_BACKEND == "sql" and not self.DATABASE_URL:
            problems.append("DATABASE_URL is required when STORE_BACKEND=sql")

        environments = self.environments
        if not environments:
            problems.append("SYNC_ENVIRONMENTS must name at least one environment")

        for key in ("DEFAULT_SOURCE_ENVIRONMENT", "DEFAULT_TARGET_ENVIRONMENT"):
            value = getattr(self, key)
            if environments and value not in environments:
                problems.append(f"{key}='{value}' is not listed in SYNC_ENVIRONMENTS")

        if self.SYNC_MAX_CONCURRENCY < 1:
            problems.append("SYNC_MAX_CONCURRENCY must be at least 1")

        return problems


def _load_env_file() -> Path:
    """
    Pick the environment file based on the ENVIRONMENT variable.

    Loads in order of precedence:
    1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
    2. .env (fallback)
    """
    environment = os.getenv("ENVIRONMENT", "development")

    env_file = PROJECT_ROOT / f".env.{environment}"
    if env_file.exists():
        logger.info(f"Loading environment from {env_file.name}")
        return env_file

    default_env = PROJECT_ROOT / ".env"
    if default_env.exists():
        logger.info(f"Loading environment from .env (environment: {environment})")
    else:
        logger.debug(f"No environment file found for '{environment}', using defaults")
    return default_env


_env_file = _load_env_file()


class _SettingsWithEnvFile(Settings):
    model_config = ConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = _SettingsWithEnvFile()

problems = settings.validate_settings()
if problems:
    logger.warning(f"Configuration problems for {settings.ENVIRONMENT}: {'; '.join(problems)}")
    if settings.is_production():
        raise ValueError(f"Cannot start in production with invalid configuration: {'; '.join(problems)}")
