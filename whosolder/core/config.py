import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

DEV_GAME_SECRET = "dev-secret"


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Secrets
    GAME_SECRET: str = DEV_GAME_SECRET
    SUBSCRIPTION_SALT: Optional[str] = None

    # Database
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None
    STORAGE_BACKEND: str = "auto"  # auto | memory | none

    # Game
    PEOPLE_DATA_PATH: Optional[str] = None
    MATCHUP_COUNT: int = 10
    CHALLENGE_CACHE_SECONDS: int = 300

    # Score submission throttle
    RATE_LIMIT_MAX: int = 20
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # HTTP
    CORS_ALLOW_ORIGINS: str = "http://localhost:4321"  # comma-separated

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def subscription_secret(self) -> str:
        return self.SUBSCRIPTION_SALT or self.GAME_SECRET

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]


settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate recommended configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("whosolder")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    missing = []
    if not getattr(cfg, "DATABASE_URL", None):
        missing.append("DATABASE_URL")
    if getattr(cfg, "GAME_SECRET", None) in (None, "", DEV_GAME_SECRET):
        missing.append("GAME_SECRET")

    if missing:
        message = f"Missing recommended configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
