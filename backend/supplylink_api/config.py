"""Application settings and configuration helpers."""
from functools import lru_cache
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(
        default="sqlite+aiosqlite:///./supplylink.db", alias="DATABASE_URL"
    )
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    # Seven days, matching the token horizon clients expect
    access_token_expires_minutes: int = Field(default=60 * 24 * 7)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    media_dir: str = Field(default="./media", alias="MEDIA_DIR")
    media_url: str = Field(default="/media", alias="MEDIA_URL")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    allow_admin_signup: bool = Field(default=True, alias="ALLOW_ADMIN_SIGNUP")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    defaults = Settings.model_fields
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults["database_url"].default),
        secret_key=os.getenv("SECRET_KEY", defaults["secret_key"].default),
        access_token_expires_minutes=int(
            os.getenv(
                "ACCESS_TOKEN_EXPIRES_MINUTES",
                defaults["access_token_expires_minutes"].default,
            )
        ),
        log_level=os.getenv("LOG_LEVEL", defaults["log_level"].default),
        media_dir=os.getenv("MEDIA_DIR", defaults["media_dir"].default),
        media_url=os.getenv("MEDIA_URL", defaults["media_url"].default),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        allow_admin_signup=_env_flag("ALLOW_ADMIN_SIGNUP", True),
    )
