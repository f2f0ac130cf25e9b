import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so env vars are available for YAML interpolation
_env_file = Path(__file__).parent.parent / ".env"
load_dotenv(_env_file)

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Return the app.yaml path, overridable with INKPOST_CONFIG."""
    override = os.environ.get("INKPOST_CONFIG")
    if override:
        return Path(override)
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./inkpost.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    pool_pre_ping: bool = True
    echo: bool = False
    create_all: bool = False


class SessionConfig(BaseModel):
    """Cookie session configuration."""

    max_age: int = 60 * 60 * 24 * 7
    cookie_domain: str | None = None


class CloudinaryConfig(BaseModel):
    """Credentials for the Cloudinary image host."""

    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""


class LocalMediaConfig(BaseModel):
    """Filesystem media store, mainly for development."""

    path: str = "./media"
    public_base_url: str = "http://localhost:8000/media"


class MediaConfig(BaseModel):
    """Remote object store configuration.

    ``backend`` is ``cloudinary``, ``local``, or a ``module:ClassName``
    spec for a custom store.
    """

    backend: str = "cloudinary"
    folder: str = "inkpost/assets"
    timeout: float = 30.0
    max_upload_size: int = 5 * 1024 * 1024
    cloudinary: CloudinaryConfig = CloudinaryConfig()
    local: LocalMediaConfig = LocalMediaConfig()


class CommentsConfig(BaseModel):
    """Comment policy.

    With ``auto_approve`` off, comments from non-staff start as ``pending``.
    """

    auto_approve: bool = True
    max_length: int = 5000


class LoggingConfig(BaseModel):
    level: str = "INFO"


class LogfireConfig(BaseModel):
    """Pydantic Logfire observability configuration."""

    enabled: bool = False
    service_name: str = "inkpost"
    environment: str | None = None
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    debug: bool = False
    secret_key: str

    # Sections (loaded from app.yaml)
    db: DatabaseConfig = DatabaseConfig()
    session: SessionConfig = SessionConfig()
    media: MediaConfig = MediaConfig()
    comments: CommentsConfig = CommentsConfig()
    logging: LoggingConfig = LoggingConfig()
    logfire: LogfireConfig = LogfireConfig()


_SECTIONS: dict[str, type[BaseModel]] = {
    "db": DatabaseConfig,
    "session": SessionConfig,
    "media": MediaConfig,
    "comments": CommentsConfig,
    "logging": LoggingConfig,
    "logfire": LogfireConfig,
}


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    updates = {}
    for section, model in _SECTIONS.items():
        if section in app_config:
            updates[section] = model(**app_config[section])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings
