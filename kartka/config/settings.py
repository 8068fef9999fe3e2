import os
import tomllib
from pathlib import Path

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kartka.config.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path("~/.config/kartka.toml")
CONFIG_PATH_ENV = "KARTKA_CONFIG"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Settings(BaseSettings):
    """Application configuration loaded from the user's TOML file.

    Keys missing from the file fall back to KARTKA_* environment variables,
    then to the defaults below. Instances are immutable.
    """

    model_config = SettingsConfigDict(env_prefix="KARTKA_", extra="ignore", frozen=True)

    scan_dir: Path
    index_dir: Path
    done_dir: Path | None = None

    log_level: str = "INFO"

    ocr_engine: str = "tesseract"
    ocr_language: str = "eng"
    ocr_dpi: int = 300
    convert_images_to_pdf: bool = False

    storage_backend: str = "rclone"
    storage_timeout_seconds: int = 300
    remote_recursive: bool = False
    rclone_remote: str = "dropbox:"
    rclone_binary: str = "rclone"
    s3_bucket: str = ""
    s3_prefix: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    local_remote_dir: Path | None = None

    search_engine: str = "ripgrep"
    search_binary: str | None = None
    preview_url_template: str | None = None

    hydrate_overwrite: bool = False

    @field_validator("scan_dir", "index_dir", "done_dir", "local_remote_dir")
    @classmethod
    def _existing_absolute_dir(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        path = value.expanduser()
        if not path.is_absolute():
            raise ValueError(f"must be an absolute path, got '{value}'")
        if not path.is_dir():
            raise ValueError(f"directory does not exist: {path}")
        return path

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}', choose from: {list(LOG_LEVELS)}")
        return level

    @field_validator("ocr_dpi", "storage_timeout_seconds")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @model_validator(mode="after")
    def _distinct_directories(self) -> "Settings":
        if self.scan_dir == self.index_dir:
            raise ValueError("scan_dir and index_dir must be different directories")
        if self.done_dir is not None and self.done_dir == self.scan_dir:
            raise ValueError("done_dir must differ from scan_dir")
        return self


def default_config_path() -> Path:
    """Config path from $KARTKA_CONFIG, or ~/.config/kartka.toml."""
    return Path(os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH).expanduser()


def load_settings(config_path: Path | None = None) -> Settings:
    """Read and validate the TOML config file.

    Raises:
        ConfigError: if the file is missing, unreadable, not TOML, or
            fails validation.
    """
    path = (config_path or default_config_path()).expanduser()
    if not path.is_file():
        raise ConfigError(f"no kartka config found at {path}")
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as exc:
        raise ConfigError(f"could not read config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"could not parse config {path}: {exc}") from exc
    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {path}: {exc}") from exc
