"""Configuration management for egfs."""

import logging
import os

from dataclasses import dataclass
from pathlib import Path

from utils.dataModels import DEFAULT_PRIMARY_BRANCH

logger = logging.getLogger(__name__)

EGFS_HOME = Path(os.environ.get("EGFS_HOME", Path.home() / ".config" / "egfs"))
CONFIG_FILE = EGFS_HOME / "egfs.conf"

PASSPHRASE_ENV = "EGFS_PASSPHRASE"


@dataclass
class Settings:
    """egfs settings."""

    primary_branch: str = DEFAULT_PRIMARY_BRANCH
    # Empty remote disables pushing.
    remote: str = ""
    git: str = "git"
    author_name: str = "egfs"
    author_email: str = "egfs@localhost"
    host: str = "127.0.0.1"
    port: int = 8000


def _parse_value(value: str) -> str:
    # "value" # comment
    if value[:1] in ("'", '"'):
        quote = value[0]
        end = value.find(quote, 1)
        return value[1:end] if end != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0]
    return value.strip()


def load_settings(config_file: Path | None = None) -> Settings:
    """Load settings from egfs.conf, then apply environment overrides."""
    settings = Settings()
    path = config_file or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _parse_value(value.strip())

            match key:
                case "primary_branch":
                    settings.primary_branch = value
                case "remote":
                    settings.remote = value
                case "git":
                    settings.git = value
                case "author_name":
                    settings.author_name = value
                case "author_email":
                    settings.author_email = value
                case "host":
                    settings.host = value
                case "port":
                    try:
                        settings.port = int(value)
                    except ValueError:
                        logger.warning(f"Invalid port in {path}: {value!r}")
                case _:
                    logger.warning(f"Unknown setting {key!r} in {path}")

    settings.remote = os.environ.get("EGFS_REMOTE", settings.remote)
    settings.primary_branch = os.environ.get("EGFS_PRIMARY_BRANCH", settings.primary_branch)
    settings.git = os.environ.get("EGFS_GIT", settings.git)
    return settings
