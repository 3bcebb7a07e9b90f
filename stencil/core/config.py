"""Stencil runtime configuration and settings.

Settings are layered: built-in defaults, then an optional YAML file, then
environment variables. The resulting ``StencilConfig`` is passed explicitly
to the components that need it.
"""
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from stencil.core.errors import ConfigError
from stencil.models.repository import Signature

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "stencil" / "config.yml"


def _default_cache_dir() -> Path:
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
    return base / "stencil"


@dataclass
class StencilConfig:
    """Runtime configuration for Stencil operations.

    Attributes:
        cache_dir: Folder holding working copies of remote templates
        default_revision: Revision used when none is given (remote default branch)
        remote_name: Name of the remote templates are fetched from
        merge_author_name: Name recorded on merge commits
        merge_author_email: Email recorded on merge commits
        log_file: Optional path for file logging
    """

    cache_dir: Path = field(default_factory=_default_cache_dir)
    default_revision: str = "HEAD"
    remote_name: str = "origin"
    merge_author_name: str = "stencil"
    merge_author_email: str = "stencil@localhost"
    log_file: Optional[str] = None

    @property
    def signature(self) -> Signature:
        return Signature(name=self.merge_author_name, email=self.merge_author_email)

    def with_env(self) -> "StencilConfig":
        """Return a copy with environment variable overrides applied.

        Environment variables:
            STENCIL_CACHE_DIR: Template cache folder
            STENCIL_DEFAULT_REVISION: Revision used when none is given
            STENCIL_MERGE_AUTHOR_NAME: Merge commit author name
            STENCIL_MERGE_AUTHOR_EMAIL: Merge commit author email
            STENCIL_LOG_FILE: Log file path
        """
        cache_dir = os.getenv("STENCIL_CACHE_DIR")
        return replace(
            self,
            cache_dir=Path(cache_dir).expanduser() if cache_dir else self.cache_dir,
            default_revision=os.getenv("STENCIL_DEFAULT_REVISION", self.default_revision),
            merge_author_name=os.getenv("STENCIL_MERGE_AUTHOR_NAME", self.merge_author_name),
            merge_author_email=os.getenv("STENCIL_MERGE_AUTHOR_EMAIL", self.merge_author_email),
            log_file=os.getenv("STENCIL_LOG_FILE", self.log_file),
        )

    @classmethod
    def from_env(cls) -> "StencilConfig":
        """Create config from defaults and environment variables only."""
        return cls().with_env()


class ConfigFile(BaseModel):
    """Schema of the optional YAML configuration file."""

    model_config = ConfigDict(extra='forbid')

    cache_dir: Optional[str] = None
    default_revision: Optional[str] = None
    remote_name: Optional[str] = None
    merge_author_name: Optional[str] = None
    merge_author_email: Optional[str] = None
    log_file: Optional[str] = None

    @field_validator('default_revision', 'remote_name', 'merge_author_name')
    @classmethod
    def validate_not_blank(cls, v):
        """Reject empty strings for values git needs."""
        if v is not None and not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator('merge_author_email')
    @classmethod
    def validate_email(cls, v):
        """Validate the merge author email looks like an address."""
        if v is not None and '@' not in v:
            raise ValueError(f"Merge author email must contain '@'. Got: {v}")
        return v


def _find_config_file(config_path: Optional[str]) -> Optional[Path]:
    if config_path:
        return Path(config_path)

    if env_config := os.environ.get("STENCIL_CONFIG"):
        return Path(env_config)

    if DEFAULT_CONFIG_FILE.exists():
        return DEFAULT_CONFIG_FILE

    return None


def load_config(config_path: Optional[str] = None) -> StencilConfig:
    """Load Stencil configuration.

    Args:
        config_path: Explicit YAML file. When omitted, ``$STENCIL_CONFIG`` and
            then ``~/.config/stencil/config.yml`` are tried; a missing default
            file is not an error.

    Returns:
        StencilConfig with file values and environment overrides applied

    Raises:
        ConfigError: If an explicitly named file is missing or the file is invalid
    """
    config = StencilConfig()
    path = _find_config_file(config_path)

    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        try:
            parsed = ConfigFile(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        values = parsed.model_dump(exclude_none=True)
        if 'cache_dir' in values:
            values['cache_dir'] = Path(values['cache_dir']).expanduser()
        config = replace(config, **values)

    return config.with_env()
