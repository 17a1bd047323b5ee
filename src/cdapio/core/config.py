"""Settings schema and loading for cdapio.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example settings.yaml:
    logging:
      level: DEBUG
      json_output: true
    write:
      partitioned: true
      locks_root: /var/run/cdapio/locks
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoggingSettings(BaseModel):
    """Logging output configuration (see core.logging.configure_logging)."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.upper()
        return v


class WriteSettings(BaseModel):
    """Defaults applied to write stages built by WriteAdapter."""

    model_config = {"frozen": True, "extra": "forbid"}

    partitioned: bool = Field(
        default=True,
        description="Partition output across concurrent write tasks",
    )
    locks_root: str | None = Field(
        default=None,
        description="Base directory for per-stage lock directories (see locks_dir_for)",
    )

    @field_validator("locks_root")
    @classmethod
    def _validate_locks_root(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("locks_root cannot be empty")
        return v

    def locks_dir_for(self, stage_name: str) -> str:
        """Return a distinct lock directory for a write stage under locks_root.

        Raises:
            ValueError: If locks_root is not configured.
        """
        if self.locks_root is None:
            raise ValueError("write.locks_root is not configured")
        if not stage_name or "/" in stage_name or stage_name in (".", ".."):
            raise ValueError(f"Invalid stage name for lock directory: {stage_name!r}")
        return str(Path(self.locks_root) / stage_name)


class CdapIOSettings(BaseModel):
    """Top-level cdapio settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    write: WriteSettings = Field(default_factory=WriteSettings)


def load_settings(config_path: Path) -> CdapIOSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (CDAPIO_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: CDAPIO_LOGGING__LEVEL for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated CdapIOSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="CDAPIO",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = {k: _lower_keys(v) for k, v in raw_config.items()}

    return CdapIOSettings(**raw_config)


def _lower_keys(value: object) -> object:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
