"""Configuration management using Pydantic.

Provides:
- Typed configuration models with validation
- YAML file loading with defaults
- Environment variable overrides (IPTCTL_*)
- Configuration initialization and display
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from iptctl.core.exceptions import ConfigurationError


# Default configuration paths
DEFAULT_CONFIG_PATH = Path("/etc/iptctl/config.yaml")
DEFAULT_LOCK_PATH = Path("/var/run/xtables_old.lock")
DEFAULT_LOCK_RETRIES = 10
DEFAULT_LOCK_RETRY_DELAY = 0.01
DEFAULT_SHELL = "/bin/sh"

VALID_FAMILIES = ("ipv4", "ipv6")


class ToolConfig(BaseModel):
    """Which firewall binary family to drive."""

    family: str = "ipv4"
    shell: str = DEFAULT_SHELL

    @field_validator("family")
    @classmethod
    def validate_family(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_FAMILIES:
            raise ValueError(f"family must be one of: {list(VALID_FAMILIES)}")
        return v


class LockConfig(BaseModel):
    """Fallback file lock used when the tool has no --wait flag."""

    path: Path = DEFAULT_LOCK_PATH
    # Retries after the first attempt, so attempts = retries + 1
    retries: int = DEFAULT_LOCK_RETRIES
    retry_delay: float = DEFAULT_LOCK_RETRY_DELAY

    @field_validator("retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retries must be >= 0")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if not 0 <= v <= 5:
            raise ValueError("retry_delay must be between 0 and 5 seconds")
        return v


class IptctlConfig(BaseModel):
    """Root configuration model, loaded from /etc/iptctl/config.yaml."""

    tool: ToolConfig = Field(default_factory=ToolConfig)
    lock: LockConfig = Field(default_factory=LockConfig)

    @classmethod
    def load(cls, path: Path) -> "IptctlConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If file not found or invalid
        """
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                hint="Create it with: iptctl config init",
            )

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {path}",
                details=[str(e)],
            ) from e
        except PermissionError:
            raise ConfigurationError(
                f"Cannot read configuration file: {path}",
                hint="Check file permissions or run with sudo",
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}",
            )

        try:
            return cls(**data)
        except Exception as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                details=[str(e)],
            ) from e

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> "IptctlConfig":
        """Load configuration, falling back to defaults if file doesn't exist."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        if path.exists():
            return cls.load(path)
        return cls()

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        data = self.model_dump(mode="json", exclude_none=True)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)


class EnvOverrides(BaseSettings):
    """Settings taken from the environment, applied over the YAML file."""

    model_config = SettingsConfigDict(env_prefix="IPTCTL_", extra="ignore")

    family: Optional[str] = None
    shell: Optional[str] = None
    lock_path: Optional[Path] = None
    lock_retries: Optional[int] = None
    lock_retry_delay: Optional[float] = None


class AppConfig:
    """Configuration file merged with environment overrides.

    This is the interface the rest of the package reads settings through.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        config: Optional[IptctlConfig] = None,
        overrides: Optional[EnvOverrides] = None,
    ) -> None:
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        base = config or IptctlConfig.load_or_default(self.config_path)
        self._config = _apply_overrides(base, overrides or EnvOverrides())

    @property
    def config(self) -> IptctlConfig:
        return self._config

    @property
    def tool(self) -> ToolConfig:
        return self._config.tool

    @property
    def lock(self) -> LockConfig:
        return self._config.lock


def _apply_overrides(config: IptctlConfig, env: EnvOverrides) -> IptctlConfig:
    """Return a copy of config with every set environment value applied."""
    tool = config.tool.model_dump()
    lock = config.lock.model_dump()

    if env.family is not None:
        tool["family"] = env.family
    if env.shell is not None:
        tool["shell"] = env.shell
    if env.lock_path is not None:
        lock["path"] = env.lock_path
    if env.lock_retries is not None:
        lock["retries"] = env.lock_retries
    if env.lock_retry_delay is not None:
        lock["retry_delay"] = env.lock_retry_delay

    try:
        return IptctlConfig(tool=ToolConfig(**tool), lock=LockConfig(**lock))
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid IPTCTL_* environment override: {e}",
            details=[str(e)],
        ) from e


def get_example_config() -> str:
    """Generate example configuration file content."""
    return f"""# iptctl configuration
# Every value may be overridden with an IPTCTL_* environment variable
# (IPTCTL_FAMILY, IPTCTL_SHELL, IPTCTL_LOCK_PATH, IPTCTL_LOCK_RETRIES,
# IPTCTL_LOCK_RETRY_DELAY).

tool:
  family: ipv4  # ipv4 (iptables) or ipv6 (ip6tables)
  shell: {DEFAULT_SHELL}  # used for save/restore redirection

# Only used when the installed iptables predates --wait (<= 1.4.19)
lock:
  path: {DEFAULT_LOCK_PATH}
  retries: {DEFAULT_LOCK_RETRIES}  # attempts = retries + 1
  retry_delay: {DEFAULT_LOCK_RETRY_DELAY}  # seconds between attempts
"""


def init_config(path: Path, force: bool = False) -> None:
    """Initialize a new configuration file.

    Raises:
        ConfigurationError: If file exists and force is False
    """
    if path.exists() and not force:
        raise ConfigurationError(
            f"Configuration file already exists: {path}",
            hint="Use --force to overwrite",
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(get_example_config())
    os.chmod(path, 0o644)
