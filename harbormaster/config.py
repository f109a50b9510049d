"""Runtime configuration for harbormaster."""

import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from harbormaster.exceptions import ConfigurationError
from harbormaster.logging_config import get_logger
from harbormaster.models.cluster import Scheduler

logger = get_logger(__name__)

CONFIG_ENV_VAR = "HARBORMASTER_CONFIG"


class HarbormasterConfig(BaseModel):
    """Deployment configuration: target account/region and request limits."""

    region: str | None = None
    profile: str | None = None
    schedulers: list[Scheduler] = Field(default_factory=lambda: [Scheduler.ECS, Scheduler.EKS])
    request_timeout: float = 30.0
    connect_timeout: float = 5.0
    log_level: str = "INFO"

    @field_validator("schedulers")
    @classmethod
    def validate_schedulers(cls, v: list[Scheduler]) -> list[Scheduler]:
        """Validate at least one scheduler is enabled and none repeats."""
        if not v:
            raise ValueError("schedulers cannot be empty")
        if len(set(v)) != len(v):
            raise ValueError(f"schedulers must not repeat, got {[s.value for s in v]}")
        return v

    @field_validator("request_timeout", "connect_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeouts are positive."""
        if v <= 0:
            raise ValueError(f"timeout must be positive, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is a standard logging level name."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got '{v}'")
        return v.upper()

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        import yaml

        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str | Path) -> "HarbormasterConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))


def load_config(path: str | Path | None = None) -> HarbormasterConfig:
    """Load configuration from a file, the environment, or defaults.

    Args:
        path: Explicit config file. Falls back to $HARBORMASTER_CONFIG.

    Returns:
        The loaded configuration (defaults when no file is named)

    Raises:
        ConfigurationError: If the named file is missing or invalid
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        logger.debug("No config file given, using defaults")
        return HarbormasterConfig()

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}",
            f"Create the file or unset {CONFIG_ENV_VAR}",
        )

    logger.debug(f"Loading config from {config_path}")
    try:
        return HarbormasterConfig.load(config_path)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid config file: {config_path}", problems)
    except (OSError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Failed to read config file: {config_path}", str(e))
