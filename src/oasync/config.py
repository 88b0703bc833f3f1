"""Run configuration.

Values are layered, later layers winning: defaults, an optional YAML file
(``oasync.yaml`` in the working directory or ``--config``), ``OASYNC_*``
environment variables, then command line flags.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from oasync.errors import ConfigError, PreconditionError
from oasync.remote.apigee import APIGEE_URL
from oasync.remote.apihub import APIHUB_URL
from oasync.remote.transport import DEFAULT_TIMEOUT

DEFAULT_CONFIG_FILE = "oasync.yaml"
ENV_PREFIX = "OASYNC_"

FLAG_HINTS = {
    "project": "--project YOUR_PROJECT_ID",
    "region": "--region YOUR_REGION",
    "environment": "--environment YOUR_ENVIRONMENT",
}


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project: str | None = None
    region: str | None = None
    token: str | None = None
    api: str | None = None
    root: Path = Path(".")
    environment: str | None = None
    service_account: str | None = None
    apihub_url: str = APIHUB_URL
    apigee_url: str = APIGEE_URL
    timeout: float = DEFAULT_TIMEOUT


def _read_config_file(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _read_env() -> dict:
    values = {}
    for field in Settings.model_fields:
        value = os.getenv(ENV_PREFIX + field.upper())
        if value:
            values[field] = value
    return values


def load_settings(config_path: Path | None = None, **overrides) -> Settings:
    values: dict = {}
    if config_path is not None:
        values.update(_read_config_file(Path(config_path)))
    elif Path(DEFAULT_CONFIG_FILE).is_file():
        values.update(_read_config_file(Path(DEFAULT_CONFIG_FILE)))
    values.update(_read_env())
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def require(settings: Settings, *fields: str) -> None:
    """Raise PreconditionError naming every missing scope parameter."""
    missing = [f for f in fields if not getattr(settings, f)]
    if not missing:
        return
    flags = " ".join(FLAG_HINTS.get(f, f"--{f.replace('_', '-')}") for f in missing)
    names = " and ".join(missing)
    raise PreconditionError(f"No {names} given. Please specify '{flags}'.")
