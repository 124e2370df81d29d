"""Typed configuration loading and access.

The credentials file is the one written by funcraft (`fun config`), usually
found at ~/.fcli/config.yaml. It is parsed into a frozen dataclass so the rest
of the tool never touches raw YAML.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str

__all__ = [
    "FcConfig",
    "ConfigError",
    "default_config_path",
    "extract_region",
    "load_config",
    "DEFAULT_TIMEOUT_SECONDS",
]

DEFAULT_TIMEOUT_SECONDS = 60

# https://<account-id>.<region>.fc.aliyuncs.com
_ENDPOINT_REGION_RE = re.compile(r"^https?://[^.]+\.([^.]+)\..+$")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class FcConfig:
    """Function Compute credentials and transport settings."""

    endpoint: str
    access_key_id: str
    access_key_secret: str
    security_token: str | None = None
    debug: bool = False
    timeout: int = DEFAULT_TIMEOUT_SECONDS

    @property
    def account_id(self) -> str | None:
        host = self.endpoint.split("://", 1)[-1]
        account = host.split(".", 1)[0]
        return account or None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> FcConfig:
        """Create FcConfig from a mapping (parsed YAML).

        Raises:
            ValueError: If a required key is missing.
        """
        endpoint = get_str(data, "endpoint")
        key_id = get_str(data, "access_key_id")
        key_secret = get_str(data, "access_key_secret")
        missing = [
            name
            for name, value in (
                ("endpoint", endpoint),
                ("access_key_id", key_id),
                ("access_key_secret", key_secret),
            )
            if value is None
        ]
        if missing or endpoint is None or key_id is None or key_secret is None:
            raise ValueError(f"missing required keys: {', '.join(missing)}")

        return cls(
            endpoint=endpoint,
            access_key_id=key_id,
            access_key_secret=key_secret,
            security_token=get_str(data, "security_token"),
            debug=get_bool(data, "debug") or False,
            timeout=get_int(data, "timeout") or DEFAULT_TIMEOUT_SECONDS,
        )


def default_config_path() -> Path:
    return Path.home() / ".fcli" / "config.yaml"


def extract_region(endpoint: str) -> str | None:
    """Return the region id embedded in a Function Compute endpoint, if any."""
    m = _ENDPOINT_REGION_RE.match(endpoint)
    if m is None:
        return None
    return m.group(1)


def _parse_yaml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a YAML file, handling read and parse errors."""
    try:
        content = path.read_text(encoding="utf-8")
        data = as_str_dict(yaml.safe_load(content))
        if data is None:
            return Err(ConfigError("Config root must be a YAML mapping", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except yaml.YAMLError as e:
        return Err(ConfigError(f"Invalid YAML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[FcConfig, ConfigError]:
    """Load and parse the credentials file.

    Args:
        path: Path to config.yaml

    Returns:
        Ok(FcConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_yaml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(FcConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
