"""Configuration read from the environment and an optional dotenv file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from arbwatch.common.errors import ConfigError

_MISSING = object()


class Config:
    """Case-insensitive key/value configuration."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = {str(key).lower(): value for key, value in (values or {}).items()}

    def __repr__(self) -> str:
        return f"Config({len(self._values)} keys)"

    def _lookup(self, key: str, default: Any) -> Any:
        try:
            return self._values[key.lower()]
        except KeyError:
            if default is _MISSING:
                raise ConfigError(f'configuration property "{key}" not found') from None
            return default

    def get_string(self, key: str, default: Any = _MISSING) -> str:
        """Value of ``key`` as a string, or ``default`` when it is absent."""
        value = self._lookup(key, default)
        return value if isinstance(value, str) else str(value)

    def get_int(self, key: str, default: Any = _MISSING) -> int:
        """Value of ``key`` as an integer, or ``default`` when it is absent."""
        value = self._lookup(key, default)
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            raise ConfigError(
                f'invalid type for "{key}": expected an integer, found {value!r}'
            ) from None


def create_config(env_path: str | os.PathLike[str]) -> Config:
    """Load variables from ``env_path`` if it exists, then read the environment.

    Values in the file override those already set in the environment.
    """
    path = Path(env_path)
    if path.is_file():
        load_dotenv(path, override=True)
    return Config(os.environ)