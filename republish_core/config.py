"""Layered settings: CLI overrides, environment, user config.toml, defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib

from .npm import TEN_MEGABYTES, NpmClientConfig
from .paths import UserDirs

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"

_ENV_KEY_MAP: dict[str, str] = {
    "npm_executable": "REPUBLISH_NPM",
    "scratch_dir": "REPUBLISH_SCRATCH_DIR",
    "max_buffer_bytes": "REPUBLISH_MAX_BUFFER_BYTES",
    "timeout_seconds": "REPUBLISH_TIMEOUT_SECONDS",
}
_CONFIG_ENV = "REPUBLISH_CONFIG"


@dataclass(frozen=True)
class RepublishSettings:
    npm_executable: str = "npm"
    scratch_dir: Path | None = None
    max_buffer_bytes: int = TEN_MEGABYTES
    timeout_seconds: float | None = None
    already_published_phrases: tuple[str, ...] = ()

    def npm_config(self) -> NpmClientConfig:
        return NpmClientConfig(
            executable=self.npm_executable,
            max_buffer_bytes=self.max_buffer_bytes,
            timeout_seconds=self.timeout_seconds,
        )


def default_config_path(user_dirs: UserDirs | None = None) -> Path:
    """Return the platform-specific default path of the user config file."""

    return (user_dirs or UserDirs()).config_dir() / CONFIG_FILE_NAME


def _load_config_from_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return {}
    section = data.get("republish", data)
    return dict(section) if isinstance(section, dict) else {}


@dataclass
class SettingsResolver:
    """Resolve settings honouring CLI, env, user config and defaults in that order."""

    cli_overrides: Mapping[str, Any] | None = None
    env: Mapping[str, str] | None = None
    user_dirs: UserDirs | None = None
    config_path: Path | None = None
    _file_layer: dict[str, Any] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.cli_overrides = {k: v for k, v in dict(self.cli_overrides or {}).items() if v is not None}
        self.env = self.env if self.env is not None else os.environ
        self.user_dirs = self.user_dirs or UserDirs()

    def resolve(self) -> RepublishSettings:
        defaults = RepublishSettings()
        npm_executable = self._value("npm_executable") or defaults.npm_executable
        scratch_dir = self._value("scratch_dir")
        max_buffer = self._value("max_buffer_bytes")
        timeout = self._value("timeout_seconds")
        phrases = self._file().get("already_published_phrases") or ()
        if isinstance(phrases, str):
            phrases = (phrases,)
        return RepublishSettings(
            npm_executable=str(npm_executable),
            scratch_dir=Path(str(scratch_dir)).expanduser() if scratch_dir else None,
            max_buffer_bytes=int(max_buffer) if max_buffer not in (None, "") else defaults.max_buffer_bytes,
            timeout_seconds=float(timeout) if timeout not in (None, "") else None,
            already_published_phrases=tuple(str(item) for item in phrases if str(item).strip()),
        )

    # ---------- Internal helpers ----------

    def _value(self, key: str) -> Any | None:
        if (value := self.cli_overrides.get(key)) is not None:
            return value
        if value := self.env.get(_ENV_KEY_MAP[key]):
            return value
        return self._file().get(key)

    def _file(self) -> dict[str, Any]:
        if self._file_layer is None:
            self._file_layer = _load_config_from_file(self._config_path())
        return self._file_layer

    def _config_path(self) -> Path:
        if self.config_path is not None:
            return self.config_path
        if override := self.env.get(_CONFIG_ENV):
            return Path(override).expanduser()
        return default_config_path(self.user_dirs)


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> RepublishSettings:
    return SettingsResolver(cli_overrides=cli_overrides, env=env, config_path=config_path).resolve()
