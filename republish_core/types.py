"""Republish datatypes and request normalisation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

MARKER_FIELD = "uniqePublishIdentifier"
PACKAGE_SUBDIR = "package"
MANIFEST_NAME = "package.json"


@dataclass(frozen=True)
class RegistryConfig:
    """Source and target registry URLs.

    Supplying only one side makes both sides use it. Leaving both empty lets
    npm fall back to its own configured registry.
    """

    source: str | None = None
    target: str | None = None

    def __post_init__(self) -> None:
        source = _clean_url(self.source)
        target = _clean_url(self.target)
        object.__setattr__(self, "source", source or target)
        object.__setattr__(self, "target", target or source)

    @classmethod
    def single(cls, url: str) -> "RegistryConfig":
        return cls(source=url, target=url)

    @classmethod
    def coerce(cls, value: "RegistryConfig | str | None") -> "RegistryConfig":
        if value is None:
            return cls()
        if isinstance(value, RegistryConfig):
            return value
        return cls.single(value)

    @property
    def redirected(self) -> bool:
        return self.target is not None


@dataclass(frozen=True)
class RepublishRequest:
    origin: str
    target_version: str
    publish_args: tuple[str, ...] = ()
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    def __post_init__(self) -> None:
        origin = self.origin.strip()
        if not origin:
            raise ValueError("origin package identifier cannot be empty")
        target_version = self.target_version.strip()
        if not target_version:
            raise ValueError("target version cannot be empty")
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "target_version", target_version)
        object.__setattr__(self, "publish_args", tuple(str(arg) for arg in self.publish_args))

    @classmethod
    def build(
        cls,
        origin: str,
        target_version: str,
        publish_args: Sequence[str] = (),
        registry: RegistryConfig | str | None = None,
    ) -> "RepublishRequest":
        return cls(
            origin=origin,
            target_version=target_version,
            publish_args=tuple(publish_args),
            registry=RegistryConfig.coerce(registry),
        )

    @property
    def origin_name(self) -> str:
        return parse_package_identifier(self.origin)[0]

    @property
    def origin_version(self) -> Optional[str]:
        return parse_package_identifier(self.origin)[1]


@dataclass(frozen=True)
class PublishOutput:
    returncode: int
    stdout: str
    stderr: str
    truncated: bool = False
    command: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class RepublishResult:
    name: str
    version: str
    marker: str
    workspace: Path

    @property
    def package_dir(self) -> Path:
        return self.workspace / PACKAGE_SUBDIR


def parse_package_identifier(identifier: str) -> tuple[str, Optional[str]]:
    """Split ``name@version`` (scoped names keep their leading ``@``)."""

    value = identifier.strip()
    at = value.rfind("@")
    if at <= 0:
        return value, None
    name, version = value[:at], value[at + 1 :]
    return name.strip(), version.strip() or None


def _clean_url(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None
