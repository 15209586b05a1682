"""Fetch the manifest currently published for a package version."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Tuple
from urllib.parse import quote

import requests
from requests import RequestException

from .errors import RegistryLookupError
from .npm import NpmClient

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "https://registry.npmjs.org"


class RegistryLookup(Protocol):
    def fetch_manifest(self, name: str, version: str) -> dict[str, Any]:
        """Return the published manifest of ``name@version`` or raise."""


@dataclass
class NpmShowLookup:
    """Lookup through ``npm show --json``, honouring npm's own auth config."""

    client: NpmClient
    registry: str | None = None

    def fetch_manifest(self, name: str, version: str) -> dict[str, Any]:
        return self.client.show(name, version, registry=self.registry)


@dataclass
class HttpRegistryLookup:
    """Lookup against the registry's ``/<name>/<version>`` document endpoint."""

    base_url: str = DEFAULT_REGISTRY
    timeout: float | Tuple[float, float] = 10.0
    token: str | None = field(default=None, repr=False)
    session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.base_url = (self.base_url or DEFAULT_REGISTRY).rstrip("/")
        self.session = requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        if self.token:
            self.session.headers.setdefault("Authorization", f"Bearer {self.token}")

    def manifest_url(self, name: str, version: str) -> str:
        # scoped names keep the leading "@" but escape the slash
        return f"{self.base_url}/{quote(name, safe='@')}/{quote(version, safe='')}"

    def fetch_manifest(self, name: str, version: str) -> dict[str, Any]:
        url = self.manifest_url(name, version)
        logger.debug("registry lookup url=%s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except RequestException as exc:
            raise RegistryLookupError(f"GET {url} failed: {exc}") from exc
        if resp.status_code != 200:
            raise RegistryLookupError(f"GET {url} returned {resp.status_code}: {resp.text}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise RegistryLookupError(f"GET {url} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise RegistryLookupError(f"GET {url} did not return a manifest object")
        return payload
