"""npm client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

TEN_MEGABYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class NpmClientConfig:
    executable: str = "npm"
    max_buffer_bytes: int = TEN_MEGABYTES
    timeout_seconds: float | None = None
    env: Mapping[str, str] | None = field(default=None, repr=False)
