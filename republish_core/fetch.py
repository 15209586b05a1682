"""Download the origin tarball and unpack it into a scratch workspace."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import IO, Any

from .npm import NpmClient
from .security import safe_extract
from .types import PACKAGE_SUBDIR

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "republish-"


def create_scratch_workspace(root: Path | str | None = None) -> Path:
    """Create a fresh, uniquely named directory owned by one republish run."""

    base = Path(root) if root else None
    if base is not None:
        base.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=base))


def fetch_package(
    client: NpmClient,
    workspace: Path,
    origin: str,
    *,
    registry: str | None = None,
    out: IO[Any] | None = None,
) -> Path:
    """Pack ``origin`` into ``workspace``, extract it and return the package directory."""

    tarball = workspace / client.pack(origin, workspace, registry=registry)
    print("[republish] finished downloading the origin package tarball, extracting...", file=out, flush=True)
    logger.debug("extracting %s into %s", tarball, workspace)
    safe_extract(tarball, workspace)
    print("[republish] finished downloading and extracting the origin package", file=out, flush=True)
    return workspace / PACKAGE_SUBDIR
