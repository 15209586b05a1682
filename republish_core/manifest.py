"""Rewrite the extracted ``package.json`` for the target version."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import IO, Any

from .markers import MarkerGenerator
from .types import MANIFEST_NAME, MARKER_FIELD, RepublishRequest

logger = logging.getLogger(__name__)


def manifest_path(package_dir: Path) -> Path:
    return package_dir / MANIFEST_NAME


def read_manifest(package_dir: Path) -> dict[str, Any]:
    return json.loads(manifest_path(package_dir).read_text(encoding="utf-8"))


def write_manifest(package_dir: Path, manifest: dict[str, Any]) -> Path:
    path = manifest_path(package_dir)
    path.write_text(json.dumps(manifest, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return path


def rewrite_manifest(
    package_dir: Path,
    request: RepublishRequest,
    *,
    marker_generator: MarkerGenerator,
    out: IO[Any] | None = None,
) -> dict[str, Any]:
    """Set the target version, registry redirect and a fresh publish marker.

    The file is overwritten in place and the updated manifest returned. A
    missing or malformed ``package.json`` raises the underlying error.
    """

    manifest = read_manifest(package_dir)
    if not isinstance(manifest, dict):
        raise ValueError(f"{manifest_path(package_dir)} does not contain a JSON object")

    manifest["version"] = request.target_version
    target = request.registry.target
    if target:
        publish_config = manifest.get("publishConfig")
        if not isinstance(publish_config, dict):
            publish_config = {}
        publish_config["registry"] = target
        manifest["publishConfig"] = publish_config

    manifest[MARKER_FIELD] = marker_generator()
    print(f"[republish] unique identifier for this publish: {manifest[MARKER_FIELD]}", file=out, flush=True)

    write_manifest(package_dir, manifest)
    logger.debug("rewrote %s version=%s registry=%s", manifest_path(package_dir), request.target_version, target)
    print(f"[republish] wrote the target version {request.target_version} to the package.json", file=out, flush=True)
    return manifest
