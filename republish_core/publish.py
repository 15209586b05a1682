"""Idempotent ``npm publish``.

A retried publish may fail with "version already exists" because an earlier
attempt of ours actually landed. The marker stamped into the manifest tells
the two cases apart: if the registry holds our marker for the target version,
the failure is ignored; otherwise the original error is raised.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO, Any, Sequence

from .errors import OutputLimitExceededError, RepublishError
from .lookup import RegistryLookup
from .matchers import DEFAULT_MATCHERS, AlreadyPublishedMatcher, is_already_published
from .npm import NpmClient, publish_failure
from .types import MARKER_FIELD

logger = logging.getLogger(__name__)


def publish_idempotently(
    client: NpmClient,
    lookup: RegistryLookup,
    package_dir: Path,
    manifest: dict[str, Any],
    *,
    target_version: str,
    publish_args: Sequence[str] = (),
    matchers: Sequence[AlreadyPublishedMatcher] = DEFAULT_MATCHERS,
    out: IO[Any] | None = None,
    err: IO[Any] | None = None,
) -> None:
    """Publish ``package_dir`` and return once ``target_version`` carries our marker.

    Raises the ``PublishCommandError`` of the failed run when the failure is
    not an "already published" conflict, or when the published version holds
    another marker.
    """

    output = client.publish(
        package_dir,
        publish_args,
        stdout=out if out is not None else sys.stdout,
        stderr=err if err is not None else sys.stderr,
    )
    if output.ok:
        if output.truncated:
            logger.warning("publish output was truncated; ignoring since publish succeeded")
        print("[republish] publish to target version succeeded", file=out, flush=True)
        return

    error = publish_failure(output)
    if output.truncated:
        raise OutputLimitExceededError(
            "npm publish failed and its output exceeded the buffer limit; cannot inspect it",
            limit=client.config.max_buffer_bytes,
        ) from error

    if not is_already_published((output.stdout, output.stderr), matchers):
        raise error

    name = str(manifest.get("name") or "")
    expected = manifest.get(MARKER_FIELD)
    logger.info("%s@%s reported as already published; checking publish marker", name, target_version)
    try:
        published = lookup.fetch_manifest(name, target_version)
    except RepublishError as exc:
        logger.warning("marker lookup for %s@%s failed: %s", name, target_version, exc)
        raise error from exc

    actual = published.get(MARKER_FIELD)
    if expected is None or actual != expected:
        logger.info(
            "%s@%s was published by another attempt (marker=%s, ours=%s)",
            name,
            target_version,
            actual,
            expected,
        )
        raise error

    logger.info("%s@%s already carries our marker %s", name, target_version, expected)
    print("[republish] publish to target version succeeded", file=out, flush=True)
