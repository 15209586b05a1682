"""Republish an existing package under a new version."""

from __future__ import annotations

import logging
from typing import IO, Any, Sequence

from .config import RepublishSettings
from .fetch import create_scratch_workspace, fetch_package
from .lookup import NpmShowLookup, RegistryLookup
from .manifest import rewrite_manifest
from .markers import MarkerGenerator, default_marker_generator
from .matchers import AlreadyPublishedMatcher, build_matchers
from .npm import NpmClient
from .publish import publish_idempotently
from .types import MARKER_FIELD, RegistryConfig, RepublishRequest, RepublishResult

logger = logging.getLogger(__name__)


def republish_package(
    origin: str,
    target_version: str,
    publish_args: Sequence[str] = (),
    registry: RegistryConfig | str | None = None,
    *,
    client: NpmClient | None = None,
    lookup: RegistryLookup | None = None,
    marker_generator: MarkerGenerator | None = None,
    matchers: Sequence[AlreadyPublishedMatcher] | None = None,
    settings: RepublishSettings | None = None,
    out: IO[Any] | None = None,
    err: IO[Any] | None = None,
) -> RepublishResult:
    """Copy ``origin`` (``name@version``) to ``target_version`` and publish it.

    ``registry`` is either one URL used for reading and writing, or a
    ``RegistryConfig`` with distinct source and target. The scratch workspace
    is left on disk; its path is part of the result.

    Any failure is raised as the original underlying error. A publish that
    reports "already published" counts as success when the registry holds the
    marker written by this call.
    """

    request = RepublishRequest.build(origin, target_version, publish_args, registry)
    settings = settings or RepublishSettings()
    client = client or NpmClient(settings.npm_config())
    lookup = lookup or NpmShowLookup(client, registry=request.registry.target)
    marker_generator = marker_generator or default_marker_generator()
    if matchers is None:
        matchers = build_matchers(settings.already_published_phrases)

    workspace = create_scratch_workspace(settings.scratch_dir)
    logger.info("republishing %s as %s (workspace=%s)", request.origin, request.target_version, workspace)

    package_dir = fetch_package(
        client,
        workspace,
        request.origin,
        registry=request.registry.source,
        out=out,
    )
    manifest = rewrite_manifest(package_dir, request, marker_generator=marker_generator, out=out)
    publish_idempotently(
        client,
        lookup,
        package_dir,
        manifest,
        target_version=request.target_version,
        publish_args=request.publish_args,
        matchers=matchers,
        out=out,
        err=err,
    )
    return RepublishResult(
        name=str(manifest.get("name") or request.origin_name),
        version=request.target_version,
        marker=str(manifest[MARKER_FIELD]),
        workspace=workspace,
    )
