"""Command line entrypoint for npm-republish."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import tarfile
import tempfile
from pathlib import Path
from typing import Sequence

from republish_core import (
    HttpRegistryLookup,
    RegistryConfig,
    RepublishError,
    RepublishSettings,
    load_settings,
    republish_package,
)
from republish_core.lookup import RegistryLookup

CLI_VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npm-republish",
        description="Republish an existing npm package under a new version without rebuilding it.",
        epilog="Arguments after a standalone '--' are passed to npm publish verbatim.",
    )
    parser.add_argument("--version", action="version", version=f"npm-republish v{CLI_VERSION}")
    parser.add_argument("origin", help="origin package in the form name@version")
    parser.add_argument("target_version", help="version to publish the copy under")

    registry = parser.add_argument_group("registries")
    registry.add_argument("--registry", help="registry used both to fetch and to publish")
    registry.add_argument("--from", dest="from_registry", help="registry to fetch the origin package from")
    registry.add_argument("--to", dest="to_registry", help="registry to publish the copy to")

    parser.add_argument(
        "--lookup",
        choices=["npm", "http"],
        default="npm",
        help="how to read the published manifest back (default: npm show)",
    )
    parser.add_argument("--token", help="bearer token for --lookup http")
    parser.add_argument("--npm", dest="npm_executable", help="npm executable to invoke")
    parser.add_argument("--scratch-dir", dest="scratch_dir", help="directory holding scratch workspaces")
    parser.add_argument("--timeout", dest="timeout_seconds", type=float, help="timeout for each npm command")
    parser.add_argument("--max-buffer", dest="max_buffer_bytes", type=int, help="captured output cap in bytes")
    parser.add_argument("--config", dest="config_path", help="path to a config.toml")
    parser.add_argument("--cleanup", action="store_true", help="remove the scratch workspace afterwards")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def split_publish_args(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    tokens = list(argv)
    if "--" not in tokens:
        return tokens, []
    index = tokens.index("--")
    return tokens[:index], tokens[index + 1 :]


def main(argv: Sequence[str] | None = None) -> int:
    tokens = list(argv) if argv is not None else list(sys.argv[1:])
    own_args, publish_args = split_publish_args(tokens)
    parser = build_parser()
    args = parser.parse_args(own_args)

    if args.registry and (args.from_registry or args.to_registry):
        parser.error("--registry cannot be combined with --from/--to")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(
        {
            "npm_executable": args.npm_executable,
            "scratch_dir": args.scratch_dir,
            "timeout_seconds": args.timeout_seconds,
            "max_buffer_bytes": args.max_buffer_bytes,
        },
        config_path=Path(args.config_path) if args.config_path else None,
    )
    registry = RegistryConfig(
        source=args.registry or args.from_registry,
        target=args.registry or args.to_registry,
    )

    if args.cleanup:
        if settings.scratch_dir is not None:
            settings.scratch_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="republish-cli-", dir=settings.scratch_dir) as tmp:
            return _run(args, publish_args, registry, dataclasses.replace(settings, scratch_dir=Path(tmp)))
    return _run(args, publish_args, registry, settings)


def _run(
    args: argparse.Namespace,
    publish_args: list[str],
    registry: RegistryConfig,
    settings: RepublishSettings,
) -> int:
    lookup: RegistryLookup | None = None
    if args.lookup == "http":
        kwargs = {"token": args.token}
        if registry.target:
            kwargs["base_url"] = registry.target
        if settings.timeout_seconds is not None:
            kwargs["timeout"] = settings.timeout_seconds
        lookup = HttpRegistryLookup(**kwargs)

    try:
        result = republish_package(
            args.origin,
            args.target_version,
            publish_args,
            registry,
            lookup=lookup,
            settings=settings,
        )
    except (RepublishError, OSError, tarfile.TarError, ValueError) as exc:
        print(f"[republish] error: {exc}")
        return 1

    print(f"[republish] ok {args.origin} -> {result.name}@{result.version} marker={result.marker}")
    if not args.cleanup:
        print(f"[republish] workspace: {result.workspace}")
    return 0
