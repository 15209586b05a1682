"""Helpers for redacting npm command lines and extracting tarballs safely."""

from __future__ import annotations

import tarfile
from pathlib import Path
from urllib.parse import urlsplit

from .errors import UnsafeArchiveError

_SENSITIVE_KEYS = ("_authtoken", "_auth", "_password", "password", "token", "authorization", "otp")


def safe_output_path(base_dir: Path, relative_path: str) -> Path:
    target = (base_dir / relative_path).resolve()
    root = base_dir.resolve()
    if target == root:
        return target
    if root not in target.parents:
        raise UnsafeArchiveError(f"path traversal blocked for tarball member: {relative_path}")
    return target


def safe_extract(archive: Path, destination: Path) -> None:
    """Extract ``archive`` into ``destination`` refusing members that escape it."""

    with tarfile.open(archive, "r:*") as tf:
        for member in tf.getmembers():
            safe_output_path(destination, member.name)
        tf.extractall(destination, filter="data")


def redact_value(value: str) -> str:
    if not value:
        return value
    if len(value) <= 6:
        return "***"
    return f"{value[:3]}***{value[-2:]}"


def redact_command_for_log(command: list[str]) -> list[str]:
    redacted: list[str] = []
    skip_next = False
    for item in command:
        lower = item.lower()
        if skip_next:
            redacted.append("***")
            skip_next = False
            continue
        if lower in {"--password", "--token", "--otp"}:
            redacted.append(item)
            skip_next = True
            continue
        if "=" in item and any(key in lower.split("=", 1)[0] for key in _SENSITIVE_KEYS):
            key, value = item.split("=", 1)
            redacted.append(f"{key}={redact_value(value)}")
            continue
        if "://" in item:
            url = item.split("=", 1)[1] if item.startswith("--") and "=" in item else item
            parsed = urlsplit(url)
            if parsed.password:
                safe_netloc = parsed.netloc.replace(parsed.password, "***")
                redacted.append(item.replace(parsed.netloc, safe_netloc))
                continue
        redacted.append(item)
    return redacted
