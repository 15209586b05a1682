"""Typed errors raised while republishing a package."""

from __future__ import annotations

from typing import Sequence


class RepublishError(RuntimeError):
    """Base republish error."""


class NpmNotFoundError(RepublishError):
    """The npm executable could not be started."""


class NpmCommandError(RepublishError):
    """An npm command exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class PackCommandError(NpmCommandError):
    """``npm pack`` failed."""


class PublishCommandError(NpmCommandError):
    """``npm publish`` failed."""


class ShowCommandError(NpmCommandError):
    """``npm show`` failed or returned something other than a manifest."""


class CommandTimeoutError(RepublishError):
    """An npm command ran longer than the configured timeout."""


class OutputLimitExceededError(RepublishError):
    """Captured subprocess output grew past the configured buffer cap."""

    def __init__(self, message: str, *, limit: int) -> None:
        super().__init__(message)
        self.limit = limit


class RegistryLookupError(RepublishError):
    """The published manifest could not be fetched from the registry."""


class UnsafeArchiveError(RepublishError):
    """A tarball member would be extracted outside the scratch workspace."""
