"""npm CLI wrapper used for pack, publish and show."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import IO, Any, Sequence

from ..errors import (
    CommandTimeoutError,
    NpmNotFoundError,
    PackCommandError,
    PublishCommandError,
    ShowCommandError,
)
from ..security import redact_command_for_log
from ..types import PublishOutput
from .tee import OutputTee
from .types import NpmClientConfig

logger = logging.getLogger(__name__)

PUBLISH_FLAGS = ("--ddd", "--ignore-scripts")
_KILL_GRACE_SECONDS = 5.0


class NpmClient:
    """Thin npm CLI wrapper.

    ``pack`` and ``show`` capture their output. ``publish`` streams its output
    to the operator while keeping a bounded copy for later inspection.
    """

    def __init__(self, config: NpmClientConfig | None = None) -> None:
        self.config = config or NpmClientConfig()

    def pack(self, identifier: str, cwd: Path, *, registry: str | None = None) -> str:
        """Download ``identifier`` as a tarball into ``cwd`` and return its file name."""

        command = [self.config.executable, "pack", identifier]
        if registry:
            command.append(f"--registry={registry}")
        result = self._run(command, cwd=cwd)
        if result.returncode != 0:
            raise PackCommandError(
                _format_failure(command, result.returncode, result.stderr),
                command=command,
                returncode=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
            )
        lines = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
        if not lines:
            raise PackCommandError(
                f"npm pack did not report a tarball for '{identifier}'",
                command=command,
                returncode=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
            )
        return lines[-1]

    def show(self, name: str, version: str, *, registry: str | None = None) -> dict[str, Any]:
        """Return the manifest published for ``name@version``."""

        command = [self.config.executable, "show", "--json"]
        if registry:
            command.append(f"--registry={registry}")
        command.append(f"{name}@{version}")
        result = self._run(command)
        if result.returncode != 0:
            raise ShowCommandError(
                _format_failure(command, result.returncode, result.stderr),
                command=command,
                returncode=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
            )
        text = (result.stdout or "").strip()
        if not text:
            raise ShowCommandError(
                f"npm show returned no manifest for {name}@{version}",
                command=command,
                returncode=result.returncode,
            )
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ShowCommandError(
                f"npm show returned invalid JSON for {name}@{version}",
                command=command,
                returncode=result.returncode,
                stdout=text,
            ) from exc
        # a range matching several versions yields a list of manifests
        if isinstance(payload, list):
            payload = payload[-1] if payload else None
        if not isinstance(payload, dict):
            raise ShowCommandError(
                f"npm show returned no manifest for {name}@{version}",
                command=command,
                returncode=result.returncode,
                stdout=text,
            )
        return payload

    def publish(
        self,
        cwd: Path,
        args: Sequence[str] = (),
        *,
        stdout: IO[Any] | None = None,
        stderr: IO[Any] | None = None,
    ) -> PublishOutput:
        """Run ``npm publish`` in ``cwd``; a non-zero exit is reported, not raised."""

        command = [self.config.executable, "publish", *PUBLISH_FLAGS, *args]
        logger.debug("npm command cwd=%s cmd=%s", cwd, " ".join(redact_command_for_log(command)))
        try:
            process = subprocess.Popen(
                command,
                cwd=str(cwd),
                env=self._env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise NpmNotFoundError(_not_found_message(self.config.executable)) from exc

        limit = self.config.max_buffer_bytes
        out_tee = OutputTee(process.stdout, stdout, limit=limit, name="stdout").start()
        err_tee = OutputTee(process.stderr, stderr, limit=limit, name="stderr").start()
        try:
            returncode = process.wait(timeout=self.config.timeout_seconds)
        except subprocess.TimeoutExpired as exc:
            process.kill()
            process.wait()
            # grandchildren may still hold the pipes open
            out_tee.join(_KILL_GRACE_SECONDS)
            err_tee.join(_KILL_GRACE_SECONDS)
            raise CommandTimeoutError(
                f"npm publish timed out after {self.config.timeout_seconds:.1f}s"
            ) from exc
        out_tee.join()
        err_tee.join()

        return PublishOutput(
            returncode=returncode,
            stdout=out_tee.text(),
            stderr=err_tee.text(),
            truncated=out_tee.truncated or err_tee.truncated,
            command=tuple(command),
        )

    def _run(self, command: list[str], *, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        logger.debug("npm command cmd=%s", " ".join(redact_command_for_log(command)))
        try:
            return subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                env=self._env(),
                check=False,
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise NpmNotFoundError(_not_found_message(self.config.executable)) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                f"npm command timed out after {self.config.timeout_seconds:.1f}s"
            ) from exc

    def _env(self) -> dict[str, str] | None:
        if not self.config.env:
            return None
        env = os.environ.copy()
        env.update(self.config.env)
        return env


def publish_failure(output: PublishOutput) -> PublishCommandError:
    """Build the error describing a failed publish run."""

    return PublishCommandError(
        _format_failure(list(output.command), output.returncode, output.stderr),
        command=output.command,
        returncode=output.returncode,
        stdout=output.stdout,
        stderr=output.stderr,
    )


def _not_found_message(executable: str) -> str:
    return f"{executable} not found. Install Node.js/npm and ensure it is available in PATH."


def _format_failure(command: list[str], code: int, stderr: str | None) -> str:
    redacted = " ".join(redact_command_for_log(command))
    detail = (stderr or "").strip()
    if detail:
        last = detail.splitlines()[-1].strip()
        return f"npm command failed (exit={code}) cmd='{redacted}' err='{last}'"
    return f"npm command failed (exit={code}) cmd='{redacted}'"
