"""
Error types for cargo-newdeps.

Only two conditions abort a run: a snapshot could not be acquired, or an
acquired snapshot is internally inconsistent.  Everything else (an
unresolvable dependency requirement, a feature activation that names no
crate) is absorbed into an empty result where it occurs.
"""

from __future__ import annotations

from typing import Optional, Sequence


class NewDepsError(Exception):
    """Base class for all cargo-newdeps failures."""


class CommandError(NewDepsError):
    """Rich error for external command failures with context."""

    def __init__(
        self,
        cmd: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
        context: str = "",
    ):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.context:
            parts.append(self.context)
        parts.append(f"Command: {' '.join(self.cmd)}")
        if self.returncode is not None:
            parts.append(f"Exit code: {self.returncode}")
        if self.stderr:
            parts.append(f"Error: {self.stderr.strip()}")
        if self.stdout and self.returncode not in (None, 0):
            parts.append(f"Output: {self.stdout.strip()}")
        return "\n".join(parts)


class SnapshotAcquisitionError(NewDepsError):
    """A dependency graph snapshot could not be obtained.

    Attributes:
        side: Which side of the comparison failed (``"from"`` or ``"to"``).
        method: How the snapshot was being acquired
            (``json``, ``revision``, ``workdir`` or ``default-branch``).
        detail: Message of the underlying failure.
    """

    def __init__(self, side: str, method: str, detail: str):
        self.side = side
        self.method = method
        self.detail = detail
        super().__init__(
            f"could not load '{side}' metadata ({method}): {detail}"
        )


class SnapshotIntegrityError(NewDepsError):
    """A snapshot references a package it does not define."""
