"""
Acquisition of ``cargo metadata`` snapshots.

A snapshot comes from one of three places:

- a saved JSON document (``cargo metadata --format-version 1 > file.json``),
- a git revision, checked out into a throwaway worktree and resolved there,
- the current working tree.

Usage::

    from cargo_newdeps.sources import load_snapshot

    old = load_snapshot("from", fallback="default-branch")
    new = load_snapshot("to", json_path="after.json")
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Literal, Optional, Sequence, Union

from pydantic import ValidationError

from cargo_newdeps.config import NewDepsConfig, get_config
from cargo_newdeps.errors import (
    CommandError,
    NewDepsError,
    SnapshotAcquisitionError,
    SnapshotIntegrityError,
)
from cargo_newdeps.graph.schema import Metadata

logger = logging.getLogger(__name__)

__all__ = [
    "run_command",
    "read_metadata_from_json",
    "read_metadata_from_workdir",
    "read_metadata_from_commit",
    "git_worktree",
    "git_default_branch",
    "load_snapshot",
]

PathLike = Union[str, Path]


def run_command(
    cmd: Sequence[str],
    cwd: Optional[PathLike] = None,
    context: str = "",
    timeout: Optional[float] = None,
) -> str:
    """
    Run an external command and return its stdout.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        context: Description of what the command is doing (for error messages)
        timeout: Seconds before the command is killed

    Returns:
        Captured stdout

    Raises:
        CommandError: If the command is missing, times out, or exits non-zero
    """
    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        result = subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise CommandError(cmd, None, context=f"{context or 'Running command'}: {cmd[0]} not found in PATH")
    except subprocess.TimeoutExpired:
        raise CommandError(cmd, None, context=f"{context or 'Running command'}: timed out after {timeout}s")

    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stdout, result.stderr, context)
    return result.stdout


def read_metadata_from_json(path: PathLike) -> Metadata:
    """Parse a saved ``cargo metadata`` document.

    Raises:
        OSError: If the file cannot be read
        pydantic.ValidationError: If it is not valid metadata
    """
    path = Path(path)
    logger.debug("Reading metadata from %s", path)
    return Metadata.from_json(path.read_text(encoding="utf-8"))


def read_metadata_from_workdir(
    cwd: Optional[PathLike] = None,
    config: Optional[NewDepsConfig] = None,
) -> Metadata:
    """Run ``cargo metadata`` in ``cwd`` (default: current directory)."""
    config = config or get_config()
    stdout = run_command(
        [
            config.cargo_bin,
            "metadata",
            "--format-version",
            str(config.metadata_format_version),
        ],
        cwd=cwd,
        context="Resolving dependency graph",
        timeout=config.command_timeout_s,
    )
    return Metadata.from_json(stdout)


@contextmanager
def git_worktree(
    commit: str,
    repo_dir: Optional[PathLike] = None,
    config: Optional[NewDepsConfig] = None,
) -> Iterator[Path]:
    """Check ``commit`` out into a temporary worktree for the duration of the block.

    The worktree is removed and its directory deleted on every exit path.
    """
    config = config or get_config()
    tmp_dir = Path(tempfile.mkdtemp(prefix="cargo-newdeps-"))
    try:
        run_command(
            [config.git_bin, "worktree", "add", "--detach", str(tmp_dir), commit],
            cwd=repo_dir,
            context=f"Creating git worktree for '{commit}'",
            timeout=config.command_timeout_s,
        )
        try:
            yield tmp_dir
        finally:
            try:
                run_command(
                    [config.git_bin, "worktree", "remove", "-f", str(tmp_dir)],
                    cwd=repo_dir,
                    context="Removing git worktree",
                    timeout=config.command_timeout_s,
                )
            except CommandError as exc:
                logger.warning("Could not remove worktree %s: %s", tmp_dir, exc)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)


def read_metadata_from_commit(
    commit: str,
    repo_dir: Optional[PathLike] = None,
    config: Optional[NewDepsConfig] = None,
) -> Metadata:
    """Resolve the dependency graph as of ``commit``."""
    config = config or get_config()
    with git_worktree(commit, repo_dir=repo_dir, config=config) as worktree:
        return read_metadata_from_workdir(worktree, config=config)


def git_default_branch(
    repo_dir: Optional[PathLike] = None,
    config: Optional[NewDepsConfig] = None,
) -> str:
    """The remote's default branch, e.g. ``refs/remotes/origin/main``."""
    config = config or get_config()
    stdout = run_command(
        [config.git_bin, "symbolic-ref", f"refs/remotes/{config.git_remote}/HEAD"],
        cwd=repo_dir,
        context="Getting default branch",
        timeout=config.command_timeout_s,
    )
    branch = stdout.strip()
    if not branch:
        raise CommandError(
            [config.git_bin, "symbolic-ref"], 0, context="Getting default branch: empty output"
        )
    return branch


def load_snapshot(
    side: str,
    json_path: Optional[PathLike] = None,
    revision: Optional[str] = None,
    fallback: Literal["default-branch", "workdir"] = "workdir",
    repo_dir: Optional[PathLike] = None,
    config: Optional[NewDepsConfig] = None,
) -> Metadata:
    """
    Load one side of the comparison.

    Precedence: ``json_path``, then ``revision``, then ``fallback``
    (the remote default branch, or the working tree itself).

    Raises:
        SnapshotAcquisitionError: Naming ``side`` and the method that failed
    """
    config = config or get_config()

    if json_path is not None:
        method = "json"
    elif revision is not None:
        method = "revision"
    else:
        method = fallback

    try:
        if method == "json":
            metadata = read_metadata_from_json(json_path)
        elif method == "revision":
            metadata = read_metadata_from_commit(revision, repo_dir=repo_dir, config=config)
        elif method == "default-branch":
            revision = git_default_branch(repo_dir=repo_dir, config=config)
            logger.info("Comparing %s default branch %s", side, revision)
            metadata = read_metadata_from_commit(revision, repo_dir=repo_dir, config=config)
        else:
            metadata = read_metadata_from_workdir(repo_dir, config=config)
    except SnapshotIntegrityError:
        raise
    except (OSError, ValidationError, NewDepsError) as exc:
        raise SnapshotAcquisitionError(side, method, str(exc)) from exc

    logger.debug(
        "Loaded '%s' metadata via %s: %d packages, %d workspace members",
        side,
        method,
        len(metadata.packages),
        len(metadata.workspace_members),
    )
    return metadata
