"""
CLI for ``cargo new-deps``: list the newly added dependencies and their features.

Compares the resolved dependency graph of two states of a Cargo workspace
and prints every crate (and feature set) the newer one pulls in, with the
direct dependencies responsible for it.

Usage::

    cargo new-deps                         # default branch -> working tree
    cargo new-deps --from v1.2.0 --to HEAD
    cargo new-deps --from-json before.json --to-json after.json --format json
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

import click

from cargo_newdeps import __version__
from cargo_newdeps.config import get_config
from cargo_newdeps.diff import MetadataDiff
from cargo_newdeps.errors import NewDepsError
from cargo_newdeps.report import render_json, render_text
from cargo_newdeps.sources import load_snapshot

logger = logging.getLogger(__name__)

CARGO_SUBCOMMAND = "new-deps"


def _configure_logging(level: int) -> None:
    package_logger = logging.getLogger("cargo_newdeps")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)


@click.command(help="List the newly added dependencies and their features.")
@click.version_option(__version__)
@click.option(
    "--from-json",
    type=click.Path(dir_okay=False),
    default=None,
    help="Read cargo metadata from JSON file to compare from.",
)
@click.option(
    "--to-json",
    type=click.Path(dir_okay=False),
    default=None,
    help="Read cargo metadata from JSON file to compare to.",
)
@click.option("--from", "from_rev", default=None, help="Commit or branch to compare from.")
@click.option("--to", "to_rev", default=None, help="Commit or branch to compare to.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (default: text).",
)
@click.option("--color/--no-color", default=None, help="Force or disable colored output.")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
def main(
    from_json: Optional[str],
    to_json: Optional[str],
    from_rev: Optional[str],
    to_rev: Optional[str],
    output_format: Optional[str],
    color: Optional[bool],
    verbose: bool,
) -> None:
    """List the newly added dependencies and their features."""
    config = get_config()
    _configure_logging(logging.DEBUG if verbose else config.get_log_level())
    output_format = output_format or config.output_format

    try:
        old = load_snapshot(
            "from", json_path=from_json, revision=from_rev, fallback="default-branch"
        )
        new = load_snapshot("to", json_path=to_json, revision=to_rev, fallback="workdir")
        report = MetadataDiff(old, new).collect_new_dependencies()
    except NewDepsError as exc:
        raise click.ClickException(str(exc))

    if output_format == "json":
        click.echo(render_json(report))
    elif not report.is_empty:
        click.echo(render_text(report), color=color)


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Console entry point, also usable as ``cargo new-deps``.

    Cargo invokes ``cargo-new-deps new-deps <args>``; the repeated
    subcommand name is dropped.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    prog_name = "cargo-new-deps"
    if args[:1] == [CARGO_SUBCOMMAND]:
        args = args[1:]
        prog_name = f"cargo {CARGO_SUBCOMMAND}"
    main(args=args, prog_name=prog_name)
