"""Rendering of new dependency reports for the terminal or as JSON."""

from __future__ import annotations

import json

import click

from cargo_newdeps.diff import NewDependencyReport, ReportEntry

__all__ = ["format_entry", "render_text", "render_json"]


def format_entry(entry: ReportEntry) -> str:
    """One report line: ``name +feature ... pulled by: parent, parent``."""
    line = click.style(entry.dependency_name, fg="green", bold=True)
    for feature in entry.features:
        line += " +" + click.style(feature, fg="red", bold=True)
    parents = ", ".join(
        click.style(name, fg="yellow", bold=True) for name in entry.parent_names
    )
    return f"{line} pulled by: {parents}"


def render_text(report: NewDependencyReport) -> str:
    return "\n".join(format_entry(entry) for entry in report.entries)


def render_json(report: NewDependencyReport) -> str:
    payload = {
        "new_dependencies": [entry.model_dump() for entry in report.entries],
        "total": report.total,
    }
    return json.dumps(payload, indent=2)
