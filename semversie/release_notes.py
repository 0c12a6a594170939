"""Release notes generation from unreleased commits."""

from __future__ import annotations

from collections.abc import Iterable

from .conventional import get_conventional_impact
from .models import Commit, Impact

PLACEHOLDER = "<INSERT_RELEASE_NOTES_HERE>"
DEFAULT_TEMPLATE = "%S"


def _section(title: str, commits: list[Commit]) -> list[str]:
    lines = [f"## {title} \n"]
    lines.extend(f"- {c.title} ({c.sha[:7]})" for c in commits)
    lines.append("")
    return lines


def generate_release_notes(commits: Iterable[Commit]) -> str:
    """Group commits into breaking / features / fixes / other sections.

    Non-conventional commits, and PATCH commits that are not fixes
    (perf, refactor), land under "Other Changes". Empty sections are
    omitted.
    """
    breaking: list[Commit] = []
    features: list[Commit] = []
    fixes: list[Commit] = []
    others: list[Commit] = []

    for commit in commits:
        parsed = get_conventional_impact(commit)
        if parsed is None:
            others.append(commit)
        elif parsed.impact == Impact.MAJOR:
            breaking.append(commit)
        elif parsed.impact == Impact.MINOR:
            features.append(commit)
        elif parsed.impact == Impact.PATCH and parsed.type == "fix":
            fixes.append(commit)
        else:
            others.append(commit)

    lines = ["# Release Notes\n"]
    for title, group in (
        ("🚨 Breaking Changes", breaking),
        ("🧪 New Features", features),
        ("🐞 Bug Fixes", fixes),
        ("➕ Other Changes", others),
    ):
        if group:
            lines.extend(_section(title, group))
    lines.append("")
    return "\n".join(lines)


def render_release_notes(template: str, notes: str) -> str:
    """Insert generated notes into a template at the first placeholder."""
    return template.replace(PLACEHOLDER, notes, 1)
