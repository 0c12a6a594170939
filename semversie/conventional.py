"""Conventional Commits classification.

Turns a commit or pull request title (and optionally its body) into a
ParsedCommitInfo describing the commit type and its version impact.

Title grammar::

    <type>[(<scope>)][!]: <description>

The set of recognised types is closed; anything else is treated as not
conventional and yields None rather than an error.
"""

from __future__ import annotations

import re
from types import MappingProxyType

from .models import Commit, Impact, ParsedCommitInfo, PullRequest

TYPE_TO_IMPACT = MappingProxyType(
    {
        "docs": Impact.NOIMPACT,
        "style": Impact.NOIMPACT,
        "test": Impact.NOIMPACT,
        "chore": Impact.NOIMPACT,
        "build": Impact.NOIMPACT,
        "ci": Impact.NOIMPACT,
        "refactor": Impact.PATCH,
        "fix": Impact.PATCH,
        "perf": Impact.PATCH,
        "feat": Impact.MINOR,
    }
)

_TITLE_RE = re.compile(
    r"(?P<type>\w+)(?:\((?P<scope>[^)]+)\))?(?P<breaking>!)?:\s*"
    r"(?P<description>[^\r\n\u2028\u2029]*)"
)

# Renovate quotes upstream release notes between two horizontal rules.
# Those notes may mention breaking changes in the dependency, not here.
_RENOVATE_NOTES_RE = re.compile(
    r"---\n\n### Release Notes\n\n<details>.*</details>\n\n---", re.DOTALL
)

BREAKING_CHANGE_TOKEN = "BREAKING CHANGE"


def parse_conventional_title(title: str) -> ParsedCommitInfo | None:
    """Parse a title such as ``feat(api)!: add endpoint``.

    Type matching is case-sensitive. A ``!`` marker forces MAJOR
    regardless of the type's own impact.

    Returns:
        The parsed type and impact, or None if the title does not match
        the grammar or uses an unknown type.
    """
    match = _TITLE_RE.fullmatch(title)
    if not match:
        return None
    commit_type = match["type"]
    if commit_type not in TYPE_TO_IMPACT:
        return None
    impact = Impact.MAJOR if match["breaking"] else TYPE_TO_IMPACT[commit_type]
    return ParsedCommitInfo(type=commit_type, impact=impact)


def parse_conventional_body(body: str) -> Impact | None:
    """Return MAJOR if the body declares a breaking change, else None.

    An embedded Renovate release-notes block is removed first so that
    quoted upstream changelogs cannot trigger a major bump.
    """
    clean_body = _RENOVATE_NOTES_RE.sub("", body, count=1)
    if BREAKING_CHANGE_TOKEN in clean_body:
        return Impact.MAJOR
    return None


def get_conventional_impact(item: Commit | PullRequest) -> ParsedCommitInfo | None:
    """Classify a commit or pull request from its title and body.

    The title decides whether the item is conventional at all; a body is
    only consulted to raise the impact to MAJOR, keeping the title's type.
    """
    parsed = parse_conventional_title(item.title)
    if parsed is None:
        return None
    if item.body:
        body_impact = parse_conventional_body(item.body)
        if body_impact is not None and body_impact > parsed.impact:
            parsed = parsed.model_copy(update={"impact": body_impact})
    return parsed


def classify(title: str, body: str | None = None) -> ParsedCommitInfo | None:
    """Classify a bare title/body pair."""
    return get_conventional_impact(Commit(sha="", title=title, body=body))
