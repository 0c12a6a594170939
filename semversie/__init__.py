"""semversie: next-version resolution from Conventional Commits pull requests.

The engine is made of pure functions over in-memory values:
- Semantic version parsing, comparison and bumping
- Conventional commit classification
- PR vs commit impact aggregation
- Release-candidate index resolution
"""

from __future__ import annotations

from semversie.candidates import (
    filter_rc_tags_by_baseline,
    is_release_candidate,
    resolve_release_candidate,
)
from semversie.conventional import (
    classify,
    get_conventional_impact,
    parse_conventional_body,
    parse_conventional_title,
)
from semversie.impact import aggregate, get_impact
from semversie.models import (
    Commit,
    Impact,
    ImpactResult,
    Label,
    ParsedCommitInfo,
    PullRequest,
    Release,
)
from semversie.release_notes import generate_release_notes
from semversie.versions import SemanticVersion, bump, parse_version

__all__ = [
    "Commit",
    "Impact",
    "ImpactResult",
    "Label",
    "ParsedCommitInfo",
    "PullRequest",
    "Release",
    "SemanticVersion",
    "aggregate",
    "bump",
    "classify",
    "filter_rc_tags_by_baseline",
    "generate_release_notes",
    "get_conventional_impact",
    "get_impact",
    "is_release_candidate",
    "parse_conventional_body",
    "parse_conventional_title",
    "parse_version",
    "resolve_release_candidate",
]
