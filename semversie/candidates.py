"""Release-candidate resolution.

A pull request labelled ``release-candidate`` that is still open gets a
prerelease label ``rc<N>``, where N is one past the highest RC index
already tagged for the version the PR would release.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .models import Impact, PullRequest
from .versions import SemanticVersion

RELEASE_CANDIDATE_LABEL = "release-candidate"

TagSource = Iterable[str] | Callable[[SemanticVersion], Iterable[str]]


def is_release_candidate(pr: PullRequest) -> bool:
    """True when the PR carries the release-candidate label (any case)."""
    return any(label.name.lower() == RELEASE_CANDIDATE_LABEL for label in pr.labels)


def filter_rc_tags_by_baseline(
    tag_names: Iterable[str], baseline: SemanticVersion
) -> list[str]:
    """Keep the RC tags that could belong to ``baseline`` or a later release.

    A tag is kept when it parses, has a prerelease mentioning ``rc``, and
    either ranks above the baseline or targets the same major.minor.patch
    (an RC of the baseline itself ranks below it). Duplicates are dropped
    and input order is preserved.
    """
    results: list[str] = []
    seen: set[str] = set()
    for name in tag_names:
        if not name or name in seen:
            continue
        parsed = SemanticVersion.parse(name)
        if parsed is None or not parsed.prerelease:
            continue
        if "rc" not in parsed.prerelease.lower():
            continue
        if parsed <= baseline and not parsed.same_release(baseline):
            continue
        seen.add(name)
        results.append(name)
    return results


def resolve_release_candidate(
    pr: PullRequest,
    impact: Impact,
    last_release_version: SemanticVersion,
    existing_tags: TagSource,
) -> str | None:
    """Return the prerelease label for this PR, or None for a final release.

    Args:
        pr: The pull request being evaluated.
        impact: Final impact chosen for the bump.
        last_release_version: Baseline the bump is applied to.
        existing_tags: Tag names, or a callable that receives the bumped
            base version and returns tag names. The callable is only
            invoked when an RC index is actually needed.

    Returns:
        ``"rc<N>"`` for an open PR labelled release-candidate, else None.
    """
    if pr.merged or not is_release_candidate(pr):
        return None

    bumped_base = last_release_version.bump(impact)
    tag_names = existing_tags(bumped_base) if callable(existing_tags) else existing_tags
    index = SemanticVersion.next_rc_index(bumped_base, list(tag_names))
    return f"rc{index}"
