"""Impact aggregation across a pull request and its commits.

The PR title is the last word on the version bump. Commit impacts are
only used when the PR itself is not conventional, and a disagreement
between the two is flagged through ImpactResult.warning.
"""

from __future__ import annotations

from collections.abc import Iterable

from .conventional import get_conventional_impact
from .models import Commit, ImpactResult, ParsedCommitInfo, PullRequest


def get_impact(pr: PullRequest | Commit, commits: Iterable[Commit]) -> ImpactResult:
    """Reconcile the PR impact with the highest commit impact.

    Resolution order:
    1. PR and commits both classified but different: PR wins, warning set.
    2. Only the PR classified: PR wins.
    3. Only commits classified: first commit carrying the maximum impact.
    4. Nothing classified: final_impact is None (see ImpactResult.failed).

    Non-conventional commits are dropped. Commit order is preserved and
    decides the tie-break in case 3.
    """
    pr_impact = get_conventional_impact(pr)

    commit_impacts: list[ParsedCommitInfo] = []
    for commit in commits:
        commit_impact = get_conventional_impact(commit)
        if commit_impact is not None:
            commit_impacts.append(commit_impact)

    max_commit_impact = (
        max(c.impact for c in commit_impacts) if commit_impacts else None
    )

    final_impact: ParsedCommitInfo | None = None
    warning: str | None = None
    if (
        pr_impact is not None
        and max_commit_impact is not None
        and pr_impact.impact != max_commit_impact
    ):
        warning = (
            f"Impact from PR title ({pr_impact.impact.name}) differs from maximum "
            f"commit impact ({max_commit_impact.name}). Using PR title impact "
            f"({pr_impact.impact.name}) for version bump."
        )
        final_impact = pr_impact
    elif pr_impact is not None:
        final_impact = pr_impact
    elif max_commit_impact is not None:
        final_impact = next(c for c in commit_impacts if c.impact == max_commit_impact)

    return ImpactResult(
        pr_impact=pr_impact,
        commit_impacts=commit_impacts,
        max_commit_impact=max_commit_impact,
        final_impact=final_impact,
        warning=warning,
    )


aggregate = get_impact
