"""Data models for semversie.

These Pydantic models represent the records that flow through the
version-resolution engine: impacts, parsed commit info, commits, pull
requests, releases, and the aggregate impact result.
"""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Impact(IntEnum):
    """Severity of a change for versioning purposes.

    Ordering is significant: aggregation takes the maximum, so the
    numeric value doubles as the sort key.
    """

    NOIMPACT = 0  # keep current version
    PATCH = 1  # 0.0.X+1
    MINOR = 2  # 0.X+1.0
    MAJOR = 3  # X+1.0.0


class ParsedCommitInfo(BaseModel):
    """Conventional-commit type and the impact derived from it."""

    model_config = ConfigDict(frozen=True)

    type: str
    impact: Impact


class Commit(BaseModel):
    """A single commit as consumed by the engine.

    Attributes:
        sha: Full commit hash.
        title: First line of the commit message.
        body: Remainder of the message, stripped. None when empty.
    """

    sha: str
    title: str
    body: str | None = None

    @classmethod
    def from_message(cls, sha: str, message: str) -> Commit:
        """Split a full commit message into title and body."""
        title, _, rest = message.partition("\n")
        body = rest.strip()
        return cls(sha=sha, title=title, body=body or None)


class Label(BaseModel):
    name: str


class PullRequest(BaseModel):
    """The subset of a GitHub pull request the release logic needs."""

    number: int = 0
    title: str
    body: str | None = None
    labels: list[Label] = Field(default_factory=list)
    merged: bool = False
    head_sha: str | None = None
    head_ref: str | None = None
    base_sha: str | None = None
    base_ref: str | None = None

    @classmethod
    def from_event(cls, payload: dict[str, Any]) -> PullRequest | None:
        """Extract the pull request from a GitHub Actions event payload.

        Checks both ``event.pull_request`` and the top-level
        ``pull_request`` key. Returns None when neither is present.
        """
        raw = (payload.get("event") or {}).get("pull_request") or payload.get(
            "pull_request"
        )
        if not raw:
            return None
        head = raw.get("head") or {}
        base = raw.get("base") or {}
        return cls(
            number=raw.get("number") or 0,
            title=raw.get("title") or "",
            body=raw.get("body"),
            labels=[Label(name=label["name"]) for label in raw.get("labels") or []],
            merged=bool(raw.get("merged")),
            head_sha=head.get("sha"),
            head_ref=head.get("ref"),
            base_sha=base.get("sha"),
            base_ref=base.get("ref"),
        )


class Release(BaseModel):
    """A published release (or a local tag standing in for one)."""

    tag_name: str
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.tag_name


class ImpactResult(BaseModel):
    """Outcome of reconciling the PR-level and commit-level impacts.

    Attributes:
        pr_impact: Classification of the PR title/body, if conventional.
        commit_impacts: Classifications of every conventional commit, in
            input order. Non-conventional commits are dropped.
        max_commit_impact: Highest impact among commit_impacts.
        final_impact: The classification used for the version bump.
            None means nothing could be classified.
        warning: Set when the PR impact overrides a differing commit impact.
    """

    pr_impact: ParsedCommitInfo | None = None
    commit_impacts: list[ParsedCommitInfo] = Field(default_factory=list)
    max_commit_impact: Impact | None = None
    final_impact: ParsedCommitInfo | None = None
    warning: str | None = None

    @property
    def failed(self) -> bool:
        return self.final_impact is None


class RunOptions(BaseModel):
    """Settings for one release run, usually filled from Actions inputs.

    Attributes:
        token: GitHub token; enables the API fallbacks.
        repository: ``owner/repo`` used for API calls.
        event_path: Path to the Actions event payload JSON.
        release_notes_format: Repository path of a notes template.
        build_metadata: Build metadata to attach to the new version.
        github_output: Step output file. Outputs are printed when unset.
        summary_file: Job summary file. Skipped when unset.
        notes_file: Where to write the rendered release notes.
        pyproject: pyproject.toml to stamp with the PEP 440 version.
    """

    token: str | None = None
    repository: str | None = None
    event_path: Path | None = None
    release_notes_format: str | None = None
    build_metadata: str | None = None
    github_output: Path | None = None
    summary_file: Path | None = None
    notes_file: Path = Path("release-notes.md")
    pyproject: Path | None = None
