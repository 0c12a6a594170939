"""Providers for pull request, commit, tag and release data.

Each lookup tries the local git checkout first and falls back to the
GitHub API through the gh CLI when a token is available. Lookups that
fail degrade to empty results; deciding whether that is fatal is left
to the pipeline.

All gh calls go through a caller-supplied CallCache so identical
concurrent lookups share one request.
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path

from .cache import CallCache
from .candidates import filter_rc_tags_by_baseline
from .models import Commit, PullRequest, Release
from .shell import gh, git
from .versions import SemanticVersion

# Field / record separators for git log output; commit bodies may
# contain any printable text, including newlines.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"


def load_pull_request(event_path: Path | None) -> PullRequest | None:
    """Read the pull request from the GitHub Actions event payload file."""
    if event_path is None or not event_path.exists():
        return None
    try:
        payload = json.loads(event_path.read_text())
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return PullRequest.from_event(payload)


def get_local_commits(base_ref: str, head_ref: str) -> list[Commit]:
    """List non-merge commits in ``base_ref..head_ref`` from local git.

    Returns an empty list when either ref is unknown locally.
    """
    output = git(
        "log",
        f"--pretty=format:%H{_FIELD_SEP}%B{_RECORD_SEP}",
        "--no-merges",
        f"{base_ref}..{head_ref}",
        check=False,
    )
    commits: list[Commit] = []
    for record in output.split(_RECORD_SEP):
        sha, sep, message = record.strip().partition(_FIELD_SEP)
        if not sep or not sha:
            continue
        commits.append(Commit.from_message(sha, message))
    return commits


def get_pr_commits(
    pr: PullRequest,
    *,
    repository: str | None,
    token: str | None,
    cache: CallCache,
) -> list[Commit]:
    """List the commits of a pull request.

    Tries local git by SHA, then by branch name, then the GitHub API.
    """
    for base, head in ((pr.base_sha, pr.head_sha), (pr.base_ref, pr.head_ref)):
        if base and head:
            commits = get_local_commits(base, head)
            if commits:
                print(f"  {len(commits)} commits from local git ({base}..{head})")
                return commits

    if not (token and repository and pr.number):
        return []

    output = cache.call(
        f"prCommits:{repository}:{pr.number}",
        lambda: gh(
            "api",
            "--paginate",
            f"repos/{repository}/pulls/{pr.number}/commits",
            "--jq",
            ".[] | [.sha, .commit.message] | @json",
            check=False,
            token=token,
        ),
    )
    commits = []
    for line in output.splitlines():
        try:
            sha, message = json.loads(line)
        except (TypeError, ValueError):
            continue
        commits.append(Commit.from_message(sha, message or ""))
    print(f"  {len(commits)} commits from GitHub API")
    return commits


def get_latest_local_tag() -> str | None:
    """Find the most recent tag reachable from HEAD, else the highest tag."""
    tag = git("describe", "--tags", "--abbrev=0", check=False)
    if tag:
        return tag
    tags = git("tag", "--list", "--sort=-v:refname", check=False)
    return tags.splitlines()[0] if tags else None


def get_latest_release(
    *,
    repository: str | None,
    token: str | None,
    cache: CallCache,
) -> Release | None:
    """Return the latest published release.

    Uses the GitHub API when a token is available; otherwise the latest
    local tag stands in for a release.
    """
    if token:
        output = cache.call(
            f"latestRelease:{repository}",
            lambda: gh(
                "release",
                "view",
                *(("--repo", repository) if repository else ()),
                "--json",
                "tagName,name",
                check=False,
                token=token,
            ),
        )
        if not output:
            return None
        try:
            data = json.loads(output)
        except json.JSONDecodeError:
            return None
        return Release(tag_name=data.get("tagName", ""), name=data.get("name") or None)

    tag = get_latest_local_tag()
    if tag is None:
        return None
    return Release(tag_name=tag, name=tag)


def get_tag_names(
    *,
    repository: str | None,
    token: str | None,
    cache: CallCache,
) -> list[str]:
    """List tag names, newest version first, from local git or the API."""
    output = git(
        "for-each-ref",
        "--sort=-version:refname",
        "--format=%(refname:short)",
        "refs/tags",
        check=False,
    )
    if output:
        return output.splitlines()

    if not (token and repository):
        return []
    output = cache.call(
        f"tags:{repository}",
        lambda: gh(
            "api",
            "--paginate",
            f"repos/{repository}/tags",
            "--jq",
            ".[].name",
            check=False,
            token=token,
        ),
    )
    return output.splitlines()


def get_release_candidate_tags(
    baseline: SemanticVersion,
    *,
    repository: str | None,
    token: str | None,
    cache: CallCache,
) -> list[str]:
    """List RC tags at or beyond ``baseline``."""
    tags = get_tag_names(repository=repository, token=token, cache=cache)
    results = filter_rc_tags_by_baseline(tags, baseline)
    print(f"  {len(results)} release-candidate tags for {baseline}")
    return results


def get_file_content(
    path: str,
    *,
    repository: str | None,
    token: str | None,
    cache: CallCache,
) -> str | None:
    """Read a repository file: working tree, then HEAD, then the API."""
    local = Path(path)
    if local.is_file():
        return local.read_text()

    content = git("show", f"HEAD:{path}", check=False)
    if content:
        return content

    if not (token and repository):
        return None
    encoded = cache.call(
        f"file:{repository}:{path}",
        lambda: gh(
            "api",
            f"repos/{repository}/contents/{path}",
            "--jq",
            ".content",
            check=False,
            token=token,
        ),
    )
    if not encoded:
        return None
    try:
        return base64.b64decode(encoded).decode()
    except (binascii.Error, UnicodeDecodeError):
        return None
