"""Release pipeline: baseline → classify → bump → candidate → publish outputs.

This module orchestrates a semversie run for one pull request:
1. Load the release notes template
2. Find the latest release and parse it as the baseline version
3. Read the pull request from the Actions event and list its commits
4. Classify the PR and commits into a single impact
5. Bump the baseline, adding an rc<N> prerelease for release candidates
6. Write release notes, step outputs, the job summary and, optionally,
   the PEP 440 version into pyproject.toml

The version-resolution engine itself is pure; everything that touches
git, gh or the filesystem happens here or in the source adapters.
"""

from __future__ import annotations

from functools import partial

from packaging.version import InvalidVersion
from pydantic import ValidationError

from .cache import CallCache
from .candidates import resolve_release_candidate
from .impact import get_impact
from .models import Impact, ImpactResult, PullRequest, RunOptions
from .outputs import MAX_NOTES_OUTPUT, render_job_summary, write_job_summary, write_outputs
from .release_notes import DEFAULT_TEMPLATE, generate_release_notes, render_release_notes
from .shell import error, fatal, step, warning
from .sources import (
    get_file_content,
    get_latest_release,
    get_pr_commits,
    get_release_candidate_tags,
    load_pull_request,
)
from .toml import get_project_version, load_pyproject, set_project_version
from .versions import SemanticVersion


def load_notes_template(options: RunOptions, cache: CallCache) -> str:
    """Load the release notes template, falling back to the default."""
    if not options.release_notes_format:
        return DEFAULT_TEMPLATE

    step(f"Loading release notes format from {options.release_notes_format}")
    content = get_file_content(
        options.release_notes_format,
        repository=options.repository,
        token=options.token,
        cache=cache,
    )
    if content is None:
        warning(
            f"Could not load release notes format from "
            f"{options.release_notes_format}, using default format"
        )
        return DEFAULT_TEMPLATE
    return content


def find_baseline(options: RunOptions, cache: CallCache) -> SemanticVersion:
    """Return the version of the latest release, or 0.0.0 if there is none.

    Raises:
        SystemExit: If the latest release name is not a semantic version.
    """
    step("Finding latest release")

    release = get_latest_release(
        repository=options.repository, token=options.token, cache=cache
    )
    if release is None:
        print("  No previous release found, assuming v0.0.0")
        return SemanticVersion(major=0, minor=0, patch=0)

    baseline = SemanticVersion.parse(release.display_name)
    if baseline is None:
        fatal(f"Could not parse latest release version: {release.display_name!r}")
    print(f"  {release.display_name} → {baseline}")
    return baseline


def classify_changes(pr: PullRequest, options: RunOptions, cache: CallCache):
    """List the PR commits and reconcile their impact with the PR title.

    Raises:
        SystemExit: If neither the PR nor any commit is conventional.
    """
    step(f"Classifying PR #{pr.number}: {pr.title}")

    commits = get_pr_commits(
        pr, repository=options.repository, token=options.token, cache=cache
    )
    result = get_impact(pr, commits)

    pr_impact = result.pr_impact.impact.name if result.pr_impact else "none"
    max_impact = result.max_commit_impact.name if result.max_commit_impact else "none"
    print(f"  PR impact: {pr_impact}")
    print(f"  Maximum commit impact: {max_impact}")

    if result.warning:
        warning(result.warning)
    if result.failed:
        fatal("No Impact determined.")

    return commits, result


def publish_outputs(
    options: RunOptions,
    pr: PullRequest,
    impact: Impact,
    new_version: SemanticVersion,
    prerelease: str | None,
    release_notes: str,
) -> None:
    """Write the step outputs consumed by later workflow steps."""
    step("Writing outputs")

    outputs: dict[str, str | bool] = {
        "release": (pr.merged and impact != Impact.NOIMPACT) or prerelease is not None,
    }
    if len(release_notes) < MAX_NOTES_OUTPUT:
        outputs["release-notes"] = release_notes
    else:
        error(
            f"Release notes length ({len(release_notes)}) exceeds "
            f"{MAX_NOTES_OUTPUT:,} characters, refusing to populate output. "
            "Use the 'release-notes-file' output instead."
        )
    outputs["release-notes-file"] = str(options.notes_file)
    outputs["prerelease"] = prerelease is not None
    outputs["tag"] = new_version.as_tag()
    outputs["version"] = str(new_version)
    outputs["version-pep-440"] = new_version.as_pep_440()

    write_outputs(options.github_output, outputs)


def stamp_pyproject(options: RunOptions, new_version: SemanticVersion) -> None:
    """Write the PEP 440 rendering of the version into pyproject.toml."""
    if options.pyproject is None:
        return

    step(f"Stamping {options.pyproject}")
    previous = get_project_version(load_pyproject(options.pyproject))
    try:
        written = set_project_version(options.pyproject, new_version.as_pep_440())
    except InvalidVersion:
        fatal(
            f"{new_version.as_pep_440()!r} is not a valid PEP 440 version; "
            f"refusing to write it to {options.pyproject}"
        )
    print(f"  version = {previous} → {written}")


def summarize(
    options: RunOptions,
    result: ImpactResult,
    previous: SemanticVersion,
    new_version: SemanticVersion,
    release_notes: str,
) -> None:
    """Append the job summary. Failures here never fail the run."""
    if options.summary_file is None:
        return
    try:
        write_job_summary(
            options.summary_file,
            render_job_summary(result, previous, new_version, release_notes),
        )
    except OSError as exc:
        warning(f"Failed to write job summary: {exc}")


def run_release(options: RunOptions) -> SemanticVersion:
    """Execute the full version-resolution run.

    Args:
        options: Run settings, usually assembled by the CLI.

    Returns:
        The new version.
    """
    cache = CallCache()

    template = load_notes_template(options, cache)
    baseline = find_baseline(options, cache)

    pr = load_pull_request(options.event_path)
    if pr is None:
        fatal("Could not find pull request in context.")

    commits, result = classify_changes(pr, options, cache)
    impact = result.final_impact.impact

    step("Resolving version")
    prerelease = resolve_release_candidate(
        pr,
        impact,
        baseline,
        partial(
            get_release_candidate_tags,
            repository=options.repository,
            token=options.token,
            cache=cache,
        ),
    )
    try:
        new_version = baseline.bump(impact, prerelease, options.build_metadata)
    except ValidationError as exc:
        fatal(f"Invalid version metadata: {exc.errors()[0]['msg']}")
    print(f"  {baseline} → {new_version} ({impact.name})")

    release_notes = render_release_notes(template, generate_release_notes(commits))
    options.notes_file.write_text(release_notes)
    print(f"  Wrote release notes to {options.notes_file}")

    publish_outputs(options, pr, impact, new_version, prerelease, release_notes)
    stamp_pyproject(options, new_version)
    summarize(options, result, baseline, new_version, release_notes)

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return new_version
