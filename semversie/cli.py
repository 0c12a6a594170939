"""CLI entry point for semversie."""

from __future__ import annotations

from pathlib import Path

import click

from semversie.conventional import classify as classify_title
from semversie.models import Impact, RunOptions
from semversie.pipeline import run_release
from semversie.versions import SemanticVersion

IMPACT_CHOICES = [impact.name.lower() for impact in Impact]


def _parse_version_arg(ctx: click.Context, param: click.Parameter, value: str):
    version = SemanticVersion.parse(value)
    if version is None:
        raise click.BadParameter(f"{value!r} is not a semantic version.")
    return version


@click.group()
@click.version_option()
def cli() -> None:
    """Semantic versioning from Conventional Commits pull requests."""


@cli.command()
@click.option(
    "--release-notes-format",
    envvar=["INPUT_RELEASE-NOTES-FORMAT", "INPUT_RELEASE_NOTES_FORMAT"],
    default=None,
    help="Repository path of a release notes template.",
)
@click.option(
    "--build-metadata",
    envvar=["INPUT_BUILD-METADATA", "INPUT_BUILD_METADATA"],
    default=None,
    help="Build metadata to append to the version (e.g. a commit SHA).",
)
@click.option(
    "--token",
    envvar=["GITHUB_TOKEN", "INPUT_GITHUB_TOKEN"],
    default=None,
    help="GitHub token used for API fallbacks.",
)
@click.option("--repository", envvar="GITHUB_REPOSITORY", default=None, help="owner/repo.")
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the GitHub Actions event payload.",
)
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    type=click.Path(path_type=Path),
    default=None,
    help="Step output file. Outputs are printed when omitted.",
)
@click.option(
    "--summary-file",
    envvar="GITHUB_STEP_SUMMARY",
    type=click.Path(path_type=Path),
    default=None,
    help="Job summary file.",
)
@click.option(
    "--notes-file",
    type=click.Path(path_type=Path),
    default="release-notes.md",
    show_default=True,
    help="Where to write the release notes.",
)
@click.option(
    "--pyproject",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Stamp the PEP 440 version into this pyproject.toml.",
)
def run(**kwargs) -> None:
    """Compute the next version for the current pull request (usually in CI)."""
    run_release(RunOptions(**kwargs))


@cli.command()
@click.argument("title")
@click.option("--body", default=None, help="Commit or PR body.")
def classify(title: str, body: str | None) -> None:
    """Classify a Conventional Commits title."""
    parsed = classify_title(title, body)
    if parsed is None:
        raise click.ClickException(f"Not a Conventional Commits title: {title!r}")
    click.echo(f"{parsed.type} {parsed.impact.name}")


@cli.command()
@click.argument("version", callback=_parse_version_arg)
@click.option(
    "--impact",
    type=click.Choice(IMPACT_CHOICES, case_sensitive=False),
    required=True,
    help="Impact of the change.",
)
@click.option("--prerelease", default=None, help="Prerelease to attach.")
@click.option("--build-metadata", default=None, help="Build metadata to attach.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["semver", "tag", "pep440"]),
    default="semver",
    show_default=True,
)
def bump(
    version: SemanticVersion,
    impact: str,
    prerelease: str | None,
    build_metadata: str | None,
    fmt: str,
) -> None:
    """Bump VERSION by the given impact."""
    try:
        bumped = version.bump(Impact[impact.upper()], prerelease, build_metadata)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    if fmt == "tag":
        click.echo(bumped.as_tag())
    elif fmt == "pep440":
        click.echo(bumped.as_pep_440())
    else:
        click.echo(str(bumped))


@cli.command("next-rc")
@click.argument("base", callback=_parse_version_arg)
@click.argument("tags", nargs=-1)
def next_rc(base: SemanticVersion, tags: tuple[str, ...]) -> None:
    """Print the next release-candidate index for BASE given existing TAGS."""
    click.echo(SemanticVersion.next_rc_index(base, list(tags)))
