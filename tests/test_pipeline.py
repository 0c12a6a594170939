"""Tests for semversie.pipeline."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from semversie.cache import CallCache
from semversie.models import Commit, Impact, PullRequest, Release, RunOptions
from semversie.pipeline import (
    find_baseline,
    load_notes_template,
    publish_outputs,
    run_release,
)
from semversie.release_notes import DEFAULT_TEMPLATE, PLACEHOLDER
from semversie.versions import SemanticVersion


def read_outputs(path: Path) -> dict[str, str]:
    """Parse single-line ``name=value`` entries from a step output file."""
    outputs: dict[str, str] = {}
    for line in path.read_text().splitlines():
        name, sep, value = line.partition("=")
        if sep and "<<" not in name:
            outputs[name] = value
    return outputs


@pytest.fixture
def options(tmp_path: Path) -> RunOptions:
    return RunOptions(
        repository="o/r",
        token="t",
        github_output=tmp_path / "output",
        summary_file=tmp_path / "summary.md",
        notes_file=tmp_path / "release-notes.md",
    )


@pytest.fixture
def commits() -> list[Commit]:
    return [
        Commit(sha="1111111aaaa", title="feat: widget"),
        Commit(sha="2222222bbbb", title="fix: crash"),
    ]


class TestLoadNotesTemplate:
    def test_default(self, options: RunOptions) -> None:
        assert load_notes_template(options, CallCache()) == DEFAULT_TEMPLATE

    @patch("semversie.pipeline.get_file_content")
    @patch("semversie.pipeline.step")
    def test_loaded(
        self, mock_step: MagicMock, mock_content: MagicMock, options: RunOptions
    ) -> None:
        mock_content.return_value = f"Header\n{PLACEHOLDER}"
        options = options.model_copy(update={"release_notes_format": "notes.md"})

        assert load_notes_template(options, CallCache()) == f"Header\n{PLACEHOLDER}"

    @patch("semversie.pipeline.get_file_content")
    @patch("semversie.pipeline.step")
    def test_missing_falls_back_with_warning(
        self,
        mock_step: MagicMock,
        mock_content: MagicMock,
        options: RunOptions,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_content.return_value = None
        options = options.model_copy(update={"release_notes_format": "notes.md"})

        assert load_notes_template(options, CallCache()) == DEFAULT_TEMPLATE
        assert "::warning::" in capsys.readouterr().out


class TestFindBaseline:
    @patch("semversie.pipeline.get_latest_release")
    @patch("semversie.pipeline.step")
    def test_parses_release(
        self, mock_step: MagicMock, mock_release: MagicMock, options: RunOptions
    ) -> None:
        mock_release.return_value = Release(tag_name="v1.2.0", name="v1.2.0")

        assert find_baseline(options, CallCache()) == SemanticVersion(
            major=1, minor=2, patch=0
        )

    @patch("semversie.pipeline.get_latest_release")
    @patch("semversie.pipeline.step")
    def test_no_release(
        self, mock_step: MagicMock, mock_release: MagicMock, options: RunOptions
    ) -> None:
        mock_release.return_value = None

        assert find_baseline(options, CallCache()) == SemanticVersion(
            major=0, minor=0, patch=0
        )

    @patch("semversie.pipeline.get_latest_release")
    @patch("semversie.pipeline.step")
    def test_unparsable_release(
        self, mock_step: MagicMock, mock_release: MagicMock, options: RunOptions
    ) -> None:
        mock_release.return_value = Release(tag_name="latest", name="Latest build")

        with pytest.raises(SystemExit) as exc_info:
            find_baseline(options, CallCache())
        assert exc_info.value.code == 1


class TestPublishOutputs:
    @patch("semversie.pipeline.step")
    def test_oversized_notes_skipped(
        self,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        publish_outputs(
            options,
            make_pr(merged=True),
            Impact.MINOR,
            SemanticVersion(major=1, minor=0, patch=0),
            None,
            "x" * 10_000,
        )

        text = options.github_output.read_text()
        assert "release-notes<<" not in text
        assert "release-notes=" not in text
        assert "release-notes-file=" in text
        assert "::error::" in capsys.readouterr().out

    @patch("semversie.pipeline.step")
    def test_noimpact_merge_is_not_a_release(
        self,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
    ) -> None:
        publish_outputs(
            options,
            make_pr(merged=True),
            Impact.NOIMPACT,
            SemanticVersion(major=1, minor=0, patch=0),
            None,
            "notes",
        )

        outputs = read_outputs(options.github_output)
        assert outputs["release"] == "false"
        assert outputs["release-notes"] == "notes"


@patch("semversie.pipeline.step")
@patch("semversie.pipeline.get_release_candidate_tags")
@patch("semversie.pipeline.get_pr_commits")
@patch("semversie.pipeline.get_latest_release")
@patch("semversie.pipeline.load_pull_request")
class TestRunRelease:
    """End-to-end runs with the git/gh adapters stubbed out."""

    def test_merged_pr_releases(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        commits: list[Commit],
        make_pr: Callable[..., PullRequest],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="feat: widget", merged=True)
        mock_release.return_value = Release(tag_name="v1.2.0", name="v1.2.0")
        mock_commits.return_value = commits

        version = run_release(options)

        assert str(version) == "1.3.0"
        outputs = read_outputs(options.github_output)
        assert outputs["release"] == "true"
        assert outputs["prerelease"] == "false"
        assert outputs["tag"] == "v1.3.0"
        assert outputs["version"] == "1.3.0"
        assert outputs["version-pep-440"] == "1.3.0"
        assert outputs["release-notes-file"] == str(options.notes_file)
        assert outputs["release-notes"] == DEFAULT_TEMPLATE
        mock_rc_tags.assert_not_called()

        assert options.notes_file.read_text() == DEFAULT_TEMPLATE
        assert "## semversie summary" in options.summary_file.read_text()

    def test_default_template_is_emitted_verbatim(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        commits: list[Commit],
        make_pr: Callable[..., PullRequest],
    ) -> None:
        """The default template has no placeholder, so notes are not inserted."""
        mock_load_pr.return_value = make_pr(title="fix: crash", merged=True)
        mock_release.return_value = Release(tag_name="v1.2.0")
        mock_commits.return_value = commits

        run_release(options)

        assert PLACEHOLDER not in DEFAULT_TEMPLATE
        assert options.notes_file.read_text() == "%S"
        text = options.github_output.read_text()
        assert "release-notes=%S\n" in text
        assert "release-notes<<" not in text
        assert "feat: widget" not in options.notes_file.read_text()

    def test_release_candidate(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        commits: list[Commit],
        make_pr: Callable[..., PullRequest],
    ) -> None:
        mock_load_pr.return_value = make_pr(
            title="feat: widget", labels=["release-candidate"]
        )
        mock_release.return_value = Release(tag_name="v1.2.0", name="v1.2.0")
        mock_commits.return_value = commits
        mock_rc_tags.return_value = ["v1.3.0-rc0"]

        version = run_release(options)

        assert str(version) == "1.3.0-rc1"
        outputs = read_outputs(options.github_output)
        assert outputs["release"] == "true"
        assert outputs["prerelease"] == "true"
        assert outputs["tag"] == "v1.3.0-rc1"
        assert outputs["version-pep-440"] == "1.3.0rc1"
        assert mock_rc_tags.call_args.args == (SemanticVersion(major=1, minor=3, patch=0),)
        assert mock_rc_tags.call_args.kwargs["repository"] == "o/r"

    def test_open_pr_is_not_a_release(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        commits: list[Commit],
        make_pr: Callable[..., PullRequest],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="fix: crash")
        mock_release.return_value = Release(tag_name="v1.2.0", name="v1.2.0")
        mock_commits.return_value = commits

        version = run_release(options)

        assert str(version) == "1.2.1"
        assert read_outputs(options.github_output)["release"] == "false"

    def test_first_release(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="fix: initial", merged=True)
        mock_release.return_value = None
        mock_commits.return_value = []

        assert str(run_release(options)) == "0.0.1"

    def test_build_metadata(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="fix: x", merged=True)
        mock_release.return_value = Release(tag_name="v1.0.0")
        mock_commits.return_value = []
        options = options.model_copy(update={"build_metadata": "sha.abc123"})

        version = run_release(options)

        assert str(version) == "1.0.1+sha.abc123"
        assert read_outputs(options.github_output)["version-pep-440"] == "1.0.1"

    def test_invalid_build_metadata(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="fix: x", merged=True)
        mock_release.return_value = Release(tag_name="v1.0.0")
        mock_commits.return_value = []
        options = options.model_copy(update={"build_metadata": "bad meta!"})

        with pytest.raises(SystemExit):
            run_release(options)

    def test_no_pull_request(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_load_pr.return_value = None
        mock_release.return_value = None

        with pytest.raises(SystemExit) as exc_info:
            run_release(options)

        assert exc_info.value.code == 1
        assert "Could not find pull request in context." in capsys.readouterr().err
        mock_commits.assert_not_called()

    def test_no_impact(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="Update things", merged=True)
        mock_release.return_value = None
        mock_commits.return_value = [Commit(sha="abc", title="wip")]

        with pytest.raises(SystemExit):
            run_release(options)

        assert "No Impact determined." in capsys.readouterr().err
        assert not options.github_output.exists()

    def test_conflict_warns(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="chore: deps", merged=True)
        mock_release.return_value = Release(tag_name="v2.0.0")
        mock_commits.return_value = [Commit(sha="abc", title="feat: sneaky")]

        version = run_release(options)

        assert str(version) == "2.0.0"
        assert "::warning::Impact from PR title (NOIMPACT)" in capsys.readouterr().out
        assert "⚠️ **Warning:**" in options.summary_file.read_text()

    def test_template_placeholder(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        commits: list[Commit],
        make_pr: Callable[..., PullRequest],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "notes-template.md").write_text(f"Intro\n\n{PLACEHOLDER}\n\nOutro\n")
        mock_load_pr.return_value = make_pr(title="feat: widget", merged=True)
        mock_release.return_value = Release(tag_name="v1.2.0")
        mock_commits.return_value = commits
        options = options.model_copy(update={"release_notes_format": "notes-template.md"})

        run_release(options)

        notes = options.notes_file.read_text()
        assert notes.startswith("Intro\n\n# Release Notes\n")
        assert notes.endswith("\n\nOutro\n")
        assert "- feat: widget (1111111)" in notes
        assert "- fix: crash (2222222)" in notes
        assert "release-notes<<ghadelimiter_" in options.github_output.read_text()

    def test_stamps_pyproject(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
        tmp_pyproject: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="feat: x", labels=["release-candidate"])
        mock_release.return_value = Release(tag_name="v1.0.0")
        mock_commits.return_value = []
        mock_rc_tags.return_value = []
        options = options.model_copy(update={"pyproject": tmp_pyproject})

        run_release(options)

        text = tmp_pyproject.read_text()
        assert 'version = "1.1.0rc0"' in text
        assert "# bumped by CI" in text
        assert "version = 1.0.0 → 1.1.0rc0" in capsys.readouterr().out

    def test_summary_failure_does_not_fail_run(
        self,
        mock_load_pr: MagicMock,
        mock_release: MagicMock,
        mock_commits: MagicMock,
        mock_rc_tags: MagicMock,
        mock_step: MagicMock,
        options: RunOptions,
        make_pr: Callable[..., PullRequest],
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_load_pr.return_value = make_pr(title="fix: x", merged=True)
        mock_release.return_value = Release(tag_name="v1.0.0")
        mock_commits.return_value = []
        options = options.model_copy(update={"summary_file": tmp_path / "missing" / "s.md"})

        assert str(run_release(options)) == "1.0.1"
        assert "Failed to write job summary" in capsys.readouterr().out
