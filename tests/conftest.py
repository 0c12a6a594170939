"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from semversie.models import Commit, Label, PullRequest


@pytest.fixture
def sample_commits() -> list[Commit]:
    """A mix of conventional and non-conventional commits."""
    return [
        Commit(sha="a1b2c3d4e5f6", title="docs: update readme"),
        Commit(sha="b2c3d4e5f6a1", title="fix: handle empty body"),
        Commit(sha="c3d4e5f6a1b2", title="feat(api): add endpoint"),
        Commit(sha="d4e5f6a1b2c3", title="Merge branch 'main'"),
    ]


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    """Factory for pull requests with sensible defaults."""

    def _make(
        title: str = "feat: add feature",
        body: str | None = None,
        labels: list[str] | None = None,
        merged: bool = False,
    ) -> PullRequest:
        return PullRequest(
            number=42,
            title=title,
            body=body,
            labels=[Label(name=name) for name in labels or []],
            merged=merged,
        )

    return _make


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
[project]
name = "test-package"
# bumped by CI
version = "1.0.0"
dependencies = [
    "requests>=2.0",
]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject
