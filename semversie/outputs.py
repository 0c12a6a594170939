"""GitHub Actions step outputs and job summary."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from pathlib import Path

from .models import ImpactResult
from .versions import SemanticVersion

# GitHub rejects step outputs beyond this size; use the file output instead.
MAX_NOTES_OUTPUT = 10_000


def format_output(name: str, value: str | bool) -> str:
    """Render one ``$GITHUB_OUTPUT`` entry.

    Booleans become ``true``/``false``. Multi-line values use the
    heredoc form with a random delimiter.
    """
    if isinstance(value, bool):
        value = "true" if value else "false"
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(output_path: Path | None, outputs: Mapping[str, str | bool]) -> None:
    """Append outputs to the step output file, or print them when unset."""
    if output_path is None:
        for name, value in outputs.items():
            print(f"  {format_output(name, value).rstrip()}")
        return
    with open(output_path, "a") as fh:
        for name, value in outputs.items():
            fh.write(format_output(name, value))


def _impact_names(result: ImpactResult) -> tuple[str, str]:
    pr = result.pr_impact.impact.name if result.pr_impact else "none"
    commits = ", ".join(c.impact.name for c in result.commit_impacts) or "none"
    return pr, commits


def render_job_summary(
    result: ImpactResult,
    previous: SemanticVersion,
    new: SemanticVersion,
    release_notes: str,
) -> str:
    """Render the markdown job summary for a run."""
    pr_impact, commit_impacts = _impact_names(result)
    final = result.final_impact.impact.name if result.final_impact else "none"
    rows = [
        ("Previous", str(previous)),
        ("New", str(new)),
        ("PEP 440", new.as_pep_440()),
        ("PR impact", pr_impact),
        ("Commit impacts", commit_impacts),
        ("Final impact", final),
    ]
    lines = ["## semversie summary", "", "| Item | Value |", "| --- | --- |"]
    lines.extend(f"| {item} | {value} |" for item, value in rows)
    if result.warning:
        lines.extend(["", f"⚠️ **Warning:** {result.warning}"])
    lines.extend(["", "### Release Notes", "", "```markdown", release_notes, "```", ""])
    return "\n".join(lines)


def write_job_summary(summary_path: Path, content: str) -> None:
    with open(summary_path, "a") as fh:
        fh.write(content)
