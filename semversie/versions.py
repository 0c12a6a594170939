"""Semantic version parsing, comparison and bumping.

Handles conversion between version strings and SemanticVersion values,
with semver 2.0.0 precedence rules and helpers for release-candidate
numbering and PEP 440 rendering.
"""

from __future__ import annotations

import re

import semver
from pydantic import BaseModel, ConfigDict, NonNegativeInt, field_validator

from .models import Impact

# Each identifier is 0, a digit string without a leading zero, or an
# alphanumeric/hyphen token with at least one non-digit.
_PRERELEASE_RE = re.compile(
    r"(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*"
)
_BUILDMETADATA_RE = re.compile(r"[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*")
_NUMERIC_RE = re.compile(r"[0-9]+")

_RC_INLINE_RE = re.compile(r"rc([0-9]+)", re.IGNORECASE)
_RC_TOKEN_SEPARATORS = re.compile(r"[.\-_]")

_PEP440_LETTERS_RE = re.compile(r"([a-zA-Z]+)([0-9]*)")
_PEP440_PRERELEASE = {"alpha": "a", "beta": "b", "rc": "rc"}


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


class SemanticVersion(BaseModel):
    """An immutable semver 2.0.0 version.

    Build metadata is carried for rendering only: it never takes part in
    ordering or equality.
    """

    model_config = ConfigDict(frozen=True)

    major: NonNegativeInt
    minor: NonNegativeInt
    patch: NonNegativeInt
    prerelease: str | None = None
    buildmetadata: str | None = None

    @field_validator("prerelease", "buildmetadata", mode="before")
    @classmethod
    def _empty_is_absent(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("prerelease")
    @classmethod
    def _check_prerelease(cls, value: str | None) -> str | None:
        if value is not None and not _PRERELEASE_RE.fullmatch(value):
            raise ValueError(f"Invalid prerelease format: {value}")
        return value

    @field_validator("buildmetadata")
    @classmethod
    def _check_buildmetadata(cls, value: str | None) -> str | None:
        if value is not None and not _BUILDMETADATA_RE.fullmatch(value):
            raise ValueError(f"Invalid build metadata format: {value}")
        return value

    @classmethod
    def parse(cls, version: str) -> SemanticVersion | None:
        """Parse ``[v]MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``.

        Returns None for anything that is not strict semver, including
        leading zeros in numeric fields.
        """
        text = version[1:] if version.startswith("v") else version
        # semver's pattern ends in ``$``, which tolerates a trailing newline
        if not text or text.endswith("\n"):
            return None
        try:
            parsed = semver.Version.parse(text)
        except (TypeError, ValueError):
            return None
        return cls(
            major=parsed.major,
            minor=parsed.minor,
            patch=parsed.patch,
            prerelease=parsed.prerelease,
            buildmetadata=parsed.build,
        )

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            s += f"-{self.prerelease}"
        if self.buildmetadata:
            s += f"+{self.buildmetadata}"
        return s

    def as_tag(self) -> str:
        return f"v{self}"

    def as_pep_440(self) -> str:
        """Render a best-effort PEP 440 string.

        Hyphens in the prerelease become dots and each letter run is
        mapped through ``alpha→a``, ``beta→b``, ``rc→rc``; unknown letter
        runs pass through. Build metadata is dropped. The result is not
        guaranteed to be valid PEP 440 and cannot be converted back.
        """
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            s += _PEP440_LETTERS_RE.sub(
                lambda m: _PEP440_PRERELEASE.get(m[1], m[1]) + m[2],
                self.prerelease.replace("-", "."),
            )
        return s

    def bump(
        self,
        impact: Impact,
        prerelease: str | None = None,
        buildmetadata: str | None = None,
    ) -> SemanticVersion:
        """Return a new version bumped according to ``impact``.

        ``prerelease`` and ``buildmetadata`` are attached verbatim, even
        for NOIMPACT, so a release candidate can be tagged without a
        numeric change.
        """
        major, minor, patch = self.major, self.minor, self.patch
        if impact == Impact.MAJOR:
            major, minor, patch = major + 1, 0, 0
        elif impact == Impact.MINOR:
            minor, patch = minor + 1, 0
        elif impact == Impact.PATCH:
            patch += 1
        return SemanticVersion(
            major=major,
            minor=minor,
            patch=patch,
            prerelease=prerelease,
            buildmetadata=buildmetadata,
        )

    @staticmethod
    def compare_prerelease(a: str | None, b: str | None) -> int:
        """Compare two prerelease strings by semver precedence.

        A missing prerelease (a release) ranks above any prerelease.
        Identifiers are compared pairwise: numerically when both are
        all-digit, numeric below alphanumeric when mixed, otherwise by
        ASCII order. When the shared identifiers tie, the shorter list
        ranks lower.

        Returns:
            1 if a > b, -1 if a < b, 0 if equal.
        """
        if not a and not b:
            return 0
        if not a:
            return 1
        if not b:
            return -1

        a_parts = a.split(".")
        b_parts = b.split(".")
        for ap, bp in zip(a_parts, b_parts):
            a_numeric = bool(_NUMERIC_RE.fullmatch(ap))
            b_numeric = bool(_NUMERIC_RE.fullmatch(bp))
            if a_numeric and b_numeric:
                result = _sign(int(ap) - int(bp))
            elif a_numeric != b_numeric:
                result = -1 if a_numeric else 1
            else:
                result = (ap > bp) - (ap < bp)
            if result:
                return result
        return _sign(len(a_parts) - len(b_parts))

    @staticmethod
    def compare(a: SemanticVersion, b: SemanticVersion) -> int:
        """Compare two versions; returns 1, -1 or 0."""
        for x, y in (
            (a.major, b.major),
            (a.minor, b.minor),
            (a.patch, b.patch),
        ):
            if x != y:
                return _sign(x - y)
        return SemanticVersion.compare_prerelease(a.prerelease, b.prerelease)

    def compare_to(self, other: SemanticVersion) -> int:
        return SemanticVersion.compare(self, other)

    def same_release(self, other: SemanticVersion) -> bool:
        """True when both share major.minor.patch."""
        return (self.major, self.minor, self.patch) == (
            other.major,
            other.minor,
            other.patch,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return SemanticVersion.compare(self, other) == 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __lt__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return SemanticVersion.compare(self, other) < 0

    def __le__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return SemanticVersion.compare(self, other) <= 0

    def __gt__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return SemanticVersion.compare(self, other) > 0

    def __ge__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return SemanticVersion.compare(self, other) >= 0

    @staticmethod
    def next_rc_index(base: SemanticVersion, tag_names: list[str]) -> int:
        """Find the next release-candidate index for ``base``.

        Only tags that parse, carry a prerelease, and share base's
        major.minor.patch are considered. Their prerelease is split on
        ``.``, ``-`` and ``_`` and only strict forms count:

        - ``rc<digits>`` → that number
        - ``rc`` as the last token → 0
        - ``rc`` followed by a numeric token → that number

        Anything else (``rcX``, ``rc.beta``, ``preview``) is ignored.

        Returns:
            The highest index found plus one, or 0 when there is none.

        Example:
            next_rc_index(2.0.0, ["v2.0.0-rc0", "v2.0.0-rc2"]) → 3
        """
        max_rc = -1
        for name in tag_names:
            parsed = SemanticVersion.parse(name)
            if parsed is None or not parsed.prerelease:
                continue
            if not parsed.same_release(base):
                continue

            parts = _RC_TOKEN_SEPARATORS.split(parsed.prerelease)
            for i, part in enumerate(parts):
                inline = _RC_INLINE_RE.fullmatch(part)
                if inline:
                    max_rc = max(max_rc, int(inline[1]))
                    continue
                if part.lower() != "rc":
                    continue
                if i + 1 == len(parts):
                    max_rc = max(max_rc, 0)
                elif _NUMERIC_RE.fullmatch(parts[i + 1]):
                    max_rc = max(max_rc, int(parts[i + 1]))
        return max_rc + 1


def parse_version(version_str: str) -> SemanticVersion | None:
    """Parse a version or tag name, returning None when it is not semver.

    Examples:
        "1.2.3" → 1.2.3
        "v1.2.3-rc.1+build.5" → 1.2.3-rc.1+build.5
        "01.2.3" → None
    """
    return SemanticVersion.parse(version_str)


def bump(
    version: SemanticVersion,
    impact: Impact,
    prerelease: str | None = None,
    buildmetadata: str | None = None,
) -> SemanticVersion:
    """Functional form of SemanticVersion.bump."""
    return version.bump(impact, prerelease, buildmetadata)
