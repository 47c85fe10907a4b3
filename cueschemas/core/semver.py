"""Semantic version parsing.

Parsing is deliberately lenient: a leading ``v`` is accepted and the minor
and patch components may be omitted, so ``1.29``, ``v1`` and ``1.29.3`` are
all valid. Prerelease and build metadata suffixes are kept but not compared.
"""

import re
from dataclasses import dataclass

from cueschemas.core.errors import VersionError

_SEMVER_RE = re.compile(
    r"^v?(?P<major>[0-9]+)"
    r"(?:\.(?P<minor>[0-9]+))?"
    r"(?:\.(?P<patch>[0-9]+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<metadata>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version."""
    major: int
    minor: int = 0
    patch: int = 0
    prerelease: str = ""
    metadata: str = ""

    @property
    def major_minor(self) -> str:
        """The ``major.minor`` API line, e.g. ``1.29`` for ``1.29.3``."""
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text


def parse_version(version: str) -> SemVer:
    """Parse a semantic version string.

    Args:
        version: Version string such as ``1.29.3`` or ``v2.0.0-rc.1``

    Returns:
        Parsed SemVer

    Raises:
        VersionError: If the string is not a semantic version

    Example:
        >>> parse_version("1.29.3").major_minor
        '1.29'
    """
    match = _SEMVER_RE.match(version.strip()) if version else None
    if match is None:
        raise VersionError(f"Invalid semantic version: {version!r}", version=version)

    return SemVer(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        prerelease=match.group("prerelease") or "",
        metadata=match.group("metadata") or "",
    )
