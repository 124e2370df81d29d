from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime

from fcr.core.result import Err, Ok, Result
from fcr.services.release.config import SNAPSHOT_DATE_FORMAT, SNAPSHOT_SUFFIX
from fcr.services.release.errors import InvalidVersion
from fcr.services.release.model import ReleaseContext


_IDENT = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENT}(?:\.{_IDENT})*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
_RELEASE_QUALIFIER_RE = re.compile(r"^v(0|[1-9]\d*)_(0|[1-9]\d*)_(0|[1-9]\d*)$")
# Alias names: letter first, then letters, digits, "_" or "-".
_QUALIFIER_UNSAFE_RE = re.compile(r"[^0-9A-Za-z_-]")


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def stable_qualifier(self) -> str:
        return f"v{self.major}_{self.minor}_{self.patch}"


def normalize_version(text: str) -> str:
    """Strip whitespace and one leading "v"."""
    s = text.strip()
    if s.startswith("v"):
        s = s[1:]
    return s


def parse_version(text: str) -> Result[SemVer, InvalidVersion]:
    version = normalize_version(text)
    if not version:
        return Err(InvalidVersion(version=text, reason="release version required"))
    m = _SEMVER_RE.match(version)
    if m is None:
        return Err(
            InvalidVersion(
                version=text,
                reason="expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]",
            )
        )
    return Ok(
        SemVer(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            prerelease=m.group(4),
            build=m.group(5),
        )
    )


def derive_release_context(
    text: str,
    *,
    dated: bool = False,
    today: date | None = None,
    suffix: str = SNAPSHOT_SUFFIX,
) -> Result[ReleaseContext, InvalidVersion]:
    """Turn a release version into its qualifier and release mode.

    1.2.3 / v1.2.3   -> v1_2_3 (stable)
    1.3.0-rc1        -> v1_3_0-rc1-pre (snapshot of v1_3_0)
    1.3.0-rc1, dated -> v1_3_0-rc1-pre-20240131
    """
    parsed = parse_version(text)
    if isinstance(parsed, Err):
        return parsed
    ver = parsed.value

    version = normalize_version(text)
    qualifier = _QUALIFIER_UNSAFE_RE.sub("_", version.replace(".", "_"))
    if not qualifier[0].isalpha():
        qualifier = "v" + qualifier

    if not ver.is_prerelease:
        return Ok(ReleaseContext(version=version, qualifier=qualifier, mode="stable"))

    qualifier += suffix
    if dated:
        day = today or datetime.now(UTC).date()
        qualifier += "-" + day.strftime(SNAPSHOT_DATE_FORMAT)

    return Ok(
        ReleaseContext(
            version=version,
            qualifier=qualifier,
            mode="snapshot",
            prev_qualifier=ver.stable_qualifier(),
        )
    )


def is_snapshot_qualifier(qualifier: str | None, *, suffix: str = SNAPSHOT_SUFFIX) -> bool:
    if not qualifier:
        return False
    pattern = re.escape(suffix) + r"(?:-\d{8})?$"
    return re.search(pattern, qualifier) is not None


def is_release_qualifier(qualifier: str | None) -> bool:
    """True for qualifiers of stable releases (v1_2_3)."""
    if not qualifier:
        return False
    return _RELEASE_QUALIFIER_RE.match(qualifier) is not None
