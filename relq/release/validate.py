from __future__ import annotations

import re
from dataclasses import dataclass

from relq.core.result import Err, Ok, Result
from relq.release.errors import ReleaseError

_SEMVER_RE = re.compile(r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(-beta\.(0|[1-9]\d*))?$")


@dataclass(frozen=True, slots=True)
class ValidatedVersion:
    raw: str
    normalized: str
    is_prerelease: bool


def normalize_version(raw: str) -> str:
    """Strip whitespace and leading ``v``s, then add exactly one ``v``."""
    return "v" + raw.strip().lstrip("v")


def validate_version(raw: str, *, initial: str) -> Result[ValidatedVersion, ReleaseError]:
    """Validate a GitHub release version (``v1.2.3`` or ``v1.2.3-beta.4``).

    An empty ``raw`` falls back to ``initial``.
    """
    chosen = raw if raw.strip() else initial
    normalized = normalize_version(chosen)

    if _SEMVER_RE.match(normalized) is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version format: {chosen!r}",
                hint="expected v1.2.3 or v1.2.3-beta.1",
            )
        )

    return Ok(
        ValidatedVersion(
            raw=chosen,
            normalized=normalized,
            is_prerelease="-beta." in normalized,
        )
    )
