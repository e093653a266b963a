"""Release version resolution."""

from .errors import ReleaseError
from .resolver import ResolvedVersion, VersionPolicy, normalize_branch, resolve
from .tags import ReleaseTag, TagFamily, Version, increment, latest_tag, parse_tag
from .validate import ValidatedVersion, validate_version

__all__ = [
    "ReleaseError",
    "ReleaseTag",
    "ResolvedVersion",
    "TagFamily",
    "ValidatedVersion",
    "Version",
    "VersionPolicy",
    "increment",
    "latest_tag",
    "normalize_branch",
    "parse_tag",
    "resolve",
    "validate_version",
]
