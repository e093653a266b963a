"""Next-version resolution from a branch and the existing release tags.

Policy, first match wins:

    beta  + beta tag          -> beta patch + 1
    beta  + stable tag only   -> stable minor + 1, as beta
    beta  + no tags           -> default version
    main  + beta tag          -> same version, promoted to stable
    main  + stable tag only   -> stable patch + 1
    main  + no tags           -> default version, as stable

Resolution is offline: the caller fetches tags (see ``relq.git.tags``) and
passes them in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from relq.core.result import Err, Ok, Result
from relq.output.console import ConsoleProtocol
from relq.release.errors import ReleaseError
from relq.release.tags import ReleaseTag, TagFamily, latest_tag, parse_tag, parse_version

__all__ = [
    "DEFAULT_VERSION",
    "ReleaseBranch",
    "ResolvedVersion",
    "VersionPolicy",
    "normalize_branch",
    "resolve",
]

DEFAULT_VERSION = "beta-v0.0.1"

ReleaseBranch = Literal["main", "beta"]

_BRANCH_FAMILY: dict[ReleaseBranch, TagFamily] = {
    "main": TagFamily.STABLE,
    "beta": TagFamily.BETA,
}


@dataclass(frozen=True, slots=True)
class VersionPolicy:
    source_branch: str
    default_version: str = DEFAULT_VERSION


@dataclass(frozen=True, slots=True)
class ResolvedVersion:
    version: str
    is_prerelease: bool


def normalize_branch(branch: str) -> Result[ReleaseBranch, ReleaseError]:
    """Accept ``main`` or ``beta`` (case-insensitive); reject everything else."""
    name = branch.strip().lower()
    if name == "main":
        return Ok("main")
    if name == "beta":
        return Ok("beta")
    return Err(
        ReleaseError(
            kind="invalid_branch",
            message=f"invalid branch for release: {branch!r}",
            hint="only 'main' and 'beta' are released",
        )
    )


def _default_for(family: TagFamily, default_version: str) -> str:
    parsed = parse_tag(default_version)
    if parsed is not None:
        return str(parsed.with_family(family))
    if family is TagFamily.BETA:
        return default_version
    version = parse_version(default_version)
    if version is not None:
        return f"{family.prefix}{version}"
    return f"{family.prefix}{default_version.strip()}"


def _next_tag(
    branch: ReleaseBranch,
    beta: ReleaseTag | None,
    stable: ReleaseTag | None,
) -> ReleaseTag | None:
    if branch == "beta":
        if beta is not None:
            return beta.bump(3)
        if stable is not None:
            return stable.bump(2).with_family(TagFamily.BETA)
        return None

    if beta is not None:
        return beta.with_family(TagFamily.STABLE)
    if stable is not None:
        return stable.bump(3)
    return None


def resolve(
    policy: VersionPolicy,
    tags: Iterable[str],
    *,
    console: ConsoleProtocol | None = None,
) -> Result[ResolvedVersion, ReleaseError]:
    """Compute the next release version for ``policy.source_branch``.

    Returns:
        Ok(ResolvedVersion) or Err(ReleaseError) with kind ``invalid_branch``.
    """
    branch_result = normalize_branch(policy.source_branch)
    if isinstance(branch_result, Err):
        if console is not None:
            console.error(branch_result.error.message)
        return branch_result
    branch = branch_result.value
    family = _BRANCH_FAMILY[branch]

    known = list(tags)
    beta = latest_tag(known, TagFamily.BETA)
    stable = latest_tag(known, TagFamily.STABLE)

    if console is not None:
        console.debug(f"latest beta tag: {beta or '-'}")
        console.debug(f"latest stable tag: {stable or '-'}")

    tag = _next_tag(branch, beta, stable)
    if tag is None:
        version = _default_for(family, policy.default_version)
        if console is not None:
            console.info(f"no release tags found, using default version {version}")
    else:
        version = str(tag)

    if console is not None:
        console.info(f"next version for {branch}: {version}")

    return Ok(ResolvedVersion(version=version, is_prerelease=family.is_prerelease))
