"""Version commands: next release version and release version validation."""

from __future__ import annotations

from pathlib import Path

import typer

from relq.cli.commands._helpers import emit_outputs, fail
from relq.cli.context import build_context
from relq.core.result import Err
from relq.git.tags import TagSource
from relq.release.resolver import VersionPolicy, resolve
from relq.release.validate import validate_version


def next_version(
    branch: str = typer.Option(
        "beta",
        "--branch",
        envvar="INPUT_SOURCE_BRANCH",
        help="Source branch: main|beta",
    ),
    default_version: str | None = typer.Option(
        None,
        "--default-version",
        envvar="INPUT_INITIAL_VERSION",
        help="Version used when no release tags exist (default from config)",
    ),
    repo: Path = typer.Option(Path("."), "--repo", help="Git checkout to read tags from"),
    fetch: bool = typer.Option(True, "--fetch/--no-fetch", help="Fetch tags before resolving"),
) -> None:
    """Compute the next release version from existing tags."""
    ctx = build_context()
    policy = VersionPolicy(
        source_branch=branch,
        default_version=default_version or ctx.config.version.default,
    )
    ctx.console.debug(f"resolving version: branch={branch!r} default={policy.default_version!r}")

    source = TagSource(ctx.root / repo)
    tags = source.release_tags(fetch=fetch)
    if isinstance(tags, Err):
        fail(tags.error)
    ctx.console.debug(f"found {len(tags.value)} release tags")

    resolved = resolve(policy, tags.value, console=ctx.console)
    if isinstance(resolved, Err):
        fail(resolved.error)

    emit_outputs(
        {
            "version": resolved.value.version,
            "is_beta": "true" if resolved.value.is_prerelease else "false",
        }
    )
    ctx.console.success(f"next version: {resolved.value.version}")


def validate(
    version: str = typer.Option("", "--version", envvar="INPUT_VERSION", help="Version to check"),
    initial_version: str = typer.Option(
        ...,
        "--initial-version",
        envvar="INITIAL_VERSION",
        help="Version used when --version is empty",
    ),
) -> None:
    """Validate and normalize a release version (v1.2.3 or v1.2.3-beta.N)."""
    ctx = build_context()
    if not version.strip():
        ctx.console.info(f"no version provided, using initial version {initial_version}")

    validated = validate_version(version, initial=initial_version)
    if isinstance(validated, Err):
        fail(validated.error)

    emit_outputs(
        {
            "VALIDATED_VERSION": validated.value.normalized,
            "VERSION_VALID": "true",
            "IS_PRERELEASE": "true" if validated.value.is_prerelease else "false",
        }
    )
    ctx.console.success(f"version {validated.value.normalized} is valid")
