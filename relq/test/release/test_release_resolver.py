from __future__ import annotations

import pytest

from relq.core.result import Err, Ok
from relq.output.console import MockConsole
from relq.release.resolver import ResolvedVersion, VersionPolicy, normalize_branch, resolve


def _resolve(branch: str, tags: set[str], default: str = "beta-v0.0.1") -> ResolvedVersion:
    result = resolve(VersionPolicy(source_branch=branch, default_version=default), tags)
    assert isinstance(result, Ok)
    return result.value


class TestBetaBranch:
    def test_increments_latest_beta_patch(self) -> None:
        tags = {"beta-v1.2.3", "beta-v1.2.10", "stable-v2.0.0"}
        assert _resolve("beta", tags) == ResolvedVersion("beta-v1.2.11", True)

    def test_derives_from_stable_minor(self) -> None:
        tags = {"stable-v1.4.7", "stable-v1.3.9"}
        assert _resolve("beta", tags) == ResolvedVersion("beta-v1.5.0", True)

    def test_no_tags_uses_default(self) -> None:
        assert _resolve("beta", set()) == ResolvedVersion("beta-v0.0.1", True)

    def test_unparseable_default_used_verbatim(self) -> None:
        assert _resolve("beta", set(), default="first").version == "first"


class TestMainBranch:
    def test_promotes_beta_without_increment(self) -> None:
        tags = {"beta-v1.9.0", "beta-v1.10.0", "stable-v1.8.0"}
        assert _resolve("main", tags) == ResolvedVersion("stable-v1.10.0", False)

    def test_increments_stable_patch(self) -> None:
        assert _resolve("main", {"stable-v2.3.4"}) == ResolvedVersion("stable-v2.3.5", False)

    def test_no_tags_reprefixes_default(self) -> None:
        assert _resolve("main", set()) == ResolvedVersion("stable-v0.0.1", False)

    def test_default_without_family_prefix(self) -> None:
        assert _resolve("main", set(), default="v1.0.0").version == "stable-v1.0.0"


def test_branch_is_case_insensitive() -> None:
    assert _resolve(" Beta ", set()).is_prerelease
    assert not _resolve("MAIN", set()).is_prerelease


@pytest.mark.parametrize("branch", ["production", "develop", "", "feature/beta"])
@pytest.mark.parametrize("tags", [set(), {"beta-v1.0.0"}, {"stable-v1.0.0", "beta-v2.0.0"}])
def test_invalid_branch_always_fails(branch: str, tags: set[str]) -> None:
    result = resolve(VersionPolicy(source_branch=branch), tags)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_branch"


def test_ignores_foreign_tags() -> None:
    tags = {"v9.9.9", "nightly-2026-01-01", "beta-v0.1.0"}
    assert _resolve("beta", tags).version == "beta-v0.1.1"


def test_prefix_always_matches_branch() -> None:
    tags = {"beta-v3.1.4", "stable-v3.0.0"}
    assert _resolve("beta", tags).version.startswith("beta-v")
    assert _resolve("main", tags).version.startswith("stable-v")


def test_logs_decisions_to_console() -> None:
    console = MockConsole()
    resolve(VersionPolicy(source_branch="main"), set(), console=console)

    assert console.find("no release tags found")
    assert console.find("next version for main: stable-v0.0.1")


def test_invalid_branch_logged_as_error() -> None:
    console = MockConsole()
    resolve(VersionPolicy(source_branch="release"), set(), console=console)
    assert console.has_error()


def test_normalize_branch() -> None:
    assert normalize_branch("beta") == Ok("beta")
    assert isinstance(normalize_branch("gamma"), Err)
