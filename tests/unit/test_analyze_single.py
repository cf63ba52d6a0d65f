"""Tests for the single-override verdict engine."""

import json
import tempfile
from pathlib import Path

import pytest
from rich.console import Console

from prune_overrides.analyze_single import analyze_single_override
from prune_overrides.errors import LockfileError
from prune_overrides.log import AnalysisLogger
from prune_overrides.models import Verdict


def leftover_workspaces() -> set[Path]:
    return set(Path(tempfile.gettempdir()).glob("prune-overrides-*"))


class TestAnalyzeSingleOverride:
    """Test verdict classification with a simulated npm."""

    @pytest.mark.asyncio
    async def test_same_version_is_redundant(self, project_dir, lockfile_factory, installer_factory):
        """Same resolution with and without the override → redundant."""
        installer = installer_factory({"default": lockfile_factory({
            "node_modules/lodash": "4.17.21",
        })})

        result = await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer)

        assert result.verdict == Verdict.REDUNDANT
        assert "same version(s)" in result.reason.lower()
        assert result.before == "4.17.21"
        assert result.after == "4.17.21"
        assert result.override_value == "4.17.21"

    @pytest.mark.asyncio
    async def test_older_version_is_required(self, tmp_path, project_factory, lockfile_factory, installer_factory):
        """Removing the override reintroduces 1.28.0 where 1.37.0 was enforced → required."""
        project_factory(
            tmp_path,
            {"name": "app", "overrides": {"undici": "1.37.0"}},
            lockfile_factory({
                "node_modules/undici": "1.37.0",
                "node_modules/a/node_modules/undici": "1.37.0",
            }),
        )
        installer = installer_factory({"default": lockfile_factory({
            "node_modules/undici": "1.37.0",
            "node_modules/a/node_modules/undici": "1.28.0",
            "node_modules/b/node_modules/undici": "1.30.0",
        })})

        result = await analyze_single_override(tmp_path, "undici", "1.37.0", installer=installer)

        assert result.verdict == Verdict.REQUIRED
        assert "1.28.0" in result.reason
        assert "1.30.0" in result.reason
        assert "currently all at 1.37.0 or newer" in result.reason
        assert result.before == "1.37.0"
        assert result.after == "1.28.0"

    @pytest.mark.asyncio
    async def test_install_failure_is_required(self, project_dir, installer_factory):
        """npm failing without the override → required, after is None."""
        installer = installer_factory(fail=True)

        result = await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer)

        assert result.verdict == Verdict.REQUIRED
        assert "install fails" in result.reason
        assert result.after is None
        assert result.before == "4.17.21"

    @pytest.mark.asyncio
    async def test_timeout_is_required(self, project_dir, installer_factory):
        installer = installer_factory(fail=True, timed_out=True)

        result = await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer, timeout=5)

        assert result.verdict == Verdict.REQUIRED
        assert "timed out" in result.reason
        assert installer.calls[0]["timeout"] == 5

    @pytest.mark.asyncio
    async def test_package_not_in_tree(self, project_dir, lockfile_factory, installer_factory):
        installer = installer_factory({"default": lockfile_factory({"node_modules/lodash": "4.17.21"})})

        result = await analyze_single_override(project_dir, "left-pad", "1.3.0", installer=installer)

        assert result.verdict == Verdict.REDUNDANT
        assert result.reason == "Package not found in dependency tree"
        assert result.before is None
        assert result.after is None

    @pytest.mark.asyncio
    async def test_newer_versions_only_is_redundant(self, project_dir, lockfile_factory, installer_factory):
        """Versions that only move forward do not justify the override."""
        installer = installer_factory({"default": lockfile_factory({
            "node_modules/lodash": "4.17.21",
            "node_modules/x/node_modules/lodash": "4.18.0",
        })})

        result = await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer)

        assert result.verdict == Verdict.REDUNDANT
        assert "No older versions would be introduced" in result.reason
        assert "before: 4.17.21" in result.reason
        assert "4.18.0" in result.reason

    @pytest.mark.asyncio
    async def test_package_disappears_is_redundant(self, project_dir, lockfile_factory, installer_factory):
        installer = installer_factory({"default": lockfile_factory({})})

        result = await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer)

        assert result.verdict == Verdict.REDUNDANT
        assert result.before == "4.17.21"
        assert result.after is None

    @pytest.mark.asyncio
    async def test_trial_runs_without_the_override(self, project_dir, lockfile_factory, installer_factory):
        """Only the analyzed override is removed, in a copy of the project."""
        installer = installer_factory({"default": lockfile_factory({"node_modules/lodash": "4.17.21"})})

        await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer)

        call = installer.calls[0]
        assert call["cwd"] != project_dir
        assert call["package_json"]["overrides"] == {"semver": "7.5.4"}
        # The real project is untouched
        real = json.loads((project_dir / "package.json").read_text())
        assert real["overrides"] == {"lodash": "4.17.21", "semver": "7.5.4"}

    @pytest.mark.asyncio
    async def test_workspace_removed_after_trial(self, project_dir, lockfile_factory, installer_factory):
        existing = leftover_workspaces()
        installer = installer_factory({"default": lockfile_factory({"node_modules/lodash": "4.17.21"})})

        await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer)

        assert not installer.calls[0]["cwd"].exists()
        assert leftover_workspaces() <= existing

    @pytest.mark.asyncio
    async def test_workspace_removed_when_trial_raises(self, project_dir):
        """A failure mid-trial still removes the workspace."""
        seen = []

        async def broken_installer(cwd, timeout):
            seen.append(Path(cwd))
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await analyze_single_override(project_dir, "lodash", "4.17.21", installer=broken_installer)

        assert seen and not seen[0].exists()

    @pytest.mark.asyncio
    async def test_missing_baseline_lockfile(self, tmp_path, sample_package_json, project_factory, installer_factory):
        project_factory(tmp_path, sample_package_json)

        with pytest.raises(LockfileError):
            await analyze_single_override(tmp_path, "lodash", "4.17.21", installer=installer_factory())

    @pytest.mark.asyncio
    async def test_verbose_logs_lockfile_changes(self, project_dir, lockfile_factory, installer_factory):
        """Verbose runs list each install path of the package that moved."""
        console = Console(record=True, width=200)
        log = AnalysisLogger(verbose=True, console=console)
        installer = installer_factory({"default": lockfile_factory({
            "node_modules/lodash": "4.17.21",
            "node_modules/x/node_modules/lodash": "4.18.0",
        })})

        await analyze_single_override(project_dir, "lodash", "4.17.21", installer=installer, log=log)

        output = console.export_text()
        assert "Minimum version unchanged: No change: 4.17.21" in output
        assert "node_modules/x/node_modules/lodash: Package would be added: 4.18.0" in output
