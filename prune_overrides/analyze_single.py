"""Verdict for a single override.

The override is removed in a throwaway copy of the project, npm regenerates
the lockfile there, and the versions of the overridden package before and
after are compared:

1. npm fails without the override → required
2. package absent both times → redundant
3. an older version than today's minimum appears → required
4. identical version sets → redundant
5. versions moved, but never below today's minimum → redundant

Only regressions keep an override alive; a version that merely changes is
not enough.
"""

from pathlib import Path

from .constants import DEFAULT_NPM_TIMEOUT
from .diff import (
    describe_change,
    diff_lockfiles,
    filter_diffs_by_package,
    has_changes_for_package,
    override_affects_resolution,
)
from .lockfile import Lockfile, get_all_resolved_versions, read_lockfile
from .log import AnalysisLogger, silent_logger
from .manifest import read_package_json, remove_override, write_package_json
from .models import OverrideResult, Verdict
from .npm import Installer, npm_install
from .versions import find_min_version, get_older_versions, would_introduce_older_versions
from .workspace import temp_workspace


def _describe(versions: list[str]) -> str:
    return ", ".join(versions) if versions else "none"


def _log_lockfile_changes(
    log: AnalysisLogger,
    override_key: str,
    baseline: Lockfile,
    trial: Lockfile,
    before_min: str | None,
    after_min: str | None,
) -> None:
    """Print per-install-path changes of the overridden package."""
    if not override_affects_resolution(before_min, after_min):
        log.debug(f"Minimum version unchanged: {describe_change(before_min, after_min)}")

    diffs = diff_lockfiles(baseline, trial)
    if not has_changes_for_package(diffs, override_key):
        log.debug(f"No lockfile changes for {override_key}")
        return

    for entry in filter_diffs_by_package(diffs, override_key):
        log.debug(f"  {entry.package_path}: {describe_change(entry.before_version, entry.after_version)}")


async def analyze_single_override(
    cwd: str | Path,
    override_key: str,
    override_value: str,
    *,
    installer: Installer = npm_install,
    timeout: float = DEFAULT_NPM_TIMEOUT,
    log: AnalysisLogger | None = None,
) -> OverrideResult:
    """Decide whether one override is redundant or required.

    Args:
        cwd: Project directory containing package.json and package-lock.json.
        override_key: Package name the override applies to.
        override_value: Version the override forces.
        installer: Re-resolves dependencies in a directory; defaults to npm.
        timeout: Seconds allowed for the installer.
        log: Logging context for debug output.

    Returns:
        The classified result.

    Raises:
        LockfileError: If the baseline lockfile is unusable, or npm succeeded
            but left no usable lockfile behind.
        WorkspaceError: If the trial workspace cannot be created.
        NpmError: If npm cannot be started at all.
    """
    log = log or silent_logger()
    log.debug(f"Analyzing override: {override_key} -> {override_value}")

    baseline = await read_lockfile(cwd)
    before_versions = get_all_resolved_versions(baseline, override_key)
    before_min = find_min_version(before_versions)

    log.debug(f"Current versions of {override_key}: {_describe(before_versions)}")

    def result(after: str | None, verdict: Verdict, reason: str) -> OverrideResult:
        return OverrideResult(
            name=override_key,
            override_value=override_value,
            before=before_min,
            after=after,
            verdict=verdict,
            reason=reason,
        )

    async with temp_workspace(cwd) as workspace:
        package_json = await read_package_json(workspace.path)
        await write_package_json(workspace.path, remove_override(package_json, override_key))

        install = await installer(workspace.path, timeout)
        if not install.success:
            log.debug(f"{install.command} failed without override: {install.stderr}")
            reason = "npm install fails without this override"
            if install.timed_out:
                reason += " (timed out)"
            return result(None, Verdict.REQUIRED, reason)

        trial = await read_lockfile(workspace.path)
        after_versions = get_all_resolved_versions(trial, override_key)
        after_min = find_min_version(after_versions)

        log.debug(f"Versions without override: {_describe(after_versions)}")
        if log.verbose:
            _log_lockfile_changes(log, override_key, baseline, trial, before_min, after_min)

        if not before_versions and not after_versions:
            return result(None, Verdict.REDUNDANT, "Package not found in dependency tree")

        if would_introduce_older_versions(before_versions, after_versions):
            older = get_older_versions(after_versions, before_min or "0.0.0")
            return result(
                after_min,
                Verdict.REQUIRED,
                f"Would introduce older version(s): {', '.join(older)} "
                f"(currently all at {before_min or 'unknown'} or newer)",
            )

        if set(before_versions) == set(after_versions):
            return result(
                after_min,
                Verdict.REDUNDANT,
                "Same version(s) resolve with and without override",
            )

        # The override pins to something dependencies reach anyway (or newer)
        return result(
            after_min,
            Verdict.REDUNDANT,
            f"No older versions would be introduced "
            f"(before: {_describe(before_versions)}, after: {_describe(after_versions)})",
        )
