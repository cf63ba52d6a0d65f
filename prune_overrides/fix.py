"""Removal of redundant overrides from the real project."""

from pathlib import Path

from .constants import DEFAULT_NPM_TIMEOUT
from .log import AnalysisLogger, silent_logger
from .manifest import read_package_json, remove_override, write_package_json
from .models import OverrideResult, Verdict
from .npm import npm_install_or_raise


async def apply_fixes(
    cwd: str | Path,
    results: list[OverrideResult],
    *,
    timeout: float = DEFAULT_NPM_TIMEOUT,
    log: AnalysisLogger | None = None,
) -> list[str]:
    """Remove redundant overrides from package.json and regenerate the lockfile.

    Returns:
        Names of the overrides that were removed.

    Raises:
        PackageJsonError: If package.json cannot be read or written.
        NpmError: If npm cannot regenerate the lockfile.
    """
    log = log or silent_logger()
    redundant = [r.name for r in results if r.verdict == Verdict.REDUNDANT]
    if not redundant:
        return []

    log.newline()
    log.info("Applying fixes...")

    package_json = await read_package_json(cwd)
    for name in redundant:
        package_json = remove_override(package_json, name)
        log.success(f"Removed override: {name}")

    await write_package_json(cwd, package_json)

    with log.status("Regenerating package-lock.json..."):
        await npm_install_or_raise(cwd, timeout)
    log.success("Lockfile regenerated")

    log.newline()
    log.success(f"Removed {len(redundant)} redundant override(s)")
    return redundant
