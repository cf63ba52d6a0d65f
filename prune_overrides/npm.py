"""npm invocation: the external dependency resolver.

All subprocess use goes through ``run_npm``. A non-zero exit or a timeout is
reported as a failed ``InstallResult``; only a mechanically broken setup
(npm not installed, not executable) raises ``NpmError``.
"""

import asyncio
import contextlib
import shlex
from collections.abc import Awaitable, Callable
from pathlib import Path

from .constants import DEFAULT_NPM_TIMEOUT
from .errors import NpmError
from .models import InstallResult

NPM_BINARY = "npm"

# Signature of anything that can stand in for ``npm_install`` in a trial
Installer = Callable[[Path, float], Awaitable[InstallResult]]


async def run_npm(
    args: list[str],
    cwd: str | Path | None = None,
    timeout: float = DEFAULT_NPM_TIMEOUT,
) -> InstallResult:
    """Run an npm command and capture its output.

    Args:
        args: Arguments after ``npm`` (e.g., ["install", "--package-lock-only"]).
        cwd: Working directory for the command.
        timeout: Seconds to wait before killing the process.

    Returns:
        InstallResult with stripped stdout/stderr.

    Raises:
        NpmError: If the npm executable cannot be started.
    """
    cmd = [NPM_BINARY, *args]
    command = shlex.join(cmd)

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise NpmError(f"Failed to run npm: {e}", command, str(e))

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        return InstallResult(
            success=False,
            command=command,
            stderr=f"{command} timed out after {timeout:g}s",
            timed_out=True,
        )

    return InstallResult(
        success=proc.returncode == 0,
        command=command,
        stdout=stdout.decode(errors="replace").strip(),
        stderr=stderr.decode(errors="replace").strip(),
    )


async def npm_install(
    cwd: str | Path,
    timeout: float = DEFAULT_NPM_TIMEOUT,
    *,
    package_lock_only: bool = True,
    ignore_scripts: bool = True,
) -> InstallResult:
    """Run ``npm install`` in a directory without raising on failure.

    By default only the lockfile is regenerated and lifecycle scripts are
    skipped, so nothing from the registry is executed.
    """
    args = ["install"]
    if package_lock_only:
        args.append("--package-lock-only")
    if ignore_scripts:
        args.append("--ignore-scripts")

    return await run_npm(args, cwd=cwd, timeout=timeout)


async def npm_install_or_raise(
    cwd: str | Path,
    timeout: float = DEFAULT_NPM_TIMEOUT,
) -> InstallResult:
    """Run ``npm install --package-lock-only --ignore-scripts``, raising on failure.

    Raises:
        NpmError: If npm exits non-zero or times out.
    """
    result = await npm_install(cwd, timeout)
    if not result.success:
        raise NpmError(f"npm install failed: {result.stderr}", result.command, result.stderr)
    return result


async def check_npm_available() -> bool:
    """Check whether npm can be executed."""
    try:
        result = await run_npm(["--version"], timeout=30.0)
    except NpmError:
        return False
    return result.success


async def get_npm_version() -> str:
    """Return the installed npm version string.

    Raises:
        NpmError: If npm cannot be run.
    """
    result = await run_npm(["--version"], timeout=30.0)
    if not result.success:
        raise NpmError(f"npm --version failed: {result.stderr}", result.command, result.stderr)
    return result.stdout
