"""Disposable copies of a project for trial re-resolution.

A trial workspace holds only package.json and (if present)
package-lock.json, so running npm inside it never touches the real project.
"""

import asyncio
import shutil
import tempfile
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from .constants import PACKAGE_JSON, PACKAGE_LOCK, TEMP_DIR_PREFIX
from .errors import WorkspaceError


@dataclass
class TempWorkspace:
    """A temporary directory that must be cleaned up exactly once."""

    path: Path

    async def cleanup(self) -> None:
        await cleanup_workspace(self.path)


def _populate(source: Path, target: Path) -> None:
    target.mkdir(parents=True)
    shutil.copy2(source / PACKAGE_JSON, target / PACKAGE_JSON)

    # A missing lockfile is fine; npm will create one
    lockfile = source / PACKAGE_LOCK
    if lockfile.exists():
        shutil.copy2(lockfile, target / PACKAGE_LOCK)


async def create_temp_workspace(source_dir: str | Path) -> TempWorkspace:
    """Create a uniquely named workspace seeded from ``source_dir``.

    Raises:
        WorkspaceError: If the directory or file copies cannot be created.
            Anything created before the failure is removed first.
    """
    workspace_path = Path(tempfile.gettempdir()) / f"{TEMP_DIR_PREFIX}{uuid.uuid4()}"

    try:
        await asyncio.to_thread(_populate, Path(source_dir), workspace_path)
    except OSError as e:
        await cleanup_workspace(workspace_path)
        raise WorkspaceError(f"Failed to create temp workspace: {e}")

    return TempWorkspace(path=workspace_path)


async def cleanup_workspace(workspace_path: Path) -> None:
    """Remove a workspace directory. Best effort: never raises."""
    await asyncio.to_thread(shutil.rmtree, workspace_path, ignore_errors=True)


@asynccontextmanager
async def temp_workspace(source_dir: str | Path) -> AsyncIterator[TempWorkspace]:
    """Scope a trial workspace; it is removed however the block exits."""
    workspace = await create_temp_workspace(source_dir)
    try:
        yield workspace
    finally:
        await workspace.cleanup()
