"""package-lock.json parsing and version lookup."""

import asyncio
import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import INSTALL_ROOT, PACKAGE_LOCK
from .errors import LockfileError


class LockfilePackage(BaseModel):
    """One install-path entry of the ``packages`` section."""

    model_config = ConfigDict(extra="allow")

    version: str | None = None
    resolved: str | None = None
    integrity: str | None = None
    dependencies: dict[str, Any] | None = None


class Lockfile(BaseModel):
    """A parsed package-lock.json (lockfile version 2 or 3)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = None
    version: str | None = None
    lockfile_version: int | None = Field(default=None, alias="lockfileVersion")
    packages: dict[str, LockfilePackage]


async def read_lockfile(directory: str | Path) -> Lockfile:
    """Read and validate package-lock.json from a directory.

    Raises:
        LockfileError: If the file is missing, is not valid JSON, or has no
            usable ``packages`` section.
    """
    path = Path(directory) / PACKAGE_LOCK

    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        raise LockfileError(
            f"package-lock.json not found at {path}. Run 'npm install' first."
        )
    except OSError as e:
        raise LockfileError(f"Failed to read package-lock.json: {e}")

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        raise LockfileError(f"Invalid JSON in package-lock.json at {path}")

    if not isinstance(data, dict) or not isinstance(data.get("packages"), dict):
        raise LockfileError("Invalid lockfile format: missing 'packages' field")

    try:
        return Lockfile.model_validate(data)
    except ValidationError as e:
        raise LockfileError(f"Invalid lockfile format in {path}: {e}")


def _matches(install_path: str, package_name: str) -> bool:
    # Covers top-level, nested duplicates and scoped names:
    #   node_modules/pkg
    #   node_modules/foo/node_modules/@scope/pkg
    target = f"{INSTALL_ROOT}/{package_name}"
    return install_path == target or install_path.endswith(f"/{target}")


def get_all_resolved_versions(lockfile: Lockfile, package_name: str) -> list[str]:
    """Collect every distinct version of a package installed anywhere in the tree."""
    versions: dict[str, None] = {}

    for install_path, package in lockfile.packages.items():
        if package.version and _matches(install_path, package_name):
            versions[package.version] = None

    return list(versions)


def get_resolved_version(lockfile: Lockfile, package_name: str) -> str | None:
    """Get the version of a package, preferring its top-level install."""
    root_package = lockfile.packages.get(f"{INSTALL_ROOT}/{package_name}")
    if root_package and root_package.version:
        return root_package.version

    for install_path, package in lockfile.packages.items():
        if package.version and _matches(install_path, package_name):
            return package.version

    return None
