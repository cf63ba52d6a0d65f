"""Comparison of resolved versions and whole lockfiles."""

import re

from .constants import INSTALL_ROOT
from .lockfile import Lockfile
from .models import DiffEntry

_INSTALL_PATH_RE = re.compile(rf"{INSTALL_ROOT}/(.+)$")
_SCOPED_RE = re.compile(r"^(@[^/]+/[^/]+)")
_REGULAR_RE = re.compile(r"^([^/]+)")


def extract_package_name(package_path: str) -> str:
    """Extract the package name from a lockfile install path.

    Examples:
        "node_modules/foo" → "foo"
        "node_modules/@scope/bar" → "@scope/bar"
        "node_modules/a/node_modules/b" → "b"
    """
    match = _INSTALL_PATH_RE.search(package_path)
    if not match:
        return package_path

    # Nested installs: the innermost segment is the package itself
    last_part = match.group(1).split(f"/{INSTALL_ROOT}/")[-1]

    pattern = _SCOPED_RE if last_part.startswith("@") else _REGULAR_RE
    name_match = pattern.match(last_part)
    return name_match.group(1) if name_match else last_part


def diff_lockfiles(before: Lockfile, after: Lockfile) -> list[DiffEntry]:
    """List install paths whose version was added, removed or changed."""
    diffs: list[DiffEntry] = []
    all_paths = list(dict.fromkeys([*before.packages, *after.packages]))

    for package_path in all_paths:
        # Root project entry
        if package_path == "":
            continue

        before_pkg = before.packages.get(package_path)
        after_pkg = after.packages.get(package_path)
        before_version = before_pkg.version if before_pkg else None
        after_version = after_pkg.version if after_pkg else None

        if before_version is None and after_version is not None:
            change = "added"
        elif before_version is not None and after_version is None:
            change = "removed"
        elif before_version != after_version:
            change = "changed"
        else:
            continue

        diffs.append(
            DiffEntry(
                package_path=package_path,
                package_name=extract_package_name(package_path),
                before_version=before_version,
                after_version=after_version,
                change=change,
            )
        )

    return diffs


def filter_diffs_by_package(diffs: list[DiffEntry], package_name: str) -> list[DiffEntry]:
    return [diff for diff in diffs if diff.package_name == package_name]


def has_changes_for_package(diffs: list[DiffEntry], package_name: str) -> bool:
    return any(diff.package_name == package_name for diff in diffs)


def versions_match(before: str | None, after: str | None) -> bool:
    """Check whether two resolved versions are identical (both absent counts)."""
    return before == after


def override_affects_resolution(with_override: str | None, without_override: str | None) -> bool:
    return not versions_match(with_override, without_override)


def describe_change(before: str | None, after: str | None) -> str:
    """Describe a version change in words."""
    if before is None and after is None:
        return "Package not in dependency tree"
    if before is None:
        return f"Package would be added: {after}"
    if after is None:
        return f"Package would be removed (was {before})"
    if versions_match(before, after):
        return f"No change: {before}"
    return f"{before} → {after}"
