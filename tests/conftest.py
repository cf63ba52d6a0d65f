"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from prune_overrides.models import InstallResult


def make_lockfile(packages: dict[str, str], name: str = "test-project") -> dict:
    """Build a package-lock.json document from install path → version."""
    entries = {"": {"name": name, "version": "1.0.0"}}
    for install_path, version in packages.items():
        entries[install_path] = {
            "version": version,
            "resolved": f"https://registry.npmjs.org/{install_path.split('node_modules/')[-1]}/-/{version}.tgz",
        }
    return {"name": name, "version": "1.0.0", "lockfileVersion": 3, "packages": entries}


def write_project(directory: Path, package_json: dict, lockfile: dict | None = None) -> Path:
    """Write package.json (and optionally package-lock.json) into a directory."""
    (directory / "package.json").write_text(json.dumps(package_json, indent=2) + "\n")
    if lockfile is not None:
        (directory / "package-lock.json").write_text(json.dumps(lockfile, indent=2) + "\n")
    return directory


class FakeInstaller:
    """Stands in for npm: writes a prepared lockfile into the trial workspace."""

    def __init__(self, lockfiles=None, fail: bool = False, timed_out: bool = False):
        self.lockfiles = lockfiles or {}
        self.fail = fail
        self.timed_out = timed_out
        self.calls: list[dict] = []

    async def __call__(self, cwd: Path, timeout: float) -> InstallResult:
        package_json = json.loads((Path(cwd) / "package.json").read_text())
        self.calls.append({"cwd": Path(cwd), "timeout": timeout, "package_json": package_json})

        if self.fail:
            return InstallResult(
                success=False,
                command="npm install --package-lock-only --ignore-scripts",
                stderr="npm ERR! code ERESOLVE",
                timed_out=self.timed_out,
            )

        remaining = set(package_json.get("overrides", {}))
        lockfile = self.lockfiles.get(frozenset(remaining), self.lockfiles.get("default"))
        if lockfile is not None:
            (Path(cwd) / "package-lock.json").write_text(json.dumps(lockfile))

        return InstallResult(success=True, command="npm install --package-lock-only --ignore-scripts")


@pytest.fixture
def sample_package_json():
    """Sample package.json with overrides for testing."""
    return {
        "name": "test-project",
        "version": "1.0.0",
        "scripts": {"test": "jest"},
        "dependencies": {
            "express": "^4.18.0",
            "lodash": "~4.17.21",
        },
        "overrides": {
            "lodash": "4.17.21",
            "semver": "7.5.4",
        },
    }


@pytest.fixture
def project_dir(tmp_path, sample_package_json):
    """Create a project with package.json and a lockfile."""
    lockfile = make_lockfile({
        "node_modules/express": "4.18.2",
        "node_modules/lodash": "4.17.21",
        "node_modules/semver": "7.5.4",
        "node_modules/express/node_modules/semver": "7.5.4",
    })
    return write_project(tmp_path, sample_package_json, lockfile)


@pytest.fixture
def lockfile_factory():
    """Return the package-lock.json builder."""
    return make_lockfile


@pytest.fixture
def project_factory():
    """Return the project writer."""
    return write_project


@pytest.fixture
def installer_factory():
    """Return the simulated npm installer class."""
    return FakeInstaller
