"""package.json reading, editing and writing.

The manifest is kept as the plain ``dict`` produced by ``json.loads`` so that
key order and unknown fields survive a read/write cycle untouched. Its shape
is validated once, at read time, against ``PackageJsonSchema``.
"""

import asyncio
import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from .constants import PACKAGE_JSON
from .errors import PackageJsonError

PackageJson = dict[str, Any]

DEFAULT_INDENT = "  "

_INDENT_RE = re.compile(r'\n([ \t]+)"')


class PackageJsonSchema(BaseModel):
    """Fields of package.json this tool relies on."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    version: str | None = None
    dependencies: dict[str, str] | None = None
    devDependencies: dict[str, str] | None = None
    peerDependencies: dict[str, str] | None = None
    optionalDependencies: dict[str, str] | None = None
    overrides: dict[str, str | dict[str, Any]] | None = None


async def read_package_json(directory: str | Path) -> PackageJson:
    """Read and validate package.json from a directory.

    Raises:
        PackageJsonError: If the file is missing, is not valid JSON, or does
            not look like a package.json.
    """
    path = Path(directory) / PACKAGE_JSON

    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        raise PackageJsonError(f"package.json not found at {path}")
    except OSError as e:
        raise PackageJsonError(f"Failed to read package.json: {e}")

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        raise PackageJsonError(f"Invalid JSON in package.json at {path}")

    if not isinstance(data, dict):
        raise PackageJsonError(f"Invalid package.json at {path}: expected a JSON object")

    try:
        PackageJsonSchema.model_validate(data)
    except ValidationError as e:
        raise PackageJsonError(f"Invalid package.json at {path}: {e}")

    return data


def get_override_keys(package_json: PackageJson) -> list[str]:
    """Return top-level override keys in declaration order."""
    overrides = package_json.get("overrides")
    if not overrides:
        return []
    return list(overrides.keys())


def remove_override(package_json: PackageJson, override_key: str) -> PackageJson:
    """Return a copy of the manifest without one override.

    When the last override is removed the ``overrides`` field is dropped
    entirely rather than left as an empty object.
    """
    overrides = package_json.get("overrides")
    if not overrides:
        return dict(package_json)

    remaining = {key: value for key, value in overrides.items() if key != override_key}

    if not remaining:
        return {key: value for key, value in package_json.items() if key != "overrides"}

    updated = dict(package_json)
    updated["overrides"] = remaining
    return updated


def detect_indent(content: str) -> str:
    """Detect the indentation of a JSON document.

    Measures the whitespace before the first quoted key on an indented line,
    falling back to two spaces.
    """
    match = _INDENT_RE.search(content)
    if match:
        return match.group(1)
    return DEFAULT_INDENT


def _write_sync(path: Path, package_json: PackageJson) -> None:
    indent = DEFAULT_INDENT
    if path.exists():
        indent = detect_indent(path.read_text(encoding="utf-8"))

    content = json.dumps(package_json, indent=indent, ensure_ascii=False) + "\n"
    path.write_text(content, encoding="utf-8")


async def write_package_json(directory: str | Path, package_json: PackageJson) -> None:
    """Write package.json, keeping the existing file's indentation.

    Raises:
        PackageJsonError: If the file cannot be written.
    """
    path = Path(directory) / PACKAGE_JSON

    try:
        await asyncio.to_thread(_write_sync, path, package_json)
    except (OSError, TypeError, ValueError) as e:
        raise PackageJsonError(f"Failed to write package.json: {e}")
