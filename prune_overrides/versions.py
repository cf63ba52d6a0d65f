"""Semantic version comparison utilities.

Ordering follows SemVer 2.0 precedence via the semver library: numeric
major/minor/patch, releases above prereleases, prerelease identifiers
compared segment by segment (``alpha.2 < alpha.10``), and build metadata
ignored. Strings that are not semantic versions (``latest``, git refs,
tarball URLs) fall back to plain string comparison so that sorting never
fails.
"""

from functools import cmp_to_key

import semver


def parse_version(version_str: str) -> semver.Version | None:
    """Parse a version string, tolerating a leading ``v`` or ``=``.

    Returns:
        The parsed version, or None if the string is not a semantic version.
    """
    candidate = version_str.strip().lstrip("=").strip()
    if candidate[:1] in ("v", "V"):
        candidate = candidate[1:]

    try:
        return semver.Version.parse(candidate)
    except (ValueError, TypeError):
        return None


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        -1 if a < b, 0 if they rank equally, 1 if a > b.
    """
    left = parse_version(a)
    right = parse_version(b)

    if left is None or right is None:
        # Fallback for invalid semver on either side
        return (a > b) - (a < b)

    return left.compare(right)


def is_older_version(a: str, b: str) -> bool:
    """Check whether version ``a`` is strictly older than ``b``."""
    return compare_versions(a, b) < 0


def _pick(versions: list[str], sign: int) -> str | None:
    if not versions:
        return None

    # Prefer real semantic versions; only rank junk when nothing else parses
    candidates = [v for v in versions if parse_version(v) is not None] or versions
    key = cmp_to_key(lambda x, y: sign * compare_versions(x, y))
    return min(candidates, key=key)


def find_min_version(versions: list[str]) -> str | None:
    """Find the lowest version in a list, or None if the list is empty."""
    return _pick(versions, 1)


def find_max_version(versions: list[str]) -> str | None:
    """Find the highest version in a list, or None if the list is empty."""
    return _pick(versions, -1)


def get_older_versions(versions: list[str], reference: str) -> list[str]:
    """Return the versions that are older than ``reference``."""
    return [v for v in versions if is_older_version(v, reference)]


def would_introduce_older_versions(before: list[str], after: list[str]) -> bool:
    """Check whether ``after`` contains a version older than the minimum of ``before``.

    Empty inputs cannot be compared and never count as a regression.

    Examples:
        (["1.37.0"], ["1.37.0", "1.28.0"]) → True
        (["1.0.0"], ["1.0.0", "2.0.0"]) → False
    """
    if not before or not after:
        return False

    min_before = find_min_version(before)
    if min_before is None:
        return False

    return any(is_older_version(version, min_before) for version in after)
