"""Tests for semantic version comparison."""

from functools import cmp_to_key

import pytest

from prune_overrides.versions import (
    compare_versions,
    find_max_version,
    find_min_version,
    get_older_versions,
    is_older_version,
    parse_version,
    would_introduce_older_versions,
)


class TestCompareVersions:
    """Test SemVer precedence and the lexical fallback."""

    @pytest.mark.parametrize("version", ["1.0.0", "0.0.1", "1.0.0-alpha.1", "2.3.4+build.5", "latest"])
    def test_equal_to_itself(self, version):
        """Any version should compare equal to itself."""
        assert compare_versions(version, version) == 0

    def test_numeric_fields(self):
        """Should compare major, minor and patch numerically."""
        assert compare_versions("1.2.3", "1.2.10") == -1
        assert compare_versions("1.10.0", "1.9.0") == 1
        assert compare_versions("2.0.0", "10.0.0") == -1

    def test_prerelease_ranks_below_release(self):
        """A release should outrank its prereleases."""
        assert compare_versions("1.0.0-alpha", "1.0.0") == -1
        assert compare_versions("1.0.0", "1.0.0-rc.1") == 1

    def test_numeric_prerelease_segments(self):
        """Numeric prerelease segments should compare numerically, not lexically."""
        assert compare_versions("1.0.0-alpha.2", "1.0.0-alpha.10") == -1
        assert compare_versions("1.0.0-beta.11", "1.0.0-beta.2") == 1

    def test_prerelease_prefix_ranks_lower(self):
        """A shorter prerelease that is a prefix of a longer one ranks lower."""
        assert compare_versions("1.0.0-alpha", "1.0.0-alpha.1") == -1

    def test_alphanumeric_prerelease_segments(self):
        """Non-numeric segments compare lexically."""
        assert compare_versions("1.0.0-alpha", "1.0.0-beta") == -1

    def test_build_metadata_ignored(self):
        """Build metadata should not affect ordering."""
        assert compare_versions("1.0.0+b1", "1.0.0+b2") == 0
        assert compare_versions("1.0.0+zzz", "1.0.1") == -1

    def test_leading_v_tolerated(self):
        """Should accept a leading 'v'."""
        assert compare_versions("v1.2.3", "1.2.3") == 0
        assert compare_versions("v1.2.3", "v1.3.0") == -1

    def test_invalid_versions_fall_back_to_string_comparison(self):
        """Non-semver strings should still be ordered, never raise."""
        assert compare_versions("latest", "next") == -1
        assert compare_versions("next", "latest") == 1
        assert compare_versions("1.0", "latest") == -1

    def test_transitive_ordering(self):
        """Sorting with the comparator should give the SemVer order."""
        versions = ["1.0.0", "1.0.0-alpha.10", "1.0.0-beta", "1.0.0-alpha.2", "0.9.9", "1.0.0-alpha"]
        ordered = sorted(versions, key=cmp_to_key(compare_versions))
        assert ordered == ["0.9.9", "1.0.0-alpha", "1.0.0-alpha.2", "1.0.0-alpha.10", "1.0.0-beta", "1.0.0"]

    def test_antisymmetric(self):
        """Swapping arguments should flip the sign."""
        pairs = [("1.0.0", "2.0.0"), ("1.0.0-rc.1", "1.0.0"), ("abc", "abd")]
        for a, b in pairs:
            assert compare_versions(a, b) == -compare_versions(b, a)


class TestParseVersion:
    def test_full_semver(self):
        v = parse_version("1.2.3")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)

    def test_with_prefixes(self):
        assert parse_version("v4.5.6").major == 4
        assert parse_version("=4.5.6").patch == 6

    def test_invalid(self):
        assert parse_version("latest") is None
        assert parse_version("1.2") is None
        assert parse_version("") is None


class TestMinMax:
    def test_find_min_empty(self):
        assert find_min_version([]) is None

    def test_find_min_single(self):
        assert find_min_version(["1.0.0"]) == "1.0.0"

    def test_find_min_multiple(self):
        assert find_min_version(["1.37.0", "1.28.0", "1.30.0"]) == "1.28.0"

    def test_find_min_prefers_valid_semver(self):
        """Invalid strings should not win over real versions."""
        assert find_min_version(["abc", "2.0.0", "1.5.0"]) == "1.5.0"

    def test_find_min_all_invalid(self):
        assert find_min_version(["beta", "alpha"]) == "alpha"

    def test_find_max(self):
        assert find_max_version([]) is None
        assert find_max_version(["1.0.0", "1.0.0-rc.1", "0.9.0"]) == "1.0.0"

    def test_is_older_version(self):
        assert is_older_version("1.28.0", "1.37.0") is True
        assert is_older_version("1.37.0", "1.37.0") is False

    def test_get_older_versions(self):
        assert get_older_versions(["1.37.0", "1.28.0", "1.30.0", "2.0.0"], "1.37.0") == ["1.28.0", "1.30.0"]


class TestWouldIntroduceOlderVersions:
    def test_older_version_introduced(self):
        assert would_introduce_older_versions(["1.37.0"], ["1.37.0", "1.28.0", "1.30.0"]) is True

    def test_only_newer_versions(self):
        assert would_introduce_older_versions(["1.0.0"], ["1.0.0", "2.0.0"]) is False

    def test_empty_before(self):
        assert would_introduce_older_versions([], ["1.0.0"]) is False

    def test_empty_after(self):
        assert would_introduce_older_versions(["1.0.0"], []) is False

    def test_both_empty(self):
        assert would_introduce_older_versions([], []) is False

    def test_compares_against_minimum_before(self):
        """Only versions below the lowest current version count."""
        assert would_introduce_older_versions(["2.0.0", "1.5.0"], ["1.6.0"]) is False
        assert would_introduce_older_versions(["2.0.0", "1.5.0"], ["1.4.9"]) is True
