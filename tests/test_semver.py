"""
Tests for semantic versions and version ranges.
"""

import pytest

from modreg.core.domain.semver import (
    Version,
    VersionError,
    intersect_ranges,
    is_valid_range,
    is_valid_version,
    max_satisfying,
    parse_range,
    parse_version,
    satisfies,
    sort_versions,
)


class TestParseVersion:
    def test_full_version(self):
        v = parse_version("1.2.3-rc.1+build.5")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease == ("rc", 1)
        assert v.build == ("build", "5")
        assert str(v) == "1.2.3-rc.1+build.5"

    def test_leading_v(self):
        assert parse_version("v2.0.0") == Version(2, 0, 0)

    @pytest.mark.parametrize("text", ["1.2", "1.2.3.4", "01.2.3", "1.2.3-", "latest", ""])
    def test_invalid(self, text):
        with pytest.raises(VersionError):
            parse_version(text)
        assert not is_valid_version(text)

    def test_non_string_rejected(self):
        with pytest.raises(VersionError):
            parse_version(1.0)


class TestPrecedence:
    def test_semver_spec_ordering(self):
        ordered = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
        ]
        parsed = [parse_version(v) for v in ordered]
        assert parsed == sorted(parsed)

    def test_numeric_parts_compare_numerically(self):
        assert parse_version("1.10.0") > parse_version("1.9.0")

    def test_build_metadata_ignored(self):
        assert parse_version("1.0.0+a") == parse_version("1.0.0+b")

    def test_sort_versions_drops_invalid(self):
        assert sort_versions(["1.0.0", "bogus", "2.0.0", "1.5.0"]) == ["2.0.0", "1.5.0", "1.0.0"]
        assert sort_versions(["2.0.0", "1.0.0"], descending=False) == ["1.0.0", "2.0.0"]


class TestRanges:
    @pytest.mark.parametrize("range_text,inside,outside", [
        ("^1.2.3", ["1.2.3", "1.9.0"], ["1.2.2", "2.0.0"]),
        ("^0.2.3", ["0.2.3", "0.2.9"], ["0.3.0"]),
        ("^0.0.3", ["0.0.3"], ["0.0.4"]),
        ("~1.2", ["1.2.0", "1.2.9"], ["1.3.0"]),
        ("~1.2.3", ["1.2.5"], ["1.3.0", "1.2.2"]),
        ("1.x", ["1.0.0", "1.99.0"], ["2.0.0"]),
        ("1.2.*", ["1.2.7"], ["1.3.0"]),
        ("*", ["0.0.1", "9.9.9"], []),
        ("", ["3.1.4"], []),
        (">=1.0.0 <2.0.0", ["1.0.0", "1.5.0"], ["2.0.0", "0.9.0"]),
        (">1.2", ["1.3.0"], ["1.2.9"]),
        ("<=1.2", ["1.2.9"], ["1.3.0"]),
        ("1.0 - 2", ["1.0.0", "2.9.9"], ["3.0.0"]),
        ("1.2.3 - 2.3.4", ["2.3.4"], ["2.3.5"]),
        ("^1.0.0 || ^3.0.0", ["1.4.0", "3.2.0"], ["2.0.0"]),
        ("=1.2.3", ["1.2.3"], ["1.2.4"]),
        (">= 1.0.0", ["1.0.0"], ["0.1.0"]),
    ])
    def test_allows(self, range_text, inside, outside):
        rng = parse_range(range_text)
        for version in inside:
            assert rng.allows(version), f"{version} should satisfy {range_text}"
        for version in outside:
            assert not rng.allows(version), f"{version} should not satisfy {range_text}"

    def test_prerelease_excluded_by_default(self):
        assert not satisfies("1.5.0-beta.1", "^1.0.0")
        assert satisfies("1.5.0-beta.1", "^1.0.0", include_prerelease=True)

    def test_prerelease_allowed_when_named(self):
        assert satisfies("1.2.3-beta.2", ">=1.2.3-beta.1 <2.0.0")
        # A prerelease of a different triple is still excluded
        assert not satisfies("1.3.0-beta.1", ">=1.2.3-beta.1 <2.0.0")

    def test_upper_bound_excludes_its_prereleases(self):
        assert not satisfies("2.0.0-rc.1", "^1.0.0", include_prerelease=True)

    def test_exact_version(self):
        assert parse_range("1.2.3").exact_version == Version(1, 2, 3)
        assert parse_range("^1.2.3").exact_version is None
        assert parse_range("1.2").exact_version is None

    def test_describe(self):
        assert parse_range("^1.2.0").describe() == ">=1.2.0 <2.0.0-0"

    @pytest.mark.parametrize("text", ["^^1", ">=abc", "1.2.3 - >2", "~>", ">1.x.3-pre"])
    def test_invalid_ranges(self, text):
        assert not is_valid_range(text)

    def test_max_satisfying(self):
        versions = ["1.0.0", "1.4.0", "2.0.0", "1.5.0-rc.1"]
        assert max_satisfying(versions, "^1.0.0") == "1.4.0"
        assert max_satisfying(versions, "^1.0.0", include_prerelease=True) == "1.5.0-rc.1"
        assert max_satisfying(versions, "^3.0.0") is None


class TestIntersectRanges:
    def test_any_and_equal(self):
        assert intersect_ranges("*", "^1.0.0") == "^1.0.0"
        assert intersect_ranges("^1.0.0", "*") == "^1.0.0"
        assert intersect_ranges("^1.0.0", "^1.0.0") == "^1.0.0"

    def test_alternatives_distribute(self):
        merged = intersect_ranges("^1.0.0 || ^2.0.0", ">=1.5.0")
        assert merged == "^1.0.0 >=1.5.0 || ^2.0.0 >=1.5.0"
        assert not satisfies("1.2.0", merged)
        assert satisfies("2.1.0", merged)

    def test_disjoint(self):
        merged = intersect_ranges("^1.0.0 || ^2.0.0", "^3.0.0")
        assert not any(satisfies(v, merged) for v in ("1.5.0", "2.5.0", "3.0.0"))

    def test_hyphen_range(self):
        merged = intersect_ranges("1.0.0 - 2.0.0", "^1.5.0")
        assert satisfies("1.6.0", merged)
        assert not satisfies("1.2.0", merged)
        assert not satisfies("2.0.0", merged)

    def test_invalid(self):
        with pytest.raises(VersionError):
            intersect_ranges("^^1", "^1.0.0")
