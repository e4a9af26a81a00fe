"""
Domain — semantic versions and version ranges (pure).

Versions follow SemVer 2.0 precedence. Ranges use the familiar npm-style
grammar::

    range        ::= alternative ( "||" alternative )*
    alternative  ::= hyphen | comparator ( " " comparator )*
    hyphen       ::= partial " - " partial
    comparator   ::= ( "=" | ">" | ">=" | "<" | "<=" | "^" | "~" )? partial
    partial      ::= "*" | "x" | N ( "." N ( "." N pre? )? )?

No I/O.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from typing import Iterable


class VersionError(ValueError):
    """Raised when a version or range string cannot be parsed."""


_IDENT = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENT}(?:\.{_IDENT})*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

_PARTIAL_RE = re.compile(
    r"^(>=|<=|>|<|=|\^|~>|~)?v?"
    r"(\*|x|X|\d+)"
    r"(?:\.(\*|x|X|\d+))?"
    r"(?:\.(\*|x|X|\d+))?"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")

_WILDCARDS = {"*", "x", "X"}


def _parse_prerelease(text: str | None) -> tuple[int | str, ...]:
    if not text:
        return ()
    return tuple(int(p) if p.isdigit() else p for p in text.split("."))


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A parsed semantic version. Build metadata never affects ordering."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[int | str, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def release(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _key(self) -> tuple:
        pre = tuple(
            (0, p, "") if isinstance(p, int) else (1, 0, p)
            for p in self.prerelease
        )
        # A release sorts above every prerelease of the same triple
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, pre)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(p) for p in self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


@functools.lru_cache(maxsize=4096)
def parse_version(text: str) -> Version:
    """Parse a strict semantic version (an optional leading ``v`` is allowed).

    Raises:
        VersionError: If ``text`` is not a valid semantic version.
    """
    if not isinstance(text, str):
        raise VersionError(f"Version must be a string, got {type(text).__name__}")
    match = _VERSION_RE.match(text.strip())
    if not match:
        raise VersionError(f"Invalid semantic version: '{text}'")
    major, minor, patch, pre, build = match.groups()
    return Version(
        int(major),
        int(minor),
        int(patch),
        _parse_prerelease(pre),
        tuple(build.split(".")) if build else (),
    )


def is_valid_version(text: str) -> bool:
    try:
        parse_version(text)
    except VersionError:
        return False
    return True


# ── Ranges ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Comparator:
    """A single ``<op> <version>`` bound."""

    operator: str  # "<", "<=", ">", ">=", "="
    version: Version

    def matches(self, version: Version) -> bool:
        op = self.operator
        if op == "=":
            return version == self.version
        if op == ">":
            return version > self.version
        if op == ">=":
            return version >= self.version
        if op == "<":
            return version < self.version
        return version <= self.version

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


_ZERO = Version(0, 0, 0)
# Lowest possible version; "< _FLOOR" matches nothing
_FLOOR = Version(0, 0, 0, (0,))
_ANY: tuple[Comparator, ...] = (Comparator(">=", _ZERO),)
_NONE: tuple[Comparator, ...] = (Comparator("<", _FLOOR),)


def _upper(major: int, minor: int = 0, patch: int = 0) -> Version:
    """Exclusive upper bound that also excludes prereleases of the bound."""
    return Version(major, minor, patch, (0,))


@dataclass(frozen=True)
class VersionRange:
    """A union of comparator conjunctions."""

    text: str
    alternatives: tuple[tuple[Comparator, ...], ...]

    def allows(self, version: Version | str, include_prerelease: bool = False) -> bool:
        """Whether ``version`` satisfies this range.

        A prerelease only satisfies an alternative when one of its
        comparators names a prerelease of the same ``MAJOR.MINOR.PATCH``,
        unless ``include_prerelease`` is set.
        """
        if isinstance(version, str):
            version = parse_version(version)
        for conj in self.alternatives:
            if not all(c.matches(version) for c in conj):
                continue
            if version.is_prerelease and not include_prerelease:
                if any(
                    c.version.is_prerelease and c.version.release == version.release
                    for c in conj
                ):
                    return True
                continue
            return True
        return False

    @property
    def exact_version(self) -> Version | None:
        """The pinned version when the range is a single ``=`` comparator."""
        if len(self.alternatives) == 1 and len(self.alternatives[0]) == 1:
            comp = self.alternatives[0][0]
            if comp.operator == "=":
                return comp.version
        return None

    def __str__(self) -> str:
        return self.text

    def describe(self) -> str:
        """Normalized comparator form, e.g. ``>=1.2.0 <2.0.0-0``."""
        return " || ".join(" ".join(str(c) for c in conj) for conj in self.alternatives)


def _partial(token: str) -> tuple[str, int | None, int | None, int | None, tuple]:
    match = _PARTIAL_RE.match(token)
    if not match:
        raise VersionError(f"Invalid version comparator: '{token}'")
    op, major, minor, patch, pre = match.groups()

    parts: list[int | None] = []
    wildcard = False
    for raw in (major, minor, patch):
        if raw is None or raw in _WILDCARDS or wildcard:
            wildcard = True
            parts.append(None)
        else:
            parts.append(int(raw))

    if pre and parts[2] is None:
        raise VersionError(f"Prerelease requires a full version: '{token}'")
    return op or "", parts[0], parts[1], parts[2], _parse_prerelease(pre)


def _comparators(token: str) -> tuple[Comparator, ...]:
    op, major, minor, patch, pre = _partial(token)

    if op in ("", "="):
        if major is None:
            return _ANY
        if minor is None:
            return (Comparator(">=", Version(major, 0, 0)), Comparator("<", _upper(major + 1)))
        if patch is None:
            return (
                Comparator(">=", Version(major, minor, 0)),
                Comparator("<", _upper(major, minor + 1)),
            )
        return (Comparator("=", Version(major, minor, patch, pre)),)

    if op == "^":
        if major is None:
            return _ANY
        low = Version(major, minor or 0, patch or 0, pre)
        if major > 0:
            high = _upper(major + 1)
        elif minor is None:
            high = _upper(1)
        elif minor > 0:
            high = _upper(0, minor + 1)
        elif patch is None:
            high = _upper(0, 1)
        else:
            high = _upper(0, 0, patch + 1)
        return (Comparator(">=", low), Comparator("<", high))

    if op in ("~", "~>"):
        if major is None:
            return _ANY
        if minor is None:
            return (Comparator(">=", Version(major, 0, 0)), Comparator("<", _upper(major + 1)))
        return (
            Comparator(">=", Version(major, minor, patch or 0, pre)),
            Comparator("<", _upper(major, minor + 1)),
        )

    if op == ">":
        if major is None:
            return _NONE
        if minor is None:
            return (Comparator(">=", Version(major + 1, 0, 0)),)
        if patch is None:
            return (Comparator(">=", Version(major, minor + 1, 0)),)
        return (Comparator(">", Version(major, minor, patch, pre)),)

    if op == ">=":
        if major is None:
            return _ANY
        return (Comparator(">=", Version(major, minor or 0, patch or 0, pre)),)

    if op == "<":
        if major is None:
            return _NONE
        if minor is None:
            return (Comparator("<", _upper(major)),)
        if patch is None:
            return (Comparator("<", _upper(major, minor)),)
        return (Comparator("<", Version(major, minor, patch, pre)),)

    # "<="
    if major is None:
        return _ANY
    if minor is None:
        return (Comparator("<", _upper(major + 1)),)
    if patch is None:
        return (Comparator("<", _upper(major, minor + 1)),)
    return (Comparator("<=", Version(major, minor, patch, pre)),)


def _hyphen(low_token: str, high_token: str) -> tuple[Comparator, ...]:
    lop, lmaj, lmin, lpat, lpre = _partial(low_token)
    hop, hmaj, hmin, hpat, hpre = _partial(high_token)
    if lop or hop:
        raise VersionError(f"Hyphen range bounds take no operator: '{low_token} - {high_token}'")

    comps: list[Comparator] = []
    if lmaj is not None:
        comps.append(Comparator(">=", Version(lmaj, lmin or 0, lpat or 0, lpre)))
    else:
        comps.append(Comparator(">=", _ZERO))

    if hmaj is None:
        pass
    elif hmin is None:
        comps.append(Comparator("<", _upper(hmaj + 1)))
    elif hpat is None:
        comps.append(Comparator("<", _upper(hmaj, hmin + 1)))
    else:
        comps.append(Comparator("<=", Version(hmaj, hmin, hpat, hpre)))
    return tuple(comps)


def _alternative(text: str) -> tuple[Comparator, ...]:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        return _hyphen(hyphen.group(1), hyphen.group(2))

    # "> = 1.0" style spacing between operator and version
    compact = re.sub(r"(>=|<=|>|<|=|\^|~>|~)\s+", r"\1", text.strip())
    if not compact:
        return _ANY

    comps: list[Comparator] = []
    for token in compact.split():
        comps.extend(_comparators(token))
    return tuple(comps)


@functools.lru_cache(maxsize=4096)
def parse_range(text: str) -> VersionRange:
    """Parse a version range expression.

    Raises:
        VersionError: If the expression is malformed.
    """
    if text is None:
        text = "*"
    if not isinstance(text, str):
        raise VersionError(f"Version range must be a string, got {type(text).__name__}")
    alternatives = tuple(_alternative(part) for part in text.split("||"))
    return VersionRange(text=text.strip() or "*", alternatives=alternatives)


def _alternative_texts(text: str) -> list[str]:
    parts = []
    for part in text.split("||"):
        if _HYPHEN_RE.match(part):
            # hyphen ranges cannot share a comparator set with other tokens
            part = " ".join(str(c) for c in _alternative(part))
        parts.append(part.strip() or "*")
    return parts


def intersect_ranges(first: str, second: str) -> str:
    """Range text allowing exactly what both ``first`` and ``second`` allow.

    Alternatives are distributed, so ``^1.0.0 || ^2.0.0`` with ``>=1.5.0``
    becomes ``^1.0.0 >=1.5.0 || ^2.0.0 >=1.5.0``.

    Raises:
        VersionError: If either range is malformed.
    """
    a, b = parse_range(first), parse_range(second)
    if a.text == "*" or a.text == b.text:
        return b.text
    if b.text == "*":
        return a.text
    return " || ".join(
        f"{left} {right}"
        for left in _alternative_texts(a.text)
        for right in _alternative_texts(b.text)
    )


def is_valid_range(text: str) -> bool:
    try:
        parse_range(text)
    except VersionError:
        return False
    return True


def satisfies(version: str, range_text: str, include_prerelease: bool = False) -> bool:
    """Convenience wrapper: does ``version`` satisfy ``range_text``?"""
    return parse_range(range_text).allows(parse_version(version), include_prerelease)


def sort_versions(versions: Iterable[str], descending: bool = True) -> list[str]:
    """Sort version strings by precedence, dropping unparseable ones."""
    parsed = []
    for text in versions:
        try:
            parsed.append((parse_version(text), text))
        except VersionError:
            continue
    parsed.sort(key=lambda pair: pair[0], reverse=descending)
    return [text for _, text in parsed]


def max_satisfying(
    versions: Iterable[str],
    range_text: str,
    include_prerelease: bool = False,
) -> str | None:
    """Highest version in ``versions`` that satisfies ``range_text``."""
    rng = parse_range(range_text)
    for text in sort_versions(versions, descending=True):
        if rng.allows(parse_version(text), include_prerelease):
            return text
    return None
