"""Parsing and matching of `uses:` clauses and `uses:` patterns."""

from __future__ import annotations

import enum
import functools
import re
import string
from dataclasses import dataclass
from typing import Optional, Union

__all__ = [
    "UsesParseError",
    "RepositoryUses",
    "DockerUses",
    "LocalUses",
    "Uses",
    "parse_uses",
    "PatternKind",
    "RepositoryUsesPattern",
]


class UsesParseError(ValueError):
    """Raised when a `uses:` clause or a `uses:` pattern is malformed."""


_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _eq_ignore_ascii_case(left: str, right: str) -> bool:
    return left.translate(_ASCII_LOWER) == right.translate(_ASCII_LOWER)


_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class RepositoryUses:
    """A `uses: owner/repo[/subpath][@ref]` clause."""

    owner: str
    repo: str
    subpath: Optional[str] = None
    git_ref: Optional[str] = None

    def matches(self, pattern: str) -> bool:
        """Whether this clause matches the given pattern text.

        An unparseable pattern never matches.
        """
        try:
            parsed = RepositoryUsesPattern.parse(pattern)
        except UsesParseError:
            return False
        return parsed.matches(self)

    def ref_is_commit(self) -> bool:
        """Whether the git ref is present and looks like a full commit SHA."""
        ref = self.git_ref
        return ref is not None and len(ref) == 40 and all(c in _HEX_DIGITS for c in ref)

    def commit_ref(self) -> Optional[str]:
        """The git ref, if it is a commit SHA."""
        return self.git_ref if self.ref_is_commit() else None

    def symbolic_ref(self) -> Optional[str]:
        """The git ref, if it is present and not a commit SHA."""
        return self.git_ref if not self.ref_is_commit() else None

    def unpinned(self) -> bool:
        return self.git_ref is None

    def unhashed(self) -> bool:
        return not self.ref_is_commit()


@dataclass(frozen=True)
class DockerUses:
    """A `uses: docker://...` clause."""

    image: str
    registry: Optional[str] = None
    tag: Optional[str] = None
    hash: Optional[str] = None

    def unpinned(self) -> bool:
        return self.hash is None and self.tag is None

    def unhashed(self) -> bool:
        return self.hash is None


@dataclass(frozen=True)
class LocalUses:
    """A `uses: ./path` clause; any `@` belongs to the path."""

    path: str

    def unpinned(self) -> bool:
        return True

    def unhashed(self) -> bool:
        return False


Uses = Union[RepositoryUses, DockerUses, LocalUses]


def _parse_docker(spec: str, original: str) -> DockerUses:
    if not spec:
        raise UsesParseError(f"invalid docker uses: {original}")

    tag: Optional[str] = None
    digest: Optional[str] = None
    if "@" in spec:
        spec, digest = spec.split("@", 1)
    else:
        head, sep, tail = spec.rpartition(":")
        if sep and "/" not in tail:
            spec, tag = head, tail

    registry: Optional[str] = None
    first, sep, rest = spec.partition("/")
    if sep and rest and ("." in first or ":" in first or first == "localhost"):
        registry = first

    if not spec:
        raise UsesParseError(f"invalid docker uses: {original}")
    return DockerUses(image=spec, registry=registry, tag=tag, hash=digest)


def _parse_repository(text: str) -> RepositoryUses:
    path, sep, git_ref = text.rpartition("@")
    if not sep:
        path, git_ref_opt = text, None
    else:
        if not git_ref:
            raise UsesParseError(f"invalid uses (empty ref): {text}")
        git_ref_opt = git_ref

    components = path.split("/", 2)
    if len(components) < 2 or not components[0] or not components[1]:
        raise UsesParseError(f"invalid uses: {text}")

    owner, repo = components[0], components[1]
    subpath = components[2] if len(components) == 3 else None
    return RepositoryUses(owner=owner, repo=repo, subpath=subpath, git_ref=git_ref_opt)


def parse_uses(text: str) -> Uses:
    """Parse the value of a `uses:` clause."""
    if text.startswith("./"):
        return LocalUses(path=text)
    if text.startswith("docker://"):
        return _parse_docker(text[len("docker://"):], text)
    return _parse_repository(text)


# Matches every pattern form except the bare `*`.
_REPOSITORY_USES_PATTERN = re.compile(
    r"""
    ([\w-]+)                                   # (1) owner
    /
    ([\w.-]+|\*)                               # (2) repo or *
    (?:
      /
      ([\x21-\x29\x2b-\x3f\x41-\x7e]+|\*)      # (3) subpath: printable, no @ or *; or *
    )?
    (?:
      @
      ([\x21-\x29\x2b-\x7e]+)                  # (4) git ref: printable, no *
    )?
    """,
    re.VERBOSE | re.IGNORECASE,
)


class PatternKind(enum.Enum):
    """Pattern kinds, ordered from most to least specific."""

    EXACT_WITH_REF = 0
    EXACT_PATH = 1
    EXACT_REPO = 2
    IN_REPO = 3
    IN_OWNER = 4
    ANY = 5


@functools.total_ordering
@dataclass(frozen=True)
class RepositoryUsesPattern:
    """A pattern for matching repository `uses:` clauses.

    Patterns sort by specificity: more specific patterns come first.
    """

    kind: PatternKind
    owner: Optional[str] = None
    repo: Optional[str] = None
    subpath: Optional[str] = None
    git_ref: Optional[str] = None

    def _sort_key(self) -> tuple:
        return (
            self.kind.value,
            self.owner or "",
            self.repo or "",
            self.subpath is not None,
            self.subpath or "",
            self.git_ref or "",
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RepositoryUsesPattern):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    @classmethod
    def parse(cls, text: str) -> "RepositoryUsesPattern":
        """Parse a pattern such as `owner/*`, `owner/repo/sub` or `owner/repo@v1`."""
        if text == "*":
            return cls(PatternKind.ANY)

        match = _REPOSITORY_USES_PATTERN.fullmatch(text)
        if match is None:
            raise UsesParseError(f"invalid pattern: {text}")

        owner, repo, subpath, git_ref = match.groups()

        if git_ref is None:
            if subpath is None:
                if repo == "*":
                    return cls(PatternKind.IN_OWNER, owner=owner)
                return cls(PatternKind.EXACT_REPO, owner=owner, repo=repo)
            if repo == "*":
                raise UsesParseError(f"invalid pattern: {text}")
            if subpath == "*":
                return cls(PatternKind.IN_REPO, owner=owner, repo=repo)
            return cls(PatternKind.EXACT_PATH, owner=owner, repo=repo, subpath=subpath)

        if subpath is not None and (repo == "*" or subpath == "*"):
            raise UsesParseError(f"invalid pattern: {text}")
        return cls(
            PatternKind.EXACT_WITH_REF,
            owner=owner,
            repo=repo,
            subpath=subpath,
            git_ref=git_ref,
        )

    def matches(self, uses: RepositoryUses) -> bool:
        """Whether the given repository `uses:` matches this pattern.

        Owner and repo compare case-insensitively; subpath and ref exactly.
        """
        kind = self.kind
        if kind is PatternKind.ANY:
            return True

        assert self.owner is not None
        if not _eq_ignore_ascii_case(uses.owner, self.owner):
            return False
        if kind is PatternKind.IN_OWNER:
            return True

        assert self.repo is not None
        if not _eq_ignore_ascii_case(uses.repo, self.repo):
            return False

        if kind is PatternKind.IN_REPO:
            return True
        if kind is PatternKind.EXACT_REPO:
            return uses.subpath is None
        if kind is PatternKind.EXACT_PATH:
            return uses.subpath is not None and uses.subpath == self.subpath
        # EXACT_WITH_REF
        return (
            uses.subpath == self.subpath
            and uses.git_ref is not None
            and uses.git_ref == self.git_ref
        )