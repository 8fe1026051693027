"""Input keys: unique identities for workflow and action inputs."""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass
from typing import Optional, Union

from actionscan.uses import RepositoryUses
from actionscan.utils import path_components, path_file_name

__all__ = [
    "InputError",
    "InputSyntaxError",
    "InputModelError",
    "MissingNameError",
    "InputKind",
    "LocalKey",
    "RemoteKey",
    "InputKey",
    "local_key",
    "remote_key",
]


class InputError(Exception):
    """Raised when an input cannot be loaded."""


class InputSyntaxError(InputError):
    """The input is not valid YAML."""

    def __init__(self, detail: object) -> None:
        super().__init__(f"invalid YAML syntax: {detail}")


class InputModelError(InputError):
    """The input could not be turned into the expected model."""

    def __init__(self, detail: object = None) -> None:
        message = "couldn't turn input into an appropriate model"
        if detail is not None:
            message = f"{message}: {detail}"
        super().__init__(message)


class MissingNameError(InputError):
    """The input's path has no filename component."""

    def __init__(self) -> None:
        super().__init__("invalid input: no filename component")


class InputKind(enum.Enum):
    """What kind of document an input is."""

    WORKFLOW = "workflow"
    ACTION = "action"


def _path_key(path: str) -> tuple:
    return tuple(path_components(path))


@functools.total_ordering
@dataclass(frozen=True, eq=True)
class LocalKey:
    """A key for an input on the local filesystem."""

    given_path: str
    prefix: Optional[str] = None

    def _sort_key(self) -> tuple:
        return (
            0,
            self.prefix is not None,
            _path_key(self.prefix or ""),
            _path_key(self.given_path),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, (LocalKey, RemoteKey)):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return f"file://{self.given_path}"

    def sarif_path(self) -> str:
        """The path relative to the prefix, if the prefix applies."""
        if self.prefix is None:
            return self.given_path
        path = path_components(self.given_path)
        prefix = path_components(self.prefix)
        if path[: len(prefix)] != prefix:
            return self.given_path
        rest = path[len(prefix):]
        if rest and rest[0] == "/":
            return "/" + "/".join(rest[1:])
        return "/".join(rest)

    def presentation_path(self) -> str:
        return self.given_path

    def filename(self) -> str:
        name = path_file_name(self.given_path)
        assert name is not None
        return name


@functools.total_ordering
@dataclass(frozen=True, eq=True)
class RemoteKey:
    """A key for an input inside a GitHub repository."""

    owner: str
    repo: str
    path: str
    git_ref: Optional[str] = None

    def _sort_key(self) -> tuple:
        return (
            1,
            self.owner,
            self.repo,
            self.git_ref is not None,
            self.git_ref or "",
            _path_key(self.path),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, (LocalKey, RemoteKey)):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        git_ref = self.git_ref if self.git_ref is not None else "HEAD"
        return f"https://github.com/{self.owner}/{self.repo}/blob/{git_ref}/{self.path}"

    def sarif_path(self) -> str:
        return self.path

    def presentation_path(self) -> str:
        return self.path

    def filename(self) -> str:
        name = path_file_name(self.path)
        assert name is not None
        return name


InputKey = Union[LocalKey, RemoteKey]


def local_key(path: str, prefix: Optional[str] = None) -> LocalKey:
    """Create a key for a local input; the path must name a file."""
    if path_file_name(path) is None:
        raise MissingNameError()
    return LocalKey(given_path=path, prefix=prefix)


def remote_key(slug: RepositoryUses, path: str) -> RemoteKey:
    """Create a key for an input at `path` in the repository named by `slug`."""
    if path_file_name(path) is None:
        raise MissingNameError()
    return RemoteKey(owner=slug.owner, repo=slug.repo, path=path, git_ref=slug.git_ref)