"""Expansion of job execution matrices into their possible values."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Optional

from actionscan.models import NormalJob
from actionscan.utils import extract_expressions

__all__ = ["Matrix"]

_RESERVED_KEYS = frozenset({"include", "exclude"})


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _walk_path(tree: Any, current_path: str) -> Iterator[tuple[str, str]]:
    """Expand a value tree into `(dotted path, scalar text)` pairs."""
    if tree is None:
        return
    if isinstance(tree, list):
        for item in tree:
            yield from _walk_path(item, current_path)
    elif isinstance(tree, Mapping):
        for key, value in tree.items():
            yield from _walk_path(value, f"{current_path}.{key}")
    else:
        yield current_path, _scalar_text(tree)


def _expand(values: Mapping) -> list[tuple[str, str]]:
    return [
        pair
        for key, value in values.items()
        for pair in _walk_path(value, f"matrix.{key}")
    ]


def _expand_rows(rows: Any) -> Optional[list[tuple[str, str]]]:
    """Expand an `include:` or `exclude:` block, or None if it is an expression."""
    if rows is None:
        return []
    if not isinstance(rows, list):
        return None
    return [pair for row in rows if isinstance(row, Mapping) for pair in _expand(row)]


class Matrix:
    """A job's execution matrix, along with its expanded values.

    `expanded_values` holds `(path, value)` pairs such as
    `("matrix.os", "ubuntu-latest")`.
    """

    def __init__(self, inner: Any) -> None:
        self.inner = inner
        self.expanded_values: list[tuple[str, str]] = self._expand_values(inner)

    @classmethod
    def from_job(cls, job: NormalJob) -> "Matrix":
        """The matrix of the given job's strategy.

        Raises ValueError if the job has no strategy or no matrix.
        """
        strategy = job.strategy
        matrix = strategy.get("matrix") if strategy is not None else None
        if matrix is None:
            raise ValueError("job does not define a strategy or interior matrix")
        return cls(matrix)

    @property
    def is_expression(self) -> bool:
        """Whether the entire matrix is an expression."""
        return not isinstance(self.inner, Mapping)

    def expands_to_static_values(self, context: str) -> bool:
        """Whether no expansion of `context` contains an expression."""
        return not any(
            path == context and extract_expressions(expansion)
            for path, expansion in self.expanded_values
        )

    @staticmethod
    def _expand_values(inner: Any) -> list[tuple[str, str]]:
        if not isinstance(inner, Mapping):
            return []

        dimensions = {
            key: value for key, value in inner.items() if key not in _RESERVED_KEYS
        }
        expansions = _expand(dimensions)

        included = _expand_rows(inner.get("include"))
        if included is not None:
            expansions.extend(included)

        excluded = _expand_rows(inner.get("exclude"))
        if excluded is None:
            return expansions
        return [pair for pair in expansions if pair not in excluded]