"""Helpers for expressions, glob patterns, environments and shells."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

__all__ = [
    "ExplicitExpr",
    "Span",
    "split_patterns",
    "extract_expression",
    "extract_expressions",
    "env_is_static",
    "normalize_shell",
    "path_file_name",
    "path_components",
]

Span = Tuple[int, int]


@dataclass(frozen=True)
class ExplicitExpr:
    """An expression written with its `${{ ... }}` delimiters."""

    raw: str

    @classmethod
    def from_curly(cls, text: str) -> Optional["ExplicitExpr"]:
        """Wrap `text` if it is delimited by `${{` and `}}`, else return None."""
        if not text.startswith("${{") or not text.endswith("}}"):
            return None
        return cls(text)

    def as_raw(self) -> str:
        """The expression exactly as written."""
        return self.raw

    def as_curly(self) -> str:
        """The expression with its delimiters, without surrounding whitespace."""
        return self.raw.strip()

    def as_bare(self) -> str:
        """The expression's body, without delimiters or surrounding whitespace."""
        curly = self.as_curly()
        return curly[len("${{"):-len("}}")].strip()

    def __str__(self) -> str:
        return self.raw


def split_patterns(patterns: str) -> Iterator[str]:
    """Split a multi-line glob pattern block the way `@actions/glob` does.

    Each line is trimmed; empty lines and `#` comment lines are dropped.
    """
    for line in patterns.split("\n"):
        line = line.strip()
        if line and not line.startswith("#"):
            yield line


def extract_expression(text: str, offset: int = 0) -> Optional[Tuple[ExplicitExpr, Span]]:
    """Find the first expression in `text` at or after `offset`.

    The returned span is absolute, as a half-open `(start, end)` pair.
    Returns None if no complete expression is found.
    """
    view = text[offset:]
    start = view.find("${{")
    if start < 0:
        return None

    in_string = False
    for idx in range(start, len(view)):
        char = view[idx]
        if char == "'":
            in_string = not in_string
        elif not in_string and char == "}" and view[idx - 1] == "}":
            expr = ExplicitExpr.from_curly(view[start:idx + 1])
            assert expr is not None
            return expr, (start + offset, idx + offset + 1)
    return None


def extract_expressions(text: str) -> list[Tuple[ExplicitExpr, Span]]:
    """Find every expression in `text`, in order of appearance."""
    found: list[Tuple[ExplicitExpr, Span]] = []
    offset = 0
    while (result := extract_expression(text, offset)) is not None:
        found.append(result)
        _, (_, end) = result
        if end >= len(text):
            break
        offset = end
    return found


def _env_value_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


EnvBlock = Union[Mapping[str, Any], str, ExplicitExpr, None]


def env_is_static(name: str, envs: Iterable[EnvBlock]) -> bool:
    """Whether `env.<name>` is static, i.e. not influenced by an expression.

    `envs` are consulted from innermost to outermost. A block that is
    wholly an expression makes the access non-static; the first block
    defining `name` decides the answer.
    """
    for env in envs:
        if env is None:
            continue
        if not isinstance(env, Mapping):
            return False
        if name not in env:
            continue
        return not extract_expressions(_env_value_text(env[name]))
    return True


def path_components(path: str) -> list[str]:
    """Split a `/`-separated path into normalised components.

    A leading `/` becomes a `/` component; a leading `.` is kept as `.`;
    all other `.` and empty components are dropped.
    """
    components: list[str] = []
    rooted = path.startswith("/")
    if rooted:
        components.append("/")
    for position, part in enumerate(path.split("/")):
        if not part:
            continue
        if part == ".":
            if position == 0 and not rooted:
                components.append(".")
            continue
        components.append(part)
    return components


def path_file_name(path: str) -> Optional[str]:
    """The final component of `path`, or None if it has no file name."""
    components = path_components(path)
    if not components:
        return None
    last = components[-1]
    if last in ("/", ".", ".."):
        return None
    return last


def normalize_shell(shell: str) -> str:
    """Return the program name within a `shell:` stanza."""
    path = shell.split(" ", 1)[0]
    name = path_file_name(path)
    return name if name is not None else path