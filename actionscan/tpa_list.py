"""Listing of third-party actions that are not pinned to commit SHAs.

A plain list of unpinned third-party actions goes to a text sink, and a
full JSON report of every action found is written alongside it.
"""

from __future__ import annotations

import json
import re
import string
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO, Union

__all__ = [
    "ActionReference",
    "Summary",
    "extract_actions",
    "is_official_action",
    "is_pinned_to_sha",
    "generate_summary",
    "write_report",
]

_USES_LINE = re.compile(r"^\s*-?\s*uses:\s*([^\n]+)", re.MULTILINE)
_OFFICIAL_ORGS = frozenset({"actions", "github", "dependabot"})
_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class ActionReference:
    """An action referenced by a workflow file."""

    reference: str
    pinned_to_sha: bool
    third_party: bool
    line: str
    file_path: str


@dataclass(frozen=True)
class Summary:
    """Summary statistics over a set of action references."""

    total_actions: int
    unpinned_third_party: int
    pinned_third_party: int
    official_actions: int


def is_official_action(action_ref: str) -> bool:
    """Whether the reference belongs to one of the official organisations."""
    org = action_ref.split("/", 1)[0]
    return org.lower() in _OFFICIAL_ORGS


def is_pinned_to_sha(action_ref: str) -> bool:
    """Whether the part after the first `@` looks like a commit SHA."""
    parts = action_ref.split("@")
    if len(parts) < 2:
        return False
    ref = parts[1]
    return len(ref) >= 40 and all(c in _HEX_DIGITS for c in ref)


def extract_actions(content: str, file_path: str) -> list[ActionReference]:
    """Extract the distinct repository actions used in a workflow's text."""
    actions: list[ActionReference] = []
    seen: set[str] = set()

    for match in _USES_LINE.finditer(content):
        action_ref = match.group(1).strip()
        if not action_ref or action_ref.startswith("docker://"):
            continue

        clean_ref = action_ref.strip("'\"")
        if "/" not in clean_ref or clean_ref in seen:
            continue
        seen.add(clean_ref)

        actions.append(
            ActionReference(
                reference=clean_ref,
                pinned_to_sha=is_pinned_to_sha(clean_ref),
                third_party=not is_official_action(clean_ref),
                line=f"uses: {clean_ref}",
                file_path=file_path,
            )
        )

    return actions


def generate_summary(actions: Sequence[ActionReference]) -> Summary:
    """Count the actions by provenance and pinning."""
    return Summary(
        total_actions=len(actions),
        unpinned_third_party=sum(1 for a in actions if a.third_party and not a.pinned_to_sha),
        pinned_third_party=sum(1 for a in actions if a.third_party and a.pinned_to_sha),
        official_actions=sum(1 for a in actions if not a.third_party),
    )


def write_report(
    file_paths: Iterable[str],
    sink: TextIO,
    report_path: Union[str, Path] = "all_actions.json",
) -> list[ActionReference]:
    """Scan the given workflow files and report on the actions they use.

    A JSON report of every action is written to `report_path`; each
    unpinned third-party action is written to `sink` as one line.
    Files that cannot be read are skipped. Returns all actions found.
    """
    all_actions: list[ActionReference] = []
    for file_path in dict.fromkeys(file_paths):
        try:
            content = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        all_actions.extend(extract_actions(content, file_path))

    report = {
        "actions": [asdict(action) for action in all_actions],
        "summary": asdict(generate_summary(all_actions)),
    }
    with open(report_path, "w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2, ensure_ascii=False)

    for action in all_actions:
        if action.third_party and not action.pinned_to_sha:
            sink.write(f"{action.file_path}: uses: {action.reference}\n")

    return all_actions