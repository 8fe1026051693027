"""A registry of loaded workflow and action inputs."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Union

from actionscan.keys import (
    InputKey,
    InputKind,
    InputModelError,
    InputSyntaxError,
)
from actionscan.models import Action, Workflow

__all__ = ["AuditInput", "InputRegistry"]

logger = logging.getLogger(__name__)

AuditInput = Union[Workflow, Action]


class InputRegistry:
    """Loaded inputs, keyed by their input key and iterated in key order.

    In non-strict mode, inputs that are not valid YAML or that don't fit
    the expected model are skipped with a warning instead of raising.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._inputs: dict = {}

    def __len__(self) -> int:
        return len(self._inputs)

    def __contains__(self, key: object) -> bool:
        return key in self._inputs

    def __iter__(self) -> Iterator[AuditInput]:
        """Iterate over the registered inputs, ordered by key."""
        for key in sorted(self._inputs):
            yield self._inputs[key]

    def register(self, kind: InputKind, contents: str, key: InputKey) -> None:
        """Load `contents` as the given kind of input and register it."""
        loader = Workflow if kind is InputKind.WORKFLOW else Action
        try:
            loaded = loader.from_string(contents, key)
        except InputSyntaxError as exc:
            if self.strict:
                raise
            logger.warning("failed to parse input: %s", exc)
            return
        except InputModelError as exc:
            if self.strict:
                raise
            logger.warning("failed to validate input as %s: %s", kind.value, exc)
            return
        self._register_input(loaded)

    def _register_input(self, loaded: AuditInput) -> None:
        if loaded.key in self._inputs:
            raise ValueError(f"can't register {loaded.key} more than once")
        self._inputs[loaded.key] = loaded

    def get_input(self, key: InputKey) -> AuditInput:
        """The input registered under `key`; raises KeyError if there is none."""
        try:
            return self._inputs[key]
        except KeyError:
            raise KeyError(f"requested an un-registered input: {key}") from None