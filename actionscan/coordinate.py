"""Describing and matching `uses:` coordinates.

A coordinate is a set of conditions that a `uses:` step can match, such as
"match `actions/checkout`, but only if `persist-credentials: false` is set".
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from actionscan.models import UsesBody
from actionscan.uses import RepositoryUses, RepositoryUsesPattern
from actionscan.utils import ExplicitExpr

__all__ = [
    "Toggle",
    "ControlFieldType",
    "ControlEvaluation",
    "Usage",
    "SingleControl",
    "AllControl",
    "AnyControl",
    "ControlExpr",
    "ActionCoordinate",
]


class Toggle(enum.Enum):
    """How a control field's value relates to usage."""

    OPT_IN = "opt-in"
    """Usage is enabled when the control value matches."""
    OPT_OUT = "opt-out"
    """Usage is disabled when the control value matches."""


class ControlFieldType(enum.Enum):
    """The type of value that controls a step's behaviour."""

    BOOLEAN = "boolean"
    STRING = "string"


class ControlEvaluation(enum.Enum):
    """The four-valued result of evaluating a control expression."""

    DEFAULT_SATISFIED = "default-satisfied"
    SATISFIED = "satisfied"
    NOT_SATISFIED = "not-satisfied"
    CONDITIONAL = "conditional"

    def __and__(self, other: "ControlEvaluation") -> "ControlEvaluation":
        if not isinstance(other, ControlEvaluation):
            return NotImplemented
        return _AND_TABLE[(self, other)]

    def __or__(self, other: "ControlEvaluation") -> "ControlEvaluation":
        if not isinstance(other, ControlEvaluation):
            return NotImplemented
        return _OR_TABLE[(self, other)]


_D = ControlEvaluation.DEFAULT_SATISFIED
_S = ControlEvaluation.SATISFIED
_N = ControlEvaluation.NOT_SATISFIED
_C = ControlEvaluation.CONDITIONAL

_AND_TABLE = {
    (_D, _D): _D,
    (_D, _S): _S,
    (_D, _N): _N,
    (_D, _C): _C,
    (_S, _D): _S,
    (_S, _S): _S,
    (_S, _N): _N,
    (_S, _C): _C,
    (_N, _D): _N,
    (_N, _S): _N,
    (_N, _N): _N,
    (_N, _C): _N,
    (_C, _D): _S,
    (_C, _S): _C,
    (_C, _N): _N,
    (_C, _C): _C,
}

_OR_TABLE = {
    (_D, _D): _D,
    (_D, _S): _S,
    (_D, _N): _D,
    (_D, _C): _D,
    (_S, _D): _S,
    (_S, _S): _S,
    (_S, _N): _S,
    (_S, _C): _S,
    (_N, _D): _D,
    (_N, _S): _S,
    (_N, _N): _N,
    (_N, _C): _C,
    (_C, _D): _D,
    (_C, _S): _S,
    (_C, _N): _C,
    (_C, _C): _C,
}


class Usage(enum.Enum):
    """How a step uses the behaviour a coordinate describes."""

    CONDITIONAL_OPT_IN = "conditional-opt-in"
    DIRECT_OPT_IN = "direct-opt-in"
    DEFAULT_ACTION_BEHAVIOUR = "default-action-behaviour"
    ALWAYS = "always"


def _value_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class SingleControl:
    """A single control field."""

    toggle: Toggle
    field_name: str
    field_type: ControlFieldType
    satisfied_by_default: bool

    def eval(self, with_: Mapping[str, Any]) -> ControlEvaluation:
        """Evaluate this control against a step's `with:` block."""
        if self.field_name not in with_:
            if self.satisfied_by_default:
                return ControlEvaluation.DEFAULT_SATISFIED
            return ControlEvaluation.NOT_SATISFIED

        text = _value_text(with_[self.field_name])
        if text == "false" and self.field_type is ControlFieldType.BOOLEAN:
            if self.toggle is Toggle.OPT_IN:
                return ControlEvaluation.NOT_SATISFIED
            return ControlEvaluation.SATISFIED

        if ExplicitExpr.from_curly(text) is not None:
            return ControlEvaluation.CONDITIONAL
        if self.toggle is Toggle.OPT_IN:
            return ControlEvaluation.SATISFIED
        return ControlEvaluation.NOT_SATISFIED


@dataclass(frozen=True)
class AllControl:
    """Universal quantification: all of the controls must be satisfied."""

    exprs: tuple = field(default_factory=tuple)

    def __init__(self, exprs: Iterable["ControlExpr"] = ()) -> None:
        object.__setattr__(self, "exprs", tuple(exprs))

    def eval(self, with_: Mapping[str, Any]) -> ControlEvaluation:
        result = ControlEvaluation.SATISFIED
        for expr in self.exprs:
            result = result & expr.eval(with_)
        return result


@dataclass(frozen=True)
class AnyControl:
    """Existential quantification: any of the controls must be satisfied."""

    exprs: tuple = field(default_factory=tuple)

    def __init__(self, exprs: Iterable["ControlExpr"] = ()) -> None:
        object.__setattr__(self, "exprs", tuple(exprs))

    def eval(self, with_: Mapping[str, Any]) -> ControlEvaluation:
        result = ControlEvaluation.NOT_SATISFIED
        for expr in self.exprs:
            result = result | expr.eval(with_)
        return result


ControlExpr = Union[SingleControl, AllControl, AnyControl]


@dataclass(frozen=True)
class ActionCoordinate:
    """A `uses:` pattern, optionally made configurable by a control expression."""

    uses_pattern: RepositoryUsesPattern
    control: Optional[ControlExpr] = None

    @property
    def configurable(self) -> bool:
        return self.control is not None

    def usage(self, step: Any) -> Optional[Usage]:
        """The step's usage relative to this coordinate, or None if unused."""
        body = step.body()
        if not isinstance(body, UsesBody) or not isinstance(body.uses, RepositoryUses):
            return None
        if not self.uses_pattern.matches(body.uses):
            return None

        if self.control is None:
            return Usage.ALWAYS

        evaluation = self.control.eval(body.with_)
        if evaluation is ControlEvaluation.DEFAULT_SATISFIED:
            return Usage.DEFAULT_ACTION_BEHAVIOUR
        if evaluation is ControlEvaluation.SATISFIED:
            return Usage.DIRECT_OPT_IN
        if evaluation is ControlEvaluation.CONDITIONAL:
            return Usage.CONDITIONAL_OPT_IN
        return None