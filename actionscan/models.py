"""Context-bearing models of GitHub Actions workflows and composite actions."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import yaml

from actionscan.keys import InputKey, InputModelError, InputSyntaxError, RemoteKey
from actionscan.uses import Uses, UsesParseError, parse_uses
from actionscan.utils import ExplicitExpr
from actionscan.utils import env_is_static as _env_is_static

__all__ = [
    "UsesBody",
    "RunBody",
    "StepBody",
    "Workflow",
    "NormalJob",
    "ReusableWorkflowCallJob",
    "Job",
    "Step",
    "Action",
    "CompositeStep",
]

EnvBlock = Union[dict, ExplicitExpr]


class _YamlLoader(yaml.SafeLoader):
    """A safe loader whose booleans follow YAML 1.2: only `true` and `false`."""


_BOOL_TAG = "tag:yaml.org,2002:bool"
_YamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_YamlLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _load_mapping(contents: str, what: str) -> Mapping:
    try:
        document = yaml.load(contents, Loader=_YamlLoader)
    except yaml.YAMLError as exc:
        raise InputSyntaxError(exc) from exc
    if not isinstance(document, Mapping):
        raise InputModelError(f"{what} must be a mapping")
    return document


def _osc8_link(text: str, url: str) -> str:
    return f"\x1b]8;;{url}\x1b\\{text}\x1b]8;;\x1b\\"


def _link_for(key: InputKey) -> Optional[str]:
    if isinstance(key, RemoteKey):
        return _osc8_link(key.presentation_path(), str(key))
    return None


def _optional_str(data: Mapping, name: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InputModelError(f"`{name}` must be a string")
    return value


def _optional_mapping(data: Mapping, name: str) -> Optional[Mapping]:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise InputModelError(f"`{name}` must be a mapping")
    return value


_SCALARS = (str, int, float, bool)


def _scalar_map(value: Any, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InputModelError(f"`{name}` must be a mapping")
    result = {}
    for key, item in value.items():
        if not isinstance(item, _SCALARS):
            raise InputModelError(f"`{name}.{key}` must be a scalar")
        result[str(key)] = item
    return result


def _parse_env(value: Any, name: str = "env") -> EnvBlock:
    if isinstance(value, str):
        expr = ExplicitExpr.from_curly(value)
        if expr is None:
            raise InputModelError(f"`{name}` must be a mapping or an expression")
        return expr
    return _scalar_map(value, name)


def _default_shell(defaults: Optional[Mapping]) -> Optional[str]:
    if defaults is None:
        return None
    run = defaults.get("run")
    if not isinstance(run, Mapping):
        return None
    shell = run.get("shell")
    return shell if isinstance(shell, str) else None


@dataclass(frozen=True)
class UsesBody:
    """The body of a `uses:` step."""

    uses: Uses
    with_: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RunBody:
    """The body of a `run:` step."""

    run: str
    working_directory: Optional[str] = None
    shell: Optional[str] = None
    env: EnvBlock = field(default_factory=dict)


StepBody = Union[UsesBody, RunBody]


def _parse_uses(raw: Any) -> Uses:
    if not isinstance(raw, str):
        raise InputModelError("`uses` must be a string")
    try:
        return parse_uses(raw)
    except UsesParseError as exc:
        raise InputModelError(exc) from exc


def _parse_step_body(data: Mapping, *, shell_required: bool) -> StepBody:
    if "uses" in data:
        if "run" in data:
            raise InputModelError("a step can't have both `uses` and `run`")
        return UsesBody(uses=_parse_uses(data["uses"]), with_=_scalar_map(data.get("with"), "with"))
    if "run" in data:
        run = data["run"]
        if not isinstance(run, str):
            raise InputModelError("`run` must be a string")
        shell = _optional_str(data, "shell")
        if shell_required and shell is None:
            raise InputModelError("a composite `run` step requires `shell`")
        return RunBody(
            run=run,
            working_directory=_optional_str(data, "working-directory"),
            shell=shell,
            env=_parse_env(data.get("env")),
        )
    raise InputModelError("a step must have either `uses` or `run`")


class Workflow:
    """An entire GitHub Actions workflow."""

    def __init__(self, key: InputKey, source: str, document: Mapping) -> None:
        self.key = key
        self.source = source
        self.document = document
        self.link = _link_for(key)
        self.name = _optional_str(document, "name")
        self.env = _parse_env(document.get("env"))
        self.defaults = _optional_mapping(document, "defaults")
        self.permissions = document.get("permissions")

        if "on" not in document:
            raise InputModelError("workflow has no `on` triggers")
        on = document["on"]
        if isinstance(on, str):
            self.on: Union[str, tuple, dict] = on
        elif isinstance(on, list) and all(isinstance(event, str) for event in on):
            self.on = tuple(on)
        elif isinstance(on, Mapping):
            self.on = {str(event): body for event, body in on.items()}
        else:
            raise InputModelError("`on` must be an event, a list of events or a mapping")

        jobs = document.get("jobs")
        if not isinstance(jobs, Mapping):
            raise InputModelError("workflow `jobs` must be a mapping")
        self._jobs = [_make_job(str(job_id), data, self) for job_id, data in jobs.items()]

    @classmethod
    def from_string(cls, contents: str, key: InputKey) -> "Workflow":
        """Load a workflow from its YAML text."""
        return cls(key, contents, _load_mapping(contents, "a workflow"))

    def __repr__(self) -> str:
        return str(self.key)

    def jobs(self) -> Iterator["Job"]:
        """Iterate over this workflow's jobs, in document order."""
        return iter(self._jobs)

    def _has_event(self, event: str) -> bool:
        if isinstance(self.on, str):
            return self.on == event
        return event in self.on

    def has_pull_request_target(self) -> bool:
        return self._has_event("pull_request_target")

    def has_workflow_run(self) -> bool:
        return self._has_event("workflow_run")

    def has_workflow_call(self) -> bool:
        return self._has_event("workflow_call")

    def has_single_trigger(self) -> bool:
        if isinstance(self.on, str):
            return True
        return len(self.on) == 1


class NormalJob:
    """A job that runs steps on a runner."""

    def __init__(self, job_id: str, data: Mapping, parent: Workflow) -> None:
        self.id = job_id
        self.parent = parent
        self.data = data
        self.name = _optional_str(data, "name")
        if "runs-on" not in data:
            raise InputModelError(f"job `{job_id}` has no `runs-on`")
        self.runs_on = data["runs-on"]
        if not isinstance(self.runs_on, (str, list, Mapping)):
            raise InputModelError(f"job `{job_id}` has an invalid `runs-on`")
        self.env = _parse_env(data.get("env"))
        self.defaults = _optional_mapping(data, "defaults")
        self.strategy = _optional_mapping(data, "strategy")

        steps = data.get("steps")
        if steps is None:
            steps = []
        if not isinstance(steps, list):
            raise InputModelError(f"job `{job_id}` has non-list `steps`")
        self._steps = [Step(index, step, self) for index, step in enumerate(steps)]

    def __repr__(self) -> str:
        return f"NormalJob({self.id!r})"

    def steps(self) -> Iterator["Step"]:
        """Iterate over this job's steps, in order."""
        return iter(self._steps)

    def _runner_labels(self) -> Optional[list]:
        runs_on = self.runs_on
        if isinstance(runs_on, str):
            if ExplicitExpr.from_curly(runs_on) is not None:
                return None
            return [runs_on]
        if isinstance(runs_on, list):
            return [str(label) for label in runs_on]
        labels = runs_on.get("labels")
        if labels is None:
            return []
        if isinstance(labels, str):
            return [labels]
        return [str(label) for label in labels]

    def runner_default_shell(self) -> Optional[str]:
        """The runner's default shell, or None if it can't be determined."""
        labels = self._runner_labels()
        if labels is None:
            return None
        for label in labels:
            if label in ("linux", "macOS"):
                return "bash"
            if label == "windows":
                return "pwsh"
            if "ubuntu-" in label or "macos" in label:
                return "bash"
            if "windows-" in label:
                return "pwsh"
        return None


class ReusableWorkflowCallJob:
    """A job that calls a reusable workflow."""

    def __init__(self, job_id: str, data: Mapping, parent: Workflow) -> None:
        self.id = job_id
        self.parent = parent
        self.data = data
        self.name = _optional_str(data, "name")
        self.uses = _parse_uses(data["uses"])
        self.with_ = _scalar_map(data.get("with"), "with")
        self.secrets = data.get("secrets")

    def __repr__(self) -> str:
        return f"ReusableWorkflowCallJob({self.id!r})"


Job = Union[NormalJob, ReusableWorkflowCallJob]


def _make_job(job_id: str, data: Any, parent: Workflow) -> Job:
    if not isinstance(data, Mapping):
        raise InputModelError(f"job `{job_id}` must be a mapping")
    if "uses" in data:
        return ReusableWorkflowCallJob(job_id, data, parent)
    return NormalJob(job_id, data, parent)


class Step:
    """A single step in a normal workflow job."""

    def __init__(self, index: int, data: Any, parent: NormalJob) -> None:
        if not isinstance(data, Mapping):
            raise InputModelError(f"step {index} of job `{parent.id}` must be a mapping")
        self.index = index
        self.parent = parent
        self.data = data
        self.name = _optional_str(data, "name")
        self.id = _optional_str(data, "id")
        self._body = _parse_step_body(data, shell_required=False)

    def __repr__(self) -> str:
        return f"Step({self.parent.id!r}, {self.index})"

    def env_is_static(self, name: str) -> bool:
        """Whether `env.<name>` is unaffected by any expression."""
        envs = []
        if isinstance(self._body, RunBody):
            envs.append(self._body.env)
        envs.append(self.parent.env)
        envs.append(self.workflow().env)
        return _env_is_static(name, envs)

    def uses(self) -> Optional[Uses]:
        return self._body.uses if isinstance(self._body, UsesBody) else None

    def strategy(self) -> Optional[Mapping]:
        return self.parent.strategy

    def body(self) -> StepBody:
        return self._body

    def job(self) -> NormalJob:
        return self.parent

    def workflow(self) -> Workflow:
        return self.parent.parent

    def shell(self) -> Optional[str]:
        """The shell this `run:` step uses, or None if it can't be inferred."""
        if not isinstance(self._body, RunBody):
            raise TypeError("can't call shell() on a uses: step")
        return (
            self._body.shell
            or _default_shell(self.parent.defaults)
            or _default_shell(self.workflow().defaults)
            or self.parent.runner_default_shell()
        )


class Action:
    """An action definition."""

    def __init__(self, key: InputKey, source: str, document: Mapping) -> None:
        self.key = key
        self.source = source
        self.document = document
        self.link = _link_for(key)
        self.name = _optional_str(document, "name")
        self.description = _optional_str(document, "description")
        self.inputs = _optional_mapping(document, "inputs") or {}
        self.outputs = _optional_mapping(document, "outputs") or {}

        runs = _optional_mapping(document, "runs")
        if runs is None:
            raise InputModelError("action has no `runs`")
        using = runs.get("using")
        if not isinstance(using, str):
            raise InputModelError("action `runs.using` must be a string")
        self.runs = runs
        self.using = using

        self._steps: Optional[list] = None
        if using == "composite":
            steps = runs.get("steps")
            if not isinstance(steps, list):
                raise InputModelError("composite action `runs.steps` must be a list")
            self._steps = [CompositeStep(index, step, self) for index, step in enumerate(steps)]

    @classmethod
    def from_string(cls, contents: str, key: InputKey) -> "Action":
        """Load an action definition from its YAML text."""
        return cls(key, contents, _load_mapping(contents, "an action"))

    def __repr__(self) -> str:
        return str(self.key)

    @property
    def is_composite(self) -> bool:
        return self._steps is not None

    def steps(self) -> Iterator["CompositeStep"]:
        """Iterate over a composite action's steps."""
        if self._steps is None:
            raise TypeError("can't call steps() on a non-composite action")
        return iter(self._steps)


class CompositeStep:
    """A single step in a composite action."""

    def __init__(self, index: int, data: Any, parent: Action) -> None:
        if not isinstance(data, Mapping):
            raise InputModelError(f"composite step {index} must be a mapping")
        self.index = index
        self.parent = parent
        self.data = data
        self.name = _optional_str(data, "name")
        self.id = _optional_str(data, "id")
        self._body = _parse_step_body(data, shell_required=True)

    def __repr__(self) -> str:
        return f"CompositeStep({self.index})"

    def env_is_static(self, name: str) -> bool:
        """Whether `env.<name>` is unaffected by any expression."""
        if not isinstance(self._body, RunBody):
            raise TypeError("can't call env_is_static() on a uses: step")
        return _env_is_static(name, [self._body.env])

    def uses(self) -> Optional[Uses]:
        return self._body.uses if isinstance(self._body, UsesBody) else None

    def strategy(self) -> None:
        return None

    def body(self) -> StepBody:
        return self._body

    def action(self) -> Action:
        return self.parent