# actionscan

A library of building blocks for the static analysis of GitHub Actions
workflows and composite actions.

## Installation

```
pip install actionscan
```

## Modules

- `actionscan.uses` parses `uses:` clauses. `parse_uses` turns a clause
  into a `RepositoryUses`, `DockerUses` or `LocalUses`. A malformed clause
  raises `UsesParseError`. Each of the three has `unpinned()` and
  `unhashed()`. `RepositoryUses` also has `ref_is_commit()`, `commit_ref()`,
  `symbolic_ref()` and `matches(pattern)`. `RepositoryUsesPattern.parse`
  accepts patterns such as `*`, `owner/*`, `owner/repo`, `owner/repo/*`,
  `owner/repo/subpath` and `owner/repo@ref`. Patterns sort from most to
  least specific, and `matches` compares owner and repo case-insensitively.
- `actionscan.utils` holds the text helpers:
  - `ExplicitExpr` represents a `${{ ... }}` expression.
  - `extract_expression` and `extract_expressions` find expressions in text
    and return them with their spans.
  - `split_patterns` splits a multi-line glob list, dropping blank lines and
    `#` comment lines.
  - `env_is_static` reports whether an `env.NAME` access is free of
    expressions.
  - `normalize_shell` reduces a `shell:` value to its program name.
- `actionscan.keys` identifies inputs.
  - `local_key` and `remote_key` build a `LocalKey` or a `RemoteKey`. Each
    key has `presentation_path()`, `sarif_path()` and `filename()`.
  - `str()` of a key gives a `file://` URL or a `github.com` blob URL.
  - The exceptions are `InputError` and its subclasses `InputSyntaxError`,
    `InputModelError` and `MissingNameError`.
- `actionscan.models` loads YAML text.
  - `Workflow.from_string` and `Action.from_string` load a workflow or an
    action.
  - Jobs come back as `NormalJob` and `ReusableWorkflowCallJob`, and steps
    as `Step` and `CompositeStep`.
  - A step's body is either a `UsesBody` or a `RunBody`.
  - The trigger checks are `has_pull_request_target()`, `has_workflow_run()`,
    `has_workflow_call()` and `has_single_trigger()`.
  - `Step.shell()` infers a step's shell. It tries the step first, then the
    job's defaults, then the workflow's defaults, then the runner's labels.
- `actionscan.coordinate` describes action coordinates.
  - An `ActionCoordinate` is a `RepositoryUsesPattern`, optionally combined
    with a control expression.
  - A control expression is built from `SingleControl`, `AllControl` and
    `AnyControl`.
  - `ActionCoordinate.usage(step)` returns a `Usage`, or `None` if the step
    does not use the coordinate.
  - `ControlEvaluation` is four-valued and supports `&` and `|`.
- `actionscan.matrix`: `Matrix.from_job` expands a job's strategy matrix
  into `(path, value)` pairs, taking account of `include:` and `exclude:`.
  `expands_to_static_values(context)` checks whether any of those values
  contains an expression.
- `actionscan.registry`: `InputRegistry` holds loaded inputs and iterates
  them in key order.
  - In non-strict mode, an input that fails to parse or to load is skipped
    with a logged warning.
  - In strict mode, such an input raises.
  - Registering the same key twice raises `ValueError`.
- `actionscan.tpa_list` finds the repository actions in workflow files.
  - `extract_actions`, `is_official_action`, `is_pinned_to_sha` and
    `generate_summary` work on those actions.
  - `write_report(file_paths, sink, report_path)` writes a JSON report of
    every action to `report_path`, which defaults to `all_actions.json`.
  - It also writes one line to `sink` for each third-party action that is
    not pinned to a commit SHA.

## Example

```python
from actionscan.uses import parse_uses, RepositoryUsesPattern

uses = parse_uses("actions/checkout@v4")
print(uses.unhashed())                                          # True
print(RepositoryUsesPattern.parse("actions/*").matches(uses))   # True
```

```python
from actionscan.utils import extract_expressions

for expr, span in extract_expressions("echo ${{ github.actor }}"):
    print(expr.as_bare(), span)   # github.actor (5, 24)
```

```python
from actionscan.keys import local_key
from actionscan.models import Workflow

workflow = Workflow.from_string(
    "on: push\njobs:\n  build:\n    runs-on: ubuntu-latest\n    steps:\n      - run: make\n",
    local_key("ci.yml"),
)
for job in workflow.jobs():
    for step in job.steps():
        print(step.shell())   # bash
```

## What it does not do

This package is a library only:

- It has no command-line program.
- It has no set of audits that produce findings.
- It does not render findings as plain, SARIF or GitHub annotation output.
- It does not fetch workflows from GitHub.

Inputs are checked only as far as the models need. They are not validated
against a JSON schema.

## Running the tests

```
pip install -e ".[test]"
pytest
```