import pytest

from actionscan.keys import local_key
from actionscan.matrix import Matrix
from actionscan.models import Workflow


def _job(strategy_yaml: str):
    text = (
        "on: push\n"
        "jobs:\n"
        "  build:\n"
        "    runs-on: ubuntu-latest\n"
        f"{strategy_yaml}"
        "    steps:\n"
        "      - run: echo hi\n"
    )
    workflow = Workflow.from_string(text, local_key("fake.yml"))
    return next(workflow.jobs())


def test_static_dimensions_expand():
    job = _job(
        "    strategy:\n"
        "      matrix:\n"
        "        os: [ubuntu-latest, windows-latest]\n"
    )
    matrix = Matrix.from_job(job)
    assert matrix.expanded_values == [
        ("matrix.os", "ubuntu-latest"),
        ("matrix.os", "windows-latest"),
    ]
    assert matrix.expands_to_static_values("matrix.os")


def test_expression_in_dimension_is_not_static():
    job = _job(
        "    strategy:\n"
        "      matrix:\n"
        "        os: ${{ fromJSON(inputs.oses) }}\n"
        "        py: [prefix-${{ inputs.py }}]\n"
    )
    matrix = Matrix.from_job(job)
    assert not matrix.expands_to_static_values("matrix.os")
    assert not matrix.expands_to_static_values("matrix.py")
    assert matrix.expands_to_static_values("matrix.other")


def test_include_rows_are_added_with_nested_paths():
    job = _job(
        "    strategy:\n"
        "      matrix:\n"
        "        os: [ubuntu-latest]\n"
        "        include:\n"
        "          - PYTHON:\n"
        "              OPENSSL:\n"
        "                TYPE: ${{ github.event.issue.title }}\n"
    )
    matrix = Matrix.from_job(job)
    assert ("matrix.os", "ubuntu-latest") in matrix.expanded_values
    assert (
        "matrix.PYTHON.OPENSSL.TYPE",
        "${{ github.event.issue.title }}",
    ) in matrix.expanded_values
    assert not matrix.expands_to_static_values("matrix.PYTHON.OPENSSL.TYPE")
    assert matrix.expands_to_static_values("matrix.os")


def test_exclude_rows_are_removed():
    job = _job(
        "    strategy:\n"
        "      matrix:\n"
        "        os: [ubuntu-latest, macos-latest]\n"
        "        exclude:\n"
        "          - os: macos-latest\n"
    )
    matrix = Matrix.from_job(job)
    assert matrix.expanded_values == [("matrix.os", "ubuntu-latest")]


def test_expression_exclude_keeps_everything():
    job = _job(
        "    strategy:\n"
        "      matrix:\n"
        "        os: [ubuntu-latest, macos-latest]\n"
        "        exclude: ${{ fromJSON(inputs.excludes) }}\n"
    )
    matrix = Matrix.from_job(job)
    assert len(matrix.expanded_values) == 2


def test_boolean_values_are_rendered_lowercase():
    job = _job(
        "    strategy:\n"
        "      matrix:\n"
        "        experimental: [true, false]\n"
    )
    matrix = Matrix.from_job(job)
    assert [value for _, value in matrix.expanded_values] == ["true", "false"]


def test_whole_matrix_expression_expands_to_nothing():
    job = _job(
        "    strategy:\n"
        "      matrix: ${{ fromJSON(needs.setup.outputs.matrix) }}\n"
    )
    matrix = Matrix.from_job(job)
    assert matrix.expanded_values == []
    assert matrix.is_expression
    assert matrix.expands_to_static_values("matrix.os")


def test_job_without_strategy_raises():
    job = _job("")
    with pytest.raises(ValueError):
        Matrix.from_job(job)


def test_strategy_without_matrix_raises():
    job = _job("    strategy:\n      fail-fast: false\n")
    with pytest.raises(ValueError):
        Matrix.from_job(job)