import pytest

from actionscan.keys import (
    InputError,
    MissingNameError,
    local_key,
    remote_key,
)
from actionscan.uses import parse_uses


def test_input_key_display():
    local = local_key("/foo/bar/baz.yml", None)
    assert str(local) == "file:///foo/bar/baz.yml"

    slug = parse_uses("foo/bar")
    remote = remote_key(slug, ".github/workflows/baz.yml")
    assert str(remote) == "https://github.com/foo/bar/blob/HEAD/.github/workflows/baz.yml"

    slug = parse_uses("foo/bar@v1")
    remote = remote_key(slug, ".github/workflows/baz.yml")
    assert str(remote) == "https://github.com/foo/bar/blob/v1/.github/workflows/baz.yml"


@pytest.mark.parametrize(
    "path, prefix",
    [
        ("/foo/bar/baz.yml", None),
        ("/foo/bar/baz.yml", "/foo"),
        ("/foo/bar/baz.yml", "/foo/bar/"),
        (
            "/home/runner/work/repo/repo/.github/workflows/baz.yml",
            "/home/runner/work/repo/repo",
        ),
    ],
)
def test_input_key_local_presentation_path(path, prefix):
    assert local_key(path, prefix).presentation_path() == path


@pytest.mark.parametrize(
    "path, prefix, expected",
    [
        ("/foo/bar/baz.yml", None, "/foo/bar/baz.yml"),
        ("/foo/bar/baz.yml", "/foo", "bar/baz.yml"),
        ("/foo/bar/baz.yml", "/foo/bar/", "baz.yml"),
        (
            "/home/runner/work/repo/repo/.github/workflows/baz.yml",
            "/home/runner/work/repo/repo",
            ".github/workflows/baz.yml",
        ),
        ("./.github/workflows/baz.yml", ".", ".github/workflows/baz.yml"),
    ],
)
def test_input_key_local_sarif_path(path, prefix, expected):
    assert local_key(path, prefix).sarif_path() == expected


def test_sarif_path_unrelated_prefix():
    assert local_key("/foo/bar/baz.yml", "/other").sarif_path() == "/foo/bar/baz.yml"


def test_remote_paths():
    remote = remote_key(parse_uses("foo/bar@v1"), ".github/workflows/baz.yml")
    assert remote.sarif_path() == ".github/workflows/baz.yml"
    assert remote.presentation_path() == ".github/workflows/baz.yml"
    assert remote.filename() == "baz.yml"


def test_local_filename():
    assert local_key("/foo/bar/baz.yml").filename() == "baz.yml"


@pytest.mark.parametrize("path", ["/", "foo/..", ""])
def test_local_missing_name(path):
    with pytest.raises(MissingNameError):
        local_key(path)


def test_remote_missing_name():
    with pytest.raises(InputError):
        remote_key(parse_uses("foo/bar"), "")


def test_keys_order_local_before_remote():
    remote = remote_key(parse_uses("a/b"), "x.yml")
    first = local_key("/z/a.yml")
    second = local_key("/z/b.yml")
    assert sorted([remote, second, first]) == [first, second, remote]


def test_keys_hash_and_equality():
    assert local_key("/a/b.yml") == local_key("/a/b.yml")
    assert len({local_key("/a/b.yml"), local_key("/a/b.yml")}) == 1