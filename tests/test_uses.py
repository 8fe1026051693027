import pytest

from actionscan.uses import (
    DockerUses,
    LocalUses,
    PatternKind,
    RepositoryUses,
    RepositoryUsesPattern,
    UsesParseError,
    parse_uses,
)


def _pattern_or_none(text):
    try:
        return RepositoryUsesPattern.parse(text)
    except UsesParseError:
        return None


P = RepositoryUsesPattern
K = PatternKind


@pytest.mark.parametrize(
    "pattern, expected",
    [
        ("", None),
        ("/", None),
        ("//", None),
        ("///", None),
        ("owner", None),
        ("**", None),
        ("*", P(K.ANY)),
        ("owner/*", P(K.IN_OWNER, owner="owner")),
        ("owner/*/", None),
        ("owner/*/foo", None),
        ("owner/*/*", None),
        ("*/foo", None),
        ("owner/repo/**", None),
        ("owner/repo/*", P(K.IN_REPO, owner="owner", repo="repo")),
        ("owner/repo", P(K.EXACT_REPO, owner="owner", repo="repo")),
        (
            "owner/repo/subpath",
            P(K.EXACT_PATH, owner="owner", repo="repo", subpath="subpath"),
        ),
        ("owner/repo//", P(K.EXACT_PATH, owner="owner", repo="repo", subpath="/")),
        (
            "owner/repo/subpath/",
            P(K.EXACT_PATH, owner="owner", repo="repo", subpath="subpath/"),
        ),
        (
            "owner/repo/subpath/very/nested////and/literal",
            P(
                K.EXACT_PATH,
                owner="owner",
                repo="repo",
                subpath="subpath/very/nested////and/literal",
            ),
        ),
        (
            "owner/repo@v1",
            P(K.EXACT_WITH_REF, owner="owner", repo="repo", subpath=None, git_ref="v1"),
        ),
        (
            "owner/repo/subpath@v1",
            P(
                K.EXACT_WITH_REF,
                owner="owner",
                repo="repo",
                subpath="subpath",
                git_ref="v1",
            ),
        ),
        (
            "owner/repo@172239021f7ba04fe7327647b213799853a9eb89",
            P(
                K.EXACT_WITH_REF,
                owner="owner",
                repo="repo",
                subpath=None,
                git_ref="172239021f7ba04fe7327647b213799853a9eb89",
            ),
        ),
        (
            "pypa/gh-action-pypi-publish@release/v1",
            P(
                K.EXACT_WITH_REF,
                owner="pypa",
                repo="gh-action-pypi-publish",
                subpath=None,
                git_ref="release/v1",
            ),
        ),
        ("owner/repo/*@v1", None),
        ("owner/repo/*/subpath@v1", None),
        ("owner/*/subpath@v1", None),
        ("*/*/subpath@v1", None),
        ("owner/repo@*", None),
        ("owner/repo@**", None),
        ("owner/repo@***", None),
        ("owner/repo/subpath@*", None),
        ("owner/*@*", None),
        ("*@*", None),
    ],
)
def test_repositoryusespattern_parse(pattern, expected):
    assert _pattern_or_none(pattern) == expected


def test_repositoryusespattern_parse_error_message():
    with pytest.raises(UsesParseError, match="invalid pattern: owner/\\*/foo"):
        RepositoryUsesPattern.parse("owner/*/foo")


def test_repositoryusespattern_ord():
    patterns = [
        P(K.ANY),
        P(K.EXACT_REPO, owner="owner", repo="repo"),
        P(K.IN_OWNER, owner="owner"),
    ]
    assert sorted(patterns) == [
        P(K.EXACT_REPO, owner="owner", repo="repo"),
        P(K.IN_OWNER, owner="owner"),
        P(K.ANY),
    ]


@pytest.mark.parametrize(
    "uses, pattern, matches",
    [
        ("actions/checkout@v3", "Actions/Checkout@v3", True),
        ("actions/checkout/foo", "actions/checkout/Foo", False),
        ("actions/checkout/foo@v3", "Actions/Checkout/foo", True),
        ("actions/checkout@v3", "actions/checkout@V3", False),
        ("actions/checkout@v3", "foo/checkout", False),
        ("actions/checkout@v3", "actions/bar", False),
        ("actions/checkout/foo", "actions/checkout", False),
        ("actions/checkout/foo@v3", "actions/checkout@v3", False),
        ("actions/checkout", "actions/checkout@v3", False),
        ("actions/checkout/foo", "actions/checkout/foo@v3", False),
        ("actions/checkout/foo", "actions/checkout/foo", True),
        ("ACTIONS/CHECKOUT/foo", "actions/checkout/foo", True),
        ("actions/checkout/foo@v3", "actions/checkout/foo", True),
        ("ACTIONS/CHECKOUT/foo@v3", "actions/checkout/foo", True),
        ("actions/checkout/FOO", "actions/checkout/foo", False),
        ("actions/checkout/foo/bar", "actions/checkout/foo", False),
        ("actions/checkout", "actions/checkout", True),
        ("ACTIONS/CHECKOUT", "actions/checkout", True),
        ("actions/checkout@v3", "actions/checkout", True),
        ("actions/checkout/foo@v3", "actions/checkout", False),
        ("actions/somethingelse", "actions/checkout", False),
        ("whatever/checkout", "actions/checkout", False),
        ("actions/checkout", "actions/checkout/*", True),
        ("ACTIONS/CHECKOUT", "actions/checkout/*", True),
        ("actions/checkout@v3", "actions/checkout/*", True),
        ("actions/checkout/foo@v3", "actions/checkout/*", True),
        ("actions/checkout/foo/bar@v3", "actions/checkout/*", True),
        ("someoneelse/checkout", "actions/checkout/*", False),
        ("actions/checkout", "actions/*", True),
        ("ACTIONS/CHECKOUT", "actions/*", True),
        ("actions/checkout@v3", "actions/*", True),
        ("actions/checkout/foo@v3", "actions/*", True),
        ("someoneelse/checkout", "actions/*", False),
        ("actions/checkout", "*", True),
        ("actions/checkout@v3", "*", True),
        ("actions/checkout/foo@v3", "*", True),
        ("whatever/checkout", "*", True),
        ("actions/checkout@v3", "actions/checkout@v3", True),
        ("actions/checkout/foo@v3", "actions/checkout/foo@v3", True),
        ("actions/checkout/foo", "actions/checkout/foo@v3", False),
    ],
)
def test_repositoryusespattern_matches(uses, pattern, matches):
    parsed = parse_uses(uses)
    assert isinstance(parsed, RepositoryUses)
    assert RepositoryUsesPattern.parse(pattern).matches(parsed) is matches
    assert parsed.matches(pattern) is matches


def test_repository_uses_matches_invalid_pattern_is_false():
    uses = parse_uses("actions/checkout@v3")
    assert uses.matches("owner/*/foo") is False


def test_parse_repository_uses_fields():
    assert parse_uses("foo/bar") == RepositoryUses("foo", "bar", None, None)
    assert parse_uses("foo/bar@v1") == RepositoryUses("foo", "bar", None, "v1")
    assert parse_uses("foo/bar/baz/qux@v2") == RepositoryUses("foo", "bar", "baz/qux", "v2")


@pytest.mark.parametrize("text", ["foo", "/bar", "foo/", "foo/bar@"])
def test_parse_invalid_repository_uses(text):
    with pytest.raises(UsesParseError):
        parse_uses(text)


def test_parse_local_uses():
    uses = parse_uses("./.github/actions/foo@v1")
    assert uses == LocalUses("./.github/actions/foo@v1")
    assert uses.unpinned() is True
    assert uses.unhashed() is False


def test_parse_docker_uses():
    assert parse_uses("docker://ubuntu") == DockerUses(image="ubuntu")
    tagged = parse_uses("docker://ubuntu:22.04")
    assert (tagged.image, tagged.tag, tagged.hash) == ("ubuntu", "22.04", None)
    hashed = parse_uses("docker://ghcr.io/pypa/img@sha256:abcd")
    assert (hashed.image, hashed.registry, hashed.hash) == (
        "ghcr.io/pypa/img",
        "ghcr.io",
        "sha256:abcd",
    )


def test_docker_pinning():
    assert parse_uses("docker://ubuntu").unpinned() is True
    assert parse_uses("docker://ubuntu").unhashed() is True
    assert parse_uses("docker://ubuntu:latest").unpinned() is False
    assert parse_uses("docker://ubuntu:latest").unhashed() is True
    assert parse_uses("docker://ubuntu@sha256:abcd").unhashed() is False


SHA = "172239021f7ba04fe7327647b213799853a9eb89"


def test_ref_kinds():
    commit = parse_uses(f"actions/checkout@{SHA}")
    assert commit.ref_is_commit() is True
    assert commit.commit_ref() == SHA
    assert commit.symbolic_ref() is None
    assert commit.unpinned() is False
    assert commit.unhashed() is False

    symbolic = parse_uses("actions/checkout@v4")
    assert symbolic.ref_is_commit() is False
    assert symbolic.commit_ref() is None
    assert symbolic.symbolic_ref() == "v4"
    assert symbolic.unhashed() is True

    bare = parse_uses("actions/checkout")
    assert bare.ref_is_commit() is False
    assert bare.symbolic_ref() is None
    assert bare.unpinned() is True


def test_short_hex_ref_is_not_commit():
    assert parse_uses("actions/checkout@abcdef1").ref_is_commit() is False
    assert parse_uses("actions/checkout@" + "g" * 40).ref_is_commit() is False