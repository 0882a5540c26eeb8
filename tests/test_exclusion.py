from pathlib import Path

import pytest

from rcopy.exclusion import file_extension, is_excluded, partition_excluded
from rcopy.models import Entry, EntryKind, ExclusionSet


def _file(name: str) -> Entry:
    return Entry(path=Path("/src") / name, kind=EntryKind.FILE, relative=Path(name))


def test_exclusion_set_normalizes_tokens() -> None:
    exclusions = ExclusionSet.from_tokens([".PSD", "tmp", "..Log", "  ", "", "."])

    assert exclusions.tokens == frozenset({"psd", "tmp", "log"})
    assert ".psd" in exclusions
    assert "TMP" in exclusions
    assert "bashrc" not in exclusions
    assert 42 not in exclusions


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("a.txt", "txt"),
        ("archive.tar.GZ", "gz"),
        ("Makefile", None),
        (".bashrc", None),
        ("..bashrc", "bashrc"),
        ("..", None),
        ("trailing.", None),
        (".config.yaml", "yaml"),
    ],
)
def test_file_extension(name: str, expected: str | None) -> None:
    assert file_extension(name) == expected


@pytest.mark.parametrize(
    ("name", "excluded"),
    [
        ("b.psd", True),
        ("B.PSD", True),
        ("a.txt", False),
        ("psd", False),
        (".psd", False),
        ("notes.psd.txt", False),
    ],
)
def test_is_excluded_matches_extension_case_insensitively(name: str, excluded: bool) -> None:
    assert is_excluded(_file(name), ExclusionSet.from_tokens([".Psd"])) is excluded


def test_directories_are_never_excluded() -> None:
    directory = Entry(path=Path("/src/assets.psd"), kind=EntryKind.DIRECTORY, relative=Path("assets.psd"))

    assert is_excluded(directory, ExclusionSet.from_tokens(["psd"])) is False


def test_empty_exclusion_set_excludes_nothing() -> None:
    assert is_excluded(_file("b.psd"), ExclusionSet()) is False


def test_partition_excluded_keeps_order() -> None:
    files = [_file("a.txt"), _file("b.psd"), _file("c.txt"), _file("d.tmp")]

    kept, excluded = partition_excluded(files, ExclusionSet.from_tokens(["psd", "tmp"]))

    assert [e.path.name for e in kept] == ["a.txt", "c.txt"]
    assert [e.path.name for e in excluded] == ["b.psd", "d.tmp"]
