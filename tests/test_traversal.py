import os
from pathlib import Path

import pytest

from rcopy.models import EntryKind
from rcopy.traversal import partition_entries, traverse


def _write(path: Path, content: str = "x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _tree(root: Path) -> Path:
    _write(root / "a.txt")
    _write(root / "b.psd")
    _write(root / "sub" / "c.txt")
    _write(root / "sub" / "deep" / "d.txt")
    (root / "empty").mkdir()
    return root


def _relatives(entries) -> list[tuple[str, EntryKind]]:
    return [(entry.relative.as_posix(), entry.kind) for entry in entries]


def test_unbounded_traversal_lists_whole_subtree_parent_first(tmp_path: Path) -> None:
    root = _tree(tmp_path / "src")

    entries = traverse(root)

    assert _relatives(entries) == [
        ("empty", EntryKind.DIRECTORY),
        ("sub", EntryKind.DIRECTORY),
        ("a.txt", EntryKind.FILE),
        ("b.psd", EntryKind.FILE),
        ("sub/deep", EntryKind.DIRECTORY),
        ("sub/c.txt", EntryKind.FILE),
        ("sub/deep/d.txt", EntryKind.FILE),
    ]
    for entry in entries:
        assert entry.path == root / entry.relative
        assert entry.relative.parts


def test_depth_one_lists_only_top_level_files(tmp_path: Path) -> None:
    root = _tree(tmp_path / "src")

    entries = traverse(root, max_depth=1)

    assert _relatives(entries) == [("a.txt", EntryKind.FILE), ("b.psd", EntryKind.FILE)]


def test_depth_two_stops_below_first_level_directories(tmp_path: Path) -> None:
    root = _tree(tmp_path / "src")

    relatives = [rel for rel, _ in _relatives(traverse(root, max_depth=2))]

    assert "sub" in relatives
    assert "sub/c.txt" in relatives
    assert "sub/deep" not in relatives
    assert "sub/deep/d.txt" not in relatives


def test_invalid_depth_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        traverse(tmp_path, max_depth=0)


def test_missing_root_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        traverse(tmp_path / "missing")


def test_unreadable_directory_aborts_traversal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    root = _tree(tmp_path / "src")
    blocked = root / "sub"
    real_scandir = os.scandir

    def guarded_scandir(path):
        if Path(path) == blocked:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded_scandir)

    with pytest.raises(PermissionError):
        traverse(root)


def test_partition_entries_splits_by_kind(tmp_path: Path) -> None:
    root = _tree(tmp_path / "src")

    dirs, files = partition_entries(traverse(root))

    assert {d.relative.as_posix() for d in dirs} == {"empty", "sub", "sub/deep"}
    assert len(files) == 4


def _link_tree(root: Path) -> Path:
    _write(root / "real" / "inner.txt")
    try:
        os.symlink(root / "real", root / "linked", target_is_directory=True)
    except OSError as e:
        pytest.skip(f"symlink not supported: {e}")
    return root


def test_symlinked_directory_is_listed_but_not_descended_by_default(tmp_path: Path) -> None:
    root = _link_tree(tmp_path / "src")

    relatives = _relatives(traverse(root))

    assert ("linked", EntryKind.DIRECTORY) in relatives
    assert ("real/inner.txt", EntryKind.FILE) in relatives
    assert not any(rel.startswith("linked/") for rel, _ in relatives)


def test_follow_symlinks_descends_symlinked_directory(tmp_path: Path) -> None:
    root = _link_tree(tmp_path / "src")

    relatives = _relatives(traverse(root, follow_symlinks=True))

    assert ("linked", EntryKind.DIRECTORY) in relatives
    assert ("linked/inner.txt", EntryKind.FILE) in relatives
