from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_python_files

if TYPE_CHECKING:
    from pathlib import Path


def _touch(root: Path, relative_path: str, content: str = "print('ok')\n") -> None:
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _relative(root: Path, **kwargs: object) -> list[str]:
    return [path.relative_to(root).as_posix() for path in find_python_files(root, **kwargs)]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_python_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _touch(repo_root, "pkg/module.py")

    external_root = tmp_path / "external"
    _touch(external_root, "leak.py", "print('leak')\n")

    symlink_dir = repo_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = _relative(repo_root)

    assert "pkg/module.py" in results
    assert "linked/leak.py" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _touch(repo_root, "pkg/module.py")
    (repo_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / ".gitignore").write_text("module.py\n", encoding="utf-8")

    (repo_root / "pkg" / ".gitignore").symlink_to(external_root / ".gitignore")

    matcher = _build_gitignore_matcher(repo_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(repo_root / "pkg" / "module.py")) is False


def test_find_python_files_is_sorted_and_skips_tool_dirs(tmp_path: Path) -> None:
    _touch(tmp_path, "b.py")
    _touch(tmp_path, "a/z.py")
    _touch(tmp_path, "a/m.py")
    _touch(tmp_path, ".venv/lib/site.py")
    _touch(tmp_path, "pkg/__pycache__/cached.py")
    _touch(tmp_path, "notes.txt")

    assert _relative(tmp_path) == ["a/m.py", "a/z.py", "b.py"]


def test_find_python_files_honors_root_gitignore(tmp_path: Path) -> None:
    _touch(tmp_path, "keep.py")
    _touch(tmp_path, "generated/out.py")
    (tmp_path / ".gitignore").write_text("generated/\n", encoding="utf-8")

    assert _relative(tmp_path) == ["keep.py"]


def test_find_python_files_applies_include_and_exclude(tmp_path: Path) -> None:
    _touch(tmp_path, "src/app.py")
    _touch(tmp_path, "src/vendor/lib.py")
    _touch(tmp_path, "tests/test_app.py")

    results = _relative(
        tmp_path,
        include_patterns=["src/*"],
        exclude_patterns=["src/vendor/*"],
    )

    assert results == ["src/app.py"]


def test_find_python_files_custom_skip_dirs(tmp_path: Path) -> None:
    _touch(tmp_path, "legacy/old.py")
    _touch(tmp_path, ".venv/keep.py")

    assert _relative(tmp_path, skip_dirs=["legacy"]) == [".venv/keep.py"]


def test_find_python_files_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(NotADirectoryError):
        list(find_python_files(tmp_path / "missing"))
