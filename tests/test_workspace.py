from pathlib import Path

import pytest

from prosign.src.core.workspace import (
    WORKSPACE_PREFIX,
    cleanup_workspace,
    prepare_workspace,
    temporary_workspace,
)


def test_prepare_creates_inputs_and_work(tmp_path: Path) -> None:
    workspace = prepare_workspace(tmp_path)
    assert workspace.root.parent == tmp_path
    assert workspace.root.name.startswith(WORKSPACE_PREFIX)
    assert workspace.inputs_dir == workspace.root / "inputs"
    assert workspace.work_dir == workspace.root / "work"
    assert workspace.inputs_dir.is_dir()
    assert workspace.work_dir.is_dir()


def test_prepare_creates_missing_parents(tmp_path: Path) -> None:
    workspace = prepare_workspace(tmp_path / "a" / "b")
    assert workspace.work_dir.is_dir()


def test_prepare_is_unique_per_call(tmp_path: Path) -> None:
    first = prepare_workspace(tmp_path)
    second = prepare_workspace(tmp_path)
    assert first.root != second.root


def test_prepare_then_cleanup_leaves_nothing(tmp_path: Path) -> None:
    workspace = prepare_workspace(tmp_path)
    (workspace.work_dir / "nested").mkdir()
    (workspace.work_dir / "nested" / "file.bin").write_bytes(b"data")
    cleanup_workspace(workspace.root)
    assert not workspace.root.exists()
    assert list(tmp_path.iterdir()) == []


def test_cleanup_tolerates_missing_root(tmp_path: Path) -> None:
    workspace = prepare_workspace(tmp_path)
    cleanup_workspace(workspace.root)
    cleanup_workspace(workspace.root)
    cleanup_workspace(tmp_path / "never-created")


def test_temporary_workspace_cleans_up_on_error(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        with temporary_workspace(tmp_path) as workspace:
            (workspace.inputs_dir / "x").write_text("x")
            raise RuntimeError("boom")
    assert not workspace.root.exists()
    assert list(tmp_path.iterdir()) == []
