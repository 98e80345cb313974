from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional
import shutil
import tempfile
import uuid

from prosign.logger import get_console

WORKSPACE_PREFIX = "zsign_ios_"


@dataclass(frozen=True)
class Workspace:
    """Job-scoped scratch tree: inputs are staged, the archive is unpacked in work"""

    root: Path
    inputs_dir: Path
    work_dir: Path


def prepare_workspace(base_dir: Optional[Path] = None) -> Workspace:
    """Create a uniquely named workspace with `inputs` and `work` children"""
    base = Path(base_dir) if base_dir is not None else Path(tempfile.gettempdir())
    root = base / f"{WORKSPACE_PREFIX}{uuid.uuid4()}"
    inputs_dir = root / "inputs"
    work_dir = root / "work"
    inputs_dir.mkdir(parents=True, exist_ok=True)
    work_dir.mkdir(parents=True, exist_ok=True)
    get_console().log(f"[blue]Prepared workspace:[/] {root}")
    return Workspace(root=root, inputs_dir=inputs_dir, work_dir=work_dir)


def cleanup_workspace(root: Path) -> None:
    """Remove a workspace tree. A root that is already gone is fine."""
    root = Path(root)
    if not root.exists():
        return
    shutil.rmtree(root, ignore_errors=True)
    if root.exists():
        get_console().log(f"[yellow]Warning: could not fully remove workspace {root}[/]")
    else:
        get_console().log(f"[blue]Removed workspace:[/] {root}")


@contextmanager
def temporary_workspace(base_dir: Optional[Path] = None) -> Iterator[Workspace]:
    """Workspace that is removed however the enclosed block exits"""
    workspace = prepare_workspace(base_dir)
    try:
        yield workspace
    finally:
        cleanup_workspace(workspace.root)
