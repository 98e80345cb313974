from pathlib import Path
from typing import NamedTuple
import shutil

from prosign.logger import get_console


class StagedInputs(NamedTuple):
    """Local copies of the job inputs inside the workspace"""

    ipa: Path
    p12: Path
    provisioning: Path


def stage_file(source: Path, inputs_dir: Path) -> Path:
    """Copy one input into inputs_dir, replacing any file already there"""
    source = Path(source)
    destination = Path(inputs_dir) / source.name
    if destination.exists():
        destination.unlink()
    shutil.copyfile(source, destination)
    return destination


def stage_inputs(
    ipa_path: Path, p12_path: Path, provisioning_path: Path, inputs_dir: Path
) -> StagedInputs:
    """Copy the archive, key container and profile into the workspace"""
    console = get_console()
    staged = StagedInputs(
        ipa=stage_file(ipa_path, inputs_dir),
        p12=stage_file(p12_path, inputs_dir),
        provisioning=stage_file(provisioning_path, inputs_dir),
    )
    for path in staged:
        console.log(f"[green]Staged input:[/] {path.name}")
    return staged
