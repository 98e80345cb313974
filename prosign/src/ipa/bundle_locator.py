from pathlib import Path
import os

from prosign.logger import get_console
from prosign.src.core.exceptions import BundleNotFoundError, PayloadNotFoundError

APP_SUFFIX = ".app"


def find_app_bundle(payload_dir: Path) -> Path:
    """Return the .app bundle directly inside payload_dir.

    The first match in directory-listing order wins. Listing order is not
    stable across platforms, so an archive with several bundles may resolve
    differently on different machines.
    """
    payload_dir = Path(payload_dir)
    if not payload_dir.exists():
        raise PayloadNotFoundError("Payload not found")

    apps = [name for name in os.listdir(payload_dir) if name.endswith(APP_SUFFIX)]
    if not apps:
        raise BundleNotFoundError("No .app bundle in Payload")

    if len(apps) > 1:
        get_console().log(
            f"[yellow]Warning: more than one app found in Payload, using {apps[0]}[/]"
        )
    return payload_dir / apps[0]
