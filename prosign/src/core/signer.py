from concurrent.futures import Future, InvalidStateError
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol
import os
import shutil
import subprocess
import threading

from prosign.logger import get_console
from prosign.src.core.exceptions import SigningError
from prosign.src.utils.config_loader import get_zsign_path
from prosign.src.utils.progress import ProgressCallback, resolve_progress

SignCallback = Callable[[Optional[Any], Optional[BaseException]], None]


class SigningPrimitive(Protocol):
    """Something that can sign an app bundle and report back through a callback.

    The callback receives (result, error) and must be invoked exactly once,
    from any thread.
    """

    def sign(
        self,
        app_path: str,
        provision_path: str,
        p12_path: str,
        p12_password: str,
        entitlements_path: str,
        remove_provision: bool,
        callback: SignCallback,
    ) -> None: ...


class ZsignSigner:
    """Signs app bundles in place with the zsign command line tool"""

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable or get_zsign_path()
        self.console = get_console()

    def build_command(
        self,
        executable: str,
        app_path: str,
        provision_path: str,
        p12_path: str,
        p12_password: str,
        entitlements_path: str,
    ) -> List[str]:
        cmd = [executable, "-k", p12_path, "-p", p12_password, "-m", provision_path]
        if entitlements_path:
            cmd += ["-e", entitlements_path]
        cmd.append(app_path)
        return cmd

    def sign(
        self,
        app_path: str,
        provision_path: str,
        p12_path: str,
        p12_password: str,
        entitlements_path: str,
        remove_provision: bool,
        callback: SignCallback,
    ) -> None:
        worker = threading.Thread(
            target=self._run,
            args=(
                app_path,
                provision_path,
                p12_path,
                p12_password,
                entitlements_path,
                remove_provision,
                callback,
            ),
            name=f"zsign-{Path(app_path).name}",
            daemon=True,
        )
        worker.start()

    def _run(
        self,
        app_path: str,
        provision_path: str,
        p12_path: str,
        p12_password: str,
        entitlements_path: str,
        remove_provision: bool,
        callback: SignCallback,
    ) -> None:
        try:
            result = self.sign_sync(
                app_path,
                provision_path,
                p12_path,
                p12_password,
                entitlements_path,
                remove_provision,
            )
        except Exception as e:
            callback(None, e)
            return
        callback(result, None)

    def sign_sync(
        self,
        app_path: str,
        provision_path: str,
        p12_path: str,
        p12_password: str,
        entitlements_path: str = "",
        remove_provision: bool = False,
    ) -> str:
        """Run zsign and wait for it. Returns the signed app path."""
        executable = shutil.which(self.executable)
        if executable is None:
            raise SigningError(f"zsign executable not found: {self.executable}")

        cmd = self.build_command(
            executable, app_path, provision_path, p12_path, p12_password, entitlements_path
        )
        shown = ["***" if part == p12_password and part else part for part in cmd]
        self.console.log(f"[blue]Running:[/] {' '.join(shown)}")

        proc = subprocess.run(cmd, capture_output=True, text=True)
        if proc.returncode != 0:
            output = (proc.stderr or proc.stdout or "").strip()
            raise SigningError(f"zsign failed with status {proc.returncode}: {output}")

        if remove_provision:
            embedded = Path(app_path) / "embedded.mobileprovision"
            if embedded.exists():
                embedded.unlink()
                self.console.log(f"[yellow]Removed embedded profile from {Path(app_path).name}[/]")

        return app_path


_locks_guard = threading.Lock()
_bundle_locks: Dict[str, list] = {}


@contextmanager
def exclusive_bundle(app_path: Path) -> Iterator[None]:
    """Serialize signing per bundle path. Entries are dropped when unused."""
    key = os.path.realpath(app_path)
    with _locks_guard:
        entry = _bundle_locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _bundle_locks[key]


def sign_bundle(
    signer: SigningPrimitive,
    app_path: Path,
    provisioning_path: Path,
    p12_path: Path,
    p12_password: str,
    progress_update: Optional[ProgressCallback] = None,
) -> None:
    """Sign one bundle and block until the signer's callback fires.

    The signer's error, if any, is raised unchanged.
    """
    progress_update = resolve_progress(progress_update)
    console = get_console()
    app_path = Path(app_path)
    progress_update(f"Signing {app_path.name} ✍️")

    done: Future = Future()

    def on_complete(result: Optional[Any], error: Optional[BaseException]) -> None:
        try:
            if error is None:
                done.set_result(result)
            elif isinstance(error, BaseException):
                done.set_exception(error)
            else:
                done.set_exception(SigningError(str(error)))
        except InvalidStateError:
            console.log("[yellow]Warning: signer reported completion more than once[/]")

    with exclusive_bundle(app_path):
        signer.sign(
            str(app_path),
            str(provisioning_path),
            str(p12_path),
            p12_password,
            "",
            False,
            on_complete,
        )
        done.result()

    console.log(f"[green]Signed bundle:[/] {app_path.name}")
