from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from prosign.logger import get_console
from prosign.src.core.signer import SigningPrimitive, ZsignSigner, sign_bundle
from prosign.src.core.staging import stage_inputs
from prosign.src.core.workspace import temporary_workspace
from prosign.src.ipa.archive import UNZIP_STAGE, ZIP_STAGE, create_signed_ipa, extract_ipa
from prosign.src.ipa.bundle_locator import find_app_bundle
from prosign.src.utils.config_loader import get_output_dir
from prosign.src.utils.progress import ProgressCallback, no_progress, resolve_progress

PREPARE_STAGE = "Preparing files 📂"


@dataclass
class SignResult:
    """Outcome of one job: the published archive, or the error that stopped it"""

    output_path: Optional[Path] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.output_path is not None


@dataclass
class SignJob:
    """One resign request"""

    ipa_path: Path
    p12_path: Path
    provisioning_path: Path
    p12_password: str
    progress_update: ProgressCallback = no_progress
    completion: Optional[Callable[[SignResult], None]] = None


class SignOrchestrator:
    """Runs resign jobs: stage, unzip, locate, sign, rezip, publish.

    Every job gets its own workspace, which is removed when the job ends
    whether it succeeded or not.
    """

    def __init__(
        self,
        signer: Optional[SigningPrimitive] = None,
        output_dir: Optional[Path] = None,
        workspace_base: Optional[Path] = None,
        max_workers: Optional[int] = None,
    ):
        self.console = get_console()
        self.signer = signer if signer is not None else ZsignSigner()
        self.output_dir = Path(output_dir) if output_dir else get_output_dir()
        self.workspace_base = workspace_base
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="prosign-job"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def resign(
        self,
        ipa_path: Path,
        p12_path: Path,
        provisioning_path: Path,
        p12_password: str,
        progress_update: Optional[ProgressCallback] = None,
    ) -> Path:
        """Resign an IPA on the calling thread and return the published path"""
        progress_update = resolve_progress(progress_update)
        ipa_path = Path(ipa_path)
        self.console.log(f"[blue]Signing IPA:[/] {ipa_path}")

        progress_update(PREPARE_STAGE)
        with temporary_workspace(self.workspace_base) as workspace:
            staged = stage_inputs(
                ipa_path, Path(p12_path), Path(provisioning_path), workspace.inputs_dir
            )

            progress_update(UNZIP_STAGE)
            extract_ipa(staged.ipa, workspace.work_dir, progress_update)

            app_dir = find_app_bundle(workspace.work_dir / "Payload")
            sign_bundle(
                self.signer,
                app_dir,
                staged.provisioning,
                staged.p12,
                p12_password,
                progress_update,
            )

            progress_update(ZIP_STAGE)
            return create_signed_ipa(
                workspace.work_dir,
                ipa_path,
                workspace.root,
                self.output_dir,
                progress_update,
            )

    def run_job(self, job: SignJob) -> SignResult:
        """Run a job to completion and hand its result to job.completion"""
        try:
            output_path = self.resign(
                job.ipa_path,
                job.p12_path,
                job.provisioning_path,
                job.p12_password,
                job.progress_update,
            )
        except Exception as e:
            self.console.log(f"[red]Error during signing:[/] {e}")
            result = SignResult(error=e)
        else:
            result = SignResult(output_path=output_path)

        if job.completion is not None:
            job.completion(result)
        return result

    def sign(self, job: SignJob) -> "Future[SignResult]":
        """Queue a job on a background thread"""
        return self._executor.submit(self.run_job, job)
