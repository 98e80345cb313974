""" Unpacks an IPA into a job workspace and zips the signed tree back up.

    Extraction mirrors the archive exactly: every directory entry becomes a
    directory, every file entry is written below it, unix permission bits and
    symlinks are carried over. Repackaging walks the tree once and writes the
    directories first (stored), then the files (deflated). """

from pathlib import Path
from typing import List, Optional, Tuple
import os
import shutil
import stat
import uuid
import zipfile
import zlib

from prosign.logger import get_console
from prosign.src.core.exceptions import ArchiveError
from prosign.src.utils.progress import (
    FractionReporter,
    ProgressCallback,
    format_fraction,
    resolve_progress,
)

UNZIP_STAGE = "Unzipping IPA 🔓"
ZIP_STAGE = "Zipping signed IPA 📦"
SIGNED_EXTENSION = ".ipa"
UNIX_SYSTEM = 3

# Errors zipfile raises for a damaged or unsupported entry.
# Encrypted entries fail with RuntimeError since no password is given.
ENTRY_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)


def _entry_mode(info: zipfile.ZipInfo) -> int:
    if info.create_system != UNIX_SYSTEM:
        return 0
    return info.external_attr >> 16


def _entry_destination(root: Path, name: str) -> Path:
    destination = (root / name).resolve()
    if destination != root and root not in destination.parents:
        raise ArchiveError(f"Archive entry escapes the extraction directory: {name}")
    return destination


def _extract_entry(zf: zipfile.ZipFile, info: zipfile.ZipInfo, root: Path) -> None:
    destination = _entry_destination(root, info.filename)
    mode = _entry_mode(info)

    if info.is_dir():
        destination.mkdir(parents=True, exist_ok=True)
        return

    destination.parent.mkdir(parents=True, exist_ok=True)
    if stat.S_ISLNK(mode):
        target = zf.read(info).decode("utf-8")
        if destination.is_symlink() or destination.exists():
            destination.unlink()
        os.symlink(target, destination)
        return

    with zf.open(info) as src, open(destination, "wb") as dst:
        shutil.copyfileobj(src, dst)
    if mode & 0o777:
        os.chmod(destination, mode & 0o777)


def extract_ipa(
    ipa_path: Path,
    work_dir: Path,
    progress_update: Optional[ProgressCallback] = None,
) -> None:
    """Extract every entry of ipa_path into work_dir, in archive order"""
    progress_update = resolve_progress(progress_update)
    root = Path(work_dir).resolve()

    try:
        zf = zipfile.ZipFile(ipa_path)
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Not a valid archive: {ipa_path}") from e

    with zf:
        entries = zf.infolist()
        get_console().log(f"[blue]Extracting {len(entries)} entries from[/] {Path(ipa_path).name}")
        if not entries:
            progress_update(format_fraction(UNZIP_STAGE, 1.0))
            return

        reporter = FractionReporter(UNZIP_STAGE, len(entries), progress_update)
        for info in entries:
            try:
                _extract_entry(zf, info, root)
            except ENTRY_ERRORS as e:
                raise ArchiveError(f"Failed to extract {info.filename}: {e}") from e
            reporter.advance()


def signed_archive_name(original_ipa: Path) -> str:
    """<original-base>_signed_<uuid>.ipa"""
    return f"{Path(original_ipa).stem}_signed_{uuid.uuid4()}{SIGNED_EXTENSION}"


def collect_entries(work_dir: Path) -> Tuple[List[Path], List[Path]]:
    """Walk work_dir once, returning (directories, files).

    Directories are ordered by relative path length so parents always come
    before their descendants. Symlinks count as files, even when they point
    at a directory.
    """
    work_dir = Path(work_dir)
    directories: List[Path] = []
    files: List[Path] = []

    for dirpath, dirnames, filenames in os.walk(work_dir):
        current = Path(dirpath)
        for name in dirnames:
            path = current / name
            if path.is_symlink():
                files.append(path)
            else:
                directories.append(path)
        for name in filenames:
            files.append(current / name)

    directories.sort(key=lambda p: len(p.relative_to(work_dir).as_posix()))
    return directories, files


def _write_symlink(zf: zipfile.ZipFile, path: Path, arcname: str) -> None:
    st = os.lstat(path)
    info = zipfile.ZipInfo(arcname)
    info.create_system = UNIX_SYSTEM
    info.external_attr = (st.st_mode & 0xFFFF) << 16
    info.compress_type = zipfile.ZIP_STORED
    zf.writestr(info, os.readlink(path))


def write_archive(
    work_dir: Path,
    archive_path: Path,
    progress_update: Optional[ProgressCallback] = None,
) -> None:
    """Zip the contents of work_dir (not work_dir itself) into archive_path"""
    progress_update = resolve_progress(progress_update)
    work_dir = Path(work_dir)
    directories, files = collect_entries(work_dir)
    total = len(directories) + len(files)
    get_console().log(
        f"[blue]Archiving {len(directories)} directories and {len(files)} files[/]"
    )

    if total == 0:
        progress_update(format_fraction(ZIP_STAGE, 1.0))

    reporter = FractionReporter(ZIP_STAGE, total, progress_update)
    try:
        with zipfile.ZipFile(archive_path, "w", strict_timestamps=False) as zf:
            for directory in directories:
                arcname = directory.relative_to(work_dir).as_posix() + "/"
                zf.write(directory, arcname, compress_type=zipfile.ZIP_STORED)
                reporter.advance()

            for path in files:
                arcname = path.relative_to(work_dir).as_posix()
                if path.is_symlink():
                    _write_symlink(zf, path, arcname)
                else:
                    zf.write(path, arcname, compress_type=zipfile.ZIP_DEFLATED)
                reporter.advance()
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
        raise ArchiveError(f"Failed to create archive {archive_path}: {e}") from e


def publish(signed_ipa: Path, destination_dir: Path) -> Path:
    """Copy the finished archive to the durable output directory"""
    destination_dir = Path(destination_dir)
    destination_dir.mkdir(parents=True, exist_ok=True)
    output_path = destination_dir / Path(signed_ipa).name
    if output_path.exists():
        output_path.unlink()
    shutil.copyfile(signed_ipa, output_path)
    return output_path


def create_signed_ipa(
    work_dir: Path,
    original_ipa: Path,
    output_dir: Path,
    destination_dir: Path,
    progress_update: Optional[ProgressCallback] = None,
) -> Path:
    """Repackage work_dir and copy the result to destination_dir.

    The archive is built in output_dir (scratch space owned by the job) under
    a fresh unique name, then copied out. Returns the durable path.
    """
    signed_ipa = Path(output_dir) / signed_archive_name(original_ipa)
    write_archive(work_dir, signed_ipa, progress_update)
    output_path = publish(signed_ipa, destination_dir)
    get_console().log(f"[green]Signed IPA written:[/] {output_path}")
    return output_path
