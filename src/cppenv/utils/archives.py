"""Runtime archive extraction."""
import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import BinaryIO, Union

from cppenv.errors import ArchiveError
from cppenv.logging import get_logger
from cppenv.types import ArchiveFormat

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024

ArchiveSource = Union[Path, BinaryIO]


def detect_format(archive_path: Path) -> ArchiveFormat:
    """Infer the container format from the file name."""
    format = (
        "".join(archive_path.suffixes[-2:])
        if len(archive_path.suffixes) > 1
        else archive_path.suffix
    )

    archive_formats = {
        ".zip": ArchiveFormat.ZIP,
        ".tar.gz": ArchiveFormat.TAR_GZ,
        ".tgz": ArchiveFormat.TAR_GZ,
    }
    if format not in archive_formats:
        raise ArchiveError(f"Unsupported archive format: {format}", str(archive_path))
    return archive_formats[format]


def _safe_target(dest_dir: Path, name: str) -> Path:
    target = Path(os.path.normpath(dest_dir / name))
    if target != dest_dir and dest_dir not in target.parents:
        raise ArchiveError(f"Archive entry escapes destination: {name}", name)
    return target


def _replace_link(target: Path, link_target: str) -> None:
    if target.is_symlink() or target.is_file():
        target.unlink()
    target.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(link_target, target)


def _write_stream(stream: BinaryIO, target: Path, mode: int) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.is_symlink():
        target.unlink()
    with open(target, "wb") as f:
        shutil.copyfileobj(stream, f, CHUNK_SIZE)
    if mode:
        os.chmod(target, stat.S_IMODE(mode))


def _extract_tar(archive: tarfile.TarFile, dest_dir: Path) -> int:
    count = 0
    for member in archive:
        target = _safe_target(dest_dir, member.name)
        if member.isdir():
            target.mkdir(parents=True, exist_ok=True)
        elif member.issym():
            _replace_link(target, member.linkname)
        elif member.islnk():
            source = _safe_target(dest_dir, member.linkname)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        elif member.isfile():
            stream = archive.extractfile(member)
            if stream is None:
                raise ArchiveError(f"Cannot read entry {member.name}", member.name)
            with stream:
                _write_stream(stream, target, member.mode)
        else:
            logger.debug("archive_entry_skipped", name=member.name, type=member.type)
            continue
        count += 1
    return count


def _extract_zip(archive: zipfile.ZipFile, dest_dir: Path) -> int:
    count = 0
    for info in archive.infolist():
        target = _safe_target(dest_dir, info.filename)
        mode = info.external_attr >> 16
        if info.is_dir():
            target.mkdir(parents=True, exist_ok=True)
        elif stat.S_ISLNK(mode):
            _replace_link(target, archive.read(info).decode("utf-8"))
        else:
            with archive.open(info) as stream:
                _write_stream(stream, target, mode)
        count += 1
    return count


def extract_archive(
    source: ArchiveSource,
    dest_dir: Path,
    format: ArchiveFormat | None = None
) -> Path:
    """Unpack every entry of *source* into *dest_dir*.

    Directories are created, regular files keep their permission bits and
    symbolic links are recreated as links. *source* is either a path or a
    binary stream; tarballs are read as a stream, zip files need a seekable
    one. A failure leaves whatever was already written in place.
    """
    if format is None:
        if not isinstance(source, Path):
            raise ArchiveError("Archive format required for stream input", "<stream>")
        format = detect_format(source)

    name = str(source) if isinstance(source, Path) else "<stream>"
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest_dir = dest_dir.resolve()

    logger.debug("extract_archive", archive=name, dest=str(dest_dir), format=format.value)

    try:
        if format is ArchiveFormat.TAR_GZ:
            if isinstance(source, Path):
                archive = tarfile.open(source, mode="r:gz")
            else:
                archive = tarfile.open(fileobj=source, mode="r|gz")
            with archive:
                count = _extract_tar(archive, dest_dir)
        else:
            with zipfile.ZipFile(source) as archive:
                count = _extract_zip(archive, dest_dir)
    except ArchiveError:
        raise
    except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as e:
        logger.error("extract_failed", archive=name, error=str(e))
        raise ArchiveError(f"Failed to extract {name}: {e}", name) from e

    logger.info("archive_extracted", archive=name, extracted_to=str(dest_dir), entries=count)
    return dest_dir
