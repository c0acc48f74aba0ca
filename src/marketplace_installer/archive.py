"""Plugin archive extraction."""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path

from marketplace_installer.errors import ArchiveError, FilesystemError, UnsafeArchiveError
from marketplace_installer.validation import resolve_within

logger = logging.getLogger(__name__)

# ZipInfo.create_system value for archives built on Unix
UNIX_SYSTEM = 3


def _unix_mode(member: zipfile.ZipInfo) -> int:
    """Permission bits recorded for a member, or 0 if the archive has none."""
    if member.create_system != UNIX_SYSTEM:
        return 0
    return (member.external_attr >> 16) & 0o777


def _plan_members(archive: zipfile.ZipFile, dest: Path) -> list[tuple[zipfile.ZipInfo, Path]]:
    """Map every archive member to its target path.

    Raises:
        UnsafeArchiveError: On the first member that would land outside dest.
    """
    plan = []
    for member in archive.infolist():
        target = resolve_within(dest, member.filename)
        if target is None:
            raise UnsafeArchiveError(member.filename, dest)
        plan.append((member, target))
    return plan


def extract_archive(archive_path: Path, dest: Path) -> list[Path]:
    """Extract a zip archive into dest.

    All members are checked before anything is written, so an archive with a
    single escaping entry leaves dest untouched. Unix permission bits stored
    in the archive are restored, so shipped scripts stay executable.

    Args:
        archive_path: Zip file to extract.
        dest: Directory to extract into (created if missing).

    Returns:
        Paths of the extracted files.

    Raises:
        ArchiveError: If the file is not a readable zip archive.
        UnsafeArchiveError: If any entry would be written outside dest.
        FilesystemError: If writing an entry fails.
    """
    try:
        archive = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveError(f"{archive_path} is not a valid zip archive: {e}") from e
    except OSError as e:
        raise FilesystemError(archive_path, e.strerror or str(e)) from e

    with archive:
        plan = _plan_members(archive, dest)
        extracted: list[Path] = []
        for member, target in plan:
            try:
                if member.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(member) as src, target.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
                mode = _unix_mode(member)
                if mode:
                    target.chmod(mode)
            except OSError as e:
                raise FilesystemError(target, e.strerror or str(e)) from e
            except (zipfile.BadZipFile, EOFError) as e:
                raise ArchiveError(f"Corrupt entry '{member.filename}': {e}") from e
            extracted.append(target)

    logger.debug("Extracted %d files from %s into %s", len(extracted), archive_path, dest)
    return extracted
