import os
import logging
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Tuple


logger = logging.getLogger('mybackup')

BACKUPS_DIRNAME = "backups"


def format_run_timestamp(started_at: datetime) -> str:
    """
    Render a run start time as a sortable, filesystem-safe string.

    The time is converted to UTC ISO-8601 with millisecond precision and a
    trailing ``Z``, then colons and periods become dashes, e.g.
    ``2026-10-18T17-02-03-123Z``.
    """
    # Naive values are taken as local time
    started_at = started_at.astimezone(timezone.utc)
    iso = started_at.strftime("%Y-%m-%dT%H:%M:%S") + f".{started_at.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def archive_name(started_at: datetime) -> str:
    """File name of the archive produced by a run started at started_at."""
    return f"backup-{format_run_timestamp(started_at)}.zip"


def create_archive(staging_dir: str, backups_dir: str, started_at: datetime) -> Tuple[Path, int]:
    """
    Bundle every file in staging into a new ZIP archive.

    Entries are stored relative to the staging root using DEFLATE at level 9.
    The archive is flushed and synced to disk before returning.

    Args:
        staging_dir (str): Staging directory to bundle
        backups_dir (str): Directory receiving the archive, created if missing
        started_at (datetime): Run start time used to name the archive

    Returns:
        Tuple[Path, int]: Path of the archive and its size in bytes

    Raises:
        FileExistsError: If an archive with the same name already exists
        OSError: If the archive cannot be written
    """
    staging_path = Path(staging_dir)
    backups_path = Path(backups_dir)
    backups_path.mkdir(parents=True, exist_ok=True)

    archive_path = backups_path / archive_name(started_at)
    logger.info(f"Creating archive '{archive_path}' from '{staging_path}'")

    entry_count = 0
    # Mode 'x' refuses to replace an existing archive
    with open(archive_path, 'xb') as raw:
        try:
            with zipfile.ZipFile(raw, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=9) as bundle:
                for root, _, files in os.walk(staging_path):
                    for name in files:
                        file_path = Path(root) / name
                        bundle.write(file_path, file_path.relative_to(staging_path).as_posix())
                        entry_count += 1
            raw.flush()
            os.fsync(raw.fileno())
        except BaseException:
            # A partial archive would still carry a valid central directory
            logger.error(f"Archive '{archive_path.name}' failed after {entry_count} files, removing it")
            raw.close()
            archive_path.unlink(missing_ok=True)
            raise

    size = archive_path.stat().st_size
    logger.info(f"Archive '{archive_path.name}' written with {entry_count} files ({size} bytes)")
    return archive_path, size
