import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .archiver import BACKUPS_DIRNAME, create_archive
from .exceptions import PreconditionError
from .manifest import MANIFEST_FILENAME, ManifestStore, hash_file_content
from .staging import STAGING_DIRNAME, StagingArea
from .walker import walk_candidates


# Get logger instance (configuration is handled in cli.py)
logger = logging.getLogger('mybackup')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackupOperations:
    """Runs one incremental backup pass from a source tree to a backup root."""

    def __init__(
        self,
        backup_root: str,
        source_directory: str,
        zip_enabled: bool = True,
        on_copied: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize BackupOperations with explicit paths.

        Args:
            backup_root (str): Mount point of the backup drive
            source_directory (str): Directory tree to back up
            zip_enabled (bool, optional): Bundle new files into an archive. Defaults to True.
            on_copied (callable, optional): Called with each relative path copied into staging
            clock (callable, optional): Returns the run start time. Defaults to UTC now.
        """
        self.backup_root = Path(backup_root)
        self.source_directory = Path(source_directory)
        self.zip_enabled = zip_enabled
        self.on_copied = on_copied
        self.clock = clock

        self.manifest_path = self.backup_root / MANIFEST_FILENAME
        self.staging_dir = self.backup_root / STAGING_DIRNAME
        self.backups_dir = self.backup_root / BACKUPS_DIRNAME
        logger.debug(f"Initialized BackupOperations for '{source_directory}' -> '{backup_root}'")

    def validate_backup_root(self) -> None:
        """
        Check that the backup drive is mounted.

        Raises:
            PreconditionError: If the backup root is missing or not a directory
        """
        if not self.backup_root.is_dir():
            raise PreconditionError(f"Backup drive not found at '{self.backup_root}'")

    def run(self) -> Dict[str, Any]:
        """
        Back up every new candidate file under the source directory.

        Candidates are hashed one at a time; files whose content is not in
        the manifest are copied into staging. If anything was copied and
        zipping is enabled, staging is bundled into a dated archive and then
        deleted. The manifest is saved only after those steps succeed.

        Returns:
            Dict[str, Any]: Run summary including:
                - scanned: Number of candidates hashed
                - copied: Number of files copied into staging
                - staging: Staging directory path
                - archive: Archive path, or None
                - archive_size: Archive size in bytes, or None

        Raises:
            PreconditionError: If the backup root does not exist
            ManifestParseError: If the persisted manifest is corrupt
            OSError: If a file cannot be read, copied, or archived
        """
        self.validate_backup_root()
        started_at = self.clock()
        logger.info(f"Starting backup of '{self.source_directory}' to '{self.backup_root}'")

        try:
            manifest = ManifestStore(str(self.manifest_path)).load()
            staging = StagingArea(str(self.staging_dir))

            scanned = 0
            for candidate in walk_candidates(str(self.source_directory)):
                content_hash = hash_file_content(candidate.absolute_path)
                scanned += 1
                if staging.stage(candidate, content_hash, manifest) and self.on_copied:
                    self.on_copied(candidate.relative_path)

            result = {
                'scanned': scanned,
                'copied': staging.copied,
                'staging': staging.path,
                'archive': None,
                'archive_size': None,
            }

            if staging.copied == 0:
                logger.info(f"No new files found among {scanned} candidates")
                return result

            if self.zip_enabled:
                archive_path, size = create_archive(str(staging.path), str(self.backups_dir), started_at)
                # Staging is only removed once the archive is fully on disk
                staging.remove()
                result['archive'] = archive_path
                result['archive_size'] = size
            else:
                logger.info(f"Zipping disabled, leaving {staging.copied} files in '{staging.path}'")

            manifest.save()
            logger.info(f"Backup completed: {staging.copied} of {scanned} files copied")
            return result
        except Exception as e:
            logger.error(f"Backup failed: {str(e)}")
            raise

