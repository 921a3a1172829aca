import shutil
import logging
from pathlib import Path

from .manifest import ManifestStore
from .walker import FileCandidate


logger = logging.getLogger('mybackup')

STAGING_DIRNAME = "staging"


class StagingArea:
    """Scratch tree on the backup drive holding the files copied this run."""

    def __init__(self, staging_dir: str):
        self.path = Path(staging_dir)
        self.copied = 0

    def stage(self, candidate: FileCandidate, content_hash: str, manifest: ManifestStore) -> bool:
        """
        Copy a candidate into staging unless its content is already backed up.

        The copy keeps the candidate's relative path. After it succeeds the
        hash is recorded in the manifest and the copied counter increases.

        Args:
            candidate (FileCandidate): File to back up
            content_hash (str): Digest of the candidate's content
            manifest (ManifestStore): In-memory manifest for this run

        Returns:
            bool: True if the file was copied, False if it was a duplicate

        Raises:
            OSError: If the source cannot be read or the destination written
        """
        if manifest.contains(content_hash):
            logger.debug(f"Skipping '{candidate.relative_path}', content already backed up as '{manifest.get(content_hash)}'")
            return False

        destination = self.path / candidate.relative_path
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(candidate.absolute_path, destination)

        manifest.add(content_hash, candidate.relative_path)
        self.copied += 1
        logger.info(f"Staged '{candidate.relative_path}'")
        return True

    def exists(self) -> bool:
        return self.path.is_dir()

    def remove(self) -> None:
        """Delete the staging tree and everything in it."""
        if self.exists():
            shutil.rmtree(self.path)
            logger.info(f"Removed staging directory '{self.path}'")
