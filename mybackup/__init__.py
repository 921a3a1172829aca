"""
Mybackup - incremental backups of documents and media to an external drive.

This package scans a home directory for images, videos and documents,
skips anything whose content was already backed up, and bundles the new
files into a dated ZIP archive on the backup drive.
"""

__version__ = "0.1.0"

# Export public API
from .operations import BackupOperations
from .manifest import ManifestStore, hash_file_content
from .walker import FileCandidate, walk_candidates
from .exceptions import BackupError, ManifestParseError, PreconditionError

__all__ = [
    "BackupOperations",
    "ManifestStore",
    "hash_file_content",
    "FileCandidate",
    "walk_candidates",
    "BackupError",
    "ManifestParseError",
    "PreconditionError",
]
