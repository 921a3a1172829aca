import os
import json
import hashlib
import logging
from typing import Dict, ItemsView, Mapping, Optional

from .exceptions import ManifestParseError


logger = logging.getLogger('mybackup')

MANIFEST_FILENAME = "manifest.json"


def hash_file_content(file_path: str, chunk_size: int = 65536) -> str:
    """Generate a SHA-256 hash for a file's content, reading it in chunks."""
    sha256 = hashlib.sha256()
    with open(file_path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            sha256.update(chunk)
    return sha256.hexdigest()


def load_manifest(manifest_path: str) -> Dict[str, str]:
    """
    Load a persisted manifest.

    Args:
        manifest_path (str): Path to the manifest JSON document

    Returns:
        Dict[str, str]: Mapping of content digest to relative path, empty if
            no file exists at manifest_path

    Raises:
        ManifestParseError: If the file is not a JSON object of strings
        OSError: If the file exists but cannot be read
    """
    if not os.path.exists(manifest_path):
        logger.info(f"No manifest at '{manifest_path}', starting empty")
        return {}

    with open(manifest_path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestParseError(f"Manifest '{manifest_path}' is not valid JSON: {str(e)}") from e

    if not isinstance(data, dict):
        raise ManifestParseError(f"Manifest '{manifest_path}' must contain a JSON object")
    for digest, relative_path in data.items():
        if not isinstance(relative_path, str):
            raise ManifestParseError(f"Manifest entry '{digest}' has a non-string path")

    logger.info(f"Loaded {len(data)} manifest entries from '{manifest_path}'")
    return data


def save_manifest(manifest_path: str, manifest: Mapping[str, str]) -> None:
    """Write the manifest as indented JSON, atomically replacing any previous contents."""
    temp_path = f"{manifest_path}.tmp"
    try:
        with open(temp_path, 'w', encoding='utf-8') as f:
            json.dump(dict(manifest), f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, manifest_path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    logger.info(f"Saved {len(manifest)} manifest entries to '{manifest_path}'")


class ManifestStore:
    """Digest to relative-path record of every file ever backed up."""

    def __init__(self, manifest_path: str):
        self.manifest_path = manifest_path
        self.entries: Dict[str, str] = {}

    def load(self) -> 'ManifestStore':
        """Replace the in-memory entries with the persisted ones."""
        self.entries = load_manifest(self.manifest_path)
        return self

    def save(self) -> None:
        """Flush the in-memory entries to disk."""
        save_manifest(self.manifest_path, self.entries)

    def contains(self, content_hash: str) -> bool:
        """Check if content with the given hash was already backed up."""
        return content_hash in self.entries

    def get(self, content_hash: str) -> Optional[str]:
        """Get the relative path recorded for a hash."""
        return self.entries.get(content_hash)

    def add(self, content_hash: str, relative_path: str) -> bool:
        """Record a hash unless it is already known. Returns True if added."""
        if content_hash in self.entries:
            return False
        self.entries[content_hash] = relative_path
        return True

    def merge(self, other: Mapping[str, str]) -> int:
        """Add every entry of other whose hash is not known yet."""
        return sum(1 for content_hash, path in other.items() if self.add(content_hash, path))

    def items(self) -> ItemsView[str, str]:
        return self.entries.items()

    def __contains__(self, content_hash: object) -> bool:
        return content_hash in self.entries

    def __len__(self) -> int:
        return len(self.entries)
