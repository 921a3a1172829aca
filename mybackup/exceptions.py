"""Error kinds raised by the backup engine."""


class BackupError(Exception):
    """Base class for all backup failures."""


class PreconditionError(BackupError):
    """Raised when the backup root does not exist."""


class ManifestParseError(BackupError, ValueError):
    """Raised when a persisted manifest cannot be parsed."""
