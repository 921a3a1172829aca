import os
import pytest
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from mybackup.operations import BackupOperations


FIXED_START = datetime(2026, 10, 18, 17, 2, 3, 123456, tzinfo=timezone.utc)


# ---- Individual fixtures for flexible test composition ----

@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def home_dir(temp_dir):
    """Create a fake home directory with media, documents and noise."""
    home_dir = temp_dir / "home"
    os.makedirs(home_dir)
    create_test_files(home_dir)
    return home_dir


@pytest.fixture
def backup_root(temp_dir):
    """Create an empty backup drive mount point."""
    backup_root = temp_dir / "drive"
    os.makedirs(backup_root)
    return backup_root


# ---- Base test class for inheritance-based testing ----

class TestBase:
    """Base class for all backup tests providing isolation and cleanup."""

    def setUp(self):
        """
        Set up the test environment.

        This method:
        1. Creates a temporary directory
        2. Sets up a fake home directory and a backup drive
        3. Creates test files in the home directory
        """
        self.temp_dir = tempfile.TemporaryDirectory()
        self.working_dir = Path(self.temp_dir.name)

        self.home_dir = self.working_dir / "home"
        self.backup_root = self.working_dir / "drive"
        os.makedirs(self.home_dir)
        os.makedirs(self.backup_root)

        self._create_test_files()

    def tearDown(self):
        """Clean up the temporary directory."""
        try:
            self.temp_dir.cleanup()
        except (PermissionError, OSError) as e:
            print(f"Warning: Could not clean up temporary directory: {e}")

    @pytest.fixture(autouse=True)
    def _setup_teardown_fixture(self):
        """
        Pytest fixture to automatically call setUp and tearDown.

        This fixture is automatically used by all test methods in classes
        that inherit from TestBase.
        """
        self.setUp()
        yield
        self.tearDown()

    def _create_test_files(self):
        """Create test files in the home directory."""
        create_test_files(self.home_dir)

    def make_operations(self, **kwargs) -> BackupOperations:
        """Build BackupOperations against the test home and drive."""
        kwargs.setdefault('clock', lambda: FIXED_START)
        return BackupOperations(str(self.backup_root), str(self.home_dir), **kwargs)

    @property
    def staging_dir(self) -> Path:
        return self.backup_root / "staging"

    @property
    def backups_dir(self) -> Path:
        return self.backup_root / "backups"

    @property
    def manifest_path(self) -> Path:
        return self.backup_root / "manifest.json"


# ---- Helper functions for both approaches ----

def write_file(path: Path, content) -> Path:
    """Write text or bytes to path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    return path


def create_test_files(directory: Path):
    """
    Create a small home tree.

    Backed up: photos/beach.jpg, photos/2025/party.PNG, docs/notes.txt,
    docs/report.pdf. Ignored: setup.exe, .cache/thumb.jpg,
    node_modules/pkg/readme.md.
    """
    write_file(directory / "photos" / "beach.jpg", os.urandom(2048))
    write_file(directory / "photos" / "2025" / "party.PNG", os.urandom(1024))
    write_file(directory / "docs" / "notes.txt", "Remember the milk")
    write_file(directory / "docs" / "report.pdf", b"%PDF-1.4 fake report")
    write_file(directory / "setup.exe", b"MZ not a document")
    write_file(directory / ".cache" / "thumb.jpg", os.urandom(256))
    write_file(directory / "node_modules" / "pkg" / "readme.md", "# package")


def staged_files(staging_dir: Path) -> set:
    """Relative POSIX paths of every file in staging."""
    if not staging_dir.exists():
        return set()
    return {p.relative_to(staging_dir).as_posix() for p in staging_dir.rglob("*") if p.is_file()}
