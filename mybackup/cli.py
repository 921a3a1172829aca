import argparse
import sys
import getpass
import logging
from pathlib import Path
from typing import NoReturn

from .exceptions import ManifestParseError, PreconditionError
from .operations import BackupOperations

# Configure logging to write to file only, not stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename='mybackup.log',
    filemode='a'
)
logger = logging.getLogger('mybackup')

DEFAULT_DRIVE_LABEL = "New Volume"


def default_backup_root(drive_label: str) -> Path:
    """Mount point of a removable drive for the current user."""
    return Path("/media") / getpass.getuser() / drive_label


def print_error_and_exit(error_message: str, exit_code: int = 1) -> NoReturn:
    """
    Print an error message and exit the program with the specified exit code.

    Args:
        error_message (str): The error message to display
        exit_code (int, optional): The exit code to use. Defaults to 1.
    """
    logger.error(error_message)
    print(f"Error: {error_message}", file=sys.stderr)
    sys.exit(exit_code)


def backup_command(args: argparse.Namespace) -> None:
    """
    Run one backup pass with the parsed options.

    Args:
        args (argparse.Namespace): Command line arguments containing:
            - drive: Drive label under /media/<user>
            - backup_root: Explicit backup root, overrides drive
            - source_directory: Directory to back up
            - zip: Whether to bundle new files into an archive
    """
    backup_root = Path(args.backup_root) if args.backup_root else default_backup_root(args.drive)
    source_dir = Path(args.source_directory).expanduser()
    if not source_dir.is_dir():
        print_error_and_exit(f"Source directory '{source_dir}' does not exist")

    ops = BackupOperations(
        backup_root=str(backup_root),
        source_directory=str(source_dir),
        zip_enabled=args.zip,
        on_copied=lambda relative_path: print(f"Copied {relative_path}"),
    )

    try:
        print("Scanning for files...")
        result = ops.run()
    except KeyboardInterrupt:
        print_error_and_exit("Operation cancelled by user")
    except PreconditionError as e:
        print_error_and_exit(str(e))
    except ManifestParseError as e:
        print_error_and_exit(f"Corrupt manifest: {str(e)}")
    except PermissionError as e:
        print_error_and_exit(f"Permission denied: {str(e)}")
    except FileNotFoundError as e:
        print_error_and_exit(f"File not found: {str(e)}")
    except OSError as e:
        print_error_and_exit(f"OS error: {str(e)}")
    except Exception as e:
        print_error_and_exit(f"Error running backup: {str(e)}")

    if result['copied'] == 0:
        print("No new files to back up.")
    elif result['archive'] is not None:
        print(f"Archive saved: {result['archive'].name} ({result['archive_size']} bytes)")
    else:
        print(f"Copied {result['copied']} files to {result['staging']}")


def main() -> None:
    """
    Main entry point for the backup command line interface.
    Parses arguments and runs a single backup pass.
    """
    parser = argparse.ArgumentParser(
        prog="mybackup",
        description="Back up images, videos and documents to an external drive.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-d", "--drive",
        default=DEFAULT_DRIVE_LABEL,
        help="Drive label, mounted under /media/<user>/"
    )
    parser.add_argument(
        "--no-zip",
        dest="zip",
        action="store_false",
        help="Disable zipping (copy files only)"
    )
    parser.add_argument(
        "--backup-root",
        default=None,
        help="Backup root directory, overrides --drive"
    )
    parser.add_argument(
        "--source-directory",
        default=str(Path.home()),
        help="Directory to back up"
    )

    args = parser.parse_args()
    backup_command(args)


if __name__ == "__main__":
    main()
