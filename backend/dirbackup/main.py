import argparse
import sys
from typing import Optional

from pydantic import ValidationError

from dirbackup.config import Settings
from dirbackup.exceptions import BackupError
from dirbackup.logger import configure_logger
from dirbackup.services import create_backup, delete_backup, list_backups, restore_from_backup
from dirbackup.utils import prompt_for_path

FAILURE_PREFIX = {
    "create": "Backup failed",
    "list": "Listing backups failed",
    "restore": "Restore failed",
    "delete": "Deleting backup failed",
}


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def cmd_create(args: argparse.Namespace, settings: Settings) -> int:
    source = prompt_for_path("SOURCE_DIR", args.source)
    destination = prompt_for_path("BACKUP_DIR", args.destination)
    keep_n = args.keep if args.keep is not None else settings.keep_n

    artifact = create_backup(source, destination, keep_n=keep_n, verify=not args.no_verify)

    if args.verbose:
        for name in artifact.entries:
            print(name)
    print(f"Backup is successful: {artifact.file_path}")
    return 0


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    for backup in list_backups(args.destination):
        print(f"{backup.name}\t{backup.size}\t{backup.modified}")
    return 0


def cmd_restore(args: argparse.Namespace, settings: Settings) -> int:
    restore_from_backup(args.archive, args.target)
    print(f"Restored {args.archive} into {args.target}")
    return 0


def cmd_delete(args: argparse.Namespace, settings: Settings) -> int:
    delete_backup(args.destination, args.name)
    print(f"Deleted {args.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dirbackup",
        description="Back up the contents of a directory into a timestamped tar.gz archive",
    )
    sub = p.add_subparsers(dest="command", required=True)

    pc = sub.add_parser("create", help="create a backup_<timestamp>.tar.gz archive")
    pc.add_argument("source", nargs="?", help="directory to back up (prompted if omitted)")
    pc.add_argument("destination", nargs="?", help="directory to store the archive in (prompted if omitted)")
    pc.add_argument("--keep", type=_positive_int, default=None, help="keep only the newest N backups")
    pc.add_argument("--no-verify", action="store_true", help="skip re-reading the archive after writing")
    pc.add_argument("-v", "--verbose", action="store_true", help="print every archived entry")
    pc.set_defaults(func=cmd_create)

    pl = sub.add_parser("list", help="list backups in a destination directory")
    pl.add_argument("destination")
    pl.set_defaults(func=cmd_list)

    pr = sub.add_parser("restore", help="extract a backup into a directory")
    pr.add_argument("archive")
    pr.add_argument("target")
    pr.set_defaults(func=cmd_restore)

    pd = sub.add_parser("delete", help="delete one backup from a destination directory")
    pd.add_argument("destination")
    pd.add_argument("name")
    pd.set_defaults(func=cmd_delete)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logger(settings.log_level, settings.log_format)

    try:
        return args.func(args, settings)
    except BackupError as e:
        print(f"{FAILURE_PREFIX[args.command]}: {e.message}", file=sys.stderr)
        return 1
    except EOFError:
        print(f"{FAILURE_PREFIX[args.command]}: no path given", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
