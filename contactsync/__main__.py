"""
contactsync.main
~~~~~~~~~~~~~~~~

This module implements the system's command line script.

    python -m contactsync import contatos.xlsx --update
    python -m contactsync export --tag 12 --tag 15 --format csv
    python -m contactsync tags

The access token is read from `--token` or the `CONTACTSYNC_TOKEN` variable.
"""

import argparse
import logging
import os
import sys
from logging import error, info, warning
from pathlib import Path

from contactsync.errors import ContactSyncError, NoMatchesError
from contactsync.exporter import ExportEngine
from contactsync.importer import ImportEngine
from contactsync.reports import Report


def _write(report: Report, directory: str) -> Path:
    path = Path(directory) / report.filename
    path.write_bytes(report.content)
    return path


def run_import(args) -> int:
    """ Import a file and write the error report, if any. """
    path = Path(args.file)
    engine = ImportEngine()

    last = {"progress": -1}

    def on_progress(progress: int):
        if progress // 10 != last["progress"] // 10:
            info(f"Import progress: {progress}%")
        last["progress"] = progress

    result = engine.run(
        token=args.token,
        content=path.read_bytes() if path.is_file() else b"",
        extension=path.suffix,
        organization_id=args.organization,
        update_if_exists=args.update,
        on_progress=on_progress,
        naive_csv=args.naive_csv,
    )

    print(f"{result.success_count} contact(s) imported, {result.error_count} failed.")

    if result.error_count:
        report = engine.error_report(fmt=args.report_format)
        print(f"Error report written to {_write(report, args.output)}.")
        return 1

    return 0


def run_export(args) -> int:
    """ Export the channel's contacts to a file. """
    engine = ExportEngine()

    try:
        report = engine.export(args.token, selection=args.tag, fmt=args.format)
    except NoMatchesError as e:
        warning(str(e))
        print(str(e))
        return 1

    print(f"{report.count} contact(s) exported to {_write(report, args.output)}.")
    return 0


def run_tags(args) -> int:
    """ Print the tags a selection can be made from. """
    for tag in ExportEngine().list_tags(args.token):
        print(f"{tag.id}\t{tag.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contactsync", description="Bulk contact import and export."
    )
    parser.add_argument(
        "--token", default=os.getenv("CONTACTSYNC_TOKEN"), help="channel access token"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    importer = commands.add_parser(
        "import", help="create contacts from a CSV or XLSX file"
    )
    importer.add_argument("file")
    importer.add_argument(
        "--organization", help="organization id, fetched from the channel when omitted"
    )
    importer.add_argument(
        "--update", action="store_true", help="update contacts that already exist"
    )
    importer.add_argument(
        "--naive-csv", action="store_true", help="split CSV lines on every comma"
    )
    importer.add_argument("--report-format", choices=["xlsx", "csv"], default="xlsx")
    importer.add_argument(
        "--output", default=".", help="directory for the error report"
    )
    importer.set_defaults(func=run_import)

    exporter = commands.add_parser(
        "export", help="write the channel's contacts to a file"
    )
    exporter.add_argument(
        "--tag", action="append", default=[], help="tag id to filter on, repeatable"
    )
    exporter.add_argument("--format", choices=["xlsx", "csv"], default="xlsx")
    exporter.add_argument(
        "--output", default=".", help="directory for the exported file"
    )
    exporter.set_defaults(func=run_export)

    tags = commands.add_parser("tags", help="list the organization's tags")
    tags.set_defaults(func=run_tags)

    return parser


def configure_logging() -> None:
    """ Set the root log level from `CONTACTSYNC_LOG_LEVEL`. """
    logging.basicConfig(
        level=os.getenv("CONTACTSYNC_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def main(argv=None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        return args.func(args)
    except ContactSyncError as e:
        error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
