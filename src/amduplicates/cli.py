#!/usr/bin/env python3
"""
AMDuplicates CLI — Command line interface for content-based duplicate detection.
Drives the same ScanSession a GUI would, with console-based interaction.
All operations are safe: deletion moves files to system trash, never permanent erase.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import asyncio
import os
import sys
import time
from pathlib import Path
from typing import List, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from amduplicates.core.models import DuplicateGroup, FileRecord, ScanOptions, SortOrder
from amduplicates.session import ScanSession
from amduplicates.utils.convert_utils import ConvertUtils
from amduplicates.aliases import SORT_KEY_ALIASES, SORT_KEY_CHOICES, SORT_KEY_HELP_TEXT, EPILOG_TEXT


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="amduplicates",
            description="AMDuplicates — find files with identical content across folders",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "folders",
            nargs="+",
            metavar="FOLDER",
            help="Folders to scan (overlapping folders are fine)"
        )

        # Listing options
        parser.add_argument(
            "--sort", "-s",
            choices=SORT_KEY_CHOICES,
            default="name",
            type=str,
            help=SORT_KEY_HELP_TEXT
        )
        parser.add_argument(
            "--descending", "-d",
            action="store_true",
            help="Reverse the sort order"
        )
        parser.add_argument(
            "--all", "-a",
            action="store_true",
            dest="show_all",
            help="List every scanned file, not only duplicates"
        )

        # Traversal options
        parser.add_argument(
            "--include-hidden",
            action="store_true",
            help="Also scan files and folders whose names start with a dot"
        )
        parser.add_argument(
            "--follow-symlinks",
            action="store_true",
            help="Follow symbolic links to files and folders"
        )

        # Actions
        parser.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep the first file of each duplicate group and move the rest to trash.\n"
                 "Always shows preview before deletion for safety."
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --keep-one (for automation/scripts)"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.keep_one:
            self.error_exit("--force can only be used with --keep-one")

        # Prevent interactive confirmation in non-TTY environments
        if args.keep_one and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        for folder in args.folders:
            path = Path(folder).resolve()
            if not path.exists():
                self.error_exit(f"Directory not found: {folder}")
            if not path.is_dir():
                self.error_exit(f"Path is not a directory: {folder}")

    @staticmethod
    def create_options(args: argparse.Namespace) -> ScanOptions:
        """Create ScanOptions from CLI arguments."""
        return ScanOptions(
            skip_hidden=not args.include_hidden,
            follow_symlinks=args.follow_symlinks
        )

    @staticmethod
    def create_sort_order(args: argparse.Namespace) -> SortOrder:
        return SortOrder(key=SORT_KEY_ALIASES[args.sort], ascending=not args.descending)

    def progress_callback(self, count: int) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return
        sys.stderr.write(f"\r  [scanning] {count} files found...")
        sys.stderr.flush()

    async def run_scan(self, session: ScanSession, folders: List[str]) -> None:
        """Scan each folder in turn, merging into the session catalog."""
        for folder in folders:
            if not self.quiet:
                print(f"Scanning directory: {Path(folder).resolve()}")
            await session.add_folder(folder)
            if self.verbose:
                sys.stderr.write("\n")

    def output_records(self, records: List[FileRecord]) -> None:
        """Output every record, one per line, in session order."""
        if self.quiet:
            return

        print(f"\n{len(records)} files")
        for record in records:
            print(
                f"   {ConvertUtils.short_digest(record.digest):<12}  "
                f"{ConvertUtils.bytes_to_human(record.size):>10}  "
                f"{ConvertUtils.timestamp_to_human(record.modified)}  "
                f"{record.path}"
            )

    def output_groups(self, groups: List[DuplicateGroup]) -> None:
        """Output duplicate groups as plain text."""
        if self.quiet:
            return

        if not groups:
            print("No duplicate groups found.")
            return

        total_files = sum(len(g.files) for g in groups)
        wasted = sum(g.wasted_bytes for g in groups)
        print(f"\nFound {len(groups)} duplicate groups ({total_files} files, "
              f"{ConvertUtils.bytes_to_human(wasted)} reclaimable)")

        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.size)
            print(f"\n📁 Group {idx} | Size: {size_str} | Files: {len(group.files)} "
                  f"| SHA-256: {ConvertUtils.short_digest(group.digest)}")
            for record in group.files:
                print(f"   {record.path} [{record.kind}]")

    async def execute_keep_one(self, session: ScanSession, force: bool = False) -> None:
        """
        Keep one file per group, trash the rest.
        The preview is shown whenever confirmation is asked; --quiet hides it only with --force.
        Failures are always reported.
        """
        groups = session.duplicate_groups()
        if not groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return

        files_to_delete = [record.path for group in groups for record in group.files[1:]]
        space_saved_str = ConvertUtils.bytes_to_human(sum(g.wasted_bytes for g in groups))

        if not (self.quiet and force):
            print()
            for idx, group in enumerate(groups, 1):
                print(f"📁 Group {idx} | Size: {ConvertUtils.bytes_to_human(group.size)} | Files: {len(group.files)}")
                print("-" * 60)
                print(f"   [KEEP] {group.files[0].path}")
                for record in group.files[1:]:
                    print(f"   [DEL]  {record.path}")
                print()

            print("=" * 60)
            print(f"Summary: Keep 1 file per group ({len(groups)} files preserved, {len(files_to_delete)} files deleted)")
            print(f"Total space saved: {space_saved_str}")
            print()

        if force:
            if not self.quiet:
                print("⚠️  WARNING: --force flag skips confirmation. Proceeding with deletion...")
        else:
            # Read the answer off the loop thread
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None, input, f"Are you sure you want to move {len(files_to_delete)} files to trash? [y/N]: "
            )
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return

        if not self.quiet:
            print(f"\nMoving {len(files_to_delete)} files to trash...")
        result = await session.remove_files(files_to_delete)

        if result.failed:
            print(f"\n⚠️  Partial success: {len(result.removed)}/{len(files_to_delete)} files moved to trash.")
            print(f"Failed to delete {len(result.failed)} file(s):")
            for path, error in list(result.failed.items())[:5]:
                print(f"  • {os.path.basename(path)}: {error.split(':')[-1].strip()}")
            if len(result.failed) > 5:
                print(f"  ...and {len(result.failed) - 5} more files")
        elif not self.quiet:
            print(f"✅ Successfully moved {len(result.removed)} files to trash.")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    async def run_async(self, args: argparse.Namespace) -> ScanSession:
        session = ScanSession(
            options=self.create_options(args),
            sort_order=self.create_sort_order(args)
        )
        session.add_progress_listener(self.progress_callback)

        await self.run_scan(session, args.folders)

        if args.keep_one:
            await self.execute_keep_one(session, force=args.force)
        elif args.show_all:
            self.output_records(list(session.all_records))
        else:
            self.output_groups(session.duplicate_groups())

        failed = [r for r in session.all_records if not r.is_hashed]
        if failed:
            self.warning(f"{len(failed)} file(s) could not be read and were not compared")
        return session

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        self.validate_args(args)
        asyncio.run(self.run_async(args))

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
