#!/usr/bin/env python3
import argparse

from linededup.models import UsageError
from linededup.orchestrator import run_once


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Remove duplicate lines from files, whatever their text encoding.")
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument("file", nargs="?", help="Input file path to process")
    src.add_argument("-d", "--directory", help="Directory to process; every file found is deduplicated")
    parser.add_argument("-o", "--output", help="Output file (or output directory with -d); stdout when omitted")
    parser.add_argument("--stat", action="store_true", help="Show execution statistics")
    parser.add_argument("--ignore", action="append", default=[], metavar="GLOB", help="Glob of files/directories to skip (repeatable)")
    parser.add_argument("--config", help="Path to YAML config")
    # processing flags
    parser.add_argument("--layout", choices=["flat", "mirror"], help="Directory output layout: base names only, or mirrored subdirectories")
    parser.add_argument("--exclude-hidden", dest="include_hidden", action="store_false", help="Skip dot-files and dot-directories")
    parser.add_argument("--no-ignore-files", dest="use_ignore_files", action="store_false", help="Do not honor .ignore/.gitignore files")
    parser.add_argument("--no-progress", dest="progress_enabled", action="store_false", help="Disable the progress bar")
    parser.add_argument("--sample-size", dest="sample_size", type=int, help="Bytes sampled for encoding detection")
    parser.add_argument("--encoding", dest="default_encoding", help="Encoding used when detection is inconclusive")
    parser.set_defaults(include_hidden=None, use_ignore_files=None, progress_enabled=None)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {
        "layout": args.layout,
        "include_hidden": args.include_hidden,
        "use_ignore_files": args.use_ignore_files,
        "progress_enabled": args.progress_enabled,
        "sample_size": args.sample_size,
        "default_encoding": args.default_encoding,
    }

    try:
        run_once(
            file=args.file,
            directory=args.directory,
            output=args.output,
            stat=args.stat,
            ignore=args.ignore,
            config_path=args.config,
            overrides=overrides,
        )
    except UsageError as e:
        parser.error(str(e))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
