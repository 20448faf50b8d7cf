from __future__ import annotations
import argparse, sys
from typing import Optional, Sequence
from . import __version__
from .utils import ConfigError, load_config, logger, setup_logging, split_dirs
from .watcher import WatchSetupError, run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccmerge",
        description="Merges compile commands into a single file and monitors for updates.",
    )
    parser.add_argument("-d", "--directories", action="append", metavar="DIR[,DIR...]",
                        help="Directories to scan and watch (comma-separated, repeatable)")
    parser.add_argument("-o", "--output", help="Output file (default: compile_commands.json)")
    parser.add_argument("-i", "--input", help="Input file name to look for (default: compile_commands.json)")
    parser.add_argument("-c", "--config", help="YAML config file (default: $CCMERGE_CONFIG)")
    parser.add_argument("--once", action="store_true", help="Merge once and exit without watching")
    parser.add_argument("--polling", action="store_true", help="Poll for changes instead of using OS notifications")
    parser.add_argument("--log-file", help="Also write log messages to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_config(args: argparse.Namespace) -> dict:
    cfg = load_config(args.config)
    dirs = split_dirs(args.directories)
    if dirs:
        cfg["directories"] = dirs
    if args.output:
        cfg["output"] = args.output
    if args.input:
        cfg["input_name"] = args.input
    if args.once:
        cfg["watch"]["enabled"] = False
    if args.polling:
        cfg["watch"]["use_polling"] = True
    if args.log_file:
        cfg["logging"]["file"] = args.log_file
    if args.verbose:
        cfg["logging"]["level"] = "DEBUG"
    return cfg


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = resolve_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if not cfg["directories"]:
        print("Error: No directories specified. Use --directories to specify directories to watch.",
              file=sys.stderr)
        return 2

    setup_logging(cfg["logging"]["level"], cfg["logging"]["file"])
    try:
        run(cfg)
    except OSError as e:
        logger.error(f"Failed to write initial combined file {cfg['output']}: {e}")
        return 1
    except WatchSetupError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped.")
    return 0
