"""Command-line entry point.

Flags map one to one onto :class:`kawatte.config.Settings` fields, so every
flag can also come from a ``KAWATTE_`` environment variable.  Flags given on
the command line win over the environment.
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Sequence

from pydantic import ValidationError

from kawatte import __version__
from kawatte.application.orchestrator import Orchestrator
from kawatte.config import Settings
from kawatte.engines.replacer import Replacer
from kawatte.infrastructure.loaders import load_substitutions
from kawatte.infrastructure.logging import APP_NAME, get_logger, setup_logging
from kawatte.shared.exceptions import ConfigurationError, KawatteError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

DESCRIPTION = """\
kawatte recursively walks the file tree and finds and replaces the patterns
found in a substitution file.  The substitution file is a CSV file of
old,new substitutions.  All patterns are replaced in a single pass, so the
output of one substitution is never fed into another.

Example:

-- subs.csv --
a,b
b,c
c,a
-- in.txt --
abcdef

kawatte --pat subs.csv --match '*.txt'

-- in.txt --
bcadef

Every option may also be set with a KAWATTE_ environment variable, e.g.
KAWATTE_PAT=subs.csv or KAWATTE_EXCLUDE_DIR='[".git","node_modules"]'.
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=APP_NAME,
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("--pat", metavar="FILE", help="path to the CSV file containing substitution patterns")
    ap.add_argument("--dir", metavar="DIRECTORY", help="path to the starting directory (default .)")
    ap.add_argument("--match", metavar="GLOB", action="append",
                    help="glob matching files to include (default *); repeatable")
    ap.add_argument("--exclude", metavar="GLOB", action="append",
                    help="glob matching files to exclude (default .*); repeatable")
    ap.add_argument("--match-dir", metavar="GLOB", action="append",
                    help="glob matching directories to include (default *); repeatable")
    ap.add_argument("--exclude-dir", metavar="GLOB", action="append",
                    help="glob matching directories to exclude (default .*); repeatable")
    ap.add_argument("--dry-run", action="store_true", default=None,
                    help="just print the names of files that would be modified")
    ap.add_argument("--keep-going", action="store_true", default=None,
                    help="report files that cannot be read or written and carry on")
    ap.add_argument("--verbose", action="store_true", default=None, help="log debug output")
    ap.add_argument("--log-json", action="store_true", default=None, help="emit log lines as JSON")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def load_settings(args: argparse.Namespace) -> Settings:
    """Merge parsed flags over the environment."""
    overrides: dict[str, Any] = {k: v for k, v in vars(args).items() if v is not None}
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid settings: {exc}") from exc
    if not settings.pat:
        raise ConfigurationError("missing required flag: --pat (or KAWATTE_PAT)")
    return settings


def run(settings: Settings) -> int:
    log = get_logger(APP_NAME)
    pairs = load_substitutions(settings.pat, log=log)
    orchestrator = Orchestrator(
        Replacer.build(pairs),
        settings.filter_set(),
        dry_run=settings.dry_run,
        keep_going=settings.keep_going,
        log=log,
    )
    summary = orchestrator.run(settings.dir)
    if not summary.ok:
        log.error("run.failed_files", failures=len(summary.failures),
                  paths=[r.path for r in summary.failures])
        return EXIT_FAILURE
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_USAGE

    # Logging is not configured yet, so report with the default level.
    try:
        settings = load_settings(args)
    except ConfigurationError as exc:
        setup_logging()
        get_logger(APP_NAME).error(exc.message, error_code=exc.error_code)
        return EXIT_USAGE

    setup_logging(level=settings.log_level, json_output=settings.log_json)
    try:
        return run(settings)
    except KawatteError as exc:
        get_logger(APP_NAME).error(exc.message, error_code=exc.error_code, **exc.context)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
