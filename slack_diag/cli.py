"""Entry points for the sound-diag and installed-pkgs command line tools."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import PackageListConfig, SoundDiagConfig
from .diagnostics import TEST_SAMPLE, DiagnosticReport, Outcome, diagnose
from .formatting import render_counts, render_inventory, render_report
from .logging_setup import setup_logging
from .packages import DEFAULT_PKGLOG, read_inventory
from .system_state import SystemProbe

logger = logging.getLogger(__name__)

_MODE_FLAGS = {"-v": "verbose", "-q": "quiet"}

PKG_EPILOG = """\
default behavior:
  With no options, show all installed packages (base + 3rd-party),
  grouped into "Base packages installed" and "3rd-party packages installed".

definitions:
  Base (official) package: tag is purely numeric (e.g. "-1", "-2")
  3rd-party package: tag is non-numeric (e.g. "_SBo", "_alien", "_ponce")

examples:
  installed-pkgs            all packages, grouped
  installed-pkgs -3 -s      3rd-party packages, short names only
  installed-pkgs -b -l      base packages as a space-separated list
  installed-pkgs -c         count of base vs 3rd-party
"""

_STATUS_STYLES = {
    Outcome.PRESENT: "[green]ok[/green]",
    Outcome.ABSENT: "[bold red]missing[/bold red]",
    Outcome.INDETERMINATE: "[yellow]unknown[/yellow]",
    Outcome.INFO: "[cyan]info[/cyan]",
    Outcome.SKIPPED: "[dim]skipped[/dim]",
}


class _UsageProblem(Exception):
    pass


class _ForgivingParser(argparse.ArgumentParser):
    """Argument mistakes are logged and never decide the exit code."""

    def error(self, message):
        raise _UsageProblem(message)


def _parse(parser: _ForgivingParser, argv: Sequence[str]) -> Tuple[argparse.Namespace, List[str]]:
    try:
        args, extra = parser.parse_known_args(argv)
    except _UsageProblem as exc:
        return parser.parse_args([]), [f"{exc}; running with defaults"]
    if extra:
        return args, [f"ignoring unrecognized arguments: {' '.join(extra)}"]
    return args, []


def _leading_mode(argv: Sequence[str]) -> Optional[str]:
    """Only the first argument can select -v or -q."""
    return _MODE_FLAGS.get(argv[0]) if argv else None


def sound_diag_parser() -> _ForgivingParser:
    parser = _ForgivingParser(
        prog="sound-diag",
        description="Quick sound diagnostics for Slackware: hardware, modules, ALSA, sound server, playback.",
        epilog="exit codes: 0 ok, 1 no audio hardware, 2 no sound modules, 3 no ALSA cards, "
        "4 no sound server, 5 playback failed",
    )
    parser.add_argument(
        "-v", dest="mode", action="store_const", const="verbose", help="verbose: raw command output and recent audio logs (first argument only)"
    )
    parser.add_argument("-q", dest="mode", action="store_const", const="quiet", help="quiet: no output, exit code only (first argument only)")
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="treat a missing utility as unknown instead of a failed check",
    )
    style = parser.add_mutually_exclusive_group()
    style.add_argument("--ui", action="store_true", help="render the report with Rich")
    style.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--sample", default=TEST_SAMPLE, help="WAV file used for the playback test")
    parser.add_argument("--debug", action="store_true", help="debug logging on stderr")
    parser.add_argument("--log-file", type=Path, help="also write logs to this file")
    return parser


def sound_diag_main(argv: Optional[Sequence[str]] = None, probe: Optional[SystemProbe] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    args, problems = _parse(sound_diag_parser(), argv)
    if args.mode is not None and args.mode != _leading_mode(argv):
        problems.append("-v/-q only counts as the first argument; ignored")
    args.mode = _leading_mode(argv)
    config = SoundDiagConfig.from_args(args)
    setup_logging(debug=config.debug, log_file=args.log_file)
    for problem in problems:
        logger.warning(problem)

    report = diagnose(
        probe or SystemProbe(),
        lenient=config.lenient,
        collect_logs_on_success=config.verbose,
        sample=config.sample,
    )

    if config.quiet:
        return int(report.exit_code)

    if config.output == "json":
        print(_to_json(report))
    elif config.output == "ui":
        _render_rich(report, verbose=config.verbose)
    else:
        print(render_report(report, verbose=config.verbose))
    return int(report.exit_code)


def installed_pkgs_parser() -> _ForgivingParser:
    parser = _ForgivingParser(
        prog="installed-pkgs",
        description="List installed packages on Slackware, with options to filter and format output.",
        epilog=PKG_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-b", dest="base", action="store_true", help="show only base (official) packages")
    parser.add_argument("-3", dest="third_party", action="store_true", help="show only 3rd-party packages")
    parser.add_argument("-s", dest="short", action="store_true", help="short names only (strip version, arch, build/tag)")
    parser.add_argument("-l", dest="list", action="store_true", help="short names as one space-separated line (implies -s)")
    parser.add_argument("-c", dest="count", action="store_true", help="show counts only")
    parser.add_argument("--pkglog", default=DEFAULT_PKGLOG, help="package log directory (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="debug logging on stderr")
    return parser


def installed_pkgs_main(argv: Optional[Sequence[str]] = None) -> int:
    args, problems = _parse(installed_pkgs_parser(), sys.argv[1:] if argv is None else list(argv))
    config = PackageListConfig.from_args(args)
    setup_logging(debug=config.debug)
    for problem in problems:
        logger.warning(problem)

    inventory = read_inventory(config.pkglog)
    if config.count_only:
        print(render_counts(inventory, config))
    else:
        print(render_inventory(inventory, config))
    return 0


def _to_json(report: DiagnosticReport) -> str:
    payload: Dict[str, Any] = asdict(report)
    payload["passed"] = report.passed
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _render_rich(report: DiagnosticReport, verbose: bool = False) -> None:
    console = Console()

    console.print(Panel(f"Slackware Sound Diagnostics - kernel {report.kernel}", style="bold cyan"))

    table = Table(box=box.ROUNDED)
    table.add_column("Check", style="bold")
    table.add_column("Status")
    table.add_column("Result")
    for result in report.results:
        table.add_row(result.label, _STATUS_STYLES[result.outcome], escape(result.summary))
    console.print(table)

    if verbose:
        for result in report.results:
            if result.details:
                console.print(Panel(escape("\n".join(result.details)), title=result.label, box=box.SIMPLE))
        for section in report.logs:
            console.print(Panel(escape("\n".join(section.lines)) or "no matching lines", title=section.title, box=box.SIMPLE))

    failed = report.failed_check
    if failed is None:
        console.print(Panel("All checks passed.", style="bold green"))
    else:
        console.print(Panel(f"{failed.label}: {escape(failed.summary)} (exit {int(report.exit_code)})", style="bold red"))
