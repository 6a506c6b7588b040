"""Console-friendly formatting utilities."""

from __future__ import annotations

from typing import Iterable, List

from .config import PackageListConfig
from .diagnostics import DiagnosticReport
from .packages import InstalledPackage, PackageInventory, short_name

HEADER = "===== Slackware Sound Diagnostics ====="
VERBOSE_HEADER = "===== Verbose Diagnostics ====="
FOOTER = "===== End of diagnostics ====="

_DETAIL_SOURCES = {"hardware": "lspci", "modules": "lsmod"}


def render_report(report: DiagnosticReport, verbose: bool = False) -> str:
    lines = [HEADER, f"Kernel: {report.kernel}"]
    for result in report.results:
        lines.append(f"{result.label}: {result.summary}")
        if verbose and result.details:
            lines.append(f"  (full {_DETAIL_SOURCES.get(result.name, result.name)}):")
            lines.extend(result.details)

    if not report.passed:
        return "\n".join(lines)

    if report.logs:
        lines.append("")
        lines.append(VERBOSE_HEADER)
        for section in report.logs:
            lines.append(f"--- {section.title} ---")
            lines.extend(section.lines)
    lines.append(FOOTER)
    return "\n".join(lines)


def format_package_list(filenames: Iterable[str], short: bool = False, single_line: bool = False) -> str:
    out = [short_name(filename) if short else filename for filename in filenames]
    return " ".join(out) if single_line else "\n".join(out)


def render_inventory(inventory: PackageInventory, config: PackageListConfig) -> str:
    def group(packages: List[InstalledPackage]) -> str:
        return format_package_list(
            (package.filename for package in packages),
            short=config.short_names,
            single_line=config.single_line,
        )

    if config.only_base:
        return group(inventory.base)
    if config.only_third_party:
        return group(inventory.third_party)
    return "\n".join(
        [
            "Base packages installed:",
            group(inventory.base),
            "",
            "3rd-party packages installed:",
            group(inventory.third_party),
        ]
    )


def render_counts(inventory: PackageInventory, config: PackageListConfig) -> str:
    if config.only_base:
        return f"Base packages: {len(inventory.base)}"
    if config.only_third_party:
        return f"3rd-party packages: {len(inventory.third_party)}"
    return "\n".join(
        [
            f"Base packages: {len(inventory.base)}",
            f"3rd-party packages: {len(inventory.third_party)}",
            f"Total: {inventory.total}",
        ]
    )
