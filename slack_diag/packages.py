"""Parse and classify the entries of the Slackware package log."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
import re
from typing import Iterable, List

logger = logging.getLogger(__name__)

DEFAULT_PKGLOG = "/var/log/packages"

_BASE_TAG_RE = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class InstalledPackage:
    filename: str
    name: str
    version: str
    arch: str
    tag: str

    @property
    def is_base(self) -> bool:
        """Official packages carry a purely numeric build tag, e.g. ``-1``."""
        return bool(_BASE_TAG_RE.match(self.tag))


@dataclass
class PackageInventory:
    base: List[InstalledPackage] = field(default_factory=list)
    third_party: List[InstalledPackage] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.base) + len(self.third_party)


def parse_package(filename: str) -> InstalledPackage:
    """Split ``name-version-arch-tag`` from the right.

    The name may itself contain dashes, so only the last three fields are
    taken apart. A filename without any dash ends up in every field.
    """
    fields = filename.split("-")
    if len(fields) == 1:
        return InstalledPackage(filename, filename, filename, filename, filename)
    tag = fields[-1]
    arch = fields[-2]
    version = fields[-3] if len(fields) >= 3 else ""
    name = "-".join(fields[:-3])
    return InstalledPackage(filename, name, version, arch, tag)


def short_name(filename: str) -> str:
    return parse_package(filename).name


def classify(filenames: Iterable[str]) -> PackageInventory:
    inventory = PackageInventory()
    for filename in filenames:
        package = parse_package(filename)
        if package.is_base:
            inventory.base.append(package)
        else:
            inventory.third_party.append(package)
    return inventory


def list_package_log(pkglog: str = DEFAULT_PKGLOG) -> List[str]:
    try:
        entries = os.listdir(pkglog)
    except OSError as exc:
        logger.warning("Cannot read package log %s: %s", pkglog, exc)
        return []
    return sorted(entry for entry in entries if not entry.startswith("."))


def read_inventory(pkglog: str = DEFAULT_PKGLOG) -> PackageInventory:
    filenames = list_package_log(pkglog)
    logger.debug("Found %d entries in %s", len(filenames), pkglog)
    return classify(filenames)
