"""Run configuration for both tools, built once from the parsed arguments."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from .diagnostics import TEST_SAMPLE
from .packages import DEFAULT_PKGLOG

MODES = ("default", "verbose", "quiet")
OUTPUTS = ("text", "ui", "json")


@dataclass(frozen=True)
class SoundDiagConfig:
    mode: str = "default"
    lenient: bool = False
    output: str = "text"
    sample: str = TEST_SAMPLE
    debug: bool = False

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}")
        if self.output not in OUTPUTS:
            raise ValueError(f"Unknown output style: {self.output}")

    @property
    def verbose(self) -> bool:
        return self.mode == "verbose"

    @property
    def quiet(self) -> bool:
        return self.mode == "quiet"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SoundDiagConfig":
        if args.json:
            output = "json"
        elif args.ui:
            output = "ui"
        else:
            output = "text"
        return cls(
            mode=args.mode or "default",
            lenient=args.lenient,
            output=output,
            sample=args.sample,
            debug=args.debug,
        )


@dataclass(frozen=True)
class PackageListConfig:
    show_base: bool = False
    show_third_party: bool = False
    short_names: bool = False
    single_line: bool = False
    count_only: bool = False
    pkglog: str = DEFAULT_PKGLOG
    debug: bool = False

    def __post_init__(self) -> None:
        # -l implies -s
        if self.single_line and not self.short_names:
            object.__setattr__(self, "short_names", True)

    @property
    def only_base(self) -> bool:
        return self.show_base and not self.show_third_party

    @property
    def only_third_party(self) -> bool:
        return self.show_third_party and not self.show_base

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "PackageListConfig":
        return cls(
            show_base=args.base,
            show_third_party=args.third_party,
            short_names=args.short,
            single_line=args.list,
            count_only=args.count,
            pkglog=args.pkglog,
            debug=args.debug,
        )
