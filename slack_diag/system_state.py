"""Collect raw system state for the sound diagnostics: command output, processes, files."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import platform
import shutil
import subprocess
from typing import Optional, Tuple

import psutil

logger = logging.getLogger(__name__)


@dataclass
class CommandOutput:
    args: Tuple[str, ...]
    returncode: Optional[int]
    stdout: str = ""

    @property
    def available(self) -> bool:
        """False when the utility could not be started at all."""
        return self.returncode is not None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> list[str]:
        return self.stdout.splitlines()


class SystemProbe:
    """Thin wrapper over the utilities and process table the checks read from."""

    def run(self, *args: str) -> CommandOutput:
        logger.debug("Running %s", " ".join(args))
        try:
            result = subprocess.run(
                list(args),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                check=False,
            )
        except (FileNotFoundError, PermissionError) as exc:
            logger.debug("Could not start %s: %s", args[0], exc)
            return CommandOutput(args=tuple(args), returncode=None)
        logger.debug("%s exited with %s", args[0], result.returncode)
        return CommandOutput(args=tuple(args), returncode=result.returncode, stdout=result.stdout)

    def kernel_release(self) -> str:
        return platform.release()

    def process_running(self, name: str) -> bool:
        for proc in psutil.process_iter(["name"]):
            try:
                if proc.info["name"] == name:
                    return True
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return False

    def file_exists(self, path: str | os.PathLike[str]) -> bool:
        return os.path.isfile(path)

    def has_command(self, name: str) -> bool:
        return shutil.which(name) is not None
