import logging
from typing import Dict, Iterable, Optional, Tuple, Union

import pytest

from slack_diag.system_state import CommandOutput

SAMPLE = "/usr/share/sounds/alsa/Front_Center.wav"

LSPCI = (
    "00:02.0 VGA compatible controller [0300]: Intel Corporation UHD Graphics 630 [8086:3e9b]\n"
    "00:1f.3 Audio device [0403]: Intel Corporation Cannon Lake PCH cAVS [8086:a348] (rev 10)\n"
)
LSMOD = (
    "Module                  Size  Used by\n"
    "snd_hda_intel          57344  3\n"
    "snd_hda_codec         188416  2 snd_hda_intel\n"
    "snd                   126976  10 snd_hda_intel,snd_hda_codec\n"
    "soundcore              16384  1 snd\n"
    "i915                 3149824  12\n"
)
APLAY_CARDS = (
    "**** List of PLAYBACK Hardware Devices ****\n"
    "card 0: PCH [HDA Intel PCH], device 0: ALC289 Analog [ALC289 Analog]\n"
    "  Subdevices: 1/1\n"
    "  Subdevice #0: subdevice #0\n"
)
APLAY_DEVICES = (
    "null\n"
    "    Discard all samples (playback) or generate zero samples (capture)\n"
    "default\n"
    "    Default ALSA Output (currently PipeWire Media Server)\n"
    "hw:CARD=PCH,DEV=0\n"
    "    HDA Intel PCH, ALC289 Analog\n"
    "plughw:CARD=PCH,DEV=0\n"
    "    HDA Intel PCH, ALC289 Analog\n"
    "hw:CARD=PCH,DEV=3\n"
)
DMESG = "[    1.0] usb 1-1: new device\n[    2.1] snd_hda_intel 0000:00:1f.3: enabling device\n"

Canned = Union[str, Tuple[int, str]]


class FakeProbe:
    """Stands in for SystemProbe; commands missing from ``commands`` are treated as not installed."""

    def __init__(
        self,
        commands: Dict[str, Canned],
        processes: Iterable[str] = (),
        files: Iterable[str] = (),
        installed: Iterable[str] = ("journalctl",),
        kernel: str = "6.1.106",
    ) -> None:
        self.commands = commands
        self.processes = set(processes)
        self.files = set(files)
        self.installed = set(installed)
        self.kernel = kernel
        self.calls = []

    def run(self, *args: str) -> CommandOutput:
        self.calls.append(" ".join(args))
        canned = self.commands.get(" ".join(args))
        if canned is None:
            return CommandOutput(args=tuple(args), returncode=None)
        if isinstance(canned, tuple):
            returncode, stdout = canned
        else:
            returncode, stdout = 0, canned
        return CommandOutput(args=tuple(args), returncode=returncode, stdout=stdout)

    def kernel_release(self) -> str:
        return self.kernel

    def process_running(self, name: str) -> bool:
        return name in self.processes

    def file_exists(self, path) -> bool:
        return str(path) in self.files

    def has_command(self, name: str) -> bool:
        return name in self.installed


def healthy_commands(overrides: Optional[Dict[str, Optional[Canned]]] = None) -> Dict[str, Canned]:
    commands: Dict[str, Canned] = {
        "lspci -nn": LSPCI,
        "lsmod": LSMOD,
        "aplay -l": APLAY_CARDS,
        "aplay -L": APLAY_DEVICES,
        f"aplay -q {SAMPLE}": "",
        "dmesg": DMESG,
        "journalctl -b": "Oct 19 kernel: snd_hda_codec_realtek: autoconfig\nOct 19 sshd: started\n",
    }
    for command, canned in (overrides or {}).items():
        if canned is None:
            commands.pop(command, None)
        else:
            commands[command] = canned
    return commands


@pytest.fixture
def make_probe():
    """Build a probe for a healthy system; ``overrides`` maps a command to new output, or None to uninstall it."""

    def factory(overrides=None, processes=("pipewire",), files=(SAMPLE,), installed=("journalctl",)):
        return FakeProbe(healthy_commands(overrides), processes=processes, files=files, installed=installed)

    return factory


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("slack_diag")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
