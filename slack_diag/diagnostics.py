"""Run the ordered sound checks and map the first failure to an exit code."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
import logging
import re
from typing import Callable, List, Optional, Sequence

from .system_state import CommandOutput, SystemProbe

logger = logging.getLogger(__name__)

TEST_SAMPLE = "/usr/share/sounds/alsa/Front_Center.wav"
SOUND_SERVERS = (("pipewire", "PipeWire"), ("pulseaudio", "PulseAudio"))
LOG_TAIL = 20
DEVICE_LIMIT = 3

_AUDIO_RE = re.compile(r"audio", re.IGNORECASE)
_MODULE_RE = re.compile(r"^(snd|snd_|sound|sof_|snd_hda|snd_soc)")
_DEVICE_RE = re.compile(r"^(default|hw:|plughw:)")
_LOG_RE = re.compile(r"snd|sof|audio", re.IGNORECASE)


class ExitCode(IntEnum):
    OK = 0
    NO_HARDWARE = 1
    NO_MODULES = 2
    NO_ALSA_CARDS = 3
    NO_SOUND_SERVER = 4
    PLAYBACK_FAILED = 5


class Outcome(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    INDETERMINATE = "indeterminate"
    INFO = "info"
    SKIPPED = "skipped"


@dataclass
class CheckResult:
    name: str
    label: str
    outcome: Outcome
    summary: str
    details: List[str] = field(default_factory=list)
    exit_code: Optional[ExitCode] = None


@dataclass
class LogSection:
    title: str
    lines: List[str]


@dataclass
class DiagnosticReport:
    kernel: str
    results: List[CheckResult] = field(default_factory=list)
    logs: List[LogSection] = field(default_factory=list)
    exit_code: ExitCode = ExitCode.OK

    @property
    def passed(self) -> bool:
        return self.exit_code == ExitCode.OK

    @property
    def failed_check(self) -> Optional[CheckResult]:
        if self.passed or not self.results:
            return None
        return self.results[-1]


def parse_audio_devices(lspci_output: str) -> List[str]:
    """Device descriptions of audio-class entries in ``lspci -nn`` output."""
    devices = []
    for line in lspci_output.splitlines():
        if not _AUDIO_RE.search(line):
            continue
        # "00:1f.3 Audio device [0403]: Vendor ..." -> "Vendor ..."
        devices.append(":".join(line.split(":")[2:]).lstrip(" "))
    return devices


def parse_sound_modules(lsmod_output: str) -> List[str]:
    return [line.split()[0] for line in lsmod_output.splitlines() if _MODULE_RE.match(line)]


def parse_alsa_cards(aplay_output: str) -> List[str]:
    return [":".join(line.split(":")[:2]) for line in aplay_output.splitlines() if line.startswith("card")]


def parse_alsa_devices(aplay_output: str, limit: int = DEVICE_LIMIT) -> List[str]:
    return [line for line in aplay_output.splitlines() if _DEVICE_RE.match(line)][:limit]


def filter_log_lines(log_output: str, limit: int = LOG_TAIL) -> List[str]:
    matches = [line for line in log_output.splitlines() if _LOG_RE.search(line)]
    return matches[-limit:] if limit else matches


def check_hardware(probe: SystemProbe) -> CheckResult:
    output = probe.run("lspci", "-nn")
    label = "Audio devices (lspci)"
    if not output.available:
        return _indeterminate("hardware", label, output, ExitCode.NO_HARDWARE)
    devices = parse_audio_devices(output.stdout)
    if not devices:
        return CheckResult("hardware", label, Outcome.ABSENT, "none", exit_code=ExitCode.NO_HARDWARE)
    raw = [line for line in output.lines() if _AUDIO_RE.search(line)]
    return CheckResult("hardware", label, Outcome.PRESENT, "\n".join(devices), details=raw)


def check_modules(probe: SystemProbe) -> CheckResult:
    output = probe.run("lsmod")
    label = "Sound modules loaded"
    if not output.available:
        return _indeterminate("modules", label, output, ExitCode.NO_MODULES)
    modules = parse_sound_modules(output.stdout)
    if not modules:
        return CheckResult("modules", label, Outcome.ABSENT, "none", exit_code=ExitCode.NO_MODULES)
    raw = [line for line in output.lines() if "snd" in line]
    return CheckResult("modules", label, Outcome.PRESENT, " ".join(modules), details=raw)


def check_alsa_cards(probe: SystemProbe) -> CheckResult:
    output = probe.run("aplay", "-l")
    label = "ALSA cards"
    if not output.available:
        return _indeterminate("alsa_cards", label, output, ExitCode.NO_ALSA_CARDS)
    cards = parse_alsa_cards(output.stdout)
    if not cards:
        return CheckResult("alsa_cards", label, Outcome.ABSENT, "none", exit_code=ExitCode.NO_ALSA_CARDS)
    return CheckResult("alsa_cards", label, Outcome.PRESENT, " ".join(cards))


def check_alsa_devices(probe: SystemProbe) -> CheckResult:
    output = probe.run("aplay", "-L")
    devices = parse_alsa_devices(output.stdout)
    return CheckResult("alsa_devices", "ALSA devices", Outcome.INFO, " ".join(devices) or "none")


def check_sound_server(probe: SystemProbe) -> CheckResult:
    for process_name, label in SOUND_SERVERS:
        if probe.process_running(process_name):
            return CheckResult("sound_server", label, Outcome.PRESENT, "running")
    return CheckResult(
        "sound_server",
        "/".join(label for _, label in SOUND_SERVERS),
        Outcome.ABSENT,
        "not running",
        exit_code=ExitCode.NO_SOUND_SERVER,
    )


def check_playback(probe: SystemProbe, sample: str = TEST_SAMPLE) -> CheckResult:
    label = "Playback test"
    if not probe.file_exists(sample):
        return CheckResult("playback", label, Outcome.SKIPPED, f"skipped ({sample} not found)")
    output = probe.run("aplay", "-q", sample)
    if not output.available:
        return _indeterminate("playback", label, output, ExitCode.PLAYBACK_FAILED)
    if not output.ok:
        return CheckResult("playback", label, Outcome.ABSENT, "fail", exit_code=ExitCode.PLAYBACK_FAILED)
    return CheckResult("playback", label, Outcome.PRESENT, "ok")


def collect_logs(probe: SystemProbe) -> List[LogSection]:
    sections = [LogSection("dmesg (snd/sof/audio)", filter_log_lines(probe.run("dmesg").stdout))]
    if probe.has_command("journalctl"):
        journal = probe.run("journalctl", "-b")
        sections.append(LogSection("journalctl (recent audio logs)", filter_log_lines(journal.stdout)))
    return sections


def diagnose(
    probe: SystemProbe,
    *,
    lenient: bool = False,
    collect_logs_on_success: bool = False,
    sample: str = TEST_SAMPLE,
) -> DiagnosticReport:
    """Run the checks in order, stopping at the first one that fails.

    A check is indeterminate when the utility it needs is missing. By default
    that counts as a failure, the same as a utility reporting nothing;
    ``lenient`` reports it as unknown and moves on to the next check.
    """
    report = DiagnosticReport(kernel=probe.kernel_release())
    checks: Sequence[Callable[[SystemProbe], CheckResult]] = (
        check_hardware,
        check_modules,
        check_alsa_cards,
        check_alsa_devices,
        check_sound_server,
        lambda p: check_playback(p, sample),
    )
    for check in checks:
        result = check(probe)
        report.results.append(result)
        if _fails(result, lenient):
            logger.debug("Check %s failed (%s), exit %d", result.name, result.outcome.value, result.exit_code)
            report.exit_code = result.exit_code
            return report

    if collect_logs_on_success:
        report.logs = collect_logs(probe)
    return report


def _fails(result: CheckResult, lenient: bool) -> bool:
    if result.outcome is Outcome.ABSENT:
        return True
    return result.outcome is Outcome.INDETERMINATE and not lenient


def _indeterminate(name: str, label: str, output: CommandOutput, exit_code: ExitCode) -> CheckResult:
    return CheckResult(
        name,
        label,
        Outcome.INDETERMINATE,
        f"unknown ({output.args[0]} not available)",
        exit_code=exit_code,
    )
