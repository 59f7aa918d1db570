"""Platform detection and install plan selection."""
import platform
from typing import Callable, Dict

from mcp_ffmpeg_deps.constants import (
    DARWIN_ARCHIVE_URL_TEMPLATE,
    LINUX_ARCHIVE_URL,
    WINDOWS_ARCHIVE_URL,
)
from mcp_ffmpeg_deps.errors import UnsupportedPlatformError
from mcp_ffmpeg_deps.types import InstallPlan, Platform, TemplateVar

ROOT = TemplateVar.ROOT_FILE.token


def detect_system() -> str:
    """Current OS identifier as reported by platform.system()."""
    return platform.system()


def get_platform(system: str) -> Platform:
    try:
        return Platform(system)
    except ValueError:
        raise UnsupportedPlatformError(system) from None


def executable_name(name: str, system: str) -> str:
    """File name of a binary on the given OS."""
    return f"{name}.exe" if system == Platform.WINDOWS.value else name


def _windows_plan(name: str) -> InstallPlan:
    # Full static build carries all three binaries under <root>/bin
    return InstallPlan(
        url=WINDOWS_ARCHIVE_URL,
        files_to_extract={
            f"{ROOT}/bin/ffmpeg.exe": "ffmpeg.exe",
            f"{ROOT}/bin/ffprobe.exe": "ffprobe.exe",
            f"{ROOT}/bin/ffplay.exe": "ffplay.exe",
        },
        clear_destination=True,
        throttled=True,
    )


def _linux_plan(name: str) -> InstallPlan:
    # No ffplay in the static build
    return InstallPlan(
        url=LINUX_ARCHIVE_URL,
        files_to_extract={
            f"{ROOT}/ffmpeg": "ffmpeg",
            f"{ROOT}/ffprobe": "ffprobe",
        },
        clear_destination=True,
        throttled=True,
    )


def _darwin_plan(name: str) -> InstallPlan:
    # One single-file archive per binary
    return InstallPlan(
        url=DARWIN_ARCHIVE_URL_TEMPLATE.format(name=name),
        files_to_extract={name: name},
    )


PLATFORM_PLANS: Dict[Platform, Callable[[str], InstallPlan]] = {
    Platform.WINDOWS: _windows_plan,
    Platform.LINUX: _linux_plan,
    Platform.DARWIN: _darwin_plan,
}


def get_install_plan(name: str, system: str) -> InstallPlan:
    """Select the download and extraction recipe for a binary on an OS."""
    return PLATFORM_PLANS[get_platform(system)](name)
