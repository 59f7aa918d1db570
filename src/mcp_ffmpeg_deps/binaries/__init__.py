"""Binary management functionality."""
from mcp_ffmpeg_deps.binaries.locator import load, validate_binary
from mcp_ffmpeg_deps.binaries.installer import (
    install_from_online_archive,
    resolve_template,
    strip_archive_extension,
)
from mcp_ffmpeg_deps.binaries.platforms import (
    detect_system,
    executable_name,
    get_install_plan,
)
from mcp_ffmpeg_deps.binaries.throttle import ThrottleGuard

__all__ = [
    "load",
    "validate_binary",
    "install_from_online_archive",
    "resolve_template",
    "strip_archive_extension",
    "detect_system",
    "executable_name",
    "get_install_plan",
    "ThrottleGuard",
]
