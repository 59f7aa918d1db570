"""Resolve a usable binary, bundled first and system-wide second."""
import re
from pathlib import Path

from mcp_ffmpeg_deps.binaries.platforms import executable_name
from mcp_ffmpeg_deps.errors import BinaryNotFoundError, BinaryValidationError
from mcp_ffmpeg_deps.logging import get_logger
from mcp_ffmpeg_deps.types import LoadUtils

logger = get_logger(__name__)


def matches_version_banner(name: str, output: str) -> bool:
    """True when output starts with '<name> version', ignoring case."""
    return re.match(rf"{re.escape(name)} version", output, re.IGNORECASE) is not None


async def validate_binary(name: str, path: Path, utils: LoadUtils) -> Path:
    """Run `<path> -version` and check the banner it prints."""
    returncode, stdout, stderr = await utils.run_command(str(path), "-version")

    logger.debug(
        {"event": "binary_validated", "name": name, "path": str(path), "returncode": returncode}
    )

    if returncode != 0 or not matches_version_banner(name, stdout):
        raise BinaryValidationError(name, str(path), stdout or stderr)
    return path


def bundled_path(name: str, utils: LoadUtils) -> Path:
    return utils.data_path / executable_name(name, utils.system)


async def _load_bundled(name: str, utils: LoadUtils) -> Path:
    path = bundled_path(name, utils)
    stat = path.stat()  # FileNotFoundError when absent

    if not path.is_file():
        raise BinaryValidationError(
            name, str(path), f"{path} is not a regular file (mode {oct(stat.st_mode)})"
        )
    return await validate_binary(name, path, utils)


async def load(name: str, utils: LoadUtils) -> Path:
    """Return the path of a validated binary.

    The data directory copy wins; otherwise the first match on the system
    search path is validated. Any bundled failure, including one raised
    while stat-ing or spawning it, falls through to the system search.
    When both fail, a plain "not bundled" is reported as
    BinaryNotFoundError chained to the stat error, and any other bundled
    failure is re-raised as is. Spawn errors on the system candidate
    propagate.
    """
    try:
        return await _load_bundled(name, utils)
    except (OSError, BinaryValidationError) as e:
        bundled_error = e

    logger.debug(
        {"event": "bundled_binary_unusable", "name": name, "error": str(bundled_error)}
    )

    found = utils.search_path(name)
    if not found:
        if isinstance(bundled_error, FileNotFoundError):
            raise BinaryNotFoundError(
                name, [str(bundled_path(name, utils)), "PATH"]
            ) from bundled_error
        raise bundled_error

    system_path = Path(found.strip())
    try:
        return await validate_binary(name, system_path, utils)
    except BinaryValidationError as system_error:
        if isinstance(bundled_error, FileNotFoundError):
            raise
        raise bundled_error from system_error
