"""Default host capabilities backed by aiohttp, archives and the local filesystem."""

import logging
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from mcp_ffmpeg_deps.binaries.platforms import detect_system
from mcp_ffmpeg_deps.config import Settings
from mcp_ffmpeg_deps.logging import get_logger, log_with_data
from mcp_ffmpeg_deps.types import InstallUtils, LoadUtils
from mcp_ffmpeg_deps.utils.fetching import download_url, extract_archive
from mcp_ffmpeg_deps.utils.fs import cleanup_directory

logger = get_logger(__name__)


def create_load_utils(data_path: Path, system: Optional[str] = None) -> LoadUtils:
    return LoadUtils(data_path=Path(data_path), system=system or detect_system())


def create_install_utils(
    data_path: Path,
    tmp_path: Path,
    system: Optional[str] = None,
    name: str = "",
) -> InstallUtils:
    """Build install capabilities that report through the application logger."""
    last_reported = [-1]

    def stage(label: str) -> None:
        log_with_data(logger, logging.INFO, "Install stage", {"dependency": name, "stage": label})

    def log(message: str) -> None:
        log_with_data(logger, logging.DEBUG, message, {"dependency": name})

    def progress(ratio: float) -> None:
        # One record per 10% step
        step = int(ratio * 10)
        if step > last_reported[0]:
            last_reported[0] = step
            log_with_data(
                logger, logging.INFO, "Download progress", {"dependency": name, "ratio": round(ratio, 2)}
            )

    return InstallUtils(
        data_path=Path(data_path),
        tmp_path=Path(tmp_path),
        system=system or detect_system(),
        download=download_url,
        extract=extract_archive,
        cleanup=cleanup_directory,
        progress=progress,
        stage=stage,
        log=log,
    )


@asynccontextmanager
async def temporary_install_utils(
    settings: Settings, name: str, system: Optional[str] = None
) -> AsyncIterator[InstallUtils]:
    """Install capabilities with a fresh temporary directory, removed afterwards."""
    if settings.tmp_path:
        settings.tmp_path.mkdir(parents=True, exist_ok=True)

    temp_dir = tempfile.TemporaryDirectory(
        prefix=f"mcp-ffmpeg-{name}-", dir=settings.tmp_path
    )
    try:
        yield create_install_utils(settings.data_path, Path(temp_dir.name), system, name)
    finally:
        logger.debug({"event": "cleaning_tmp", "path": temp_dir.name})
        temp_dir.cleanup()
