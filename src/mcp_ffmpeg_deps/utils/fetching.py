import asyncio
import os
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Optional

import aiohttp

from mcp_ffmpeg_deps.constants import ARCHIVE_EXTENSIONS, DOWNLOAD_CHUNK_SIZE
from mcp_ffmpeg_deps.errors import DownloadError
from mcp_ffmpeg_deps.logging import get_logger
from mcp_ffmpeg_deps.utils.process import async_subprocess_run

logger = get_logger(__name__)


def response_filename(response: aiohttp.ClientResponse) -> str:
    """Pick a local filename for a response, preferring Content-Disposition."""
    disposition = response.content_disposition
    name = disposition.filename if disposition and disposition.filename else ""
    if not name:
        name = response.url.name
    # Never let the server choose a directory
    return Path(name).name or "download"


async def download_url(
    url: str,
    dest_dir: Path,
    on_progress: Optional[Callable[[float], None]] = None,
) -> str:
    """Stream a remote file into dest_dir and return the local filename."""
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = None
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                if response.status != 200:
                    logger.error(
                        {"event": "download_failed", "url": url, "status": response.status}
                    )
                    raise DownloadError(url, response.status)

                filename = response_filename(response)
                dest = dest_dir / filename
                size = int(response.headers.get("content-length", 0))
                downloaded = 0

                logger.info(
                    {"event": "download_started", "url": url, "destination": str(dest)}
                )

                with open(dest, "wb") as f:
                    async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        downloaded += len(chunk)
                        if on_progress and size:
                            on_progress(min(downloaded / size, 1.0))

                if on_progress:
                    on_progress(1.0)

                logger.info(
                    {
                        "event": "download_complete",
                        "url": url,
                        "size": downloaded,
                        "expected_size": size,
                    }
                )
                return filename

    except aiohttp.ClientError as e:
        if dest is not None and dest.exists():
            dest.unlink()
        raise DownloadError(url, getattr(e, "status", None)) from e


def archive_format(archive_path: Path) -> str:
    """Return the recognised archive extension of a path."""
    name = archive_path.name.lower()
    for ext in ARCHIVE_EXTENSIONS:
        if name.endswith(ext):
            return ext
    raise ValueError(f"Unsupported archive format: {archive_path.name}")


def top_level_entries(names: list[str]) -> list[str]:
    """First path component of every archive member, in archive order."""
    entries: list[str] = []
    for name in names:
        parts = [p for p in name.replace("\\", "/").split("/") if p not in ("", ".")]
        if parts and parts[0] not in entries:
            entries.append(parts[0])
    return entries


def _extract_zip(archive_path: Path, dest_dir: Path) -> list[str]:
    with zipfile.ZipFile(archive_path) as archive:
        archive.extractall(dest_dir)
        # zipfile drops unix permission bits on extraction
        for info in archive.infolist():
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                os.chmod(dest_dir / info.filename, mode)
        return top_level_entries(archive.namelist())


def _extract_tar(archive_path: Path, dest_dir: Path) -> list[str]:
    with tarfile.open(archive_path) as archive:
        if hasattr(tarfile, "data_filter"):
            archive.extractall(dest_dir, filter="data")
        else:
            archive.extractall(dest_dir)
        return top_level_entries(archive.getnames())


async def _extract_7z(archive_path: Path, dest_dir: Path) -> list[str]:
    before = {p.name for p in dest_dir.iterdir()}

    returncode, stdout, stderr = await async_subprocess_run(
        "7z", "x", "-y", f"-o{dest_dir}", str(archive_path)
    )
    if returncode != 0:
        raise RuntimeError(
            f"7z extraction failed with code {returncode}\n"
            f"stdout: {stdout}\n"
            f"stderr: {stderr}"
        )

    return sorted(p.name for p in dest_dir.iterdir() if p.name not in before)


async def extract_archive(archive_path: Path, dest_dir: Optional[Path] = None) -> list[str]:
    """Extract an archive next to itself and return its top-level entries."""
    dest_dir = dest_dir or archive_path.parent
    format = archive_format(archive_path)

    logger.debug(
        {"event": "extract_archive", "archive": str(archive_path), "format": format}
    )

    if format == ".7z":
        entries = await _extract_7z(archive_path, dest_dir)
    elif format == ".zip":
        entries = await asyncio.to_thread(_extract_zip, archive_path, dest_dir)
    elif format in (".tar", ".tgz", ".txz") or format.startswith(".tar."):
        entries = await asyncio.to_thread(_extract_tar, archive_path, dest_dir)
    else:
        raise ValueError(f"Unsupported archive format: {format}")

    logger.info(
        {
            "event": "archive_extracted",
            "archive": str(archive_path),
            "extracted_to": str(dest_dir),
            "entries": entries,
        }
    )
    return entries
