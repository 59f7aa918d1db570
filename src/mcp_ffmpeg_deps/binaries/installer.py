"""Download an archive and move selected entries into the data directory."""
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional

from mcp_ffmpeg_deps.constants import ARCHIVE_EXTENSIONS
from mcp_ffmpeg_deps.errors import ArchiveStructureError, EmptyArchiveError
from mcp_ffmpeg_deps.logging import get_logger
from mcp_ffmpeg_deps.types import InstallUtils, TemplateVar
from mcp_ffmpeg_deps.utils.fs import move_file

logger = get_logger(__name__)


def strip_archive_extension(filename: str) -> str:
    """Drop a known compression extension, e.g. 'x-1.0.tar.xz' -> 'x-1.0'."""
    lowered = filename.lower()
    for ext in ARCHIVE_EXTENSIONS:
        if lowered.endswith(ext) and len(filename) > len(ext):
            return filename[: -len(ext)]
    return filename


def resolve_template(template: str, values: Dict[TemplateVar, str]) -> str:
    """Substitute every known token in an archive source path."""
    resolved = template
    for var in TemplateVar:
        if var.token in resolved:
            if var not in values:
                raise ValueError(f"No value for {var.token} in {template!r}")
            resolved = resolved.replace(var.token, values[var])
    return resolved


async def install_from_online_archive(
    url: str,
    files_to_extract: Dict[str, str],
    utils: InstallUtils,
    on_before_copy: Optional[Callable[[], Awaitable[None]]] = None,
) -> list[Path]:
    """Fetch one archive, check it has a single root, and place the mapped files.

    Returns the destination paths in map order.
    """
    utils.stage("downloading")
    utils.log(f"url: {url}")
    filename = await utils.download(url, utils.tmp_path, on_progress=utils.progress)
    archive_path = utils.tmp_path / filename
    archive_name = strip_archive_extension(filename)

    utils.stage("extracting")
    utils.log(f"archive: {archive_path}")
    entries = await utils.extract(archive_path)

    if len(entries) == 0:
        raise EmptyArchiveError(str(archive_path))
    if len(entries) > 1:
        raise ArchiveStructureError(
            "\n".join(entries), details={"archive": str(archive_path), "entries": entries}
        )

    root_file = entries[0]
    logger.debug(
        {"event": "archive_root", "root": root_file, "archive_name": archive_name}
    )

    if on_before_copy:
        await on_before_copy()

    values = {TemplateVar.ROOT_FILE: root_file, TemplateVar.ARCHIVE_NAME: archive_name}
    utils.log('copying "' + '", "'.join(files_to_extract.values()) + '"')
    utils.log(f"-> from: {utils.tmp_path / root_file}")
    utils.log(f"-> to: {utils.data_path}")

    utils.data_path.mkdir(parents=True, exist_ok=True)
    placed = []
    try:
        for source, dest in files_to_extract.items():
            src_path = utils.tmp_path / resolve_template(source, values)
            dest_path = utils.data_path / dest
            await move_file(src_path, dest_path)
            placed.append(dest_path)
    except FileNotFoundError as e:
        raise ArchiveStructureError(
            str(e), details={"archive": str(archive_path), "missing": e.filename}
        ) from e

    logger.info(
        {"event": "archive_installed", "url": url, "files": [str(p) for p in placed]}
    )
    return placed
