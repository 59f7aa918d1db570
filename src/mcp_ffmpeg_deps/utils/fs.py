import asyncio
import shutil
from pathlib import Path

from mcp_ffmpeg_deps.logging import get_logger

logger = get_logger(__name__)


def _clear_directory(path: Path) -> None:
    if not path.exists():
        return

    for item in path.iterdir():
        logger.debug({"event": "removing_path", "path": str(item)})
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()


async def cleanup_directory(path: Path) -> None:
    """Remove everything inside a directory, keeping the directory itself."""
    await asyncio.to_thread(_clear_directory, Path(path))


async def move_file(src: Path, dst: Path) -> None:
    """Move a file, replacing whatever is at the destination.

    Raises FileNotFoundError when src does not exist.
    """
    if not src.exists():
        raise FileNotFoundError(2, "No such file or directory", str(src))

    if dst.is_file() or dst.is_symlink():
        dst.unlink()

    logger.debug({"event": "moving_file", "file": str(src), "dst": str(dst)})
    await asyncio.to_thread(shutil.move, str(src), str(dst))
