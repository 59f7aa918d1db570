"""Core type definitions"""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from mcp_ffmpeg_deps.utils.process import async_subprocess_run

# (*args) -> (returncode, stdout, stderr)
CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]
PathSearch = Callable[[str], Optional[str]]
ProgressCallback = Callable[[float], None]
Downloader = Callable[..., Awaitable[str]]
Extractor = Callable[[Path], Awaitable[list[str]]]
Cleaner = Callable[[Path], Awaitable[None]]


class Platform(Enum):
    """Operating systems with an install recipe, keyed by platform.system()"""

    WINDOWS = "Windows"
    LINUX = "Linux"
    DARWIN = "Darwin"


class TemplateVar(Enum):
    """Tokens that may appear in archive source paths."""

    ROOT_FILE = "rootFile"
    ARCHIVE_NAME = "archiveName"

    @property
    def token(self) -> str:
        return "{" + self.value + "}"


@dataclass(frozen=True)
class InstallPlan:
    """What to download and which archive entries to keep"""

    url: str
    files_to_extract: dict[str, str]
    clear_destination: bool = False
    throttled: bool = False


def _noop(*_args) -> None:
    return None


@dataclass(frozen=True, kw_only=True)
class LoadUtils:
    """Host capabilities needed to resolve an installed binary"""

    data_path: Path
    system: str
    run_command: CommandRunner = async_subprocess_run
    search_path: PathSearch = shutil.which


@dataclass(frozen=True, kw_only=True)
class InstallUtils(LoadUtils):
    """Host capabilities needed to provision a binary"""

    tmp_path: Path
    download: Downloader
    extract: Extractor
    cleanup: Cleaner
    progress: ProgressCallback = field(default=_noop)
    stage: Callable[[str], None] = field(default=_noop)
    log: Callable[[str], None] = field(default=_noop)
