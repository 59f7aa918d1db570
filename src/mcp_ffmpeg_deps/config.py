"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from mcp_ffmpeg_deps.constants import THROTTLE_WINDOW_SECONDS

DEFAULT_DATA_PATH = Path(os.path.expanduser("~/.local/share/mcp_ffmpeg_deps/bin"))


@dataclass(frozen=True)
class Settings:
    """Server settings"""

    data_path: Path = DEFAULT_DATA_PATH
    tmp_path: Optional[Path] = None
    log_level: str = "INFO"
    throttle_window: float = THROTTLE_WINDOW_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "Settings":
        env = os.environ if environ is None else environ

        data_path = env.get("MCP_FFMPEG_DATA_PATH")
        tmp_path = env.get("MCP_FFMPEG_TMP_PATH")
        window = env.get("MCP_FFMPEG_THROTTLE_WINDOW")

        try:
            throttle_window = float(window) if window else THROTTLE_WINDOW_SECONDS
        except ValueError as e:
            raise ValueError(
                f"MCP_FFMPEG_THROTTLE_WINDOW must be a number of seconds, got {window!r}"
            ) from e
        if throttle_window < 0:
            raise ValueError("MCP_FFMPEG_THROTTLE_WINDOW must not be negative")

        return cls(
            data_path=Path(data_path).expanduser() if data_path else DEFAULT_DATA_PATH,
            tmp_path=Path(tmp_path).expanduser() if tmp_path else None,
            log_level=env.get("MCP_FFMPEG_LOG_LEVEL", "INFO").upper(),
            throttle_window=throttle_window,
        )
