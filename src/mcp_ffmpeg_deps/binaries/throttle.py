"""Skip back-to-back installs of the same shared archive."""
import time
from typing import Any, Awaitable, Callable, Optional

from mcp_ffmpeg_deps.binaries.locator import load
from mcp_ffmpeg_deps.constants import PRIMARY_BINARY, THROTTLE_WINDOW_SECONDS
from mcp_ffmpeg_deps.errors import ProvisionError
from mcp_ffmpeg_deps.logging import get_logger
from mcp_ffmpeg_deps.types import LoadUtils

logger = get_logger(__name__)


class ThrottleGuard:
    """Remembers the last shared-archive install of one provisioning session.

    Windows and Linux ship every binary in one archive, so a host installing
    ffmpeg, ffprobe and ffplay one after the other would download it three
    times. Within `window` seconds of a successful install, and while the
    primary binary still loads, further installs are skipped.
    """

    def __init__(
        self,
        window: float = THROTTLE_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.window = window
        self.clock = clock
        self.last_install_time: Optional[float] = None

    async def _primary_exists(self, utils: LoadUtils, primary: str) -> bool:
        try:
            await load(primary, utils)
            return True
        except (ProvisionError, OSError) as e:
            logger.debug({"event": "throttle_primary_missing", "error": str(e)})
            return False

    def is_recent(self, now: float) -> bool:
        if self.last_install_time is None:
            return False
        return now < self.last_install_time + self.window

    async def run(
        self,
        utils: LoadUtils,
        action: Callable[[], Awaitable[Any]],
        primary: str = PRIMARY_BINARY,
    ) -> bool:
        """Run action unless a recent install already provisioned everything.

        Returns False when the action was skipped.
        """
        exists = await self._primary_exists(utils, primary)

        now = self.clock()
        if exists and self.is_recent(now):
            logger.info(
                {
                    "event": "install_throttled",
                    "last_install_time": self.last_install_time,
                    "window": self.window,
                }
            )
            return False

        await action()

        self.last_install_time = now
        return True
