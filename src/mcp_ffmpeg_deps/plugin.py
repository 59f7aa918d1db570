"""Dependency registration and per-session provisioning."""

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp_ffmpeg_deps.binaries.installer import install_from_online_archive
from mcp_ffmpeg_deps.binaries.locator import load
from mcp_ffmpeg_deps.binaries.platforms import executable_name, get_install_plan
from mcp_ffmpeg_deps.binaries.throttle import ThrottleGuard
from mcp_ffmpeg_deps.constants import DEPENDENCY_NAMES
from mcp_ffmpeg_deps.errors import UnknownDependencyError
from mcp_ffmpeg_deps.logging import get_logger
from mcp_ffmpeg_deps.types import InstallUtils, LoadUtils

logger = get_logger(__name__)


@dataclass(frozen=True)
class DependencyHandlers:
    """Load/install pair a host calls for one dependency"""

    name: str
    load: Callable[[LoadUtils], Awaitable[Path]]
    install: Callable[[InstallUtils], Awaitable[Any]]
    instructions: Optional[str] = None


class DependencyRegistry:
    """Named dependencies known to the host."""

    def __init__(self):
        self._dependencies: Dict[str, DependencyHandlers] = {}

    def register_dependency(
        self,
        name: str,
        *,
        load: Callable[[LoadUtils], Awaitable[Path]],
        install: Callable[[InstallUtils], Awaitable[Any]],
        instructions: Optional[str] = None,
    ) -> DependencyHandlers:
        handlers = DependencyHandlers(
            name=name, load=load, install=install, instructions=instructions
        )
        self._dependencies[name] = handlers
        logger.debug({"event": "dependency_registered", "name": name})
        return handlers

    def get(self, name: str) -> DependencyHandlers:
        try:
            return self._dependencies[name]
        except KeyError:
            raise UnknownDependencyError(name) from None

    def names(self) -> list[str]:
        return list(self._dependencies)


class ProvisioningSession:
    """Loads and installs ffmpeg binaries, owning the throttle state."""

    def __init__(self, throttle: Optional[ThrottleGuard] = None):
        self.throttle = throttle or ThrottleGuard()

    async def load(self, name: str, utils: LoadUtils) -> Path:
        return await load(name, utils)

    async def install(self, name: str, utils: InstallUtils) -> bool:
        """Provision a binary; False means a recent install already covered it."""
        if name not in DEPENDENCY_NAMES:
            raise UnknownDependencyError(name)

        plan = get_install_plan(name, utils.system)

        if executable_name(name, utils.system) not in plan.files_to_extract.values():
            logger.warning(
                {
                    "event": "dependency_not_in_archive",
                    "name": name,
                    "system": utils.system,
                    "url": plan.url,
                }
            )

        async def clear_destination() -> None:
            utils.stage("cleaning destination")
            await utils.cleanup(utils.data_path)

        async def action() -> None:
            await install_from_online_archive(
                plan.url,
                plan.files_to_extract,
                utils,
                on_before_copy=clear_destination if plan.clear_destination else None,
            )

        if plan.throttled:
            return await self.throttle.run(utils, action)

        await action()
        return True


def register(
    registry: DependencyRegistry, session: Optional[ProvisioningSession] = None
) -> DependencyRegistry:
    """Register ffmpeg, ffprobe and ffplay with a registry."""
    session = session or ProvisioningSession()

    for name in DEPENDENCY_NAMES:
        registry.register_dependency(
            name,
            load=lambda utils, name=name: session.load(name, utils),
            install=lambda utils, name=name: session.install(name, utils),
            instructions="ffplay.md" if name == "ffplay" else None,
        )

    return registry


def read_instructions(handlers: DependencyHandlers) -> Optional[str]:
    """Manual-install notes bundled for a dependency, if any."""
    if not handlers.instructions:
        return None
    resource = resources.files("mcp_ffmpeg_deps") / "instructions" / handlers.instructions
    return resource.read_text(encoding="utf-8")
