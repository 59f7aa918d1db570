import asyncio

from mcp_ffmpeg_deps.logging import get_logger

logger = get_logger(__name__)


async def async_subprocess_run(*args):
    """
    Run a command asynchronously and return its exit code, stdout, and stderr.

    :param args: Command and arguments to run
    :return: Tuple of (returncode, stdout, stderr)
    """
    cmd = [str(arg) for arg in args]
    logger.debug({"event": "subprocess_exec", "cmd": cmd})

    proc = await asyncio.create_subprocess_exec(
        *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await proc.communicate()

    logger.debug(
        {"event": "subprocess_complete", "cmd": cmd, "returncode": proc.returncode}
    )
    return (
        proc.returncode,
        stdout.decode(errors="replace"),
        stderr.decode(errors="replace"),
    )
