"""
Status update utilities for long-running operations.

Wallet operations accept an optional `status_callback` that receives short
human-readable progress lines. The callback may be a plain function or a
coroutine function.
"""
import inspect
import logging
import sys
from typing import Awaitable, Callable, Optional, TextIO, Union

StatusCallback = Callable[[str], Union[None, Awaitable[None]]]

logger = logging.getLogger(__name__)


async def report_status(status_callback: Optional[StatusCallback], message: str) -> None:
    """
    Send a status line to the callback, if there is one.

    Args:
        status_callback: Sync or async callable, or None
        message (str): Status line
    """
    logger.debug(message)
    if status_callback is None:
        return
    result = status_callback(message)
    if inspect.isawaitable(result):
        await result


def create_status_callback(stream: Optional[TextIO] = None, prefix: str = "") -> StatusCallback:
    """
    Create a status callback that writes each update as a line to a stream.

    Args:
        stream: Writable text stream (defaults to sys.stdout at call time)
        prefix (str): Text put in front of every line

    Returns:
        StatusCallback: A callback that can be passed to wallet operations

    Example:
        status_cb = create_status_callback(prefix="  ")
        result = await engine.transfer(request, status_callback=status_cb)
    """
    def callback(message: str) -> None:
        out = stream if stream is not None else sys.stdout
        out.write(f"{prefix}{message}\n")
        out.flush()

    return callback
