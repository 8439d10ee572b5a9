import asyncio
from typing import Awaitable, Optional, Tuple, TypeVar

import structlog

from launchpad_core.utils.logging import log_degraded_read

T = TypeVar("T")


async def bounded_read(
    awaitable: Awaitable[T],
    timeout_s: float,
    logger: structlog.stdlib.BoundLogger,
    *,
    mint: str,
    source: str,
) -> Tuple[bool, Optional[T]]:
    """
    Awaits one external read under a timeout. Returns (ok, value); a timeout or any error
    raised by the source is logged and reported as (False, None). Never retries.
    """
    try:
        return True, await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.TimeoutError:
        log_degraded_read(logger, mint=mint, source=source, reason="timeout", timeout_s=timeout_s)
    except Exception as exc:
        log_degraded_read(logger, mint=mint, source=source, reason="error", error=repr(exc))
    return False, None
