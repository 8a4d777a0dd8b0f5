"""
First-success race between redundant async providers.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RaceFailedError(Exception):
    """Every contestant failed, or none finished before the timeout."""

    def __init__(self, message: str, errors: Optional[List[BaseException]] = None):
        super().__init__(message)
        self.errors = errors or []


async def first_success(
    factories: Sequence[Callable[[], Awaitable[T]]],
    timeout: Optional[float] = None
) -> T:
    """
    Start every factory concurrently and return the first result that does not raise.

    Remaining contestants are cancelled as soon as a winner is known, when the
    timeout elapses, or when the caller itself is cancelled.

    Args:
        factories: Zero-argument callables returning awaitables
        timeout: Overall deadline in seconds, None to wait indefinitely

    Returns:
        The winning contestant's result

    Raises:
        RaceFailedError: If all contestants raise or the timeout elapses first
    """
    if not factories:
        raise RaceFailedError("No contestants to race")

    pending = {asyncio.ensure_future(factory()) for factory in factories}
    errors: List[BaseException] = []
    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else loop.time() + timeout

    try:
        while pending:
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            done, pending = await asyncio.wait(
                pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
            if not done:
                raise RaceFailedError(f"No contestant finished within {timeout}s", errors)

            winner = None
            for task in done:
                if task.cancelled():
                    errors.append(asyncio.CancelledError())
                elif task.exception() is not None:
                    errors.append(task.exception())
                elif winner is None:
                    winner = task
            if winner is not None:
                return winner.result()

        raise RaceFailedError(f"All {len(factories)} contestants failed", errors)
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
