import asyncio

import pytest

from app.utils.race import RaceFailedError, first_success


async def answer(value, delay):
    await asyncio.sleep(delay)
    return value


async def fail(delay, message="boom"):
    await asyncio.sleep(delay)
    raise RuntimeError(message)


@pytest.mark.asyncio
async def test_fastest_success_wins_and_losers_are_cancelled():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append("slow")
            raise
        return "slow"

    result = await first_success([slow, lambda: answer("fast", 0.01)])
    await asyncio.sleep(0)

    assert result == "fast"
    assert cancelled == ["slow"]


@pytest.mark.asyncio
async def test_failures_are_skipped_until_a_success():
    result = await first_success([lambda: fail(0.0), lambda: answer("second", 0.02)])
    assert result == "second"


@pytest.mark.asyncio
async def test_all_failing_raises_with_every_error():
    with pytest.raises(RaceFailedError) as excinfo:
        await first_success([lambda: fail(0.0, "a"), lambda: fail(0.01, "b")])
    assert sorted(str(e) for e in excinfo.value.errors) == ["a", "b"]


@pytest.mark.asyncio
async def test_timeout_raises_and_cancels_contestants():
    started = []
    cancelled = []

    async def hang():
        started.append(True)
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    with pytest.raises(RaceFailedError):
        await first_success([hang, hang], timeout=0.02)
    assert len(started) == 2
    assert len(cancelled) == 2


@pytest.mark.asyncio
async def test_no_contestants():
    with pytest.raises(RaceFailedError):
        await first_success([])


@pytest.mark.asyncio
async def test_losers_are_settled_before_returning():
    loop = asyncio.get_running_loop()
    unretrieved = []
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: unretrieved.append(context))

    async def slow():
        await asyncio.sleep(5)

    try:
        losers = []

        def tracked(factory):
            def start():
                task = asyncio.ensure_future(factory())
                losers.append(task)
                return task
            return start

        result = await first_success([
            tracked(lambda: fail(0.0)),
            lambda: answer("ok", 0.0),
            tracked(slow),
        ])
        assert result == "ok"
        assert all(task.done() for task in losers)
        assert losers[1].cancelled()
    finally:
        loop.set_exception_handler(previous_handler)

    assert unretrieved == []
