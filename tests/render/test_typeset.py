"""tests for deferred typesetting and diagram scheduling."""

import asyncio
from typing import Any, Optional

import pytest

from chatrender.render.typeset import DiagramScheduler, render_math_in_element


class FakeTypesetter:  # pylint: disable=too-few-public-methods
    """records typeset calls."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.calls: list[list[Any]] = []
        self.error = error

    async def typeset(self, nodes: list[Any]) -> None:
        self.calls.append(nodes)
        if self.error:
            raise self.error


def test_waits_for_typesetter_then_typesets() -> None:
    """polls until the typesetter is available."""
    typesetter = FakeTypesetter()
    availability = [None, None, typesetter]
    checks: list[int] = []

    def get_typesetter() -> Optional[FakeTypesetter]:
        checks.append(1)
        return availability[min(len(checks), len(availability)) - 1]

    asyncio.run(render_math_in_element("node", get_typesetter, poll_interval=0))

    assert len(checks) == 3
    assert typesetter.calls == [["node"]]


def test_typesetting_error_propagates() -> None:
    """re-raises typesetter errors to the caller."""
    typesetter = FakeTypesetter(error=RuntimeError("bad tex"))

    with pytest.raises(RuntimeError, match="bad tex"):
        asyncio.run(render_math_in_element("node", lambda: typesetter))


def test_scheduler_collapses_requests() -> None:
    """several requests in one window render once."""
    calls: list[int] = []
    scheduler = DiagramScheduler(lambda: calls.append(1))

    async def run() -> None:
        scheduler.schedule()
        scheduler.schedule()
        scheduler.schedule()
        assert scheduler.pending
        await asyncio.sleep(0.01)

    asyncio.run(run())

    assert calls == [1]
    assert not scheduler.pending


def test_scheduler_allows_new_window_after_run() -> None:
    """a request after the deferred render schedules another one."""
    calls: list[int] = []
    scheduler = DiagramScheduler(lambda: calls.append(1))

    async def run() -> None:
        scheduler.schedule()
        await asyncio.sleep(0.01)
        scheduler.schedule()
        await asyncio.sleep(0.01)

    asyncio.run(run())

    assert calls == [1, 1]


def test_scheduler_without_loop_renders_immediately() -> None:
    """renders at once when no event loop is running."""
    calls: list[int] = []
    scheduler = DiagramScheduler(lambda: calls.append(1))

    scheduler.schedule()

    assert calls == [1]
    assert not scheduler.pending
