"""deferred math typesetting and diagram rendering."""

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1


class MathTypesetter(Protocol):  # pylint: disable=too-few-public-methods
    """protocol for a math typesetting engine."""

    async def typeset(self, nodes: list[Any]) -> None:
        """typesets math inside nodes in place."""


async def render_math_in_element(
    element: Any,
    get_typesetter: Callable[[], Optional[MathTypesetter]],
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """
    typesets math in element once the typesetter becomes available.

    Args:
        element: node holding rendered message HTML
        get_typesetter: returns the typesetter, or None while it is loading
        poll_interval: seconds between availability checks

    Raises:
        Exception: whatever the typesetter raises, after logging it
    """
    typesetter = get_typesetter()
    while typesetter is None:
        logger.debug("waiting for math typesetter to load...")
        await asyncio.sleep(poll_interval)
        typesetter = get_typesetter()

    try:
        await typesetter.typeset([element])
    except Exception as e:
        logger.error("math typesetting failed: %s", e)
        raise


class DiagramScheduler:
    """collapses diagram render requests into one deferred call."""

    def __init__(self, render: Callable[[], None], delay: float = 0.0) -> None:
        self._render = render
        self.delay = delay
        self._pending = False

    @property
    def pending(self) -> bool:
        """whether a render is scheduled and has not run yet."""
        return self._pending

    def schedule(self) -> None:
        """schedules a render unless one is already pending."""
        if self._pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running event loop, rendering diagrams now")
            self._render()
            return
        self._pending = True
        loop.call_later(self.delay, self._run)

    def _run(self) -> None:
        self._pending = False
        self._render()
