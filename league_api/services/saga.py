"""
Compensating-action helper for multi-write workflows.

The database calls in a workflow are not wrapped in a transaction. A ``Saga``
records an undo action for every completed step so that, when a later step
fails, the earlier writes are reverted in reverse order. Compensation is
best-effort: a crash between two steps still leaves the earlier writes in
place.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)


class Saga:
    """Run workflow steps, undoing completed ones if a later step fails."""

    def __init__(self, name: str):
        self.name = name
        self._compensations: List[Callable[[], Awaitable[Any]]] = []

    async def step(
        self,
        action: Callable[[], Awaitable[Any]],
        compensation: Optional[Callable[[Any], Awaitable[Any]]] = None
    ) -> Any:
        """
        Run one step.

        Args:
            action: Coroutine factory performing the write
            compensation: Called with the step's result to undo it later

        Returns:
            Whatever ``action`` returned

        Raises:
            The step's exception, after earlier steps have been compensated
        """
        try:
            result = await action()
        except Exception:
            await self.compensate()
            raise

        if compensation is not None:
            self._compensations.append(lambda: compensation(result))
        return result

    async def compensate(self) -> None:
        """Undo completed steps, newest first."""
        while self._compensations:
            undo = self._compensations.pop()
            try:
                await undo()
            except Exception:
                logger.exception("Compensation failed in saga %s", self.name)
