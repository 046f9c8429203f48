"""Presentation-side request state for plant identification.

This module holds the state a UI binds to (idle, loading, result, error) and
keeps it out of the rendering code, so the CLI, tests or any future front
end share one flow. Listeners are plain callables notified on every
transition.
"""

from __future__ import annotations

import logging
from typing import Callable

from core.domain.errors import PlantIdentifyError
from core.domain.models import RequestState
from core.interfaces.identifier import PlantIdentifier

logger = logging.getLogger(__name__)

StateListener = Callable[[RequestState], None]


class IdentificationSession:
    """Drives one identifier and exposes its current `RequestState`.

    Overlapping submissions are not cancelled. Each one takes a generation
    number and only the latest submission may publish its completion, so a
    slow earlier request can never overwrite a newer result.
    """

    def __init__(self, identifier: PlantIdentifier) -> None:
        self._identifier = identifier
        self._state = RequestState.idle()
        self._generation = 0
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register `listener`; the returned callable unsubscribes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        """Return to idle and invalidate any request still in flight."""

        self._generation += 1
        self._publish(RequestState.idle())

    async def submit(self, image_bytes: bytes) -> RequestState:
        """Identify `image_bytes` and return the state it produced.

        If a newer submission started meanwhile, the stale completion is
        discarded and the session state is left untouched; the returned
        state then still describes this call's own outcome.
        """

        self._generation += 1
        generation = self._generation
        self._publish(RequestState.in_flight())

        try:
            result = await self._identifier.identify(image_bytes)
        except (PlantIdentifyError, ValueError) as exc:
            outcome = RequestState.failed(exc)
        except BaseException:
            if generation == self._generation:
                self._publish(RequestState.idle())
            raise
        else:
            outcome = RequestState.succeeded(result)

        if generation != self._generation:
            logger.debug("session: dropping stale completion (generation %d < %d)", generation, self._generation)
            return outcome

        self._publish(outcome)
        return outcome

    def _publish(self, state: RequestState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
