"""Plant identifier contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- Lets the Gemini adapter and test fakes be swapped in the presentation
  session without coupling the core to HTTP.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import PlantIdentification


@runtime_checkable
class PlantIdentifier(Protocol):
    """Minimal contract for an identification backend.

    Design rules:
    - `identify` is asynchronous because it performs I/O (HTTP).
    - It returns exactly one `PlantIdentification` or raises.
    """

    async def identify(self, image_bytes: bytes) -> PlantIdentification:
        """Identify the plant shown in `image_bytes`."""

        ...
