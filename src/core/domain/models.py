"""Domain models (Pydantic v2).

Note:
- These models describe *what* an identification is, not *how* it is obtained.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

UNKNOWN_PLANT_NAME = "Unknown Plant"


class PlantIdentification(BaseModel):
    """Result of one successful identification call.

    Immutable: produced once per call and owned by whoever receives it.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Plant name (first line of the generated text).",
    )
    description: str = Field(
        default="",
        description="Remaining lines of the generated text joined with spaces.",
    )


class RequestStatus(str, Enum):
    """Lifecycle of a single identification request as seen by a UI."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RequestState(BaseModel):
    """Snapshot of the presentation-side request state.

    Only `SUCCEEDED` carries a `result` and only `FAILED` carries an `error`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: RequestStatus = RequestStatus.IDLE
    result: PlantIdentification | None = None
    error: Exception | None = None

    @classmethod
    def idle(cls) -> "RequestState":
        return cls()

    @classmethod
    def in_flight(cls) -> "RequestState":
        return cls(status=RequestStatus.IN_FLIGHT)

    @classmethod
    def succeeded(cls, result: PlantIdentification) -> "RequestState":
        return cls(status=RequestStatus.SUCCEEDED, result=result)

    @classmethod
    def failed(cls, error: Exception) -> "RequestState":
        return cls(status=RequestStatus.FAILED, error=error)

    @property
    def is_loading(self) -> bool:
        return self.status is RequestStatus.IN_FLIGHT

    @property
    def error_message(self) -> str | None:
        """Text shown to the user for a failed request."""

        if self.error is None:
            return None
        return getattr(self.error, "description", None) or str(self.error) or type(self.error).__name__
