"""Identification error taxonomy.

Every failure reaches the caller as exactly one of these exceptions (or as a
pass-through parsing error). `description` is the text a UI displays.
"""

from __future__ import annotations


class PlantIdentifyError(Exception):
    """Base class for classified identification failures."""

    default_description = "The plant could not be identified."

    def __init__(self, description: str | None = None) -> None:
        self.description = description or self.default_description
        super().__init__(self.description)


class InvalidImageError(PlantIdentifyError):
    """The image bytes could not be encoded as JPEG."""

    default_description = "The selected image could not be read or encoded."


class NetworkError(PlantIdentifyError):
    """Malformed endpoint URL, transport failure or empty reply.

    An empty body is classified here on purpose rather than surfacing as a
    JSON parse error: no bytes came back, so nothing was answered.
    """

    default_description = "The identification service could not be reached."


class DecodingError(PlantIdentifyError):
    """The reply matched neither the success nor the error shape."""

    default_description = "The identification service returned an unexpected response."


class ApiError(PlantIdentifyError):
    """The service answered with a structured error message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"API error: {message}")
