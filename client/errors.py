"""Errors raised while building requests and decoding EONET responses."""
from typing import Any


class EONETError(Exception):
    """Base class for EONET client errors."""


class InvalidURLError(EONETError):
    """Endpoint could not be turned into a valid absolute URL."""

    def __init__(self, endpoint: Any):
        self.endpoint = endpoint
        super().__init__(f"Invalid URL for endpoint: {endpoint!r}")


class InvalidParameterError(EONETError):
    """Query parameter value has no canonical string form."""

    def __init__(self, name: Any, value: Any):
        self.name = name
        self.value = value
        super().__init__(
            f"Invalid query parameter {name!r}: {type(value).__name__} "
            f"value {value!r} cannot be converted to a string"
        )


class InvalidJSONError(EONETError):
    """Response payload was not the JSON object we expected."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Invalid JSON received from {source}")
