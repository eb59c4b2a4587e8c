"""System error types raised by the shipping engine and the box store."""


class BoxshipError(Exception):
    """Base class for non-recoverable errors of a single operation."""

    code = "BOXSHIP_ERROR"


class UnknownDestination(BoxshipError, LookupError):
    """Destination code is not present in the pricing table."""

    code = "UNKNOWN_DESTINATION"

    def __init__(self, destination: object):
        self.destination = destination
        super().__init__(f"Invalid destination country: {destination}")


class MalformedColor(BoxshipError, ValueError):
    """Color string cannot be parsed into three channels."""

    code = "MALFORMED_COLOR"

    def __init__(self, value: object, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Malformed color {value!r}: {reason}")


class StorageError(BoxshipError):
    """The storage collaborator failed; the message carries operation context."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, operation: str):
        self.operation = operation
        super().__init__(message)
