class TelemetryError(Exception):
    """Base class for errors raised by tooltelemetry."""


class InvalidLogResponseError(TelemetryError):
    """The collection endpoint returned a body that is not a valid log response."""


class ToolError(Exception):
    """
    A failure of the wrapped tool that can describe itself without private data.

    Not a TelemetryError: it comes from the tool, not from this package.

    Args:
        message: Full failure message, may mention projects, buckets or paths.
        anonymized_message: The same failure with private details removed.
            Defaults to the exception class name.
    """

    def __init__(self, message: str, anonymized_message: str | None = None):
        super().__init__(message)
        self.message = message
        self.anonymized_message = anonymized_message or type(self).__name__
