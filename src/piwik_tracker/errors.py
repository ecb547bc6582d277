"""Exceptions raised by the tracker."""


class TrackerError(Exception):
    """Base class for every error raised by piwik_tracker."""
    pass


class InvalidArgumentError(TrackerError, ValueError):
    """Raised when a caller passes a value the tracking protocol cannot carry.

    Raised before any state is mutated or any request is sent.
    """
    pass


class InvalidOperationError(TrackerError, RuntimeError):
    """Raised when an operation is not valid in the tracker's current state."""
    pass


class TransportError(TrackerError):
    """Raised when the collector could not be reached.

    The originating httpx error is chained as ``__cause__``.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class TrackingTimeoutError(TransportError):
    """Raised when the configured request timeout elapsed."""
    pass
