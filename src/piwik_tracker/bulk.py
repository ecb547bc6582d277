"""Queue of composed requests waiting to be sent in one bulk POST."""

import logging

from .errors import InvalidOperationError
from .models import BulkPayload

logger = logging.getLogger(__name__)


class BulkQueue:
    """Ordered, append-only list of composed query strings."""

    def __init__(self):
        self._requests: list[str] = []

    def append(self, request: str) -> None:
        self._requests.append(request)
        logger.debug(f"Queued tracking request #{len(self._requests)}")

    def items(self) -> tuple[str, ...]:
        return tuple(self._requests)

    def payload(self, token_auth: str | None = None) -> BulkPayload:
        """Body for the queued requests.

        Raises:
            InvalidOperationError: If nothing has been queued
        """
        if not self._requests:
            raise InvalidOperationError("No tracking actions stored, call a track method first")
        return BulkPayload(requests=list(self._requests), token_auth=token_auth or None)

    def clear(self) -> None:
        self._requests = []
