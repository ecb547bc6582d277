"""
Visitor identity resolution.

The effective visitor id is picked, highest precedence first, from:

1. the SHA-1 of an explicitly set user id (first 16 hex chars)
2. a forced visitor id
3. the first field of the ``id`` first-party cookie
4. a random id generated when the tracker was built

Loading the cookie also restores the visit continuity fields (creation
timestamp, visit count, visit timestamps) that piwik.js keeps there.
"""

import logging
import re
import time
import uuid
from dataclasses import dataclass
from typing import Callable

from .errors import InvalidArgumentError
from .hashing import md5_hex, sha1_hex

logger = logging.getLogger(__name__)

VISITOR_ID_LENGTH = 16
VISITOR_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{16}$")


def generate_visitor_id() -> str:
    return md5_hex(str(uuid.uuid4()))[:VISITOR_ID_LENGTH]


def hash_user_id(user_id: str) -> str:
    return sha1_hex(user_id)[:VISITOR_ID_LENGTH]


def validate_visitor_id(visitor_id: str) -> str:
    """Check a visitor id is exactly 16 hexadecimal characters.

    Raises:
        InvalidArgumentError: If the id is malformed
    """
    if not isinstance(visitor_id, str) or not VISITOR_ID_PATTERN.match(visitor_id):
        raise InvalidArgumentError(
            f"Visitor id must be {VISITOR_ID_LENGTH} hexadecimal characters, got {visitor_id!r}"
        )
    return visitor_id


def _parse_ts(field: str) -> int | None:
    if not field:
        return None
    try:
        return int(float(field))
    except ValueError:
        return None


@dataclass
class VisitState:
    """Visit continuity fields, as stored in the ``id`` cookie."""

    visitor_id: str | None = None
    create_ts: int = 0
    visit_count: int = 0
    current_visit_ts: int | None = None
    last_visit_ts: int | None = None
    last_ecommerce_order_ts: int | None = None

    @classmethod
    def from_cookie(cls, value: str | None) -> "VisitState | None":
        """Parse ``visitorId.createTs.visitCount.currentTs.lastTs.ecommerceTs``.

        Returns None when the first field is not a 16 char hex id.
        """
        if not value:
            return None
        parts = value.split(".")
        if not VISITOR_ID_PATTERN.match(parts[0]):
            return None
        fields = parts[1:] + [""] * (5 - len(parts[1:]))
        return cls(
            visitor_id=parts[0],
            create_ts=_parse_ts(fields[0]) or 0,
            visit_count=_parse_ts(fields[1]) or 0,
            current_visit_ts=_parse_ts(fields[2]),
            last_visit_ts=_parse_ts(fields[3]),
            last_ecommerce_order_ts=_parse_ts(fields[4]),
        )

    def to_cookie(self, visitor_id: str) -> str:
        fields = [
            visitor_id,
            self.create_ts,
            self.visit_count,
            self.current_visit_ts,
            self.last_visit_ts,
            self.last_ecommerce_order_ts,
        ]
        return ".".join("" if field is None else str(field) for field in fields)

    def open_visit(self, now: int) -> None:
        """Start a new visit: bump the count and roll the visit timestamps."""
        self.visit_count += 1
        self.last_visit_ts = self.current_visit_ts
        self.current_visit_ts = now


class IdentityResolver:
    """Resolves the visitor id and owns the visit continuity state."""

    def __init__(self, cookie_reader: Callable[[], VisitState | None] | None = None, now: int | None = None):
        self._read_cookie = cookie_reader
        self.random_visitor_id = generate_visitor_id()
        self.user_id: str | None = None
        self.forced_visitor_id: str | None = None
        self._cookie_visitor_id: str | None = None
        created = int(time.time()) if now is None else now
        self.state = VisitState(create_ts=created)

    def set_user_id(self, user_id: str | None) -> None:
        self.user_id = user_id or None

    def set_forced_visitor_id(self, visitor_id: str) -> None:
        self.forced_visitor_id = validate_visitor_id(visitor_id)

    def load_cookie(self) -> bool:
        """Restore identity and continuity fields from the ``id`` cookie."""
        if self._cookie_visitor_id is not None:
            return True
        if self._read_cookie is None:
            return False
        cookie_state = self._read_cookie()
        if cookie_state is None:
            return False

        self._cookie_visitor_id = cookie_state.visitor_id
        if cookie_state.create_ts:
            self.state.create_ts = cookie_state.create_ts
        self.state.visit_count = cookie_state.visit_count
        if cookie_state.current_visit_ts is not None:
            self.state.current_visit_ts = cookie_state.current_visit_ts
        self.state.last_visit_ts = cookie_state.last_visit_ts
        if cookie_state.last_ecommerce_order_ts is not None:
            self.state.last_ecommerce_order_ts = cookie_state.last_ecommerce_order_ts
        logger.debug(f"Visitor {self._cookie_visitor_id} restored from id cookie")
        return True

    def resolve(self) -> str:
        """Effective 16 hex char visitor id."""
        if self.user_id:
            return hash_user_id(self.user_id)
        if self.forced_visitor_id:
            return self.forced_visitor_id
        if self.load_cookie():
            return self._cookie_visitor_id
        return self.random_visitor_id

    def reset(self) -> str:
        """Draw a new random id and forget every other identity source."""
        self.random_visitor_id = generate_visitor_id()
        self.user_id = None
        self.forced_visitor_id = None
        self._cookie_visitor_id = None
        return self.random_visitor_id
