"""
First-party cookies shared with piwik.js.

Cookie names follow the JavaScript tracker so both sides read the same
values: ``_pk_<kind>.<idsite>.<hash>`` where ``hash`` is the first four hex
chars of SHA-1(cookie domain + cookie path). Four kinds are used:

- ``id``   visitor id and visit continuity fields (about 2 years)
- ``ses``  session marker "*" (30 minutes)
- ``ref``  attribution array as percent-encoded JSON (about 6 months)
- ``cvar`` visit-scope custom variables as percent-encoded JSON (session lifetime)

Cookies need a host: something able to read the incoming request's cookies
and set cookies on the outgoing response. Without one (or with cookies
disabled) reads return nothing and writes do nothing.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol, runtime_checkable
from urllib.parse import unquote

from .config import TrackerConfig
from .formatting import percent_encode, to_json
from .hashing import sha1_hex
from .identity import VisitState
from .models import AttributionInfo, CustomVariable

logger = logging.getLogger(__name__)

COOKIE_ID = "id"
COOKIE_SESSION = "ses"
COOKIE_REFERRAL = "ref"
COOKIE_CUSTOM_VARIABLES = "cvar"

UNKNOWN_HOST = "unknown"


@runtime_checkable
class CookieHost(Protocol):
    """Cookie access of the web request being tracked."""

    def get_cookie(self, name: str) -> str | None:
        ...

    def set_cookie(
        self,
        name: str,
        value: str,
        expires: datetime,
        domain: str | None = None,
        path: str = "/",
    ) -> None:
        ...


class MemoryCookieHost:
    """Dict backed cookie host, for scripts and tests.

    Cookies set here are visible to later reads until they expire.
    """

    def __init__(self, cookies: dict[str, str] | None = None):
        self._cookies: dict[str, tuple[str, datetime | None]] = {
            name: (value, None) for name, value in (cookies or {}).items()
        }
        self.writes: list[tuple[str, str, datetime, str | None, str]] = []

    def get_cookie(self, name: str) -> str | None:
        stored = self._cookies.get(name)
        if stored is None:
            return None
        value, expires = stored
        if expires is not None and expires <= datetime.now(timezone.utc):
            del self._cookies[name]
            return None
        return value

    def set_cookie(self, name, value, expires, domain=None, path="/") -> None:
        self._cookies[name] = (value, expires)
        self.writes.append((name, value, expires, domain, path))


def domain_fixup(domain: str) -> str:
    """Normalize a cookie domain the way piwik.js does.

    "example.org." -> "example.org", "*.example.org" -> ".example.org"
    """
    if domain.endswith("."):
        domain = domain[:-1]
    if domain.startswith("*."):
        domain = domain[1:]
    return domain


def _decode(value: str) -> object:
    return json.loads(unquote(value))


class FirstPartyCookieManager:
    """Reads and writes the tracker's first-party cookies."""

    def __init__(
        self,
        config: TrackerConfig,
        host: CookieHost | None = None,
        current_host: Callable[[], str | None] | None = None,
    ):
        self.site_id = config.site_id
        self.prefix = config.cookie_prefix
        self.enabled = config.cookies_enabled
        self.domain = domain_fixup(config.cookie_domain) if config.cookie_domain else ""
        self.path = config.cookie_path
        self.visitor_ttl = config.visitor_cookie_ttl
        self.session_ttl = config.session_cookie_ttl
        self.referral_ttl = config.referral_cookie_ttl
        self.host = host
        self._current_host = current_host

    @property
    def available(self) -> bool:
        return self.enabled and self.host is not None

    def configure(self, domain: str = "", path: str = "/") -> None:
        """Enable cookies for ``domain`` and ``path``."""
        self.enabled = True
        self.domain = domain_fixup(domain) if domain else ""
        self.path = path

    def disable(self) -> None:
        self.enabled = False

    def _hash_domain(self) -> str:
        if self.domain:
            return self.domain
        host = self._current_host() if self._current_host else None
        return host or UNKNOWN_HOST

    def cookie_name(self, kind: str) -> str:
        digest = sha1_hex(self._hash_domain() + self.path)[:4]
        return f"{self.prefix}{kind}.{self.site_id}.{digest}"

    def _get(self, kind: str) -> str | None:
        if not self.available:
            return None
        return self.host.get_cookie(self.cookie_name(kind))

    def _set(self, kind: str, value: str, ttl: int, now: datetime) -> None:
        name = self.cookie_name(kind)
        self.host.set_cookie(name, value, now + timedelta(seconds=ttl), self.domain or None, self.path)
        logger.debug(f"Set cookie {name}")

    def read_visit_state(self) -> VisitState | None:
        value = self._get(COOKIE_ID)
        state = VisitState.from_cookie(value)
        if value and state is None:
            logger.debug(f"Ignoring malformed id cookie for site {self.site_id}")
        return state

    def read_custom_variables(self) -> dict[str, CustomVariable]:
        value = self._get(COOKIE_CUSTOM_VARIABLES)
        if not value:
            return {}
        try:
            decoded = _decode(value)
        except ValueError:
            logger.debug(f"Ignoring malformed cvar cookie for site {self.site_id}")
            return {}
        if not isinstance(decoded, dict):
            return {}

        variables = {}
        for key, pair in decoded.items():
            if isinstance(pair, list) and len(pair) == 2:
                variables[str(key)] = CustomVariable(name=str(pair[0]), value=str(pair[1]))
        return variables

    def read_attribution(self) -> AttributionInfo | None:
        value = self._get(COOKIE_REFERRAL)
        if not value:
            return None
        try:
            decoded = _decode(value)
        except ValueError:
            logger.debug(f"Ignoring malformed ref cookie for site {self.site_id}")
            return None
        if not isinstance(decoded, list):
            return None
        try:
            return AttributionInfo.from_array(decoded)
        except (ValueError, OverflowError):
            return None

    def is_session_active(self) -> bool:
        return self._get(COOKIE_SESSION) is not None

    def write(
        self,
        state: VisitState,
        visitor_id: str,
        visit_variables: dict[str, list[str]],
        attribution: AttributionInfo | None,
        now: datetime | None = None,
    ) -> bool:
        """Persist the visit to the host's response.

        Opens a new visit when no session cookie is present. Returns False
        when cookies are unavailable.
        """
        if not self.available:
            logger.debug(f"Cookies unavailable for site {self.site_id}, not persisting visit")
            return False

        now = now or datetime.now(timezone.utc)
        if not self.is_session_active():
            state.open_visit(int(now.timestamp()))

        if attribution is not None:
            self._set(COOKIE_REFERRAL, percent_encode(to_json(attribution.to_array())), self.referral_ttl, now)
        self._set(COOKIE_SESSION, "*", self.session_ttl, now)
        self._set(COOKIE_ID, state.to_cookie(visitor_id), self.visitor_ttl, now)
        self._set(COOKIE_CUSTOM_VARIABLES, percent_encode(to_json(visit_variables)), self.session_ttl, now)
        return True
