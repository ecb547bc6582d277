"""
Configuration for a Piwik tracker instance.
"""
from dataclasses import dataclass

from .errors import InvalidArgumentError

# Tracking API version sent as ``apiv``
API_VERSION = 1

TRACKER_ENDPOINT = "/piwik.php"
PROXY_ENDPOINT = "/proxy-piwik.php"

DEFAULT_CHARSET = "utf-8"
DEFAULT_REQUEST_TIMEOUT = 600.0

# Cookie lifetimes, in seconds (same defaults as piwik.js)
VISITOR_COOKIE_TTL = 60 * 60 * 24 * 365 * 2  # 2 years
SESSION_COOKIE_TTL = 60 * 30  # 30 minutes
REFERRAL_COOKIE_TTL = 60 * 60 * 24 * 365 // 2  # 6 months

FIRST_PARTY_COOKIES_PREFIX = "_pk_"


def validate_timeout(timeout: float) -> float:
    """Validate a request timeout in seconds.

    Raises:
        InvalidArgumentError: If the timeout is negative
    """
    if timeout < 0:
        raise InvalidArgumentError(f"Timeout must not be negative, got {timeout}")
    return float(timeout)


def normalize_endpoint(api_url: str) -> str:
    """Point a collector base URL at the tracking endpoint.

    "http://example.org/piwik/" becomes "http://example.org/piwik/piwik.php";
    URLs already naming piwik.php or proxy-piwik.php are kept as they are.
    """
    if TRACKER_ENDPOINT in api_url or PROXY_ENDPOINT in api_url:
        return api_url
    return api_url.rstrip("/") + TRACKER_ENDPOINT


@dataclass(frozen=True)
class TrackerConfig:
    """Immutable configuration for a single tracker instance."""

    # Required
    site_id: int
    api_url: str  # e.g. "http://example.org/piwik/"

    # Transport
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    # First-party cookies
    cookies_enabled: bool = True
    cookie_domain: str = ""  # empty means the tracked page's host
    cookie_path: str = "/"
    cookie_prefix: str = FIRST_PARTY_COOKIES_PREFIX
    visitor_cookie_ttl: int = VISITOR_COOKIE_TTL
    session_cookie_ttl: int = SESSION_COOKIE_TTL
    referral_cookie_ttl: int = REFERRAL_COOKIE_TTL

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.api_url:
            raise InvalidArgumentError("A collector URL is required, e.g. 'http://example.org/piwik/'")
        if isinstance(self.site_id, bool) or not isinstance(self.site_id, int) or self.site_id < 0:
            raise InvalidArgumentError(f"site_id must be a non-negative integer, got {self.site_id!r}")
        validate_timeout(self.request_timeout)

    @property
    def endpoint_url(self) -> str:
        """Collector URL that tracking requests are sent to."""
        return normalize_endpoint(self.api_url)
