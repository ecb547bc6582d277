"""
FastAPI / Starlette integration.

Builds a tracker for the visitor behind an incoming request: the page URL,
referrer, client IP, User-Agent and Accept-Language are taken from the
request, and first-party cookies are read from the request and written to
the response.

Usage:
    from fastapi import FastAPI, Request, Response
    from piwik_tracker import TrackerConfig
    from piwik_tracker.web import tracker_from_request

    config = TrackerConfig(site_id=1, api_url="https://stats.example.org/")
    app = FastAPI()

    @app.get("/pricing")
    async def pricing(request: Request, response: Response):
        tracker = tracker_from_request(config, request, response)
        await tracker.do_track_page_view_async("Pricing")
        return {"ok": True}
"""

import logging
from datetime import datetime

from fastapi import Request, Response

from .config import TrackerConfig
from .tracker import PiwikTracker
from .transport import HttpTransport

logger = logging.getLogger(__name__)


class StarletteCookieHost:
    """Cookie host backed by a Starlette request and response.

    Cookies written during the request are also returned by later reads,
    so several tracking calls in one request see the same visit.
    """

    def __init__(self, request: Request, response: Response | None = None):
        self.request = request
        self.response = response
        self._written: dict[str, str] = {}

    def get_cookie(self, name: str) -> str | None:
        if name in self._written:
            return self._written[name]
        return self.request.cookies.get(name)

    def set_cookie(
        self,
        name: str,
        value: str,
        expires: datetime,
        domain: str | None = None,
        path: str = "/",
    ) -> None:
        self._written[name] = value
        if self.response is None:
            logger.debug(f"No response to set cookie {name} on")
            return
        self.response.set_cookie(name, value, expires=expires, domain=domain, path=path)


def tracker_from_request(
    config: TrackerConfig,
    request: Request,
    response: Response | None = None,
    transport: HttpTransport | None = None,
) -> PiwikTracker:
    """Create a tracker pre-filled from ``request``."""
    tracker = PiwikTracker(
        config,
        cookie_host=StarletteCookieHost(request, response),
        transport=transport,
        page_url=str(request.url),
    )

    referrer = request.headers.get("referer")
    if referrer:
        tracker.set_url_referrer(referrer)
    if request.client is not None:
        tracker.set_ip(request.client.host)
    tracker.set_user_agent(request.headers.get("user-agent"))
    tracker.set_browser_language(request.headers.get("accept-language"))
    return tracker
