"""
Piwik tracking API client.

Records page views, events, goals, downloads/outlinks, site searches, content
impressions and e-commerce activity by composing the same requests piwik.js
sends. Every tracking call goes through three steps:

1. compose: read the tracker state into a query string
2. dispatch: send it (or queue it when bulk tracking is enabled)
3. cleanup: drop page/event custom variables, ad-hoc tracking parameters,
   the one-shot new-visit flag and sent e-commerce items, then persist the
   visit in first-party cookies

If dispatching fails with a TransportError, cleanup does not run and the
state is left as it was, so the call can be reissued.

A tracker is mutable and not thread-safe. Use one instance per visitor
and per thread.
"""

import logging
import random
from collections.abc import Sequence
from datetime import datetime, time as dt_time, timezone
from urllib.parse import urlparse

from .bulk import BulkQueue
from .config import API_VERSION, DEFAULT_CHARSET, TrackerConfig, validate_timeout
from .cookies import CookieHost, FirstPartyCookieManager
from .custom_variables import CustomVariableStore
from .ecommerce import EcommerceLedger
from .errors import InvalidArgumentError
from .formatting import (
    format_local_datetime,
    format_monetary,
    format_number,
    format_unix_timestamp,
    percent_encode,
    to_json,
    to_unix_seconds,
)
from .identity import IdentityResolver
from .models import (
    ActionType,
    AttributionInfo,
    BrowserPlugins,
    CustomVariable,
    Scope,
    TrackingResponse,
)
from .transport import HttpTransport

logger = logging.getLogger(__name__)

# Page scope slots used by set_ecommerce_view(), shared with piwik.js
CVAR_INDEX_ECOMMERCE_ITEM_PRICE = 2
CVAR_INDEX_ECOMMERCE_ITEM_SKU = 3
CVAR_INDEX_ECOMMERCE_ITEM_NAME = 4
CVAR_INDEX_ECOMMERCE_ITEM_CATEGORY = 5


def _random_token() -> str:
    return f"{random.randint(0, 999999):06d}"


def _param(name: str, value) -> str:
    return f"&{name}={percent_encode(value)}"


class PiwikTracker:
    """Client for the Piwik tracking API.

    Args:
        config: Site id, collector URL and cookie settings
        cookie_host: Access to the tracked request's cookies. Without it the
            visitor id is random per tracker and nothing is persisted.
        transport: HTTP transport, an :class:`HttpTransport` by default
        page_url: URL being tracked; its host names the cookies when no
            cookie domain is configured
    """

    def __init__(
        self,
        config: TrackerConfig,
        cookie_host: CookieHost | None = None,
        transport: HttpTransport | None = None,
        page_url: str | None = None,
    ):
        self.config = config
        self.endpoint_url = config.endpoint_url
        self.transport = transport or HttpTransport()
        self.request_timeout = config.request_timeout

        # URL context
        self.page_url = page_url
        self.url_referrer: str | None = None
        self.page_charset = DEFAULT_CHARSET
        self.generation_time: int | None = None

        # Visitor environment
        self.ip: str | None = None
        self.user_agent: str | None = None
        self.accept_language: str | None = None
        self.local_time: dt_time | None = None
        self.width = 0
        self.height = 0
        self.has_cookies = False
        self.plugins = ""

        # Overrides requiring token_auth on the collector side
        self.token_auth: str | None = None
        self.forced_datetime: datetime | None = None
        self.forced_new_visit = False

        # Location overrides
        self.country: str | None = None
        self.region: str | None = None
        self.city: str | None = None
        self.latitude: float | None = None
        self.longitude: float | None = None

        self.attribution_info: AttributionInfo | None = None
        self.custom_parameters: dict[str, str] = {}
        self.send_image_response = True
        self.debug_append_url = ""

        self.do_bulk_requests = False
        self._bulk = BulkQueue()
        self._ledger = EcommerceLedger()
        self._variables = CustomVariableStore()
        self._cookies = FirstPartyCookieManager(config, cookie_host, self._current_host)
        self._identity = IdentityResolver(self._cookies.read_visit_state)
        self._variables.seed_visit(self._cookies.read_custom_variables())

    def _current_host(self) -> str | None:
        if not self.page_url:
            return None
        return urlparse(self.page_url).hostname

    # =========================================================================
    # URL CONTEXT
    # =========================================================================

    def set_url(self, url: str) -> None:
        """Set the URL being tracked (raw, not URL encoded)."""
        self.page_url = url

    def set_url_referrer(self, url: str) -> None:
        self.url_referrer = url

    def set_page_charset(self, charset: str = DEFAULT_CHARSET) -> None:
        """Charset of the tracked page, only sent when it is not utf-8."""
        self.page_charset = charset

    def set_generation_time(self, milliseconds: int) -> None:
        self.generation_time = int(milliseconds)

    # =========================================================================
    # ATTRIBUTION
    # =========================================================================

    def set_attribution_info(self, attribution_info: AttributionInfo | None) -> None:
        """Attribute later goal conversions to this referrer and campaign."""
        self.attribution_info = attribution_info

    def get_attribution_info(self) -> AttributionInfo | None:
        """Attribution set on this tracker, else the one in the ref cookie."""
        if self.attribution_info is not None:
            return self.attribution_info
        return self._cookies.read_attribution()

    # =========================================================================
    # CUSTOM VARIABLES AND PARAMETERS
    # =========================================================================

    def set_custom_variable(self, slot: int, name: str, value: str, scope: Scope | str = Scope.VISIT) -> None:
        """Set a custom variable in ``slot`` (1-5 on a default collector).

        Raises:
            InvalidArgumentError: If ``scope`` is not visit, page or event
        """
        self._variables.set(slot, name, value, scope)

    def get_custom_variable(self, slot: int, scope: Scope | str = Scope.VISIT) -> CustomVariable | None:
        """Custom variable in ``slot``; visit scope also looks in the cvar cookie."""
        return self._variables.get(slot, scope, cookie_fallback=self._cookies.read_custom_variables)

    def clear_custom_variables(self) -> None:
        self._variables.clear()

    def set_custom_tracking_parameter(self, name: str, value) -> None:
        """Add a parameter to the next request only."""
        self.custom_parameters[name] = str(value)

    def clear_custom_tracking_parameters(self) -> None:
        self.custom_parameters = {}

    # =========================================================================
    # VISITOR ENVIRONMENT
    # =========================================================================

    def set_browser_language(self, accept_language: str | Sequence[str] | None) -> None:
        """Accept-Language of the visitor, e.g. "fr-fr"."""
        if accept_language is not None and not isinstance(accept_language, str):
            accept_language = ", ".join(accept_language)
        self.accept_language = accept_language or None

    def set_user_agent(self, user_agent: str | None) -> None:
        self.user_agent = user_agent or None

    def set_local_time(self, local_time: datetime | dt_time) -> None:
        """Visitor's local time of day, sent as h/m/s."""
        self.local_time = local_time.time() if isinstance(local_time, datetime) else local_time

    def set_resolution(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def set_browser_has_cookies(self, has_cookies: bool) -> None:
        self.has_cookies = has_cookies

    def set_plugins(self, plugins: BrowserPlugins) -> None:
        self.plugins = plugins.to_query()

    def set_debug_string_append(self, debug_string: str) -> None:
        """Append a raw string to every request, for diagnostics."""
        self.debug_append_url = debug_string or ""

    def disable_send_image_response(self) -> None:
        """Ask the collector for an empty 204 instead of a GIF."""
        self.send_image_response = False

    # =========================================================================
    # LOCATION OVERRIDES
    # =========================================================================

    def set_country(self, country: str) -> None:
        self.country = country

    def set_region(self, region: str) -> None:
        self.region = region

    def set_city(self, city: str) -> None:
        self.city = city

    def set_latitude(self, latitude: float) -> None:
        self.latitude = latitude

    def set_longitude(self, longitude: float) -> None:
        self.longitude = longitude

    # =========================================================================
    # SUPER USER OVERRIDES (need token_auth on the collector)
    # =========================================================================

    def set_token_auth(self, token_auth: str | None) -> None:
        self.token_auth = token_auth or None

    def set_ip(self, ip: str) -> None:
        self.ip = ip

    def set_force_visit_date_time(self, date_time: datetime | None) -> None:
        """Record the next requests at ``date_time`` instead of now."""
        self.forced_datetime = date_time

    def set_force_new_visit(self) -> None:
        """Force the next request to start a new visit."""
        self.forced_new_visit = True

    # =========================================================================
    # VISITOR IDENTITY
    # =========================================================================

    def set_user_id(self, user_id: str | None) -> None:
        """Identify the visitor by a user id; the visitor id becomes its hash."""
        self._identity.set_user_id(user_id)

    def get_user_id(self) -> str | None:
        return self._identity.user_id

    def set_visitor_id(self, visitor_id: str) -> None:
        """Force requests onto a 16 hex char visitor id, e.g. "33c31e01394bdc63".

        Raises:
            InvalidArgumentError: If the id is not 16 hexadecimal characters
        """
        self._identity.set_forced_visitor_id(visitor_id)

    def get_visitor_id(self) -> str:
        return self._identity.resolve()

    def get_random_visitor_id(self) -> str:
        return self._identity.random_visitor_id

    def set_new_visitor_id(self) -> str:
        """Start over with a fresh random visitor id."""
        return self._identity.reset()

    # =========================================================================
    # COOKIES, TIMEOUT, BULK
    # =========================================================================

    def enable_cookies(self, domain: str = "", path: str = "/") -> None:
        """Persist visits in first-party cookies for ``domain`` and ``path``."""
        self._cookies.configure(domain, path)

    def disable_cookie_support(self) -> None:
        self._cookies.disable()

    def get_cookie_name(self, kind: str) -> str:
        return self._cookies.cookie_name(kind)

    def set_request_timeout(self, timeout: float) -> None:
        """Seconds to wait for the collector.

        Raises:
            InvalidArgumentError: If ``timeout`` is negative
        """
        self.request_timeout = validate_timeout(timeout)

    def get_request_timeout(self) -> float:
        return self.request_timeout

    def enable_bulk_tracking(self) -> None:
        """Queue requests until do_bulk_track() instead of sending each one."""
        self.do_bulk_requests = True

    def get_stored_tracking_actions(self) -> list[str]:
        return list(self._bulk.items())

    # =========================================================================
    # E-COMMERCE STATE
    # =========================================================================

    def add_ecommerce_item(
        self,
        sku: str,
        name: str = "",
        categories: str | Sequence[str] | None = None,
        price: float = 0.0,
        quantity: int = 1,
    ) -> None:
        """Add a product to the next cart update or order; same SKU replaces.

        Raises:
            InvalidArgumentError: If ``sku`` is empty
        """
        self._ledger.add(sku, name, categories, price, quantity)

    def set_ecommerce_view(
        self,
        sku: str = "",
        name: str = "",
        categories: str | Sequence[str] | None = None,
        price: float | None = None,
    ) -> None:
        """Mark the next page view as a product or category page view.

        Uses page scope custom variable slots 2 to 5.
        """
        if categories is None:
            category = ""
        elif isinstance(categories, str):
            category = categories
        else:
            category = to_json(list(categories))
        self._variables.set(CVAR_INDEX_ECOMMERCE_ITEM_CATEGORY, "_pkc", category, Scope.PAGE)

        if price:
            self._variables.set(CVAR_INDEX_ECOMMERCE_ITEM_PRICE, "_pkp", format_monetary(price), Scope.PAGE)

        # On a category page, product sku and name stay unset
        if not sku and not name:
            return
        if sku:
            self._variables.set(CVAR_INDEX_ECOMMERCE_ITEM_SKU, "_pks", sku, Scope.PAGE)
        self._variables.set(CVAR_INDEX_ECOMMERCE_ITEM_NAME, "_pkn", name or "", Scope.PAGE)

    # =========================================================================
    # REQUEST COMPOSITION
    # =========================================================================

    def _compose(self, suffix: str = "") -> str:
        """Query string (starting with "?") for the current state plus ``suffix``."""
        self._identity.load_cookie()
        state = self._identity.state

        query = f"?idsite={self.config.site_id}&rec=1&apiv={API_VERSION}&r={_random_token()}"

        if self.ip:
            query += _param("cip", self.ip)
        if self._identity.user_id:
            query += _param("uid", self._identity.user_id)
        if self.forced_datetime is not None:
            query += _param("cdt", format_local_datetime(self.forced_datetime))
        if self.forced_new_visit:
            query += "&new_visit=1"
        if self.token_auth and not self.do_bulk_requests:
            query += _param("token_auth", self.token_auth)

        # Visit continuity, as piwik.js reads it from the id cookie
        query += f"&_idts={state.create_ts}&_idvc={state.visit_count}"
        if state.last_visit_ts:
            query += f"&_viewts={state.last_visit_ts}"
        if state.last_ecommerce_order_ts:
            query += f"&_ects={state.last_ecommerce_order_ts}"

        query += self.plugins
        if self.local_time is not None:
            query += f"&h={self.local_time.hour}&m={self.local_time.minute}&s={self.local_time.second}"
        if self.width and self.height:
            query += f"&res={self.width}x{self.height}"
        if self.has_cookies:
            query += "&cookie=1"

        for name, scope in (("_cvar", Scope.VISIT), ("cvar", Scope.PAGE), ("e_cvar", Scope.EVENT)):
            encoded = self._variables.encode(scope)
            if encoded:
                query += _param(name, encoded)
        if self.generation_time:
            query += f"&gt_ms={self.generation_time}"
        if self._identity.forced_visitor_id:
            query += _param("cid", self._identity.forced_visitor_id)
        else:
            query += _param("_id", self._identity.resolve())

        if self.page_url:
            query += _param("url", self.page_url)
        if self.url_referrer:
            query += _param("urlref", self.url_referrer)
        if self.page_charset and self.page_charset.lower() != DEFAULT_CHARSET:
            query += _param("cs", self.page_charset)

        attribution = self.get_attribution_info()
        if attribution is not None:
            if attribution.campaign_name:
                query += _param("_rcn", attribution.campaign_name)
            if attribution.campaign_keyword:
                query += _param("_rck", attribution.campaign_keyword)
            if attribution.referrer_timestamp is not None:
                query += f"&_refts={format_unix_timestamp(attribution.referrer_timestamp)}"
            if attribution.referrer_url:
                query += _param("_ref", attribution.referrer_url)

        for name, value in (("country", self.country), ("region", self.region), ("city", self.city)):
            if value:
                query += _param(name, value)
        if self.latitude is not None:
            query += f"&lat={format_number(self.latitude)}"
        if self.longitude is not None:
            query += f"&long={format_number(self.longitude)}"

        for name, value in self.custom_parameters.items():
            query += f"&{percent_encode(name)}={percent_encode(value)}"

        if not self.send_image_response:
            query += "&send_image=0"

        return query + self.debug_append_url + suffix

    def _cleanup(self, ecommerce: bool = False, order: bool = False, persist: bool = False) -> None:
        self._variables.reset_transient()
        self.clear_custom_tracking_parameters()
        # force new visit only once, it has to be set again for the next visit
        self.forced_new_visit = False
        if ecommerce:
            self._ledger.clear()
        if order:
            placed_at = self.forced_datetime or datetime.now(timezone.utc)
            self._identity.state.last_ecommerce_order_ts = to_unix_seconds(placed_at)
        if persist:
            self._cookies.write(
                self._identity.state,
                self._identity.resolve(),
                self._variables.as_pairs(Scope.VISIT),
                self.get_attribution_info(),
            )

    def _url(self, suffix: str, **cleanup: bool) -> str:
        url = self.endpoint_url + self._compose(suffix)
        self._cleanup(**cleanup)
        return url

    def _headers(self) -> dict[str, str]:
        headers = {}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if self.accept_language:
            headers["Accept-Language"] = self.accept_language
        return headers

    def _enqueue(self, query: str) -> None:
        # Bulk requests share one envelope, so the visitor headers go inline
        if self.user_agent:
            query += _param("ua", self.user_agent)
        if self.accept_language:
            query += _param("lang", self.accept_language)
        self._bulk.append(query)

    def _track(self, suffix: str, **cleanup: bool) -> TrackingResponse | None:
        query = self._compose(suffix)
        if self.do_bulk_requests:
            self._enqueue(query)
            self._cleanup(persist=True, **cleanup)
            return None

        response = self.transport.send(
            "GET", self.endpoint_url + query, self._headers(), timeout=self.request_timeout
        )
        self._cleanup(persist=True, **cleanup)
        return response

    async def _track_async(self, suffix: str, **cleanup: bool) -> TrackingResponse | None:
        query = self._compose(suffix)
        if self.do_bulk_requests:
            self._enqueue(query)
            self._cleanup(persist=True, **cleanup)
            return None

        response = await self.transport.send_async(
            "GET", self.endpoint_url + query, self._headers(), timeout=self.request_timeout
        )
        self._cleanup(persist=True, **cleanup)
        return response

    # =========================================================================
    # CALL TYPE PARAMETERS
    # =========================================================================

    @staticmethod
    def _page_view(document_title: str | None) -> str:
        return _param("action_name", document_title) if document_title else ""

    @staticmethod
    def _event(category: str, action: str, name: str | None, value: float | str | None) -> str:
        if not category:
            raise InvalidArgumentError("You must specify an Event Category name (Music, Videos, Games...)")
        if not action:
            raise InvalidArgumentError("You must specify an Event action (click, view, add...)")
        suffix = _param("e_c", category) + _param("e_a", action)
        if name:
            suffix += _param("e_n", name)
        if value is not None and value != "":
            if isinstance(value, str):
                suffix += _param("e_v", value)
            else:
                suffix += f"&e_v={format_number(value)}"
        return suffix

    @staticmethod
    def _site_search(keyword: str, category: str | None, count_results: int | None) -> str:
        suffix = _param("search", keyword)
        if category:
            suffix += _param("search_cat", category)
        if count_results is not None:
            suffix += f"&search_count={int(count_results)}"
        return suffix

    @staticmethod
    def _goal(id_goal: int, revenue: float | None) -> str:
        suffix = f"&idgoal={int(id_goal)}"
        if revenue is not None:
            suffix += f"&revenue={format_monetary(revenue)}"
        return suffix

    @staticmethod
    def _action(action_url: str, action_type: ActionType | str) -> str:
        try:
            action_type = ActionType(action_type)
        except ValueError:
            raise InvalidArgumentError(f"Action type must be 'download' or 'link', got {action_type!r}") from None
        return _param(action_type.value, action_url or "")

    @staticmethod
    def _content(content_name: str, content_piece: str | None, content_target: str | None) -> str:
        if not content_name:
            raise InvalidArgumentError("You must specify a content name")
        suffix = _param("c_n", content_name)
        if content_piece:
            suffix += _param("c_p", content_piece)
        if content_target:
            suffix += _param("c_t", content_target)
        return suffix

    def _content_interaction(self, interaction: str, content_name: str, content_piece, content_target) -> str:
        if not interaction:
            raise InvalidArgumentError("You must specify a content interaction (click, submit...)")
        return self._content(content_name, content_piece, content_target) + _param("c_i", interaction)

    def _ecommerce(self, grand_total: float, **revenue: float | None) -> str:
        return self._ledger.compose(grand_total, **revenue)

    def _ecommerce_order(self, order_id: str, grand_total: float, **revenue: float | None) -> str:
        if not order_id:
            raise InvalidArgumentError("You must specify an orderId for the Ecommerce order")
        return self._ecommerce(grand_total, **revenue) + _param("ec_id", order_id)

    # =========================================================================
    # TRACKING URLS (compose and clean up, nothing is sent)
    # =========================================================================

    def get_url_track_page_view(self, document_title: str | None = None) -> str:
        return self._url(self._page_view(document_title))

    def get_url_track_event(self, category: str, action: str, name: str | None = None, value: float | str | None = None) -> str:
        return self._url(self._event(category, action, name, value))

    def get_url_track_site_search(self, keyword: str, category: str | None = None, count_results: int | None = None) -> str:
        return self._url(self._site_search(keyword, category, count_results))

    def get_url_track_goal(self, id_goal: int, revenue: float | None = None) -> str:
        return self._url(self._goal(id_goal, revenue))

    def get_url_track_action(self, action_url: str, action_type: ActionType | str) -> str:
        return self._url(self._action(action_url, action_type))

    def get_url_track_content_impression(self, content_name: str, content_piece: str | None = None, content_target: str | None = None) -> str:
        return self._url(self._content(content_name, content_piece, content_target))

    def get_url_track_content_interaction(self, interaction: str, content_name: str, content_piece: str | None = None, content_target: str | None = None) -> str:
        return self._url(self._content_interaction(interaction, content_name, content_piece, content_target))

    def get_url_track_ping(self) -> str:
        return self._url("&ping=1")

    def get_url_track_ecommerce_cart_update(self, grand_total: float) -> str:
        """Clears the e-commerce items; add them again before the next update."""
        return self._url(self._ecommerce(grand_total), ecommerce=True)

    def get_url_track_ecommerce_order(
        self,
        order_id: str,
        grand_total: float,
        sub_total: float | None = None,
        tax: float | None = None,
        shipping: float | None = None,
        discount: float | None = None,
    ) -> str:
        """Clears the e-commerce items and records the order timestamp."""
        suffix = self._ecommerce_order(
            order_id, grand_total, sub_total=sub_total, tax=tax, shipping=shipping, discount=discount
        )
        return self._url(suffix, ecommerce=True, order=True)

    # =========================================================================
    # TRACKING CALLS
    # =========================================================================
    # Each returns the collector's response, or None when bulk tracking
    # queued the request instead.

    def do_track_page_view(self, document_title: str | None = None) -> TrackingResponse | None:
        """Track a page view titled ``document_title``."""
        return self._track(self._page_view(document_title))

    async def do_track_page_view_async(self, document_title: str | None = None) -> TrackingResponse | None:
        return await self._track_async(self._page_view(document_title))

    def do_track_event(self, category: str, action: str, name: str | None = None, value: float | str | None = None) -> TrackingResponse | None:
        """Track an event; category and action are required."""
        return self._track(self._event(category, action, name, value))

    async def do_track_event_async(self, category: str, action: str, name: str | None = None, value: float | str | None = None) -> TrackingResponse | None:
        return await self._track_async(self._event(category, action, name, value))

    def do_track_site_search(self, keyword: str, category: str | None = None, count_results: int | None = None) -> TrackingResponse | None:
        """Track an internal site search for ``keyword``."""
        return self._track(self._site_search(keyword, category, count_results))

    async def do_track_site_search_async(self, keyword: str, category: str | None = None, count_results: int | None = None) -> TrackingResponse | None:
        return await self._track_async(self._site_search(keyword, category, count_results))

    def do_track_goal(self, id_goal: int, revenue: float | None = None) -> TrackingResponse | None:
        """Record a conversion of goal ``id_goal``."""
        return self._track(self._goal(id_goal, revenue))

    async def do_track_goal_async(self, id_goal: int, revenue: float | None = None) -> TrackingResponse | None:
        return await self._track_async(self._goal(id_goal, revenue))

    def do_track_action(self, action_url: str, action_type: ActionType | str) -> TrackingResponse | None:
        """Track a download or an outlink."""
        return self._track(self._action(action_url, action_type))

    async def do_track_action_async(self, action_url: str, action_type: ActionType | str) -> TrackingResponse | None:
        return await self._track_async(self._action(action_url, action_type))

    def do_track_content_impression(self, content_name: str, content_piece: str | None = None, content_target: str | None = None) -> TrackingResponse | None:
        return self._track(self._content(content_name, content_piece, content_target))

    async def do_track_content_impression_async(self, content_name: str, content_piece: str | None = None, content_target: str | None = None) -> TrackingResponse | None:
        return await self._track_async(self._content(content_name, content_piece, content_target))

    def do_track_content_interaction(self, interaction: str, content_name: str, content_piece: str | None = None, content_target: str | None = None) -> TrackingResponse | None:
        return self._track(self._content_interaction(interaction, content_name, content_piece, content_target))

    async def do_track_content_interaction_async(self, interaction: str, content_name: str, content_piece: str | None = None, content_target: str | None = None) -> TrackingResponse | None:
        return await self._track_async(self._content_interaction(interaction, content_name, content_piece, content_target))

    def do_ping(self) -> TrackingResponse | None:
        """Keep the visit alive so its last action time is accurate."""
        return self._track("&ping=1")

    async def do_ping_async(self) -> TrackingResponse | None:
        return await self._track_async("&ping=1")

    def do_track_ecommerce_cart_update(self, grand_total: float) -> TrackingResponse | None:
        """Track a cart update with the items added since the last one.

        Items left out of a cart update are removed from the cart on the
        collector, so every item still in the cart must be added again.
        """
        return self._track(self._ecommerce(grand_total), ecommerce=True)

    async def do_track_ecommerce_cart_update_async(self, grand_total: float) -> TrackingResponse | None:
        return await self._track_async(self._ecommerce(grand_total), ecommerce=True)

    def do_track_ecommerce_order(
        self,
        order_id: str,
        grand_total: float,
        sub_total: float | None = None,
        tax: float | None = None,
        shipping: float | None = None,
        discount: float | None = None,
    ) -> TrackingResponse | None:
        """Track an order. ``order_id`` must be unique across all orders."""
        suffix = self._ecommerce_order(
            order_id, grand_total, sub_total=sub_total, tax=tax, shipping=shipping, discount=discount
        )
        return self._track(suffix, ecommerce=True, order=True)

    async def do_track_ecommerce_order_async(
        self,
        order_id: str,
        grand_total: float,
        sub_total: float | None = None,
        tax: float | None = None,
        shipping: float | None = None,
        discount: float | None = None,
    ) -> TrackingResponse | None:
        suffix = self._ecommerce_order(
            order_id, grand_total, sub_total=sub_total, tax=tax, shipping=shipping, discount=discount
        )
        return await self._track_async(suffix, ecommerce=True, order=True)

    # =========================================================================
    # BULK
    # =========================================================================

    def _bulk_request(self) -> tuple[dict[str, str], str]:
        payload = self._bulk.payload(self.token_auth)
        headers = {**self._headers(), "Content-Type": "application/json"}
        logger.debug(f"Sending {len(payload.requests)} tracking requests in bulk")
        return headers, payload.to_json()

    def do_bulk_track(self) -> TrackingResponse:
        """Send every queued request in one POST and empty the queue.

        Raises:
            InvalidOperationError: If no request has been queued
        """
        headers, body = self._bulk_request()
        response = self.transport.send(
            "POST", self.endpoint_url, headers, body=body, timeout=self.request_timeout
        )
        self._bulk.clear()
        return response

    async def do_bulk_track_async(self) -> TrackingResponse:
        headers, body = self._bulk_request()
        response = await self.transport.send_async(
            "POST", self.endpoint_url, headers, body=body, timeout=self.request_timeout
        )
        self._bulk.clear()
        return response
