"""
Server-side client for the Piwik tracking API.

Usage:
    from piwik_tracker import PiwikTracker, TrackerConfig

    tracker = PiwikTracker(TrackerConfig(site_id=1, api_url="https://stats.example.org/"))
    tracker.set_url("https://example.org/shop/cameras")
    tracker.set_custom_variable(1, "gender", "male", scope="visit")
    tracker.do_track_page_view("Cameras")

    # E-commerce
    tracker.add_ecommerce_item("SKU-1", "Camera", ["Electronics", "Cameras"], 499.99, 1)
    tracker.do_track_ecommerce_order("order-42", grand_total=499.99)

    # Bulk
    tracker.enable_bulk_tracking()
    for title in ("Home", "About"):
        tracker.do_track_page_view(title)
    tracker.do_bulk_track()
"""

from .config import TrackerConfig
from .cookies import CookieHost, MemoryCookieHost
from .errors import (
    InvalidArgumentError,
    InvalidOperationError,
    TrackerError,
    TrackingTimeoutError,
    TransportError,
)
from .models import (
    ActionType,
    AttributionInfo,
    BrowserPlugins,
    CustomVariable,
    EcommerceItem,
    Scope,
    TrackingResponse,
)
from .tracker import PiwikTracker
from .transport import HttpTransport

__version__ = "0.1.0"
__all__ = [
    "PiwikTracker",
    "TrackerConfig",
    "HttpTransport",
    "CookieHost",
    "MemoryCookieHost",
    "Scope",
    "ActionType",
    "AttributionInfo",
    "BrowserPlugins",
    "CustomVariable",
    "EcommerceItem",
    "TrackingResponse",
    "TrackerError",
    "InvalidArgumentError",
    "InvalidOperationError",
    "TransportError",
    "TrackingTimeoutError",
]
