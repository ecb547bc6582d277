"""Pydantic models for tracking state and collector responses."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .errors import InvalidArgumentError
from .formatting import from_unix_seconds, format_unix_timestamp

MAX_ITEM_CATEGORIES = 5


class Scope(str, Enum):
    """Lifetime of a custom variable."""
    VISIT = "visit"  # persists for the tracker's lifetime, mirrored in the cvar cookie
    PAGE = "page"    # cleared after each request
    EVENT = "event"  # cleared after each request

    @classmethod
    def parse(cls, value: Any) -> "Scope":
        """Coerce ``value`` to a Scope, rejecting anything unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise InvalidArgumentError(f"Invalid custom variable scope: {value!r}")


class ActionType(str, Enum):
    """Kind of tracked action, also used as the query parameter name."""
    DOWNLOAD = "download"
    LINK = "link"


class CustomVariable(BaseModel):
    """A custom variable stored in one slot of a scope."""
    name: str
    value: str

    def to_pair(self) -> list[str]:
        return [self.name, self.value]


class AttributionInfo(BaseModel):
    """Referrer and campaign that a goal conversion is credited to."""
    campaign_name: str | None = None
    campaign_keyword: str | None = None
    referrer_timestamp: datetime | None = None
    referrer_url: str | None = None

    def to_array(self) -> list[str]:
        """Serialize to the 4-element array used in the ref cookie."""
        return [
            self.campaign_name or "",
            self.campaign_keyword or "",
            format_unix_timestamp(self.referrer_timestamp) if self.referrer_timestamp else "",
            self.referrer_url or "",
        ]

    @classmethod
    def from_array(cls, values: list[Any]) -> "AttributionInfo | None":
        """Build from a decoded ref cookie; missing or empty entries stay unset."""
        if not values:
            return None

        def pick(index: int) -> str | None:
            if len(values) > index and values[index] not in (None, ""):
                return str(values[index])
            return None

        timestamp = pick(2)
        return cls(
            campaign_name=pick(0),
            campaign_keyword=pick(1),
            referrer_timestamp=from_unix_seconds(timestamp) if timestamp else None,
            referrer_url=pick(3),
        )


class EcommerceItem(BaseModel):
    """A product line of a cart or order."""
    sku: str = Field(min_length=1)
    name: str = ""
    categories: list[str] = Field(default_factory=list, max_length=MAX_ITEM_CATEGORIES)
    price: str = "0"  # already formatted with format_monetary
    quantity: int = Field(default=1, ge=0)

    def to_array(self) -> list[Any]:
        return [self.sku, self.name, self.categories, self.price, self.quantity]


class BrowserPlugins(BaseModel):
    """Browser plugins reported by the visitor's browser."""
    flash: bool = False
    java: bool = False
    director: bool = False
    quick_time: bool = False
    real_player: bool = False
    pdf: bool = False
    windows_media: bool = False
    gears: bool = False
    silverlight: bool = False

    def to_query(self) -> str:
        flags = [
            ("fla", self.flash),
            ("java", self.java),
            ("dir", self.director),
            ("qt", self.quick_time),
            ("realp", self.real_player),
            ("pdf", self.pdf),
            ("wma", self.windows_media),
            ("gears", self.gears),
            ("ag", self.silverlight),
        ]
        return "".join(f"&{key}={int(enabled)}" for key, enabled in flags)


class TrackingResponse(BaseModel):
    """Result of a request to the collector."""
    status_code: int
    requested_url: str
    elapsed: float = 0.0  # seconds

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class BulkPayload(BaseModel):
    """Body of a bulk tracking POST."""
    requests: list[str]
    token_auth: str | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
