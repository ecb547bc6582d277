"""
E-commerce items pending for the next cart update or order request.
"""

from collections.abc import Sequence

from .errors import InvalidArgumentError
from .formatting import format_monetary, percent_encode, to_json
from .models import MAX_ITEM_CATEGORIES, EcommerceItem


def normalize_categories(categories: str | Sequence[str] | None) -> list[str]:
    """Accept a single category or a list of up to five."""
    if categories is None:
        return []
    if isinstance(categories, str):
        return [categories] if categories else []
    result = [str(category) for category in categories]
    if len(result) > MAX_ITEM_CATEGORIES:
        raise InvalidArgumentError(
            f"An item supports at most {MAX_ITEM_CATEGORIES} categories, got {len(result)}"
        )
    return result


class EcommerceLedger:
    """Items keyed by SKU; adding an existing SKU replaces it."""

    def __init__(self):
        self._items: dict[str, EcommerceItem] = {}

    def add(
        self,
        sku: str,
        name: str = "",
        categories: str | Sequence[str] | None = None,
        price: float = 0.0,
        quantity: int = 1,
    ) -> EcommerceItem:
        if not sku:
            raise InvalidArgumentError("You must specify a SKU for the Ecommerce item")
        if quantity < 0:
            raise InvalidArgumentError(f"Item quantity must not be negative, got {quantity}")

        item = EcommerceItem(
            sku=sku,
            name=name or "",
            categories=normalize_categories(categories),
            price=format_monetary(price),
            quantity=quantity,
        )
        self._items.pop(sku, None)
        self._items[sku] = item
        return item

    def clear(self) -> None:
        self._items = {}

    def compose(
        self,
        grand_total: float,
        sub_total: float | None = None,
        tax: float | None = None,
        shipping: float | None = None,
        discount: float | None = None,
    ) -> str:
        """Revenue and item parameters of a cart update or order.

        Does not clear the ledger; the tracker does that once the request has
        been dispatched or queued.
        """
        fragment = "&idgoal=0&revenue=" + format_monetary(grand_total)
        for key, amount in (("ec_st", sub_total), ("ec_tx", tax), ("ec_sh", shipping), ("ec_dt", discount)):
            if amount is not None:
                fragment += f"&{key}={format_monetary(amount)}"

        if self._items:
            fragment += "&ec_items=" + percent_encode(to_json([item.to_array() for item in self._items.values()]))
        return fragment
