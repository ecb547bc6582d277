"""Tests for the custom variable store, e-commerce ledger and bulk queue."""

import json
from urllib.parse import parse_qsl

import pytest

from piwik_tracker.bulk import BulkQueue
from piwik_tracker.custom_variables import CustomVariableStore
from piwik_tracker.ecommerce import EcommerceLedger
from piwik_tracker.errors import InvalidArgumentError, InvalidOperationError
from piwik_tracker.models import CustomVariable, Scope


def fragment_params(fragment: str) -> dict[str, str]:
    return dict(parse_qsl(fragment.lstrip("&"), keep_blank_values=True))


class TestCustomVariableStore:
    """Test scoped custom variable slots."""

    @pytest.mark.parametrize("scope", [Scope.VISIT, Scope.PAGE, Scope.EVENT, "visit", "page", "event"])
    def test_set_then_get(self, scope):
        store = CustomVariableStore()
        store.set(2, "myVar", "myValue", scope)
        assert store.get(2, scope) == CustomVariable(name="myVar", value="myValue")

    @pytest.mark.parametrize("scope", list(Scope))
    def test_unset_slot_is_none(self, scope):
        assert CustomVariableStore().get(99, scope) is None

    def test_set_overwrites_slot(self):
        store = CustomVariableStore()
        store.set(1, "a", "1", Scope.PAGE)
        store.set(1, "b", "2", Scope.PAGE)
        assert store.get(1, Scope.PAGE).name == "b"

    @pytest.mark.parametrize("scope", [1234, "session", None, 0])
    def test_invalid_scope_rejected(self, scope):
        store = CustomVariableStore()
        with pytest.raises(InvalidArgumentError):
            store.set(1, "a", "b", scope)
        with pytest.raises(InvalidArgumentError):
            store.get(1, scope)

    def test_visit_scope_falls_back_to_cookie(self):
        store = CustomVariableStore()
        cookie = {"4": CustomVariable(name="fromCookie", value="yes")}
        assert store.get(4, Scope.VISIT, cookie_fallback=lambda: cookie).name == "fromCookie"

    def test_memory_beats_cookie(self):
        store = CustomVariableStore()
        store.set(4, "inMemory", "yes")
        cookie = {"4": CustomVariable(name="fromCookie", value="yes")}
        assert store.get(4, Scope.VISIT, cookie_fallback=lambda: cookie).name == "inMemory"

    def test_page_scope_never_reads_cookie(self):
        store = CustomVariableStore()
        cookie = {"4": CustomVariable(name="fromCookie", value="yes")}
        assert store.get(4, Scope.PAGE, cookie_fallback=lambda: cookie) is None

    def test_encode(self):
        store = CustomVariableStore()
        store.set(1, "gender", "male")
        store.set(2, "age", "30")
        assert store.encode(Scope.VISIT) == '{"1":["gender","male"],"2":["age","30"]}'
        assert store.encode(Scope.PAGE) is None

    def test_reset_transient_keeps_visit_scope(self):
        store = CustomVariableStore()
        store.set(1, "v", "1", Scope.VISIT)
        store.set(1, "p", "1", Scope.PAGE)
        store.set(1, "e", "1", Scope.EVENT)
        store.reset_transient()
        assert store.get(1, Scope.VISIT) is not None
        assert store.get(1, Scope.PAGE) is None
        assert store.get(1, Scope.EVENT) is None

    def test_seed_visit_does_not_override_memory(self):
        store = CustomVariableStore()
        store.set(1, "mine", "x")
        store.seed_visit({
            "1": CustomVariable(name="cookie", value="y"),
            "2": CustomVariable(name="cookie2", value="z"),
        })
        assert store.get(1).name == "mine"
        assert store.get(2).name == "cookie2"


class TestEcommerceLedger:
    """Test pending e-commerce items."""

    def test_empty_sku_rejected(self):
        with pytest.raises(InvalidArgumentError):
            EcommerceLedger().add("")

    def test_item_serialization(self):
        ledger = EcommerceLedger()
        ledger.add("SKU-1", "Camera", ["Electronics", "Cameras"], 499.999, 2)
        params = fragment_params(ledger.compose(1000.4))
        assert json.loads(params["ec_items"]) == [["SKU-1", "Camera", ["Electronics", "Cameras"], "500", 2]]

    def test_defaults(self):
        ledger = EcommerceLedger()
        item = ledger.add("SKU-1")
        assert item.to_array() == ["SKU-1", "", [], "0", 1]

    def test_single_category_string(self):
        ledger = EcommerceLedger()
        assert ledger.add("SKU-1", categories="Books").categories == ["Books"]

    def test_too_many_categories_rejected(self):
        with pytest.raises(InvalidArgumentError):
            EcommerceLedger().add("SKU-1", categories=["a", "b", "c", "d", "e", "f"])

    def test_same_sku_replaces(self):
        ledger = EcommerceLedger()
        ledger.add("SKU-1", "Old", price=10)
        ledger.add("SKU-1", "New", price=12.5, quantity=3)
        params = fragment_params(ledger.compose(37.5))
        assert json.loads(params["ec_items"]) == [["SKU-1", "New", [], "12.5", 3]]

    def test_price_captured_at_insertion(self):
        ledger = EcommerceLedger()
        assert ledger.add("SKU-1", price=1111.111).price == "1111.11"

    def test_revenue_components(self):
        fragment = EcommerceLedger().compose(32.32, sub_total=16.1667, tax=432.244, shipping=234.324, discount=65.553)
        assert fragment == "&idgoal=0&revenue=32.32&ec_st=16.17&ec_tx=432.24&ec_sh=234.32&ec_dt=65.55"

    def test_no_items_no_ec_items(self):
        assert "ec_items" not in EcommerceLedger().compose(10)

    def test_compose_does_not_clear(self):
        """Items stay until the tracker clears them after dispatch."""
        ledger = EcommerceLedger()
        ledger.add("SKU-1")
        assert "ec_items" in ledger.compose(10)
        assert "ec_items" in ledger.compose(10)
        ledger.clear()
        assert "ec_items" not in ledger.compose(10)


class TestBulkQueue:
    """Test the bulk request queue."""

    def test_empty_payload_rejected(self):
        with pytest.raises(InvalidOperationError):
            BulkQueue().payload()

    def test_payload_keeps_order(self):
        queue = BulkQueue()
        for i in range(3):
            queue.append(f"?idsite=1&n={i}")
        assert queue.payload().requests == ["?idsite=1&n=0", "?idsite=1&n=1", "?idsite=1&n=2"]

    def test_payload_json_token(self):
        queue = BulkQueue()
        queue.append("?idsite=1")
        assert json.loads(queue.payload().to_json()) == {"requests": ["?idsite=1"]}
        assert json.loads(queue.payload("tok").to_json()) == {"requests": ["?idsite=1"], "token_auth": "tok"}

    def test_clear(self):
        queue = BulkQueue()
        queue.append("?idsite=1")
        queue.clear()
        assert queue.items() == ()
