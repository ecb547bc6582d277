"""Tests for visitor id resolution and visit state."""

import pytest

from piwik_tracker.errors import InvalidArgumentError
from piwik_tracker.hashing import sha1_hex
from piwik_tracker.identity import (
    IdentityResolver,
    VisitState,
    generate_visitor_id,
    validate_visitor_id,
)

COOKIE_VALUE = "4a5b6c7d8e9f0a1b.1300000000.5.1300001000.1299990000.1299995000"


class TestVisitorIdValidation:
    """Test forced visitor id validation."""

    def test_sixteen_hex_chars_accepted(self):
        assert validate_visitor_id("33c31e01394bdc63") == "33c31e01394bdc63"

    def test_uppercase_hex_accepted(self):
        assert validate_visitor_id("33C31E01394BDC63") == "33C31E01394BDC63"

    @pytest.mark.parametrize("value", ["33c31e01394bdc6", "33c31e01394bdc633", "33c31e01394bdczz", ""])
    def test_malformed_rejected(self, value):
        with pytest.raises(InvalidArgumentError):
            validate_visitor_id(value)

    def test_generated_ids_are_valid(self):
        visitor_id = generate_visitor_id()
        assert validate_visitor_id(visitor_id) == visitor_id
        assert visitor_id == visitor_id.lower()


class TestVisitState:
    """Test id cookie parsing and serialization."""

    def test_parses_all_fields(self):
        state = VisitState.from_cookie(COOKIE_VALUE)
        assert state.visitor_id == "4a5b6c7d8e9f0a1b"
        assert state.create_ts == 1300000000
        assert state.visit_count == 5
        assert state.current_visit_ts == 1300001000
        assert state.last_visit_ts == 1299990000
        assert state.last_ecommerce_order_ts == 1299995000

    def test_empty_fields_are_unset(self):
        state = VisitState.from_cookie("4a5b6c7d8e9f0a1b.1300000000.1...")
        assert state.visit_count == 1
        assert state.current_visit_ts is None
        assert state.last_visit_ts is None
        assert state.last_ecommerce_order_ts is None

    def test_short_cookie_is_padded(self):
        state = VisitState.from_cookie("4a5b6c7d8e9f0a1b")
        assert state.visitor_id == "4a5b6c7d8e9f0a1b"
        assert state.visit_count == 0

    @pytest.mark.parametrize("value", [None, "", "abc.1.2", "4a5b6c7d8e9f0a1.1300000000.1"])
    def test_malformed_cookie_is_absent(self, value):
        assert VisitState.from_cookie(value) is None

    def test_round_trip_through_cookie_value(self):
        state = VisitState.from_cookie(COOKIE_VALUE)
        assert state.to_cookie("4a5b6c7d8e9f0a1b") == COOKIE_VALUE

    def test_open_visit_rolls_timestamps(self):
        state = VisitState(create_ts=100, visit_count=2, current_visit_ts=200)
        state.open_visit(300)
        assert state.visit_count == 3
        assert state.last_visit_ts == 200
        assert state.current_visit_ts == 300


class TestResolvePrecedence:
    """Test user id > forced id > cookie > random."""

    def _resolver(self, cookie_value=COOKIE_VALUE):
        return IdentityResolver(lambda: VisitState.from_cookie(cookie_value), now=1400000000)

    def test_random_when_nothing_else(self):
        resolver = IdentityResolver(now=1400000000)
        assert resolver.resolve() == resolver.random_visitor_id
        assert resolver.state.create_ts == 1400000000
        assert resolver.state.visit_count == 0
        assert resolver.state.current_visit_ts is None
        assert resolver.state.last_visit_ts is None

    def test_cookie_beats_random(self):
        resolver = self._resolver()
        assert resolver.resolve() == "4a5b6c7d8e9f0a1b"
        assert resolver.state.create_ts == 1300000000
        assert resolver.state.visit_count == 5

    def test_malformed_cookie_falls_back_to_random(self):
        resolver = self._resolver("nothex.1.2")
        assert resolver.resolve() == resolver.random_visitor_id

    def test_forced_id_beats_cookie(self):
        resolver = self._resolver()
        resolver.set_forced_visitor_id("33c31e01394bdc63")
        assert resolver.resolve() == "33c31e01394bdc63"

    def test_user_id_beats_forced_id(self):
        resolver = self._resolver()
        resolver.set_forced_visitor_id("33c31e01394bdc63")
        resolver.set_user_id("jane@example.org")
        assert resolver.resolve() == sha1_hex("jane@example.org")[:16]

    def test_clearing_overrides_falls_back_to_cookie(self):
        resolver = self._resolver()
        resolver.set_user_id("jane@example.org")
        resolver.set_forced_visitor_id("33c31e01394bdc63")
        resolver.set_user_id(None)
        resolver.forced_visitor_id = None
        assert resolver.resolve() == "4a5b6c7d8e9f0a1b"

    def test_reset_draws_new_random_id(self):
        resolver = IdentityResolver(now=1400000000)
        resolver.set_user_id("jane@example.org")
        resolver.set_forced_visitor_id("33c31e01394bdc63")
        previous = resolver.random_visitor_id
        new_id = resolver.reset()
        assert resolver.user_id is None
        assert resolver.forced_visitor_id is None
        assert resolver.resolve() == new_id
        assert new_id != previous

    def test_invalid_forced_id_keeps_previous(self):
        resolver = self._resolver()
        with pytest.raises(InvalidArgumentError):
            resolver.set_forced_visitor_id("33c31e01394bdc6")
        assert resolver.forced_visitor_id is None
