"""
Custom variables grouped by scope.

Each scope maps a slot id ("1", "2", ...) to a (name, value) pair. Visit
scope lives as long as the tracker and is mirrored in the cvar cookie; page
and event scopes are transient and reset once a request has been composed.
"""

import logging
from typing import Callable

from .formatting import to_json
from .models import CustomVariable, Scope

logger = logging.getLogger(__name__)

CookieFallback = Callable[[], dict[str, CustomVariable]]


class CustomVariableStore:
    """Scoped custom variable slots."""

    def __init__(self):
        self._slots: dict[Scope, dict[str, CustomVariable]] = {scope: {} for scope in Scope}

    def set(self, slot: int, name: str, value: str, scope: Scope | str = Scope.VISIT) -> None:
        """Overwrite ``slot`` in the mapping of ``scope``."""
        scope = Scope.parse(scope)
        self._slots[scope][str(slot)] = CustomVariable(name=name, value=value)

    def get(
        self,
        slot: int,
        scope: Scope | str = Scope.VISIT,
        cookie_fallback: CookieFallback | None = None,
    ) -> CustomVariable | None:
        """Look up a slot, in memory first.

        Only visit scope falls back to the cookie, and only when the slot is
        not held in memory.
        """
        scope = Scope.parse(scope)
        key = str(slot)
        variable = self._slots[scope].get(key)
        if variable is not None or scope is not Scope.VISIT or cookie_fallback is None:
            return variable
        return cookie_fallback().get(key)

    def seed_visit(self, variables: dict[str, CustomVariable]) -> None:
        """Load visit-scope slots, keeping any already set in memory."""
        for key, variable in variables.items():
            self._slots[Scope.VISIT].setdefault(key, variable)
        if variables:
            logger.debug(f"Restored {len(variables)} visit custom variable(s) from cookie")

    def as_pairs(self, scope: Scope | str) -> dict[str, list[str]]:
        return {key: variable.to_pair() for key, variable in self._slots[Scope.parse(scope)].items()}

    def encode(self, scope: Scope | str) -> str | None:
        """JSON for the scope's query parameter, or None when it is empty."""
        pairs = self.as_pairs(scope)
        return to_json(pairs) if pairs else None

    def clear(self, scope: Scope | str | None = None) -> None:
        """Clear one scope, or every scope when ``scope`` is None."""
        scopes = list(Scope) if scope is None else [Scope.parse(scope)]
        for each in scopes:
            self._slots[each] = {}

    def reset_transient(self) -> None:
        self._slots[Scope.PAGE] = {}
        self._slots[Scope.EVENT] = {}
