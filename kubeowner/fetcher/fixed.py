"""Fetchers with a fixed answer, used as defaults and test doubles."""

from __future__ import annotations

from kubeowner.errors import AssertionMismatchError
from kubeowner.fetcher.base import ControllerFetcher
from kubeowner.models.keys import ControllerKeyWithAPIVersion


class IdentityControllerFetcher(ControllerFetcher):
    """Treats every object as its own top-level controller."""

    async def find_top_level(self, key: ControllerKeyWithAPIVersion | None) -> ControllerKeyWithAPIVersion | None:
        return key


class ConstControllerFetcher(ControllerFetcher):
    """Returns the same key whatever it is asked."""

    def __init__(self, result: ControllerKeyWithAPIVersion | None) -> None:
        self.result = result

    async def find_top_level(self, key: ControllerKeyWithAPIVersion | None) -> ControllerKeyWithAPIVersion | None:
        return self.result


class MockControllerFetcher(ControllerFetcher):
    """Checks it is called with *expected* and answers *result*.

    ``None`` expected and ``None`` passed count as a match; any other
    difference raises AssertionMismatchError.
    """

    def __init__(
        self,
        expected: ControllerKeyWithAPIVersion | None,
        result: ControllerKeyWithAPIVersion | None,
    ) -> None:
        self.expected = expected
        self.result = result

    async def find_top_level(self, key: ControllerKeyWithAPIVersion | None) -> ControllerKeyWithAPIVersion | None:
        if key != self.expected:
            raise AssertionMismatchError(self.expected, key)
        return self.result
