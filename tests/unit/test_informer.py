"""Unit tests for the Informer list+watch loop, using a scripted fake watch."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, call, patch

import pytest
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubeowner.cache.informer import Informer
from kubeowner.cache.object_cache import ObjectCache
from tests.conftest import owner_ref, raw_object

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class _FakeStream:
    def __init__(self, events: list[Any]) -> None:
        self._events = events

    async def __aenter__(self) -> _FakeStream:
        return self

    async def __aexit__(self, *exc: object) -> bool:
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self._events:
            if isinstance(event, Exception):
                raise event
            yield event
        # Stand in for the server holding the watch open until its timeout.
        await asyncio.sleep(0.01)


class _FakeWatch:
    """Hands out one scripted event batch per stream() call."""

    def __init__(self, batches: list[list[Any]]) -> None:
        self._batches = batches
        self.stream_kwargs: list[dict[str, Any]] = []

    def __call__(self) -> _FakeWatch:
        return self

    def stream(self, func: Any, **kwargs: Any) -> _FakeStream:
        self.stream_kwargs.append(kwargs)
        events = self._batches.pop(0) if self._batches else []
        return _FakeStream(events)


def _list_fn(items: list[dict[str, Any]], rv: str = "100"):
    async def _list(**kwargs: Any) -> dict[str, Any]:
        return {"metadata": {"resourceVersion": rv}, "items": items}

    return _list


def _event(event_type: str, name: str, rv: str, **kwargs: Any) -> dict[str, Any]:
    return {"type": event_type, "raw_object": raw_object(name, rv=rv, **kwargs)}


def _gone() -> ApiException:
    return ApiException(status=410, reason="Expired: too old resource version: 100 (150)")


def _informer(cache: ObjectCache, items: list[dict[str, Any]], fake_watch: _FakeWatch) -> Informer:
    return Informer(
        kind="ReplicaSet",
        list_fn=_list_fn(items),
        cache=cache,
        serialize=lambda obj: obj,
        watch_timeout=60,
        watch_factory=fake_watch,
    )


# ---------------------------------------------------------------------------
# Relist
# ---------------------------------------------------------------------------


class TestRelist:
    async def test_relist_replaces_store_and_marks_synced(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        cache.update("ReplicaSet", "default", "stale", raw_object("stale"))
        informer = _informer(cache, [raw_object("web-1"), raw_object("web-2")], _FakeWatch([]))

        rv = await informer._relist()

        assert rv == "100"
        assert informer.has_synced()
        assert cache.size("ReplicaSet") == 2
        assert cache.get("ReplicaSet", "default", "stale") is None


# ---------------------------------------------------------------------------
# Watch
# ---------------------------------------------------------------------------


class TestWatch:
    async def test_events_are_applied_in_order(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        fake_watch = _FakeWatch(
            [
                [
                    _event("ADDED", "web-1", "101"),
                    _event("MODIFIED", "web-1", "102", owners=[owner_ref("Deployment", "web")]),
                    _event("ADDED", "web-2", "103"),
                    _event("DELETED", "web-2", "104"),
                ]
            ]
        )
        informer = _informer(cache, [], fake_watch)

        rv = await informer._watch("100")

        assert rv == "104"
        obj = cache.get("ReplicaSet", "default", "web-1")
        assert obj is not None
        assert obj.owner_references[0].name == "web"
        assert cache.get("ReplicaSet", "default", "web-2") is None
        assert fake_watch.stream_kwargs[0]["resource_version"] == "100"
        assert fake_watch.stream_kwargs[0]["timeout_seconds"] == 60

    async def test_bookmark_only_advances_resource_version(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        informer = _informer(cache, [], _FakeWatch([[_event("BOOKMARK", "", "150")]]))

        assert await informer._watch("100") == "150"
        assert cache.size("ReplicaSet") == 0

    async def test_expired_watch_surfaces_api_exception(self) -> None:
        """The watch client raises server ERROR events; events before it still apply."""
        cache = ObjectCache(["ReplicaSet"])
        informer = _informer(cache, [], _FakeWatch([[_event("ADDED", "web-1", "101"), _gone()]]))

        with pytest.raises(ApiException) as exc_info:
            await informer._watch("100")

        assert exc_info.value.status == 410
        assert cache.get("ReplicaSet", "default", "web-1") is not None

    def test_unknown_event_type_is_ignored(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        informer = _informer(cache, [], _FakeWatch([]))
        informer.apply("SOMETHING", raw_object("web-1"))
        assert cache.size("ReplicaSet") == 0


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_start_syncs_and_stop_cancels(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        informer = _informer(cache, [raw_object("web-1")], _FakeWatch([[_event("ADDED", "web-2", "101")]]))

        informer.start()
        try:
            assert await cache.wait_for_sync(["ReplicaSet"], timeout=2.0)
            for _ in range(50):
                if cache.size("ReplicaSet") == 2:
                    break
                await asyncio.sleep(0.01)
            assert cache.size("ReplicaSet") == 2
        finally:
            await informer.stop()

        assert informer._task is None

    async def test_list_failure_is_retried(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        calls = 0

        async def _flaky_list(**kwargs: Any) -> dict[str, Any]:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise ConnectionError("apiserver unavailable")
            return {"metadata": {"resourceVersion": "5"}, "items": [raw_object("web-1")]}

        informer = Informer(
            kind="ReplicaSet",
            list_fn=_flaky_list,
            cache=cache,
            serialize=lambda obj: obj,
            backoff_max=0.05,
            watch_factory=_FakeWatch([]),
        )

        informer.start()
        try:
            assert await cache.wait_for_sync(["ReplicaSet"], timeout=3.0)
        finally:
            await informer.stop()
        assert calls >= 2

    async def test_stop_without_start_is_noop(self) -> None:
        informer = _informer(ObjectCache(["ReplicaSet"]), [], _FakeWatch([]))
        await informer.stop()


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


def _counting_list(calls: list[int], rounds: int):
    """List call that succeeds *rounds* times, then cancels the loop."""

    async def _list(**kwargs: Any) -> dict[str, Any]:
        calls.append(len(calls) + 1)
        if len(calls) > rounds:
            raise asyncio.CancelledError
        return {"metadata": {"resourceVersion": "100"}, "items": [raw_object("web-1")]}

    return _list


class TestRecovery:
    async def test_gone_relists_without_backoff(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        calls: list[int] = []
        informer = Informer(
            kind="ReplicaSet",
            list_fn=_counting_list(calls, rounds=1),
            cache=cache,
            serialize=lambda obj: obj,
            watch_factory=_FakeWatch([[_event("ADDED", "web-2", "101"), _gone()]]),
        )

        with patch("kubeowner.cache.informer.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(asyncio.CancelledError):
                await informer._run()

        assert calls == [1, 2]
        sleep.assert_not_awaited()

    async def test_other_api_errors_back_off_before_relisting(self) -> None:
        cache = ObjectCache(["ReplicaSet"])
        calls: list[int] = []
        unavailable = ApiException(status=503, reason="Service Unavailable")
        informer = Informer(
            kind="ReplicaSet",
            list_fn=_counting_list(calls, rounds=2),
            cache=cache,
            serialize=lambda obj: obj,
            backoff_max=1.5,
            watch_factory=_FakeWatch([[unavailable], [unavailable]]),
        )

        with patch("kubeowner.cache.informer.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(asyncio.CancelledError):
                await informer._run()

        assert calls == [1, 2, 3]
        assert sleep.await_args_list == [call(1.0), call(1.5)]
