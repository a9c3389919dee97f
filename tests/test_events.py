"""
Event Emitter (events.py)

Tests EventEmitter registration, ordering and delivery.
"""

import asyncio
import logging

import pytest

from crystal.events import EventEmitter


@pytest.fixture
def emitter():
    return EventEmitter()


# ============================================================================
# Registration and ordering
# ============================================================================

class TestRegistration:

    def test_registration_order(self, emitter):
        calls = []
        emitter.on("x", lambda: calls.append(1))
        emitter.on("x", lambda: calls.append(2))
        emitter.add_listener("x", lambda: calls.append(3))
        emitter.emit("x")
        assert calls == [1, 2, 3]

    def test_prepend(self, emitter):
        calls = []
        emitter.on("x", lambda: calls.append("on"))
        emitter.prepend_listener("x", lambda: calls.append("prepended"))
        emitter.emit("x")
        assert calls == ["prepended", "on"]

    def test_arguments_delivered(self, emitter):
        received = []
        emitter.on("x", lambda *args: received.append(args))
        emitter.emit("x", 1, "two")
        assert received == [(1, "two")]

    def test_chaining(self, emitter):
        assert emitter.on("x", print).once("y", print) is emitter

    def test_non_callable_rejected(self, emitter):
        with pytest.raises(TypeError):
            emitter.on("x", "not callable")

    def test_same_listener_twice(self, emitter):
        calls = []

        def listener():
            calls.append(1)

        emitter.on("x", listener)
        emitter.on("x", listener)
        emitter.emit("x")
        assert calls == [1, 1]


class TestOnce:

    def test_called_once(self, emitter):
        calls = []
        emitter.once("x", lambda: calls.append(1))
        emitter.emit("x")
        emitter.emit("x")
        assert calls == [1]
        assert emitter.listener_count("x") == 0

    def test_prepend_once(self, emitter):
        calls = []
        emitter.on("x", lambda: calls.append("on"))
        emitter.prepend_once_listener("x", lambda: calls.append("once"))
        emitter.emit("x")
        emitter.emit("x")
        assert calls == ["once", "on", "on"]

    def test_reentrant_emit(self, emitter):
        calls = []

        def listener():
            calls.append(1)
            emitter.emit("x")

        emitter.once("x", listener)
        emitter.emit("x")
        assert calls == [1]


# ============================================================================
# Removal and introspection
# ============================================================================

class TestRemoval:

    def test_off(self, emitter):
        calls = []

        def listener():
            calls.append(1)

        emitter.on("x", listener)
        emitter.off("x", listener)
        assert emitter.emit("x") is False
        assert calls == []

    def test_off_removes_latest_registration(self, emitter):
        def a():
            pass

        def b():
            pass

        emitter.on("x", a).on("x", b).on("x", a)
        emitter.remove_listener("x", a)
        assert emitter.listeners("x") == [a, b]

    def test_off_unknown(self, emitter):
        assert emitter.off("x", print) is emitter

    def test_remove_all(self, emitter):
        emitter.on("x", print).on("y", print)
        emitter.remove_all_listeners("x")
        assert emitter.event_names() == ("y",)
        emitter.remove_all_listeners()
        assert emitter.event_names() == ()


class TestIntrospection:

    def test_counts_and_names(self, emitter):
        emitter.on("ready", print).once("ready", print).on("error", print)
        assert emitter.listener_count("ready") == 2
        assert emitter.listener_count("missing") == 0
        assert emitter.event_names() == ("ready", "error")
        assert emitter.listeners("error") == [print]


# ============================================================================
# Delivery
# ============================================================================

class TestDelivery:

    def test_emit_without_listeners(self, emitter):
        assert emitter.emit("nobody") is False

    def test_emit_with_listeners(self, emitter):
        emitter.on("x", lambda: None)
        assert emitter.emit("x") is True

    def test_raising_listener_does_not_stop_others(self, emitter, caplog):
        calls = []

        def bad():
            raise ValueError("listener bug")

        emitter.on("x", bad)
        emitter.on("x", lambda: calls.append("after"))
        with caplog.at_level(logging.ERROR, logger="crystal.events"):
            assert emitter.emit("x") is True
        assert calls == ["after"]
        assert "Listener for 'x' raised" in caplog.text

    @pytest.mark.asyncio
    async def test_async_listener_scheduled(self, emitter):
        done = asyncio.Event()

        async def listener(value):
            await asyncio.sleep(0)
            done.set()

        emitter.on("x", listener)
        emitter.emit("x", 1)
        assert not done.is_set()
        await asyncio.wait_for(done.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_async_listener_failure_logged(self, emitter, caplog):
        async def listener():
            raise RuntimeError("async listener bug")

        emitter.on("x", listener)
        with caplog.at_level(logging.ERROR, logger="crystal.events"):
            emitter.emit("x")
            for _ in range(3):
                await asyncio.sleep(0)
        assert "async listener bug" in caplog.text
