import re

import pytest

from storefront_server.bus import BusEvent, EventBus, merge_payload
from storefront_server.events import ProductAction


def test_emit_calls_handlers_in_registration_order(bus):
    calls = []
    bus.on("basket:changed", lambda data: calls.append(("first", data)))
    bus.on(re.compile(r"^basket:"), lambda data: calls.append(("pattern", data)))
    bus.on("basket:changed", lambda data: calls.append(("second", data)))

    bus.emit("basket:changed", 1)

    assert calls == [("first", 1), ("pattern", 1), ("second", 1)]


def test_emit_without_payload_passes_none(bus):
    received = []
    bus.on("app:ready", received.append)

    bus.emit("app:ready")

    assert received == [None]


def test_exact_name_does_not_match_other_events(bus):
    received = []
    bus.on("order:update", received.append)

    bus.emit("order:changed", "x")

    assert received == []


def test_pattern_receives_family_of_events(bus):
    received = []
    bus.on(re.compile(r"^order:(success|error)$"), received.append)

    bus.emit("order:success", "ok")
    bus.emit("order:error", "bad")
    bus.emit("order:changed", "ignored")

    assert received == ["ok", "bad"]


def test_duplicate_subscription_is_registered_once(bus):
    received = []
    bus.on("card:select", received.append)
    bus.on("card:select", received.append)

    bus.emit("card:select", "a")

    assert received == ["a"]


def test_off_removes_only_that_pair(bus):
    first, second = [], []
    bus.on("basket:remove", first.append)
    bus.on("basket:remove", second.append)

    bus.off("basket:remove", first.append)
    bus.emit("basket:remove", "id")

    assert first == []
    assert second == ["id"]


def test_off_unknown_handler_is_noop(bus):
    bus.off("never:registered", print)
    bus.off(re.compile("x"), print)


def test_off_pattern_subscription(bus):
    received = []
    bus.on(re.compile(r"^catalog:"), received.append)

    bus.off(re.compile(r"^catalog:"), received.append)
    bus.emit("catalog:load")

    assert received == []


def test_reentrant_emit_completes_before_outer_continues(bus):
    calls = []

    def outer(_):
        calls.append("outer-start")
        bus.emit("inner")
        calls.append("outer-end")

    bus.on("outer", outer)
    bus.on("inner", lambda _: calls.append("inner"))

    bus.emit("outer")

    assert calls == ["outer-start", "inner", "outer-end"]


def test_subscription_added_during_dispatch_applies_to_next_emit(bus):
    late = []

    def register(_):
        bus.on("tick", late.append)

    bus.on("tick", register)
    bus.emit("tick", 1)
    assert late == []

    bus.emit("tick", 2)
    assert late == [2]


def test_handler_exception_propagates_to_emitter(bus):
    def boom(_):
        raise RuntimeError("handler failed")

    bus.on("app:ready", boom)

    with pytest.raises(RuntimeError, match="handler failed"):
        bus.emit("app:ready")


def test_trigger_merges_context_over_mapping(bus):
    received = []
    bus.on("order:update", received.append)

    callback = bus.trigger("order:update", {"payment": "cash"})
    callback({"payment": "card", "address": "Main st"})

    assert received == [{"payment": "cash", "address": "Main st"}]


def test_trigger_merges_context_over_model(bus):
    received = []
    bus.on("card:select", received.append)

    bus.trigger("card:select", {"id": "b"})(ProductAction(id="a"))

    assert received == [ProductAction(id="b")]


def test_trigger_without_value_emits_context(bus):
    received = []
    bus.on("basket:remove", received.append)

    bus.trigger("basket:remove", {"id": "x"})()

    assert received == [{"id": "x"}]


def test_merge_payload_rejects_unmergeable_values():
    with pytest.raises(TypeError):
        merge_payload(42, {"id": "x"})


def test_on_all_receives_every_event(bus):
    seen = []
    bus.on_all(seen.append)

    bus.emit("catalog:load")
    bus.emit("basket:changed", {"count": 0})

    assert seen == [
        BusEvent(event_name="catalog:load"),
        BusEvent(event_name="basket:changed", data={"count": 0}),
    ]


def test_off_all_keeps_regular_subscriptions(bus):
    seen, regular = [], []
    bus.on_all(seen.append)
    bus.on("app:ready", regular.append)

    bus.off_all()
    bus.emit("app:ready", "go")

    assert seen == []
    assert regular == ["go"]
