"""Tests for event bus."""

from avatarpicker.core.events import EventBus, EventType


def test_subscribe_publish():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.BODY_COMPOSED, lambda **kw: received.append(kw))
    bus.publish(EventType.BODY_COMPOSED, name="male_body_1_head_1")
    assert received == [{"name": "male_body_1_head_1"}]


def test_unsubscribe():
    bus = EventBus()
    received = []
    handler = lambda **kw: received.append(kw)
    bus.subscribe(EventType.SELECTION_CHANGED, handler)
    bus.unsubscribe(EventType.SELECTION_CHANGED, handler)
    bus.publish(EventType.SELECTION_CHANGED, body=None, items=[], skin=None)
    assert len(received) == 0


def test_multiple_subscribers():
    bus = EventBus()
    a, b = [], []
    bus.subscribe(EventType.LOADING_COMPLETE, lambda **kw: a.append(1))
    bus.subscribe(EventType.LOADING_COMPLETE, lambda **kw: b.append(1))
    bus.publish(EventType.LOADING_COMPLETE, failed=[])
    assert len(a) == 1
    assert len(b) == 1


def test_different_events_independent():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.SKIN_APPLIED, lambda **kw: received.append("skin"))
    bus.publish(EventType.BODY_COMPOSED, name="x")
    assert len(received) == 0


def test_handler_may_unsubscribe_itself():
    bus = EventBus()
    calls = []

    def once(**kw):
        calls.append(kw)
        bus.unsubscribe(EventType.LOADING_STARTED, once)

    bus.subscribe(EventType.LOADING_STARTED, once)
    bus.publish(EventType.LOADING_STARTED, url="a", items_loaded=0, items_total=1)
    bus.publish(EventType.LOADING_STARTED, url="b", items_loaded=1, items_total=2)
    assert len(calls) == 1


def test_clear():
    bus = EventBus()
    bus.subscribe(EventType.BODY_COMPOSED, lambda **kw: None)
    bus.clear()
    # Should not raise
    bus.publish(EventType.BODY_COMPOSED)
