"""Tests for the event bus."""

from healthrocket.events import BOOST_COMPLETED, CompletionEvent, EventBus

EVENT = CompletionEvent(user_id="ava", boost_id="sleep-101", points_earned=1, category="Sleep")


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    calls = []
    bus.subscribe(BOOST_COMPLETED, lambda e: calls.append(("first", e.points_earned)))
    bus.subscribe(BOOST_COMPLETED, lambda e: calls.append(("second", e.category)))

    assert bus.publish(BOOST_COMPLETED, EVENT) == 2
    assert calls == [("first", 1), ("second", "Sleep")]


def test_publish_without_subscribers():
    assert EventBus().publish(BOOST_COMPLETED, EVENT) == 0


def test_unsubscribe_is_idempotent():
    bus = EventBus()
    calls = []
    subscription = bus.subscribe(BOOST_COMPLETED, calls.append)

    subscription.unsubscribe()
    subscription.unsubscribe()
    bus.publish(BOOST_COMPLETED, EVENT)

    assert calls == []
    assert bus.subscriber_count(BOOST_COMPLETED) == 0


def test_subscription_as_context_manager():
    bus = EventBus()
    calls = []
    with bus.subscribe(BOOST_COMPLETED, calls.append):
        bus.publish(BOOST_COMPLETED, EVENT)
    bus.publish(BOOST_COMPLETED, EVENT)

    assert calls == [EVENT]


def test_failing_handler_does_not_block_others():
    bus = EventBus()
    calls = []

    def broken(event):
        raise RuntimeError("display gone")

    bus.subscribe(BOOST_COMPLETED, broken)
    bus.subscribe(BOOST_COMPLETED, calls.append)

    assert bus.publish(BOOST_COMPLETED, EVENT) == 1
    assert calls == [EVENT]


def test_handler_may_unsubscribe_during_publish():
    bus = EventBus()
    calls = []

    def once(event):
        calls.append(event)
        subscription.unsubscribe()

    subscription = bus.subscribe(BOOST_COMPLETED, once)
    bus.publish(BOOST_COMPLETED, EVENT)
    bus.publish(BOOST_COMPLETED, EVENT)

    assert calls == [EVENT]
