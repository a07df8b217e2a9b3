"""Unit tests for the protocol event channel"""

from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.models import EventType


def test_publish_delivers_to_type_and_global_subscribers():
    bus = EventBus()
    typed, everything = [], []
    bus.subscribe(EventType.CONTRACT_CREATED, typed.append)
    bus.subscribe_all(everything.append)

    event = bus.publish(EventType.CONTRACT_CREATED, {"contractId": "CTR-1"})
    bus.publish(EventType.RISK_UPDATED, {"userId": "user_1"})

    assert typed == [event]
    assert [e.type for e in everything] == [EventType.CONTRACT_CREATED, EventType.RISK_UPDATED]
    assert event.payload == {"contractId": "CTR-1"}


def test_failing_handler_does_not_block_others():
    failures = []
    bus = EventBus(on_handler_error=lambda event_type, error: failures.append((event_type, str(error))))
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EventType.DEFAULT_TRIGGERED, broken)
    bus.subscribe(EventType.DEFAULT_TRIGGERED, received.append)
    bus.subscribe_all(broken)
    bus.subscribe_all(received.append)

    bus.publish(EventType.DEFAULT_TRIGGERED)

    assert len(received) == 2
    assert failures == [(EventType.DEFAULT_TRIGGERED, "boom")] * 2


def test_unsubscribe():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe(EventType.CAPITAL_ALLOCATED, received.append)
    unsubscribe_all = bus.subscribe_all(received.append)

    unsubscribe()
    unsubscribe_all()
    bus.publish(EventType.CAPITAL_ALLOCATED)

    assert received == []


def test_log_limits_and_filtering():
    bus = EventBus()
    for i in range(5):
        bus.publish(EventType.RISK_UPDATED, {"n": i})
    bus.publish(EventType.INSURANCE_TRIGGERED)

    assert len(bus.get_log()) == 6
    assert [e.payload["n"] for e in bus.get_log_by_type(EventType.RISK_UPDATED, limit=2)] == [3, 4]
    assert bus.get_log(limit=1)[0].type == EventType.INSURANCE_TRIGGERED
    assert bus.get_log(limit=0) == []


def test_log_is_bounded():
    bus = EventBus(max_log_size=3)
    for i in range(5):
        bus.publish(EventType.POOL_REBALANCED, {"n": i})

    assert [e.payload["n"] for e in bus.get_log()] == [2, 3, 4]


def test_clear():
    bus = EventBus()
    received = []
    bus.subscribe_all(received.append)
    bus.publish(EventType.REPAYMENT_RECEIVED)

    bus.clear()
    bus.publish(EventType.REPAYMENT_RECEIVED)

    assert len(received) == 1
    assert len(bus.get_log()) == 1
