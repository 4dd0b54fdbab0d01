import logging

import pytest

from present.bus import NotificationBus, Play, ScrollBy, Stop


class TestPublish:
    def test_delivers_to_matching_kind_only(self, bus):
        plays, stops = [], []
        bus.subscribe(Play, plays.append)
        bus.subscribe(Stop, stops.append)

        bus.publish(Play())
        assert plays == [Play()]
        assert stops == []

    def test_same_kind_preserves_publish_order(self, bus):
        seen = []
        bus.subscribe(ScrollBy, lambda e: seen.append(e.dy))
        for dy in (1.0, -2.5, 3.0):
            bus.publish(ScrollBy(dy))
        assert seen == [1.0, -2.5, 3.0]

    def test_handlers_called_in_subscription_order(self, bus):
        seen = []
        bus.subscribe(Play, lambda e: seen.append("first"))
        bus.subscribe(Play, lambda e: seen.append("second"))
        bus.publish(Play())
        assert seen == ["first", "second"]

    def test_no_replay_for_late_subscriber(self, bus):
        assert bus.publish(Stop()) == 0
        seen = []
        bus.subscribe(Stop, seen.append)
        assert seen == []

    def test_delivery_is_synchronous(self, bus):
        seen = []
        bus.subscribe(Play, seen.append)
        bus.publish(Play())
        # visible immediately after publish returns
        assert len(seen) == 1

    def test_failing_handler_does_not_block_others(self, bus, caplog):
        seen = []

        def boom(event):
            raise RuntimeError("boom")

        bus.subscribe(Play, boom)
        bus.subscribe(Play, seen.append)
        with caplog.at_level(logging.ERROR, logger="present.bus"):
            assert bus.publish(Play()) == 2
        assert seen == [Play()]
        assert "Subscriber for Play failed" in caplog.text

    def test_unknown_kind_rejected(self, bus):
        with pytest.raises(TypeError):
            bus.subscribe(str, print)


class TestSubscription:
    def test_dispose_stops_delivery(self, bus):
        seen = []
        sub = bus.subscribe(Play, seen.append)
        sub.dispose()
        bus.publish(Play())
        assert seen == []
        assert sub.disposed
        assert bus.subscriber_count(Play) == 0

    def test_dispose_twice_is_harmless(self, bus):
        keep = []
        sub = bus.subscribe(Play, lambda e: None)
        bus.subscribe(Play, keep.append)
        sub.dispose()
        sub.dispose()
        bus.publish(Play())
        assert keep == [Play()]

    def test_context_manager_disposes(self, bus):
        seen = []
        with bus.subscribe(ScrollBy, seen.append):
            bus.publish(ScrollBy(4.0))
        bus.publish(ScrollBy(5.0))
        assert seen == [ScrollBy(4.0)]

    def test_handler_may_dispose_during_delivery(self):
        bus = NotificationBus()
        seen = []
        holder = {}

        def once(event):
            seen.append(event)
            holder["sub"].dispose()

        holder["sub"] = bus.subscribe(Stop, once)
        bus.publish(Stop())
        bus.publish(Stop())
        assert seen == [Stop()]
