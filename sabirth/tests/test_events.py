"""
Tests for notification sinks.
"""

import logging

import pytest

from ..session import (
    EventSink,
    LoggingEventSink,
    RecordingEventSink,
    CompositeEventSink,
    SessionStarted,
    Overload,
)


class TestEventSinks:
    """Tests for EventSink implementations."""

    def test_sink_must_implement_publish(self):
        class Incomplete(EventSink):
            pass

        with pytest.raises(TypeError):
            Incomplete()

    def test_composite_fans_out(self):
        first, second = RecordingEventSink(), RecordingEventSink()
        sink = CompositeEventSink(first, second)

        sink.publish("alice", SessionStarted(character=1, session_id=9))

        assert first.topics() == ["start"]
        assert second.topics() == ["start"]

    def test_recording_sink_is_bounded(self):
        sink = RecordingEventSink(maxlen=2)
        for total in (1, 2, 3):
            sink.publish("alice", Overload(character=0, total_score=total))

        assert [e.total_score for e in sink.of_type(Overload)] == [2, 3]
        sink.clear()
        assert sink.topics() == []

    def test_logging_sink(self, caplog):
        with caplog.at_level(logging.INFO):
            LoggingEventSink().publish("alice", SessionStarted(character=2, session_id=5))

        assert "event start player=alice" in caplog.text
