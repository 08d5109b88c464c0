"""
Notifications - Fire-and-forget events for off-chain observers.

Topics:
- start            {character, session_id}       (emitted by set_character)
- sense_completed  {sense_id, score, points, elapsed_time}
- complete         {character, total_score}
- overload         {character, total_score}

Proof payloads are never part of an event.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, asdict
from typing import Any, ClassVar
import logging
import time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    """Base notification."""
    topic: ClassVar[str] = ""

    def payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionStarted(Event):
    character: int
    session_id: int
    topic: ClassVar[str] = "start"


@dataclass(frozen=True)
class SenseCompleted(Event):
    sense_id: int
    score: int
    points: int
    elapsed_time: int
    topic: ClassVar[str] = "sense_completed"


@dataclass(frozen=True)
class CalibrationComplete(Event):
    character: int
    total_score: int
    topic: ClassVar[str] = "complete"


@dataclass(frozen=True)
class Overload(Event):
    character: int
    total_score: int
    topic: ClassVar[str] = "overload"


@dataclass(frozen=True)
class PublishedEvent:
    """An event as delivered: who triggered it and when."""
    player: str
    event: Event
    timestamp: float


class EventSink(ABC):
    """Receives notifications. Sinks must not raise."""

    @abstractmethod
    def publish(self, player: str, event: Event):
        """Deliver one event triggered by player."""


class LoggingEventSink(EventSink):
    """Writes each event to the log."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def publish(self, player, event):
        logger.log(self.level, "event %s player=%s %s", event.topic, player, event.payload())


class RecordingEventSink(EventSink):
    """Keeps the most recent events in memory."""

    def __init__(self, maxlen: int = 1000):
        self.events: deque[PublishedEvent] = deque(maxlen=maxlen)

    def publish(self, player, event):
        self.events.append(PublishedEvent(player=player, event=event, timestamp=time.time()))

    def topics(self) -> list[str]:
        return [p.event.topic for p in self.events]

    def of_type(self, event_type: type[Event]) -> list[Event]:
        return [p.event for p in self.events if isinstance(p.event, event_type)]

    def clear(self):
        self.events.clear()


class CompositeEventSink(EventSink):
    """Fans out to several sinks."""

    def __init__(self, *sinks: EventSink):
        self.sinks = list(sinks)

    def publish(self, player, event):
        for sink in self.sinks:
            sink.publish(player, event)
