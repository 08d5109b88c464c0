"""
Session Module - The calibration session lifecycle.

A session represents one calibration attempt:
- Created when the player starts (stakes locked in the Hub)
- Character chosen, then up to six senses submitted
- Closed exactly once on exit (stakes released to the winner)

Closed sessions are kept as read-only history. Only the leaderboard
and the session counter are shared across players.
"""

from .manager import CalibrationManager
from .leaderboard import Leaderboard
from .auth import Authorizer, AllowAllAuthorizer, CallerAuthorizer
from .events import (
    Event,
    EventSink,
    LoggingEventSink,
    RecordingEventSink,
    CompositeEventSink,
    SessionStarted,
    SenseCompleted,
    CalibrationComplete,
    Overload,
)

__all__ = [
    "CalibrationManager",
    "Leaderboard",
    "Authorizer",
    "AllowAllAuthorizer",
    "CallerAuthorizer",
    "Event",
    "EventSink",
    "LoggingEventSink",
    "RecordingEventSink",
    "CompositeEventSink",
    "SessionStarted",
    "SenseCompleted",
    "CalibrationComplete",
    "Overload",
]
