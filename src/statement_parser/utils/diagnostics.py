"""Trace events emitted by the repair engine.

The engine reports what it does (tags pushed and popped, text observed,
closing tags it had to synthesize) to a sink. The default sink drops
everything; results never depend on which sink is installed.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Diagnostic event kinds"""
    PUSH = "push"
    POP = "pop"
    TEXT = "text"
    SYNTHESIZED_CLOSE = "synthesized_close"
    UNMATCHED_END = "unmatched_end"
    MIXED_CONTENT = "mixed_content"
    TRAILING_TOKEN = "trailing_token"


@dataclass(frozen=True)
class DiagnosticEvent:
    """A single engine trace event"""
    kind: EventKind
    name: Optional[str] = None
    depth: int = 0
    detail: Optional[str] = None


class DiagnosticSink(ABC):
    """Receiver for engine trace events"""

    @abstractmethod
    def emit(self, event: DiagnosticEvent) -> None:
        pass


class NullSink(DiagnosticSink):
    """Discards every event"""

    def emit(self, event: DiagnosticEvent) -> None:
        return None


class LoggingSink(DiagnosticSink):
    """Forwards events to the standard logging module"""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.log = log or logger
        self.level = level

    def emit(self, event: DiagnosticEvent) -> None:
        self.log.log(
            self.level,
            f"{event.kind.value}: {event.name or ''}",
            extra={'context': {'depth': event.depth, 'detail': event.detail}}
        )


class RecordingSink(DiagnosticSink):
    """Keeps events in memory, mostly for tests and debugging"""

    def __init__(self):
        self.events: List[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[DiagnosticEvent]:
        return [event for event in self.events if event.kind is kind]

    def clear(self) -> None:
        self.events.clear()


NULL_SINK = NullSink()
