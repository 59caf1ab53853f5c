"""
Event stream consumed by presentation layers.

Every state change the engine makes is recorded as a GameEvent. Renderers
subscribe to stay in sync; the full log can be exported as JSON for replay.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    UNIT_CREATED = "unit_created"
    UNIT_MOVED = "unit_moved"
    UNIT_DAMAGED = "unit_damaged"
    UNIT_REMOVED = "unit_removed"
    ATTACK_RESOLVED = "attack_resolved"
    PHASE_CHANGED = "phase_changed"
    SELECTION_CHANGED = "selection_changed"
    SESSION_ENDED = "session_ended"
    COMMAND_REJECTED = "command_rejected"


@dataclass
class GameEvent:
    type: EventType
    data: dict = field(default_factory=dict)
    turn: int = 0
    sequence: int = 0

    def to_dict(self) -> dict:
        return {
            "sequence": self.sequence,
            "turn": self.turn,
            "event": self.type.value,
            "data": self.data,
        }


class EventLog:
    """Ordered record of events with subscriber fan-out."""

    def __init__(self):
        self.events: list[GameEvent] = []
        self._listeners: list[Callable[[GameEvent], Any]] = []

    def subscribe(self, listener: Callable[[GameEvent], Any]):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[GameEvent], Any]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: EventType, turn: int = 0, **data) -> GameEvent:
        event = GameEvent(type=event_type, data=data, turn=turn, sequence=len(self.events))
        self.events.append(event)
        for listener in list(self._listeners):
            listener(event)
        return event

    def since(self, sequence: int) -> list[GameEvent]:
        return self.events[sequence:]

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        return [e for e in self.events if e.type is event_type]

    def save(self, path: Path | str) -> Path:
        """Write the log as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "saved_at": datetime.now().isoformat(),
            "events": [e.to_dict() for e in self.events],
        }
        with open(path, "w") as f:
            json.dump(payload, f, indent=2, default=str)
        logger.info(f"Event log saved to: {path}")
        return path

    def __len__(self) -> int:
        return len(self.events)
