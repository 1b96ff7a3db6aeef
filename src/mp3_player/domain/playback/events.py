"""
Media backend events and the channel that carries them to the control thread.

Every event is tagged with the generation of the load it belongs to. The
controller bumps its generation on every load, so anything still in flight
for an earlier load can be recognized and dropped.
"""

import queue
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Union


@dataclass(frozen=True)
class MetadataReady:
    duration: Optional[float]


@dataclass(frozen=True)
class PositionAdvanced:
    position: float


@dataclass(frozen=True)
class Ended:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


MediaEvent = Union[MetadataReady, PositionAdvanced, Ended, Failed]


class TaggedEvent(NamedTuple):
    generation: int
    event: MediaEvent


class EventChannel:
    """Thread-safe FIFO of tagged events.

    Backends may post from any thread; only the control thread drains.
    """

    def __init__(self):
        self._queue: "queue.Queue[TaggedEvent]" = queue.Queue()

    def post(self, generation: int, event: MediaEvent) -> None:
        self._queue.put(TaggedEvent(generation, event))

    def drain(self, max_events: Optional[int] = None) -> List[TaggedEvent]:
        """Take pending events in arrival order without blocking."""
        events: List[TaggedEvent] = []
        while max_events is None or len(events) < max_events:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def __len__(self) -> int:
        return self._queue.qsize()
