"""
events.py - Append-only event log

The EventLog is the ledger's notification side-channel. It is never the
source of truth: balances, allowances and supply live in TokenLedger. The log
only records what happened, in the order it happened.

Only the ledger appends. External observers either iterate/replay the log or
subscribe a callback that is invoked synchronously for each appended event.
Storing and delivering are separate steps: `record` stores events, `publish`
hands stored events to subscribers. A subscriber that raises never stops
delivery to the others; the failure is kept in `failures` and returned to
the publisher.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, Type, TypeVar

from .core import Event


E = TypeVar("E", bound=Event)

# Subscriber callback signature: receives (index, event).
EventListener = Callable[[int, Event], None]


@dataclass(frozen=True, slots=True)
class DeliveryFailure:
    """A subscriber raised while being handed the event at `index`."""
    index: int
    event: Event
    listener: EventListener
    error: Exception


class EventLog:
    """
    Ordered, append-only record of emitted events.

    Example:
        log = EventLog()
        log.subscribe(lambda i, ev: print(i, ev))
        log.append(Transfer(NULL_ACCOUNT, "alice", 100))
        [ev.name for ev in log]       # ['Transfer']
        list(log.of_type(Transfer))   # [Transfer(...)]
    """

    def __init__(self, events: Optional[List[Event]] = None):
        self._events: List[Event] = list(events or [])
        self._listeners: List[EventListener] = []
        self.failures: List[DeliveryFailure] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    def __getitem__(self, index):
        return self._events[index]

    def __repr__(self) -> str:
        return f"EventLog({len(self._events)} events)"

    # ------------------------------------------------------------------
    # Writing (ledger only)
    # ------------------------------------------------------------------

    def record(self, events) -> int:
        """
        Store events in order without notifying subscribers.

        Every item is type-checked before any is stored.

        Returns:
            The index of the first stored event
        """
        events = list(events)
        for event in events:
            if not isinstance(event, Event):
                raise TypeError(f"Expected Event, got {type(event).__name__}")
        start = len(self._events)
        self._events.extend(events)
        return start

    def publish(self, start: int, stop: Optional[int] = None) -> List[DeliveryFailure]:
        """
        Hand stored events [start, stop) to every subscriber, in order.

        Each listener sees every event even if an earlier call raised.

        Returns:
            The failures raised by listeners during this delivery
        """
        failures: List[DeliveryFailure] = []
        stop = len(self._events) if stop is None else stop
        listeners = tuple(self._listeners)
        for index in range(start, stop):
            event = self._events[index]
            for listener in listeners:
                try:
                    listener(index, event)
                except Exception as e:
                    failures.append(DeliveryFailure(index, event, listener, e))
        self.failures.extend(failures)
        return failures

    def append(self, event: Event) -> int:
        """
        Append one event and notify subscribers.

        Returns:
            The index the event was stored at
        """
        index = self.record([event])
        self.publish(index, index + 1)
        return index

    def extend(self, events) -> None:
        """Append several events in order."""
        events = list(events)
        start = self.record(events)
        self.publish(start, start + len(events))

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def replay(self, start: int = 0) -> Iterator[Tuple[int, Event]]:
        """Yield (index, event) pairs in emission order, starting at `start`."""
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        for offset, event in enumerate(tuple(self._events[start:])):
            yield start + offset, event

    def of_type(self, event_type: Type[E]) -> Iterator[E]:
        """Yield events of one type in emission order."""
        for event in tuple(self._events):
            if isinstance(event, event_type):
                yield event

    def last(self) -> Optional[Event]:
        return self._events[-1] if self._events else None

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """
        Register a callback for future appends.

        Returns:
            A function that removes the subscription
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def copy(self) -> EventLog:
        """Return a log holding the same events and no subscribers."""
        return EventLog(self._events)
