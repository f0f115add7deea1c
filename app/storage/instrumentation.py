"""
Instrumentation events for storage operations.

Every storage operation runs inside Instrumenter.instrument(), which publishes
exactly one StorageEvent to the subscribers once the operation finishes,
whether it returned or raised.
"""
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from app.logging_config import setup_logging

logger = setup_logging()


@dataclass
class StorageEvent:
    name: str
    key: str
    payload: dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0


Subscriber = Callable[[StorageEvent], None]


class Instrumenter:
    """Publishes storage events to subscribed callbacks."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Subscriber:
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @contextmanager
    def instrument(self, name: str, key: str, **payload: Any) -> Iterator[dict[str, Any]]:
        """
        Run a block as one instrumented operation.

        The yielded dict is the event payload; the block may add fields
        to it (e.g. ``exist`` or ``url``) before the event is published.

        Args:
            name: Event name (upload, download, streaming_download, ...)
            key: Blob key the operation works on
            **payload: Initial payload fields

        Yields:
            Mutable payload dict
        """
        payload = {"key": key, **payload}
        started = time.perf_counter()

        try:
            yield payload
        except BaseException as e:
            # GeneratorExit from an abandoned stream is not a failure
            if not isinstance(e, GeneratorExit):
                payload["exception"] = (e.__class__.__name__, str(e))
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            self._publish(StorageEvent(name, key, payload, duration_ms))

    def _publish(self, event: StorageEvent) -> None:
        logger.info(
            f"Storage {event.name}: service={event.payload.get('service')}, "
            f"key={event.key}, duration_ms={event.duration_ms:.1f}"
        )
        for callback in list(self._subscribers):
            callback(event)


instrumenter = Instrumenter()
