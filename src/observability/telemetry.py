import logging
import threading
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[tuple, dict, dict], None]


class TelemetrySink:
    """In-process event dispatcher with span helpers.

    Handlers are attached to exact event names (tuples of strings) and called
    as ``handler(event, measurements, metadata)``. A handler that raises is
    logged and detached so it cannot break the caller.
    """

    def __init__(self):
        self._handlers: dict[str, tuple[tuple, Handler]] = {}
        self._lock = threading.Lock()

    def attach(self, handler_id: str, event: tuple, handler: Handler) -> None:
        with self._lock:
            if handler_id in self._handlers:
                raise ValueError(f"Handler {handler_id} is already attached")
            self._handlers[handler_id] = (tuple(event), handler)

    def attach_many(self, handler_id: str, events: list[tuple], handler: Handler) -> None:
        for event in events:
            self.attach(f"{handler_id}:{'.'.join(event)}", event, handler)

    def detach(self, handler_id: str) -> None:
        with self._lock:
            self._handlers.pop(handler_id, None)
            for key in [k for k in self._handlers if k.startswith(f"{handler_id}:")]:
                del self._handlers[key]

    def execute(self, event: tuple, measurements: dict, metadata: dict) -> None:
        event = tuple(event)
        with self._lock:
            matching = [(hid, h) for hid, (name, h) in self._handlers.items() if name == event]

        for handler_id, handler in matching:
            try:
                handler(event, measurements, metadata)
            except Exception:
                logger.exception("Telemetry handler %s failed on %s, detaching", handler_id, event)
                with self._lock:
                    self._handlers.pop(handler_id, None)

    def span(self, prefix: tuple, metadata: dict, fn: Callable[[], tuple[Any, dict]]) -> Any:
        """Emit ``prefix + (start,)``, run ``fn`` and emit ``prefix + (stop,)``.

        ``fn`` returns ``(result, stop_metadata)``. If it raises, an
        ``exception`` event is emitted instead of ``stop`` and the error
        propagates.
        """
        prefix = tuple(prefix)
        start = time.monotonic_ns()
        self.execute(
            prefix + ("start",),
            {"monotonic_time": start, "system_time": time.time_ns()},
            metadata,
        )
        try:
            result, stop_metadata = fn()
        except Exception as e:
            self.execute(
                prefix + ("exception",),
                {"duration": time.monotonic_ns() - start},
                {**metadata, "kind": type(e).__name__, "reason": e},
            )
            raise
        self.execute(
            prefix + ("stop",),
            {"duration": time.monotonic_ns() - start, "monotonic_time": time.monotonic_ns()},
            stop_metadata,
        )
        return result
