from __future__ import annotations

import logging
import queue
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_AUDIT_QUEUE_SIZE
from ..core.enums import SecurityEventType
from .model import SecurityEvent
from .repository import AuditRepository

logger = logging.getLogger(__name__)

_STOP = object()


class AuditLogger:
    """Fire-and-forget security event logging.

    Events go onto a bounded queue drained by one background thread. log() never
    blocks: a full queue drops the event with a warning, and sink failures are
    logged and swallowed.
    """

    def __init__(self, sink: AuditRepository, *, max_queue: int = DEFAULT_AUDIT_QUEUE_SIZE):
        self._sink = sink
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=int(max_queue))
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._drain, name="audit-logger", daemon=True)
            self._worker.start()

    def log(
        self,
        event_type: SecurityEventType | str,
        claimant_id: Optional[str],
        payload: Optional[Dict[str, Any]] = None,
        *,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        event = SecurityEvent(
            event_type=event_type.value if isinstance(event_type, SecurityEventType) else str(event_type),
            claimant_id=claimant_id,
            timestamp=timestamp or now_utc(),
            payload=dict(payload or {}),
        )
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            logger.warning("Audit queue full, dropping %s event for %s", event.event_type, claimant_id)
            return False
        return True

    def stop(self, timeout: float = 5.0) -> None:
        """Flush queued events and stop the worker."""

        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is None:
            return
        self._queue.put(_STOP)
        worker.join(timeout)

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._write(item)
            finally:
                self._queue.task_done()

    def _write(self, event: SecurityEvent) -> None:
        try:
            self._sink.log_security_event(
                event_type=event.event_type,
                claimant_id=event.claimant_id,
                payload=event.payload,
                timestamp=event.timestamp,
            )
        except Exception:
            logger.exception("Failed to write %s security event for %s", event.event_type, event.claimant_id)
