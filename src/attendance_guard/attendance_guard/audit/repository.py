from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol


class AuditRepository(Protocol):
    def log_security_event(
        self,
        *,
        event_type: str,
        claimant_id: Optional[str],
        payload: Dict[str, Any],
        timestamp: datetime,
    ) -> int:
        """Persist one security event; returns its id."""

        raise NotImplementedError
