from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SecurityEvent:
    event_type: str
    claimant_id: Optional[str]
    timestamp: datetime
    payload: Dict[str, Any] = field(default_factory=dict)
