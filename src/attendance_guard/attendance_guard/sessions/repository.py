from __future__ import annotations

from typing import Optional, Protocol

from .model import SessionWindow


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[SessionWindow]:
        raise NotImplementedError

    def get_by_code(self, qr_code: str) -> Optional[SessionWindow]:
        """Active session whose QR code matches, if any."""

        raise NotImplementedError
