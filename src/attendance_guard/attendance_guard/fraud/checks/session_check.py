from __future__ import annotations

from ...core.constants import SESSION_INVALID_PENALTY
from ...core.enums import ReasonCode
from ..model import CheckResult
from .base import CheckContext, FraudCheck


class SessionCheck(FraudCheck):
    """Penalize claims against a missing or invalid session."""

    name = "session"

    def run(self, ctx: CheckContext) -> CheckResult:
        result = CheckResult()
        if ctx.session is None:
            result.add(SESSION_INVALID_PENALTY, "Session not found or invalid", ReasonCode.SESSION_INVALID)
        return result
