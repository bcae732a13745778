from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..fraud.model import FraudVerdict


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateAttendanceError(ValidationError):
    """Raised when the claimant already has a record for the session."""


class FraudRejectedError(DomainError):
    """Raised when a claim scores at or above the reject threshold."""

    def __init__(self, verdict: "FraudVerdict"):
        self.verdict = verdict
        super().__init__("; ".join(verdict.reasons) or "Attendance claim rejected")


class LookupUnavailable(DomainError):
    """Raised when a store lookup fails or times out during scoring."""


class EvaluationCancelled(DomainError):
    """Raised when the enclosing request cancels an evaluation."""
