"""
Round plan exceptions.

Expected validation failures are returned as PlanValidationResult values and
never raised. Exceptions here are reserved for hard failures: a payload that
cannot be parsed at all, or a plan refused by the acceptance gate.
"""

from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from app.services.plan_validation import PlanValidationResult


class RoundPlanError(Exception):
    """Base class for round plan failures."""


class PlanPayloadError(RoundPlanError):
    """Submitted payload is malformed and cannot be turned into a plan."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}


class PlanRejectedError(RoundPlanError):
    """Plan failed validation at the acceptance gate."""

    def __init__(self, result: "PlanValidationResult"):
        super().__init__(f"Plan rejected with {len(result.errors)} validation error(s)")
        self.result = result
