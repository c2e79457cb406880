
"""
   Purchase rate error types.
   Validation errors are returned as values by the validator; orchestration raises them.
   Routes translate every subclass into an HTTP status.
"""

from __future__ import annotations
from typing import Optional


class PurchaseRateError(Exception):
    """Base for all purchase rate errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class RateValidationError(PurchaseRateError):
    """Caller input rejected before any arithmetic."""


class MissingFieldError(RateValidationError):
    """A required request field is absent or blank."""


class InvalidNumberError(RateValidationError):
    """A numeric field does not parse as a finite number."""


class NegativeValueError(RateValidationError):
    """A non-negative numeric field is below zero."""


class InvalidEnumError(RateValidationError):
    """Rate type or calculation method outside its allowed set."""


class ArrivalNotFoundError(PurchaseRateError):
    """Referenced arrival does not exist."""


class NotPurchaseRecordError(PurchaseRateError):
    """Referenced arrival is a sale/transfer, not a purchase."""


class DegenerateMeasurementError(PurchaseRateError):
    """Arrival net weight is zero; rate cannot be expressed per weight."""
