"""Errors raised by the financial calculators."""
from typing import Optional


class ValidationError(ValueError):
    """
    Malformed or out-of-domain calculator input.

    Raised synchronously for negative money amounts, percentages outside
    their range, division by zero and missing required fields. Business rule
    violations are never raised; they are reported in a ComplianceReport.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"message": self.message, "field": self.field}
