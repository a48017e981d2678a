"""Custom exceptions for the pricing engine."""

from typing import Any, List, Optional


class PricingError(Exception):
    """Base exception for the pricing engine."""

    pass


class InvalidPricingContextError(PricingError):
    """Raised when a pricing context cannot be evaluated (e.g. negative base price)."""

    pass


class RuleValidationError(PricingError):
    """Raised when a stored price rule record does not have a valid shape."""

    def __init__(self, message: str, rule_id: Optional[str] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.rule_id = rule_id
        self.errors = errors or []


class MarkdownPolicyError(PricingError):
    """Raised when a markdown tier table is invalid."""

    pass


class ConfigurationError(PricingError):
    """Raised when configuration is invalid."""

    pass
