"""Configuration error types raised by the validator.

Validation failures are never raised; they are recorded on the Validator.
These exceptions signal a broken rule specification instead.
"""

from typing import Optional


class RuleConfigurationError(ValueError):
    """A rule specification cannot be executed as written."""

    def __init__(
        self,
        message: str,
        rule: Optional[str] = None,
        attribute: Optional[str] = None,
    ):
        super().__init__(message)
        self.rule = rule
        self.attribute = attribute


class UnknownRuleError(RuleConfigurationError, LookupError):
    """Rule name is not in the catalog."""


class MissingFieldError(RuleConfigurationError, LookupError):
    """A comparison rule refers to a field that is not in the data."""
