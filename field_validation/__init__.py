"""
field-validation-lib: Declarative field validation with pipe-delimited rules

This library provides:
- A fixed catalog of field rules (required, min, max, email, same, ...)
- Per-field error messages with placeholder substitution
- Named rulesets loaded from YAML configuration (local or remote)
- A JSON-RPC server for use from other languages

Example:
    from field_validation import Validator

    validator = Validator({"email": "test@gmail.com", "password": "secret"})
    validator.validate({"email": "required|email", "password": "required|min:8"})
    if not validator.passed():
        print(validator.all())
"""

from .api import ValidationService
from .errors import MissingFieldError, RuleConfigurationError, UnknownRuleError
from .rule_parser import RuleInvocation
from .validator import Validator

__version__ = "0.1.0"
__all__ = [
    "MissingFieldError",
    "RuleConfigurationError",
    "RuleInvocation",
    "UnknownRuleError",
    "ValidationService",
    "Validator",
]
