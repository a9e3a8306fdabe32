"""
Validator - runs rule specifications against input data.

Validation happens in two phases:

1. Compile: every field's rule string is parsed, each rule name is resolved
   against the catalog, each argument is checked, and fields referenced by
   comparison rules are confirmed to exist. Any problem raises a
   RuleConfigurationError before a single rule runs.
2. Execute: every invocation runs in written order. Failures are recorded,
   never raised, and an earlier failure never stops later rules for the
   same field.

Errors accumulate across validate() calls on the same instance.

Example:
    validator = Validator({"email": "not-an-email"})
    validator.validate({"email": "required|email"})
    validator.passed()        # False
    validator.get_errors()    # {"email": ["The email must be a valid email address."]}
"""

import logging
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Union

from .errors import MissingFieldError, RuleConfigurationError
from .messages import MessageTemplate, get_template
from .rule_parser import RuleInvocation, parse_rule_specification
from .rules import FieldRule, get_rule

logger = logging.getLogger(__name__)


class CompiledCheck(NamedTuple):
    """One rule invocation bound to its field, rule object and prepared argument."""

    attribute: str
    invocation: RuleInvocation
    rule: FieldRule
    argument: Any


def compile_rules(rules: Mapping[str, str]) -> List[CompiledCheck]:
    """
    Parse a rule specification and bind every invocation to the catalog.

    Args:
        rules: Mapping of field name to pipe-delimited rule string

    Returns:
        Flat list of CompiledCheck, in field order then written order

    Raises:
        RuleConfigurationError: Unknown rule, bad or missing argument
    """
    checks = []
    for attribute, invocations in parse_rule_specification(rules).items():
        for invocation in invocations:
            try:
                rule = get_rule(invocation.name)
                argument = rule.prepare(invocation.argument)
            except RuleConfigurationError as e:
                raise type(e)(
                    f"Field '{attribute}': {e}", rule=invocation.name, attribute=attribute
                ) from e
            checks.append(CompiledCheck(attribute, invocation, rule, argument))
    return checks


class Validator:
    """Validates one set of input data and collects error messages per field."""

    def __init__(self, data: Mapping[str, Any]):
        """
        Args:
            data: Field name -> value. A shallow copy is kept.
        """
        self.data = dict(data)
        self.errors: Dict[str, List[str]] = {}

    def validate(self, rules: Mapping[str, str]) -> None:
        """
        Run a rule specification against the data.

        Args:
            rules: Mapping of field name to rule string,
                e.g. {"password": "required|min:8|same:password_confirm"}

        Raises:
            RuleConfigurationError: If the specification cannot run. Raised
                before any rule executes, so no errors are recorded.
        """
        checks = compile_rules(rules)
        self._check_references(checks)

        logger.debug(f"Running {len(checks)} rule checks over {len(rules)} fields")

        for check in checks:
            if check.rule.passes(check.attribute, self.data, check.argument):
                continue
            logger.debug(f"Field '{check.attribute}' failed rule '{check.invocation}'")
            self.set_error(
                check.attribute,
                get_template(check.rule.message_key),
                check.rule.message_value(check.argument),
            )

    def _check_references(self, checks: List[CompiledCheck]) -> None:
        """Make sure every field a comparison rule reads is present."""
        for check in checks:
            for field in check.rule.references(check.argument):
                if field not in self.data:
                    raise MissingFieldError(
                        f"Field '{check.attribute}': rule '{check.invocation}' "
                        f"refers to field '{field}' which is not in the data",
                        rule=check.invocation.name,
                        attribute=check.attribute,
                    )

    def set_error(
        self,
        attribute: str,
        template: Union[MessageTemplate, str],
        value: Optional[str] = None,
    ) -> None:
        """
        Render a message and append it to the attribute's error list.

        The first placeholder in the template becomes the attribute name, the
        second becomes value.
        """
        if isinstance(template, str):
            template = MessageTemplate(template)
        self.errors.setdefault(attribute, []).append(template.render(attribute, value))

    def passed(self) -> bool:
        """Return True if no field has an error."""
        return not self.errors

    def get_errors(self) -> Dict[str, List[str]]:
        """Return errors grouped by field, in the order they were recorded."""
        return self.errors

    def all(self) -> List[str]:
        """Return every error message as one flat list."""
        return [message for messages in self.errors.values() for message in messages]
