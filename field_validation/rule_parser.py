"""
Rule String Parser

Turns pipe-delimited rule strings into ordered rule invocations.

    "required|min:8|same:password_confirm"
        -> [RuleInvocation("required"),
            RuleInvocation("min", "8"),
            RuleInvocation("same", "password_confirm")]

Each token is split on its first ``:`` only, so anything after that colon
belongs to the argument. Arguments cannot contain ``|``: the pipe always
starts a new token. This is a known limitation of the format, notably for
``regex`` patterns using alternation.

Parsing is purely textual. Resolving names against the rule catalog happens
in the validator, which raises for unknown names.
"""

from typing import Dict, List, Mapping, NamedTuple, Optional

from .errors import RuleConfigurationError

RULE_SEPARATOR = "|"
ARGUMENT_SEPARATOR = ":"


class RuleInvocation(NamedTuple):
    """A rule name plus its optional single argument."""

    name: str
    argument: Optional[str] = None

    def __str__(self):
        if self.argument is None:
            return self.name
        return f"{self.name}{ARGUMENT_SEPARATOR}{self.argument}"


def parse_rule_token(token: str) -> RuleInvocation:
    """Parse one ``name`` or ``name:argument`` token."""
    name, separator, argument = token.partition(ARGUMENT_SEPARATOR)
    if not separator:
        return RuleInvocation(name)
    return RuleInvocation(name, argument)


def parse_rule_string(rule_string: str) -> List[RuleInvocation]:
    """
    Parse a field's rule string into invocations, in written order.

    Args:
        rule_string: Pipe-delimited rules, e.g. "required|max:20"

    Returns:
        List of RuleInvocation

    Raises:
        RuleConfigurationError: If rule_string is not a string
    """
    if not isinstance(rule_string, str):
        raise RuleConfigurationError(
            f"Rule string must be a str, got {type(rule_string).__name__}"
        )
    return [parse_rule_token(token) for token in rule_string.split(RULE_SEPARATOR)]


def parse_rule_specification(
    rules: Mapping[str, str]
) -> Dict[str, List[RuleInvocation]]:
    """
    Parse a whole rule specification (field -> rule string).

    Field order is preserved.

    Raises:
        RuleConfigurationError: If rules is not a mapping of str to str
    """
    if not isinstance(rules, Mapping):
        raise RuleConfigurationError(
            f"Rules must be a mapping of field name to rule string, "
            f"got {type(rules).__name__}"
        )

    parsed = {}
    for attribute, rule_string in rules.items():
        if not isinstance(attribute, str):
            raise RuleConfigurationError(
                f"Field names must be str, got {type(attribute).__name__}"
            )
        try:
            parsed[attribute] = parse_rule_string(rule_string)
        except RuleConfigurationError as e:
            raise RuleConfigurationError(
                f"Invalid rules for field '{attribute}': {e}", attribute=attribute
            ) from e
    return parsed
