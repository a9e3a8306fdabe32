"""
Abstract base class for field rules.

Every rule in the catalog inherits from FieldRule and implements passes().
The validator calls prepare() once per invocation before any rule runs, so
a malformed argument aborts validation before errors are recorded.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from ..errors import RuleConfigurationError


def get_value(data: Mapping[str, Any], attribute: str) -> Any:
    """Return the value under attribute, or None when absent."""
    return data.get(attribute)


def is_empty(value: Any) -> bool:
    """
    Return True for values PHP's empty() treats as empty.

    None, False, "", "0", numeric zero and empty containers are empty.
    True, "false", " " and non-zero numbers are not.
    """
    if value is None or value is False:
        return True
    if value is True:
        return False
    if isinstance(value, str):
        return value in ("", "0")
    if isinstance(value, (int, float)):
        return value == 0
    try:
        return len(value) == 0
    except TypeError:
        return False


def as_text(value: Any) -> str:
    """Render a scalar as text the way string checks see it."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def strictly_equal(left: Any, right: Any) -> bool:
    """Equality that also requires equal types ("1" is not 1, True is not 1)."""
    return type(left) is type(right) and left == right


class FieldRule(ABC):
    """
    Abstract base class for all catalog rules.

    Class attributes:
        name: Rule name as written in rule strings (e.g. 'min')
        message_key: Key into the message catalog
        takes_argument: Whether the rule requires an argument
    """

    name: str = ""
    message_key: str = ""
    takes_argument: bool = False

    def prepare(self, argument: Optional[str]) -> Any:
        """
        Check the invocation argument and convert it for passes().

        Raises:
            RuleConfigurationError: If the argument is missing or unexpected
        """
        if self.takes_argument and not argument:
            raise RuleConfigurationError(
                f"Rule '{self.name}' requires an argument", rule=self.name
            )
        if not self.takes_argument and argument is not None:
            raise RuleConfigurationError(
                f"Rule '{self.name}' does not take an argument, got '{argument}'",
                rule=self.name,
            )
        return argument

    def references(self, argument: Any) -> List[str]:
        """Return other fields this rule reads (must exist in the data)."""
        return []

    def message_value(self, argument: Any) -> Optional[str]:
        """Return the value for the template's second placeholder."""
        return None if argument is None else str(argument)

    @abstractmethod
    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        """
        Run the check.

        Args:
            attribute: Field under validation
            data: The full input data
            argument: Whatever prepare() returned

        Returns:
            True if the field satisfies the rule
        """

    def __repr__(self):
        return f"<{type(self).__name__} '{self.name}'>"
