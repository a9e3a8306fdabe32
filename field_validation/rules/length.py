"""
Length bound rules: min and max.

Both skip empty values. The bounds are deliberately asymmetric:
``min:8`` accepts exactly 8 characters, ``max:8`` rejects exactly 8.
"""

import re
from typing import Any, Mapping, Optional

from ..errors import RuleConfigurationError
from .base import FieldRule, as_text, get_value, is_empty

_BOUND = re.compile(r"[0-9]+")


class _LengthRule(FieldRule):
    takes_argument = True

    def prepare(self, argument: Optional[str]) -> int:
        argument = super().prepare(argument)
        if not _BOUND.fullmatch(argument):
            raise RuleConfigurationError(
                f"Rule '{self.name}' needs a non-negative integer, got '{argument}'",
                rule=self.name,
            )
        return int(argument)

    def _length(self, attribute: str, data: Mapping[str, Any]) -> Optional[int]:
        """Character length of the value, or None if the value is empty."""
        value = get_value(data, attribute)
        if is_empty(value):
            return None
        return len(as_text(value))


class Min(_LengthRule):
    """Value has at least N characters."""

    name = "min"
    message_key = "min"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: int) -> bool:
        length = self._length(attribute, data)
        return length is None or length >= argument


class Max(_LengthRule):
    """Value has fewer than N characters."""

    name = "max"
    message_key = "max"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: int) -> bool:
        length = self._length(attribute, data)
        return length is None or length < argument
