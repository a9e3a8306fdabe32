"""
Cross-field rules: confirmed and same.

Both compare strictly (equal type and equal value). An empty or absent
value passes, but the compared field must still exist in the data; the
validator checks references() before running anything.
"""

from typing import Any, List, Mapping

from .base import FieldRule, get_value, is_empty, strictly_equal

CONFIRMATION_FIELD = "password_confirmation"


class Confirmed(FieldRule):
    """Value equals the value under 'password_confirmation'."""

    name = "confirmed"
    message_key = "confirmed"

    def references(self, argument: Any) -> List[str]:
        return [CONFIRMATION_FIELD]

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        return strictly_equal(value, data[CONFIRMATION_FIELD])


class Same(FieldRule):
    """Value equals the value of another named field."""

    name = "same"
    message_key = "same"
    takes_argument = True

    def references(self, argument: str) -> List[str]:
        return [argument]

    def passes(self, attribute: str, data: Mapping[str, Any], argument: str) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        return strictly_equal(value, data[argument])
