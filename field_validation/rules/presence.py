"""Presence and truthiness rules: required, accepted, boolean."""

from typing import Any, Mapping

from .base import FieldRule, get_value, is_empty


class Required(FieldRule):
    """The field is present and not empty."""

    name = "required"
    message_key = "required"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        return not is_empty(get_value(data, attribute))


class Accepted(FieldRule):
    """
    The field was "accepted" (a ticked checkbox, a terms-of-service flag).

    Only "1", "yes", "on" and True pass. Matching is exact and
    case-sensitive: "Yes", "true" and the integer 1 fail. Implies required.
    """

    name = "accepted"
    message_key = "accepted"

    ACCEPTED_STRINGS = frozenset({"1", "yes", "on"})

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if value is True:
            return True
        return isinstance(value, str) and value in self.ACCEPTED_STRINGS


class Boolean(FieldRule):
    """The field holds a boolean-like token. Empty values pass."""

    name = "boolean"
    message_key = "boolean"

    BOOLEAN_STRINGS = frozenset({"1", "0", "true", "false", "on", "off", "yes", "no"})

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        if isinstance(value, bool):
            return True
        if isinstance(value, int):
            return value in (0, 1)
        return isinstance(value, str) and value.lower() in self.BOOLEAN_STRINGS
