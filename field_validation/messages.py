"""
Message catalog and positional placeholder rendering.

Templates carry ``:placeholder`` tokens. Rendering is positional, not
name-aware: the first placeholder receives the attribute name, the second
receives the rule value (a bound such as ``8`` or another field name), and
any further placeholder renders empty.

Example:
    >>> render("min", "password", "8")
    'The password must be at least 8 characters.'
"""

import re
from types import MappingProxyType
from typing import Optional, Tuple

_PLACEHOLDER = re.compile(r":\w+")


class MessageTemplate:
    """A message template pre-split into literal and placeholder segments."""

    __slots__ = ("text", "segments")

    def __init__(self, text: str):
        self.text = text
        self.segments = self._split(text)

    @staticmethod
    def _split(text: str) -> Tuple[Tuple[bool, str], ...]:
        """Split into (is_placeholder, text) pairs, in order."""
        segments = []
        position = 0
        for match in _PLACEHOLDER.finditer(text):
            if match.start() > position:
                segments.append((False, text[position:match.start()]))
            segments.append((True, match.group()))
            position = match.end()
        if position < len(text):
            segments.append((False, text[position:]))
        return tuple(segments)

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return tuple(value for is_slot, value in self.segments if is_slot)

    def render(self, attribute: str, value: Optional[str] = None) -> str:
        slots = [attribute, "" if value is None else str(value)]
        parts = []
        slot_index = 0
        for is_slot, text in self.segments:
            if not is_slot:
                parts.append(text)
                continue
            parts.append(slots[slot_index] if slot_index < len(slots) else "")
            slot_index += 1
        return "".join(parts)

    def __repr__(self):
        return f"MessageTemplate({self.text!r})"


MESSAGES = MappingProxyType({
    "required": "The :attribute field is required.",
    "string": "The :attribute must be a string.",
    "strong": (
        "The :attribute is not strong enough. "
        "Try a combination of letters, numbers and symbols."
    ),
    "min": "The :attribute must be at least :min characters.",
    "max": "The :attribute must be less :max characters.",
    "email": "The :attribute must be a valid email address.",
    "alpha_num": "The :attribute may only contain letters and numbers.",
    "confirmed": "The :attribute confirmation does not match.",
    "same": "The :attribute and :other must match.",
    "accepted": "The :attribute must be accepted.",
    "url": "The :attribute format is invalid.",
    "regex": "The :attribute format is invalid.",
    "ip": "The :attribute must be a valid IP address.",
    "boolean": "The :attribute field must be true or false.",
})

TEMPLATES = MappingProxyType(
    {key: MessageTemplate(text) for key, text in MESSAGES.items()}
)


def get_template(message_key: str) -> MessageTemplate:
    """Return the template for a message key (KeyError if unknown)."""
    return TEMPLATES[message_key]


def render(message_key: str, attribute: str, value: Optional[str] = None) -> str:
    """Render the catalog message for ``message_key``."""
    return TEMPLATES[message_key].render(attribute, value)
