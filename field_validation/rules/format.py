"""
Format rules: strong, email, alfa, alfa_num, url, regex, ip.

strong, email, url, regex and ip let empty or absent values through.
alfa and alfa_num do not: an empty value holds no letters, so it fails.
"""

import re
import ipaddress
import logging
from typing import Any, Mapping, Optional, Pattern
from urllib.parse import urlsplit

from email_validator import validate_email, EmailNotValidError

from ..errors import RuleConfigurationError
from .base import FieldRule, as_text, get_value, is_empty

logger = logging.getLogger(__name__)

# No whitespace, 8+ characters, at least one lowercase, uppercase and digit
_STRONG = re.compile(r"(?=\S{8,})(?=\S*[a-z])(?=\S*[A-Z])(?=\S*[0-9])\S*")
_ALPHA = re.compile(r"[A-Za-z]+")
_ALPHA_NUM = re.compile(r"[A-Za-z0-9]+")
_URL_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")

# Schemes valid without a host (mailto:user@host, file:///tmp/x)
_HOSTLESS_SCHEMES = frozenset({"mailto", "news", "urn", "tel", "data", "file"})

_PATTERN_DELIMITERS = "/#~"
_PATTERN_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}


class Strong(FieldRule):
    """Password strength: 8+ chars, no spaces, mixed case and a digit."""

    name = "strong"
    message_key = "strong"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        return _STRONG.fullmatch(as_text(value)) is not None


class Email(FieldRule):
    """
    Syntactic e-mail address check.

    No DNS lookups. Test domains (user@mail.test, user@test) are accepted;
    other reserved names such as localhost and .local are still rejected.
    """

    name = "email"
    message_key = "email"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        try:
            validate_email(
                as_text(value),
                check_deliverability=False,
                globally_deliverable=False,
                test_environment=True,
            )
        except EmailNotValidError as e:
            logger.debug(f"Field '{attribute}' rejected by email check: {e}")
            return False
        return True


class Alfa(FieldRule):
    """Only ASCII letters. Uses the 'string' message."""

    name = "alfa"
    message_key = "string"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        return _ALPHA.fullmatch(as_text(get_value(data, attribute))) is not None


class AlfaNum(FieldRule):
    """Only ASCII letters and digits."""

    name = "alfa_num"
    message_key = "alpha_num"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        return _ALPHA_NUM.fullmatch(as_text(get_value(data, attribute))) is not None


class Url(FieldRule):
    """
    URL syntax check.

    A scheme is always required. Hierarchical schemes (http, ftp, ...) also
    need a host; opaque ones such as mailto only need something after the
    colon, as does file. Whitespace anywhere fails.
    """

    name = "url"
    message_key = "url"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True

        text = as_text(value)
        if any(ch.isspace() for ch in text):
            return False

        try:
            parts = urlsplit(text)
            parts.port  # raises ValueError on a malformed port
        except ValueError:
            return False

        if not parts.scheme or not _URL_SCHEME.fullmatch(parts.scheme):
            return False
        if parts.scheme.lower() in _HOSTLESS_SCHEMES:
            return bool(parts.path)
        return bool(parts.hostname)


class Regex(FieldRule):
    """
    Value matches a regular expression.

    Patterns are always delimited, optionally followed by flags:
    ``/^[a-z]+$/`` or ``#^/home/#i``. The first character is the delimiter
    and the last occurrence of it closes the pattern, so a slash inside a
    slash-delimited pattern needs escaping (``/^\\/home\\//``) or another
    delimiter. Matching uses re.search, so anchor the pattern to match the
    whole value.
    """

    name = "regex"
    message_key = "regex"
    takes_argument = True

    def prepare(self, argument: Optional[str]) -> Pattern:
        argument = super().prepare(argument)
        body, flags = self._split_delimiters(argument)
        try:
            return re.compile(body, flags)
        except re.error as e:
            raise RuleConfigurationError(
                f"Rule 'regex' has an invalid pattern '{argument}': {e}",
                rule=self.name,
            ) from e

    def _split_delimiters(self, argument: str):
        delimiter = argument[0]
        end = argument.rfind(delimiter)
        if delimiter not in _PATTERN_DELIMITERS or end == 0:
            raise RuleConfigurationError(
                f"Rule 'regex' needs a pattern wrapped in one of "
                f"{', '.join(_PATTERN_DELIMITERS)} (e.g. /^[a-z]+$/), got '{argument}'",
                rule=self.name,
            )

        flags = 0
        for flag in argument[end + 1:]:
            if flag not in _PATTERN_FLAGS:
                raise RuleConfigurationError(
                    f"Rule 'regex' has an unsupported pattern flag '{flag}' in "
                    f"'{argument}'; escape '{delimiter}' inside the pattern",
                    rule=self.name,
                )
            flags |= _PATTERN_FLAGS[flag]
        return argument[1:end], flags

    def message_value(self, argument: Any) -> Optional[str]:
        return argument.pattern

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Pattern) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        return argument.search(as_text(value)) is not None


class Ip(FieldRule):
    """IPv4 or IPv6 address."""

    name = "ip"
    message_key = "ip"

    def passes(self, attribute: str, data: Mapping[str, Any], argument: Any) -> bool:
        value = get_value(data, attribute)
        if is_empty(value):
            return True
        try:
            ipaddress.ip_address(as_text(value))
        except ValueError:
            return False
        return True
