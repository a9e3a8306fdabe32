"""
Rule catalog.

RULE_CATALOG is the fixed, read-only dispatch table from rule name to rule
object, built once at import. There is no registration hook: the catalog is
closed, and get_rule() raises UnknownRuleError for anything outside it.
"""

from types import MappingProxyType

from ..errors import UnknownRuleError
from ..messages import MESSAGES
from .base import FieldRule, as_text, is_empty, strictly_equal
from .comparison import CONFIRMATION_FIELD, Confirmed, Same
from .format import Alfa, AlfaNum, Email, Ip, Regex, Strong, Url
from .length import Max, Min
from .presence import Accepted, Boolean, Required

_RULE_CLASSES = (
    Required,
    Strong,
    Min,
    Max,
    Email,
    Alfa,
    AlfaNum,
    Confirmed,
    Same,
    Accepted,
    Url,
    Regex,
    Ip,
    Boolean,
)


def _build_catalog():
    catalog = {}
    for rule_class in _RULE_CLASSES:
        rule = rule_class()
        if rule.name in catalog:
            raise RuntimeError(f"Duplicate rule name in catalog: {rule.name}")
        if rule.message_key not in MESSAGES:
            raise RuntimeError(
                f"Rule '{rule.name}' uses unknown message key '{rule.message_key}'"
            )
        catalog[rule.name] = rule
    return MappingProxyType(catalog)


RULE_CATALOG = _build_catalog()


def get_rule(name: str) -> FieldRule:
    """
    Look up a rule by name.

    Raises:
        UnknownRuleError: If name is not in the catalog
    """
    try:
        return RULE_CATALOG[name]
    except KeyError:
        raise UnknownRuleError(
            f"Unknown validation rule '{name}'. "
            f"Known rules: {', '.join(sorted(RULE_CATALOG))}",
            rule=name,
        ) from None


__all__ = [
    "CONFIRMATION_FIELD",
    "FieldRule",
    "RULE_CATALOG",
    "as_text",
    "get_rule",
    "is_empty",
    "strictly_equal",
]
