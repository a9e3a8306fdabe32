"""
Public API for field-validation-lib

This is the "front door" for validating data against named rulesets
loaded from configuration. For one-off validation with an inline rule
specification, the Validator class can be used directly.
"""

import time
import logging
from typing import Any, Dict, List, Mapping, Optional

from .config_loader import ConfigLoader
from .messages import get_template
from .rule_parser import parse_rule_specification
from .rules import get_rule
from .validator import Validator, compile_rules

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Main validation service class.

    Validates input data against named rulesets from the rulesets document.

    Auto-refresh: the rulesets document is reloaded when older than
    rulesets_cache_max_age_seconds (local-config.yaml).

    Example:
        from field_validation import ValidationService

        service = ValidationService()
        result = service.validate(form_data, "registration")
        if not result["passed"]:
            for message in result["messages"]:
                print(message)
    """

    # Debounce interval: how often the staleness check runs (seconds)
    CHECK_INTERVAL = 300

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize validation service.

        Args:
            config_path: Optional local config file. Defaults to the bundled
                local-config.yaml.

        Raises:
            RuntimeError: If the rulesets document cannot be fetched
            ValueError: If a config document is malformed
        """
        self._config_path = config_path
        self._initialize()

    def _initialize(self):
        """Internal initialization logic (used by __init__ and reload_rulesets)."""
        self.config_loader = ConfigLoader(self._config_path)
        self._max_age = self.config_loader.get_rulesets_max_age()
        self._last_check_time = time.time()

    def _check_and_reload_if_stale(self):
        """
        Reload the rulesets document if it is stale (debounced).

        Checks at most every CHECK_INTERVAL seconds.
        """
        now = time.time()
        if now - self._last_check_time < self.CHECK_INTERVAL:
            return

        self._last_check_time = now

        age = self.config_loader.get_rulesets_age()
        if age and age > self._max_age:
            logger.info(f"Rulesets stale ({age:.0f}s > {self._max_age}s), reloading")
            self.reload_rulesets()

    def validate(self, data: Mapping[str, Any], ruleset_name: str) -> Dict[str, Any]:
        """
        Validate data against a named ruleset.

        Args:
            data: Field name -> value
            ruleset_name: Ruleset to use (e.g. "registration")

        Returns:
            Dict with:
                - passed: True if every rule passed
                - errors: Field -> list of messages
                - messages: All messages, flattened

        Raises:
            ValueError: If ruleset_name is unknown
            RuleConfigurationError: If the ruleset cannot run against this data
        """
        self._check_and_reload_if_stale()

        ruleset = self.config_loader.get_ruleset(ruleset_name)
        return self._run(data, ruleset["rules"])

    def validate_rules(self, data: Mapping[str, Any], rules: Mapping[str, str]) -> Dict[str, Any]:
        """
        Validate data against an inline rule specification.

        Same result shape as validate().

        Example:
            service.validate_rules({"email": "x"}, {"email": "required|email"})
        """
        return self._run(data, rules)

    def _run(self, data: Mapping[str, Any], rules: Mapping[str, str]) -> Dict[str, Any]:
        validator = Validator(data)
        validator.validate(rules)
        return {
            "passed": validator.passed(),
            "errors": validator.get_errors(),
            "messages": validator.all(),
        }

    def discover_rules(self, ruleset_name: str) -> Dict[str, List[Dict[str, Any]]]:
        """
        Describe the rules of a ruleset without running them.

        Rule names and arguments are checked against the catalog, so a broken
        ruleset is reported here without needing any data.

        Args:
            ruleset_name: Ruleset to describe

        Returns:
            Field -> list of {"rule", "argument", "message"} in written order

        Raises:
            ValueError: If ruleset_name is unknown
            RuleConfigurationError: If a rule or argument is invalid
        """
        self._check_and_reload_if_stale()

        rules = self.config_loader.get_ruleset(ruleset_name)["rules"]
        compile_rules(rules)

        result = {}
        for attribute, invocations in parse_rule_specification(rules).items():
            result[attribute] = [
                {
                    "rule": invocation.name,
                    "argument": invocation.argument,
                    "message": get_template(get_rule(invocation.name).message_key).text,
                }
                for invocation in invocations
            ]
        return result

    def discover_rulesets(self) -> Dict[str, Dict[str, Any]]:
        """
        Discover all available rulesets with metadata and statistics.

        Returns:
            Dict mapping ruleset_name to:
                - metadata: Ruleset metadata (description, purpose, ...)
                - stats: total_fields, total_rules, rules_used

        Example:
            for name, info in service.discover_rulesets().items():
                print(f"{name}: {info['metadata'].get('description')}")
        """
        self._check_and_reload_if_stale()

        result = {}
        for ruleset_name, ruleset in self.config_loader.get_rulesets().items():
            parsed = parse_rule_specification(ruleset["rules"])
            names = [inv.name for invocations in parsed.values() for inv in invocations]
            result[ruleset_name] = {
                "metadata": dict(ruleset.get("metadata") or {}),
                "stats": {
                    "total_fields": len(parsed),
                    "total_rules": len(names),
                    "rules_used": sorted(set(names)),
                },
            }
        return result

    def batch_validate(
        self,
        records: List[Mapping[str, Any]],
        id_fields: List[str],
        ruleset_name: str,
    ) -> List[Dict[str, Any]]:
        """
        Validate several records against the same ruleset.

        Each record gets its own Validator. Results keep input order.

        Args:
            records: List of data dicts
            id_fields: Field names used to build each record identifier
            ruleset_name: Ruleset to use for all records

        Returns:
            List of {"record_id", "passed", "errors"}

        Example:
            results = service.batch_validate(rows, ["user_name"], "registration")
            failed = [r["record_id"] for r in results if not r["passed"]]
        """
        self._check_and_reload_if_stale()

        rules = self.config_loader.get_ruleset(ruleset_name)["rules"]
        results = []
        for record in records:
            outcome = self._run(record, rules)
            results.append(
                {
                    "record_id": self._extract_id(record, id_fields),
                    "passed": outcome["passed"],
                    "errors": outcome["errors"],
                }
            )

        logger.debug(
            f"Batch of {len(records)} records validated against '{ruleset_name}', "
            f"{sum(1 for r in results if not r['passed'])} failed"
        )
        return results

    def reload_rulesets(self) -> None:
        """
        Reload local config and the rulesets document from source.

        Useful after editing rulesets or publishing a new remote document.
        """
        self._initialize()

    def get_rulesets_age(self) -> Optional[float]:
        """Age of the loaded rulesets document in seconds."""
        return self.config_loader.get_rulesets_age()

    def _extract_id(self, record: Mapping[str, Any], id_fields: List[str]) -> str:
        """
        Build a record identifier from id fields.

        Returns:
            Present id values joined with "-", or "unknown"
        """
        id_parts = [str(record[field]) for field in id_fields if field in record]
        if not id_parts:
            return "unknown"
        return "-".join(id_parts)
