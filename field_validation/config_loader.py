"""Configuration loading: local config plus the named rulesets document."""

import os
import time
import logging
import urllib.parse
from importlib.resources import files
from typing import Any, Dict, Optional

import yaml
import requests
from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10
DEFAULT_MAX_AGE = 1800

RULESETS_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["rulesets"],
    "properties": {
        "rulesets": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["rules"],
                "properties": {
                    "metadata": {"type": "object"},
                    "rules": {
                        "type": "object",
                        "minProperties": 1,
                        "additionalProperties": {"type": "string"},
                    },
                },
                "additionalProperties": False,
            },
        },
    },
}


class ConfigLoader:
    """Loads the local config and the rulesets document it points at."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Path to a local config YAML file. Defaults to the
                local-config.yaml bundled with the package.

        Raises:
            RuntimeError: If the rulesets document cannot be fetched
            ValueError: If a document is malformed
        """
        if config_path is None:
            config_file = files("field_validation").joinpath("local-config.yaml")
            self.local_config_path = str(config_file)
        else:
            self.local_config_path = os.path.abspath(config_path)

        self.local_config = self._load_yaml(self.local_config_path) or {}
        if not isinstance(self.local_config, dict):
            raise ValueError(f"Local config must be a mapping: {self.local_config_path}")

        self.rulesets_location = self.local_config.get("rulesets_location", "rulesets.yaml")
        self.rulesets = self._load_rulesets(self.rulesets_location)
        self.rulesets_loaded_at = time.time()

    def _load_yaml(self, path: str) -> Any:
        """Load YAML file from disk."""
        with open(path) as f:
            return yaml.safe_load(f)

    def _load_rulesets(self, location: str) -> Dict[str, Dict[str, Any]]:
        document = self._load_document_from_uri(location)
        self._check_rulesets_document(document, location)
        rulesets = document["rulesets"]
        logger.info(f"Loaded {len(rulesets)} rulesets from {location}")
        return rulesets

    def _check_rulesets_document(self, document: Any, location: str) -> None:
        """Validate the rulesets document shape against RULESETS_SCHEMA."""
        errors = sorted(
            Draft7Validator(RULESETS_SCHEMA).iter_errors(document),
            key=lambda e: list(e.path),
        )
        if errors:
            first = errors[0]
            error_path = " -> ".join(str(p) for p in first.path) if first.path else "root"
            raise ValueError(
                f"Invalid rulesets document {location} at {error_path}: {first.message}"
            )

    def _load_document_from_uri(self, uri: str) -> Any:
        """
        Load a YAML document from a URI.

        Supports:
        - Relative paths - resolved against the local config directory
        - file:// - Local filesystem (absolute paths)
        - https:// and http:// - Remote, fetched with requests

        Args:
            uri: Document URI or relative path

        Returns:
            Parsed YAML
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            config_dir = os.path.dirname(os.path.abspath(self.local_config_path))
            return self._load_yaml(os.path.join(config_dir, uri))

        if parsed.scheme == "file":
            return self._load_yaml(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            return yaml.safe_load(self._fetch_uri(uri))

        raise ValueError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        timeout = self.local_config.get("fetch_timeout_seconds", DEFAULT_FETCH_TIMEOUT)
        try:
            response = requests.get(uri, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to fetch rulesets from {uri}: {e}") from e
        return response.text

    def get_local_config(self) -> Dict[str, Any]:
        """Get local configuration."""
        return self.local_config

    def get_rulesets(self) -> Dict[str, Dict[str, Any]]:
        """Get all named rulesets: name -> {"metadata": ..., "rules": ...}."""
        return self.rulesets

    def get_ruleset(self, name: str) -> Dict[str, Any]:
        """
        Get one ruleset by name.

        Raises:
            ValueError: If no ruleset has that name
        """
        if name not in self.rulesets:
            raise ValueError(
                f"Unknown ruleset '{name}'. Available: {', '.join(sorted(self.rulesets))}"
            )
        return self.rulesets[name]

    def get_rulesets_age(self) -> Optional[float]:
        """
        Get age of the rulesets document in seconds since it was loaded.

        Returns:
            Age in seconds, or None if not loaded
        """
        if hasattr(self, "rulesets_loaded_at"):
            return time.time() - self.rulesets_loaded_at
        return None

    def get_rulesets_max_age(self) -> float:
        """Seconds after which the rulesets document counts as stale."""
        return self.local_config.get("rulesets_cache_max_age_seconds", DEFAULT_MAX_AGE)
