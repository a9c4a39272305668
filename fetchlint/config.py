"""Configuration management for fetchlint.

Loads environment variables (optionally from a .env file) and turns them into
the AnalysisOptions record the engine consumes. The engine itself never reads
the environment.
"""
import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

from fetchlint.analyzer.engine import AnalysisOptions
from fetchlint.rules.registry import DETECTORS_BY_ID

__version__ = "1.0.0"

TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off'}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_path: .env file to load; defaults to ./.env

        Raises:
            ValueError: If an environment value is invalid
        """
        load_dotenv(env_path or Path.cwd() / ".env")
        self._validate()

    def _validate(self):
        """Validate the environment eagerly so errors surface at startup.

        Raises:
            ValueError: If FETCHLINT_RULES names an unknown rule or
                FETCHLINT_REQUIRE_QUERY_BUILDER is not a boolean
        """
        rules = self.enabled_rules
        if rules is not None:
            unknown = [rule for rule in rules if rule not in DETECTORS_BY_ID]
            if unknown:
                raise ValueError(f"FETCHLINT_RULES contains unknown rule(s): {', '.join(unknown)}")
        # Raises on malformed values
        self.require_query_builder

    @property
    def target_name(self) -> str:
        """Name of the request function to analyze (FETCHLINT_TARGET, default 'fetch')."""
        return os.getenv("FETCHLINT_TARGET", "fetch")

    @property
    def require_query_builder(self) -> bool:
        """Report hand-encoded query strings (FETCHLINT_REQUIRE_QUERY_BUILDER, default true).

        Raises:
            ValueError: If the value is not a recognised boolean
        """
        raw = os.getenv("FETCHLINT_REQUIRE_QUERY_BUILDER", "true").strip().lower()
        if raw in TRUE_VALUES:
            return True
        if raw in FALSE_VALUES:
            return False
        raise ValueError(f"FETCHLINT_REQUIRE_QUERY_BUILDER must be a boolean, got: {raw!r}")

    @property
    def enabled_rules(self) -> Optional[List[str]]:
        """Comma-separated rule ids from FETCHLINT_RULES, or None for all rules."""
        raw = os.getenv("FETCHLINT_RULES", "")
        rules = [rule.strip() for rule in raw.split(",") if rule.strip()]
        return rules or None

    def analysis_options(self) -> AnalysisOptions:
        return AnalysisOptions(
            require_query_builder=self.require_query_builder,
            target_name=self.target_name,
        )


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached Config so the next get_config() re-reads the environment."""
    global _config
    _config = None
