"""
Centralized settings for the checkout.

Defaults can be overridden through ``CHECKOUT_*`` environment variables.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Mapping, Optional

from ..exceptions import InvalidConfigError


TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off', '')


def parse_bool(value: str) -> bool:
    """Parse a boolean from an environment string."""
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise InvalidConfigError(f"Cannot read '{value}' as a boolean")


def _unescape(value: str) -> str:
    # Allows CHECKOUT_RULE_DELIMITER=\n in .env files and shells
    return value.replace('\\n', '\n').replace('\\t', '\t')


@dataclass
class Settings:
    """Checkout settings with sensible defaults."""

    rule_delimiter: str = ';'
    field_delimiter: str = '|'

    # Abort on the first malformed rule instead of skipping it
    strict: bool = False

    # Optional CSV rule table loaded by the API and scripts
    rules_file: Optional[Path] = None

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Load settings from the environment."""
        env = os.environ if environ is None else environ
        rules_file = env.get('CHECKOUT_RULES_FILE', '').strip()

        return cls(
            rule_delimiter=_unescape(env.get('CHECKOUT_RULE_DELIMITER', cls.rule_delimiter)),
            field_delimiter=_unescape(env.get('CHECKOUT_FIELD_DELIMITER', cls.field_delimiter)),
            strict=parse_bool(env.get('CHECKOUT_STRICT', 'false')),
            rules_file=Path(rules_file) if rules_file else None,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings (used by tests after changing the environment)."""
    global _settings
    _settings = None
