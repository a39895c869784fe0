"""
Configuration validation utilities.

Provides utilities for validating required environment variables with clear error messages.
"""

import logging
import os
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def require_env(
    name: str,
    description: Optional[str] = None,
    fallbacks: Sequence[str] = (),
) -> str:
    """
    Require an environment variable to be set.

    Args:
        name: Environment variable name
        description: Optional description of what the variable is used for
        fallbacks: Alternative variable names checked in order when *name* is unset

    Returns:
        The value of the environment variable

    Raises:
        ConfigurationError: If neither the variable nor any fallback is set
    """
    for candidate in (name, *fallbacks):
        value = os.getenv(candidate)
        if value:
            return value

    desc_msg = f" ({description})" if description else ""
    raise ConfigurationError(
        f"Missing required environment variable: {name}{desc_msg}\n"
        f"Please set {name} in your .env file or environment."
    )


def int_from_env(name: str, default: int, min_value: Optional[int] = None) -> int:
    """
    Read an integer environment variable, falling back to *default* when it is
    unset or unparsable.

    Args:
        name: Environment variable name
        default: Value used when the variable is missing or invalid
        min_value: Lower bound; smaller values are replaced by the default
    """
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Invalid integer for %s=%s, using %s", name, value, default)
        return default
    if min_value is not None and parsed < min_value:
        logger.warning("%s=%s is below minimum %s, using %s", name, parsed, min_value, default)
        return default
    return parsed


def optional_env(name: str) -> Optional[str]:
    """Return the variable's value, or None when it is unset or blank."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()
