"""
Configuration resolution and environment variable substitution.
"""

import os
import re
from typing import Any

_ENV_VAR = re.compile(r"\${([^}:]+)(?::-([^}]*))?}")


def resolve_config(config_data: dict[str, Any], env: str = "dev") -> dict[str, Any]:
    """
    Resolve configuration with environment variable substitution.

    Substitutes ``${VAR_NAME}``, ``${VAR_NAME:-default}`` and the ``{env}``
    placeholder. Unset variables without a default are left as written so
    validation can report them.

    Args:
        config_data: Configuration dictionary
        env: Current environment name

    Returns:
        Resolved configuration
    """
    return _resolve_value(config_data, env)


def _resolve_value(value: Any, env: str) -> Any:
    """Recursively resolve values in configuration."""
    if isinstance(value, dict):
        return {k: _resolve_value(v, env) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_value(item, env) for item in value]
    elif isinstance(value, str):
        result = _ENV_VAR.sub(_substitute, value)
        return result.replace("{env}", env)
    else:
        return value


def _substitute(match: "re.Match[str]") -> str:
    name, default = match.group(1), match.group(2)
    resolved = os.getenv(name)
    if resolved is not None:
        return resolved
    if default is not None:
        return default
    return match.group(0)
