"""Environment variable expansion for reporter configuration values."""

import os
import re
from typing import Any

# ${VAR} or ${VAR:-default}
_ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}")


def expand_env_vars(value: Any, missing_vars: set[str] | None = None) -> Any:
    """Recursively expand environment references in config values.

    Supports two syntaxes:
    - ${VAR}: Required variable
    - ${VAR:-default}: Variable with a default value

    Args:
        value: Config value to expand (str, dict, list, or anything else).
        missing_vars: Set collecting the names of unset required variables
            (modified in place).

    Returns:
        Value with environment references expanded.

    Raises:
        ValueError: If a required environment variable is not set.
    """
    if missing_vars is None:
        missing_vars = set()

    if isinstance(value, str):
        return _expand_string(value, missing_vars)
    elif isinstance(value, dict):
        return {key: expand_env_vars(item, missing_vars) for key, item in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item, missing_vars) for item in value]
    else:
        return value


def _expand_string(text: str, missing_vars: set[str]) -> str:
    def replace(match: re.Match) -> str:
        var_name, default_value = match.group(1), match.group(2)

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if default_value is not None:
            return default_value

        missing_vars.add(var_name)
        raise ValueError(
            f"Required environment variable '{var_name}' is not set. "
            f"Set it or give a default with ${{{var_name}:-default}}."
        )

    return _ENV_REFERENCE.sub(replace, text)

