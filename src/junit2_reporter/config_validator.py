"""Configuration validation with detailed error messages and suggestions."""

import re
import tomllib
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config import CONFIG_SUFFIXES, JUnitReporterConfig, parse_config_text, select_section
from .env_expansion import expand_env_vars

KNOWN_PLACEHOLDERS = ("{browser}", "{suite}")

_PLACEHOLDER = re.compile(r"\{[^{}]*\}")


@dataclass
class ConfigValidationError:
    """A validation error with context and suggestions."""

    field: str
    error: str
    line_number: int | None = None
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Result of configuration validation."""

    valid: bool
    errors: list[ConfigValidationError]
    warnings: list[ConfigValidationError]

    @property
    def has_errors(self) -> bool:
        """Check if there are any errors."""
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        """Check if there are any warnings."""
        return len(self.warnings) > 0


def _known_keys() -> set[str]:
    keys = set()
    for name, field in JUnitReporterConfig.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


class ConfigValidator:
    """Validates YAML/TOML reporter configuration files."""

    def __init__(self) -> None:
        """Initialize the validator."""
        self.errors: list[ConfigValidationError] = []
        self.warnings: list[ConfigValidationError] = []

    def validate_file(self, config_path: str | Path) -> ValidationResult:
        """Validate a configuration file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            ValidationResult with errors and warnings.
        """
        self.errors = []
        self.warnings = []

        path = Path(config_path)

        if not path.exists():
            self.errors.append(
                ConfigValidationError(
                    field="file",
                    error=f"Configuration file not found: {path}",
                    suggestion="Check the file path and ensure the file exists.",
                )
            )
            return self._result()

        if path.suffix not in CONFIG_SUFFIXES:
            self.warnings.append(
                ConfigValidationError(
                    field="file",
                    error=f"Unexpected file extension: {path.suffix}",
                    suggestion="Configuration files should use .yaml, .yml, or .toml extension.",
                )
            )

        try:
            # Unknown extensions are read as YAML
            suffix = path.suffix if path.suffix in CONFIG_SUFFIXES else ".yaml"
            raw_config = parse_config_text(path.read_text(), suffix)
        except yaml.YAMLError as e:
            error_msg = str(e)
            line_num = None
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                line_num = mark.line + 1
                error_msg = f"YAML syntax error at line {line_num}: {e.problem}"

            self.errors.append(
                ConfigValidationError(
                    field="syntax",
                    error=error_msg,
                    line_number=line_num,
                    suggestion="Check YAML syntax. Common issues: incorrect indentation, missing colons, unquoted braces.",
                )
            )
            return self._result()
        except tomllib.TOMLDecodeError as e:
            self.errors.append(
                ConfigValidationError(
                    field="syntax",
                    error=f"TOML syntax error: {e}",
                    suggestion="Check TOML syntax. Strings containing braces must be quoted.",
                )
            )
            return self._result()

        if not isinstance(raw_config, dict):
            self.errors.append(
                ConfigValidationError(
                    field="file",
                    error="Configuration must be a mapping of option names to values",
                    suggestion="Use 'outputFile: junit-results.xml' style key/value pairs.",
                )
            )
            return self._result()

        section = select_section(raw_config)
        if not isinstance(section, dict):
            self.errors.append(
                ConfigValidationError(
                    field="junit2Reporter",
                    error="Reporter section must be a mapping",
                    suggestion="Nest the reporter options under 'junit2Reporter:' as key/value pairs.",
                )
            )
            return self._result()

        self._validate_keys(section)
        self._validate_env_references(section)

        if not self.has_errors:
            expanded = expand_env_vars(section)
            self._validate_class_name_format(expanded)
            self._validate_with_pydantic(expanded)

        return self._result()

    def _validate_keys(self, section: dict[str, Any]) -> None:
        known = _known_keys()
        for key in section:
            if key in known:
                continue
            matches = get_close_matches(str(key), sorted(known), n=1)
            self.warnings.append(
                ConfigValidationError(
                    field=str(key),
                    error=f"Unknown option '{key}' is ignored",
                    suggestion=f"Did you mean '{matches[0]}'?"
                    if matches
                    else f"Valid options: {', '.join(sorted(known))}",
                )
            )

    def _validate_env_references(self, section: dict[str, Any]) -> None:
        missing_vars: set[str] = set()
        try:
            expand_env_vars(section, missing_vars)
        except ValueError:
            for var_name in sorted(missing_vars):
                self.errors.append(
                    ConfigValidationError(
                        field="env",
                        error=f"Required environment variable '{var_name}' is not set",
                        suggestion=f"Export {var_name} or use ${{{var_name}:-default}}.",
                    )
                )

    def _validate_class_name_format(self, section: dict[str, Any]) -> None:
        template = section.get("classNameFormat", section.get("class_name_format"))
        if not isinstance(template, str):
            return

        placeholders = _PLACEHOLDER.findall(template)
        for placeholder in placeholders:
            if placeholder not in KNOWN_PLACEHOLDERS:
                self.warnings.append(
                    ConfigValidationError(
                        field="classNameFormat",
                        error=f"Unknown placeholder {placeholder} will be kept verbatim",
                        suggestion=f"Recognized placeholders: {', '.join(KNOWN_PLACEHOLDERS)}",
                    )
                )

        if not any(placeholder in KNOWN_PLACEHOLDERS for placeholder in placeholders):
            self.warnings.append(
                ConfigValidationError(
                    field="classNameFormat",
                    error="Template has no placeholders; every testcase gets the same classname",
                    suggestion="Include {browser} and/or {suite}.",
                )
            )

    def _validate_with_pydantic(self, section: dict[str, Any]) -> None:
        try:
            JUnitReporterConfig.model_validate(section)
        except ValidationError as e:
            for error in e.errors():
                field_path = ".".join(str(loc) for loc in error["loc"])
                self.errors.append(
                    ConfigValidationError(
                        field=field_path,
                        error=error["msg"],
                        suggestion=self._get_pydantic_error_suggestion(error),
                    )
                )

    def _get_pydantic_error_suggestion(self, error: dict[str, Any]) -> str | None:
        """Generate helpful suggestions for Pydantic validation errors."""
        error_type = error.get("type", "")
        field = error.get("loc", [])[-1] if error.get("loc") else ""

        suggestions = {
            "string_type": f"'{field}' should be a text string, not a number or other type",
            "bool": f"'{field}' should be true or false",
            "value_error": "Check the field value meets the validation requirements",
        }

        for error_pattern, suggestion in suggestions.items():
            if error_pattern in error_type:
                return suggestion

        return None

    def _result(self) -> ValidationResult:
        return ValidationResult(
            valid=not self.has_errors, errors=self.errors, warnings=self.warnings
        )

    @property
    def has_errors(self) -> bool:
        """Check if there are any validation errors."""
        return len(self.errors) > 0


def validate_config(config_path: str | Path) -> ValidationResult:
    """Validate a configuration file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        ValidationResult with errors and warnings.
    """
    validator = ConfigValidator()
    return validator.validate_file(config_path)
