"""Reporter configuration model and loading."""

import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from .env_expansion import expand_env_vars
from .junit_reporter import DEFAULT_CLASS_NAME_FORMAT

DEFAULT_OUTPUT_FILE = "junit-results.xml"

# Keys under which a host config nests the reporter's options
CONFIG_SECTIONS = ("junit2Reporter", "junit2_reporter")

CONFIG_SUFFIXES = (".yaml", ".yml", ".toml")

# Options where an empty value means "use the default"
_BLANK_DEFAULTS = {
    "output_file": DEFAULT_OUTPUT_FILE,
    "class_name_format": DEFAULT_CLASS_NAME_FORMAT,
}


class ConfigError(ValueError):
    """Raised when a reporter configuration cannot be loaded."""


class JUnitReporterConfig(BaseModel):
    """Options recognized by the JUnit reporter."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    output_file: str = Field(
        default=DEFAULT_OUTPUT_FILE,
        alias="outputFile",
        description="Report file name",
    )
    output_dir: str | None = Field(
        default=None,
        alias="outputDir",
        description="Directory for the report, created when missing",
    )
    class_name_format: str = Field(
        default=DEFAULT_CLASS_NAME_FORMAT,
        alias="classNameFormat",
        description="Testcase classname template with {browser} and {suite} placeholders",
    )
    console_summary: bool = Field(
        default=False,
        alias="consoleSummary",
        description="Print a per-browser summary table when the run completes",
    )

    @field_validator("output_file", "class_name_format", mode="before")
    @classmethod
    def _blank_uses_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return _BLANK_DEFAULTS[info.field_name]
        return value

    @field_validator("output_dir")
    @classmethod
    def _blank_dir_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def output_path(self) -> Path:
        """Where the report will be written."""
        if self.output_dir:
            return Path(self.output_dir) / self.output_file
        return Path(self.output_file)


def parse_config_text(content: str, suffix: str) -> dict[str, Any]:
    """Parse configuration file content.

    Args:
        content: File content.
        suffix: File extension.

    Returns:
        Parsed configuration dictionary.

    Raises:
        ValueError: If the format is not supported.
    """
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(content) or {}
    elif suffix == ".toml":
        return tomllib.loads(content)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")


def select_section(raw_config: dict[str, Any]) -> dict[str, Any]:
    """Return the reporter's section of a host config, or the config itself."""
    for key in CONFIG_SECTIONS:
        if key in raw_config:
            return raw_config[key] or {}
    return raw_config


def load_config(config_path: str | Path) -> JUnitReporterConfig:
    """Load reporter options from a YAML or TOML file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If the file is missing, unparsable, references unset
            environment variables or holds invalid options.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        raw_config = parse_config_text(path.read_text(), path.suffix)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, ValueError) as e:
        raise ConfigError(f"Failed to parse configuration file {path}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")

    try:
        section = expand_env_vars(select_section(raw_config))
    except ValueError as e:
        raise ConfigError(str(e)) from e

    try:
        return JUnitReporterConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid reporter configuration in {path}:\n{e}") from e
