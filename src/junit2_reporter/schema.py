"""JSON Schema generation for reporter configuration files.

The schema lets editors validate and complete the ``junit2Reporter``
section of a configuration file.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from .config import JUnitReporterConfig


def generate_json_schema() -> dict[str, Any]:
    """Generate JSON Schema for JUnitReporterConfig.

    Returns:
        JSON Schema dictionary compatible with JSON Schema Draft 2020-12.
    """
    adapter = TypeAdapter(JUnitReporterConfig)
    schema = adapter.json_schema(mode="validation", by_alias=True)

    schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
    schema["title"] = "junit2 Reporter Configuration"
    schema["description"] = (
        "Options for the junit2 reporter, which aggregates per-browser test "
        "results and writes a JUnit XML report at the end of a run."
    )
    schema["examples"] = [
        {
            "outputFile": "junit-results.xml",
            "outputDir": "reports/junit",
            "classNameFormat": "{browser}.{suite}",
        }
    ]

    return schema


def save_schema(output_path: Path | str) -> None:
    """Save JSON Schema to a file.

    Args:
        output_path: Path where the schema JSON file will be saved.
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(generate_json_schema(), f, indent=2)
