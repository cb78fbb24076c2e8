"""Writing finished reports to disk."""

import logging
from pathlib import Path

from .config import JUnitReporterConfig


def ensure_directory_exists(directory: Path, logger: logging.Logger) -> bool:
    """Create ``directory`` and its parents if it is missing.

    Returns:
        False if the directory could not be created.
    """
    if directory.exists():
        return True
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Failed to create directory: %s", directory)
        logger.error("%s", e)
        return False
    return True


def write_report(
    document: str,
    config: JUnitReporterConfig,
    logger: logging.Logger,
) -> Path | None:
    """Write a serialized report where the configuration says.

    Failures are logged, never raised.

    Args:
        document: Complete XML document.
        config: Reporter configuration.
        logger: Logger receiving success and failure messages.

    Returns:
        The written path, or None if the report could not be written.
    """
    if config.output_dir and not ensure_directory_exists(Path(config.output_dir), logger):
        return None

    output_path = config.output_path
    try:
        output_path.write_text(document, encoding="utf-8")
    except OSError as e:
        logger.error("Could not write JUnit report to: %s", output_path)
        logger.error("%s", e)
        return None

    logger.info("JUnit report written to: %s", output_path)
    return output_path
