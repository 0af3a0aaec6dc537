"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any


def setup_logging(level: int = logging.INFO) -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def positive_int(value: str, field_name: str = "value") -> int:
    """Parse a strictly positive integer for argparse arguments.

    Args:
        value: Raw command-line string.
        field_name: Name of the field for error messages.

    Returns:
        Parsed integer.

    Raises:
        argparse.ArgumentTypeError: If the value is not an integer greater than zero.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{field_name} must be an integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"{field_name} must be positive")
    return parsed


def save_jsonl_local(
    records: list[dict[str, Any]],
    prefix: str,
    timestamp: datetime,
    output_dir: str = "output",
) -> Path:
    """Save records to a local JSONL file.

    Args:
        records: List of dictionaries to save.
        prefix: Filename prefix (e.g., "briefs_technology").
        timestamp: Timestamp to include in filename.
        output_dir: Directory to save to (default: "output").

    Returns:
        Path to the created file.
    """
    output_path = Path(output_dir)
    output_path.mkdir(exist_ok=True)
    filename = f"{prefix}_{timestamp.strftime('%Y_%m_%d_%H_%M')}.jsonl"
    filepath = output_path / filename
    with filepath.open("w") as f:
        for record in records:
            f.write(json.dumps(record, default=str, ensure_ascii=False) + "\n")
    return filepath
