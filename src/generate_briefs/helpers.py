"""Helper functions for generate_briefs CLI."""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import Any

from common.cli_helpers import positive_int
from common.serialization import serialize_dataclass
from generate_briefs.models import GenerateBriefResult, SimpleBriefResult


def parse_generate_brief_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for generate_briefs."""

    parser = argparse.ArgumentParser(
        description="Generate a clustered news briefing for a feed profile",
    )

    # Input options
    parser.add_argument(
        "--profile",
        "-f",
        default=None,
        help="Feed profile to brief (default: app.default_profile from config)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config name under configs/ or path to a YAML file (default: $BRIEFING_CONFIG or 'default')",
    )

    # Pipeline options
    parser.add_argument(
        "--lookback-hours",
        type=lambda v: positive_int(v, "lookback-hours"),
        default=None,
        help="Only use articles published this many hours back",
    )
    parser.add_argument(
        "--min-articles",
        type=lambda v: positive_int(v, "min-articles"),
        default=None,
        help="Minimum eligible articles required",
    )
    parser.add_argument(
        "--n-clusters",
        type=lambda v: positive_int(v, "n-clusters"),
        default=None,
        help="Target number of clusters before capping",
    )
    parser.add_argument(
        "--simple",
        action="store_true",
        help="Generate a simple brief from the top-impact articles without clustering",
    )
    parser.add_argument(
        "--max-articles",
        type=lambda v: positive_int(v, "max-articles"),
        default=None,
        help="Articles used by --simple (default: processing.simple_brief_max_articles)",
    )

    # Informational commands
    parser.add_argument("--list-profiles", action="store_true", help="List configured feed profiles")
    parser.add_argument("--status", action="store_true", help="Show briefing history and API status")

    # Output options
    parser.add_argument("--load-s3", action="store_true", help="Upload the brief record to S3")
    parser.add_argument("--load-local", action="store_true", help="Save the brief record to a local file")

    return parser.parse_args(argv)


def build_brief_record(
    feed_profile: str,
    result: GenerateBriefResult | SimpleBriefResult,
    generated_at: datetime,
) -> dict[str, Any]:
    """Build a record for a generated brief."""
    record: dict[str, Any] = {
        "feed_profile": feed_profile,
        "generated_at": generated_at.isoformat(),
    }
    record.update(serialize_dataclass(result))
    return record
