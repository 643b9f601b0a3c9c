"""Run event detection on a JSON snapshot.

Input document keys: ``events``, ``contacts`` and ``existingGroups`` (camelCase
records as produced by venue discovery). Suggestions are written to stdout
as JSON.

Usage:
    python scripts/detect_events.py snapshot.json --pretty
"""

import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from event_detection.config.logging_config import get_logger, setup_logging
from event_detection.config.settings import Settings
from event_detection.domain.exceptions import EventDetectionError
from event_detection.use_cases.detect_event_clusters import run_event_detection

logger = get_logger(__name__)


def main() -> int:
    """Run detection and print suggestions."""
    parser = argparse.ArgumentParser(
        description="Detect event groups from venues and nearby contacts"
    )
    parser.add_argument("input", type=Path, help="JSON snapshot to analyze")
    parser.add_argument(
        "--time-window-days",
        type=int,
        default=None,
        help="Cluster time range length (default: from config)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Directory with YAML configs (default: config)",
    )
    parser.add_argument(
        "--ranked",
        action="store_true",
        help="Include ranked venues in the output",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent JSON output")

    args = parser.parse_args()

    settings = Settings(config_dir=args.config_dir)
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    try:
        with open(args.input, encoding="utf-8") as f:
            snapshot = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("snapshot_load_failed", path=str(args.input), error=str(e))
        return 1

    try:
        result = run_event_detection(
            snapshot.get("events", []),
            snapshot.get("contacts", []),
            snapshot.get("existingGroups", []),
            args.time_window_days,
            settings=settings,
        )
    except EventDetectionError as e:
        logger.error("event_detection_failed", error=str(e))
        return 1

    output: dict[str, object] = {
        "suggestions": [
            suggestion.model_dump(mode="json", by_alias=True)
            for suggestion in result.suggestions
        ]
    }
    if args.ranked:
        output["rankedEvents"] = [
            ranked.model_dump(mode="json", by_alias=True)
            for ranked in result.ranked_events
        ]

    sys.stdout.write(json.dumps(output, indent=2 if args.pretty else None) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
