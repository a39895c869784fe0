"""CLI entry point for running one content pipeline stage or housekeeping job locally."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[4]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.shared.utils.config_validator import ConfigurationError
from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from src.functions.content_pipeline.core.contracts.errors import RecordStoreError
from src.functions.content_pipeline.core.orchestration.factory import PipelineFactory

LOG = logging.getLogger(__name__)

JOBS: Dict[str, Callable[[PipelineFactory, Optional[int]], Dict[str, Any]]] = {
    "content": lambda factory, limit: factory.content_worker().run_batch(limit).to_response(),
    "script": lambda factory, limit: factory.script_worker().run_batch(limit).to_response(),
    "audio": lambda factory, limit: factory.audio_worker().run_batch(limit).to_response(),
    "cleanup": lambda factory, limit: factory.stuck_recovery().run().to_response(),
    "expire": lambda factory, limit: factory.expiration().run().to_response(),
    "health": lambda factory, limit: factory.monitor().check().to_response(),
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a content pipeline stage or housekeeping job.")
    parser.add_argument("job", choices=sorted(JOBS), help="Stage or job to run")
    parser.add_argument("--limit", type=int, help="Override the batch size for stage jobs")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--output",
        choices=("text", "json"),
        default="text",
        help="Output format for results (default: text)",
    )
    return parser.parse_args(argv)


def run(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    load_env()
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        factory = PipelineFactory.from_env()
    except ConfigurationError as exc:
        LOG.error("%s", exc)
        return 1

    try:
        output = JOBS[args.job](factory, args.limit)
    except RecordStoreError as exc:
        LOG.error("Job %s could not read its records: %s", args.job, exc)
        return 1

    if args.output == "json":
        json.dump(output, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
    else:
        _print_summary(args.job, output)

    # Health reports carry failed_count as a pipeline metric, not a job failure
    failed = output.get("failed_count") if "stage" in output else 0
    return 2 if failed or output.get("errors") else 0


def _print_summary(job: str, output: Dict[str, Any]) -> None:
    summary = ", ".join(
        f"{key}={value}"
        for key, value in output.items()
        if key not in {"errors", "success", "issues", "recommendations"} and not isinstance(value, dict)
    )
    LOG.info("%s complete: %s", job, summary)
    for issue in output.get("issues") or []:
        LOG.warning("Issue: %s", issue)
    for recommendation in output.get("recommendations") or []:
        LOG.info("Recommendation: %s", recommendation)
    errors = output.get("errors") or []
    if errors:
        LOG.warning("Encountered %s errors", len(errors))
        for message in errors:
            LOG.warning("  %s", message)


if __name__ == "__main__":  # pragma: no cover - manual execution entry
    sys.exit(run())
