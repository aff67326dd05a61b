"""Command-line entry point for the TradeMatch engine."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from tradematch.config.environment import EnvironmentConfig
from tradematch.config.exceptions import ConfigurationError
from tradematch.config.loader import load_config
from tradematch.config.models import EngineConfig
from tradematch.domain.models import CandidateProfile, JobRequirement
from tradematch.logging import get_logger
from tradematch.logging.config import configure_logging
from tradematch.matching.engine import MatchScorer
from tradematch.matching.utils import build_rationale_dict
from tradematch.persistence.database import close_database, init_database
from tradematch.pipeline import CandidateFeedPipeline
from tradematch.ranking.models import FeedRow, FilterSpec, SortOrder

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[EngineConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI flag > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    engine_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = engine_config.logging.level

    return engine_config, env_config


def read_document(path: Path) -> Any:
    """Read a JSON or YAML input file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to read input file {path}: {e}",
            suggestions=["Pass a JSON or YAML file"],
        ) from e


def load_candidate(path: Path) -> CandidateProfile:
    return CandidateProfile.model_validate(read_document(path))


def load_job(path: Path) -> JobRequirement:
    return JobRequirement.model_validate(read_document(path))


def load_jobs(path: Path) -> List[JobRequirement]:
    document = read_document(path)
    if isinstance(document, dict):
        document = document.get("jobs", [])
    return [JobRequirement.model_validate(item) for item in document or []]


def row_summary(row: FeedRow) -> Dict[str, Any]:
    """JSON-ready view of a ranked row."""
    display = row.display_match
    job = row.job
    return {
        "job_id": job.id,
        "title": job.title,
        "employer_name": job.employer_name,
        "location": job.location,
        "source": job.source,
        "posted_at": job.posted_at.isoformat() if job.posted_at else None,
        "status": row.status,
        "score": display.score if display else None,
        "label": display.band.label if display else None,
        "score_source": display.source if display else None,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tradematch",
        description="TradeMatch engine - score and rank skilled-trade jobs for candidates",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    score_parser = subparsers.add_parser("score", help="Score one candidate against one job")
    score_parser.add_argument("--candidate", type=Path, required=True, help="Candidate JSON/YAML")
    score_parser.add_argument("--job", type=Path, required=True, help="Job JSON/YAML")

    rank_parser = subparsers.add_parser("rank", help="Score and rank a list of jobs")
    rank_parser.add_argument("--candidate", type=Path, required=True, help="Candidate JSON/YAML")
    rank_parser.add_argument("--jobs", type=Path, required=True, help="Job list JSON/YAML")
    rank_parser.add_argument(
        "--sort", choices=[order.value for order in SortOrder], default=None, help="Sort key"
    )
    rank_parser.add_argument("--query", default=None, help="Search title, employer, location")
    rank_parser.add_argument("--location", default=None, help="Location substring")
    rank_parser.add_argument("--source", default=None, help="Only jobs from this aggregator")
    rank_parser.add_argument(
        "--good-matches-only", action="store_true", help="Only scores of 70 and above"
    )
    rank_parser.add_argument(
        "--active-only", action="store_true", help="Drop postings marked inactive"
    )

    subparsers.add_parser("init-db", help="Create the lifecycle tables if missing")

    return parser


def run_score(args: argparse.Namespace) -> int:
    candidate = load_candidate(args.candidate)
    job = load_job(args.job)
    result = MatchScorer().score(candidate, job)
    print(json.dumps(build_rationale_dict(result), indent=2))
    return 0


def run_rank(args: argparse.Namespace, engine_config: EngineConfig) -> int:
    candidate = load_candidate(args.candidate)
    jobs = load_jobs(args.jobs)

    filters = FilterSpec(
        query=args.query,
        location=args.location,
        source=args.source,
        good_matches_only=args.good_matches_only,
        active_only=args.active_only,
        sort_by=args.sort or engine_config.ranking.default_sort,
    )
    pipeline = CandidateFeedPipeline(max_workers=engine_config.scoring.max_workers)
    result = pipeline.run(candidate, jobs, filters)

    print(
        json.dumps(
            {
                "candidate_id": result.candidate_id,
                "total_jobs": result.total_jobs,
                "returned": result.returned_count,
                "failed": result.failed_count,
                "rows": [row_summary(row) for row in result.rows],
            },
            indent=2,
        )
    )
    return 1 if result.had_errors else 0


def run_init_db(env_config: EnvironmentConfig) -> int:
    init_database(env_config.database_url)
    close_database()
    print(f"Database ready: {env_config.database_url}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = build_parser().parse_args(argv)

    try:
        engine_config, env_config = load_runtime_config(args.config, args.log_level)

        # Logs go to stderr; stdout carries command output
        configure_logging(
            level=env_config.log_level,
            format_type=engine_config.logging.format,
            environment=env_config.environment,
            stream=sys.stderr,
        )

        logger.debug(
            f"Running command {args.command}",
            extra={"event": "cli.command.starting", "command": args.command},
        )

        if args.command == "score":
            return run_score(args)
        if args.command == "rank":
            return run_rank(args, engine_config)
        return run_init_db(env_config)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "cli.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
