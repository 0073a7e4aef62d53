"""Runtime wiring and command-line entry point for the job search service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from jobsearch.config.environment import EnvironmentConfig
from jobsearch.config.exceptions import ConfigurationError
from jobsearch.config.loader import load_config
from jobsearch.config.models import AppConfig
from jobsearch.logging import get_logger
from jobsearch.logging.config import configure_logging
from jobsearch.persistence.database import close_database, get_engine, init_database
from jobsearch.persistence.exceptions import PersistenceError
from jobsearch.search.engine import JobSearchEngine
from jobsearch.search.exceptions import InvalidSearchError
from jobsearch.search.service import JobSearchService
from jobsearch.search.vocabulary import build_vocabulary

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path] = None, log_level_override: Optional[str] = None
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and prepare runtime configuration.

    Log level priority: CLI > LOG_LEVEL environment variable > config file > INFO.

    Args:
        config_path: Optional path to configuration file
        log_level_override: Log level from CLI (takes precedence)

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with log_level resolved

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override.upper()
    elif env_config.log_level:
        # Environment variable already set
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_search_service(
    app_config: AppConfig, env_config: EnvironmentConfig
) -> JobSearchService:
    """
    Configure logging, open the store and build the search service.

    The vocabulary is built once here and shared by every search.

    Raises:
        ConfigurationError: If the vocabulary configuration is inconsistent
        DatabaseConnectionError: If the database cannot be initialized
    """
    configure_logging(
        level=env_config.log_level or "INFO",
        format_type=app_config.logging.format,
        environment=env_config.environment,
    )

    try:
        vocabulary = build_vocabulary(app_config.vocabulary)
    except ValueError as e:
        raise ConfigurationError(
            "Invalid vocabulary configuration",
            errors=[str(e)],
            suggestions=[
                "Add every title used in extra_title_mappings to extra_titles",
                "Review config.example.yaml for correct format",
            ],
        ) from e

    init_database(env_config.database_url)

    engine = JobSearchEngine(vocabulary=vocabulary, settings=app_config.search)
    service = JobSearchService(engine, settings=app_config.search)

    logger.info(
        "Search service initialized",
        extra={
            "event": "service.initialized",
            "dialect": get_engine().dialect.name,
            "synonym_count": len(vocabulary.synonyms),
            "title_count": len(vocabulary.titles),
            "default_limit": app_config.search.default_limit,
            "max_limit": app_config.search.max_limit,
        },
    )
    return service


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a single search from the command line and print the result as JSON.

    Returns:
        Exit code (0 success, 1 configuration or store failure, 2 invalid search)
    """
    parser = argparse.ArgumentParser(
        description="Job Posting Search - ranked search over stored job postings"
    )
    parser.add_argument("--text", default=None, help="Free-text query")
    parser.add_argument("--location", default=None, help="Location substring")
    parser.add_argument(
        "--email",
        dest="email_filter",
        default=None,
        choices=["present", "absent"],
        help="Only postings with (present) or without (absent) a contact email",
    )
    parser.add_argument("--limit", type=int, default=None, help="Page size (1-100)")
    parser.add_argument("--offset", type=int, default=None, help="Results to skip")
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

    args = parser.parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        service = build_search_service(app_config, env_config)
    except ConfigurationError as e:
        print(e.render(), file=sys.stderr)
        return 1
    except PersistenceError as e:
        print(f"Database error: {e}", file=sys.stderr)
        return 1

    try:
        result = service.search(
            text=args.text,
            location=args.location,
            email_filter=args.email_filter,
            limit=args.limit,
            offset=args.offset,
        )
    except InvalidSearchError as e:
        print(f"Invalid search: {e}", file=sys.stderr)
        return 2
    except PersistenceError as e:
        logger.error(
            f"Search failed: {e}",
            extra={"event": "service.search_failed", "retryable": e.retryable},
        )
        return 1
    finally:
        close_database()

    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
