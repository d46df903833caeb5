"""Main entry point for the Insyd service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from insyd.config import AppConfig, EnvironmentConfig, load_config, validate_config_file
from insyd.config.exceptions import ConfigurationError
from insyd.logging import get_logger
from insyd.logging.config import configure_logging
from insyd.persistence import PersistenceError, close_database, init_database

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Insyd - notifications for the Insyd architecture community"
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve", "init-db", "check-config"],
        help="serve the HTTP API (default), create the database schema, or validate config",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument("--host", default=None, help="Bind address (overrides server.host)")
    parser.add_argument("--port", type=int, default=None, help="Port (overrides server.port)")
    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = build_parser().parse_args(argv)

    if args.command == "check-config" and args.config is not None:
        return 0 if validate_config_file(args.config) else 1

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        if args.command == "check-config":
            print("✓ Configuration is valid")
            return 0

        if args.command == "init-db":
            init_database(env_config.database_url)
            close_database()
            logger.info("Database schema ready", extra={"event": "cli.init_db.completed"})
            return 0

        from insyd.api import create_app

        host = args.host or app_config.server.host
        port = args.port or app_config.server.port
        logger.info(
            f"Insyd starting on {host}:{port}",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "audience_mode": app_config.notifications.audience_mode,
                "like_policy": app_config.notifications.like_policy,
            },
        )
        uvicorn.run(
            create_app(app_config, env_config),
            host=host,
            port=port,
            log_config=None,
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except PersistenceError as e:
        print(f"Database Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0


if __name__ == "__main__":
    sys.exit(main())
