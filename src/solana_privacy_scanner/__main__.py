"""CLI entry point for Solana Privacy Scanner.

This module provides the main entry point for scanning a wallet
from the command line.

Usage:
    python -m solana_privacy_scanner ADDRESS [options]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from typing import TYPE_CHECKING, NoReturn, assert_never, cast

from pydantic import ValidationError
from redis.asyncio import Redis

from solana_privacy_scanner import __version__
from solana_privacy_scanner.config import Settings, clear_settings_cache, get_settings
from solana_privacy_scanner.detector.models import RiskTier
from solana_privacy_scanner.ingestor.demo import DemoTransactionSource
from solana_privacy_scanner.ingestor.helius import HeliusClient
from solana_privacy_scanner.pipeline import PrivacyAnalyzer, TransactionSource
from solana_privacy_scanner.report.formatter import ReportFormatter

if TYPE_CHECKING:
    from solana_privacy_scanner.report.models import Report

# Application info
APP_NAME = "Solana Privacy Scanner"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_HIGH_RISK = 1
EXIT_CRITICAL_RISK = 2
EXIT_CONFIG_ERROR = 3
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="solana-privacy-scanner",
        description="Score the on-chain privacy exposure of a Solana wallet.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m solana_privacy_scanner ADDRESS              Scan a wallet
  python -m solana_privacy_scanner ADDRESS --json       Print the report as JSON
  python -m solana_privacy_scanner ADDRESS --demo       Scan synthetic demo history
  python -m solana_privacy_scanner --config-check       Validate config and exit

Exit codes:
  0  LOW or MEDIUM risk
  1  HIGH risk
  2  CRITICAL risk
  3  configuration error
        """,
    )

    parser.add_argument(
        "address",
        nargs="?",
        default=None,
        help="Solana wallet address to scan",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit without scanning",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Analyze synthetic demo history instead of fetching from Helius",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum transactions to fetch (default: from settings)",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Logs go to stderr so stdout carries only the report.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_banner() -> None:
    """Print the application banner."""
    print(f"{APP_NAME} v{APP_VERSION}")
    print()


def print_config_summary(settings: Settings) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
    """
    summary = settings.redacted_summary()
    helius = cast(dict[str, str], summary["helius"])
    print("Configuration:")
    print(f"  Helius API: {helius['api_url']}")
    print(f"  Helius API Key: {helius['api_key']}")
    print(f"  RPC: {summary['rpc_url']}")
    print(f"  Redis: {summary['redis_url']}")
    print(f"  Max Transactions: {summary['max_transactions']}")
    print(f"  Compliance Concurrency: {summary['compliance_concurrency']}")
    print(f"  Log Level: {summary['log_level']}")
    print()


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        # Clear cache to force reload
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings)

    print("Checking component availability...")

    if settings.helius.enabled:
        print("  Helius: configured")
    else:
        print("  Helius: not configured (scans will use demo data)")

    if settings.redis.enabled:
        print("  Redis cache: configured")
    else:
        print("  Redis cache: not configured")

    print()
    print("All checks passed. Ready to scan.")
    return EXIT_SUCCESS


def exit_code_for(tier: RiskTier) -> int:
    """Map a risk tier to the process exit code."""
    match tier:
        case RiskTier.LOW | RiskTier.MEDIUM:
            return EXIT_SUCCESS
        case RiskTier.HIGH:
            return EXIT_HIGH_RISK
        case RiskTier.CRITICAL:
            return EXIT_CRITICAL_RISK
        case _:
            assert_never(tier)


def create_source(
    settings: Settings, *, demo: bool, redis: Redis | None = None
) -> TransactionSource:
    """Choose the transaction source for a scan.

    Demo data is used when requested or when no Helius API key is set.
    """
    logger = logging.getLogger(__name__)
    if demo:
        return DemoTransactionSource()
    if not settings.helius.enabled:
        logger.warning("HELIUS_API_KEY is not set, analyzing demo data")
        return DemoTransactionSource()
    return HeliusClient.from_settings(settings, redis=redis)


async def run_scan(
    settings: Settings,
    address: str,
    *,
    demo: bool = False,
    limit: int | None = None,
) -> Report:
    """Scan a wallet with resources scoped to the call.

    Args:
        settings: Application settings.
        address: Wallet address to scan.
        demo: Whether to analyze demo data.
        limit: Override for the maximum transactions fetched.

    Returns:
        The privacy report.
    """
    redis: Redis | None = None
    if settings.redis.url and not demo:
        redis = Redis.from_url(settings.redis.url)

    source = create_source(settings, demo=demo, redis=redis)
    try:
        analyzer = PrivacyAnalyzer.from_settings(settings, source)
        if limit is not None:
            analyzer.history_limit = limit
        return await analyzer.scan(address)
    finally:
        if isinstance(source, HeliusClient):
            await source.close()
        if redis is not None:
            await redis.aclose()


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate configuration first
    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    # Determine effective log level
    log_level = args.log_level or settings.log_level
    configure_logging(log_level)

    # Config check mode
    if args.config_check:
        print_banner()
        sys.exit(run_config_check(settings))

    if not args.address:
        parser.error("the following arguments are required: address")

    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be at least 1")

    try:
        report = asyncio.run(run_scan(settings, args.address, demo=args.demo, limit=args.limit))
    except KeyboardInterrupt:
        sys.exit(EXIT_INTERRUPTED)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_banner()
        print(ReportFormatter().format(report))

    sys.exit(exit_code_for(report.risk_tier))


if __name__ == "__main__":
    main()
