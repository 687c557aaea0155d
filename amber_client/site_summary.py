# SPDX-License-Identifier: MPL-2.0
"""
Amber Site Summary

Command line tool that prints a summary of an Amber Electric account:

1. Fetches the sites linked to the account and picks the first one
2. Fetches the current 30 minute price window for that site
3. Fetches the metered usage for a date range
4. Prints site details, the current price and usage totals
"""

import argparse
import configparser
import logging
import os
import sys
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import List, Optional

from amber_client.amber import (
    AmberAPIError,
    AmberClient,
    HttpStatusError,
    first_record,
)
from amber_client.models import CurrentPriceWindow, SiteDetails, UsageRecord

# Logger will be configured later based on config/CLI args
logger = logging.getLogger(__name__)

CONFIG_SEARCH_PATHS = [
    "amber-client.conf",
    "/etc/amber-client/amber-client.conf",
    "/run/amber-client/amber-client.conf",
    "/usr/lib/amber-client/amber-client.conf",
]

SEPARATOR = "-" * 67


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


@dataclass
class Config:
    """Application configuration."""
    base_url: str
    psk: str
    token_name: Optional[str] = None
    timeout: float = 30.0
    logging_level: str = 'WARNING'  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    def __repr__(self) -> str:
        return (
            f"Config(base_url={self.base_url!r}, token_name={self.token_name!r}, "
            f"timeout={self.timeout}, logging_level={self.logging_level!r})"
        )


@dataclass(frozen=True)
class SiteSummary:
    """Everything fetched for one run of the summary."""
    site: SiteDetails
    current_price: CurrentPriceWindow
    usage: List[UsageRecord]
    start_date: date
    end_date: date

    @property
    def total_kwh(self) -> float:
        return sum(record.kwh for record in self.usage)

    @property
    def total_cost_cents(self) -> float:
        return sum(record.cost_cents for record in self.usage)


def find_default_config() -> Optional[str]:
    """
    Find configuration file using standard search paths.

    Search order:
    1. ./amber-client.conf
    2. /etc/amber-client/amber-client.conf
    3. /run/amber-client/amber-client.conf
    4. /usr/lib/amber-client/amber-client.conf

    Returns:
        Path to first existing config file, or None if none found
    """
    for path in CONFIG_SEARCH_PATHS:
        if os.path.exists(path):
            logger.debug(f"Found configuration file: {path}")
            return path

    return None


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from INI file and optional credentials directory.

    The API token is read from a file named "psk" in $CREDENTIALS_DIRECTORY
    when present, otherwise from the [apitoken] section.

    Args:
        config_path: Path to configuration INI file. If None, searches default locations.

    Returns:
        Config object with all settings

    Raises:
        ConfigurationError: If configuration is invalid or the token is missing
    """
    if config_path is None:
        config_path = find_default_config()
        if config_path is None:
            raise ConfigurationError(
                "No configuration file found. Searched: " + ", ".join(CONFIG_SEARCH_PATHS)
            )

    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(config_path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")

    psk = None
    creds_dir = os.getenv('CREDENTIALS_DIRECTORY')
    if creds_dir:
        psk_file = Path(creds_dir) / "psk"
        if psk_file.exists():
            try:
                psk = psk_file.read_text().strip()
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigurationError(f"Cannot read psk from {creds_dir}: {e}")

    try:
        base_url = parser.get('amberconfig', 'base_url').strip()
        if not base_url:
            raise ConfigurationError("base_url must not be empty")

        if psk is None and parser.has_option('apitoken', 'psk'):
            psk = parser.get('apitoken', 'psk').strip()
        if not psk:
            raise ConfigurationError(
                "API token not configured: set psk in [apitoken] or provide "
                "a psk file in CREDENTIALS_DIRECTORY"
            )

        config = Config(base_url=base_url, psk=psk)

        if parser.has_option('apitoken', 'name'):
            config.token_name = parser.get('apitoken', 'name')

        if parser.has_option('amberconfig', 'timeout'):
            config.timeout = parser.getfloat('amberconfig', 'timeout')
            if config.timeout <= 0:
                raise ConfigurationError(f"timeout must be positive, got {config.timeout}")

        if parser.has_option('logging', 'level'):
            config.logging_level = parser.get('logging', 'level').upper()

        return config

    except (configparser.NoSectionError, configparser.NoOptionError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration value: {e}")


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> None:
    """
    Apply command line argument overrides to configuration.

    Args:
        config: Configuration object to modify
        args: Parsed command line arguments
    """
    if args.base_url:
        logger.debug(f"Overriding base URL with: {args.base_url}")
        config.base_url = args.base_url

    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {args.timeout}")
        logger.debug(f"Overriding timeout with: {args.timeout}")
        config.timeout = args.timeout

    if args.log_level:
        config.logging_level = args.log_level.upper()


def configure_logging(level: str) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }

    log_level = level_map.get(level.upper(), logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format='%(name)s - %(levelname)s - %(message)s',
        force=True,
    )

    logging.getLogger('amber_client.site_summary').setLevel(log_level)
    logging.getLogger('amber_client.amber').setLevel(log_level)


def parse_date(value: str) -> date:
    """
    Parse a date in YYYY-MM-DD format.

    Raises:
        argparse.ArgumentTypeError: If the value is not a valid date
    """
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def run_summary(client: AmberClient, start_date: date, end_date: date) -> SiteSummary:
    """
    Fetch site, current price and usage data in sequence.

    Each request depends on the site identifier returned by the first one,
    so any failure aborts the remaining steps.

    Args:
        client: Configured Amber API client
        start_date: First day of the usage range
        end_date: Last day of the usage range

    Returns:
        SiteSummary holding the first site, its first price window and all usage rows

    Raises:
        AmberAPIError: If any request fails or returns no data where one record is required
    """
    # one account has one site, only the first is used
    site = first_record(client.get_sites(), "sites")
    logger.info(f"Using site {site.id} (NMI {site.nmi})")

    current_price = first_record(client.get_current_prices(site.id), "current prices")

    usage = client.get_usage(site.id, start_date, end_date)
    logger.info(f"Retrieved {len(usage)} usage intervals from {start_date} to {end_date}")

    return SiteSummary(
        site=site,
        current_price=current_price,
        usage=usage,
        start_date=start_date,
        end_date=end_date,
    )


def render_summary(summary: SiteSummary) -> str:
    """Format a SiteSummary as plain text."""
    site = summary.site
    price = summary.current_price
    lines = [
        SEPARATOR,
        "My site details",
        f"Grid network: {site.network}",
        f"My house meter NMI number: {site.nmi}",
        f"Status: {site.status}",
        SEPARATOR,
        "Current 30min price window rate",
        f"Window starts at: {price.start_time.isoformat()}",
        f"Window ends at: {price.end_time.isoformat()}",
        f"Per KWH price(c/kWh): {price.per_kwh}",
        f"Is this window in a spike?: {price.spike_status}",
        f"Overall rate status: {price.descriptor}",
        SEPARATOR,
        f"Usage from {summary.start_date.isoformat()} to {summary.end_date.isoformat()}",
        f"Intervals: {len(summary.usage)}",
        f"Total usage (kWh): {summary.total_kwh:.3f}",
        f"Total cost (c): {summary.total_cost_cents:.2f}",
        SEPARATOR,
    ]
    return "\n".join(lines)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Amber Site Summary - shows site details, current price and usage'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration file (default: searches ./, /etc, /run, /usr/lib)'
    )
    parser.add_argument(
        '--start-date',
        type=parse_date,
        default=None,
        help='First day of the usage range in format YYYY-MM-DD (default: yesterday)'
    )
    parser.add_argument(
        '--end-date',
        type=parse_date,
        default=None,
        help='Last day of the usage range in format YYYY-MM-DD (default: today)'
    )
    parser.add_argument(
        '--base-url',
        type=str,
        default=None,
        help='Amber API base URL (overrides config file)'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Request timeout in seconds (default: 30)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (default: WARNING)'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the amber-summary command.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        apply_cli_overrides(config, args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.logging_level)
    logger.debug(f"Configuration loaded: {config!r}")

    end_date = args.end_date or date.today()
    start_date = args.start_date or end_date - timedelta(days=1)
    if start_date > end_date:
        print(f"Start date {start_date} is after end date {end_date}", file=sys.stderr)
        return 1

    with AmberClient(config.psk, base_url=config.base_url, timeout=config.timeout) as client:
        try:
            summary = run_summary(client, start_date, end_date)
        except HttpStatusError as e:
            print(f"Error fetching data: HTTP {e.status_code}", file=sys.stderr)
            print(e.body, file=sys.stderr)
            return 1
        except AmberAPIError as e:
            print(f"Error fetching data: {e}", file=sys.stderr)
            return 1

    print(render_summary(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
