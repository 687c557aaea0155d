# SPDX-License-Identifier: MPL-2.0
"""
Amber Electric API Client Module

This module handles querying site, price and usage data from the Amber Electric API.
Every request is authenticated with a bearer token and decoded into typed records.
"""

import requests
from typing import Any, List, Optional, Sequence, Type, TypeVar, Union
from datetime import date
import logging

from amber_client.models import (
    CurrentPriceWindow,
    SiteDetails,
    UsageRecord,
    parse_list,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AmberAPIError(Exception):
    """Base exception for Amber API client errors."""
    pass


class TransportError(AmberAPIError):
    """Network, DNS or TLS failure, or a request timeout."""
    pass


class DecodeError(AmberAPIError):
    """Response body does not match the expected schema."""
    pass


class HttpStatusError(AmberAPIError):
    """
    The API answered with a non-200 status code.

    Attributes:
        status_code (int): HTTP status code of the response
        body (str): Raw response body, kept verbatim for diagnostics
    """

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Received a non 200 status code of {status_code} with message body: {body}")
        self.status_code = status_code
        self.body = body


class EmptyResultError(AmberAPIError):
    """An array response held no elements where one was required."""
    pass


def first_record(records: Sequence[T], what: str) -> T:
    """
    Return the first record of an API response.

    Args:
        records: Decoded records
        what: Human readable name of the record kind, used in the error message

    Raises:
        EmptyResultError: If records is empty
    """
    if not records:
        raise EmptyResultError(f"No {what} returned by the Amber API")
    return records[0]


DateLike = Union[date, str]


class AmberClient:
    """
    Client for the Amber Electric REST API.

    The client only fixes the credential and the transport; each operation
    builds a fresh request URL from its arguments.

    Attributes:
        base_url (str): Base URL of the Amber API, without trailing slash
        timeout (float): Request timeout in seconds
        session (requests.Session): HTTP session for connection pooling
    """

    BASE_URL = "https://api.amber.com.au/v1"
    DEFAULT_RESOLUTION = 30

    def __init__(self, token: str, base_url: Optional[str] = None, timeout: float = 30):
        """
        Initialize the Amber API client.

        Args:
            token: Bearer token (the API key "psk")
            base_url: Base URL of the API (default: BASE_URL)
            timeout: Request timeout in seconds (default: 30)
        """
        if not token:
            raise ValueError("An API token is required")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.timeout = timeout
        self._token = token
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    @property
    def token(self) -> str:
        return self._token

    def __repr__(self) -> str:
        return f"AmberClient(base_url={self.base_url!r}, timeout={self.timeout}, token=<redacted>)"

    def sites_url(self) -> str:
        return f"{self.base_url}/sites"

    def current_prices_url(self, site_id: str, resolution: int = DEFAULT_RESOLUTION) -> str:
        return f"{self.base_url}/sites/{site_id}/prices/current?resolution={resolution}"

    def usage_url(
        self,
        site_id: str,
        start_date: DateLike,
        end_date: DateLike,
        resolution: int = DEFAULT_RESOLUTION
    ) -> str:
        start = start_date.isoformat() if isinstance(start_date, date) else start_date
        end = end_date.isoformat() if isinstance(end_date, date) else end_date
        return (
            f"{self.base_url}/sites/{site_id}/usage"
            f"?startDate={start}&endDate={end}&resolution={resolution}"
        )

    def _get_records(self, url: str, record_cls: Type[T]) -> List[T]:
        """
        Issue a GET request and decode the JSON array body.

        Args:
            url: Full request URL, including the query string
            record_cls: Record class used to decode each array element

        Returns:
            Decoded records in the order received

        Raises:
            HttpStatusError: If the status code is not 200
            TransportError: If the request could not be completed
            DecodeError: If the body is not valid JSON or does not match the schema
        """
        try:
            logger.debug(f"Fetching {record_cls.__name__} records from {url}")
            response = self.session.get(url, timeout=self.timeout, allow_redirects=False)

        except requests.exceptions.Timeout:
            error_msg = f"Request to {url} timed out after {self.timeout} seconds"
            logger.error(error_msg)
            raise TransportError(error_msg)

        except requests.exceptions.RequestException as e:
            error_msg = f"Request failed: {str(e)}"
            logger.error(error_msg)
            raise TransportError(error_msg)

        # redirects are not followed, a 3xx is reported as an HttpStatusError
        if response.status_code != 200:
            error = HttpStatusError(response.status_code, response.text)
            logger.error(str(error))
            raise error

        # requests' JSONDecodeError is a ValueError
        try:
            records = parse_list(record_cls, response.json())
        except (ValueError, KeyError, TypeError) as e:
            error_msg = f"Invalid JSON response for {record_cls.__name__}: {str(e)}"
            logger.error(error_msg)
            raise DecodeError(error_msg)

        logger.debug(f"Successfully retrieved {len(records)} {record_cls.__name__} records")
        return records

    def get_sites(self) -> List[SiteDetails]:
        """
        Fetch the sites linked to the account.

        Returns:
            List of SiteDetails in API order (never empty)

        Raises:
            EmptyResultError: If the account has no sites
            AmberAPIError: If the request fails (see _get_records)
        """
        sites = self._get_records(self.sites_url(), SiteDetails)
        if not sites:
            logger.error("No sites found for this account")
            raise EmptyResultError("No sites found for this account")
        return sites

    def get_current_prices(
        self,
        site_id: str,
        resolution: int = DEFAULT_RESOLUTION
    ) -> List[CurrentPriceWindow]:
        """
        Fetch the price windows for the current interval, one per channel.

        Args:
            site_id: Site identifier from get_sites()
            resolution: Interval length in minutes (default: 30)

        Returns:
            List of CurrentPriceWindow in API order
        """
        return self._get_records(self.current_prices_url(site_id, resolution), CurrentPriceWindow)

    def get_usage(
        self,
        site_id: str,
        start_date: DateLike,
        end_date: DateLike,
        resolution: int = DEFAULT_RESOLUTION
    ) -> List[UsageRecord]:
        """
        Fetch metered usage for a date range.

        Args:
            site_id: Site identifier from get_sites()
            start_date: First day of the range (date or 'YYYY-MM-DD')
            end_date: Last day of the range (date or 'YYYY-MM-DD')
            resolution: Interval length in minutes (default: 30)

        Returns:
            List of UsageRecord, one per metered interval, in API order
        """
        url = self.usage_url(site_id, start_date, end_date, resolution)
        return self._get_records(url, UsageRecord)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
        logger.debug("Amber API client session closed")

    def __enter__(self) -> 'AmberClient':
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
