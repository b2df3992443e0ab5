"""
This module defines the schedule sources for downloading and parsing pickup calendars.
"""
import json
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import requests

from ..config import AFFALDVARME_BASE_URL, HTTP_TIMEOUT_SECONDS
from ..exceptions import ConnectError, NoDataError, ParseError, RemoteStatusError
from ..models import AddressId, AddressSpec, ScheduleEntry
from .address_service import AddressService

# Get a logger instance for this module
logger = logging.getLogger(__name__)


class ScheduleSource(ABC):
    """Resolves an address and fetches its pickup schedule."""

    def __init__(
        self,
        base_url: str,
        address_service: Optional[AddressService] = None,
        timeout: int = HTTP_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.address_service = address_service or AddressService(timeout=timeout)
        self.timeout = timeout

    def fetch(self, address: AddressSpec) -> List[ScheduleEntry]:
        """
        Resolves the address and downloads and parses its schedule.

        Args:
            address: The configured address, either an id or a free-form address.

        Returns:
            A list of ScheduleEntry objects. Never empty.

        Raises:
            AddressNotFound: If a free-form address cannot be resolved.
            ConnectError: If the remote cannot be reached.
            RemoteStatusError: If the remote answers with a non-2xx status.
            ParseError: If the content cannot be parsed.
            NoDataError: If the remote explicitly has no schedule for the address.
        """
        address_id = self.address_service.resolve(address)
        text = self._download_text(address_id)
        return self.parse(text)

    def _download_text(self, address_id: AddressId) -> str:
        """Downloads the schedule content as a string."""
        url, params = self.build_request(address_id)
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 0
            raise RemoteStatusError(status_code, url) from e
        except requests.exceptions.RequestException as e:
            raise ConnectError(f"Error connecting to {url}: {e}") from e

        logger.info(f"Successfully downloaded schedule for address {address_id.id}")
        return response.text

    @abstractmethod
    def build_request(self, address_id: AddressId) -> tuple:
        """Returns the URL and query parameters for the schedule request."""

    @abstractmethod
    def parse(self, text: str) -> List[ScheduleEntry]:
        """Parses the downloaded content into schedule entries."""


class CalendarScheduleSource(ScheduleSource):
    """Reads the structured JSON calendar API."""

    def __init__(self, base_url: str = AFFALDVARME_BASE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    def build_request(self, address_id: AddressId) -> tuple:
        return f"{self.base_url}/api/calendar/address/{address_id.id}", None

    def parse(self, text: str) -> List[ScheduleEntry]:
        try:
            stands = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in calendar response: {e.msg}", position=e.pos) from e

        if not isinstance(stands, list):
            raise ParseError("Calendar response is not a list of stands")
        if not stands:
            raise NoDataError("No data found")

        # Only the first stand is used
        stand = stands[0]
        if not isinstance(stand, dict):
            raise ParseError("Stand is not an object", field="[0]")
        logger.info(f"Received information for stand: {stand.get('standName', 'unknown')}")

        planned_loads = stand.get("plannedLoads")
        if not isinstance(planned_loads, list):
            raise ParseError("Missing planned loads", field="plannedLoads")

        entries = []
        for index, load in enumerate(planned_loads):
            entries.extend(self._parse_load(load, index))

        if not entries:
            raise NoDataError("No planned loads found")
        return entries

    def _parse_load(self, load: Dict[str, Any], index: int) -> List[ScheduleEntry]:
        field_prefix = f"plannedLoads[{index}]"
        if not isinstance(load, dict):
            raise ParseError("Planned load is not an object", field=field_prefix)

        due_date = _parse_load_date(load.get("date"), f"{field_prefix}.date")

        fractions = load.get("fractions")
        if not isinstance(fractions, list):
            raise ParseError("Missing fractions", field=f"{field_prefix}.fractions")

        entries = []
        for position, name in enumerate(fractions):
            if not isinstance(name, str) or not name.strip():
                raise ParseError("Fraction name must be a non-empty string", field=f"{field_prefix}.fractions[{position}]")
            entries.append(ScheduleEntry(name=name.strip(), due_date=due_date))
        return entries


def _parse_load_date(value: Any, field_name: str) -> date:
    """Returns the calendar date of an ISO 8601 timestamp as stated by the remote."""
    if not isinstance(value, str):
        raise ParseError("Missing date", field=field_name)
    try:
        # fromisoformat() only accepts a trailing 'Z' from Python 3.11
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError as e:
        raise ParseError(f"Invalid date '{value}'", field=field_name) from e
