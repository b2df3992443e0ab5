"""
This module defines the AddressService for resolving free-form addresses.
"""
import json
import logging

import requests

from ..config import ADDRESS_LOOKUP_URL, HTTP_TIMEOUT_SECONDS
from ..exceptions import AddressNotFound, ConnectError, ParseError, RemoteStatusError
from ..models import AddressId, AddressSpec, TraditionalAddress

# Get a logger instance for this module
logger = logging.getLogger(__name__)


class AddressService:
    """Resolves addresses to the identifier used by the calendar endpoints."""

    def __init__(self, lookup_url: str = ADDRESS_LOOKUP_URL, timeout: int = HTTP_TIMEOUT_SECONDS):
        """
        Initializes the AddressService.

        Args:
            lookup_url: Base URL of the address lookup API.
            timeout: Timeout in seconds for the lookup request.
        """
        self.lookup_url = lookup_url.rstrip("/")
        self.timeout = timeout

    def resolve(self, address: AddressSpec) -> AddressId:
        """
        Returns the address id, looking it up when only a free-form address is configured.

        Raises:
            AddressNotFound: If the lookup does not yield exactly one match.
            ConnectError: If the lookup endpoint cannot be reached.
            RemoteStatusError: If the lookup endpoint answers with a non-2xx status.
            ParseError: If the lookup response is not JSON.
        """
        if isinstance(address, AddressId):
            return address
        return self.lookup_address(address)

    def lookup_address(self, address: TraditionalAddress) -> AddressId:
        """
        Looks up a free-form address. Exactly one match is required.

        Args:
            address: The street address to look up.

        Returns:
            The corresponding address id.
        """
        url = f"{self.lookup_url}/adresser"
        params = {"q": address.query(), "per_side": 2}

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 0
            raise RemoteStatusError(status_code, url) from e
        except requests.exceptions.RequestException as e:
            raise ConnectError(f"Error connecting to address lookup at {url}: {e}") from e

        try:
            matches = json.loads(response.text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Address lookup returned invalid JSON: {e.msg}", position=e.pos) from e

        if not isinstance(matches, list) or len(matches) != 1:
            count = len(matches) if isinstance(matches, list) else "no"
            logger.warning(f"Address '{address.query()}' gave {count} matches, expected exactly one.")
            raise AddressNotFound(f"Address not found: {address.query()}")

        kvhx = matches[0].get("kvhx") if isinstance(matches[0], dict) else None
        if not isinstance(kvhx, str) or not kvhx:
            raise AddressNotFound(f"Address not found: {address.query()}")

        logger.info(f"Found address ID {kvhx} for '{address.query()}'.")
        return AddressId(id=kvhx)
