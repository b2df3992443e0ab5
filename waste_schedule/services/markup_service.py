"""
This module defines the schedule source for the legacy HTML address page.

The page lists one block per container: an <h3> heading with the fraction
name followed by a table whose data rows hold the cells
id, size, frequency and next pickup as "DD/MM".
"""
import html
import logging
import re
from typing import List

from ..config import AFFALDVARME_MARKUP_URL
from ..exceptions import NoDataError, ParseError
from ..models import AddressId, ScheduleEntry
from .schedule_service import ScheduleSource

# Get a logger instance for this module
logger = logging.getLogger(__name__)

error_banner_pattern = re.compile(
    r"<div[^>]*class=\"[^\"]*alert-danger[^\"]*\"[^>]*>(.*?)</div>", re.IGNORECASE | re.DOTALL
)
container_pattern = re.compile(
    r"<h3[^>]*>(.*?)</h3>(?:(?!<h3).)*?<table[^>]*>(.*?)</table>", re.IGNORECASE | re.DOTALL
)
row_pattern = re.compile(r"<tr[^>]*>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
cell_pattern = re.compile(r"<td[^>]*>(.*?)</td>", re.IGNORECASE | re.DOTALL)
tag_pattern = re.compile(r"<[^>]+>")
day_month_pattern = re.compile(r"^\d{1,2}/\d{1,2}$")


def _clean(fragment: str) -> str:
    text = tag_pattern.sub("", fragment)
    return " ".join(html.unescape(text).split())


class MarkupScheduleSource(ScheduleSource):
    """Scrapes the legacy address page by pattern extraction."""

    def __init__(self, base_url: str = AFFALDVARME_MARKUP_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    def build_request(self, address_id: AddressId) -> tuple:
        return f"{self.base_url}/Adresse/AdresseInfo", {"address-selected-id": address_id.id}

    def parse(self, text: str) -> List[ScheduleEntry]:
        banner = error_banner_pattern.search(text)
        if banner:
            message = _clean(banner.group(1)) or "Error banner without text"
            logger.warning(f"Address page reported an error: {message}")
            raise NoDataError(message)

        entries = []
        for container in container_pattern.finditer(text):
            name = _clean(container.group(1))
            if not name:
                raise ParseError("Empty container heading", field="h3", position=container.start(1))

            table = container.group(2)
            table_offset = container.start(2)
            for row in row_pattern.finditer(table):
                cells = [_clean(cell) for cell in cell_pattern.findall(row.group(1))]
                if not cells:
                    # Header rows only hold <th> cells
                    continue
                position = table_offset + row.start()
                if len(cells) < 4:
                    raise ParseError(f"Expected 4 cells for '{name}', found {len(cells)}", field="td", position=position)

                bin_id, size, frequency, next_empty = cells[:4]
                if not bin_id:
                    raise ParseError(f"Missing container id for '{name}'", field="id", position=position)
                if not day_month_pattern.match(next_empty):
                    raise ParseError(f"Invalid next pickup '{next_empty}' for '{name}'", field="next_empty", position=position)

                entries.append(
                    ScheduleEntry(
                        name=name,
                        bin_id=bin_id,
                        size=size,
                        frequency=frequency,
                        raw_next_empty=next_empty,
                    )
                )

        if not entries:
            raise NoDataError("No containers found on the address page")
        return entries
