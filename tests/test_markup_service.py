"""
Unit tests for the MarkupScheduleSource.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from waste_schedule.exceptions import NoDataError, ParseError
from waste_schedule.models import AddressId
from waste_schedule.services.markup_service import MarkupScheduleSource

FIXTURES = Path(__file__).parent / "fixtures"

ROW_TEMPLATE = """
<h3>Restaffald</h3>
<table><tr><th>Nr.</th></tr><tr>{cells}</tr></table>
"""


def test_parse_address_page():
    html = (FIXTURES / "address_page.html").read_text(encoding="utf-8")

    entries = MarkupScheduleSource().parse(html)

    assert len(entries) == 2
    first, second = entries
    assert first.name == "Restaffald"
    assert first.bin_id == "11064295"
    assert first.size == "240 L"
    assert first.frequency == "1 gang på 2 uger"
    assert first.raw_next_empty == "04/08"
    assert first.due_date is None
    assert first.entity_key == "11064295"
    assert second.name == "Mad- og drikkekartoner"
    assert second.raw_next_empty == "18/04"


def test_error_banner_raises_no_data_error():
    html = (FIXTURES / "address_page_error.html").read_text(encoding="utf-8")

    with pytest.raises(NoDataError, match="Der blev ikke fundet nogen adresse. Prøv igen."):
        MarkupScheduleSource().parse(html)


def test_page_without_containers_raises_no_data_error():
    with pytest.raises(NoDataError):
        MarkupScheduleSource().parse("<html><body><h2>Kongevejen 100</h2></body></html>")


def test_row_with_missing_cells_raises_parse_error():
    html = ROW_TEMPLATE.format(cells="<td>1</td><td>240 L</td><td>ugentlig</td>")

    with pytest.raises(ParseError) as exc_info:
        MarkupScheduleSource().parse(html)
    assert exc_info.value.field == "td"
    assert exc_info.value.position is not None


def test_invalid_day_month_raises_parse_error():
    html = ROW_TEMPLATE.format(cells="<td>1</td><td>240 L</td><td>ugentlig</td><td>i morgen</td>")

    with pytest.raises(ParseError) as exc_info:
        MarkupScheduleSource().parse(html)
    assert exc_info.value.field == "next_empty"


@patch("waste_schedule.services.schedule_service.requests.get")
def test_fetch_passes_id_as_query_parameter(mock_requests_get):
    response = MagicMock()
    response.text = (FIXTURES / "address_page.html").read_text(encoding="utf-8")
    response.raise_for_status.return_value = None
    mock_requests_get.return_value = response
    source = MarkupScheduleSource(base_url="http://mitaffald.test/")

    entries = source.fetch(AddressId(id="42"))

    assert len(entries) == 2
    args, kwargs = mock_requests_get.call_args
    assert args[0] == "http://mitaffald.test/Adresse/AdresseInfo"
    assert kwargs["params"] == {"address-selected-id": "42"}


def test_heading_without_table_does_not_take_the_next_table():
    html = """
    <h3>Kontakt</h3><p>Ring til kundeservice</p>
    <h3>Restaffald</h3>
    <table><tr><th>Nr.</th></tr><tr><td>1</td><td>240 L</td><td>ugentlig</td><td>04/08</td></tr></table>
    """

    entries = MarkupScheduleSource().parse(html)

    assert [entry.name for entry in entries] == ["Restaffald"]
    assert entries[0].raw_next_empty == "04/08"
