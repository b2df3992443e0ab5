"""
Unit tests for the runner.
"""

from unittest.mock import MagicMock, patch

import pytest

from bin_sync.app_factory import create_facade, create_registry
from bin_sync.main import run_once
from bin_sync.settings import load_settings
from waste_schedule.exceptions import BrokerConnectionError, SyncPassError
from waste_schedule.models import PassOutcome, PassResult
from waste_schedule.services.markup_service import MarkupScheduleSource
from waste_schedule.services.schedule_service import CalendarScheduleSource


@pytest.fixture
def settings():
    return load_settings({"AFFALDVARME_ADDRESS_ID": "123"})


@pytest.mark.parametrize("source, expected", [("calendar", CalendarScheduleSource), ("markup", MarkupScheduleSource)])
def test_create_facade_selects_source(source, expected):
    settings = load_settings({"AFFALDVARME_ADDRESS_ID": "123", "AFFALDVARME_SOURCE": source})

    facade = create_facade(settings)

    assert isinstance(facade.schedule_source, expected)


@patch("bin_sync.main.create_connection")
def test_run_once_success(mock_create_connection, settings):
    connection = mock_create_connection.return_value
    facade = MagicMock()
    registry = create_registry(settings)

    assert run_once(settings, facade, registry) is True

    connection.open.assert_called_once()
    facade.run_pass.assert_called_once_with(settings.address, registry, connection)
    connection.close.assert_called_once()


@patch("bin_sync.main.create_connection")
def test_run_once_failed_pass(mock_create_connection, settings):
    facade = MagicMock()
    facade.run_pass.side_effect = SyncPassError(PassResult(outcome=PassOutcome.PARTIAL, succeeded=1))

    assert run_once(settings, facade, MagicMock()) is False
    mock_create_connection.return_value.close.assert_called_once()


@patch("bin_sync.main.create_connection")
def test_run_once_broker_unavailable(mock_create_connection, settings):
    mock_create_connection.return_value.open.side_effect = BrokerConnectionError("refused")
    facade = MagicMock()

    assert run_once(settings, facade, MagicMock()) is False
    facade.run_pass.assert_not_called()
