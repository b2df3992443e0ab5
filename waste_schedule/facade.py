"""
This module defines the central facade that runs one synchronization pass.
"""

import logging
from datetime import date
from typing import Callable, List, Optional

from .exceptions import AcquisitionError, EntityReportError, SessionTerminationError, SyncPassError
from .models import AddressSpec, PassOutcome, PassResult
from .normalizer import normalize
from .services.discovery_service import DiscoveryRegistry
from .services.schedule_service import ScheduleSource

logger = logging.getLogger(__name__)


class SyncFacade:
    """
    The central entry point for synchronizing a schedule to the broker.
    It orchestrates the schedule source, the normalizer and the discovery registry.
    """

    def __init__(self, schedule_source: ScheduleSource, today: Optional[Callable[[], date]] = None):
        self.schedule_source = schedule_source
        self.today = today or date.today

    def run_pass(self, address: AddressSpec, registry: DiscoveryRegistry, connection) -> PassResult:
        """
        Runs one pass: fetch, normalize, report every entry, terminate the session.

        A failing entity does not stop the others. The session is terminated in
        every case, also when the schedule could not be acquired.

        Args:
            address: The configured address.
            registry: The process-wide DiscoveryRegistry.
            connection: An open BrokerConnection.

        Returns:
            A PassResult with outcome COMPLETE.

        Raises:
            SyncPassError: If the pass was not completely successful. Its result
                tells a total failure (nothing published) from a partial one. Every
                entity failing before its first message went out is a total failure.
        """
        logger.info("Starting synchronization pass")

        try:
            raw_entries = self.schedule_source.fetch(address)
            entries = normalize(raw_entries, today=self.today())
        except AcquisitionError as e:
            logger.warning(f"Could not acquire schedule, nothing will be published: {e}")
            termination_error = self._terminate(connection)
            result = PassResult(outcome=PassOutcome.FAILED, error=e, termination_error=termination_error)
            raise SyncPassError(result) from e

        logger.info(f"Reporting {len(entries)} entities")
        succeeded = 0
        failures: List[EntityReportError] = []
        for key in sorted(entries):
            try:
                registry.report(entries[key], connection)
                succeeded += 1
            except EntityReportError as e:
                logger.warning(f"Failed to report '{key}': {e}")
                failures.append(e)

        termination_error = self._terminate(connection)

        if failures or termination_error is not None:
            nothing_published = succeeded == 0 and all(failure.published == 0 for failure in failures)
            result = PassResult(
                outcome=PassOutcome.FAILED if failures and nothing_published else PassOutcome.PARTIAL,
                succeeded=succeeded,
                failures=failures,
                termination_error=termination_error,
            )
            logger.error(result.describe())
            raise SyncPassError(result)

        result = PassResult(outcome=PassOutcome.COMPLETE, succeeded=succeeded)
        logger.info(f"Synchronization pass finished: {result.describe()}")
        return result

    @staticmethod
    def _terminate(connection) -> Optional[SessionTerminationError]:
        try:
            connection.terminate()
        except SessionTerminationError as e:
            logger.warning(f"Failed to terminate broker session: {e}")
            return e
        return None
