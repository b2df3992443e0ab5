import argparse
import logging
import sys
import time

from waste_schedule.exceptions import BrokerConnectionError, ConfigurationError, SyncPassError

from .app_factory import create_connection, create_facade, create_registry
from .logging_config import setup_logging
from .settings import load_settings

logger = logging.getLogger(__name__)


def run_once(settings, facade, registry) -> bool:
    """Runs one pass on a fresh broker session. Returns True on complete success."""
    connection = create_connection(settings.mqtt)
    try:
        connection.open()
    except BrokerConnectionError as e:
        logger.error(f"Skipping pass, broker unavailable: {e}")
        return False

    try:
        facade.run_pass(settings.address, registry, connection)
    except SyncPassError as e:
        logger.error(f"Synchronization pass did not complete ({e.result.outcome.value}): {e}")
        return False
    finally:
        connection.close()
    return True


def main():
    parser = argparse.ArgumentParser(description="Publishes the garbage collection schedule to Home Assistant over MQTT.")
    parser.add_argument("--once", action="store_true", help="Run a single pass and exit.")
    args = parser.parse_args()

    setup_logging()
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    facade = create_facade(settings)
    registry = create_registry(settings)

    if args.once:
        sys.exit(0 if run_once(settings, facade, registry) else 1)

    logger.info(f"Synchronizing every {settings.interval_hours} hours.")
    while True:
        try:
            run_once(settings, facade, registry)
        except Exception as e:
            logger.exception(f"An error occurred in the synchronization loop: {e}")
        time.sleep(settings.interval_hours * 3600)


if __name__ == "__main__":
    main()
