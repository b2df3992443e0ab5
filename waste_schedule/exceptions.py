"""
This module defines custom exceptions for the garbage bin synchronization.
"""
from typing import Optional


class BinSyncError(Exception):
    """Base class for all errors raised by the synchronization."""

    pass


class ConfigurationError(BinSyncError):
    """Raised when the settings are missing or invalid."""

    pass


class AcquisitionError(BinSyncError):
    """Base class for errors while resolving or fetching a schedule. Aborts the pass."""

    pass


class ConnectError(AcquisitionError):
    """Custom exception for transport-level failures (DNS, timeout, refused)."""

    pass


class RemoteStatusError(AcquisitionError):
    """Custom exception for a non-2xx response from the remote."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Unexpected status code {status_code} from {url or 'remote'}")


class ParseError(AcquisitionError):
    """Custom exception for content that cannot be decoded into the expected shape."""

    def __init__(self, message: str, field: Optional[str] = None, position: Optional[int] = None):
        self.field = field
        self.position = position
        details = []
        if field is not None:
            details.append(f"field '{field}'")
        if position is not None:
            details.append(f"position {position}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class NoDataError(AcquisitionError):
    """Custom exception for a valid response that explicitly carries no schedule."""

    pass


class AddressNotFound(AcquisitionError):
    """Custom exception for an address lookup without exactly one match."""

    pass


class BrokerConnectionError(BinSyncError):
    """Raised when the MQTT broker cannot be reached."""

    pass


class PublishError(BinSyncError):
    """Raised when the broker client refuses or fails a publish."""

    pass


class EntityReportError(BinSyncError):
    """A publish failure scoped to a single entity. The pass continues."""

    def __init__(self, entity_key: str, step: str, cause: Exception, published: int = 0):
        self.entity_key = entity_key
        self.step = step
        self.cause = cause
        self.published = published
        super().__init__(f"Failed to report '{entity_key}' during {step}: {cause}")


class SessionTerminationError(BinSyncError):
    """Raised when the broker session cannot be closed cleanly."""

    pass


class SyncPassError(BinSyncError):
    """Aggregate error for a pass that was not completely successful."""

    def __init__(self, result):
        self.result = result
        super().__init__(result.describe())
