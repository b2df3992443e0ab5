"""
This module defines the data models for the garbage bin synchronization.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Union


@dataclass(frozen=True)
class AddressId:
    """An address already resolved to the remote's identifier."""

    id: str


@dataclass(frozen=True)
class TraditionalAddress:
    """A free-form address that has to be looked up before fetching."""

    street_name: str
    street_no: str
    postal_code: str
    city: str

    def query(self) -> str:
        return f"{self.street_name} {self.street_no} {self.postal_code} {self.city}"


AddressSpec = Union[AddressId, TraditionalAddress]


@dataclass
class ScheduleEntry:
    """Represents a single pickup event for one waste fraction or bin."""

    name: str
    due_date: Optional[date] = None
    bin_id: Optional[str] = None
    size: Optional[str] = None
    frequency: Optional[str] = None
    raw_next_empty: Optional[str] = None

    @property
    def entity_key(self) -> str:
        """Bin id for markup entries, fraction name otherwise."""
        return self.bin_id or self.name


class PassOutcome(Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class PassResult:
    """The aggregate result of one synchronization pass."""

    outcome: PassOutcome
    succeeded: int = 0
    failures: List[Exception] = field(default_factory=list)
    termination_error: Optional[Exception] = None
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.outcome is PassOutcome.COMPLETE

    def describe(self) -> str:
        if self.outcome is PassOutcome.COMPLETE:
            return f"Reported {self.succeeded} entities"
        if self.outcome is PassOutcome.FAILED:
            cause = self.error if self.error is not None else f"all {len(self.failures)} entity reports failed"
            message = f"No entities updated: {cause}"
        else:
            message = (
                f"Partial success with {len(self.failures)} entity failures, "
                f"{self.succeeded} reported (some entities may have been updated)"
            )
        if self.termination_error is not None:
            message += f"; session termination failed: {self.termination_error}"
        return message
