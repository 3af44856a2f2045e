"""
Data models for the Travel Marketplace Browser.

This module defines the query and request structures shared by the listing
controller, the resources and the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple


SORT_ORDERS: Tuple[str, ...] = ("asc", "desc")


class ErrorKind(str, Enum):
    """Classification of a failed listing fetch."""
    NETWORK = "network"
    AUTH = "auth"


class FilterState(str, Enum):
    """Whether a query still equals its resource defaults."""
    DEFAULT = "default"
    MODIFIED = "modified"


@dataclass(frozen=True)
class SortSpec:
    """Sort selection for one listing.

    Attributes:
        field: Backend name of the sortable field (e.g. "eventDate")
        order: "asc" or "desc"
    """
    field: str
    order: str = "asc"

    def toggled(self) -> 'SortSpec':
        """Return the same field with the opposite order."""
        return SortSpec(self.field, "desc" if self.order == "asc" else "asc")


@dataclass(frozen=True)
class QueryState:
    """Combined filter and sort selection driving one listing fetch.

    Filter values are plain strings; an unset filter is the empty string.
    The filters are copied into a read-only mapping on construction, so a
    query can be shared between requests, defaults and fetch functions.

    Attributes:
        filters: Mapping of filter field name to its current value
        sort: Current sort selection
    """
    filters: Mapping[str, str] = field(default_factory=dict)
    sort: SortSpec = field(default_factory=lambda: SortSpec("createdAt"))

    def __post_init__(self):
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))

    def filter_value(self, name: str) -> str:
        """Return the value of a filter, or "" when it is not set."""
        return self.filters.get(name, "")

    def active_filters(self) -> Dict[str, str]:
        """Return only the filters holding a non-empty value."""
        return {name: value for name, value in self.filters.items() if value}

    def to_dict(self) -> dict:
        """Convert the query to a dictionary for logging and JSON output."""
        return {
            "filters": dict(self.filters),
            "sort": {"field": self.sort.field, "order": self.sort.order},
        }


@dataclass(frozen=True)
class ListingRequest:
    """An issued listing query.

    Attributes:
        sequence_number: Per-controller number, assigned at issue time
        snapshot: The effective query the request was issued for
    """
    sequence_number: int
    snapshot: QueryState


@dataclass(frozen=True)
class ListingResult:
    """The outcome of one ListingRequest.

    Exactly one of ``records`` and ``error`` is meaningful: a result with
    ``error`` set is a failure, otherwise ``records`` holds the (possibly
    empty) record set.
    """
    sequence_number: int
    records: Tuple[object, ...] = ()
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, sequence_number: int, records: Sequence[object]) -> 'ListingResult':
        return cls(sequence_number=sequence_number, records=tuple(records))

    @classmethod
    def failure(cls, sequence_number: int, error: ErrorKind) -> 'ListingResult':
        return cls(sequence_number=sequence_number, error=error)


@dataclass(frozen=True)
class ListingSnapshot:
    """Read-only view of a controller's state handed to the presentation layer.

    Attributes:
        query: The raw query as the user currently sees it
        records: The applied record set
        loading: True while the latest request is outstanding
        error: Kind of the last applied failure, if any
        filter_state: DEFAULT or MODIFIED
        settled: False until the first request has settled
    """
    query: QueryState
    records: Tuple[object, ...]
    loading: bool
    error: Optional[ErrorKind]
    filter_state: FilterState
    settled: bool = True
