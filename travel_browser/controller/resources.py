"""
Listing resources.

A ListingResource is the capability set a ListingController is parameterized
over: how to fetch records, the default query, which fields are sortable and
which filters are debounced text fields versus immediate enum fields.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Mapping, Sequence, Tuple

from travel_browser.backend import TravelApiClient
from travel_browser.models import QueryState, SortSpec


FetchFunction = Callable[[Mapping[str, str], SortSpec], Awaitable[Sequence[object]]]


@dataclass(frozen=True)
class ListingResource:
    """Everything a controller and the presenter need to know about one resource.

    Attributes:
        name: Resource key ("bookings", "events", "guides", "holidays")
        fetch: Coroutine function ``(filters, sort) -> records``
        default_query: Query used on activation and by clear_filters
        sortable_fields: Backend names accepted as sort fields
        text_filters: Filters that go through the debounce window
        enum_filters: Filters applied immediately, with their allowed values
        noun: Singular display noun ("event")
        plural: Plural display noun ("events")
        message_noun: Noun used in failure messages ("holiday packages")
        failure_verb: "load" or "fetch"
        empty_title: Heading of the empty-state view
        empty_hint: Explanation under the empty-state heading
        reset_label: Label of the empty-state affordance
        book_path: Path requested by the "book now" action
    """
    name: str
    fetch: FetchFunction
    default_query: QueryState
    sortable_fields: Tuple[str, ...]
    text_filters: Tuple[str, ...] = ()
    enum_filters: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    noun: str = "record"
    plural: str = "records"
    message_noun: str = "records"
    failure_verb: str = "fetch"
    empty_title: str = "No Records Found"
    empty_hint: str = "Try adjusting your search criteria"
    reset_label: str = "Clear Filters"
    book_path: str = "/home"

    @property
    def filter_fields(self) -> Tuple[str, ...]:
        return self.text_filters + tuple(self.enum_filters)

    @property
    def filterable(self) -> bool:
        return bool(self.filter_fields)

    def count_label(self, count: int) -> str:
        """Return e.g. "Found 1 event" / "Found 3 events"."""
        return f"Found {count} {self.noun if count == 1 else self.plural}"


def _blank_filters(*names: str) -> Dict[str, str]:
    return {name: "" for name in names}


def _optional(value: str):
    return value or None


def bookings_resource(client: TravelApiClient) -> ListingResource:
    """Bookings: no filters and no sort choice; shown in backend order."""

    async def fetch(filters: Mapping[str, str], sort: SortSpec) -> Sequence[object]:
        return await client.fetch_bookings()

    return ListingResource(
        name="bookings",
        fetch=fetch,
        default_query=QueryState(filters={}, sort=SortSpec("bookedAt", "desc")),
        sortable_fields=(),
        noun="booking",
        plural="bookings",
        message_noun="bookings",
        failure_verb="load",
        empty_title="No Bookings Yet",
        empty_hint="You haven't made any bookings yet.",
        reset_label="Book a Flight",
        book_path="/services/flights",
    )


def events_resource(client: TravelApiClient) -> ListingResource:
    """Events: location and date text filters."""

    async def fetch(filters: Mapping[str, str], sort: SortSpec) -> Sequence[object]:
        return await client.fetch_events(
            location=_optional(filters.get("location", "")),
            date=_optional(filters.get("date", "")),
            sort_by=sort.field,
            sort_order=sort.order,
        )

    return ListingResource(
        name="events",
        fetch=fetch,
        default_query=QueryState(
            filters=_blank_filters("location", "date"),
            sort=SortSpec("eventDate", "asc"),
        ),
        sortable_fields=("eventDate", "price", "createdAt"),
        text_filters=("location", "date"),
        noun="event",
        plural="events",
        message_noun="events",
        empty_title="No Events Found",
        book_path="/services/events",
    )


GUIDE_STATUSES = ("free", "occupied", "")


def guides_resource(client: TravelApiClient) -> ListingResource:
    """Guides: location and expertise text filters, immediate status filter."""

    async def fetch(filters: Mapping[str, str], sort: SortSpec) -> Sequence[object]:
        return await client.fetch_guides(
            location=_optional(filters.get("location", "")),
            expertise=_optional(filters.get("expertise", "")),
            status=filters.get("status", ""),
            sort_by=sort.field,
            sort_order=sort.order,
        )

    filters = _blank_filters("location", "expertise")
    filters["status"] = "free"
    return ListingResource(
        name="guides",
        fetch=fetch,
        default_query=QueryState(filters=filters, sort=SortSpec("pricePerHour", "asc")),
        sortable_fields=("pricePerHour", "createdAt"),
        text_filters=("location", "expertise"),
        enum_filters={"status": GUIDE_STATUSES},
        noun="guide",
        plural="guides",
        message_noun="guides",
        empty_title="No Guides Found",
        book_path="/services/guides",
    )


def holidays_resource(client: TravelApiClient) -> ListingResource:
    """Holiday packages: location text filter."""

    async def fetch(filters: Mapping[str, str], sort: SortSpec) -> Sequence[object]:
        return await client.fetch_holidays(
            location=_optional(filters.get("location", "")),
            sort_by=sort.field,
            sort_order=sort.order,
        )

    return ListingResource(
        name="holidays",
        fetch=fetch,
        default_query=QueryState(
            filters=_blank_filters("location"),
            sort=SortSpec("cost", "asc"),
        ),
        sortable_fields=("cost", "createdAt"),
        text_filters=("location",),
        noun="package",
        plural="packages",
        message_noun="holiday packages",
        empty_title="No Packages Found",
        book_path="/services/holidays",
    )


RESOURCE_FACTORIES: Dict[str, Callable[[TravelApiClient], ListingResource]] = {
    "bookings": bookings_resource,
    "events": events_resource,
    "guides": guides_resource,
    "holidays": holidays_resource,
}


def build_resource(name: str, client: TravelApiClient) -> ListingResource:
    """Build the named resource bound to ``client``.

    Raises:
        ValueError: If ``name`` is not a known resource
    """
    try:
        factory = RESOURCE_FACTORIES[name]
    except KeyError:
        raise ValueError(f"Unknown resource {name!r}; expected one of {sorted(RESOURCE_FACTORIES)}")
    return factory(client)
