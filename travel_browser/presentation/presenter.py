"""
Result presenter.

Pure mapping from backend records to display-ready view models. Missing
fields get display fallbacks, dates and amounts are formatted, and long
identifiers are shortened. Records are never modified.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple, Type, Union

from travel_browser.records import Booking, Event, Guide, HolidayPackage


NOT_AVAILABLE = "N/A"
BOOKING_ID_LENGTH = 8


@dataclass(frozen=True)
class BookingView:
    booking_id: str
    title: str
    vendor_name: Optional[str]
    route: str
    seats: str
    total_price: str
    booked_at: Optional[str]


@dataclass(frozen=True)
class EventView:
    id: Optional[str]
    name: str
    location: str
    date: str
    time: str
    tickets: str
    price: str
    description: Optional[str]


@dataclass(frozen=True)
class GuideView:
    id: Optional[str]
    name: str
    location: str
    expertise: str
    hours: str
    price: str
    status_label: str
    available: bool


@dataclass(frozen=True)
class HolidayView:
    id: Optional[str]
    name: str
    location: str
    duration: str
    cost: str
    status: str
    available: bool


RecordView = Union[BookingView, EventView, GuideView, HolidayView]


def _parse_datetime(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Optional[str]) -> str:
    """Format an ISO date as a medium date, e.g. "Jan 5, 2025".

    Missing values become "N/A"; unparseable values are shown unchanged.
    """
    if not value:
        return NOT_AVAILABLE
    parsed = _parse_datetime(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_datetime(value: Optional[str]) -> str:
    """Format an ISO timestamp as "Jan 5, 2025, 02:30 PM"."""
    if not value:
        return NOT_AVAILABLE
    parsed = _parse_datetime(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}, {parsed:%I:%M %p}"


def format_amount(amount: Union[int, float]) -> str:
    """Format a number with grouping separators and up to three decimals.

    Examples:
        >>> format_amount(1234)
        '1,234'
        >>> format_amount(1234.5)
        '1,234.5'
    """
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.3f}".rstrip("0").rstrip(".")


def format_currency(amount: Optional[Union[int, float]], fallback: str = "0") -> str:
    if amount is None:
        return f"${fallback}"
    return f"${format_amount(amount)}"


def short_id(value: Optional[str]) -> str:
    """Return the last eight characters of an identifier, or "N/A"."""
    if not value:
        return NOT_AVAILABLE
    return value[-BOOKING_ID_LENGTH:]


def _text(value: Optional[str]) -> str:
    return value if value else NOT_AVAILABLE


def _count(value: Optional[int]) -> int:
    return value if value is not None else 0


def present_booking(booking: Booking) -> BookingView:
    seats = booking.seats_booked or 0
    return BookingView(
        booking_id=short_id(booking.booking_id),
        title=booking.flight_name or "Flight",
        vendor_name=booking.vendor_name or None,
        route=f"{_text(booking.from_location)} → {_text(booking.to_location)}",
        seats=f"{seats} seat{'' if seats == 1 else 's'}",
        total_price=format_currency(booking.total_price, fallback="0.00"),
        booked_at=f"Booked: {format_datetime(booking.booked_at)}" if booking.booked_at else None,
    )


def present_event(event: Event) -> EventView:
    return EventView(
        id=event.id,
        name=_text(event.event_name),
        location=_text(event.location),
        date=format_date(event.event_date),
        time=_text(event.event_time),
        tickets=f"{_count(event.available_tickets)} / {_count(event.total_tickets)} Tickets Available",
        price=f"{format_currency(event.price)} / ticket",
        description=event.description or None,
    )


def present_guide(guide: Guide) -> GuideView:
    available = guide.status == "free"
    return GuideView(
        id=guide.id,
        name=_text(guide.name),
        location=_text(guide.location),
        expertise=f"Expertise: {_text(guide.expertise_location)}",
        hours=_text(guide.hours_available),
        price=f"{format_currency(guide.price_per_hour)} / hour",
        status_label="Available" if available else "Occupied",
        available=available,
    )


def present_holiday(holiday: HolidayPackage) -> HolidayView:
    return HolidayView(
        id=holiday.id,
        name=_text(holiday.package_name),
        location=_text(holiday.location),
        duration=f"{_count(holiday.total_days)} Days",
        cost=format_currency(holiday.cost),
        status=_text(holiday.status),
        available=holiday.status == "available",
    )


PRESENTERS: Dict[Type, Callable] = {
    Booking: present_booking,
    Event: present_event,
    Guide: present_guide,
    HolidayPackage: present_holiday,
}


def present_record(record: object) -> RecordView:
    """Map any supported record to its view model.

    Raises:
        TypeError: If the record type has no presenter
    """
    presenter = PRESENTERS.get(type(record))
    if presenter is None:
        raise TypeError(f"No presenter for {type(record).__name__}")
    return presenter(record)


def present_records(records) -> Tuple[RecordView, ...]:
    return tuple(present_record(record) for record in records)
