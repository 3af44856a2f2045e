"""Backend record models for the four listing resources"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecordBase(BaseModel):
    """Read-only copy of a backend record.

    Every field is optional so that partially filled records still reach the
    presenter, which substitutes display fallbacks.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Booking(RecordBase):
    """A flight booking made by the current user"""
    booking_id: Optional[str] = Field(default=None, alias="bookingId")
    flight_name: Optional[str] = Field(default=None, alias="flightName")
    vendor_name: Optional[str] = Field(default=None, alias="vendorName")
    from_location: Optional[str] = Field(default=None, alias="from")
    to_location: Optional[str] = Field(default=None, alias="to")
    seats_booked: Optional[int] = Field(default=None, alias="seatsBooked")
    total_price: Optional[float] = Field(default=None, alias="totalPrice")
    booked_at: Optional[str] = Field(default=None, alias="bookedAt")


class Event(RecordBase):
    """A ticketed event"""
    id: Optional[str] = Field(default=None, alias="_id")
    event_name: Optional[str] = Field(default=None, alias="eventName")
    location: Optional[str] = None
    event_date: Optional[str] = Field(default=None, alias="eventDate")
    event_time: Optional[str] = Field(default=None, alias="eventTime")
    available_tickets: Optional[int] = Field(default=None, alias="availableTickets")
    total_tickets: Optional[int] = Field(default=None, alias="totalTickets")
    price: Optional[float] = None
    description: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class Guide(RecordBase):
    """A local guide offering hourly tours"""
    id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = None
    location: Optional[str] = None
    expertise_location: Optional[str] = Field(default=None, alias="expertiseLocation")
    hours_available: Optional[str] = Field(default=None, alias="hoursAvailable")
    price_per_hour: Optional[float] = Field(default=None, alias="pricePerHour")
    status: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @field_validator("hours_available", mode="before")
    @classmethod
    def _stringify_hours(cls, value: Any) -> Optional[str]:
        # The backend sends either a free-form range ("9am - 5pm") or a count.
        if value is None:
            return None
        return str(value)


class HolidayPackage(RecordBase):
    """A multi-day holiday package"""
    id: Optional[str] = Field(default=None, alias="_id")
    package_name: Optional[str] = Field(default=None, alias="packageName")
    location: Optional[str] = None
    total_days: Optional[int] = Field(default=None, alias="totalDays")
    cost: Optional[float] = None
    status: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
