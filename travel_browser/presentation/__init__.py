"""
Presentation module for listing results.

Provides the pure record presenters and the listing view renderer.
"""

from .listing_view import (
    CLEAR_FILTERS_ACTION,
    FAILURE_HINT,
    NAVIGATE_ACTION,
    EmptyState,
    ListingView,
    format_card,
    format_listing_view,
    render_listing,
)
from .presenter import (
    BookingView,
    EventView,
    GuideView,
    HolidayView,
    format_amount,
    format_currency,
    format_date,
    format_datetime,
    present_booking,
    present_event,
    present_guide,
    present_holiday,
    present_record,
    present_records,
    short_id,
)

__all__ = [
    'CLEAR_FILTERS_ACTION',
    'FAILURE_HINT',
    'NAVIGATE_ACTION',
    'BookingView',
    'EmptyState',
    'EventView',
    'GuideView',
    'HolidayView',
    'ListingView',
    'format_amount',
    'format_card',
    'format_currency',
    'format_date',
    'format_datetime',
    'format_listing_view',
    'present_booking',
    'present_event',
    'present_guide',
    'present_holiday',
    'present_record',
    'present_records',
    'render_listing',
    'short_id',
]
