"""
Listing controller module.

Provides the generic listing controller, the per-resource capability sets it
is parameterized over, and the query state transitions.
"""

from .listing_controller import ListingController
from .query_state import filter_state, with_filter, with_sort
from .resources import (
    RESOURCE_FACTORIES,
    ListingResource,
    bookings_resource,
    build_resource,
    events_resource,
    guides_resource,
    holidays_resource,
)

__all__ = [
    'ListingController',
    'ListingResource',
    'RESOURCE_FACTORIES',
    'bookings_resource',
    'build_resource',
    'events_resource',
    'filter_state',
    'guides_resource',
    'holidays_resource',
    'with_filter',
    'with_sort',
]
