"""
Listing screen rendering.

Maps a controller snapshot to the loading, empty-state or result-card view of
one listing, and formats that view for console output.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from travel_browser.controller.resources import ListingResource
from travel_browser.models import ListingSnapshot
from travel_browser.notifications import Notification
from travel_browser.presentation.presenter import (
    BookingView,
    EventView,
    GuideView,
    HolidayView,
    RecordView,
    present_records,
)


CLEAR_FILTERS_ACTION = "clear_filters"
NAVIGATE_ACTION = "navigate"
FAILURE_HINT = "Something went wrong. Please try again."


@dataclass(frozen=True)
class EmptyState:
    """Shown when a listing settles with no records.

    Attributes:
        title: Heading, e.g. "No Packages Found"
        hint: Explanation under the heading
        action_label: Label of the reset affordance
        action: CLEAR_FILTERS_ACTION or NAVIGATE_ACTION
        action_path: Target path when action is NAVIGATE_ACTION
    """
    title: str
    hint: str
    action_label: str
    action: str
    action_path: Optional[str] = None


@dataclass(frozen=True)
class ListingView:
    """One rendered listing screen.

    Exactly one of the loading message, the failure hint, the empty state and
    the cards is shown.
    """
    resource: str
    status_line: str
    loading: bool
    loading_message: Optional[str] = None
    empty_state: Optional[EmptyState] = None
    cards: Tuple[RecordView, ...] = ()
    failed: bool = False
    failure_hint: Optional[str] = None


def render_listing(resource: ListingResource, snapshot: ListingSnapshot) -> ListingView:
    """Build the view of one listing from a controller snapshot.

    A settled empty record set renders the empty state. A failure that left no
    records to show renders a failure view instead, so the two are never
    confused; failures that keep earlier records show those records.
    """
    if snapshot.loading or not snapshot.settled:
        return ListingView(
            resource=resource.name,
            status_line="Loading...",
            loading=True,
            loading_message=f"Loading {resource.plural}...",
        )

    if snapshot.error is not None and not snapshot.records:
        return ListingView(
            resource=resource.name,
            status_line=f"Couldn't load {resource.plural}",
            loading=False,
            failed=True,
            failure_hint=FAILURE_HINT,
        )

    status_line = resource.count_label(len(snapshot.records))
    if not snapshot.records:
        return ListingView(
            resource=resource.name,
            status_line=status_line,
            loading=False,
            empty_state=_empty_state(resource),
        )

    return ListingView(
        resource=resource.name,
        status_line=status_line,
        loading=False,
        cards=present_records(snapshot.records),
    )


def _empty_state(resource: ListingResource) -> EmptyState:
    if resource.filterable:
        return EmptyState(
            title=resource.empty_title,
            hint=resource.empty_hint,
            action_label=resource.reset_label,
            action=CLEAR_FILTERS_ACTION,
        )
    return EmptyState(
        title=resource.empty_title,
        hint=resource.empty_hint,
        action_label=resource.reset_label,
        action=NAVIGATE_ACTION,
        action_path=resource.book_path,
    )


def format_card(card: RecordView) -> str:
    """
    Format one result card for console output.

    Args:
        card: View model produced by the presenter

    Returns:
        Multi-line string ending with a blank line
    """
    lines: List[str] = []

    if isinstance(card, BookingView):
        lines.append(f"✈️  {card.title}")
        if card.vendor_name:
            lines.append(f"   {card.vendor_name}")
        lines.append(f"   Route: {card.route}")
        lines.append(f"   Seats: {card.seats}")
        lines.append(f"   Total: {card.total_price}")
        if card.booked_at:
            lines.append(f"   {card.booked_at}")
        lines.append(f"   Booking ID: {card.booking_id}")
    elif isinstance(card, EventView):
        lines.append(f"🎉 {card.name}")
        lines.append(f"   Location: {card.location}")
        lines.append(f"   Date: {card.date} {card.time}")
        lines.append(f"   {card.tickets}")
        lines.append(f"   Price: {card.price}")
        if card.description:
            lines.append(f"   {card.description}")
    elif isinstance(card, GuideView):
        lines.append(f"🧭 {card.name}")
        lines.append(f"   Location: {card.location}")
        lines.append(f"   {card.expertise}")
        lines.append(f"   Hours: {card.hours}")
        lines.append(f"   Price: {card.price}")
        lines.append(f"   {'✅ ' if card.available else ''}{card.status_label}")
    elif isinstance(card, HolidayView):
        lines.append(f"🏝️  {card.name}")
        lines.append(f"   Location: {card.location}")
        lines.append(f"   Duration: {card.duration}")
        lines.append(f"   Cost: {card.cost}")
        lines.append(f"   Status: {card.status}")

    lines.append("")  # Blank line for spacing

    return "\n".join(lines)


def format_listing_view(view: ListingView, notification: Optional[Notification] = None) -> str:
    """
    Format a listing view, and the visible notification if any, for console output.

    Args:
        view: Rendered listing
        notification: Currently visible notification

    Returns:
        Formatted string representation of the listing
    """
    output = []

    if notification is not None:
        marker = "❌" if notification.kind == "error" else "ℹ️ "
        output.append(f"{marker} {notification.message}\n")

    output.append(f"\n{'='*60}\n")
    output.append(f"{view.status_line}\n")
    output.append(f"{'='*60}\n\n")

    if view.loading:
        output.append(f"{view.loading_message}\n")
    elif view.failed:
        output.append(f"{view.failure_hint}\n")
    elif view.empty_state is not None:
        empty = view.empty_state
        output.append(f"{empty.title}\n")
        output.append(f"{empty.hint}\n")
        output.append(f"[{empty.action_label}]\n")
    else:
        for card in view.cards:
            output.append(format_card(card) + "\n")

    return "".join(output)
