"""
Property-based and scenario tests for the listing controller.

These tests verify request issuance, debounce behaviour, stale-response
rejection, loading/error state and teardown of the generic controller.
"""

import asyncio

import pytest
from hypothesis import given, settings, strategies as st

from travel_browser.config import AuthRedirectConfig, BrowserSettings, DebounceConfig
from travel_browser.controller import ListingController, ListingResource
from travel_browser.error_handling import ClassifiedError, ControllerDisposedError
from travel_browser.models import ErrorKind, FilterState, QueryState, SortSpec
from travel_browser.navigation import RecordingNavigator
from travel_browser.notifications import InMemoryNotificationChannel
from travel_browser.presentation import CLEAR_FILTERS_ACTION, render_listing
from travel_browser.records import HolidayPackage


WINDOW_MS = 100
SETTLE_SECONDS = WINDOW_MS * 3 / 1000


class ControlledBackend:
    """Fetch function whose responses are released by the test."""

    def __init__(self):
        self.calls = []

    async def fetch(self, filters, sort):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((dict(filters), sort, future))
        return await future

    def respond(self, index, records):
        self.calls[index][2].set_result(records)

    def fail(self, index, error):
        self.calls[index][2].set_exception(error)


class ImmediateBackend:
    """Fetch function that answers every call at once."""

    def __init__(self, records=(), error=None):
        self.records = list(records)
        self.error = error
        self.calls = []

    async def fetch(self, filters, sort):
        self.calls.append((dict(filters), sort))
        if self.error is not None:
            raise self.error
        return self.records


def holiday_resource(fetch):
    return ListingResource(
        name="holidays",
        fetch=fetch,
        default_query=QueryState(filters={"location": ""}, sort=SortSpec("cost", "asc")),
        sortable_fields=("cost", "createdAt"),
        text_filters=("location",),
        noun="package",
        plural="packages",
        message_noun="holiday packages",
        empty_title="No Packages Found",
    )


def guide_resource(fetch):
    return ListingResource(
        name="guides",
        fetch=fetch,
        default_query=QueryState(
            filters={"location": "", "expertise": "", "status": "free"},
            sort=SortSpec("pricePerHour", "asc"),
        ),
        sortable_fields=("pricePerHour", "createdAt"),
        text_filters=("location", "expertise"),
        enum_filters={"status": ("free", "occupied", "")},
        noun="guide",
        plural="guides",
        message_noun="guides",
    )


def bookings_resource(fetch):
    return ListingResource(
        name="bookings",
        fetch=fetch,
        default_query=QueryState(filters={}, sort=SortSpec("bookedAt", "desc")),
        sortable_fields=(),
        noun="booking",
        plural="bookings",
        message_noun="bookings",
        failure_verb="load",
    )


def make_controller(resource, window_ms=WINDOW_MS, redirect_ms=100):
    browser_settings = BrowserSettings(
        debounce=DebounceConfig(window_ms=window_ms),
        auth_redirect=AuthRedirectConfig(delay_ms=redirect_ms),
    )
    notifications = InMemoryNotificationChannel()
    navigator = RecordingNavigator()
    controller = ListingController(resource, notifications, navigator, browser_settings)
    return controller, notifications, navigator


async def yield_to_loop(times=5):
    for _ in range(times):
        await asyncio.sleep(0)


def package(name, cost=100):
    return HolidayPackage(package_name=name, location="Alps", total_days=5, cost=cost, status="available")


@pytest.mark.asyncio
async def test_activation_issues_default_query():
    """On activation exactly one request for the resource defaults is issued."""
    backend = ImmediateBackend([package("Alps Escape")])
    resource = holiday_resource(backend.fetch)
    controller, notifications, _ = make_controller(resource)

    request = controller.activate()
    assert request.sequence_number == 1
    assert request.snapshot == resource.default_query
    assert controller.loading

    await controller.wait_idle()

    assert not controller.loading
    assert [p.package_name for p in controller.results] == ["Alps Escape"]
    assert controller.error is None
    assert notifications.current is None
    assert controller.filter_state is FilterState.DEFAULT
    await controller.aclose()


@pytest.mark.asyncio
async def test_rapid_text_edits_issue_one_request_for_final_value():
    """
    **Feature: travel-marketplace-browser, Property 2: Debounced text filters**

    Edits arriving faster than the quiescence window issue no request until
    input is stable, and then only the final value is queried.
    """
    backend = ImmediateBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await controller.wait_idle()

    for text in ["P", "Pa", "Par", "Pari", "Paris"]:
        controller.set_filter("location", text)
        await asyncio.sleep(WINDOW_MS / 5 / 1000)
        assert len(controller.requests_issued) == 1, "No request may be issued inside the window"

    assert controller.query.filter_value("location") == "Paris"
    assert controller.effective_query.filter_value("location") == ""

    await asyncio.sleep(SETTLE_SECONDS)
    await controller.wait_idle()

    assert len(controller.requests_issued) == 2
    assert controller.last_request.snapshot.filter_value("location") == "Paris"
    assert backend.calls[-1][0] == {"location": "Paris"}
    await controller.aclose()


@pytest.mark.asyncio
async def test_edit_reverted_inside_window_issues_nothing():
    """Typing and deleting within one window settles on an unchanged query."""
    backend = ImmediateBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await controller.wait_idle()

    controller.set_filter("location", "Rome")
    controller.set_filter("location", "")
    await asyncio.sleep(SETTLE_SECONDS)
    await controller.wait_idle()

    assert len(controller.requests_issued) == 1
    await controller.aclose()


@pytest.mark.asyncio
async def test_sort_toggled_twice_issues_two_immediate_requests():
    """
    **Feature: travel-marketplace-browser, Property 8: Sort changes are not debounced**

    asc -> desc -> asc with no filter change issues exactly two requests,
    both without waiting for the debounce window.
    """
    backend = ImmediateBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch), window_ms=10_000)
    controller.activate()
    await controller.wait_idle()

    controller.set_sort(order="desc")
    controller.set_sort(order="asc")

    assert len(controller.requests_issued) == 3
    orders = [r.snapshot.sort.order for r in controller.requests_issued[1:]]
    assert orders == ["desc", "asc"]
    await controller.aclose()


@pytest.mark.asyncio
async def test_toggle_sort_order_and_same_sort_is_noop():
    backend = ImmediateBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()

    controller.set_sort("cost", "asc")
    assert len(controller.requests_issued) == 1

    controller.toggle_sort_order()
    assert controller.query.sort == SortSpec("cost", "desc")
    assert len(controller.requests_issued) == 2
    await controller.aclose()


@pytest.mark.asyncio
async def test_clear_filters_bypasses_debounce():
    """
    **Feature: travel-marketplace-browser, Property 3: Reset uses defaults immediately**

    clear_filters issues a request for exactly the default query without
    waiting, and the pending edit never fires afterwards.
    """
    backend = ImmediateBackend()
    resource = holiday_resource(backend.fetch)
    controller, _, _ = make_controller(resource)
    controller.activate()
    await controller.wait_idle()

    controller.set_sort("createdAt", "desc")
    controller.set_filter("location", "Oslo")
    assert controller.filter_state is FilterState.MODIFIED

    request = controller.clear_filters()

    assert request.snapshot == resource.default_query
    assert controller.query == resource.default_query
    assert controller.filter_state is FilterState.DEFAULT
    issued = len(controller.requests_issued)

    await asyncio.sleep(SETTLE_SECONDS)
    await controller.wait_idle()
    assert len(controller.requests_issued) == issued
    await controller.aclose()


@pytest.mark.asyncio
async def test_clear_filters_at_defaults_still_issues_request():
    backend = ImmediateBackend()
    resource = holiday_resource(backend.fetch)
    controller, _, _ = make_controller(resource)
    controller.activate()

    request = controller.clear_filters()

    assert request.sequence_number == 2
    assert request.snapshot == resource.default_query
    await controller.aclose()


@pytest.mark.asyncio
async def test_late_stale_response_is_discarded():
    """
    **Feature: travel-marketplace-browser, Property 4: Stale responses never win**

    If request 1 is answered after request 2, the applied result set is the
    one of request 2.
    """
    backend = ControlledBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    controller.set_sort(order="desc")
    await yield_to_loop()
    assert len(backend.calls) == 2

    backend.respond(1, [package("Newer")])
    await yield_to_loop()
    assert [p.package_name for p in controller.results] == ["Newer"]
    assert not controller.loading

    backend.respond(0, [package("Older")])
    await yield_to_loop()
    assert [p.package_name for p in controller.results] == ["Newer"]
    assert not controller.loading
    await controller.aclose()


@pytest.mark.asyncio
async def test_loading_follows_latest_request_only():
    """An older request settling first neither clears loading nor blocks the newer result."""
    backend = ControlledBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    controller.set_sort(order="desc")
    await yield_to_loop()

    backend.respond(0, [package("Older")])
    await yield_to_loop()
    assert controller.loading
    assert [p.package_name for p in controller.results] == ["Older"]

    backend.respond(1, [package("Newer")])
    await yield_to_loop()
    assert not controller.loading
    assert [p.package_name for p in controller.results] == ["Newer"]
    await controller.aclose()


@pytest.mark.asyncio
async def test_network_failure_keeps_results_and_notifies():
    backend = ControlledBackend()
    controller, notifications, navigator = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await yield_to_loop()
    backend.respond(0, [package("Kept")])
    await yield_to_loop()

    controller.set_sort(order="desc")
    await yield_to_loop()
    backend.fail(1, ClassifiedError("Backend error: 500", status=500))
    await yield_to_loop()

    assert controller.error is ErrorKind.NETWORK
    assert not controller.loading
    assert [p.package_name for p in controller.results] == ["Kept"]
    assert notifications.current.kind == "error"
    assert notifications.current.message == "Failed to fetch holiday packages. Please try again."
    assert notifications.current.duration_ms == 3000

    await asyncio.sleep(0.3)
    assert navigator.visited == []
    await controller.aclose()


@pytest.mark.asyncio
async def test_unclassified_exception_is_network_error():
    backend = ImmediateBackend(error=RuntimeError("connection reset"))
    controller, notifications, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await controller.wait_idle()

    assert controller.error is ErrorKind.NETWORK
    assert notifications.current is not None
    await controller.aclose()


@pytest.mark.asyncio
async def test_success_after_failure_clears_error():
    backend = ControlledBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await yield_to_loop()
    backend.fail(0, ClassifiedError("down"))
    await yield_to_loop()
    assert controller.error is ErrorKind.NETWORK

    controller.refresh()
    await yield_to_loop()
    backend.respond(1, [package("Back")])
    await yield_to_loop()
    assert controller.error is None
    await controller.aclose()


@pytest.mark.asyncio
async def test_unauthorized_bookings_redirects_after_delay():
    """
    **Feature: travel-marketplace-browser, Property 7: Unauthorized redirect**

    A 401 on the bookings fetch shows an error notification and navigates to
    the landing path after the redirect delay.
    """
    backend = ImmediateBackend(error=ClassifiedError("Unauthorized", status=401))
    controller, notifications, navigator = make_controller(
        bookings_resource(backend.fetch), redirect_ms=200
    )
    controller.activate()
    await controller.wait_idle()

    assert controller.error is ErrorKind.AUTH
    assert notifications.current.message == "Failed to load bookings. Please try again."
    assert navigator.visited == []

    await asyncio.sleep(0.1)
    assert navigator.visited == []

    await asyncio.sleep(0.25)
    assert navigator.visited == ["/"]
    await controller.aclose()


@pytest.mark.asyncio
async def test_default_redirect_delay_is_two_seconds():
    backend = ImmediateBackend(error=ClassifiedError("Unauthorized", status=401))
    notifications = InMemoryNotificationChannel()
    navigator = RecordingNavigator()
    controller = ListingController(bookings_resource(backend.fetch), notifications, navigator)
    controller.activate()
    await controller.wait_idle()

    loop = asyncio.get_running_loop()
    remaining = controller._redirect_timer.when() - loop.time()
    assert 1.5 < remaining <= 2.0
    await controller.aclose()
    notifications.close()


@pytest.mark.asyncio
async def test_stale_failure_is_surfaced_without_replacing_results():
    """
    **Feature: travel-marketplace-browser, Property 5: Every failure is surfaced**

    A failure answering a request already superseded by an applied newer
    result still shows a notification and, for a 401, still schedules the
    redirect, but leaves the newer results and error state untouched.
    """
    backend = ControlledBackend()
    controller, notifications, navigator = make_controller(holiday_resource(backend.fetch), redirect_ms=50)
    controller.activate()
    controller.set_sort(order="desc")
    await yield_to_loop()

    backend.respond(1, [package("Newer")])
    await yield_to_loop()
    backend.fail(0, ClassifiedError("Unauthorized", status=401))
    await yield_to_loop()

    assert [r.package_name for r in controller.results] == ["Newer"]
    assert controller.error is None
    assert notifications.current.message == "Failed to fetch holiday packages. Please try again."
    assert len(notifications.history) == 1
    assert controller._redirect_timer is not None

    await asyncio.sleep(0.1)
    assert navigator.visited == ["/"]
    await controller.aclose()
    notifications.close()


@pytest.mark.asyncio
async def test_stale_network_failure_is_surfaced():
    backend = ControlledBackend()
    controller, notifications, navigator = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    controller.set_sort(order="desc")
    await yield_to_loop()

    backend.respond(1, [])
    await yield_to_loop()
    backend.fail(0, ClassifiedError("Backend error: 503", status=503))
    await yield_to_loop()

    assert notifications.history
    assert notifications.current.kind == "error"
    assert controller.error is None
    assert controller.results == ()
    assert controller._redirect_timer is None
    assert navigator.visited == []
    await controller.aclose()
    notifications.close()


@pytest.mark.asyncio
async def test_empty_holidays_render_empty_state():
    """
    **Feature: travel-marketplace-browser, Property 6: Empty result is not an error**

    An empty holiday result renders "No Packages Found" with a reset
    affordance, loading is false and no notification is shown.
    """
    backend = ImmediateBackend([])
    resource = holiday_resource(backend.fetch)
    controller, notifications, _ = make_controller(resource)
    controller.activate()
    await controller.wait_idle()

    view = render_listing(resource, controller.snapshot())

    assert not controller.loading
    assert controller.error is None
    assert notifications.current is None
    assert view.empty_state is not None
    assert view.empty_state.title == "No Packages Found"
    assert view.empty_state.action == CLEAR_FILTERS_ACTION
    assert view.status_line == "Found 0 packages"
    await controller.aclose()


@pytest.mark.asyncio
async def test_first_request_failure_renders_as_failure():
    backend = ImmediateBackend(error=ClassifiedError("Backend error: 500", status=500))
    controller, notifications, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await controller.wait_idle()

    view = render_listing(controller.resource, controller.snapshot())

    assert controller.error is ErrorKind.NETWORK
    assert view.failed
    assert view.status_line == "Couldn't load packages"
    assert view.empty_state is None
    await controller.aclose()
    notifications.close()


@pytest.mark.asyncio
async def test_enum_filter_refreshes_immediately():
    backend = ImmediateBackend()
    controller, _, _ = make_controller(guide_resource(backend.fetch), window_ms=10_000)
    controller.activate()

    controller.set_filter("status", "")

    assert len(controller.requests_issued) == 2
    assert controller.last_request.snapshot.filter_value("status") == ""
    await controller.aclose()


@pytest.mark.asyncio
async def test_text_filters_share_one_window():
    """Edits to different text fields within one window settle together."""
    backend = ImmediateBackend()
    controller, _, _ = make_controller(guide_resource(backend.fetch))
    controller.activate()
    await controller.wait_idle()

    controller.set_filter("location", "Kyoto")
    controller.set_filter("expertise", "temples")
    await asyncio.sleep(SETTLE_SECONDS)
    await controller.wait_idle()

    assert len(controller.requests_issued) == 2
    assert controller.last_request.snapshot.active_filters() == {
        "location": "Kyoto",
        "expertise": "temples",
        "status": "free",
    }
    await controller.aclose()


@pytest.mark.asyncio
async def test_invalid_input_is_rejected_without_state_change():
    backend = ImmediateBackend()
    controller, _, _ = make_controller(guide_resource(backend.fetch))
    controller.activate()
    before = controller.query

    with pytest.raises(ValueError):
        controller.set_sort("rating")
    with pytest.raises(ValueError):
        controller.set_sort(order="sideways")
    with pytest.raises(ValueError):
        controller.set_filter("date", "2025-01-01")
    with pytest.raises(ValueError):
        controller.set_filter("status", "busy")

    assert controller.query == before
    assert len(controller.requests_issued) == 1
    await controller.aclose()


@pytest.mark.asyncio
async def test_filters_set_before_activation_are_used_immediately():
    backend = ImmediateBackend()
    controller, _, _ = make_controller(holiday_resource(backend.fetch), window_ms=10_000)

    controller.set_filters({"location": "Bali"})
    controller.set_sort("createdAt", "desc")
    assert controller.requests_issued == []

    request = controller.activate()
    assert request.snapshot.filter_value("location") == "Bali"
    assert request.snapshot.sort == SortSpec("createdAt", "desc")
    await controller.aclose()


@pytest.mark.asyncio
async def test_dispose_discards_in_flight_and_pending_edits():
    """After teardown no timer fires and no late response mutates state."""
    backend = ControlledBackend()
    controller, notifications, _ = make_controller(holiday_resource(backend.fetch))
    controller.activate()
    await yield_to_loop()
    controller.set_filter("location", "Cairo")

    controller.dispose()
    assert not controller.loading

    await asyncio.sleep(SETTLE_SECONDS)
    await controller.wait_idle()

    assert len(controller.requests_issued) == 1
    assert controller.results == ()
    assert notifications.current is None

    with pytest.raises(ControllerDisposedError):
        controller.set_filter("location", "Giza")
    with pytest.raises(ControllerDisposedError):
        controller.clear_filters()


@pytest.mark.asyncio
async def test_fetch_cannot_alter_issued_or_default_queries():
    attempts = []

    async def rewriting_fetch(filters, sort):
        try:
            filters["location"] = "Paris"
        except TypeError as e:
            attempts.append(e)
        return []

    resource = holiday_resource(rewriting_fetch)
    controller, _, _ = make_controller(resource)
    controller.activate()
    await controller.wait_idle()

    request = controller.clear_filters()
    await controller.wait_idle()

    assert len(attempts) == 2
    assert request.snapshot == resource.default_query
    assert dict(resource.default_query.filters) == {"location": ""}
    assert controller.requests_issued[0].snapshot.filter_value("location") == ""
    assert controller.filter_state is FilterState.DEFAULT
    await controller.aclose()


@pytest.mark.asyncio
async def test_dispose_cancels_scheduled_redirect():
    backend = ImmediateBackend(error=ClassifiedError("Unauthorized", status=401))
    controller, _, navigator = make_controller(bookings_resource(backend.fetch), redirect_ms=50)
    controller.activate()
    await controller.wait_idle()

    controller.dispose()
    await asyncio.sleep(0.15)

    assert navigator.visited == []


@pytest.mark.asyncio
async def test_user_navigation_actions():
    backend = ImmediateBackend()
    resource = ListingResource(
        name="guides",
        fetch=backend.fetch,
        default_query=QueryState(filters={}, sort=SortSpec("createdAt")),
        sortable_fields=("createdAt",),
        book_path="/services/guides",
    )
    controller, _, navigator = make_controller(resource)

    controller.go_home()
    controller.book_now("g-42")
    controller.book_now()

    assert navigator.visited == ["/home", "/services/guides/g-42", "/services/guides"]


sort_edits = st.lists(
    st.tuples(st.sampled_from(["cost", "createdAt"]), st.sampled_from(["asc", "desc"])),
    max_size=15
)


@given(edits=sort_edits)
@settings(max_examples=100, deadline=None)
def test_requests_match_distinct_sort_states(edits):
    """
    **Feature: travel-marketplace-browser, Property 1: One request per settled change**

    For any sequence of sort edits, the number of issued requests equals the
    number of changes of the effective query, not the number of edits.
    """
    async def run():
        backend = ImmediateBackend()
        resource = holiday_resource(backend.fetch)
        controller, _, _ = make_controller(resource)
        controller.activate()

        expected = 1
        current = resource.default_query.sort
        for field, order in edits:
            controller.set_sort(field, order)
            if SortSpec(field, order) != current:
                expected += 1
                current = SortSpec(field, order)

        issued = len(controller.requests_issued)
        numbers = [r.sequence_number for r in controller.requests_issued]
        await controller.aclose()
        return issued, expected, numbers

    issued, expected, numbers = asyncio.run(run())

    assert issued == expected, f"Issued {issued} requests for {expected} distinct states"
    assert numbers == list(range(1, issued + 1)), "Sequence numbers must increase by one"


@given(texts=st.lists(st.text(alphabet="abcxyz ", max_size=6), min_size=1, max_size=8))
@settings(max_examples=20, deadline=None)
def test_burst_of_edits_queries_final_value_only(texts):
    """
    For any burst of text edits inside one window, at most one request is
    issued, and only when the final value differs from the settled one.
    """
    async def run():
        backend = ImmediateBackend()
        controller, _, _ = make_controller(holiday_resource(backend.fetch), window_ms=20)
        controller.activate()
        await controller.wait_idle()

        for text in texts:
            controller.set_filter("location", text)
        await asyncio.sleep(0.08)
        await controller.wait_idle()

        requests = list(controller.requests_issued)
        await controller.aclose()
        return requests

    requests = asyncio.run(run())

    if texts[-1] == "":
        assert len(requests) == 1
    else:
        assert len(requests) == 2
        assert requests[-1].snapshot.filter_value("location") == texts[-1]


def test_bookings_resource_has_no_filters():
    resource = bookings_resource(ImmediateBackend().fetch)
    assert resource.filter_fields == ()
    assert not resource.filterable
    assert resource.count_label(1) == "Found 1 booking"
