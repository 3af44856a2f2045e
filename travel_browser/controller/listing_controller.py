"""
Listing controller.

Turns filter and sort edits into a minimal, correctly ordered sequence of
backend queries and tracks the loading, error and result state of one
listing screen.
"""

import asyncio
import logging
from typing import Dict, List, Mapping, Optional, Tuple

from travel_browser.config import BrowserSettings
from travel_browser.controller.query_state import filter_state, with_filter, with_sort
from travel_browser.controller.resources import ListingResource
from travel_browser.debounce import DebouncedValue
from travel_browser.error_handling import ControllerDisposedError, ErrorReporter
from travel_browser.models import (
    ErrorKind,
    FilterState,
    ListingRequest,
    ListingResult,
    ListingSnapshot,
    QueryState,
)
from travel_browser.navigation import Navigator
from travel_browser.notifications import Notification, NotificationChannel


logger = logging.getLogger(__name__)


class ListingController:
    """
    Coordinates query state, fetch issuance and result tracking for one resource.

    Text filters reach the backend only after the debounce window; enum
    filters and sort changes are applied immediately. Each change of the
    effective query issues exactly one request. Responses are applied only if
    they answer a request numbered higher than the last applied one, so a
    slow, superseded response can never overwrite a newer result.
    A superseded failure still reaches the notification channel, and a
    superseded 401 still schedules the redirect.

    Attributes:
        resource: The resource this controller lists
        results: The applied record set
        error: Kind of the last applied failure, or None
        loading: True while the highest-numbered request is outstanding
        requests_issued: Every request issued so far, in order
    """

    def __init__(
        self,
        resource: ListingResource,
        notifications: NotificationChannel,
        navigator: Navigator,
        settings: Optional[BrowserSettings] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        """
        Initialize the controller with the resource defaults.

        No request is issued until ``activate`` is called.

        Args:
            resource: Capability set of the listed resource
            notifications: Channel receiving failure notifications
            navigator: Receives redirect and user navigation requests
            settings: Browser settings (default: BrowserSettings())
            loop: Event loop for timers and fetch tasks (default: running loop)
        """
        self.resource = resource
        self.notifications = notifications
        self.navigator = navigator
        self.settings = settings or BrowserSettings()
        self._loop = loop
        self._reporter = ErrorReporter(resource.message_noun, resource.failure_verb)

        self._query = resource.default_query
        self._text = DebouncedValue(
            self._text_part(self._query),
            window_ms=self.settings.debounce.window_ms,
            on_settle=self._on_text_settled,
            loop=loop,
        )

        self.results: Tuple[object, ...] = ()
        self.error: Optional[ErrorKind] = None
        self.loading = False
        self.requests_issued: List[ListingRequest] = []

        self._sequence = 0
        self._applied_sequence = 0
        self._last_issued_query: Optional[QueryState] = None
        self._in_flight: Dict[int, asyncio.Task] = {}
        self._redirect_timer: Optional[asyncio.TimerHandle] = None
        self._activated = False
        self._disposed = False

    # Read-only state

    @property
    def query(self) -> QueryState:
        """The raw query, including text filters still inside the debounce window."""
        return self._query

    @property
    def effective_query(self) -> QueryState:
        """The query requests are issued for: settled text filters, immediate rest."""
        settled = self._text.value
        filters = {
            name: settled[name] if name in settled else value
            for name, value in self._query.filters.items()
        }
        return QueryState(filters=filters, sort=self._query.sort)

    @property
    def filter_state(self) -> FilterState:
        return filter_state(self._query, self.resource.default_query)

    @property
    def last_request(self) -> Optional[ListingRequest]:
        return self.requests_issued[-1] if self.requests_issued else None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> ListingSnapshot:
        """Return the state the presentation layer renders."""
        return ListingSnapshot(
            query=self._query,
            records=self.results,
            loading=self.loading,
            error=self.error,
            filter_state=self.filter_state,
            settled=self._applied_sequence > 0,
        )

    # Operations

    def activate(self) -> ListingRequest:
        """Issue the initial request for the current query."""
        self._check_usable()
        if self._activated:
            return self.last_request
        self._activated = True
        logger.info(f"Activating {self.resource.name} listing")
        return self._issue(self.effective_query)

    def set_filter(self, name: str, value: str) -> None:
        """
        Change one filter.

        Text filters restart the debounce window; enum filters refresh
        immediately. Before activation the value is taken as-is.

        Raises:
            ValueError: If the field is unknown or the enum value not allowed
            ControllerDisposedError: After dispose()
        """
        self._check_usable()
        choices = self.resource.enum_filters.get(name)
        if choices is not None and (value or "") not in choices:
            raise ValueError(f"Invalid value {value!r} for filter {name!r}; expected one of {list(choices)}")
        self._query = with_filter(self._query, name, value, self.resource.filter_fields)

        if name in self.resource.text_filters:
            if self._activated:
                self._text.set(self._text_part(self._query))
            else:
                self._text.flush(self._text_part(self._query))
        else:
            self._refresh_if_changed()

    def set_filters(self, filters: Mapping[str, str]) -> None:
        """Change several filters, one ``set_filter`` call each."""
        for name, value in filters.items():
            self.set_filter(name, value)

    def set_sort(self, field: Optional[str] = None, order: Optional[str] = None) -> None:
        """
        Change the sort field and/or order; refreshes immediately.

        Raises:
            ValueError: If the field is not sortable or the order unknown
            ControllerDisposedError: After dispose()
        """
        self._check_usable()
        self._query = with_sort(self._query, field, order, self.resource.sortable_fields)
        self._refresh_if_changed()

    def toggle_sort_order(self) -> None:
        """Flip between ascending and descending order."""
        self.set_sort(order=self._query.sort.toggled().order)

    def clear_filters(self) -> Optional[ListingRequest]:
        """
        Reset filters and sort to the resource defaults.

        The reset bypasses the debounce window and, once activated, always
        issues a request for exactly the default query.
        """
        self._check_usable()
        self._query = self.resource.default_query
        self._text.flush(self._text_part(self._query))
        logger.info(f"Cleared {self.resource.name} filters")
        if not self._activated:
            return None
        return self._issue(self.effective_query)

    def refresh(self) -> ListingRequest:
        """Re-issue the current effective query."""
        self._check_usable()
        self._activated = True
        return self._issue(self.effective_query)

    def go_home(self) -> None:
        self.navigator.navigate(self.settings.auth_redirect.home_path)

    def book_now(self, record_id: Optional[str] = None) -> None:
        """Request navigation to the booking flow of this resource."""
        path = self.resource.book_path
        if record_id:
            path = f"{path}/{record_id}"
        self.navigator.navigate(path)

    async def wait_idle(self) -> None:
        """Wait until no fetch is outstanding."""
        while True:
            pending = [task for task in self._in_flight.values() if not task.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    def dispose(self) -> None:
        """
        Tear the listing down.

        Cancels the debounce timer and any scheduled redirect, and cancels
        in-flight requests; a response that still arrives is discarded.
        """
        if self._disposed:
            return
        self._disposed = True
        self._text.dispose()
        if self._redirect_timer is not None:
            self._redirect_timer.cancel()
            self._redirect_timer = None
        for task in list(self._in_flight.values()):
            task.cancel()
        self.loading = False
        logger.info(f"Disposed {self.resource.name} listing after {self._sequence} request(s)")

    async def aclose(self) -> None:
        """Dispose and wait for cancelled requests to unwind."""
        self.dispose()
        await self.wait_idle()

    # Internals

    def _check_usable(self) -> None:
        if self._disposed:
            raise ControllerDisposedError(f"{self.resource.name} listing has been disposed")

    def _text_part(self, query: QueryState) -> Dict[str, str]:
        return {name: query.filter_value(name) for name in self.resource.text_filters}

    def _on_text_settled(self, value: Dict[str, str]) -> None:
        self._refresh_if_changed()

    def _refresh_if_changed(self) -> None:
        if not self._activated or self._disposed:
            return
        effective = self.effective_query
        if effective != self._last_issued_query:
            self._issue(effective)

    def _issue(self, query: QueryState) -> ListingRequest:
        self._sequence += 1
        request = ListingRequest(sequence_number=self._sequence, snapshot=query)
        self._last_issued_query = query
        self.requests_issued.append(request)
        self.loading = True
        logger.debug(f"Issuing {self.resource.name} request #{request.sequence_number}: {query.to_dict()}")

        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._execute(request))
        self._in_flight[request.sequence_number] = task
        task.add_done_callback(
            lambda _task, seq=request.sequence_number: self._in_flight.pop(seq, None)
        )
        return request

    async def _execute(self, request: ListingRequest) -> None:
        seq = request.sequence_number
        try:
            records = await self.resource.fetch(request.snapshot.filters, request.snapshot.sort)
        except Exception as e:
            kind = self._reporter.report(e, seq, request.snapshot.to_dict())
            self._apply(ListingResult.failure(seq, kind))
        else:
            self._apply(ListingResult.success(seq, records or ()))
        finally:
            self._settle(request)

    def _apply(self, result: ListingResult) -> None:
        seq = result.sequence_number
        if self._disposed:
            logger.debug(f"Discarding {self.resource.name} response #{seq}: listing disposed")
            return

        current = seq > self._applied_sequence
        if current:
            self._applied_sequence = seq

        if result.ok:
            if not current:
                logger.info(
                    f"Discarding stale {self.resource.name} response #{seq} "
                    f"(already applied #{self._applied_sequence})"
                )
                return
            self.results = result.records
            self.error = None
            logger.info(f"Applied {self.resource.name} response #{seq}: {len(result.records)} record(s)")
            return

        # Every failure is surfaced; only a current one changes the state.
        # Results from the last successful request stay visible.
        if current:
            self.error = result.error
        else:
            logger.info(
                f"Stale {self.resource.name} failure #{seq} surfaced without changing state "
                f"(already applied #{self._applied_sequence})"
            )
        self.notifications.show(Notification(
            kind="error",
            message=self._reporter.failure_message(result.error),
            duration_ms=self.settings.notifications.duration_ms,
        ))
        if result.error is ErrorKind.AUTH:
            self._schedule_redirect()

    def _settle(self, request: ListingRequest) -> None:
        if request.sequence_number == self._sequence:
            self.loading = False

    def _schedule_redirect(self) -> None:
        redirect = self.settings.auth_redirect
        if self._redirect_timer is not None:
            self._redirect_timer.cancel()
        loop = self._loop or asyncio.get_running_loop()
        logger.warning(f"Unauthorized; redirecting to {redirect.landing_path} in {redirect.delay_ms}ms")
        self._redirect_timer = loop.call_later(
            redirect.delay_ms / 1000, self._redirect, redirect.landing_path
        )

    def _redirect(self, path: str) -> None:
        self._redirect_timer = None
        self.navigator.navigate(path)
