"""
Travel marketplace API client - fetches bookings, events, guides and holiday
packages from the backend over HTTP.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import aiohttp
from pydantic import ValidationError

from travel_browser.config import BackendConfig
from travel_browser.error_handling import ClassifiedError
from travel_browser.records import Booking, Event, Guide, HolidayPackage, RecordBase


logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RecordBase)


class TravelApiClient:
    """
    Async client for the user-facing listing endpoints.

    Unset optional filters are omitted from the query string rather than sent
    as empty values. Any non-2xx response raises ClassifiedError carrying the
    status code; transport failures raise ClassifiedError without a status.
    Authentication tokens are supplied by the caller and never refreshed here.
    """

    BOOKINGS_PATH = "/user/bookings"
    EVENTS_PATH = "/user/events"
    GUIDES_PATH = "/user/guides"
    HOLIDAYS_PATH = "/user/holidays"

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.config = config or BackendConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._headers = {"Accept": "application/json"}
        if self.config.token:
            self._headers["Authorization"] = f"Bearer {self.config.token}"
        if headers:
            self._headers.update(headers)

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the session if this client created it"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _ensure_session(self):
        """Ensure we have an open session"""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def fetch_bookings(self) -> List[Booking]:
        """Fetch the current user's bookings."""
        return await self._get_records(self.BOOKINGS_PATH, {}, Booking)

    async def fetch_events(
        self,
        location: Optional[str] = None,
        date: Optional[str] = None,
        sort_by: str = "eventDate",
        sort_order: str = "asc"
    ) -> List[Event]:
        """
        Fetch events.

        Args:
            location: Location text filter
            date: Event date filter (YYYY-MM-DD)
            sort_by: eventDate, price or createdAt
            sort_order: asc or desc
        """
        params = self._optional_params(location=location, date=date)
        params.update(sortBy=sort_by, sortOrder=sort_order)
        return await self._get_records(self.EVENTS_PATH, params, Event)

    async def fetch_guides(
        self,
        location: Optional[str] = None,
        expertise: Optional[str] = None,
        status: str = "free",
        sort_by: str = "pricePerHour",
        sort_order: str = "asc"
    ) -> List[Guide]:
        """
        Fetch guides.

        ``status`` is always sent; an empty string asks for all guides.
        """
        params = self._optional_params(location=location, expertise=expertise)
        params.update(status=status, sortBy=sort_by, sortOrder=sort_order)
        return await self._get_records(self.GUIDES_PATH, params, Guide)

    async def fetch_holidays(
        self,
        location: Optional[str] = None,
        sort_by: str = "cost",
        sort_order: str = "asc"
    ) -> List[HolidayPackage]:
        """Fetch holiday packages."""
        params = self._optional_params(location=location)
        params.update(sortBy=sort_by, sortOrder=sort_order)
        return await self._get_records(self.HOLIDAYS_PATH, params, HolidayPackage)

    @staticmethod
    def _optional_params(**filters: Optional[str]) -> Dict[str, str]:
        return {name: value for name, value in filters.items() if value}

    async def _get_records(
        self,
        path: str,
        params: Dict[str, str],
        model: Type[R]
    ) -> List[R]:
        await self._ensure_session()
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} params={params}")

        try:
            async with self._session.get(url, params=params, headers=self._headers) as response:
                if response.status < 200 or response.status >= 300:
                    error_text = await response.text()
                    raise ClassifiedError(
                        f"Backend error: {response.status} - {error_text}",
                        status=response.status
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ClassifiedError(f"Request to {url} failed: {e}") from e

        return self._parse_records(data, model)

    def _parse_records(self, data: Any, model: Type[R]) -> List[R]:
        """Parse a JSON array into records; anything else is an empty list"""
        if not isinstance(data, list):
            logger.warning(f"Expected a JSON array of {model.__name__}, got {type(data).__name__}")
            return []

        records = []
        for item in data:
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Failed to parse {model.__name__}: {e}")
                continue
        return records
