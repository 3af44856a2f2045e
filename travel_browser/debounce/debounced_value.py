"""
Debounced value for fast-changing user input.

Delays propagation of a raw value until it has been stable for a fixed
quiescence window.
"""

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebouncedValue(Generic[T]):
    """
    A value that follows its raw input only after the input stops changing.

    Every call to ``set`` restarts the wait. There is no maximum wait: input
    that keeps changing faster than the window postpones propagation
    indefinitely, and only the final value is ever propagated.

    Attributes:
        window_ms: Quiescence window in milliseconds
        raw: The most recent raw value
        value: The propagated (settled) value
    """

    def __init__(
        self,
        initial: T,
        window_ms: int = 500,
        on_settle: Optional[Callable[[T], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        """
        Initialize the debounced value.

        Args:
            initial: Starting raw and settled value
            window_ms: Quiescence window in milliseconds (default: 500)
            on_settle: Called with the new settled value whenever it changes
            loop: Event loop used for timers (default: the running loop)
        """
        self.window_ms = window_ms
        self.raw = initial
        self.value = initial
        self._on_settle = on_settle
        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None
        self._disposed = False

    @property
    def pending(self) -> bool:
        """True while a raw value is waiting for the window to elapse."""
        return self._timer is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def set(self, raw: T) -> None:
        """
        Record a new raw value and restart the quiescence window.

        Ignored after disposal.
        """
        if self._disposed:
            return
        self.raw = raw
        self._cancel_timer()
        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.window_ms / 1000, self._settle)

    def flush(self, value: T) -> None:
        """
        Set raw and settled value immediately, bypassing the window.

        Any pending timer is cancelled and ``on_settle`` is not called.
        """
        if self._disposed:
            return
        self._cancel_timer()
        self.raw = value
        self.value = value

    def dispose(self) -> None:
        """Cancel the pending timer; no callback fires after this."""
        self._cancel_timer()
        self._disposed = True

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _settle(self) -> None:
        self._timer = None
        if self._disposed or self.raw == self.value:
            return
        self.value = self.raw
        logger.debug(f"Debounced value settled after {self.window_ms}ms: {self.value!r}")
        if self._on_settle is not None:
            self._on_settle(self.value)
