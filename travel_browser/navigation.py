"""
Navigation contract for the listing screens.

The controller requests navigation on an unauthorized response and on user
actions such as "go home" and "book now"; performing it is up to the host.
"""

import logging
from typing import List, Protocol


logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """Something that can move the user to another path."""

    def navigate(self, path: str) -> None:
        ...


class RecordingNavigator:
    """Navigator that records requested paths instead of routing.

    Attributes:
        visited: Every requested path, in order
    """

    def __init__(self):
        self.visited: List[str] = []

    @property
    def current_path(self) -> str:
        return self.visited[-1] if self.visited else ""

    def navigate(self, path: str) -> None:
        logger.info(f"Navigating to {path}")
        self.visited.append(path)
