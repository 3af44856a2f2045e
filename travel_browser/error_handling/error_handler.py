"""
Error classification and reporting for listing fetches.

Converts backend failures into an ErrorKind and a user-facing message, and
logs them with diagnostic context. Failures are surfaced once; there is no
retry policy.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from travel_browser.models import ErrorKind


# Configure logging
logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS = 401


class ClassifiedError(Exception):
    """
    A failed backend call.

    Attributes:
        status: HTTP status code of the response, or None for transport
            failures that never produced a response
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ControllerDisposedError(RuntimeError):
    """Raised when a listing controller is used after teardown."""


def classify_error(error: BaseException) -> ErrorKind:
    """
    Classify a fetch failure.

    Args:
        error: The exception raised by the fetch function

    Returns:
        ErrorKind.AUTH for an unauthorized response, ErrorKind.NETWORK for
        anything else
    """
    if isinstance(error, ClassifiedError) and error.status == UNAUTHORIZED_STATUS:
        return ErrorKind.AUTH
    return ErrorKind.NETWORK


class ErrorReporter:
    """
    Builds notification messages and logs fetch failures.

    Attributes:
        noun: Plural display noun of the resource (e.g. "holiday packages")
        verb: "load" or "fetch", as used in the failure message
    """

    def __init__(self, noun: str, verb: str = "fetch"):
        self.noun = noun
        self.verb = verb

    def failure_message(self, kind: ErrorKind) -> str:
        """
        Return the user-facing message for a failure.

        Both kinds share the same wording; an auth failure is followed by a
        redirect rather than a different message.
        """
        return f"Failed to {self.verb} {self.noun}. Please try again."

    def report(
        self,
        error: BaseException,
        sequence_number: int,
        query: Optional[Dict[str, Any]] = None
    ) -> ErrorKind:
        """
        Classify and log a failure with timestamp and diagnostic context.

        Args:
            error: The exception raised by the fetch function
            sequence_number: Sequence number of the failed request
            query: Query the request was issued for

        Returns:
            The classified ErrorKind
        """
        kind = classify_error(error)
        context = {
            'timestamp': datetime.now().isoformat(),
            'resource': self.noun,
            'sequence_number': sequence_number,
            'error_kind': kind.value,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'status': getattr(error, 'status', None),
            'query': query or {},
        }

        logger.error(
            f"Fetch failed: {self.noun} | "
            f"Request: #{sequence_number} | "
            f"Kind: {kind.value} | "
            f"Error: {type(error).__name__}: {str(error)}"
        )
        logger.debug(f"Full error context: {context}")
        return kind
