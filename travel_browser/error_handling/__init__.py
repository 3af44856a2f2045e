"""
Error handling module for the travel marketplace browser.

Provides error classification, failure reporting and controller errors.
"""

from .error_handler import (
    ClassifiedError,
    ControllerDisposedError,
    ErrorReporter,
    classify_error,
)

__all__ = ['ClassifiedError', 'ControllerDisposedError', 'ErrorReporter', 'classify_error']
