"""Debounce module for filter input."""

from .debounced_value import DebouncedValue

__all__ = ['DebouncedValue']
