"""Browsing layer of a travel marketplace client: debounced, filterable, sortable listings."""
