"""
Query state transitions.

Pure functions that build new QueryState values; the controller owns one
QueryState per listing and changes it only through these transitions.
"""

from typing import Optional, Sequence

from travel_browser.models import FilterState, QueryState, SortSpec, SORT_ORDERS

def with_filter(
    query: QueryState,
    name: str,
    value: str,
    allowed_fields: Sequence[str]
) -> QueryState:
    """Return ``query`` with one filter replaced.

    Raises:
        ValueError: If ``name`` is not one of ``allowed_fields``
    """
    if name not in allowed_fields:
        raise ValueError(f"Unknown filter field {name!r}; expected one of {list(allowed_fields)}")
    filters = dict(query.filters)
    filters[name] = value or ""
    return QueryState(filters=filters, sort=query.sort)


def with_sort(
    query: QueryState,
    field: Optional[str],
    order: Optional[str],
    sortable_fields: Sequence[str]
) -> QueryState:
    """Return ``query`` with a new sort; ``None`` keeps the current part.

    Raises:
        ValueError: If the field is not sortable or the order is unknown
    """
    field = query.sort.field if field is None else field
    order = query.sort.order if order is None else order
    if field not in sortable_fields:
        raise ValueError(f"Unknown sort field {field!r}; expected one of {list(sortable_fields)}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order {order!r}; expected 'asc' or 'desc'")
    return QueryState(filters=query.filters, sort=SortSpec(field, order))


def filter_state(query: QueryState, defaults: QueryState) -> FilterState:
    """DEFAULT while ``query`` equals the resource defaults, else MODIFIED."""
    return FilterState.DEFAULT if query == defaults else FilterState.MODIFIED
