# ==============================================================================
# Session Reducers
# ==============================================================================
"""
Pluggable reductions over the payloads of one session.

A reducer is any callable taking the sequence of payloads of a session (in
timestamp order) and returning an aggregate value. Built-in reducers are
registered by name so they can be selected from configuration:

    count     - count-only; the aggregate is None (event_count is always set)
    sum       - sum of payloads
    first     - payload of the earliest event
    last      - payload of the latest event
    collect   - list of all payloads
    distinct  - unique payloads, first-seen order
"""

from collections.abc import Callable, Sequence
from typing import Any

from sessionize.core.errors import InvalidConfiguration

Reducer = Callable[[Sequence[Any]], Any]


def count_only(payloads: Sequence[Any]) -> None:
    return None


def sum_payloads(payloads: Sequence[Any]) -> Any:
    return sum(p for p in payloads if p is not None)


def first_payload(payloads: Sequence[Any]) -> Any:
    return payloads[0] if payloads else None


def last_payload(payloads: Sequence[Any]) -> Any:
    return payloads[-1] if payloads else None


def collect_payloads(payloads: Sequence[Any]) -> list[Any]:
    return list(payloads)


def distinct_payloads(payloads: Sequence[Any]) -> list[Any]:
    """Unique payloads in first-seen order (payloads must be hashable)."""
    return list(dict.fromkeys(payloads))


REDUCERS: dict[str, Reducer] = {
    "count": count_only,
    "sum": sum_payloads,
    "first": first_payload,
    "last": last_payload,
    "collect": collect_payloads,
    "distinct": distinct_payloads,
}


def get_reducer(name: str) -> Reducer:
    """
    Look up a built-in reducer by name.

    Raises:
        InvalidConfiguration: If no reducer is registered under that name
    """
    try:
        return REDUCERS[name]
    except KeyError:
        available = ", ".join(sorted(REDUCERS))
        raise InvalidConfiguration(
            f"Unknown reducer {name!r} (available: {available})"
        ) from None


def field_reducer(reducer: Reducer, field: str) -> Reducer:
    """
    Wrap a reducer so it sees one key of each dict payload.

    Payloads that are None or lack the key contribute None.

    Example:
        total = field_reducer(sum_payloads, "amount")
        total([{"amount": 2}, {"amount": 3}])  # 5
    """

    def _reduce(payloads: Sequence[Any]) -> Any:
        return reducer([p.get(field) if p is not None else None for p in payloads])

    _reduce.__name__ = f"{getattr(reducer, '__name__', 'reducer')}[{field}]"
    return _reduce


def resolve_reducer(reducer: Reducer | str | None, field: str | None = None) -> Reducer:
    """
    Normalize a reducer given as a callable, a registered name, or None.

    None means count-only. When field is given the reducer is applied to
    that key of each payload.
    """
    if reducer is None:
        resolved = count_only
    elif isinstance(reducer, str):
        resolved = get_reducer(reducer)
    elif callable(reducer):
        resolved = reducer
    else:
        raise InvalidConfiguration(f"reducer must be callable, got {type(reducer).__name__}")

    if field:
        return field_reducer(resolved, field)
    return resolved
