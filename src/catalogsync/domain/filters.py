"""Helpers for assembling catalog filter expressions.

Filters stay opaque strings to the core; these helpers only cover the
string-constant quoting every connector needs.
"""

from __future__ import annotations

from decimal import Decimal


def escape_string_constant(value: str) -> str:
    """Escape a value for use inside a single-quoted filter string constant."""

    return value.replace("'", "''")


def quote_for_filter(value: object) -> str:
    if isinstance(value, int | float | Decimal) and not isinstance(value, bool):
        return str(value)
    return f"'{escape_string_constant(str(value))}'"


def name_filter(name: str) -> str:
    """Default reconciliation filter used when a connector supplies none."""

    return f"name eq {quote_for_filter(name)}"
