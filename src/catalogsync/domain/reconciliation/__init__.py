"""Reconciliation of locally desired entities against the remote catalog."""

from __future__ import annotations

from .diff import diff_entity
from .reconciler import DEFAULT_EXPAND, Reconciler, Reconciliation

__all__ = [
    "DEFAULT_EXPAND",
    "Reconciler",
    "Reconciliation",
    "diff_entity",
]
