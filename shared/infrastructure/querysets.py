"""Queryset helpers shared by the ORM repositories."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def overlap_q(start_field: str, end_field: str, start, end) -> Q:
    """
    Half-open overlap against a stored [start, end) window

    [stored_start, stored_end) overlaps [start, end) iff
    stored_start < end and start < stored_end.
    """
    return Q(**{f"{start_field}__lt": end}) & Q(**{f"{end_field}__gt": start})
