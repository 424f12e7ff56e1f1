"""Sorting helper for list endpoints."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from app.core.database import Base

SORT_DIRECTIONS = ("asc", "desc")


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Order a query by a ``"field:direction"`` string such as ``"final_price:asc"``.

    Only real table columns are accepted; unknown fields fall back to the
    default ordering and unknown directions to the default direction. The
    primary key is appended as a tie-breaker so paging is stable.
    """
    columns = model.__table__.columns
    field = default_field
    direction = default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        if candidate_field in columns:
            field = candidate_field
            direction = candidate_direction or "asc"
            if direction not in SORT_DIRECTIONS:
                direction = default_direction

    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(columns[field]), order_func(columns["id"]))
