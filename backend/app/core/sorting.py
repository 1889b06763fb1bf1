"""Shared sorting utilities for repository queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from app.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The SQLAlchemy model class.
        order_by: Sort string in "field:direction" format (e.g. "expires_at:asc").
            Unknown columns fall back to the default ordering.
        default_field: Default column to sort by.
        default_direction: Default sort direction ("asc" or "desc").

    Returns:
        The query with ordering applied.
    """
    field, direction = default_field, default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        if candidate_field in model.__table__.columns:
            field = candidate_field
            direction = candidate_direction or "asc"
            if direction not in ("asc", "desc"):
                direction = default_direction

    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(getattr(model, field)))
