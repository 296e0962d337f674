"""Wholesale replacement of an aggregate's child collection."""

from __future__ import annotations

from typing import Iterable, List, Type, TypeVar

import structlog
from django.db import models, transaction

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=models.Model)


def replace_children(
    model: Type[M],
    parent_field: str,
    parent_id: int,
    rows: Iterable[M],
) -> List[M]:
    """Delete every ``model`` row owned by ``parent_id`` and insert ``rows``.

    Must run inside the parent's ``transaction.atomic()`` block: a failure
    while inserting rolls the delete back with the rest of the mutation.
    ``rows`` are unsaved instances; their ``parent_field`` is set here.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError(
            f"replace_children({model.__name__}) must run inside transaction.atomic()"
        )

    fk_name = f"{parent_field}_id"
    new_rows = list(rows)
    for row in new_rows:
        setattr(row, fk_name, parent_id)

    deleted, _ = model.objects.filter(**{fk_name: parent_id}).delete()
    created = model.objects.bulk_create(new_rows)

    logger.debug(
        "children.replaced",
        model=model.__name__,
        parent_id=parent_id,
        deleted=deleted,
        created=len(created),
    )
    return created
