"""Data-access helpers shared by the registries.

Duplicate-key failures on rows keyed by a unique constraint are expected
under races (a manual add racing an invitation acceptance, a retried
request). They are resolved here, once, instead of matching driver error
codes in business logic.
"""

import logging

from django.db import IntegrityError, transaction

logger = logging.getLogger("gigboard")


def insert_if_absent(model, defaults=None, **unique_fields):
    """
    Idempotent insert keyed on ``unique_fields``.

    Returns (row, created). When a concurrent writer wins the race the
    existing row is returned with created=False. Any other store error
    (including an IntegrityError that is not a duplicate, e.g. a dangling
    foreign key) propagates to the caller.
    """
    row = model.objects.filter(**unique_fields).first()
    if row is not None:
        return row, False

    try:
        with transaction.atomic():
            row = model.objects.create(**unique_fields, **(defaults or {}))
    except IntegrityError:
        row = model.objects.filter(**unique_fields).first()
        if row is None:
            raise
        logger.info(f"Concurrent insert resolved as existing row: model={model.__name__}, id={row.pk}")
        return row, False

    return row, True
