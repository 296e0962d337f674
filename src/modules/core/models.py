"""Base abstract models for the order management backend.

Provides:
- ``AuditedModel``: integer PK plus ``created_at`` / ``modified_at``
  timestamps and the ``created_by`` / ``modified_by`` identity stamps.
- ``VersionedModel``: adds the ``version`` counter used for optimistic
  concurrency on aggregate roots.

``created_by`` / ``modified_by`` hold the ``user_id`` of the identity that
performed the write.  They are plain integers, not foreign keys: the identity
comes from the token and may belong to an administrator with no tenant.
"""

from __future__ import annotations

from typing import Any, Optional

from django.db import models


class AuditedModel(models.Model):
    """Abstract base with timestamp and identity bookkeeping."""

    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)
    created_by = models.PositiveBigIntegerField(null=True, blank=True, default=None)
    modified_by = models.PositiveBigIntegerField(null=True, blank=True, default=None)

    class Meta:
        abstract = True

    def stamp(self, user_id: Optional[int]) -> None:
        """Record *user_id* as the author of the pending write."""
        if self._state.adding and self.created_by is None:
            self.created_by = user_id
        self.modified_by = user_id

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Ensure ``modified_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "modified_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["modified_at"]
        super().save(*args, **kwargs)


class VersionedModel(AuditedModel):
    """Aggregate root carrying an optimistic-concurrency ``version``.

    The counter is compared and bumped inside the mutation transaction by the
    repositories; it never goes backwards.
    """

    version = models.PositiveIntegerField(default=1)

    class Meta:
        abstract = True
