from __future__ import annotations

from typing import Dict, Set

from django.utils import timezone

from .exceptions import ConcurrencyConflict, ValidationError


class StatusTransitionMixin:
    """
    Closed status state machine for models with a ``status`` field.

    ``TRANSITIONS`` maps each status to the statuses it may move to. Writes go
    through a conditional UPDATE keyed on the status that was read, so a row
    changed by another request surfaces as ``ConcurrencyConflict``.
    """

    TRANSITIONS: Dict[str, Set[str]] = {}

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: str, **changes) -> None:
        previous = self.status
        if not self.can_transition_to(new_status):
            raise ValidationError(
                f"{type(self).__name__} cannot move from {previous} to {new_status}."
            )

        changes["status"] = new_status
        changes["updated_at"] = timezone.now()
        updated = type(self).objects.filter(pk=self.pk, status=previous).update(**changes)
        if not updated:
            raise ConcurrencyConflict()
        for field, value in changes.items():
            setattr(self, field, value)
