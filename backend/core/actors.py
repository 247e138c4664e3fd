from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """The account performing a workflow operation."""

    user_id: int
    email: str = ""
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(
            user_id=user.pk,
            email=user.email or "",
            is_admin=bool(getattr(user, "is_administrator", False) or user.is_superuser),
        )

    def can_access(self, owner_id: int | None) -> bool:
        return self.is_admin or (owner_id is not None and owner_id == self.user_id)
