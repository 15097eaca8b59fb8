"""
Caller identity — the ``{user_id, role}`` value every workflow call receives.

The JWT middleware builds an ``IdentityContext`` once per request from a
verified access token; services only consume it.  ``Role`` is a closed set,
so an unknown role string is rejected at the boundary rather than compared
ad hoc deeper in the stack.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from submission_review.core.exceptions import AuthorizationError


class Role(str, Enum):
    CONTRIBUTOR = "contributor"
    REVIEWER = "reviewer"

    @classmethod
    def parse(cls, value) -> "Role":
        """Parse a role string (case/whitespace-insensitive). Raises ValueError."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower() if isinstance(value, str) else value
        return cls(normalized)


@dataclass(frozen=True)
class IdentityContext:
    """Already-authenticated caller."""

    user_id: int
    role: Role

    @property
    def is_contributor(self) -> bool:
        return self.role is Role.CONTRIBUTOR

    @property
    def is_reviewer(self) -> bool:
        return self.role is Role.REVIEWER

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "role": self.role.value}


def require_role(caller: IdentityContext, role: Role, action: str) -> None:
    """Raise AuthorizationError unless ``caller`` holds ``role``."""
    if caller.role is not role:
        raise AuthorizationError(f"Only {role.value}s may {action}")
