"""Caller identity value objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    PATIENT = "patient"
    RESEARCHER = "researcher"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Return the matching role, or None for unset/unknown values."""
        text = str(value or "").strip().lower()
        for role in cls:
            if role.value == text:
                return role
        return None


@dataclass(frozen=True)
class Principal:
    """The resolved caller for one request: persisted user fields plus typed role."""

    user_id: int
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: Optional[Role] = None

    @property
    def is_researcher(self) -> bool:
        return self.role is Role.RESEARCHER

    def public(self) -> Dict[str, Any]:
        return {"id": self.user_id, "name": self.name, "email": self.email, "image": self.image}
