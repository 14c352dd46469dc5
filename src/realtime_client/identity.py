"""Logical identity a realtime connection is bound to."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """User and organization whose rooms the connection joins."""

    user_id: str
    organization_id: str

    def __post_init__(self) -> None:
        if not self.user_id or not self.organization_id:
            raise ValueError("Identity requires both user_id and organization_id")

    def __str__(self) -> str:
        return f"user={self.user_id} org={self.organization_id}"
