"""Caller identity for Crucible of Fate.

There is no ambient "current user". Every operation receives the Actor
performing it, and role-restricted operations check `actor.role` first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from crucible.domain.errors.authority import AuthorityError


class Role(Enum):
    """Role of the process making a call."""

    AUTHORITATIVE = "authoritative"
    """The single process allowed to mutate pool state (the arbiter)."""

    PARTICIPANT = "participant"
    """Any other process; proposes changes and reads broadcasts."""


@dataclass(frozen=True)
class Actor:
    """The identity on whose behalf an operation runs.

    Attributes:
        participant_id: Identity from the host session's identity layer.
        role: Authoritative or participant.
    """

    participant_id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.participant_id or not self.participant_id.strip():
            raise ValueError("participant_id must be non-empty")

    @property
    def is_authoritative(self) -> bool:
        return self.role is Role.AUTHORITATIVE

    @classmethod
    def authority(cls, participant_id: str) -> Actor:
        return cls(participant_id=participant_id, role=Role.AUTHORITATIVE)

    @classmethod
    def participant(cls, participant_id: str) -> Actor:
        return cls(participant_id=participant_id, role=Role.PARTICIPANT)


def require_authoritative(actor: Actor, operation: str) -> None:
    """Raise AuthorityError unless `actor` is the authoritative role."""
    if not actor.is_authoritative:
        raise AuthorityError.authoritative_only(operation, actor.participant_id)


def require_participant(actor: Actor, operation: str) -> None:
    """Raise AuthorityError if `actor` is the authoritative role."""
    if actor.is_authoritative:
        raise AuthorityError.participant_only(operation, actor.participant_id)
