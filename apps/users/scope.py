"""Caller scoping for team-owned records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from shared.domain.errors import AccessDeniedError, NotAuthenticatedError


@dataclass(frozen=True)
class TeamScope:
    """Who is acting and on behalf of which team.

    Built once per request from ``request.user`` and passed to every quote
    and booking operation.
    """

    user_id: Optional[int]
    team_id: Optional[UUID]

    @classmethod
    def for_user(cls, user: Any) -> "TeamScope":
        if user is None or not getattr(user, "is_authenticated", False):
            return cls(user_id=None, team_id=None)
        return cls(user_id=user.pk, team_id=getattr(user, "team_id", None))

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require(self) -> "TeamScope":
        """Return the scope, or raise when there is no user or no team."""
        if self.user_id is None:
            raise NotAuthenticatedError()
        if self.team_id is None:
            raise AccessDeniedError("User not part of a team")
        return self
