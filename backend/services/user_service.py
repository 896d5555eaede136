"""Profile read/update for the authenticated user."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from backend.guards import OwnershipGuard
from backend.repositories.users_repository import UsersRepository
from shared.models import ProfileUpdateRequest, UserProfile


@dataclass(slots=True)
class UserService:
    users_repository: UsersRepository
    guard: OwnershipGuard

    def get_profile(self, user_id: UUID, profile_id: UUID | None = None) -> UserProfile:
        record = self.guard.profile(profile_id or user_id, user_id)
        return UserProfile.from_record(record)

    def update_profile(
        self,
        request: ProfileUpdateRequest,
        user_id: UUID,
        profile_id: UUID | None = None,
    ) -> UserProfile:
        """Rename the profile; the name is the only mutable profile field."""

        record = self.guard.profile(profile_id or user_id, user_id)
        updated = self.users_repository.update_user_name(user_id=record.id, name=request.name)
        return UserProfile.from_record(updated)
