"""
Profile registry.

Profiles are named configuration templates. They are created once and never
updated or deleted here, which is what lets the task store trust a profile
lookup for the lifetime of a transaction.

Examples:
    >>> registry = ProfileRegistry(adapter)
    >>> registry.create_profile("ci", "nightly", "{}")
    1
    >>> registry.list_profiles(by_base="ci")
    [1]
    >>> registry.fetch_profile(ProfileId(1)).name
    'nightly'

Tags:
    profiles, registry, repository, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any

from coordinator.core.errors import DuplicateNameError, ProfileNotFoundError, UniqueViolationError
from coordinator.core.logging import get_logger
from coordinator.core.repository import BaseRepository
from coordinator.core.schema import TABLES
from coordinator.core.types import Profile, ProfileId

logger = get_logger(__name__)

_TABLE = TABLES["profiles"]


class ProfileRegistry(BaseRepository):
    """Create, enumerate and look up profiles."""

    def create_profile(self, base: str, name: str, json: str) -> ProfileId:
        """
        Insert a profile and return its new id.

        Raises:
            DuplicateNameError: a profile called *name* already exists.
        """
        try:
            with self.adapter.transaction() as conn:
                new_id = self.adapter.insert_returning_id(
                    conn, _TABLE, ("base", "name", "json"), (base, name, json)
                )
        except UniqueViolationError as e:
            logger.info("profile_name_conflict", name=name)
            raise DuplicateNameError(name, cause=e) from e

        profile_id = ProfileId(new_id)
        logger.info("profile_created", profile_id=profile_id, base=base, name=name)
        return profile_id

    def list_profiles(self, by_base: str | None = None) -> list[ProfileId]:
        """All profile ids, or those whose ``base`` equals *by_base*, ascending."""
        if by_base is None:
            rows = self.adapter.query(f"SELECT id FROM {_TABLE} ORDER BY id")
        else:
            rows = self.adapter.query(
                f"SELECT id FROM {_TABLE} WHERE base = {self.ph(1)} ORDER BY id",
                (by_base,),
            )
        return [ProfileId(int(row["id"])) for row in rows]

    def fetch_profile(self, profile_id: ProfileId) -> Profile:
        """
        Look up one profile.

        Raises:
            ProfileNotFoundError: no profile has this id.
        """
        with self.adapter.connection() as conn:
            return self.fetch_profile_with(conn, profile_id)

    def fetch_profile_with(self, conn: Any, profile_id: ProfileId) -> Profile:
        """:meth:`fetch_profile` on a connection the caller already holds."""
        row = self.adapter.fetch_one(
            conn,
            f"SELECT id, base, name, json FROM {_TABLE} WHERE id = {self.ph(1)}",
            (int(profile_id),),
        )
        if row is None:
            raise ProfileNotFoundError(profile_id)
        return Profile.from_row(row)


__all__ = [
    "ProfileRegistry",
]
