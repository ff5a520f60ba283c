"""
User administration domain service.

Paged listing, lookup, enable, disable and delete of users by public_id.
Callers are expected to have been authorized as administrators.
"""

import logging
from dataclasses import dataclass

from .exceptions import NotFoundError, ValidationError
from .ports import UserDirectory
from .user import User

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class UserPage:
    """One page of users plus the total count."""

    items: list[User]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0


@dataclass
class UserAdminService:
    """Domain service for administrator user management."""

    directory: UserDirectory

    def list_users(self, page: int = 0, size: int = 20) -> UserPage:
        """
        Return one page of users, ordered by creation time.

        Args:
            page: Zero-based page number
            size: Page size (1-100)

        Raises:
            ValidationError: page or size out of range
        """
        if page < 0:
            raise ValidationError("Page must not be negative")
        if not 1 <= size <= MAX_PAGE_SIZE:
            raise ValidationError(f"Size must be between 1 and {MAX_PAGE_SIZE}")

        items = self.directory.list_users(limit=size, offset=page * size)
        return UserPage(items=items, page=page, size=size, total=self.directory.count_users())

    def get_user(self, public_id: str) -> User:
        """
        Raises:
            NotFoundError: no user with public_id
        """
        user = self.directory.find_by_public_id(public_id)
        if user is None:
            raise NotFoundError(public_id)
        return user

    def enable_user(self, public_id: str) -> User | None:
        """Enable the user. Returns None if there is no such user."""
        return self._set_enabled(public_id, True)

    def disable_user(self, public_id: str) -> User | None:
        """Disable the user. Returns None if there is no such user."""
        return self._set_enabled(public_id, False)

    def delete_user(self, public_id: str) -> bool:
        deleted = self.directory.delete(public_id)
        if deleted:
            logger.info("Deleted user %s", public_id)
        return deleted

    def _set_enabled(self, public_id: str, enabled: bool) -> User | None:
        user = self.directory.find_by_public_id(public_id)
        if user is None:
            logger.warning("No user with public id %s", public_id)
            return None

        user.enabled = enabled
        try:
            user = self.directory.update(user)
        except NotFoundError:
            # Deleted between the read and the write
            return None
        logger.info("User %s %s", user.username, "enabled" if enabled else "disabled")
        return user
