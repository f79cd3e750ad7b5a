from __future__ import annotations

import logging
from typing import Any, List, Optional

from taskboard.errors import TaskboardError
from taskboard.schemas import UserSummary

logger = logging.getLogger(__name__)


class UserDirectory:
    """
    List of users for the user management screen. Writes wait for the
    server before touching local state.
    """

    def __init__(self, api: Any) -> None:
        self.api = api
        self.users: List[UserSummary] = []
        self.loading = False
        self.error: Optional[str] = None

    def get(self, user_id: int) -> Optional[UserSummary]:
        return next((u for u in self.users if u.id == user_id), None)

    async def refresh(self) -> None:
        self.loading = True
        try:
            self.users = await self.api.list_users()
            self.error = None
        except TaskboardError as exc:
            self.error = exc.message or "Failed to load users"
            logger.warning("loading users failed: %s", self.error)
        finally:
            self.loading = False

    async def create(self, name: str, email: str, password: str) -> UserSummary:
        user = await self.api.create_user(
            {"name": name.strip(), "email": email.strip(), "password": password}
        )
        self.users = self.users + [user]
        return user

    async def update(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        dto = {"name": name, "email": email, "password": password}
        await self.api.update_user(user_id, {k: v for k, v in dto.items() if v is not None})
        # The server answers with no content, so reload to pick up the change.
        await self.refresh()

    async def remove(self, user_id: int) -> None:
        await self.api.delete_user(user_id)
        self.users = [u for u in self.users if u.id != user_id]
