# src/agency_taskbot/tasks/nicknames.py

from __future__ import annotations

import logging

from .task_models import ChatUser

logger = logging.getLogger(__name__)


class NicknameDirectory:
    """In-memory display-name overrides (user_id -> name). Last write wins."""

    def __init__(self) -> None:
        self._names: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._names)

    def set(self, user_id: str, nickname: str) -> bool:
        name = (nickname or "").strip()
        if not user_id or not name:
            return False
        self._names[user_id] = name
        logger.info("Nickname set user=%s name=%r", user_id, name)
        return True

    def get(self, user_id: str) -> str | None:
        return self._names.get(user_id)

    def display_name(self, user: ChatUser) -> str:
        return self._names.get(user.user_id) or user.handle
