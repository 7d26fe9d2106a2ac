# src/agency_taskbot/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the in-memory stores into AppState,
- builds the controller and reminder scheduler around a concrete transport.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..core.ports import ChatTransport
from ..core.state import AppState
from ..tasks.nicknames import NicknameDirectory
from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_lifecycle import TaskLifecycleController
from ..tasks.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    return AppState(
        settings=settings,
        task_registry=TaskRegistry(),
        nicknames=NicknameDirectory(),
    )


def build_controller(state: AppState, transport: ChatTransport) -> TaskLifecycleController:
    return TaskLifecycleController(state.task_registry, state.nicknames, transport)


def build_reminder_scheduler(state: AppState, transport: ChatTransport) -> ReminderScheduler:
    return ReminderScheduler(
        state.task_registry,
        transport,
        remind_after_seconds=state.settings.remind_after_seconds,
        interval_seconds=state.settings.reminder_interval_seconds,
    )
