# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from agency_taskbot.config import Settings
from agency_taskbot.core.state import AppState
from agency_taskbot.tasks.nicknames import NicknameDirectory
from agency_taskbot.tasks.task_lifecycle import TaskLifecycleController
from agency_taskbot.tasks.task_models import ChatUser
from agency_taskbot.tasks.task_registry import TaskRegistry

from .fakes import FakeTransport

T0 = 1_760_000_000.0
HOUR = 3600.0


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings built directly, not from the environment, to keep unit tests isolated.
    """
    return Settings(
        app_name="taskbot-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        bot_token="123:test",
        port=3000,
        reminder_interval_seconds=3600,
        remind_after_seconds=24 * 3600,
    )


@pytest.fixture()
def registry() -> TaskRegistry:
    return TaskRegistry()


@pytest.fixture()
def nicknames() -> NicknameDirectory:
    return NicknameDirectory()


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def controller(
    registry: TaskRegistry, nicknames: NicknameDirectory, transport: FakeTransport
) -> TaskLifecycleController:
    return TaskLifecycleController(registry, nicknames, transport)


@pytest.fixture()
def state(settings: Settings, registry: TaskRegistry, nicknames: NicknameDirectory) -> AppState:
    return AppState(settings=settings, task_registry=registry, nicknames=nicknames)


@pytest.fixture()
def alice() -> ChatUser:
    return ChatUser(user_id="1", username="alice", first_name="Alice")


@pytest.fixture()
def bob() -> ChatUser:
    return ChatUser(user_id="2", username="bob", first_name="Bob")
