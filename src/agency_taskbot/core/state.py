# src/agency_taskbot/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..tasks.nicknames import NicknameDirectory
from ..tasks.task_registry import TaskRegistry


@dataclass
class AppState:
    """Process-wide state. Everything here is in memory and starts empty on restart."""

    settings: Settings
    task_registry: TaskRegistry
    nicknames: NicknameDirectory
