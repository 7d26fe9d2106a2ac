# tests/test_task_lifecycle.py

from __future__ import annotations

import pytest

from agency_taskbot.tasks.task_lifecycle import TaskLifecycleController, parse_task_text
from agency_taskbot.tasks.task_models import ChatUser, RenderKind, StatusAction, TaskStatus
from agency_taskbot.tasks.task_registry import TaskRegistry

from .conftest import T0
from .fakes import FakeTransport

CHAT = "-100"
EXAMPLE = "Editing | ABC Corp | 2025-10-05 | @john"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "hello there",
        "a | b",
        "a | b | c",
        "a | b | c | d | e",
        "a|b|c|d|",
    ],
)
def test_parse_rejects_wrong_segment_count(text: str) -> None:
    assert parse_task_text(text) is None


def test_parse_trims_and_accepts_any_content() -> None:
    parsed = parse_task_text("  Editing|  ABC Corp |not a date|john  ")
    assert parsed is not None
    assert (parsed.task_type, parsed.client, parsed.deadline, parsed.assignee) == (
        "Editing",
        "ABC Corp",
        "not a date",
        "john",
    )
    assert parse_task_text(" | | | ") is not None


def test_prepare_submission(controller: TaskLifecycleController, alice: ChatUser) -> None:
    req = controller.prepare_submission(CHAT, f"{CHAT}:5", EXAMPLE, alice)
    assert req is not None
    assert req.kind is RenderKind.SEND
    assert req.delete_message_id == f"{CHAT}:5"
    assert req.actions == (StatusAction.COMPLETE, StatusAction.CANCEL)
    assert "NEW TASK" in req.text
    assert "⏳ Pending" in req.text

    positions = [req.text.index(s) for s in ("Editing", "ABC Corp", "2025-10-05", "@john")]
    assert positions == sorted(positions)

    assert controller.prepare_submission(CHAT, f"{CHAT}:6", "just chatting", alice) is None


@pytest.mark.asyncio
async def test_submit_task_end_to_end(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    alice: ChatUser,
    bob: ChatUser,
) -> None:
    record = await controller.submit_task(CHAT, f"{CHAT}:5", EXAMPLE, alice, now=T0)
    assert record is not None

    assert transport.deleted == [f"{CHAT}:5"]
    assert len(transport.sent) == 1
    sent = transport.sent[0]
    assert sent.conversation_id == CHAT
    assert sent.actions == (StatusAction.COMPLETE, StatusAction.CANCEL)

    stored = registry.get(sent.message_id)
    assert stored is not None
    assert stored.task_type == "Editing"
    assert stored.client == "ABC Corp"
    assert stored.deadline == "2025-10-05"
    assert stored.assignee == "@john"
    assert stored.assigned_by == "@alice"
    assert stored.status is TaskStatus.PENDING
    assert stored.reminder_sent is False
    assert stored.created_at == T0

    outcome = await controller.handle_status_action(StatusAction.COMPLETE, sent.message_id, bob)
    assert outcome.found and outcome.changed
    assert registry.get(sent.message_id).status is TaskStatus.COMPLETED  # type: ignore[union-attr]

    assert len(transport.edited) == 1
    edited = transport.edited[0]
    assert edited.message_id == sent.message_id
    assert "TASK COMPLETED" in edited.text
    assert "✅ Completed" in edited.text
    assert "_Updated by_ @bob" in edited.text
    assert "ABC Corp" in edited.text
    assert edited.actions == ()


@pytest.mark.asyncio
async def test_non_task_text_is_ignored(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    alice: ChatUser,
) -> None:
    for text in ("hi", "a | b | c", "a | b | c | d | e"):
        assert await controller.submit_task(CHAT, f"{CHAT}:9", text, alice, now=T0) is None
    assert transport.sent == []
    assert transport.deleted == []
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_delete_failure_still_posts_task(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    alice: ChatUser,
) -> None:
    transport.fail_delete = True
    record = await controller.submit_task(CHAT, f"{CHAT}:5", EXAMPLE, alice, now=T0)
    assert record is not None
    assert len(transport.sent) == 1
    assert registry.get(record.id) is not None


@pytest.mark.asyncio
async def test_send_failure_registers_nothing(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    alice: ChatUser,
) -> None:
    transport.fail_send = True
    assert await controller.submit_task(CHAT, f"{CHAT}:5", EXAMPLE, alice, now=T0) is None
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_nickname_is_snapshotted_at_creation(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    alice: ChatUser,
) -> None:
    controller.set_nickname(alice.user_id, "Alice from Sales")
    record = await controller.submit_task(CHAT, None, EXAMPLE, alice, now=T0)
    assert record is not None
    assert record.assigned_by == "Alice from Sales"

    controller.set_nickname(alice.user_id, "Someone else")
    assert registry.get(record.id).assigned_by == "Alice from Sales"  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_unknown_task_is_not_found(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    bob: ChatUser,
) -> None:
    outcome = await controller.handle_status_action(StatusAction.CANCEL, f"{CHAT}:404", bob)
    assert outcome.found is False
    assert outcome.ack_text == "Task not found"
    assert transport.edited == []
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_repeated_and_conflicting_actions_keep_terminal_status(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    alice: ChatUser,
    bob: ChatUser,
) -> None:
    record = await controller.submit_task(CHAT, None, EXAMPLE, alice, now=T0)
    assert record is not None

    await controller.handle_status_action(StatusAction.COMPLETE, record.id, bob)
    repeat = await controller.handle_status_action(StatusAction.COMPLETE, record.id, bob)
    conflict = await controller.handle_status_action(StatusAction.CANCEL, record.id, alice)

    assert repeat.found and not repeat.changed
    assert conflict.found and not conflict.changed
    assert conflict.ack_text == "Task is already completed"
    assert registry.get(record.id).status is TaskStatus.COMPLETED  # type: ignore[union-attr]
    assert len(transport.edited) == 1


@pytest.mark.asyncio
async def test_edit_failure_still_transitions(
    controller: TaskLifecycleController,
    registry: TaskRegistry,
    transport: FakeTransport,
    alice: ChatUser,
    bob: ChatUser,
) -> None:
    record = await controller.submit_task(CHAT, None, EXAMPLE, alice, now=T0)
    assert record is not None

    transport.fail_edit = True
    outcome = await controller.handle_status_action(StatusAction.CANCEL, record.id, bob)
    assert outcome.changed
    assert registry.get(record.id).status is TaskStatus.CANCELLED  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_update_footer_uses_actor_nickname(
    controller: TaskLifecycleController,
    transport: FakeTransport,
    alice: ChatUser,
    bob: ChatUser,
) -> None:
    record = await controller.submit_task(CHAT, None, EXAMPLE, alice, now=T0)
    assert record is not None
    controller.set_nickname(bob.user_id, "Bobby")

    await controller.handle_status_action(StatusAction.CANCEL, record.id, bob)
    edited = transport.edited[-1]
    assert "TASK CANCELLED" in edited.text
    assert "❌ Cancelled" in edited.text
    assert "_Updated by_ Bobby" in edited.text
    assert "*Assigned by:* @alice" in edited.text


@pytest.mark.asyncio
async def test_underscore_actor_is_escaped_outside_footer_italic(
    controller: TaskLifecycleController, transport: FakeTransport, alice: ChatUser
) -> None:
    record = await controller.submit_task(CHAT, None, EXAMPLE, alice, now=T0)
    assert record is not None
    john = ChatUser(user_id="7", username="john_doe", first_name="John")

    await controller.handle_status_action(StatusAction.COMPLETE, record.id, john)

    footer = transport.edited[-1].text.splitlines()[-1]
    assert footer == "_Updated by_ @john\\_doe"
