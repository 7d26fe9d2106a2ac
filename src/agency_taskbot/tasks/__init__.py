"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, TaskStatus, StatusAction, RenderRequest)
- task_registry.py: in-memory registry keyed by status-message id
- nicknames.py: display-name overrides
- task_format.py: message bodies (Telegram Markdown)
- task_lifecycle.py: submit / status-action controller
- reminder_scheduler.py: hourly sweep that reminds assignees of stale tasks
"""
